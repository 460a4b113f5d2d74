"""Models package for URL Shortener Service."""

from .url import ShortURLCreate, LinkRecord, AccessRecord, ErrorResponse
from .log import LogLevel, LogEvent

__all__ = [
    "ShortURLCreate",
    "LinkRecord",
    "AccessRecord",
    "ErrorResponse",
    "LogLevel",
    "LogEvent",
]
