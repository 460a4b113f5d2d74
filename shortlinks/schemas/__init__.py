"""Schemas package for URL Shortener Service."""

from .url import (
    ShortURLCreateResponse,
    AccessHistoryEntry,
    ShortURLStatsResponse,
    HealthResponse,
)

__all__ = [
    "ShortURLCreateResponse",
    "AccessHistoryEntry",
    "ShortURLStatsResponse",
    "HealthResponse",
]
