"""Core package - configuration, errors, registry and log shipping."""

from .config import Settings, settings, get_settings
from .exceptions import (
    ShortLinkError,
    InvalidInputError,
    ConflictError,
    NotFoundError,
    GoneError,
    InternalError,
)
from .registry import LinkRegistry, get_registry
from .log_shipper import LogShipper, get_log_shipper

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "ShortLinkError",
    "InvalidInputError",
    "ConflictError",
    "NotFoundError",
    "GoneError",
    "InternalError",
    "LinkRegistry",
    "get_registry",
    "LogShipper",
    "get_log_shipper",
]
