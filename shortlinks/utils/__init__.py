"""Utils package for URL Shortener Service."""

from .shortener import (
    generate_short_code,
    validate_short_code,
    is_valid_url,
    is_valid_validity,
    pick_location,
    create_short_url,
    utc_now,
)

__all__ = [
    "generate_short_code",
    "validate_short_code",
    "is_valid_url",
    "is_valid_validity",
    "pick_location",
    "create_short_url",
    "utc_now",
]
