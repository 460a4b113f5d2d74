"""URL shortening utilities module.

This module handles the generation and validation of short codes, plus the
small input checks and placeholder lookups the link service relies on.
"""

import math
import random
import re
import string
from datetime import datetime, timezone
from typing import Any, Optional
import logging

from nanoid import generate
from pydantic import AnyUrl, TypeAdapter, ValidationError

from ..core.config import settings

logger = logging.getLogger(__name__)


# Characters allowed in short codes
ALPHABET = string.ascii_letters + string.digits

SHORT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]{3,10}$")

# Placeholder labels; no real geolocation is performed
LOCATIONS = ("India", "USA", "Germany", "Brazil", "Canada")

_url_adapter = TypeAdapter(AnyUrl)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_short_code(length: Optional[int] = None) -> str:
    """Generate a random short code.

    Args:
        length: Length of the generated code. Defaults to settings value.

    Returns:
        Random alphanumeric short code string.
    """
    length = length or settings.default_short_code_length
    return generate(ALPHABET, length)


def validate_short_code(code: Any) -> bool:
    """Validate short code format.

    Only the format is checked, not whether the code is already taken.

    Args:
        code: Short code to validate.

    Returns:
        True if valid, False otherwise.
    """
    if not isinstance(code, str):
        return False
    return SHORT_CODE_PATTERN.fullmatch(code) is not None


def is_valid_url(url: Any) -> bool:
    """Check that ``url`` is a syntactically valid absolute URL."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        _url_adapter.validate_python(url)
    except ValidationError:
        return False
    return True


def is_valid_validity(value: Any) -> bool:
    """Check that ``value`` is a positive, finite number of minutes."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def pick_location() -> str:
    """Pick a coarse placeholder location for an access record."""
    return random.choice(LOCATIONS)


def create_short_url(base_url: str, short_code: str) -> str:
    """Create full short URL from base URL and short code.

    Args:
        base_url: Base URL of the service.
        short_code: Short code.

    Returns:
        Full short URL string.
    """
    return f"{base_url.rstrip('/')}/{short_code}"
