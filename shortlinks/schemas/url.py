"""Response schemas for URL Shortener Service.

JSON bodies use camelCase keys; attributes stay snake_case in Python.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortURLCreateResponse(CamelModel):
    """Response model for created short URL."""

    short_link: str
    expiry: datetime


class AccessHistoryEntry(CamelModel):
    """One entry of a short URL's access history."""

    timestamp: datetime
    client_agent: Optional[str] = None
    client_address: Optional[str] = None
    location: str


class ShortURLStatsResponse(CamelModel):
    """Response model for short URL statistics."""

    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    access_count: int
    access_history: list[AccessHistoryEntry]


class HealthResponse(CamelModel):
    """Response model for health check."""

    status: str
    timestamp: datetime
    total_urls: int
