"""Pydantic models for URL Shortener Service."""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, model_validator


class ShortURLCreate(BaseModel):
    """Model for creating a short URL.

    Fields are untyped here; the link service validates them and reports
    bad values as ``invalid_input``.
    """

    url: Any = Field(None, description="The original long URL to shorten")
    validity: Any = Field(30, description="Minutes the short link stays valid; null is rejected")
    shortcode: Any = Field(None, description="Custom short code")


class LinkRecord(BaseModel):
    """A registered short link."""

    shortcode: str
    original_url: str
    created_at: datetime
    expires_at: datetime
    access_count: int = 0

    @model_validator(mode="after")
    def check_expiry_after_creation(self) -> "LinkRecord":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")
        return self


class AccessRecord(BaseModel):
    """A single successful redirect."""

    timestamp: datetime
    client_agent: Optional[str] = None
    client_address: Optional[str] = None
    location: str


class ErrorResponse(BaseModel):
    """Model for error responses."""

    detail: str
    error_code: Optional[str] = None
