"""Services package for URL Shortener Service."""

from .links import LinkService, get_link_service

__all__ = ["LinkService", "get_link_service"]
