"""Error taxonomy for the URL Shortener Service.

Every error carries the HTTP status and error code it is rendered with, so
route handlers only need to raise; ``main.py`` turns them into responses.
"""


class ShortLinkError(Exception):
    """Base class for all service errors."""

    status_code: int = 500
    error_code: str = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ShortLinkError):
    """Malformed URL, non-positive validity or malformed custom code."""

    status_code = 400
    error_code = "invalid_input"


class ConflictError(ShortLinkError):
    """Short code is already registered."""

    status_code = 409
    error_code = "conflict"


class NotFoundError(ShortLinkError):
    """Short code is unknown."""

    status_code = 404
    error_code = "not_found"


class GoneError(ShortLinkError):
    """Short code is known but past its expiry."""

    status_code = 410
    error_code = "gone"


class InternalError(ShortLinkError):
    """Unexpected failure inside the service."""

    status_code = 500
    error_code = "internal"
