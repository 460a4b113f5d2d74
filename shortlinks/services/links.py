"""Link service: create, inspect and redirect short URLs.

Orchestrates the short code generator, the registry and the access history.
Request-level validation happens here, before any registry mutation, so a
failed create never leaves a partial record behind.

Every step also ships an event through the log shipper. Shipping is
fire-and-forget and never changes the outcome of an operation.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from fastapi import Request

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    ConflictError,
    GoneError,
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from ..core.log_shipper import LogShipper
from ..core.registry import LinkRegistry
from ..models.url import AccessRecord, LinkRecord
from ..schemas.url import (
    AccessHistoryEntry,
    ShortURLCreateResponse,
    ShortURLStatsResponse,
)
from ..utils.shortener import (
    create_short_url,
    generate_short_code,
    is_valid_url,
    is_valid_validity,
    pick_location,
    utc_now,
    validate_short_code,
)

logger = logging.getLogger(__name__)

# Marks an omitted validity; an explicit None is rejected as invalid
DEFAULT_VALIDITY: Any = object()


class LinkService:
    """Service layer for short link business logic."""

    def __init__(
        self,
        registry: LinkRegistry,
        log_shipper: LogShipper,
        settings: Optional[Settings] = None,
        location_picker: Callable[[], str] = pick_location,
    ):
        """Initialize link service.

        Args:
            registry: Registry holding link records and access history.
            log_shipper: Shipper for observability events.
            settings: Optional settings, defaults to the global settings.
            location_picker: Returns the placeholder location of an access.
        """
        self.registry = registry
        self.shipper = log_shipper
        self.settings = settings or default_settings
        self.pick_location = location_picker
        self.stack = self.settings.log_stack

    def create(
        self,
        url: Any,
        validity: Any = DEFAULT_VALIDITY,
        custom_code: Any = None,
        base_url: str = "",
    ) -> ShortURLCreateResponse:
        """Create a short URL.

        Args:
            url: The original long URL.
            validity: Minutes the link stays valid. Omit it to use the
                configured default; None is not a valid value.
            custom_code: Optional caller-chosen short code.
            base_url: Scheme and host the short link is built on.

        Returns:
            The short link and its expiry.

        Raises:
            InvalidInputError: Bad URL, validity or custom code format.
            ConflictError: Custom code already registered.
            InternalError: No free code found within the attempt budget.
        """
        if validity is DEFAULT_VALIDITY:
            validity = self.settings.default_validity_minutes

        if not url:
            self.shipper.error(self.stack, "handler", "Missing URL in create request")
            raise InvalidInputError("URL is required")

        if not is_valid_url(url):
            self.shipper.error(self.stack, "handler", f"Invalid URL format: {url}")
            raise InvalidInputError("Invalid URL format")

        if not is_valid_validity(validity):
            self.shipper.error(
                self.stack, "handler", f"Invalid validity minutes: {validity!r}"
            )
            raise InvalidInputError("Validity must be a positive number")

        created_at = utc_now()
        try:
            expires_at = created_at + timedelta(minutes=validity)
        except OverflowError:
            self.shipper.error(
                self.stack, "handler", f"Validity out of range: {validity!r}"
            )
            raise InvalidInputError("Validity is too large")
        if expires_at <= created_at:
            # Sub-microsecond validity rounds to zero
            raise InvalidInputError("Validity must be a positive number")

        if custom_code:
            short_code = self._claim_custom_code(custom_code, url, created_at, expires_at)
        else:
            short_code = self._claim_generated_code(url, created_at, expires_at)

        self.shipper.info(
            self.stack, "service", f"URL shortened successfully: {short_code} -> {url}"
        )
        return ShortURLCreateResponse(
            short_link=create_short_url(base_url, short_code),
            expiry=expires_at,
        )

    def _claim_custom_code(
        self, code: Any, url: str, created_at: datetime, expires_at: datetime
    ) -> str:
        """Register a caller-chosen code.

        Args:
            code: The requested short code, checked for format first.
            url: The original long URL.
            created_at: Creation time of the record.
            expires_at: Expiry time of the record.

        Returns:
            The registered code.

        Raises:
            InvalidInputError: The code does not match the allowed format.
            ConflictError: The code is already registered, expired or not.
        """
        if not validate_short_code(code):
            self.shipper.error(
                self.stack, "handler", f"Invalid custom shortcode format: {code}"
            )
            raise InvalidInputError(
                "Custom shortcode must be 3-10 alphanumeric characters"
            )

        record = LinkRecord(
            shortcode=code,
            original_url=url,
            created_at=created_at,
            expires_at=expires_at,
        )
        try:
            self.registry.insert(code, record)
        except ConflictError:
            self.shipper.error(
                self.stack, "handler", f"Shortcode collision detected: {code}"
            )
            raise ConflictError("Custom shortcode already exists")

        self.shipper.info(self.stack, "handler", f"Using custom shortcode: {code}")
        return code

    def _claim_generated_code(
        self, url: str, created_at: datetime, expires_at: datetime
    ) -> str:
        """Register a freshly generated code, retrying on collisions.

        Args:
            url: The original long URL.
            created_at: Creation time of the record.
            expires_at: Expiry time of the record.

        Returns:
            The registered code.

        Raises:
            InternalError: No free code within ``max_generation_attempts``.
        """
        max_attempts = self.settings.max_generation_attempts
        for _ in range(max_attempts):
            code = generate_short_code(self.settings.default_short_code_length)
            if self.registry.exists(code):
                continue
            record = LinkRecord(
                shortcode=code,
                original_url=url,
                created_at=created_at,
                expires_at=expires_at,
            )
            try:
                self.registry.insert(code, record)
            except ConflictError:
                # Lost a race with a concurrent create
                continue
            self.shipper.info(self.stack, "handler", f"Generated shortcode: {code}")
            return code

        logger.error(f"Shortcode generation exhausted {max_attempts} attempts")
        self.shipper.fatal(
            self.stack,
            "service",
            f"No free shortcode after {max_attempts} attempts",
        )
        raise InternalError("Failed to generate unique shortcode")

    def _get_live_record(self, code: str, package: str) -> LinkRecord:
        try:
            record = self.registry.get(code)
        except NotFoundError:
            self.shipper.warn(self.stack, package, f"Shortcode not found: {code}")
            raise

        if self.registry.is_expired(record, utc_now()):
            self.shipper.warn(self.stack, package, f"Expired shortcode accessed: {code}")
            raise GoneError("Shortened URL has expired")
        return record

    def inspect(self, code: str) -> ShortURLStatsResponse:
        """Get statistics and recent access history for a short code.

        Raises:
            NotFoundError: Unknown code.
            GoneError: Code is past its expiry.
        """
        self.shipper.info(self.stack, "service", f"Stats request for shortcode: {code}")
        record = self._get_live_record(code, "handler")
        history = self.registry.recent_accesses(
            code, self.settings.access_history_limit
        )
        return ShortURLStatsResponse(
            shortcode=record.shortcode,
            original_url=record.original_url,
            created_at=record.created_at,
            expires_at=record.expires_at,
            access_count=record.access_count,
            access_history=[
                AccessHistoryEntry(**access.model_dump()) for access in history
            ],
        )

    def redirect(
        self,
        code: str,
        client_agent: Optional[str] = None,
        client_address: Optional[str] = None,
    ) -> str:
        """Record an access and return the URL to redirect to.

        Raises:
            NotFoundError: Unknown code.
            GoneError: Code is past its expiry.
        """
        self.shipper.info(self.stack, "redirect", f"Redirect request for shortcode: {code}")
        record = self._get_live_record(code, "redirect")

        access = AccessRecord(
            timestamp=utc_now(),
            client_agent=client_agent,
            client_address=client_address,
            location=self.pick_location(),
        )
        self.registry.record_access(code, access)

        self.shipper.info(
            self.stack,
            "redirect",
            f"Successful redirect: {code} -> {record.original_url}",
        )
        return record.original_url


def get_link_service(request: Request) -> LinkService:
    """Get the application's link service for dependency injection."""
    return request.app.state.link_service
