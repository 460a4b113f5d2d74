"""In-memory link registry for URL Shortener Service.

The registry is the single source of truth for short code -> link record and
for each code's ordered access history. It is explicitly constructed and owned
by the application (see ``main.create_app``) and provided to endpoints through
dependency injection.
"""

import threading
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request

from .exceptions import ConflictError, NotFoundError
from ..models.url import AccessRecord, LinkRecord

logger = logging.getLogger(__name__)


class LinkRegistry:
    """Thread-safe registry of short links and their access history.

    All state lives in process memory. Expired records are never purged;
    expiry is checked on read with :meth:`is_expired`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._links: dict[str, LinkRecord] = {}
        self._accesses: dict[str, list[AccessRecord]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def insert(self, code: str, record: LinkRecord) -> None:
        """Register a new link record.

        Args:
            code: The short code to register under.
            record: The link record.

        Raises:
            ConflictError: If the code is already registered, expired or not.
        """
        with self._lock:
            if code in self._links:
                raise ConflictError(f"Shortcode '{code}' already exists")
            self._links[code] = record.model_copy()
            self._accesses[code] = []
        logger.debug(f"Registered short code: {code}")

    def exists(self, code: str) -> bool:
        """Check if a short code is registered."""
        with self._lock:
            return code in self._links

    def get(self, code: str) -> LinkRecord:
        """Get a snapshot of the link record for a short code.

        Raises:
            NotFoundError: If the code is not registered.
        """
        with self._lock:
            record = self._links.get(code)
            if record is None:
                raise NotFoundError("Shortcode not found")
            return record.model_copy()

    def record_access(self, code: str, access: AccessRecord) -> LinkRecord:
        """Append an access record and bump the access count.

        Both happen under the same lock, so concurrent redirects on one code
        never lose an increment and the history order matches the count.

        Returns:
            Snapshot of the updated link record.

        Raises:
            NotFoundError: If the code is not registered.
        """
        with self._lock:
            record = self._links.get(code)
            if record is None:
                raise NotFoundError("Shortcode not found")
            self._accesses[code].append(access)
            record.access_count += 1
            return record.model_copy()

    def recent_accesses(self, code: str, limit: int = 10) -> list[AccessRecord]:
        """Get the most recent access records, oldest first.

        Raises:
            NotFoundError: If the code is not registered.
        """
        with self._lock:
            accesses = self._accesses.get(code)
            if accesses is None:
                raise NotFoundError("Shortcode not found")
            if limit <= 0:
                return []
            return list(accesses[-limit:])

    @staticmethod
    def is_expired(record: LinkRecord, now: Optional[datetime] = None) -> bool:
        """Check whether a record is past its expiry."""
        now = now or datetime.now(timezone.utc)
        return now > record.expires_at


def get_registry(request: Request) -> LinkRegistry:
    """Get the application's registry for dependency injection.

    Returns:
        LinkRegistry instance owned by the app.
    """
    return request.app.state.registry
