"""Shared fixtures for URL Shortener Service tests."""

import json
import sys
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shortlinks.core.config import Settings
from shortlinks.core.log_shipper import LogShipper
from shortlinks.core.registry import LinkRegistry
from shortlinks.main import create_app
from shortlinks.models.url import LinkRecord
from shortlinks.services.links import LinkService
from shortlinks.utils.shortener import utc_now

COLLECTOR_URL = "http://collector.test"


class FakeCollector:
    """Log collector that rejects the first ``failures`` requests."""

    def __init__(self, failures: int = 0, status_code: int = 503, error: bool = False):
        self.failures = failures
        self.status_code = status_code
        self.error = error
        self.requests: list[dict] = []
        self.urls: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        self.urls.append(str(request.url))
        if len(self.requests) <= self.failures:
            if self.error:
                raise httpx.ConnectError("collector unreachable", request=request)
            return httpx.Response(self.status_code)
        return httpx.Response(200, json={"status": "ok"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeSleep:
    """Records backoff delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_record(code: str, url: str = "https://example.com", expired: bool = False) -> LinkRecord:
    """Build a link record, optionally one whose expiry has already passed."""
    now = utc_now()
    if expired:
        created_at = now - timedelta(hours=2)
        expires_at = now - timedelta(hours=1)
    else:
        created_at = now
        expires_at = now + timedelta(minutes=30)
    return LinkRecord(
        shortcode=code,
        original_url=url,
        created_at=created_at,
        expires_at=expires_at,
    )


@pytest.fixture
def settings():
    """Settings pointing at the fake collector."""
    return Settings(log_collector_url=COLLECTOR_URL, public_base_url=None)


@pytest.fixture
def registry():
    """Create a fresh, empty registry."""
    return LinkRegistry()


@pytest.fixture
def collector():
    return FakeCollector()


@pytest.fixture
def sleeper():
    return FakeSleep()


@pytest.fixture
def shipper(collector, sleeper):
    """Log shipper wired to the fake collector."""
    return LogShipper(COLLECTOR_URL, transport=collector.transport, sleep=sleeper)


@pytest.fixture
def mock_shipper():
    """Create a mock log shipper."""
    return MagicMock(spec=LogShipper)


@pytest.fixture
def service(registry, mock_shipper, settings):
    """Link service with a mocked log shipper."""
    return LinkService(registry, mock_shipper, settings)


@pytest.fixture
def app(settings, registry, shipper):
    """Create an app with its own registry and fake collector."""
    return create_app(settings=settings, registry=registry, log_shipper=shipper)


@pytest.fixture
def client(app):
    """Create a test client; the lifespan drains shipped events on exit."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
