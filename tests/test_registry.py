"""Tests for the in-memory link registry."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from shortlinks.core.exceptions import ConflictError, NotFoundError
from shortlinks.core.registry import LinkRegistry
from shortlinks.models.url import AccessRecord, LinkRecord
from shortlinks.utils.shortener import utc_now

from conftest import make_record


def make_access(agent: str = "agent", address: str = "127.0.0.1") -> AccessRecord:
    return AccessRecord(
        timestamp=utc_now(),
        client_agent=agent,
        client_address=address,
        location="India",
    )


class TestLinkRecord:
    def test_expiry_must_follow_creation(self):
        now = utc_now()
        with pytest.raises(ValueError):
            LinkRecord(
                shortcode="abc123",
                original_url="https://example.com",
                created_at=now,
                expires_at=now,
            )


class TestRegistryOperations:
    """Tests for single-threaded registry behaviour."""

    def test_insert_and_get(self, registry):
        registry.insert("abc123", make_record("abc123"))

        record = registry.get("abc123")
        assert record.shortcode == "abc123"
        assert record.original_url == "https://example.com"
        assert record.access_count == 0
        assert registry.exists("abc123") is True
        assert len(registry) == 1

    def test_insert_initializes_empty_history(self, registry):
        registry.insert("abc123", make_record("abc123"))
        assert registry.recent_accesses("abc123") == []

    def test_insert_duplicate_conflicts(self, registry):
        registry.insert("dup", make_record("dup", "https://first.com"))

        with pytest.raises(ConflictError):
            registry.insert("dup", make_record("dup", "https://second.com"))

        assert registry.get("dup").original_url == "https://first.com"
        assert len(registry) == 1

    def test_insert_does_not_overwrite_expired(self, registry):
        registry.insert("old", make_record("old", expired=True))

        with pytest.raises(ConflictError):
            registry.insert("old", make_record("old", "https://new.com"))

    def test_get_unknown_code(self, registry):
        assert registry.exists("missing") is False
        with pytest.raises(NotFoundError):
            registry.get("missing")

    def test_get_returns_snapshot(self, registry):
        registry.insert("snap", make_record("snap"))

        snapshot = registry.get("snap")
        snapshot.access_count = 99

        assert registry.get("snap").access_count == 0

    def test_record_access_increments_and_appends(self, registry):
        registry.insert("abc123", make_record("abc123"))

        updated = registry.record_access("abc123", make_access("first"))
        assert updated.access_count == 1
        registry.record_access("abc123", make_access("second"))

        assert registry.get("abc123").access_count == 2
        agents = [a.client_agent for a in registry.recent_accesses("abc123")]
        assert agents == ["first", "second"]

    def test_record_access_unknown_code(self, registry):
        with pytest.raises(NotFoundError):
            registry.record_access("missing", make_access())
        assert len(registry) == 0

    def test_recent_accesses_is_trailing_window(self, registry):
        registry.insert("win", make_record("win"))
        for i in range(15):
            registry.record_access("win", make_access(f"agent-{i}"))

        recent = registry.recent_accesses("win", limit=10)
        assert [a.client_agent for a in recent] == [f"agent-{i}" for i in range(5, 15)]
        assert registry.get("win").access_count == 15

    def test_recent_accesses_unknown_code(self, registry):
        with pytest.raises(NotFoundError):
            registry.recent_accesses("missing")

    def test_is_expired(self):
        record = make_record("abc")
        assert LinkRegistry.is_expired(record) is False
        assert LinkRegistry.is_expired(record, record.expires_at) is False
        assert LinkRegistry.is_expired(
            record, record.expires_at + timedelta(microseconds=1)
        ) is True
        assert LinkRegistry.is_expired(make_record("old", expired=True)) is True

    def test_registries_are_independent(self):
        first, second = LinkRegistry(), LinkRegistry()
        first.insert("abc", make_record("abc"))
        assert second.exists("abc") is False


class TestRegistryConcurrency:
    """Tests for concurrent access to one registry."""

    def test_concurrent_record_access_loses_no_updates(self, registry):
        registry.insert("hot", make_record("hot"))
        n = 200

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(lambda i: registry.record_access("hot", make_access(f"a{i}")), range(n)))

        assert registry.get("hot").access_count == n
        assert len(registry.recent_accesses("hot", limit=n)) == n

    def test_concurrent_insert_same_code_has_one_winner(self, registry):
        def attempt(i):
            try:
                registry.insert("race", make_record("race", f"https://example.com/{i}"))
                return True
            except ConflictError:
                return False

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(attempt, range(50)))

        assert results.count(True) == 1
        assert len(registry) == 1
