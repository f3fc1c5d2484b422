"""
Test configuration and fixtures for the URL shortener.

Every test gets its own store driven by a controllable clock, so expiry
scenarios run instantly, and an audit logger that never leaves the process.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from shortener.core.rate_limit import limiter
from shortener.main import create_app
from shortener.services.audit_logger import AuditLogger
from shortener.services.shortcode_allocator import ShortcodeAllocator
from shortener.store.memory import InMemoryMappingStore


class FakeClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: datetime = None):
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit():
    return AuditLogger(endpoint="http://logs.test/evaluation-service/logs", token=None, enabled=False)


@pytest.fixture
def store(clock, audit):
    return InMemoryMappingStore(clock=clock, audit=audit)


@pytest.fixture
def allocator(store):
    return ShortcodeAllocator(store)


@pytest.fixture(autouse=True)
def disable_rate_limits():
    previous = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = previous


@pytest.fixture
def client(store, audit):
    """
    Test client bound to the per-test store.
    """
    app = create_app(store=store, audit=audit)
    with TestClient(app) as test_client:
        yield test_client
