"""Shared test fixtures."""

import pytest

from slurp.core.session.storage import MemorySessionStore
from slurp.tracker import EventTracker
from tests.unit.fakes import FakeClock, FakeTransport


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def tracker(
    transport: FakeTransport, store: MemorySessionStore, clock: FakeClock
) -> EventTracker:
    """Tracker with one navigation step already recorded."""
    t = EventTracker(transport, store, clock=clock, client_version="1.2.3")
    t.record_navigation("", "exploreMain.search", {"lang": "no_NO"})
    clock.advance(0.5)
    return t
