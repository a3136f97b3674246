"""Tests for session lifecycle and duplicate suppression."""

import json
import threading

import pytest

from slurp.core.session.manager import SessionManager, fingerprint
from slurp.core.session.storage import MemorySessionStore
from slurp.models.event import Session

T0 = 1_700_000_000


def test_first_event_creates_session() -> None:
    store = MemorySessionStore()
    manager = SessionManager(store)

    before = manager.accept("search", {"q": 1}, T0)

    assert before is not None
    assert before.created_at == T0
    assert before.last_action is None
    assert before.action_count == 1
    stored = manager.current()
    assert stored is not None
    assert stored.id == before.id
    assert stored.action_count == 2
    assert stored.last_action == "search"
    assert stored.last_payload_hash == fingerprint({"q": 1})


def test_identical_consecutive_event_is_suppressed() -> None:
    manager = SessionManager(MemorySessionStore())
    manager.accept("search", {"q": 1}, T0)

    assert manager.accept("search", {"q": 1}, T0 + 5) is None
    stored = manager.current()
    assert stored is not None
    assert stored.action_count == 2
    assert stored.last_active_at == T0


def test_same_data_with_other_action_is_accepted() -> None:
    manager = SessionManager(MemorySessionStore())
    manager.accept("pin_record", {"id": "a"}, T0)

    before = manager.accept("unpin_record", {"id": "a"}, T0 + 1)

    assert before is not None
    assert before.last_action == "pin_record"
    assert before.action_count == 2


def test_session_expires_after_timeout() -> None:
    manager = SessionManager(MemorySessionStore(), timeout=1800)
    first = manager.accept("search", {"q": 1}, T0)
    assert first is not None

    second = manager.accept("search", {"q": 1}, T0 + 1801)

    assert second is not None
    assert second.id != first.id
    assert second.action_count == 1
    assert second.created_at == T0 + 1801


def test_session_kept_at_exact_timeout() -> None:
    manager = SessionManager(MemorySessionStore(), timeout=1800)
    first = manager.accept("search", {"q": 1}, T0)
    assert first is not None

    second = manager.accept("view_record", {"id": "x"}, T0 + 1800)

    assert second is not None
    assert second.id == first.id


def test_unreadable_record_starts_new_session() -> None:
    store = MemorySessionStore()
    store.set_item("slurpSession", "{not json")
    manager = SessionManager(store)

    before = manager.accept("search", {}, T0)

    assert before is not None
    assert before.action_count == 1


def test_stores_are_isolated() -> None:
    tab_a = SessionManager(MemorySessionStore())
    tab_b = SessionManager(MemorySessionStore())

    a = tab_a.accept("search", {"q": 1}, T0)
    b = tab_b.accept("search", {"q": 1}, T0)

    assert a is not None and b is not None
    assert a.id != b.id


def test_session_is_stored_as_json_under_fixed_key() -> None:
    store = MemorySessionStore()
    SessionManager(store).accept("search", {}, T0)

    raw = json.loads(store.get_item("slurpSession") or "")

    assert raw["action_count"] == 2
    assert raw["last_action"] == "search"


def test_reconcile_adopts_server_values() -> None:
    manager = SessionManager(MemorySessionStore())
    before = manager.accept("search", {}, T0)
    assert before is not None

    updated = manager.reconcile(before.id, {"session_id": "srv-1", "action_no": 7})

    assert updated is not None
    assert updated.id == "srv-1"
    assert updated.action_count == 8
    assert manager.current() == updated


def test_reconcile_never_lowers_action_count() -> None:
    manager = SessionManager(MemorySessionStore())
    before = manager.accept("search", {}, T0)
    manager.accept("view_record", {}, T0 + 1)
    assert before is not None

    updated = manager.reconcile(before.id, {"action_no": 1})

    assert updated is None
    stored = manager.current()
    assert stored is not None
    assert stored.action_count == 3


def test_reconcile_ignores_reply_for_other_session() -> None:
    manager = SessionManager(MemorySessionStore())
    manager.accept("search", {}, T0)

    assert manager.reconcile("old-session", {"session_id": "srv-1"}) is None
    assert manager.reconcile("old-session", None) is None


def test_session_json_roundtrip_rejects_garbage() -> None:
    session = Session(id="abc", created_at=1, last_active_at=2)

    assert Session.from_json(session.to_json()) == session
    with pytest.raises(ValueError, match="Malformed session record"):
        Session.from_json('{"id": "abc"}')


def test_concurrent_accepts_do_not_lose_updates() -> None:
    manager = SessionManager(MemorySessionStore())
    first = manager.accept("search", {"i": -1}, T0)
    assert first is not None
    start = threading.Barrier(50)

    def worker(i: int) -> None:
        start.wait()
        for j in range(4):
            manager.accept("search", {"i": i, "j": j}, T0)
            if j == 2:
                manager.reconcile(first.id, {"action_no": 0})

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = manager.current()
    assert stored is not None
    assert stored.id == first.id
    # One initial event plus 50 * 4 distinct events, starting from 1.
    assert stored.action_count == 1 + 1 + 50 * 4
