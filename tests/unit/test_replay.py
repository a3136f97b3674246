"""Tests for replaying host hook logs."""

import json

from slurp.core.session.storage import MemorySessionStore
from slurp.replay import ReplayClock, replay_events
from slurp.tracker import EventTracker
from tests.unit.fakes import FakeTransport
from tests.unit.samples import SIMPLE_RESULT, SIMPLE_SEARCH, make_record


def _lines(*entries: dict) -> list[str]:
    return [json.dumps(e) for e in entries]


def test_replay_drives_tracker() -> None:
    transport = FakeTransport()
    clock = ReplayClock()
    tracker = EventTracker(transport, MemorySessionStore(), clock=clock)

    stats = replay_events(
        tracker,
        _lines(
            {"hook": "record_navigation", "args": ["", "exploreMain.search"], "time": 100.0},
            {"hook": "search_state", "search": SIMPLE_SEARCH, "result": SIMPLE_RESULT},
            {"hook": "identity", "lang": "nb_NO", "logged_in": True},
            {"hook": "on_keypress"},
            {"hook": "on_search_results_ready", "args": [1], "time": 101.5},
            {"hook": "on_record_viewed", "args": [make_record("rec1")], "time": 103.0},
        ),
        clock,
    )

    assert stats.lines == 6
    assert stats.dispatched == 2
    assert [p["action"] for p in transport.sent] == ["search", "view_record"]
    assert transport.sent[0]["meta"]["loadTime"] == 1500
    assert transport.sent[0]["data"]["keypresses"] == 1
    assert transport.sent[1]["lang"] == "nb_NO"


def test_replay_skips_bad_lines() -> None:
    transport = FakeTransport()
    tracker = EventTracker(transport, MemorySessionStore())

    stats = replay_events(
        tracker,
        [
            "not json",
            "",
            json.dumps({"hook": "drop_tables"}),
            json.dumps({"hook": "on_home_navigated"}),
        ],
    )

    assert stats.lines == 3
    assert stats.skipped == 3
    assert stats.unknown_hooks == ["drop_tables"]
    assert transport.sent == []


def test_replay_skips_non_object_lines_and_bad_arguments() -> None:
    transport = FakeTransport()
    clock = ReplayClock()
    tracker = EventTracker(transport, MemorySessionStore(), clock=clock)

    stats = replay_events(
        tracker,
        [
            "[1, 2]",
            "5",
            '"x"',
            json.dumps({"hook": "set_client_version", "args": [1, 2]}),
            json.dumps({"hook": "on_keypress", "time": "yesterday"}),
            json.dumps({"hook": "record_navigation", "args": ["", "a"], "time": 100}),
            json.dumps({"hook": "on_home_navigated", "time": 101}),
        ],
        clock,
    )

    assert stats.lines == 7
    assert stats.skipped == 5
    assert stats.dispatched == 1
    assert tracker.keypresses == 0
    assert [p["action"] for p in transport.sent] == ["goto_home"]
