"""Replay a JSON-lines log of host hook calls through an EventTracker.

Each line is an object with a ``hook`` name and optional ``args``/``kwargs``:

    {"hook": "record_navigation", "args": ["", "exploreMain.search", {"lang": "no_NO"}]}
    {"hook": "search_state", "search": {...}, "result": {...}}
    {"hook": "on_search_results_ready", "args": [2], "time": 1700000000.5}

``search_state`` and ``identity`` lines install static collaborators. An
optional ``time`` (epoch seconds) sets the tracker clock for that line.
"""

import json
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from slurp.tracker import EventTracker

HOOKS: frozenset[str] = frozenset(
    {
        "record_navigation",
        "on_keypress",
        "on_paste",
        "reset_search_bar_state",
        "set_client_version",
        "on_search_results_ready",
        "on_no_results",
        "on_record_viewed",
        "on_record_left",
        "on_send_to",
        "on_record_pinned",
        "on_record_unpinned",
        "on_home_navigated",
        "on_browse",
        "track",
    }
)


@dataclass
class StaticSearchState:
    """Search state source returning fixed objects."""

    search: dict[str, Any] | None = None
    result: dict[str, Any] | None = None
    in_progress: bool = False

    def is_search_in_progress(self) -> bool:
        return self.in_progress

    def get_search_object(self) -> dict[str, Any] | None:
        return self.search

    def get_result_object(self) -> dict[str, Any] | None:
        return self.result


@dataclass
class StaticIdentity:
    """Identity source returning fixed values."""

    lang: str | None = None
    logged_in: bool = False

    def get_user_language(self) -> str | None:
        return self.lang

    def is_logged_in(self) -> bool:
        return self.logged_in


class ReplayClock:
    """Clock that follows the ``time`` fields of the replayed log."""

    def __init__(self) -> None:
        self.now: float | None = None

    def __call__(self) -> float:
        return time.time() if self.now is None else self.now


@dataclass
class ReplayStats:
    lines: int = 0
    dispatched: int = 0
    skipped: int = 0
    unknown_hooks: list[str] = field(default_factory=list)


def replay_events(
    tracker: EventTracker, lines: Iterable[str], clock: ReplayClock | None = None
) -> ReplayStats:
    """Feed hook calls to the tracker.

    Args:
        tracker: Tracker to drive.
        lines: JSON-lines text, blank lines are ignored.
        clock: Clock used by the tracker, advanced from ``time`` fields.

    Returns:
        Counts of lines, dispatched events and skipped/failed calls.
    """
    stats = ReplayStats()
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        stats.lines += 1
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            logger.warning("Line {}: not valid JSON, skipped", lineno)
            stats.skipped += 1
            continue

        if not isinstance(entry, dict):
            logger.warning("Line {}: not a JSON object, skipped", lineno)
            stats.skipped += 1
            continue

        if clock is not None and entry.get("time") is not None:
            try:
                clock.now = float(entry["time"])
            except (TypeError, ValueError):
                logger.warning("Line {}: bad time {!r}, skipped", lineno, entry["time"])
                stats.skipped += 1
                continue

        hook = entry.get("hook")
        if hook == "search_state":
            tracker.provide_search_state(
                StaticSearchState(
                    search=entry.get("search"),
                    result=entry.get("result"),
                    in_progress=bool(entry.get("in_progress", False)),
                )
            )
            continue
        if hook == "identity":
            tracker.provide_identity_source(
                StaticIdentity(lang=entry.get("lang"), logged_in=bool(entry.get("logged_in")))
            )
            continue
        if hook not in HOOKS:
            logger.warning("Line {}: unknown hook {!r}", lineno, hook)
            stats.unknown_hooks.append(str(hook))
            stats.skipped += 1
            continue

        try:
            rv = getattr(tracker, hook)(*entry.get("args", []), **entry.get("kwargs", {}))
        except (TypeError, ValueError) as e:
            logger.warning("Line {}: bad arguments for {!r}: {}", lineno, hook, e)
            stats.skipped += 1
            continue
        if rv is True:
            stats.dispatched += 1
        elif rv is False:
            stats.skipped += 1
    return stats
