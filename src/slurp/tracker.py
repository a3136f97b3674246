"""Event tracker: the entry points the host UI calls into.

Tracks searches, record views and a few other events, enriches them with
trail timing and session context and hands them to the transport. It does
not track users: no user name, IP address or location is ever collected.

Telemetry must never break the product, so every entry point logs and
swallows its own errors.
"""

import functools
import json
import time
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar, cast

from loguru import logger

from slurp.config import FACET_FIELD_PREFIX, SESSION_TIMEOUT
from slurp.core.records.normalizer import normalize_record, record_id
from slurp.core.search.summary import build_search_data, classify_search_action
from slurp.core.session.manager import SessionManager
from slurp.core.trail.navigation import NavigationTrail
from slurp.models.event import EventMeta, EventPayload
from slurp.protocols import (
    HistoryProtocol,
    IdentityProtocol,
    SearchStateProtocol,
    SessionStoreProtocol,
    TransportProtocol,
)

F = TypeVar("F", bound=Callable[..., Any])


def _guarded(func: F) -> F:
    """Log and swallow any exception raised by a host-facing entry point."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception:
            logger.exception("Tracking call {} failed", func.__name__)
            return None

    return cast(F, wrapper)


def _ms(seconds: float) -> int:
    return round(seconds * 1000)


class EventTracker:
    """Per-tab tracker owning the navigation trail and the session.

    Args:
        transport: Sends payloads without blocking.
        store: The tab's storage area for the session record.
        clock: Returns the current time as epoch seconds.
        client_version: Version string of the host UI, if known up front.
        history: Browsing history of the tab; trail length is used if absent.
        facet_prefix: Query field prefix that marks advanced-search facets.
        session_timeout: Inactivity in seconds after which a new session starts.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        store: SessionStoreProtocol,
        *,
        clock: Callable[[], float] = time.time,
        client_version: str | None = None,
        history: HistoryProtocol | None = None,
        facet_prefix: str = FACET_FIELD_PREFIX,
        session_timeout: int = SESSION_TIMEOUT,
    ) -> None:
        self.transport = transport
        self.sessions = SessionManager(store, timeout=session_timeout)
        self.trail = NavigationTrail()
        self.clock = clock
        self.client_version = client_version
        self.history = history
        self.facet_prefix = facet_prefix

        # Not injectable up front; handed over by UI components when ready.
        self.search_state: SearchStateProtocol | None = None
        self.identity: IdentityProtocol | None = None

        # Language seen in navigation params, used until an identity source exists.
        self.lang: str | None = None

        # Search bar input state, reset after each search event.
        self.keypresses = 0
        self.pasted = False

    # --- Collaborators -------------------------------------------------------

    def provide_search_state(self, source: SearchStateProtocol | None) -> None:
        self.search_state = source

    def provide_identity_source(self, source: IdentityProtocol | None) -> None:
        self.identity = source

    def set_client_version(self, version: str | None) -> None:
        self.client_version = version

    def get_user_language(self) -> str | None:
        if self.identity is None:
            return self.lang
        return self.identity.get_user_language()

    def is_logged_in(self) -> bool:
        if self.identity is None:
            return False
        return bool(self.identity.is_logged_in())

    def history_length(self) -> int:
        if self.history is None:
            return len(self.trail)
        return self.history.length()

    # --- Navigation and search bar -------------------------------------------

    @_guarded
    def record_navigation(
        self,
        from_state: str | None,
        to_state: str | None,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Record a UI state change."""
        params = params or {}
        if params.get("lang"):
            self.lang = params["lang"]
        self.trail.record_transition(from_state, to_state, params, self.clock())

    @_guarded
    def on_keypress(self) -> None:
        self.keypresses += 1

    @_guarded
    def on_paste(self) -> None:
        self.pasted = True

    @_guarded
    def reset_search_bar_state(self) -> None:
        self.keypresses = 0
        self.pasted = False

    # --- Core ----------------------------------------------------------------

    def track_error(self, message: str) -> None:
        """Report a tracking precondition failure. Only logged locally."""
        logger.warning("Tracking skipped: {}", message)

    @_guarded
    def track(self, action: str, data: Any) -> bool:
        """Track an event. Returns True if a payload was handed to the transport."""
        step = self.trail.latest()
        if step is None:
            self.track_error(f"navigation trail is empty, cannot track {action!r}")
            return False

        now = self.clock()
        meta = EventMeta(
            trail_step=len(self.trail),
            prep_time=_ms(step.to_time - step.from_time),
            load_time=_ms(now - step.to_time),
            version=self.client_version,
        )

        size = len(json.dumps(data, default=str))
        logger.debug('Track "{}" action ({} bytes)', action, size)

        session = self.sessions.accept(action, data, now)
        if session is None:
            return False

        payload = EventPayload(
            last_action=session.last_action,
            action=action,
            language=self.get_user_language(),
            is_logged_in=self.is_logged_in(),
            data=data,
            meta=meta,
            session_id=session.id,
            session_start=session.created_at,
            action_seq=session.action_count,
            history_length=self.history_length(),
        )
        future = self.transport.send(payload.to_dict())
        future.add_done_callback(functools.partial(self._on_reply, session.id))
        return True

    def _on_reply(self, session_id: str, future: "Future[dict[str, Any] | None]") -> None:
        if future.cancelled() or future.exception() is not None:
            return
        try:
            self.sessions.reconcile(session_id, future.result())
        except Exception:
            logger.exception("Session reconciliation failed")

    # --- Search results ------------------------------------------------------

    def track_search(
        self, search: dict[str, Any], result: dict[str, Any], page_no: int | None = None
    ) -> bool:
        """Track a loaded result page, then reset the search bar state."""
        logger.debug("Got search results")
        try:
            data = build_search_data(
                search,
                result,
                page_no,
                keypresses=self.keypresses,
                pasted=self.pasted,
                facet_prefix=self.facet_prefix,
            )
            action = classify_search_action(data["facets"], page_no)
            return bool(self.track(action, data))
        finally:
            self.keypresses = 0
            self.pasted = False

    def _search_page_loaded(self, page_no: int | None) -> bool:
        if self.search_state is None:
            self.track_error("search state source not provided")
            return False

        if self.search_state.is_search_in_progress():
            self.track_error("search still in progress")
            return False

        search = self.search_state.get_search_object()
        result = self.search_state.get_result_object()
        if not search or not result:
            self.track_error("search object or result object is missing")
            return False

        return self.track_search(search, result, page_no)

    @_guarded
    def on_search_results_ready(self, page_no: int | None = None) -> bool:
        """Called when any number of result pages are loaded."""
        return self._search_page_loaded(page_no)

    @_guarded
    def on_no_results(self) -> bool:
        return self._search_page_loaded(None)

    # --- Records -------------------------------------------------------------

    @_guarded
    def on_record_viewed(self, record: Any) -> bool:
        logger.debug("View record {}", record_id(record))
        return bool(self.track("view_record", normalize_record(record).to_dict()))

    @_guarded
    def on_record_left(self, record: Any) -> bool:
        logger.debug("Leave record {}", record_id(record))
        return bool(self.track("leave_record", {"id": record_id(record)}))

    @_guarded
    def on_send_to(self, service_name: str, record: Any) -> bool:
        data = {"service": service_name, "rec": normalize_record(record).to_dict()}
        return bool(self.track("send_to", data))

    @_guarded
    def on_record_pinned(self, record: Any) -> bool:
        return bool(self.track("pin_record", normalize_record(record).to_dict()))

    @_guarded
    def on_record_unpinned(self, record: Any) -> bool:
        return bool(self.track("unpin_record", normalize_record(record).to_dict()))

    # --- Other pages ---------------------------------------------------------

    @_guarded
    def on_home_navigated(self) -> bool:
        return bool(self.track("goto_home", {}))

    @_guarded
    def on_browse(self, data: Any) -> bool:
        return bool(self.track("browse", data))
