"""Session lifecycle and duplicate suppression.

Events are associated with a locally generated UUID session id kept in the
tab's storage area. A session times out after SESSION_TIMEOUT seconds of
inactivity, or when the storage area goes away with the tab.
"""

import hashlib
import json
import threading
import uuid
from dataclasses import replace
from typing import Any

from loguru import logger

from slurp.config import SESSION_STORAGE_KEY, SESSION_TIMEOUT
from slurp.models.event import Session
from slurp.protocols import SessionStoreProtocol


def fingerprint(data: Any) -> str:
    """Return a stable digest of the serialized event data.

    Two payloads that serialize identically are treated as the same event.
    """
    serialized = json.dumps(data, separators=(",", ":"), default=str)
    return hashlib.sha1(serialized.encode("utf-8")).hexdigest()


class SessionManager:
    """Owns the persisted session of one tab.

    Every read-modify-write of the session record happens under a lock, so
    reconciliation from the transport thread cannot lose an update.
    """

    def __init__(
        self,
        store: SessionStoreProtocol,
        *,
        timeout: int = SESSION_TIMEOUT,
        storage_key: str = SESSION_STORAGE_KEY,
    ) -> None:
        self._store = store
        self.timeout = timeout
        self.storage_key = storage_key
        self._lock = threading.Lock()

    def _load(self) -> Session | None:
        text = self._store.get_item(self.storage_key)
        if text is None:
            return None
        try:
            return Session.from_json(text)
        except ValueError:
            logger.warning("Discarding unreadable session record")
            return None

    def _save(self, session: Session) -> None:
        self._store.set_item(self.storage_key, session.to_json())

    def current(self) -> Session | None:
        """Return the stored session, expired or not."""
        with self._lock:
            return self._load()

    def is_expired(self, session: Session, now: int) -> bool:
        return now - session.last_active_at > self.timeout

    def accept(self, action: str, data: Any, now: float) -> Session | None:
        """Accept or suppress an event.

        Returns the session as it was before this event (the values that go
        into the payload), or None if the event duplicates the last one.
        On acceptance the stored session is advanced.
        """
        now_s = round(now)
        digest = fingerprint(data)

        with self._lock:
            session = self._load()
            if session is None or self.is_expired(session, now_s):
                session = Session(id=str(uuid.uuid1()), created_at=now_s, last_active_at=now_s)
                logger.debug("Started session {}", session.id)

            if action == session.last_action and digest == session.last_payload_hash:
                logger.debug("Ignoring duplicate {!r} action", action)
                return None

            self._save(
                replace(
                    session,
                    last_active_at=now_s,
                    last_action=action,
                    action_count=session.action_count + 1,
                    last_payload_hash=digest,
                )
            )
            return session

    def reconcile(self, sent_session_id: str, reply: dict[str, Any] | None) -> Session | None:
        """Adopt server-assigned session values from an endpoint reply.

        Only applies while the stored session is still the one the event was
        sent with. Returns the updated session, or None if nothing changed.
        """
        if not reply:
            return None
        server_id = reply.get("session_id")
        action_no = reply.get("action_no")
        if not server_id and action_no is None:
            return None

        with self._lock:
            session = self._load()
            if session is None or session.id != sent_session_id:
                return None

            updated = session
            if server_id:
                updated = replace(updated, id=str(server_id))
            if action_no is not None:
                try:
                    updated = replace(
                        updated, action_count=max(updated.action_count, int(action_no) + 1)
                    )
                except (TypeError, ValueError):
                    logger.debug("Ignoring bad action_no in reply: {!r}", action_no)
            if updated == session:
                return None
            self._save(updated)
            logger.debug("Session reconciled: {} -> {}", session.id, updated.id)
            return updated
