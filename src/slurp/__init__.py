"""Client-side search telemetry recorder."""

from slurp.core.query.decoder import decode_query
from slurp.core.records.normalizer import normalize_record
from slurp.core.session.manager import SessionManager
from slurp.core.session.storage import MemorySessionStore, SqliteSessionStore
from slurp.core.trail.navigation import NavigationTrail
from slurp.protocols import (
    HistoryProtocol,
    IdentityProtocol,
    SearchStateProtocol,
    SessionStoreProtocol,
    TransportProtocol,
)
from slurp.tracker import EventTracker
from slurp.transport import HttpTransport

__all__ = [
    "EventTracker",
    "HistoryProtocol",
    "HttpTransport",
    "IdentityProtocol",
    "MemorySessionStore",
    "NavigationTrail",
    "SearchStateProtocol",
    "SessionManager",
    "SessionStoreProtocol",
    "SqliteSessionStore",
    "TransportProtocol",
    "decode_query",
    "normalize_record",
]
