"""Domain models for slurp events."""

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TrailStep:
    """A single UI state transition with timing (epoch seconds)."""

    from_state: str | None
    from_time: float
    to_state: str | None
    to_time: float
    params: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class Session:
    """A tab-scoped session record, as persisted in storage.

    `action_count` is the number the next accepted event will carry.
    `last_payload_hash` fingerprints the data of the last accepted event.
    """

    id: str
    created_at: int
    last_active_at: int
    last_action: str | None = None
    action_count: int = 1
    last_payload_hash: str | None = None

    def to_json(self) -> str:
        return json.dumps(
            {
                "id": self.id,
                "created_at": self.created_at,
                "last_active_at": self.last_active_at,
                "last_action": self.last_action,
                "action_count": self.action_count,
                "last_payload_hash": self.last_payload_hash,
            },
            sort_keys=True,
        )

    @classmethod
    def from_json(cls, text: str) -> "Session":
        """Parse a stored session. Raises ValueError on malformed input."""
        try:
            raw = json.loads(text)
            return cls(
                id=str(raw["id"]),
                created_at=int(raw["created_at"]),
                last_active_at=int(raw["last_active_at"]),
                last_action=raw.get("last_action"),
                action_count=int(raw.get("action_count", 1)),
                last_payload_hash=raw.get("last_payload_hash"),
            )
        except (TypeError, KeyError, ValueError) as e:
            msg = f"Malformed session record: {text[:64]!r}"
            raise ValueError(msg) from e


@dataclass(frozen=True)
class QueryClause:
    """One boolean clause of a decoded query.

    `op` joins this clause to the one before it; the first clause has none.
    """

    field: str
    precision: str | None
    term: str
    op: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "field": self.field, "prec": self.precision, "term": self.term}


@dataclass(frozen=True)
class FacetClause:
    """An advanced-search facet carried inside the query string."""

    field: str
    precision: str | None
    term: str

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "prec": self.precision, "term": self.term}


@dataclass(frozen=True)
class DecodedQuery:
    """Result of decoding a raw query string."""

    query: tuple[QueryClause, ...] = ()
    query_facets: tuple[FacetClause, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": [c.to_dict() for c in self.query],
            "query_facets": [c.to_dict() for c in self.query_facets],
        }


@dataclass(frozen=True)
class NormalizedRecord:
    """Flat, analytics-friendly projection of a bibliographic record."""

    id: str | None = None
    is_local: bool = False
    source_adds_id: str | None = None
    source_system: str | None = None
    dewey_terms: tuple[str, ...] = ()
    humord_terms: tuple[str, ...] = ()
    realfag_terms: tuple[str, ...] = ()
    resource_types: tuple[str, ...] = ()
    display_type: str | None = None
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "is_local": self.is_local,
            "adds_id": self.source_adds_id,
            "source": self.source_system,
            "ddc": list(self.dewey_terms),
            "hume": list(self.humord_terms),
            "real": list(self.realfag_terms),
            "rsrctype": list(self.resource_types),
            "disptype": self.display_type,
            "title": self.title,
        }


@dataclass(frozen=True)
class EventMeta:
    """Timing metadata derived from the navigation trail (milliseconds)."""

    trail_step: int
    prep_time: int
    load_time: int
    version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "trailStep": self.trail_step,
            "prepTime": self.prep_time,
            "loadTime": self.load_time,
            "version": self.version,
        }


@dataclass(frozen=True)
class EventPayload:
    """The body POSTed to the collection endpoint for one event."""

    last_action: str | None
    action: str
    language: str | None
    is_logged_in: bool
    data: Any
    meta: EventMeta
    session_id: str
    session_start: int
    action_seq: int
    history_length: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_action": self.last_action,
            "action": self.action,
            "lang": self.language,
            "logged_in": self.is_logged_in,
            "data": self.data,
            "meta": self.meta.to_dict(),
            "session_id": self.session_id,
            "session_start": self.session_start,
            "action_no": self.action_seq,
            "hist": self.history_length,
        }
