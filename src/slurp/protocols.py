"""Protocols for the collaborators the tracker talks to."""

from concurrent.futures import Future
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SearchStateProtocol(Protocol):
    """Protocol for the host's search state service."""

    def is_search_in_progress(self) -> bool:
        """Return True while a search request is still running."""
        ...

    def get_search_object(self) -> dict[str, Any] | None:
        """Return the current search (query, mode, scope, facets, ...)."""
        ...

    def get_result_object(self) -> dict[str, Any] | None:
        """Return the current result set (records and paging info)."""
        ...


@runtime_checkable
class IdentityProtocol(Protocol):
    """Protocol for the host's user session service."""

    def get_user_language(self) -> str | None:
        """Return the UI language chosen by the user."""
        ...

    def is_logged_in(self) -> bool:
        """Return True if the user is signed in."""
        ...


@runtime_checkable
class HistoryProtocol(Protocol):
    """Protocol for the host's browsing history."""

    def length(self) -> int:
        """Return the number of entries in the tab's history."""
        ...


@runtime_checkable
class TransportProtocol(Protocol):
    """Protocol for sending payloads to the collection endpoint."""

    def send(self, payload: dict[str, Any]) -> "Future[dict[str, Any] | None]":
        """Post a payload without blocking; the future holds the decoded reply."""
        ...


@runtime_checkable
class SessionStoreProtocol(Protocol):
    """Protocol for a tab-scoped key/value storage area."""

    def get_item(self, key: str) -> str | None:
        """Return the stored text, or None if the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""
        ...
