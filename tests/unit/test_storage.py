"""Tests for tab-scoped session storage."""

import sqlite3

import pytest

from slurp.core.database.schema import SCHEMA_VERSION, get_schema_version
from slurp.core.session.storage import MemorySessionStore, SqliteSessionStore


def test_memory_store_roundtrip() -> None:
    store = MemorySessionStore()

    assert store.get_item("k") is None
    store.set_item("k", "v")
    assert store.get_item("k") == "v"


def test_sqlite_store_creates_schema() -> None:
    conn = sqlite3.connect(":memory:")

    SqliteSessionStore(conn, area="tab-1")

    assert get_schema_version(conn) == SCHEMA_VERSION


def test_sqlite_store_replaces_value() -> None:
    conn = sqlite3.connect(":memory:")
    store = SqliteSessionStore(conn, area="tab-1")

    store.set_item("slurpSession", "one")
    store.set_item("slurpSession", "two")

    assert store.get_item("slurpSession") == "two"


def test_sqlite_areas_do_not_leak() -> None:
    conn = sqlite3.connect(":memory:")
    tab_1 = SqliteSessionStore(conn, area="tab-1")
    tab_2 = SqliteSessionStore(conn, area="tab-2")

    tab_1.set_item("slurpSession", "first tab")

    assert tab_2.get_item("slurpSession") is None
    assert tab_1.get_item("slurpSession") == "first tab"


def test_sqlite_store_requires_area() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        SqliteSessionStore(sqlite3.connect(":memory:"), area="")
