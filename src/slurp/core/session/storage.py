"""Tab-scoped storage areas for the session record.

Each tab or window gets its own area. Areas never see each other's keys,
which is what makes a session per-tab.
"""

import sqlite3
import time

from slurp.core.database.schema import migrate_schema


class MemorySessionStore:
    """In-process storage area, lost when the process exits."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class SqliteSessionStore:
    """Storage area backed by a row set in a shared SQLite database.

    Args:
        conn: Open connection. The schema is created if missing.
        area: Identifier of the tab/window owning this area.
    """

    def __init__(self, conn: sqlite3.Connection, *, area: str) -> None:
        if not area:
            msg = "Storage area must not be empty"
            raise ValueError(msg)
        self.conn = conn
        self.area = area
        migrate_schema(conn)

    def get_item(self, key: str) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM session_storage WHERE area = ? AND key = ?",
            (self.area, key),
        ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO session_storage (area, key, value, updated_at) "
            "VALUES (?, ?, ?, ?)",
            (self.area, key, value, int(time.time())),
        )
        self.conn.commit()
