"""Local key-value storage backends for the session cache."""

import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from editor_session.errors import StorageError, StorageQuotaExceededError
from editor_session.services.session_cache import LocalStorage

DEFAULT_CAPACITY_BYTES = 5 * 1024 * 1024


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


@dataclass
class InMemoryLocalStorage(LocalStorage):
    """Process-local storage, lost when the process exits."""

    capacity_bytes: int = DEFAULT_CAPACITY_BYTES
    _items: dict[str, str] = field(default_factory=dict, repr=False)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        used = sum(_entry_size(k, v) for k, v in self._items.items() if k != key)
        if used + _entry_size(key, value) > self.capacity_bytes:
            raise StorageQuotaExceededError(
                f"Writing {key!r} exceeds {self.capacity_bytes} bytes"
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class SqliteLocalStorage(LocalStorage):
    """Durable storage in a single SQLite table."""

    def __init__(
        self, path: str | Path, capacity_bytes: int = DEFAULT_CAPACITY_BYTES
    ) -> None:
        self.path = Path(path)
        self.capacity_bytes = capacity_bytes
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.path)
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS local_storage ("
                    "key TEXT PRIMARY KEY, value TEXT NOT NULL)"
                )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open local storage at {self.path}") from exc

    def get_item(self, key: str) -> str | None:
        try:
            row = self._conn.execute(
                "SELECT value FROM local_storage WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._conn:
                (used,) = self._conn.execute(
                    "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB))"
                    " + LENGTH(CAST(value AS BLOB))), 0)"
                    " FROM local_storage WHERE key != ?",
                    (key,),
                ).fetchone()
                if used + _entry_size(key, value) > self.capacity_bytes:
                    raise StorageQuotaExceededError(
                        f"Writing {key!r} exceeds {self.capacity_bytes} bytes"
                    )
                self._conn.execute(
                    "INSERT INTO local_storage (key, value) VALUES (?, ?)"
                    " ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def remove_item(self, key: str) -> None:
        try:
            with self._conn:
                self._conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc

    def keys(self) -> list[str]:
        try:
            rows = self._conn.execute("SELECT key FROM local_storage").fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close the underlying database connection."""
        self._conn.close()
