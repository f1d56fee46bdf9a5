"""Disk entries with an SQLite-backed item counter."""

import sqlite3
from pathlib import Path

import structlog

from unveil.cache.disk import DiskStorage


logger = structlog.get_logger()

COUNT_KEY = "count"


class SQLiteStorage:
    """Stores blobs through DiskStorage and keeps a running entry count.

    The counter lives in ``<cache_dir>/database/.sqlite``. When it is
    absent the entry files are scanned once to seed it. Counter failures
    never affect reads or writes.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize the storage.

        Args:
            cache_dir: Directory holding entries and the counter database.
        """
        self._disk = DiskStorage(cache_dir)
        self._db_path = cache_dir / "database" / ".sqlite"
        self._log = logger.bind(component="cache", backend="sqlite")
        self._conn: sqlite3.Connection | None = None
        self._connect()

    @property
    def db_path(self) -> Path:
        """Get the counter database path."""
        return self._db_path

    def _connect(self) -> None:
        """Open the counter database, leaving it disabled on failure."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
            conn.execute(
                "CREATE TABLE IF NOT EXISTS stats ("
                "key TEXT PRIMARY KEY, value INTEGER NOT NULL)"
            )
            conn.commit()
        except (OSError, sqlite3.Error) as e:
            self._log.warning("counter_unavailable", error=str(e))
            return
        self._conn = conn

    def close(self) -> None:
        """Close the counter database."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def exists(self, cache_id: str) -> bool:
        return self._disk.exists(cache_id)

    def get(self, cache_id: str) -> bytes | None:
        return self._disk.get(cache_id)

    def set(self, cache_id: str, content: bytes) -> bool:
        """Write an entry; the counter grows only for new entries."""
        is_new = not self._disk.exists(cache_id)
        if not self._disk.set(cache_id, content):
            return False
        if is_new:
            self._increment()
        return True

    def count(self) -> int:
        """Get the entry count, seeding it from a file scan when absent."""
        stored = self._read_count()
        if stored is not None:
            return stored
        scanned = self._disk.count()
        self._write_count(scanned)
        return scanned

    def _increment(self) -> None:
        if self._read_count() is None:
            # Seeding by scan already includes the entry just written
            self._write_count(self._disk.count())
            return
        if self._conn is None:
            return
        try:
            self._conn.execute(
                "UPDATE stats SET value = value + 1 WHERE key = ?", (COUNT_KEY,)
            )
            self._conn.commit()
        except sqlite3.Error as e:
            self._log.warning("counter_update_failed", error=str(e))

    def _read_count(self) -> int | None:
        if self._conn is None:
            return None
        try:
            row = self._conn.execute(
                "SELECT value FROM stats WHERE key = ?", (COUNT_KEY,)
            ).fetchone()
        except sqlite3.Error as e:
            self._log.warning("counter_read_failed", error=str(e))
            return None
        return int(row[0]) if row else None

    def _write_count(self, value: int) -> None:
        if self._conn is None:
            return
        try:
            self._conn.execute(
                "INSERT OR REPLACE INTO stats (key, value) VALUES (?, ?)",
                (COUNT_KEY, value),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            self._log.warning("counter_update_failed", error=str(e))
