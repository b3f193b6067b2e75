"""SQLite-backed handoff slot for text shared from another process."""

import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from redtools.core.exceptions import StoreError
from redtools.core.types import SharedContent

logger = logging.getLogger("redtools")

SHARED_CONTENT_KEY = "sharedContent"


class SharedContentStore:
    """Thread-safe key-value slot holding the most recently shared text.

    A sharing process calls publish(); any process pointed at the same file
    sees the new value on its next read(). Listeners registered with
    subscribe() in the publishing process are notified immediately.
    """

    def __init__(self, db_path: Path):
        self._lock = threading.RLock()
        self._listeners: list[Callable[[SharedContent], None]] = []
        self._db_path = Path(db_path)

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

            # check_same_thread=False allows the connection to be used from
            # different threads, but we enforce thread safety with RLock
            self._conn = sqlite3.connect(
                str(self._db_path),
                check_same_thread=False
            )
            self._conn.row_factory = sqlite3.Row

            self._init_schema()
            logger.info(f"SharedContentStore initialized with db_path: {self._db_path}")

        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Failed to initialize shared store: {e}")

    def _init_schema(self) -> None:
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS shared_content (
                    key         TEXT PRIMARY KEY,
                    content     TEXT NOT NULL,
                    updated_at  REAL NOT NULL
                )
            """)
            self._conn.commit()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Shared store is closed")
        return self._conn

    def publish(self, text: str, updated_at: Optional[float] = None) -> SharedContent:
        """Store text with a timestamp and notify listeners (UPSERT).

        Raises:
            StoreError: If database operation fails.
        """
        content = SharedContent(
            text=text,
            updated_at=time.time() if updated_at is None else updated_at,
        )
        try:
            with self._lock:
                self._connection().execute(
                    """
                    INSERT INTO shared_content (key, content, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key)
                    DO UPDATE SET
                        content = excluded.content,
                        updated_at = excluded.updated_at
                    """,
                    (SHARED_CONTENT_KEY, content.text, content.updated_at)
                )
                self._conn.commit()
                listeners = list(self._listeners)

        except sqlite3.Error as e:
            raise StoreError(f"Failed to publish shared content: {e}")

        logger.debug(f"Published shared content ({len(text)} chars)")
        for listener in listeners:
            listener(content)
        return content

    def read(self) -> Optional[SharedContent]:
        """Return the current slot value, or None if nothing was shared."""
        try:
            with self._lock:
                row = self._connection().execute(
                    "SELECT content, updated_at FROM shared_content WHERE key = ?",
                    (SHARED_CONTENT_KEY,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read shared content: {e}")

        if row is None:
            return None
        return SharedContent(text=row['content'], updated_at=row['updated_at'])

    def clear(self) -> None:
        try:
            with self._lock:
                self._connection().execute(
                    "DELETE FROM shared_content WHERE key = ?", (SHARED_CONTENT_KEY,)
                )
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to clear shared content: {e}")

    def subscribe(self, callback: Callable[[SharedContent], None]) -> None:
        with self._lock:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[SharedContent], None]) -> None:
        with self._lock:
            if callback in self._listeners:
                self._listeners.remove(callback)

    def close(self) -> None:
        """Close the database connection."""
        try:
            with self._lock:
                if self._conn:
                    self._conn.close()
                    self._conn = None
                    logger.info("Shared store connection closed")

        except sqlite3.Error as e:
            logger.error(f"Error closing shared store connection: {e}")
