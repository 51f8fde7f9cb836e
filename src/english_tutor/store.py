"""Per-user namespaced key/value storage backed by SQLite."""
import json
import sqlite3
import threading
from datetime import datetime
from typing import Any, Callable

from loguru import logger

from english_tutor.db import get_connection, init_db
from english_tutor.errors import PersistenceError


def user_key(feature: str, user_id: str) -> str:
    """Namespace a feature key by user, e.g. ``challenge-state-alice``."""
    return f"{feature}-{user_id}"


class PersistentStore:
    """Synchronous get/set/remove over the ``kv_store`` table.

    Values are stored as JSON text. A missing key is not an error: ``get``
    returns the supplied default so callers can fall back to fresh state.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        init_db(db_path)

    def get(self, key: str, default: Any = None) -> Any:
        try:
            conn = get_connection(self.db_path)
            try:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read {key!r}: {e}") from e
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except ValueError as e:
            raise PersistenceError(f"Stored value for {key!r} is not valid JSON") from e

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Value for {key!r} is not serializable: {e}") from e
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute(
                    "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                    (key, payload, datetime.now().isoformat()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write {key!r}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            conn = get_connection(self.db_path)
            try:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not remove {key!r}: {e}") from e


class MemoryStore:
    """In-process store with the same contract, used for guests and tests."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return json.loads(self._data[key])

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Value for {key!r} is not serializable: {e}") from e

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
class StoredState:
    """Base for services that keep one slice of state under one store key.

    In-memory state is authoritative. A failed write is logged and kept on
    ``last_persist_error`` until the next successful write clears it.
    Subclasses hold ``lock`` around every read and mutate-and-persist, since
    the session clock thread finalizes results while the CLI keeps running.
    """

    feature = ""

    def __init__(self, store, user_id: str):
        self.store = store
        self.user_id = user_id
        self.key = user_key(self.feature, user_id)
        self.lock = threading.RLock()
        self.last_persist_error: PersistenceError | None = None

    def _load(self, default: Any, decode: Callable[[Any], Any] | None = None) -> Any:
        """Read the stored value, passing it through ``decode`` when given.

        Unreadable or malformed data falls back to ``decode(default)``.
        """
        try:
            raw = self.store.get(self.key, default)
        except PersistenceError as e:
            logger.warning("Falling back to defaults for {}: {}", self.key, e)
            self.last_persist_error = e
            raw = default
        if decode is None:
            return raw
        try:
            return decode(raw)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Discarding malformed value for {}: {!r}", self.key, e)
            self.last_persist_error = PersistenceError(f"Stored value for {self.key!r} is malformed: {e!r}")
            return decode(default)

    def _persist(self, value: Any) -> bool:
        try:
            self.store.set(self.key, value)
        except PersistenceError as e:
            logger.warning("Keeping in-memory state for {}: {}", self.key, e)
            self.last_persist_error = e
            return False
        self.last_persist_error = None
        return True
