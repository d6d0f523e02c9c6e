# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: member record key-value store.

Both stores expose the same contract: list_keys / get / put / delete over
JSON-object blobs. Store-level failures surface as StoreUnavailableError,
absent keys as RecordNotFoundError.
"""

import json
import threading
from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import get_logger

logger = get_logger(__name__)


class StoreError(Exception):
    """Base class for record store failures."""


class StoreUnavailableError(StoreError):
    """The backing store could not be reached or rejected the operation."""


class RecordNotFoundError(StoreError, KeyError):
    """No record is stored under the requested key."""

    def __str__(self) -> str:
        return f"Record not found: {self.args[0] if self.args else ''}"


class RecordStore(Protocol):
    def list_keys(self) -> list[str]: ...

    def get(self, key: str) -> dict[str, Any]: ...

    def put(self, key: str, record: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> bool: ...


class InMemoryRecordStore:
    """Process-local store, used when no DATABASE_URL is configured."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._lock = threading.Lock()

    # ── Read ──

    def list_keys(self) -> list[str]:
        with self._lock:
            return list(self._store)

    def get(self, key: str) -> dict[str, Any]:
        with self._lock:
            raw = self._store.get(key)
        if raw is None:
            raise RecordNotFoundError(key)
        return json.loads(raw)

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def put(self, key: str, record: dict[str, Any]) -> None:
        # Serialised so callers never share a mutable blob with the store.
        raw = json.dumps(record)
        with self._lock:
            self._store[key] = raw

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def verify_connection(self) -> int:
        return self.count()


class SqlRecordStore:
    """Key-value store over a single `member_records` table."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def ensure_schema(self) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(text("""
                    CREATE TABLE IF NOT EXISTS member_records (
                        record_key VARCHAR(512) PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                """))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Could not create member_records table: {exc}") from exc

    # ── Read ──

    def list_keys(self) -> list[str]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text("SELECT record_key FROM member_records ORDER BY record_key")
                ).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to list member keys: %s", exc)
            raise StoreUnavailableError(str(exc)) from exc
        return [r[0] for r in rows]

    def get(self, key: str) -> dict[str, Any]:
        try:
            with self._engine.connect() as conn:
                raw = conn.execute(
                    text("SELECT value FROM member_records WHERE record_key = :key"),
                    {"key": key},
                ).scalar()
        except SQLAlchemyError as exc:
            logger.error("Failed to read member %s: %s", key, exc)
            raise StoreUnavailableError(str(exc)) from exc
        if raw is None:
            raise RecordNotFoundError(key)
        return json.loads(raw)

    def count(self) -> int:
        try:
            with self._engine.connect() as conn:
                return conn.execute(text("SELECT COUNT(*) FROM member_records")).scalar() or 0
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc

    # ── Write ──

    def put(self, key: str, record: dict[str, Any]) -> None:
        params = {"key": key, "value": json.dumps(record)}
        try:
            with self._engine.begin() as conn:
                updated = conn.execute(
                    text("UPDATE member_records SET value = :value WHERE record_key = :key"),
                    params,
                ).rowcount
                if not updated:
                    conn.execute(
                        text("INSERT INTO member_records (record_key, value) VALUES (:key, :value)"),
                        params,
                    )
        except SQLAlchemyError as exc:
            logger.error("Failed to persist member %s: %s", key, exc)
            raise StoreUnavailableError(str(exc)) from exc

    def delete(self, key: str) -> bool:
        try:
            with self._engine.begin() as conn:
                deleted = conn.execute(
                    text("DELETE FROM member_records WHERE record_key = :key"),
                    {"key": key},
                ).rowcount
        except SQLAlchemyError as exc:
            logger.error("Failed to delete member %s: %s", key, exc)
            raise StoreUnavailableError(str(exc)) from exc
        return bool(deleted)

    def verify_connection(self) -> int:
        return self.count()

    def dispose(self) -> None:
        self._engine.dispose()
