"""
Rich-text content storage.

Rich-text translations live in a content store keyed by
``(owner_id, owner_type, field_name, locale)`` with find-or-create upsert
semantics. Writes made before the owning record is stored are staged in a
PendingWriteBuffer and flushed by ``commit_pending_writes`` once the
record's own save has succeeded.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol, Tuple, Union

from .models.record import RecordSchema, schema_for
from .errors import CapabilityError

logger = logging.getLogger(__name__)

StoreKey = Tuple[str, str, str, str]


class RichTextStore(Protocol):
    """Persistence collaborator for rich-text content."""

    def find(self, owner_id: Any, owner_type: str, field_name: str, locale: str) -> Optional[str]:
        ...

    def upsert(self, owner_id: Any, owner_type: str, field_name: str, locale: str, body: str) -> None:
        ...


def _key(owner_id: Any, owner_type: str, field_name: str, locale: str) -> StoreKey:
    return (str(owner_id), str(owner_type), str(field_name), str(locale))


class InMemoryRichTextStore:
    """Dict-backed store, useful for tests and single-process tools."""

    def __init__(self) -> None:
        self._rows: Dict[StoreKey, str] = {}

    def find(self, owner_id: Any, owner_type: str, field_name: str, locale: str) -> Optional[str]:
        return self._rows.get(_key(owner_id, owner_type, field_name, locale))

    def upsert(self, owner_id: Any, owner_type: str, field_name: str, locale: str, body: str) -> None:
        self._rows[_key(owner_id, owner_type, field_name, locale)] = body

    def __len__(self) -> int:
        return len(self._rows)


class SqliteRichTextStore:
    """
    SQLite-backed store mirroring the ``translated_rich_texts`` table.

    One row per (record_type, record_id, field_name, locale), enforced by a
    unique index so upserts replace the body in place.
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS translated_rich_texts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            record_type TEXT NOT NULL,
            record_id TEXT NOT NULL,
            field_name TEXT NOT NULL,
            locale TEXT NOT NULL,
            body TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        CREATE UNIQUE INDEX IF NOT EXISTS index_translated_rich_texts_uniqueness
            ON translated_rich_texts (record_type, record_id, field_name, locale);
        CREATE INDEX IF NOT EXISTS index_translated_rich_texts_on_record
            ON translated_rich_texts (record_type, record_id);
    """

    def __init__(self, path: Union[str, Path] = ":memory:") -> None:
        self.path = str(path)
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock:
            self._conn.executescript(self.SCHEMA)
            self._conn.commit()

    def find(self, owner_id: Any, owner_type: str, field_name: str, locale: str) -> Optional[str]:
        with self._lock:
            row = self._conn.execute(
                "SELECT body FROM translated_rich_texts "
                "WHERE record_type = ? AND record_id = ? AND field_name = ? AND locale = ?",
                (str(owner_type), str(owner_id), str(field_name), str(locale)),
            ).fetchone()
        return row[0] if row else None

    def upsert(self, owner_id: Any, owner_type: str, field_name: str, locale: str, body: str) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO translated_rich_texts (record_type, record_id, field_name, locale, body) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT (record_type, record_id, field_name, locale) "
                "DO UPDATE SET body = excluded.body, updated_at = CURRENT_TIMESTAMP",
                (str(owner_type), str(owner_id), str(field_name), str(locale), body),
            )
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()


class PendingWriteBuffer:
    """
    Rich-text writes staged in memory until the owning record is saved.

    Keyed by (field, locale). Created empty per record translation, filled by
    the rich-text orchestrator, flushed and cleared by commit_pending_writes.
    """

    def __init__(self) -> None:
        self._writes: Dict[Tuple[str, str], str] = {}

    def stage(self, field: str, locale: str, content: str) -> None:
        self._writes[(str(field), str(locale))] = content

    def get(self, field: str, locale: str) -> Optional[str]:
        return self._writes.get((str(field), str(locale)))

    def items(self) -> Iterator[Tuple[Tuple[str, str], str]]:
        return iter(list(self._writes.items()))

    def clear(self) -> None:
        self._writes.clear()

    def __len__(self) -> int:
        return len(self._writes)

    def __bool__(self) -> bool:
        return bool(self._writes)

    def __contains__(self, key: object) -> bool:
        return key in self._writes


def commit_pending_writes(
    record: Any,
    buffer: PendingWriteBuffer,
    store: RichTextStore,
    schema: Optional[RecordSchema] = None,
) -> int:
    """
    Flush staged rich-text writes for a record that has just been saved.

    Call after the persistence layer's own save succeeds. Returns the number
    of rows written; the buffer is cleared afterwards.

    Raises:
        CapabilityError: If the record type declares no rich-text fields
        ValueError: If the record still has no id
    """
    schema = schema or schema_for(record)
    if schema is None or not schema.supports_rich_text:
        raise CapabilityError(f"{type(record).__name__} does not declare rich-text translatable fields")
    if not buffer:
        return 0

    owner_id = schema.owner_id(record)
    if owner_id is None:
        raise ValueError(f"Cannot flush pending translations for unsaved {schema.record_type}")

    written = 0
    for (field, locale), content in buffer.items():
        store.upsert(owner_id, schema.record_type, field, locale, content)
        written += 1
    buffer.clear()
    logger.debug("Flushed %d pending rich-text translation(s) for %s#%s", written, schema.record_type, owner_id)
    return written
