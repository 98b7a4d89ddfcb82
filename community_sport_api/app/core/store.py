"""
Document store for the catalog collections.

``CatalogStore`` wraps the SQLite database prepared by ``core.db`` and
exposes the small document‑database surface the services need:
create with a store‑assigned id, read by id, query by a single field,
list a whole collection and merge a set of fields into an existing
document.  Every call opens its own connection, so each write is
atomic per document and last‑write‑wins across callers.

Errors from SQLite propagate unchanged; the services decide how to
surface them.
"""

import json
import re
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .db import COLLECTIONS, get_connection

Document = Dict[str, Any]

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def utc_now() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class CatalogStore:
    """JSON document store backed by SQLite."""

    def __init__(self, db_path: str, clock: Callable[[], str] = utc_now) -> None:
        self.db_path = db_path
        self._clock = clock

    def timestamp(self) -> str:
        """Server timestamp used for ``created_at``/``updated_at`` fields."""
        return self._clock()

    @staticmethod
    def _table(collection: str) -> str:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return collection

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Document:
        document = json.loads(row["data"])
        document["id"] = row["id"]
        return document

    async def create(self, collection: str, data: Document) -> str:
        """Insert ``data`` as a new document and return its generated id."""
        table = self._table(collection)
        document_id = uuid.uuid4().hex
        payload = {key: value for key, value in data.items() if key != "id"}
        now = self.timestamp()
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                f"INSERT INTO {table} (id, data, created_at, updated_at) VALUES (?, ?, ?, ?)",
                (document_id, json.dumps(payload), payload.get("created_at", now), payload.get("updated_at", now)),
            )
            conn.commit()
            return document_id
        finally:
            conn.close()

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        table = self._table(collection)
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                f"SELECT id, data FROM {table} WHERE id = ?",
                (document_id,),
            ).fetchone()
            return self._row_to_document(row) if row else None
        finally:
            conn.close()

    async def query(self, collection: str, field: str, value: Any) -> List[Document]:
        """Return every document whose top‑level ``field`` equals ``value``.

        No ordering is applied; callers sort the result themselves.
        """
        table = self._table(collection)
        if not _FIELD_RE.match(field):
            raise ValueError(f"Invalid field name: {field}")
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT id, data FROM {table} WHERE json_extract(data, ?) = ?",
                (f"$.{field}", value),
            ).fetchall()
            return [self._row_to_document(row) for row in rows]
        finally:
            conn.close()

    async def list_all(self, collection: str) -> List[Document]:
        table = self._table(collection)
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(f"SELECT id, data FROM {table} ORDER BY rowid").fetchall()
            return [self._row_to_document(row) for row in rows]
        finally:
            conn.close()

    async def update(self, collection: str, document_id: str, fields: Document) -> bool:
        """Merge ``fields`` into an existing document.

        Returns ``False`` when the document does not exist.  Fields not
        named in ``fields`` are left untouched.
        """
        table = self._table(collection)
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                f"SELECT id, data FROM {table} WHERE id = ?",
                (document_id,),
            ).fetchone()
            if not row:
                return False
            data = json.loads(row["data"])
            data.update({key: value for key, value in fields.items() if key != "id"})
            cursor = conn.execute(
                f"UPDATE {table} SET data = ?, updated_at = ? WHERE id = ?",
                (json.dumps(data), data.get("updated_at", self.timestamp()), document_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
