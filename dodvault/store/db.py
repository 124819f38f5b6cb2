"""
DocumentStore — SQLite-backed embedded document store with an async API.

Usage::

    store = DocumentStore("doddb", base_dir="~/.dodvault")

    # Insert (id assigned by the store) or update (keyed by _id)
    result = await store.put({"Class": "Wizard"})

    # Read back one document, _id and _rev included
    doc = await store.get(result.id)

    # Enumerate everything, ordered by id
    listing = await store.all_docs(include_docs=True)
    for row in listing.rows:
        print(row.id, row.doc["Class"])

Every public coroutine runs its SQLite work in a worker thread via
asyncio.to_thread(), so callers on the event loop never block on disk I/O.
"""

import asyncio
import hashlib
import json
import logging
import sqlite3
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dodvault.exceptions import ConflictError, NotFoundError, StoreError
from dodvault.store.models import AllDocsResult, DocRow, PutResult

__all__ = ["DocumentStore", "DEFAULT_DB_DIR", "DEFAULT_DB_NAME"]

logger = logging.getLogger(__name__)

# Default location of the application store
DEFAULT_DB_DIR  = "~/.dodvault"
DEFAULT_DB_NAME = "doddb"

# Path to the SQL schema file bundled with this package
_SCHEMA_PATH = Path(__file__).parent / "migrations" / "schema.sql"

# Members the store itself manages; every other "_"-prefixed key is rejected
_ID_FIELD  = "_id"
_REV_FIELD = "_rev"


class DocumentStore:
    """
    Async put / get / all_docs interface over one local SQLite file.

    The database file and schema are created automatically on first open.
    Each call opens its own short-lived connection inside a worker thread;
    concurrent writers are serialised by SQLite (BEGIN IMMEDIATE).
    """

    def __init__(self, name: str, base_dir: str = DEFAULT_DB_DIR) -> None:
        if not name:
            raise StoreError("Store name must be a non-empty string", "bad_request")
        self._name = name
        self._db_path = Path(base_dir).expanduser() / f"{name}.sqlite3"
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.debug("Opened document store %r at %s", name, self._db_path)

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._db_path

    # ── Internal helpers ──────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        """Create tables if they don't already exist."""
        sql = _SCHEMA_PATH.read_text(encoding="utf-8")
        try:
            with self._connect() as conn:
                conn.executescript(sql)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open store {self._name!r}: {exc}") from exc

    @staticmethod
    def _split_document(doc: Mapping[str, Any]) -> tuple[str | None, str | None, dict[str, Any]]:
        """Separate _id / _rev from the body and validate special members."""
        if not isinstance(doc, Mapping):
            raise StoreError(
                f"Document must be a JSON object, got {type(doc).__name__}",
                "bad_request",
            )
        body = dict(doc)
        doc_id = body.pop(_ID_FIELD, None)
        rev = body.pop(_REV_FIELD, None)

        if doc_id is not None and (not isinstance(doc_id, str) or not doc_id):
            raise StoreError("_id must be a non-empty string", "bad_request")
        if rev is not None and not isinstance(rev, str):
            raise StoreError("_rev must be a string", "bad_request")

        special = sorted(k for k in body if k.startswith("_"))
        if special:
            raise StoreError(
                f"Bad special document member: {special[0]}",
                "bad_special_member",
            )
        return doc_id, rev, body

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex.upper()

    @staticmethod
    def _make_rev(generation: int, body_json: str) -> str:
        digest = hashlib.md5(f"{generation}:{body_json}".encode("utf-8")).hexdigest()
        return f"{generation}-{digest}"

    @staticmethod
    def _row_to_doc(row: sqlite3.Row) -> dict[str, Any]:
        doc = json.loads(row["body"])
        doc[_ID_FIELD] = row["id"]
        doc[_REV_FIELD] = row["rev"]
        return doc

    # ── Synchronous implementations (run in worker threads) ──────────────

    def _put_sync(self, doc: Mapping[str, Any]) -> PutResult:
        doc_id, expected_rev, body = self._split_document(doc)
        try:
            body_json = json.dumps(body, ensure_ascii=False, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Document is not JSON-serialisable: {exc}", "bad_request") from exc

        if doc_id is None:
            doc_id = self._new_id()

        now = datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            current = conn.execute(
                "SELECT generation, rev FROM documents WHERE id=?", (doc_id,)
            ).fetchone()

            if expected_rev is not None:
                if current is None or current["rev"] != expected_rev:
                    raise ConflictError(f"Document update conflict for {doc_id!r}")

            generation = current["generation"] + 1 if current else 1
            rev = self._make_rev(generation, body_json)
            conn.execute(
                """
                INSERT INTO documents (id, generation, rev, body, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    generation = excluded.generation,
                    rev        = excluded.rev,
                    body       = excluded.body,
                    updated_at = excluded.updated_at
                """,
                (doc_id, generation, rev, body_json, now),
            )
            conn.commit()
        logger.debug("put %s -> %s", doc_id, rev)
        return PutResult(id=doc_id, rev=rev)

    def _get_sync(self, doc_id: str) -> dict[str, Any]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, rev, body FROM documents WHERE id=?", (doc_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"missing document {doc_id!r}")
        return self._row_to_doc(row)

    def _all_docs_sync(self, include_docs: bool) -> AllDocsResult:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, rev, body FROM documents ORDER BY id"
            ).fetchall()
        return AllDocsResult(
            total_rows=len(rows),
            rows=[
                DocRow(
                    id=r["id"],
                    rev=r["rev"],
                    doc=self._row_to_doc(r) if include_docs else None,
                )
                for r in rows
            ],
        )

    def _count_sync(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    async def _run(self, func, *args):
        """Run *func* in a worker thread, wrapping SQLite and encoding failures in StoreError."""
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            raise StoreError(f"{self._name}: {exc}") from exc
        except UnicodeError as exc:
            # lone surrogates survive json.loads but cannot be encoded as UTF-8
            raise StoreError(f"{self._name}: {exc}", "bad_request") from exc

    # ── Public API ────────────────────────────────────────────────────────

    async def put(self, doc: Mapping[str, Any]) -> PutResult:
        """
        Insert or update *doc*.

        The document is keyed by its ``_id`` member; when absent the store
        assigns a fresh identifier. A supplied ``_rev`` must match the stored
        revision, otherwise ConflictError is raised. Without ``_rev`` an
        existing document is overwritten.

        Returns:
            PutResult with the document id and its new revision.
        """
        return await self._run(self._put_sync, doc)

    async def get(self, doc_id: str) -> dict[str, Any]:
        """
        Retrieve a document by identifier, ``_id`` and ``_rev`` included.

        Raises:
            NotFoundError if no document has *doc_id*.
        """
        return await self._run(self._get_sync, doc_id)

    async def all_docs(self, include_docs: bool = False) -> AllDocsResult:
        """
        List every document, ordered by identifier.

        Args:
            include_docs: When True each row also carries the document body.
        """
        return await self._run(self._all_docs_sync, include_docs)

    async def info(self) -> dict[str, Any]:
        """Return ``{"db_name": ..., "doc_count": ...}``."""
        count = await self._run(self._count_sync)
        return {"db_name": self._name, "doc_count": count}
