"""SQLite-backed document repository.

Persists Document rows (bounded text preview, status, chunk count,
training params) to a local SQLite database.  Uses ``aiosqlite`` for async
I/O and opens one connection per call.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from vacancy_rag.interfaces.document_repository import IDocumentRepository
from vacancy_rag.models.document import Document, DocumentStatus
from vacancy_rag.utils.errors import RepositoryError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/vacancy_rag.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS position_documents (
    document_id      TEXT PRIMARY KEY,
    position_id      TEXT NOT NULL,
    file_name        TEXT NOT NULL,
    file_type        TEXT NOT NULL,
    content          TEXT NOT NULL DEFAULT '',
    chunk_count      INTEGER,
    status           TEXT NOT NULL DEFAULT 'processing',
    training_params  TEXT,
    uploaded_at      TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_position ON position_documents(position_id);",
]

_INSERT_SQL = """\
INSERT INTO position_documents
    (document_id, position_id, file_name, file_type, content, status, uploaded_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_COLUMNS = (
    "SELECT document_id, position_id, file_name, file_type, content, chunk_count, "
    "status, training_params, uploaded_at, updated_at FROM position_documents"
)


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()  # noqa: UP017


class SQLiteDocumentRepository(IDocumentRepository):
    """SQLite-backed Document persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the documents table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Failed to initialise document table: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("document_db_initialized", path=str(self._db_path))

    async def create_document(
        self,
        position_id: str,
        file_name: str,
        mime_type: str,
        preview_text: str,
    ) -> Document:
        document_id = str(uuid.uuid4())
        now = _now_iso()
        await self._execute(
            _INSERT_SQL,
            (
                document_id,
                position_id,
                file_name,
                mime_type,
                preview_text,
                DocumentStatus.PROCESSING.value,
                now,
                now,
            ),
        )
        logger.info(
            "document_created",
            document_id=document_id,
            position_id=position_id,
            file_type=mime_type,
            preview_chars=len(preview_text),
        )
        document = await self.get_document(document_id)
        if document is None:
            raise RepositoryError(
                message=f"Document {document_id} vanished after insert",
                provider_name=self.get_provider_name(),
            )
        return document

    async def set_chunk_count(self, document_id: str, count: int) -> None:
        await self._update(
            document_id,
            "chunk_count = ?, status = ?",
            (count, DocumentStatus.READY.value),
        )
        logger.info("document_chunk_count_set", document_id=document_id, chunk_count=count)

    async def mark_partial(self, document_id: str) -> None:
        await self._update(document_id, "status = ?", (DocumentStatus.PARTIAL.value,))
        logger.warning("document_marked_partial", document_id=document_id)

    async def set_training_params(self, document_id: str, params: dict[str, Any]) -> None:
        if not params:
            return
        await self._update(document_id, "training_params = ?", (json.dumps(params),))

    async def get_document(self, document_id: str) -> Document | None:
        rows = await self._fetch(f"{_SELECT_COLUMNS} WHERE document_id = ?", (document_id,))
        return self._row_to_document(rows[0]) if rows else None

    async def list_documents(self, position_id: str) -> list[Document]:
        rows = await self._fetch(
            f"{_SELECT_COLUMNS} WHERE position_id = ? ORDER BY uploaded_at DESC, rowid DESC",
            (position_id,),
        )
        return [self._row_to_document(r) for r in rows]

    def get_provider_name(self) -> str:
        return "sqlite_documents"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _update(self, document_id: str, assignments: str, params: tuple) -> None:
        rowcount = await self._execute(
            f"UPDATE position_documents SET {assignments}, updated_at = ? WHERE document_id = ?",
            (*params, _now_iso(), document_id),
        )
        if rowcount == 0:
            raise RepositoryError(
                message=f"Document {document_id} not found",
                provider_name=self.get_provider_name(),
            )

    async def _execute(self, sql: str, params: tuple) -> int:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(sql, params)
                await db.commit()
                return cursor.rowcount
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Document write failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def _fetch(self, sql: str, params: tuple) -> list[dict[str, Any]]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Document read failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [dict(r) for r in rows]

    @staticmethod
    def _row_to_document(row: dict[str, Any]) -> Document:
        params = row.get("training_params")
        return Document(
            document_id=row["document_id"],
            position_id=row["position_id"],
            file_name=row["file_name"],
            file_type=row["file_type"],
            content=row["content"] or "",
            chunk_count=row["chunk_count"],
            status=DocumentStatus(row["status"]),
            training_params=json.loads(params) if params else None,
            uploaded_at=datetime.fromisoformat(row["uploaded_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
