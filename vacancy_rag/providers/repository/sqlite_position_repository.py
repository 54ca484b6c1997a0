"""SQLite-backed position repository.

Stores the two position fields the synthesis step writes (description and
the interview question set) plus the title.  Questions are kept as a JSON
array in a single TEXT column.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from vacancy_rag.interfaces.position_repository import IPositionRepository
from vacancy_rag.models.position import InterviewQuestion, Position
from vacancy_rag.utils.errors import RepositoryError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/vacancy_rag.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS positions (
    position_id       TEXT PRIMARY KEY,
    title             TEXT NOT NULL DEFAULT '',
    description       TEXT,
    phase2_questions  TEXT NOT NULL DEFAULT '[]',
    updated_at        TEXT NOT NULL
);
"""

_UPSERT_SQL = """\
INSERT INTO positions (position_id, title, updated_at)
VALUES (?, ?, ?)
ON CONFLICT(position_id)
DO UPDATE SET title      = excluded.title,
              updated_at = excluded.updated_at;
"""

_SELECT_SQL = """\
SELECT position_id, title, description, phase2_questions, updated_at
FROM positions
WHERE position_id = ?;
"""


class SQLitePositionRepository(IPositionRepository):
    """SQLite-backed Position persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the positions table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Failed to initialise positions table: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("position_db_initialized", path=str(self._db_path))

    async def upsert_position(self, position_id: str, title: str = "") -> Position:
        now = datetime.now(tz=timezone.utc).isoformat()  # noqa: UP017
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_UPSERT_SQL, (position_id, title, now))
                await db.commit()
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Position upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        position = await self.get_position(position_id)
        if position is None:
            raise RepositoryError(
                message=f"Position {position_id} vanished after upsert",
                provider_name=self.get_provider_name(),
            )
        logger.info("position_upserted", position_id=position_id)
        return position

    async def update_position(
        self,
        position_id: str,
        description: str | None = None,
        phase2_questions: list[InterviewQuestion] | None = None,
    ) -> Position:
        assignments: list[str] = []
        params: list[Any] = []
        if description is not None:
            assignments.append("description = ?")
            params.append(description)
        if phase2_questions is not None:
            assignments.append("phase2_questions = ?")
            params.append(json.dumps([q.model_dump(mode="json") for q in phase2_questions]))
        assignments.append("updated_at = ?")
        params.append(datetime.now(tz=timezone.utc).isoformat())  # noqa: UP017

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    f"UPDATE positions SET {', '.join(assignments)} WHERE position_id = ?",
                    (*params, position_id),
                )
                await db.commit()
                updated = cursor.rowcount
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Position update failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if updated == 0:
            raise RepositoryError(
                message=f"Position {position_id} not found",
                provider_name=self.get_provider_name(),
            )

        logger.info(
            "position_updated",
            position_id=position_id,
            description_set=description is not None,
            questions_set=phase2_questions is not None,
        )
        position = await self.get_position(position_id)
        if position is None:
            raise RepositoryError(
                message=f"Position {position_id} not found",
                provider_name=self.get_provider_name(),
            )
        return position

    async def get_position(self, position_id: str) -> Position | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_SQL, (position_id,))
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise RepositoryError(
                message=f"Position read failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if row is None:
            return None
        data = dict(row)
        return Position(
            position_id=data["position_id"],
            title=data["title"] or "",
            description=data["description"],
            phase2_questions=[
                InterviewQuestion(**q) for q in json.loads(data["phase2_questions"] or "[]")
            ],
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    def get_provider_name(self) -> str:
        return "sqlite_positions"
