"""Abstract base class for the narrow Position write interface.

Position CRUD lives elsewhere; the synthesis step only needs to overwrite
the description and the interview question set of an existing position.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vacancy_rag.models.position import InterviewQuestion, Position


# Concrete implementation: SQLitePositionRepository (vacancy_rag/providers/repository/)
class IPositionRepository(ABC):
    """Contract for reading and updating Position records."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables if they don't exist."""

    @abstractmethod
    async def update_position(
        self,
        position_id: str,
        description: str | None = None,
        phase2_questions: list[InterviewQuestion] | None = None,
    ) -> Position:
        """Overwrite the supplied fields of an existing position.

        Fields passed as ``None`` are left untouched.

        Raises
        ------
        vacancy_rag.utils.errors.RepositoryError
            If the position doesn't exist or the write fails.
        """

    @abstractmethod
    async def get_position(self, position_id: str) -> Position | None:
        """Return the position, or ``None`` if it doesn't exist."""

    @abstractmethod
    async def upsert_position(self, position_id: str, title: str = "") -> Position:
        """Create the position if missing, otherwise update its title."""
