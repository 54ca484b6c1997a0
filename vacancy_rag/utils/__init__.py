"""Utility modules for vacancy-rag.

- **errors** -- Domain exception hierarchy rooted at VacancyRAGError; each
  pipeline stage raises its own subclass so callers can tell a failed
  upload apart from a failed summary.
- **logging** -- structlog setup: coloured console output in development,
  JSON lines in production, context-bound pipeline ids on every event.
"""

from vacancy_rag.utils.errors import (
    ConfigurationError,
    EmbeddingError,
    EmbeddingModelMismatchError,
    ExtractionError,
    RepositoryError,
    SynthesisError,
    VacancyRAGError,
)
from vacancy_rag.utils.logging import configure_logging

__all__ = [
    "ConfigurationError",
    "EmbeddingError",
    "EmbeddingModelMismatchError",
    "ExtractionError",
    "RepositoryError",
    "SynthesisError",
    "VacancyRAGError",
    "configure_logging",
]
