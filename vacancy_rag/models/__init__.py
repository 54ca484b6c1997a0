"""vacancy-rag domain models -- re-exports all public model classes.

The models are organized by domain concern:
    - document.py -- uploaded documents, chunks, search hits, ingestion result
    - position.py -- position fields written by the synthesis step
"""

from __future__ import annotations

from vacancy_rag.models.document import (
    ChunkMatch,
    Document,
    DocumentChunk,
    DocumentStatus,
    IngestionResult,
)
from vacancy_rag.models.position import (
    QUESTION_COUNT,
    InterviewQuestion,
    Position,
    QuestionOutcome,
    QuestionSet,
    QuestionType,
    SummaryStatus,
    SynthesisReport,
)

__all__ = [
    "QUESTION_COUNT",
    "ChunkMatch",
    "Document",
    "DocumentChunk",
    "DocumentStatus",
    "IngestionResult",
    "InterviewQuestion",
    "Position",
    "QuestionOutcome",
    "QuestionSet",
    "QuestionType",
    "SummaryStatus",
    "SynthesisReport",
]
