"""Position-side models written by the synthesis step.

A Position is an external entity; this package only reads its id and
overwrites two fields: the careers-page ``description`` and the structured
``phase2_questions`` set used by the interview flow.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Downstream consumers always expect exactly this many questions.
QUESTION_COUNT = 10


class QuestionType(str, Enum):  # noqa: UP042: StrEnum requires Python 3.11+
    """Category of an interview question."""

    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    SCENARIO = "scenario"
    MOTIVATION = "motivation"


class QuestionOutcome(str, Enum):  # noqa: UP042
    """Whether a question set came from the model or from the fallback template."""

    OK = "ok"
    FALLBACK = "fallback"


class SummaryStatus(str, Enum):  # noqa: UP042
    OK = "ok"
    FAILED = "failed"


class InterviewQuestion(BaseModel):
    """One structured interview question stored on a position."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Question key, q1 through q10.")
    question: str = Field(min_length=1)
    type: QuestionType = QuestionType.BEHAVIORAL
    skill: str = Field(default="general", min_length=1, description="Competency assessed.")


class QuestionSet(BaseModel):
    """Tagged result of question generation.

    ``outcome`` is ``OK`` when the model returned ten valid questions and
    ``FALLBACK`` when the generic template was used instead.  Either way
    ``questions`` holds exactly ten well-formed entries.
    """

    model_config = ConfigDict(frozen=True)

    outcome: QuestionOutcome
    questions: list[InterviewQuestion] = Field(
        min_length=QUESTION_COUNT, max_length=QUESTION_COUNT
    )
    error: str | None = Field(default=None, description="Why the fallback was used.")

    @property
    def is_fallback(self) -> bool:
        return self.outcome == QuestionOutcome.FALLBACK


class SynthesisReport(BaseModel):
    """Independent outcomes of the summary and question sub-steps."""

    model_config = ConfigDict(frozen=True)

    summary_status: SummaryStatus
    questions_status: QuestionOutcome
    summary: str | None = None


class Position(BaseModel):
    """The slice of a job position this package reads and writes."""

    model_config = ConfigDict(frozen=True)

    position_id: str
    title: str = ""
    description: str | None = None
    phase2_questions: list[InterviewQuestion] = Field(default_factory=list)
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
