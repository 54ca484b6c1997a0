"""Best-effort position synthesis: careers-page summary + interview questions.

After a document's chunks are stored, the synthesizer asks the LLM for two
independent things, concurrently:

1. a short careers-page summary (``summary_model``), and
2. ten structured interview questions (``questions_model``, JSON mode).

Both land on the Position in a single write.  A failed summary leaves the
existing description untouched; failed questions are replaced by the
generic fallback set, so the position always ends up with ten questions.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from vacancy_rag.models.position import QuestionSet, SummaryStatus, SynthesisReport
from vacancy_rag.services.synthesis.prompts import (
    QUESTIONS_SYSTEM_PROMPT,
    QUESTIONS_USER_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_PROMPT,
)
from vacancy_rag.services.synthesis.question_parser import (
    build_fallback_questions,
    parse_questions,
)
from vacancy_rag.utils.errors import SynthesisError

if TYPE_CHECKING:
    from vacancy_rag.config.settings import Settings
    from vacancy_rag.interfaces.llm_provider import ILLMProvider
    from vacancy_rag.interfaces.position_repository import IPositionRepository

logger = structlog.get_logger(logger_name=__name__)

_SUMMARY_TEMPERATURE = 0.5
_QUESTIONS_TEMPERATURE = 0.7


class PositionSynthesizer:
    """Generates and stores a position's summary and interview questions.

    Parameters
    ----------
    llm:
        Completion provider (injected, swappable).
    position_repository:
        Receives the single ``update_position`` write.
    settings:
        Supplies model names, source-text cap and token budgets.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        position_repository: IPositionRepository,
        settings: Settings,
    ) -> None:
        self._llm = llm
        self._positions = position_repository
        self._summary_model = settings.summary_model
        self._questions_model = settings.questions_model
        self._source_chars = settings.synthesis_source_chars
        self._summary_max_tokens = settings.summary_max_tokens
        self._questions_max_tokens = settings.questions_max_tokens

    async def summarize(self, text: str) -> str | None:
        """Return a careers-page summary of *text*, or ``None`` on failure."""
        try:
            summary = await self._llm.complete(
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                user_prompt=SUMMARY_USER_PROMPT.format(text=text[: self._source_chars]),
                temperature=_SUMMARY_TEMPERATURE,
                max_tokens=self._summary_max_tokens,
                model=self._summary_model,
            )
        except SynthesisError as exc:
            logger.warning("summary_generation_failed", error=str(exc))
            return None

        summary = summary.strip()
        return summary or None

    async def generate_questions(self, text: str) -> QuestionSet:
        """Return ten interview questions for *text*; the fallback set on any failure."""
        try:
            raw = await self._llm.complete(
                system_prompt=QUESTIONS_SYSTEM_PROMPT,
                user_prompt=QUESTIONS_USER_PROMPT.format(text=text[: self._source_chars]),
                temperature=_QUESTIONS_TEMPERATURE,
                max_tokens=self._questions_max_tokens,
                model=self._questions_model,
                json_mode=True,
            )
        except SynthesisError as exc:
            logger.warning("question_generation_failed", error=str(exc))
            return build_fallback_questions(error=str(exc))

        return parse_questions(raw)

    async def synthesize(self, position_id: str, text: str) -> SynthesisReport:
        """Run both generations concurrently and write the results to the position.

        Raises
        ------
        vacancy_rag.utils.errors.RepositoryError
            If the position write fails.
        """
        with structlog.contextvars.bound_contextvars(position_id=position_id):
            summary, question_set = await asyncio.gather(
                self.summarize(text),
                self.generate_questions(text),
            )

            await self._positions.update_position(
                position_id,
                description=summary or None,
                phase2_questions=question_set.questions,
            )

            report = SynthesisReport(
                summary_status=SummaryStatus.OK if summary else SummaryStatus.FAILED,
                questions_status=question_set.outcome,
                summary=summary,
            )
            logger.info(
                "position_synthesized",
                summary_status=report.summary_status.value,
                questions_status=report.questions_status.value,
            )
        return report
