"""Parsing of LLM interview-question output into a :class:`QuestionSet`.

Model output is untrusted.  Accepted shapes:

1. A bare JSON array of question objects.
2. A JSON object whose ``questions`` key holds that array.
3. Either of the above wrapped in markdown code fences or surrounded by
   prose.

Anything else, or any count other than ten, yields the generic fallback set.
Parsing never raises.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog

from vacancy_rag.models.position import (
    QUESTION_COUNT,
    InterviewQuestion,
    QuestionOutcome,
    QuestionSet,
    QuestionType,
)

logger = structlog.get_logger(logger_name=__name__)

MISSING_QUESTION_TEXT = "No question text provided"
DEFAULT_SKILL = "general"

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)
_QUESTION_TYPES = {t.value for t in QuestionType}


class _InvalidQuestions(ValueError):
    pass


def build_fallback_questions(error: str | None = None) -> QuestionSet:
    """Return ten generic behavioral questions."""
    questions = [
        InterviewQuestion(
            id=f"q{n}",
            question=f"Question {n}: Please describe your experience related to this position.",
            type=QuestionType.BEHAVIORAL,
            skill=DEFAULT_SKILL,
        )
        for n in range(1, QUESTION_COUNT + 1)
    ]
    return QuestionSet(outcome=QuestionOutcome.FALLBACK, questions=questions, error=error)


def parse_questions(raw: str | None) -> QuestionSet:
    """Parse *raw* model output into exactly ten questions, or the fallback set."""
    try:
        entries = _extract_entries(raw or "")
        if len(entries) != QUESTION_COUNT:
            raise _InvalidQuestions(
                f"expected {QUESTION_COUNT} questions, got {len(entries)}"
            )
        questions = [_normalise(entry, idx) for idx, entry in enumerate(entries)]
    except (_InvalidQuestions, json.JSONDecodeError) as exc:
        logger.warning(
            "question_parse_failed",
            error=str(exc),
            raw_preview=(raw or "")[:200],
        )
        return build_fallback_questions(error=str(exc))

    return QuestionSet(outcome=QuestionOutcome.OK, questions=questions)


def _extract_entries(raw: str) -> list[Any]:
    cleaned = raw.strip()
    if not cleaned:
        raise _InvalidQuestions("empty response")

    payload = json.loads(_isolate_json(cleaned))

    if isinstance(payload, dict):
        payload = payload.get("questions")
    if not isinstance(payload, list):
        raise _InvalidQuestions("no questions array in response")
    return payload


def _isolate_json(text: str) -> str:
    """Strip code fences or surrounding prose, keeping the outermost JSON value."""
    fence_match = _FENCE_RE.search(text)
    if fence_match:
        return fence_match.group(1).strip()

    starts = [i for i in (text.find("["), text.find("{")) if i != -1]
    if not starts:
        raise _InvalidQuestions("no JSON found in response")
    start = min(starts)
    end = text.rfind("]" if text[start] == "[" else "}")
    if end <= start:
        raise _InvalidQuestions("unterminated JSON in response")
    return text[start : end + 1]


def _normalise(entry: Any, idx: int) -> InterviewQuestion:
    if not isinstance(entry, dict):
        raise _InvalidQuestions(f"question {idx + 1} is not an object")

    question_type = str(entry.get("type") or "").strip().lower()
    skill = str(entry.get("skill") or "").strip()
    text = str(entry.get("question") or "").strip()

    if question_type not in _QUESTION_TYPES:
        question_type = QuestionType.BEHAVIORAL.value

    return InterviewQuestion(
        id=str(entry.get("id") or f"q{idx + 1}"),
        question=text or MISSING_QUESTION_TEXT,
        type=QuestionType(question_type),
        skill=skill or DEFAULT_SKILL,
    )
