"""Position synthesis: careers-page summary and structured interview questions."""

from vacancy_rag.services.synthesis.question_parser import (
    build_fallback_questions,
    parse_questions,
)
from vacancy_rag.services.synthesis.synthesizer import PositionSynthesizer

__all__ = ["PositionSynthesizer", "build_fallback_questions", "parse_questions"]
