"""Shared pytest fixtures for the vacancy-rag test suite."""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path

import pytest
import structlog
import structlog.testing

from vacancy_rag.config.settings import Settings
from vacancy_rag.interfaces.embedding_provider import IEmbeddingProvider
from vacancy_rag.interfaces.llm_provider import ILLMProvider
from vacancy_rag.utils.errors import EmbeddingError, SynthesisError

_EMBEDDING_DIM = 512
_TOKEN_RE = re.compile(r"\w+")


# ---------------------------------------------------------------------------
# Deterministic fakes
# ---------------------------------------------------------------------------


def _bag_of_words_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Hash each lower-cased word into one of *dim* buckets and count.

    Texts sharing many words end up close in cosine space, which is enough
    to make nearest-neighbour assertions meaningful.
    """
    vector = [0.0] * dim
    for token in _TOKEN_RE.findall(text.lower()):
        bucket = int(hashlib.md5(token.encode("utf-8")).hexdigest(), 16) % dim
        vector[bucket] += 1.0
    if not any(vector):
        vector[0] = 1.0
    magnitude = sum(v * v for v in vector) ** 0.5
    return [v / magnitude for v in vector]


class FakeEmbeddingProvider(IEmbeddingProvider):
    """Bag-of-words embedding provider that can be told to fail on a given call.

    Parameters
    ----------
    fail_on_call:
        1-based index of the ``embed_single`` call that raises
        :class:`EmbeddingError`; ``None`` never fails.
    """

    def __init__(
        self,
        model_name: str = "fake-bow-512",
        fail_on_call: int | None = None,
        dim: int = _EMBEDDING_DIM,
    ) -> None:
        self._model_name = model_name
        self._fail_on_call = fail_on_call
        self._dim = dim
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_single(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise EmbeddingError(
                message="simulated embedding outage",
                provider_name=self.get_provider_name(),
            )
        return _bag_of_words_vector(text, self._dim)

    def get_dimension(self) -> int:
        return self._dim

    def get_model_name(self) -> str:
        return self._model_name

    def get_provider_name(self) -> str:
        return "fake-embedding"

    def is_available(self) -> bool:
        return True


class ScriptedLLM(ILLMProvider):
    """LLM fake returning canned summary / question responses.

    JSON-mode calls are question requests; everything else is a summary
    request.  Passing an exception instance makes that call raise it.
    """

    def __init__(
        self,
        summary: str | Exception = "A concise careers-page summary.",
        questions: str | Exception | None = None,
    ) -> None:
        self._summary = summary
        self._questions = questions if questions is not None else make_questions_json()
        self.calls: list[dict] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
        model: str | None = None,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "model": model,
                "json_mode": json_mode,
            }
        )
        response = self._questions if json_mode else self._summary
        if isinstance(response, Exception):
            raise response
        return response

    def get_provider_name(self) -> str:
        return "scripted"

    def is_available(self) -> bool:
        return True

    async def validate_credentials(self) -> bool:
        return True


def make_questions_json(count: int = 10, wrap: bool = True) -> str:
    """Build a well-formed question payload with *count* entries."""
    types = ["technical", "behavioral", "scenario", "motivation"]
    questions = [
        {
            "id": f"q{n}",
            "question": f"Tell us about challenge number {n}.",
            "type": types[(n - 1) % len(types)],
            "skill": f"skill-{n}",
        }
        for n in range(1, count + 1)
    ]
    return json.dumps({"questions": questions} if wrap else questions)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing every store at a temporary directory."""
    return Settings(
        openai_api_key="",
        openai_base_url="",
        openai_embedding_model="",
        vector_store="memory",
        chromadb_persist_dir=str(tmp_path / "chromadb"),
        sqlite_db_path=str(tmp_path / "vacancy_rag.db"),
        app_env="test",
    )


@pytest.fixture
def fake_embedding() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def scripted_llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def failing_llm() -> ScriptedLLM:
    err = SynthesisError(message="simulated outage", provider_name="scripted")
    return ScriptedLLM(summary=err, questions=err)


@pytest.fixture
def log_entries():
    """Capture structlog events, with context-bound variables merged in."""
    capture = structlog.testing.LogCapture()
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])
    yield capture.entries
    structlog.reset_defaults()
