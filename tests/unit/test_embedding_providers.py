"""Unit tests for embedding provider adapters -- OpenAI, Nomic."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from vacancy_rag.config.settings import Settings
from vacancy_rag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from vacancy_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from vacancy_rag.utils.errors import EmbeddingError

_OPENAI_PATCH = "vacancy_rag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI"


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_embedding_model": "",
        "ollama_base_url": "http://localhost:11434",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _mock_client(*vectors: list[float]) -> AsyncMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=v) for v in vectors]
    response.usage = MagicMock(total_tokens=12)
    client = AsyncMock()
    client.embeddings.create = AsyncMock(return_value=response)
    return client


# ======================================================================
# OpenAI Embedding Provider
# ======================================================================


class TestOpenAIEmbeddingProvider:
    def test_defaults(self) -> None:
        provider = OpenAIEmbeddingProvider(_settings())
        assert provider.get_model_name() == "text-embedding-3-small"
        assert provider.get_dimension() == 1536
        assert provider.get_provider_name() == "openai_embedding"

    def test_compatible_label_and_known_dimension(self) -> None:
        provider = OpenAIEmbeddingProvider(
            _settings(
                openai_base_url="https://api.together.xyz/v1",
                openai_embedding_model="BAAI/bge-base-en-v1.5",
            )
        )
        assert provider.get_provider_name() == "openai-compatible_embedding"
        assert provider.get_dimension() == 768

    def test_is_available(self) -> None:
        assert OpenAIEmbeddingProvider(_settings()).is_available() is True
        assert OpenAIEmbeddingProvider(_settings(openai_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_embed_success(self) -> None:
        client = _mock_client([0.1] * 1536, [0.2] * 1536)
        with patch(_OPENAI_PATCH, return_value=client):
            provider = OpenAIEmbeddingProvider(_settings())
            result = await provider.embed(["hello", "world"])

        assert len(result) == 2
        assert result[1][0] == 0.2
        kwargs = client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "text-embedding-3-small"
        assert kwargs["input"] == ["hello", "world"]

    @pytest.mark.asyncio
    async def test_embed_empty_skips_api(self) -> None:
        client = _mock_client()
        with patch(_OPENAI_PATCH, return_value=client):
            provider = OpenAIEmbeddingProvider(_settings())
            assert await provider.embed([]) == []
        client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_long_input_truncated(self) -> None:
        client = _mock_client([0.5] * 1536)
        with patch(_OPENAI_PATCH, return_value=client):
            provider = OpenAIEmbeddingProvider(_settings(embedding_max_chars=100))
            await provider.embed_single("x" * 5000)

        sent = client.embeddings.create.call_args.kwargs["input"]
        assert sent == ["x" * 100]

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        client = AsyncMock()
        client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="boom", request=MagicMock(), body=None)
        )
        with patch(_OPENAI_PATCH, return_value=client):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError) as exc_info:
                await provider.embed_single("hello")

        assert exc_info.value.provider_name == "openai_embedding"

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self) -> None:
        client = AsyncMock()
        client.embeddings.create = AsyncMock(
            side_effect=openai.APITimeoutError(request=MagicMock())
        )
        with patch(_OPENAI_PATCH, return_value=client):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError, match="timed out"):
                await provider.embed(["hello"])

    @pytest.mark.asyncio
    async def test_vector_count_mismatch(self) -> None:
        client = _mock_client([0.1] * 1536)
        with patch(_OPENAI_PATCH, return_value=client):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError, match="1 vectors for 2 inputs"):
                await provider.embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_without_key_no_client_is_built(self) -> None:
        with patch(_OPENAI_PATCH) as ctor:
            provider = OpenAIEmbeddingProvider(_settings(openai_api_key=""))
            assert provider.get_dimension() == 1536
            with pytest.raises(EmbeddingError, match="not configured"):
                await provider.embed_single("hello")
        ctor.assert_not_called()


# ======================================================================
# Nomic Embedding Provider
# ======================================================================


class TestNomicEmbeddingProvider:
    def test_identity(self) -> None:
        provider = NomicEmbeddingProvider(_settings())
        assert provider.get_provider_name() == "nomic_embedding"
        assert provider.get_model_name() == "nomic-embed-text"
        assert provider.get_dimension() == 768

    def test_is_available_true(self) -> None:
        provider = NomicEmbeddingProvider(_settings())
        with patch(
            "vacancy_rag.providers.embedding.nomic_embedding_provider.httpx.get",
            return_value=MagicMock(status_code=200),
        ):
            assert provider.is_available() is True

    def test_is_available_connect_error(self) -> None:
        provider = NomicEmbeddingProvider(_settings())
        with patch(
            "vacancy_rag.providers.embedding.nomic_embedding_provider.httpx.get",
            side_effect=httpx.ConnectError("refused"),
        ):
            assert provider.is_available() is False

    @pytest.mark.asyncio
    async def test_embed_single_caps_input(self) -> None:
        client = _mock_client([0.3] * 768)
        with patch(
            "vacancy_rag.providers.embedding.nomic_embedding_provider.openai.AsyncOpenAI",
            return_value=client,
        ) as ctor:
            provider = NomicEmbeddingProvider(_settings())
            vector = await provider.embed_single("y" * 20000)

        assert len(vector) == 768
        assert ctor.call_args.kwargs["base_url"] == "http://localhost:11434/v1"
        assert client.embeddings.create.call_args.kwargs["input"] == ["y" * 6000]

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        client = AsyncMock()
        client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="down", request=MagicMock(), body=None)
        )
        with patch(
            "vacancy_rag.providers.embedding.nomic_embedding_provider.openai.AsyncOpenAI",
            return_value=client,
        ):
            provider = NomicEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError):
                await provider.embed(["text"])
