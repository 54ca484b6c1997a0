"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
When a custom ``openai_base_url`` is configured (e.g. TogetherAI, Groq),
the client points at that URL instead of the default OpenAI endpoint.
"""

from __future__ import annotations

import openai
import structlog

from vacancy_rag.config.settings import Settings
from vacancy_rag.interfaces.llm_provider import ILLMProvider
from vacancy_rag.utils.errors import SynthesisError

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API.

    The default model is ``summary_model`` (``gpt-4o-mini``); callers pass
    ``model=`` to use a stronger model for a specific call, as the
    question generator does with ``questions_model``.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.openai_api_key
        self._timeout = settings.provider_timeout_seconds

        self._client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(self._timeout, connect=5.0),
            "max_retries": settings.provider_max_retries,
        }
        if settings.openai_base_url:
            self._client_kwargs["base_url"] = settings.openai_base_url

        self._client: openai.AsyncOpenAI | None = None
        self._default_model = settings.summary_model or "gpt-4o-mini"
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

    def _get_client(self) -> openai.AsyncOpenAI:
        """Create the API client on first use; the SDK rejects an empty key."""
        if self._client is None:
            if not self._api_key:
                raise SynthesisError(
                    message=f"{self._provider_label} API key is not configured",
                    provider_name=self.get_provider_name(),
                )
            self._client = openai.AsyncOpenAI(**self._client_kwargs)
        return self._client

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
        model: str | None = None,
        json_mode: bool = False,
    ) -> str:
        """Generate a text completion via the OpenAI-compatible chat API."""
        model_name = model or self._default_model
        request: dict = {
            "model": model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        client = self._get_client()
        try:
            response = await client.chat.completions.create(**request)
        except openai.APITimeoutError as exc:
            raise SynthesisError(
                message=f"{self._provider_label} timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise SynthesisError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise SynthesisError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=model_name,
            provider=self._provider_label,
            json_mode=json_mode,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """Try listing models to verify the API key works."""
        if not self.is_available():
            return False
        try:
            await self._get_client().models.list()
            return True
        except openai.APIError:
            return False

    def get_provider_name(self) -> str:
        return self._provider_label
