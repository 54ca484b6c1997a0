"""Abstract base class for LLM completion providers.

Defines the contract for the chat-completion backend used by the synthesis
step (position summary and interview-question generation).  Implementations
wrap the OpenAI API or a local Ollama server; call-sites stay
provider-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, OllamaLLMProvider
# Located in: vacancy_rag/providers/llm/
class ILLMProvider(ABC):
    """Contract for chat-completion services."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
        model: str | None = None,
        json_mode: bool = False,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system message that sets the model's persona.
        user_prompt:
            The user message containing the instruction and source text.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.
        model:
            Optional model override; the provider default is used otherwise.
        json_mode:
            Ask the backend to constrain output to a JSON object.  Callers
            must still validate the result.

        Returns
        -------
        str
            The model's text response, never empty.

        Raises
        ------
        vacancy_rag.utils.errors.SynthesisError
            If the API call fails, times out, or returns no content.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (no network call)."""

    @abstractmethod
    async def validate_credentials(self) -> bool:
        """Perform a lightweight API call to confirm the backend accepts requests."""
