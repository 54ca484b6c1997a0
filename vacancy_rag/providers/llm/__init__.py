"""LLM provider implementations used for position synthesis."""

from vacancy_rag.providers.llm.ollama_provider import OllamaLLMProvider
from vacancy_rag.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OllamaLLMProvider", "OpenAILLMProvider"]
