"""Custom exception hierarchy for vacancy-rag.

All application exceptions inherit from :class:`VacancyRAGError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "chromadb", "sqlite_documents") caused the
failure.

The hierarchy follows the ingestion pipeline stages:

    VacancyRAGError  (base)
    +-- ExtractionError              (unreadable / unsupported document bytes)
    +-- EmbeddingError               (embedding provider or network failure)
    |   +-- EmbeddingModelMismatchError  (stored vectors from another model)
    +-- SynthesisError               (summary / question LLM call failed)
    +-- RepositoryError              (document, chunk or position persistence)
    +-- ConfigurationError           (startup / missing config)

Extraction and embedding errors are reported to the ingestion caller.
Synthesis errors are always recovered locally with a fallback.
"""


class VacancyRAGError(Exception):
    """Base exception for all vacancy-rag errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    scanning, e.g. ``[openai_embedding] API error: ...``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class ExtractionError(VacancyRAGError):
    """Raised when text cannot be extracted from an uploaded document.

    Covers corrupt or encrypted PDFs, invalid DOCX archives, documents with
    no extractable text, and extraction timeouts.  No Document row exists
    when this is raised from ingestion.
    """

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(VacancyRAGError):
    """Raised when the embedding provider fails for a chunk or a query."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingModelMismatchError(EmbeddingError):
    """Raised when stored vectors were produced by a different embedding model.

    Comparing vectors across models (or dimensions) yields meaningless
    distances, so the store refuses to start instead.
    """

    def __init__(
        self,
        message: str = "Embedding model mismatch between corpus and provider",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Synthesis errors
# ---------------------------------------------------------------------------

class SynthesisError(VacancyRAGError):
    """Raised when an LLM completion call fails or returns nothing usable.

    The synthesis step catches this and falls back (description untouched,
    or 10 generic interview questions).
    """

    def __init__(
        self,
        message: str = "LLM completion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Persistence / configuration errors
# ---------------------------------------------------------------------------

class RepositoryError(VacancyRAGError):
    """Raised when a document, chunk, or position persistence operation fails."""

    def __init__(
        self,
        message: str = "Repository operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(VacancyRAGError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
