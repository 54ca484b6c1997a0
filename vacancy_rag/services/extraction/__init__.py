"""Plain-text extraction for uploaded position documents."""

from vacancy_rag.services.extraction.text_extractor import TextExtractor

__all__ = ["TextExtractor"]
