"""Plain-text extraction from uploaded position documents.

Pattern: Strategy (document kind -> extractor function dispatch).

    PDF       -> PyMuPDF (fitz), page texts joined by newlines
    DOCX      -> python-docx, paragraph and table-cell texts in body order
    Markdown  -> markdown renders HTML, BeautifulSoup strips the tags
    other     -> lenient UTF-8 decode

The kind is chosen from the declared MIME type.  When the MIME type is
generic (``application/octet-stream`` or missing) the file suffix decides;
Markdown suffixes win over ``text/plain`` too, since browsers often report
``.md`` uploads that way.

Extraction is synchronous and CPU-bound.  The ingestion service runs it in
a worker thread under a timeout.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from pathlib import PurePath
from typing import Any

import docx
import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import markdown
import structlog
from bs4 import BeautifulSoup
from docx.table import Table

from vacancy_rag.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MARKDOWN_MIMES = frozenset({"text/markdown", "text/x-markdown"})

_GENERIC_MIMES = frozenset({"", "application/octet-stream", "binary/octet-stream"})

_SUFFIX_KINDS: dict[str, str] = {
    ".pdf": "pdf",
    ".docx": "docx",
    ".md": "markdown",
    ".markdown": "markdown",
}


def _normalise_mime(mime_type: str | None) -> str:
    """Lower-case and drop parameters: ``Text/Markdown; charset=utf-8`` -> ``text/markdown``."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


class TextExtractor:
    """Converts an uploaded buffer to plain text according to its type."""

    def __init__(self) -> None:
        self._strategies: dict[str, Callable[[bytes], str]] = {
            "pdf": self._extract_pdf,
            "docx": self._extract_docx,
            "markdown": self._extract_markdown,
            "text": self._extract_text,
        }

    def extract(self, buffer: bytes, mime_type: str, file_name: str = "") -> str:
        """Return the plain text of *buffer*.

        Parameters
        ----------
        buffer:
            Raw uploaded bytes.
        mime_type:
            Declared MIME type of the upload.
        file_name:
            Original file name; consulted only when the MIME type does not
            identify the format on its own.

        Raises
        ------
        ExtractionError
            If the document is corrupt, encrypted, or otherwise unreadable.
        """
        kind = self.resolve_kind(mime_type, file_name)
        text = self._strategies[kind](buffer)
        logger.info(
            "text_extracted",
            kind=kind,
            file_name=file_name,
            bytes=len(buffer),
            chars=len(text),
        )
        return text

    @staticmethod
    def resolve_kind(mime_type: str, file_name: str = "") -> str:
        """Map a MIME type (and, as a fallback, a suffix) to an extractor key."""
        mime = _normalise_mime(mime_type)
        if mime == PDF_MIME:
            return "pdf"
        if mime == DOCX_MIME:
            return "docx"
        if mime in MARKDOWN_MIMES:
            return "markdown"

        suffix_kind = _SUFFIX_KINDS.get(PurePath(file_name).suffix.lower()) if file_name else None
        if suffix_kind == "markdown" and mime in _GENERIC_MIMES | {"text/plain"}:
            return "markdown"
        if suffix_kind and mime in _GENERIC_MIMES:
            return suffix_kind
        return "text"

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_pdf(buffer: bytes) -> str:
        try:
            doc = fitz.open(stream=buffer, filetype="pdf")
        except Exception as exc:
            raise ExtractionError(
                message=f"Unreadable PDF: {exc}",
                provider_name="pymupdf",
            ) from exc

        try:
            if doc.needs_pass:
                raise ExtractionError(
                    message="PDF is password-protected",
                    provider_name="pymupdf",
                )
            if doc.page_count == 0:
                raise ExtractionError(message="PDF has no pages", provider_name="pymupdf")
            pages = [page.get_text("text") for page in doc]
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(
                message=f"Failed to read PDF pages: {exc}",
                provider_name="pymupdf",
            ) from exc
        finally:
            doc.close()

        return "\n".join(pages)

    @staticmethod
    def _extract_docx(buffer: bytes) -> str:
        try:
            document = docx.Document(io.BytesIO(buffer))
        except Exception as exc:
            raise ExtractionError(
                message=f"Invalid DOCX archive: {exc}",
                provider_name="python-docx",
            ) from exc
        return "\n".join(TextExtractor._docx_lines(document))

    @staticmethod
    def _docx_lines(container: Any) -> Iterator[str]:
        """Yield paragraph texts in body order, descending into table cells.

        A merged cell is listed once per grid column it spans, so each
        underlying cell element is read only once per table.
        """
        for block in container.iter_inner_content():
            if isinstance(block, Table):
                seen: set[Any] = set()
                for row in block.rows:
                    for cell in row.cells:
                        if cell._tc in seen:
                            continue
                        seen.add(cell._tc)
                        yield from TextExtractor._docx_lines(cell)
            else:
                yield block.text

    @staticmethod
    def _extract_markdown(buffer: bytes) -> str:
        html = markdown.markdown(buffer.decode("utf-8", errors="replace"))
        return BeautifulSoup(html, "html.parser").get_text()

    @staticmethod
    def _extract_text(buffer: bytes) -> str:
        return buffer.decode("utf-8", errors="replace")
