"""Fixed-size character chunking with overlapping windows.

Splits extracted document text into windows of ``chunk_size`` characters
where consecutive windows share ``overlap`` characters, so that a sentence
straddling a boundary appears whole in at least one chunk.

Window *i* starts at ``i * (chunk_size - overlap)``.  Chunking stops after
the first window that reaches the end of the text: any later window would
be a strict suffix of it.  With the defaults a 2,500-character text gives
windows ``[0, 1000)``, ``[800, 1800)`` and ``[1600, 2500)``.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(logger_name=__name__)


class TextChunker:
    """Splits text into overlapping fixed-size character windows.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk (default 1000).
    overlap:
        Characters shared by consecutive chunks (default 200).  Must satisfy
        ``0 <= overlap < chunk_size``.
    """

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= overlap < chunk_size:
            raise ValueError(
                f"overlap must be >= 0 and < chunk_size ({chunk_size}), got {overlap}"
            )
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    def split(self, text: str) -> list[str]:
        """Split *text* into overlapping windows.

        Empty input returns an empty list; text no longer than
        ``chunk_size`` comes back as a single chunk.
        """
        if not text:
            return []

        step = self._chunk_size - self._overlap
        length = len(text)
        chunks: list[str] = []
        start = 0
        while start < length:
            end = min(length, start + self._chunk_size)
            chunks.append(text[start:end])
            if end == length:
                break
            start += step

        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            text_chars=length,
            chunk_size=self._chunk_size,
            overlap=self._overlap,
        )
        return chunks
