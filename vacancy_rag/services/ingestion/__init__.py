"""Document ingestion pipeline for position knowledge.

Orchestrates: **extract -> chunk -> embed -> store -> synthesize**.

1. **Extract** (services/extraction/) -- PDF, DOCX, Markdown or plain
   text becomes one string.
2. **Chunk** (chunker.py / TextChunker) -- fixed-size overlapping
   character windows.
3. **Embed** (via IEmbeddingProvider) -- one vector per chunk, in order.
4. **Store** (via IVectorStoreProvider) -- each chunk is appended with an
   explicit sequence number as soon as it is embedded.
5. **Synthesize** (services/synthesis/) -- best-effort summary and
   interview questions written back onto the position.
"""

from vacancy_rag.services.ingestion.chunker import TextChunker
from vacancy_rag.services.ingestion.ingestion_service import IngestionService

__all__ = ["IngestionService", "TextChunker"]
