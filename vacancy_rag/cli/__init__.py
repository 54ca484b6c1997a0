"""Command-line tools for vacancy-rag.

- ``python -m vacancy_rag.cli`` -- create positions, ingest documents,
  search chunks, and inspect documents and interview questions.

Heavy imports (providers, ChromaDB) are deferred into the handlers so
``--help`` stays fast.
"""
