"""vacancy-rag: document ingestion, chunk retrieval and interview-question
synthesis for job positions."""

__version__ = "0.1.0"
