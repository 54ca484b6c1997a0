"""SQLite repositories for Document rows and Position fields.

Both share one database file (SQLITE_DB_PATH) but own separate tables.
"""

from vacancy_rag.providers.repository.sqlite_document_repository import SQLiteDocumentRepository
from vacancy_rag.providers.repository.sqlite_position_repository import SQLitePositionRepository

__all__ = ["SQLiteDocumentRepository", "SQLitePositionRepository"]
