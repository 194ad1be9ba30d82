"""Application layer for the document store.

The application layer orchestrates domain services and storage adapters
to fulfill the store's use cases.

Exports:
    - DocumentStore: Entry point bound to one root directory
    - DatabaseManager: Database and table lifecycle
    - RecordRepository: CRUD over one table's records
    - UpdateResult: Outcome of RecordRepository.update_by_id
"""

from docstore.application.database_manager import DatabaseManager
from docstore.application.document_store import DocumentStore
from docstore.application.record_repository import RecordRepository, UpdateResult

__all__ = [
    "DocumentStore",
    "DatabaseManager",
    "RecordRepository",
    "UpdateResult",
]
