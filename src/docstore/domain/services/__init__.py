"""Domain services for the document store.

Services implement the storage rules that do not belong to a single
record: where things live on disk, how a table is serialized, and how
concurrent access to a table is serialized.
"""

from docstore.domain.services.path_resolver import (
    resolve_database_path,
    resolve_root,
    resolve_table_location,
    resolve_table_path,
    validate_name,
)
from docstore.domain.services.table_codec import TableCodec
from docstore.domain.services.table_lock_manager import TableLockManager, get_lock_manager

__all__ = [
    "TableCodec",
    "TableLockManager",
    "get_lock_manager",
    "resolve_database_path",
    "resolve_root",
    "resolve_table_location",
    "resolve_table_path",
    "validate_name",
]
