"""Domain entities for the document store.

Records are plain dictionaries; this package holds the rules for
identifying and merging them.
"""

from docstore.domain.entities.record import (
    Record,
    find_index,
    get_record_id,
    ids_equal,
    merge,
)

__all__ = [
    "Record",
    "find_index",
    "get_record_id",
    "ids_equal",
    "merge",
]
