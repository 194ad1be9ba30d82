"""Value objects for the document store domain.

Exports:
    Identifiers:
        - DatabaseName: Type-safe database name
        - TableName: Type-safe table name
        - RecordId: Alias for caller-assigned record ids
        - ID_FIELD: Name of the identifying record field
        - TableLocation: Resolved (root, database, table) triple
"""

from docstore.domain.value_objects.identifiers import (
    ID_FIELD,
    DatabaseName,
    RecordId,
    TableLocation,
    TableName,
)

__all__ = [
    "DatabaseName",
    "TableName",
    "RecordId",
    "ID_FIELD",
    "TableLocation",
]
