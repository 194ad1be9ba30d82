"""Identifiers and location value objects for the document store.

These value objects give names to the plain strings and paths that flow
through the engine so that a database name cannot be mistaken for a
table name, and so a resolved table location travels as one unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, NewType


DatabaseName = NewType("DatabaseName", str)
"""Name of a database, i.e. a directory directly under the root."""

TableName = NewType("TableName", str)
"""Name of a table, i.e. a file inside a database directory."""

RecordId = Any
"""Caller-assigned record identifier. Any JSON value that supports equality."""

# Field that identifies a record inside a table
ID_FIELD = "id"


@dataclass(frozen=True, slots=True)
class TableLocation:
    """Resolved on-disk location of a table.

    Instances are produced by the path resolver, which validates the
    names and normalizes the root before construction.

    Attributes:
        root: Normalized root directory holding all databases
        database: Database (directory) name
        table: Table (file) name

    Example:
        >>> loc = TableLocation(Path("/srv/data"), DatabaseName("shop"), TableName("orders"))
        >>> loc.table_path
        PosixPath('/srv/data/shop/orders')
    """

    root: Path
    database: DatabaseName
    table: TableName

    @property
    def database_path(self) -> Path:
        """Directory of the owning database."""
        return self.root / self.database

    @property
    def table_path(self) -> Path:
        """File holding the table's records."""
        return self.root / self.database / self.table

    def __str__(self) -> str:
        return f"{self.database}/{self.table}"
