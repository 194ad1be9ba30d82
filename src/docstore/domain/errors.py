"""Typed errors raised by the document store.

Storage primitives and the table codec raise the base kinds
(``AlreadyExistsError``, ``NotFoundError``, ``CorruptTableError``,
``IOFailureError``). The application layer re-raises them as the
database/table specific subclasses, chaining the original cause.

Hierarchy:
    DocStoreError
    ├── AlreadyExistsError -> DatabaseExistsError, TableExistsError
    ├── NotFoundError      -> DatabaseNotFoundError, TableNotFoundError
    ├── RecordNotFoundError
    ├── CorruptTableError
    ├── IOFailureError
    ├── InvalidNameError
    ├── InvalidRecordError
    └── LockTimeoutError
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class DocStoreError(Exception):
    """Base class for every error raised by docstore."""

    def __init__(
        self,
        message: str,
        *,
        path: str | Path | None = None,
        database: str | None = None,
        table: str | None = None,
    ) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.database = database
        self.table = table


class AlreadyExistsError(DocStoreError):
    """Raised when a directory or file that must be absent already exists."""

    pass


class DatabaseExistsError(AlreadyExistsError):
    """Raised when creating a database whose directory already exists."""

    pass


class TableExistsError(AlreadyExistsError):
    """Raised when a table file already exists."""

    pass


class NotFoundError(DocStoreError):
    """Raised when a directory or file that must exist is missing."""

    pass


class DatabaseNotFoundError(NotFoundError):
    """Raised when a database directory is missing."""

    pass


class TableNotFoundError(NotFoundError):
    """Raised when a table file is missing."""

    pass


class RecordNotFoundError(DocStoreError):
    """Raised when no record in a table carries the requested id."""

    def __init__(
        self,
        message: str,
        *,
        record_id: Any = None,
        path: str | Path | None = None,
        database: str | None = None,
        table: str | None = None,
    ) -> None:
        super().__init__(message, path=path, database=database, table=table)
        self.record_id = record_id


class CorruptTableError(DocStoreError):
    """Raised when table content is not empty and not a JSON array of objects."""

    pass


class IOFailureError(DocStoreError):
    """Raised for OS-level failures (permissions, disk full, wrong entry kind)."""

    pass


class InvalidNameError(DocStoreError, ValueError):
    """Raised when a database or table name is empty or unsafe."""

    pass


class InvalidRecordError(DocStoreError, ValueError):
    """Raised when a record is not a JSON-serializable object."""

    pass


class LockTimeoutError(DocStoreError):
    """Raised when a table lock cannot be acquired in time."""

    pass
