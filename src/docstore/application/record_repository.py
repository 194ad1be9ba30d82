"""Record Repository - CRUD over the records of one table.

Every mutating operation is a full cycle over the table file:

    lock -> read -> decode -> mutate -> encode -> atomic write -> unlock

Reads skip the lock: writes replace the file atomically, so a reader
always decodes a complete version of the table.

Usage:
    from docstore.application import RecordRepository

    orders = RecordRepository("/srv/data", "shop", "orders")
    orders.insert({"id": 1, "item": "pen"})
    orders.update_by_id(1, {"item": "pencil"})
    orders.find_all()     # [{"id": 1, "item": "pencil"}]
    orders.delete_by_id(1)

Duplicate Ids:
    Ids are not required to be unique. Keyed operations act on the first
    record (in table order) whose id matches.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from docstore.adapters.outbound.local_file_storage import LocalFileStorage
from docstore.domain.entities import Record, find_index, get_record_id, merge
from docstore.domain.errors import (
    CorruptTableError,
    DatabaseNotFoundError,
    IOFailureError,
    InvalidRecordError,
    NotFoundError,
    RecordNotFoundError,
    TableNotFoundError,
)
from docstore.domain.services import TableCodec, TableLockManager, get_lock_manager
from docstore.domain.services.path_resolver import resolve_table_location
from docstore.domain.value_objects import RecordId, TableLocation
from docstore.infrastructure.config import get_config
from docstore.infrastructure.logging import get_logger
from docstore.infrastructure.metrics import MetricsRegistry, get_metrics
from docstore.infrastructure.tracing import trace_span
from docstore.ports.outbound import FileStorage


logger = get_logger(__name__)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of ``update_by_id``.

    A missing id is not an error: ``found`` is False and nothing was
    written. The result is truthy only when a record was updated.

    Attributes:
        found: Whether a record with the id existed
        record: The record as stored after the merge, if found
    """

    found: bool
    record: Record | None = None

    def __bool__(self) -> bool:
        return self.found


class RecordRepository:
    """CRUD operations over a single table.

    Thread Safety:
        Mutations on the same table are serialized through the shared
        TableLockManager. Repositories for the same table must share a
        lock manager (the process-wide one is used by default).
    """

    def __init__(
        self,
        root: str | Path,
        database: str,
        table: str,
        storage: FileStorage | None = None,
        codec: TableCodec | None = None,
        lock_manager: TableLockManager | None = None,
        metrics: MetricsRegistry | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            root: Root directory holding all databases.
            database: Database name.
            table: Table name.
            storage: Filesystem primitives (default LocalFileStorage).
            codec: Table codec (default built from config).
            lock_manager: Per-table locks (default process-wide manager).
            metrics: Metrics registry (default process-wide registry).
            lock_timeout: Lock wait in seconds (default from config).

        Raises:
            InvalidNameError: If a name is empty or unsafe.
        """
        config = get_config()
        self._location = resolve_table_location(root, database, table)
        self._storage = storage if storage is not None else LocalFileStorage()
        self._codec = codec if codec is not None else TableCodec(
            indent=config.storage.json_indent,
            encoding=config.storage.encoding,
        )
        self._locks = lock_manager if lock_manager is not None else get_lock_manager()
        self._metrics = metrics if metrics is not None else get_metrics()
        self._lock_timeout = (
            lock_timeout if lock_timeout is not None else config.storage.lock_timeout_seconds
        )
        self._log = logger.bind(database=self.database, table=self.table)

    @property
    def location(self) -> TableLocation:
        """Resolved location of the table."""
        return self._location

    @property
    def database(self) -> str:
        return self._location.database

    @property
    def table(self) -> str:
        return self._location.table

    @property
    def path(self) -> Path:
        """Path of the table file."""
        return self._location.table_path

    def exists(self) -> bool:
        """Check whether the table file exists."""
        return self._storage.is_file(self.path)

    # -- Internal cycle steps --

    @contextmanager
    def _operation(self, name: str, record_id: RecordId = None) -> Iterator[None]:
        attributes = {
            "docstore.database": self.database,
            "docstore.table": self.table,
            "docstore.record_id": None if record_id is None else str(record_id),
        }
        with self._metrics.observe(name), trace_span(f"docstore.{name}", attributes):
            yield

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._locks.hold(self.path, timeout=self._lock_timeout) as waited:
            self._metrics.lock_wait_seconds.observe(waited)
            yield

    def _missing(self, cause: NotFoundError) -> NotFoundError:
        if not self._storage.is_dir(self._location.database_path):
            return DatabaseNotFoundError(
                f"Database '{self.database}' does not exist",
                path=self._location.database_path,
                database=self.database,
            )
        return TableNotFoundError(
            f"Table '{self.table}' does not exist in database '{self.database}'",
            path=self.path,
            database=self.database,
            table=self.table,
        )

    def _io_failure(self, cause: IOFailureError) -> IOFailureError:
        return IOFailureError(
            f"I/O failure on table '{self.table}' in database '{self.database}': {cause}",
            path=self.path,
            database=self.database,
            table=self.table,
        )

    def _load(self) -> list[Record]:
        try:
            data = self._storage.read_file(self.path)
        except NotFoundError as e:
            raise self._missing(e) from e
        except IOFailureError as e:
            raise self._io_failure(e) from e

        self._metrics.table_bytes_read_total.inc(len(data))

        try:
            return self._codec.decode(data)
        except CorruptTableError as e:
            self._metrics.corrupt_tables_total.inc()
            raise CorruptTableError(
                f"Table '{self.table}' in database '{self.database}' is corrupt: {e}",
                path=self.path,
                database=self.database,
                table=self.table,
            ) from e

    def _store(self, records: list[Record]) -> None:
        data = self._codec.encode(records)
        try:
            self._storage.write_file(self.path, data)
        except NotFoundError as e:
            raise self._missing(e) from e
        except IOFailureError as e:
            raise self._io_failure(e) from e
        self._metrics.table_bytes_written_total.inc(len(data))

    @staticmethod
    def _as_record(value: Any, what: str = "record") -> Record:
        if not isinstance(value, Mapping):
            raise InvalidRecordError(f"{what} must be a mapping, got {type(value).__name__}")
        return dict(value)

    # -- Public API --

    def insert(self, record: Mapping[str, Any]) -> Record:
        """Append a record to the table.

        Ids are not checked for uniqueness.

        Args:
            record: The record to store.

        Returns:
            The record as stored.

        Raises:
            InvalidRecordError: If the record is not a serializable mapping.
            DatabaseNotFoundError: If the database does not exist.
            TableNotFoundError: If the table does not exist.
            CorruptTableError: If the current table content is corrupt.
        """
        stored = self._as_record(record)
        with self._operation("insert", get_record_id(stored)), self._locked():
            records = self._load()
            records.append(stored)
            self._store(records)

        self._log.debug("record_inserted", record_id=get_record_id(stored), count=len(records))
        return stored

    def insert_many(self, records: Iterable[Mapping[str, Any]]) -> list[Record]:
        """Append several records in one cycle; all are written or none.

        Returns:
            The records as stored, in order.
        """
        batch = [self._as_record(record) for record in records]
        with self._operation("insert_many"), self._locked():
            current = self._load()
            current.extend(batch)
            self._store(current)

        self._log.debug("records_inserted", inserted=len(batch), count=len(current))
        return batch

    def find_all(self) -> list[Record]:
        """Return every record in table order.

        Raises:
            DatabaseNotFoundError: If the database does not exist.
            TableNotFoundError: If the table does not exist.
            CorruptTableError: If the table content is corrupt.
        """
        with self._operation("find_all"):
            return self._load()

    def find_by_id(self, record_id: RecordId) -> Record:
        """Return the first record whose id equals ``record_id``.

        Raises:
            RecordNotFoundError: If no record has the id.
        """
        with self._operation("find_by_id", record_id):
            records = self._load()
            index = find_index(records, record_id)
            if index < 0:
                raise self._record_not_found(record_id)
            return records[index]

    def count(self) -> int:
        """Return the number of records in the table."""
        with self._operation("count"):
            return len(self._load())

    def update_by_id(self, record_id: RecordId, patch: Mapping[str, Any]) -> UpdateResult:
        """Merge ``patch`` into the first record whose id matches.

        Patch fields overwrite existing ones; other fields are kept. When no
        record matches, nothing is written and the result reports
        ``found=False``.

        Args:
            record_id: Id of the record to update.
            patch: Fields to set.

        Returns:
            UpdateResult describing the outcome.

        Raises:
            InvalidRecordError: If the patch is not a serializable mapping.
            DatabaseNotFoundError: If the database does not exist.
            TableNotFoundError: If the table does not exist.
            CorruptTableError: If the table content is corrupt.
        """
        changes = self._as_record(patch, "patch")
        with self._operation("update_by_id", record_id), self._locked():
            records = self._load()
            index = find_index(records, record_id)
            if index < 0:
                self._log.debug("record_update_skipped", record_id=record_id)
                return UpdateResult(found=False)

            updated = merge(records[index], changes)
            records[index] = updated
            self._store(records)

        self._log.debug("record_updated", record_id=record_id, fields=sorted(changes))
        return UpdateResult(found=True, record=updated)

    def delete_by_id(self, record_id: RecordId) -> Record:
        """Remove the first record whose id matches.

        Returns:
            The removed record.

        Raises:
            RecordNotFoundError: If no record has the id.
            DatabaseNotFoundError: If the database does not exist.
            TableNotFoundError: If the table does not exist.
            CorruptTableError: If the table content is corrupt.
        """
        with self._operation("delete_by_id", record_id), self._locked():
            records = self._load()
            index = find_index(records, record_id)
            if index < 0:
                raise self._record_not_found(record_id)

            removed = records.pop(index)
            self._store(records)

        self._log.debug("record_deleted", record_id=record_id, count=len(records))
        return removed

    def _record_not_found(self, record_id: RecordId) -> RecordNotFoundError:
        return RecordNotFoundError(
            f"Record with id {record_id!r} does not exist in table '{self.table}'",
            record_id=record_id,
            path=self.path,
            database=self.database,
            table=self.table,
        )

    def __repr__(self) -> str:
        return f"RecordRepository({self._location})"
