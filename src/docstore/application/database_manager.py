"""Database and table lifecycle management.

Databases are directories under a caller-supplied root and tables are
files inside them. Every method takes the root explicitly; the manager
holds collaborators only, never a location.

Invariants:
    - A database or table is never created over an existing entry
    - A rename never overwrites an existing table
    - Table removal and rename hold the table lock, so they cannot
      interleave with a record operation on the same table
"""

from __future__ import annotations

from pathlib import Path

from docstore.adapters.outbound.local_file_storage import LocalFileStorage
from docstore.domain.errors import (
    AlreadyExistsError,
    DatabaseExistsError,
    DatabaseNotFoundError,
    IOFailureError,
    NotFoundError,
    TableExistsError,
    TableNotFoundError,
)
from docstore.domain.services import TableLockManager, get_lock_manager
from docstore.domain.services.path_resolver import (
    resolve_database_path,
    resolve_root,
    resolve_table_location,
)
from docstore.infrastructure.config import get_config
from docstore.infrastructure.logging import get_logger
from docstore.infrastructure.metrics import MetricsRegistry, get_metrics
from docstore.infrastructure.tracing import trace_function, trace_span
from docstore.ports.outbound import FileStorage


logger = get_logger(__name__)


class DatabaseManager:
    """Create, rename, list and delete databases and tables."""

    def __init__(
        self,
        storage: FileStorage | None = None,
        lock_manager: TableLockManager | None = None,
        metrics: MetricsRegistry | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            storage: Filesystem primitives (default LocalFileStorage).
            lock_manager: Per-table locks (default process-wide manager).
            metrics: Metrics registry (default process-wide registry).
            lock_timeout: Lock wait in seconds (default from config).
        """
        self._storage = storage if storage is not None else LocalFileStorage()
        self._locks = lock_manager if lock_manager is not None else get_lock_manager()
        self._metrics = metrics if metrics is not None else get_metrics()
        self._lock_timeout = (
            lock_timeout if lock_timeout is not None
            else get_config().storage.lock_timeout_seconds
        )

    # -- Helpers --

    def _require_database(self, root: str | Path, database: str) -> Path:
        path = resolve_database_path(root, database)
        if not self._storage.is_dir(path):
            raise DatabaseNotFoundError(
                f"Database '{database}' does not exist at '{resolve_root(root)}'",
                path=path,
                database=database,
            )
        return path

    @staticmethod
    def _io_failure(cause: IOFailureError, database: str, table: str | None = None) -> IOFailureError:
        return IOFailureError(str(cause), path=cause.path, database=database, table=table)

    # -- Databases --

    def create_database(self, root: str | Path, name: str) -> Path:
        """Create a database directory.

        Returns:
            The database directory path.

        Raises:
            DatabaseExistsError: If something already exists under that name.
            NotFoundError: If the root directory does not exist.
        """
        path = resolve_database_path(root, name)
        with self._metrics.observe("create_database"), trace_span(
            "docstore.create_database", {"docstore.database": name}
        ):
            try:
                self._storage.create_dir(path)
            except AlreadyExistsError as e:
                raise DatabaseExistsError(
                    f"Database '{name}' already exists at '{path.parent}'",
                    path=path,
                    database=name,
                ) from e
            except NotFoundError as e:
                raise NotFoundError(
                    f"Root directory '{path.parent}' does not exist",
                    path=path.parent,
                    database=name,
                ) from e
            except IOFailureError as e:
                raise self._io_failure(e, name) from e

        logger.debug("database_created", database=name, path=str(path))
        return path

    def delete_database(self, root: str | Path, name: str) -> None:
        """Recursively delete a database and all its tables.

        Raises:
            DatabaseNotFoundError: If the database does not exist.
        """
        with self._metrics.observe("delete_database"), trace_span(
            "docstore.delete_database", {"docstore.database": name}
        ):
            path = self._require_database(root, name)
            try:
                self._storage.delete_dir_recursive(path)
            except NotFoundError as e:
                raise DatabaseNotFoundError(
                    f"Database '{name}' does not exist", path=path, database=name
                ) from e
            except IOFailureError as e:
                raise self._io_failure(e, name) from e

        logger.debug("database_deleted", database=name, path=str(path))

    def database_exists(self, root: str | Path, name: str) -> bool:
        """Check whether a database directory exists."""
        return self._storage.is_dir(resolve_database_path(root, name))

    @trace_function("docstore.list_databases")
    def list_databases(self, root: str | Path) -> set[str]:
        """Return the names of all databases under ``root``.

        Raises:
            NotFoundError: If the root directory does not exist.
        """
        base = resolve_root(root)
        with self._metrics.observe("list_databases"):
            try:
                names = self._storage.list_entries(base)
            except NotFoundError as e:
                raise NotFoundError(f"Root directory '{base}' does not exist", path=base) from e
            return {
                name for name in names
                if not name.startswith(".") and self._storage.is_dir(base / name)
            }

    # -- Tables --

    def create_table(self, root: str | Path, database: str, table: str) -> Path:
        """Create an empty table file.

        Returns:
            The table file path.

        Raises:
            DatabaseNotFoundError: If the database does not exist.
            TableExistsError: If the table already exists.
        """
        location = resolve_table_location(root, database, table)
        with self._metrics.observe("create_table"), trace_span(
            "docstore.create_table",
            {"docstore.database": database, "docstore.table": table},
        ):
            self._require_database(root, database)
            try:
                self._storage.create_file(location.table_path)
            except AlreadyExistsError as e:
                raise TableExistsError(
                    f"Table '{table}' already exists in database '{database}'",
                    path=location.table_path,
                    database=database,
                    table=table,
                ) from e
            except NotFoundError as e:
                raise DatabaseNotFoundError(
                    f"Database '{database}' does not exist",
                    path=location.database_path,
                    database=database,
                ) from e
            except IOFailureError as e:
                raise self._io_failure(e, database, table) from e

        logger.debug("table_created", database=database, table=table)
        return location.table_path

    def rename_table(
        self,
        root: str | Path,
        database: str,
        old_name: str,
        new_name: str,
    ) -> Path:
        """Rename a table without overwriting another one.

        Returns:
            The new table file path.

        Raises:
            DatabaseNotFoundError: If the database does not exist.
            TableNotFoundError: If the source table does not exist.
            TableExistsError: If the destination table already exists.
        """
        source = resolve_table_location(root, database, old_name)
        target = resolve_table_location(root, database, new_name)
        with self._metrics.observe("rename_table"), trace_span(
            "docstore.rename_table",
            {
                "docstore.database": database,
                "docstore.table": old_name,
                "docstore.new_table": new_name,
            },
        ):
            self._require_database(root, database)
            with self._locks.hold(source.table_path, target.table_path, timeout=self._lock_timeout):
                if not self._storage.is_file(source.table_path):
                    raise TableNotFoundError(
                        f"Table '{old_name}' does not exist in database '{database}'",
                        path=source.table_path,
                        database=database,
                        table=old_name,
                    )
                try:
                    self._storage.rename_entry(source.table_path, target.table_path)
                except NotFoundError as e:
                    raise TableNotFoundError(
                        f"Table '{old_name}' does not exist in database '{database}'",
                        path=source.table_path,
                        database=database,
                        table=old_name,
                    ) from e
                except AlreadyExistsError as e:
                    raise TableExistsError(
                        f"Table '{new_name}' already exists in database '{database}'",
                        path=target.table_path,
                        database=database,
                        table=new_name,
                    ) from e
                except IOFailureError as e:
                    raise self._io_failure(e, database, old_name) from e

        logger.debug("table_renamed", database=database, table=old_name, new_table=new_name)
        return target.table_path

    def delete_table(self, root: str | Path, database: str, table: str) -> None:
        """Delete a table file.

        Raises:
            DatabaseNotFoundError: If the database does not exist.
            TableNotFoundError: If the table does not exist.
        """
        location = resolve_table_location(root, database, table)
        with self._metrics.observe("delete_table"), trace_span(
            "docstore.delete_table",
            {"docstore.database": database, "docstore.table": table},
        ):
            self._require_database(root, database)
            with self._locks.hold(location.table_path, timeout=self._lock_timeout):
                if not self._storage.is_file(location.table_path):
                    raise TableNotFoundError(
                        f"Table '{table}' does not exist in database '{database}'",
                        path=location.table_path,
                        database=database,
                        table=table,
                    )
                try:
                    self._storage.delete_file(location.table_path)
                except NotFoundError as e:
                    raise TableNotFoundError(
                        f"Table '{table}' does not exist in database '{database}'",
                        path=location.table_path,
                        database=database,
                        table=table,
                    ) from e
                except IOFailureError as e:
                    raise self._io_failure(e, database, table) from e

        logger.debug("table_deleted", database=database, table=table)

    def table_exists(self, root: str | Path, database: str, table: str) -> bool:
        """Check whether a table file exists."""
        location = resolve_table_location(root, database, table)
        return self._storage.is_file(location.table_path)

    def list_tables(self, root: str | Path, database: str) -> set[str]:
        """Return the names of the tables in a database.

        Raises:
            DatabaseNotFoundError: If the database does not exist.
        """
        with self._metrics.observe("list_tables"), trace_span(
            "docstore.list_tables", {"docstore.database": database}
        ):
            path = self._require_database(root, database)
            try:
                names = self._storage.list_entries(path)
            except NotFoundError as e:
                raise DatabaseNotFoundError(
                    f"Database '{database}' does not exist", path=path, database=database
                ) from e
            except IOFailureError as e:
                raise self._io_failure(e, database) from e
            return {
                name for name in names
                if not name.startswith(".") and self._storage.is_file(path / name)
            }
