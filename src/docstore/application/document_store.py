"""Document Store - convenience entry point bound to one root directory.

Usage:
    from docstore.application import DocumentStore

    store = DocumentStore("/srv/data")
    store.create_database("shop")
    store.create_table("shop", "orders")

    orders = store.table("shop", "orders")
    orders.insert({"id": 1, "item": "pen"})

All repositories handed out by one store share its storage adapter,
codec, lock manager and metrics registry.
"""

from __future__ import annotations

from pathlib import Path

from docstore.adapters.outbound.local_file_storage import LocalFileStorage
from docstore.application.database_manager import DatabaseManager
from docstore.application.record_repository import RecordRepository
from docstore.domain.services import TableCodec, TableLockManager
from docstore.domain.services.path_resolver import resolve_root
from docstore.infrastructure.bootstrap import setup_observability
from docstore.infrastructure.config import Config, get_config
from docstore.infrastructure.metrics import MetricsRegistry, get_metrics
from docstore.ports.outbound import FileStorage


class DocumentStore:
    """Facade over DatabaseManager and RecordRepository for one root."""

    def __init__(
        self,
        root: str | Path,
        storage: FileStorage | None = None,
        codec: TableCodec | None = None,
        lock_manager: TableLockManager | None = None,
        metrics: MetricsRegistry | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            root: Root directory holding all databases (must exist).
            storage: Filesystem primitives (default LocalFileStorage).
            codec: Table codec (default built from config).
            lock_manager: Per-table locks (default: a new manager for this store).
            metrics: Metrics registry (default process-wide registry).
            lock_timeout: Lock wait in seconds (default from config).
        """
        config = get_config()
        self._root = resolve_root(root)
        self._storage = storage if storage is not None else LocalFileStorage()
        self._codec = codec if codec is not None else TableCodec(
            indent=config.storage.json_indent,
            encoding=config.storage.encoding,
        )
        self._lock_timeout = (
            lock_timeout if lock_timeout is not None else config.storage.lock_timeout_seconds
        )
        self._locks = (
            lock_manager if lock_manager is not None
            else TableLockManager(default_timeout=self._lock_timeout)
        )
        self._metrics = metrics if metrics is not None else get_metrics()
        self._manager = DatabaseManager(
            storage=self._storage,
            lock_manager=self._locks,
            metrics=self._metrics,
            lock_timeout=self._lock_timeout,
        )

    @classmethod
    def from_config(
        cls, config: Config | None = None, with_observability: bool = False
    ) -> DocumentStore:
        """Build a store rooted at ``config.storage.root_dir``, creating it if needed.

        With ``with_observability`` the logging, tracing and metrics
        exporters described by ``config.observability`` are set up first.
        """
        config = config or get_config()
        config.ensure_directories()
        metrics = setup_observability(config) if with_observability else None
        return cls(
            root=config.storage.root_dir,
            storage=LocalFileStorage(fsync=config.storage.fsync),
            codec=TableCodec(
                indent=config.storage.json_indent,
                encoding=config.storage.encoding,
            ),
            metrics=metrics,
            lock_timeout=config.storage.lock_timeout_seconds,
        )

    @property
    def root(self) -> Path:
        """Normalized root directory."""
        return self._root

    @property
    def manager(self) -> DatabaseManager:
        return self._manager

    # -- Databases --

    def create_database(self, name: str) -> Path:
        return self._manager.create_database(self._root, name)

    def delete_database(self, name: str) -> None:
        self._manager.delete_database(self._root, name)

    def database_exists(self, name: str) -> bool:
        return self._manager.database_exists(self._root, name)

    def list_databases(self) -> set[str]:
        return self._manager.list_databases(self._root)

    # -- Tables --

    def create_table(self, database: str, table: str) -> Path:
        return self._manager.create_table(self._root, database, table)

    def rename_table(self, database: str, old_name: str, new_name: str) -> Path:
        return self._manager.rename_table(self._root, database, old_name, new_name)

    def delete_table(self, database: str, table: str) -> None:
        self._manager.delete_table(self._root, database, table)

    def table_exists(self, database: str, table: str) -> bool:
        return self._manager.table_exists(self._root, database, table)

    def list_tables(self, database: str) -> set[str]:
        return self._manager.list_tables(self._root, database)

    def table(self, database: str, table: str) -> RecordRepository:
        """Return a repository for a table.

        The table is not required to exist yet; record operations raise
        TableNotFoundError until it does.
        """
        return RecordRepository(
            self._root,
            database,
            table,
            storage=self._storage,
            codec=self._codec,
            lock_manager=self._locks,
            metrics=self._metrics,
            lock_timeout=self._lock_timeout,
        )

    def __repr__(self) -> str:
        return f"DocumentStore(root={str(self._root)!r})"
