"""Pytest configuration and fixtures for docstore tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from docstore.adapters.outbound import LocalFileStorage
from docstore.application import DatabaseManager, DocumentStore, RecordRepository
from docstore.domain.services import TableCodec, TableLockManager
from docstore.infrastructure.config import Config, ObservabilityConfig, StorageConfig
from docstore.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration rooted in a temporary directory."""
    return Config(
        storage=StorageConfig(
            root_dir=temp_dir / "data",
            fsync=False,  # Faster for tests
            lock_timeout_seconds=5.0,
        ),
        observability=ObservabilityConfig(log_level="DEBUG", log_format="console"),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def storage() -> LocalFileStorage:
    """Provide a filesystem adapter with fsync disabled."""
    return LocalFileStorage(fsync=False)


@pytest.fixture
def lock_manager() -> TableLockManager:
    """Provide an isolated lock manager."""
    return TableLockManager(default_timeout=5.0)


@pytest.fixture
def manager(
    storage: LocalFileStorage,
    lock_manager: TableLockManager,
    metrics_registry: MetricsRegistry,
) -> DatabaseManager:
    """Provide a lifecycle manager wired to the test collaborators."""
    return DatabaseManager(
        storage=storage,
        lock_manager=lock_manager,
        metrics=metrics_registry,
        lock_timeout=5.0,
    )


@pytest.fixture
def root(temp_dir: Path) -> Path:
    """Provide an existing, empty root directory."""
    path = temp_dir / "root"
    path.mkdir()
    return path


@pytest.fixture
def orders(
    root: Path,
    manager: DatabaseManager,
    storage: LocalFileStorage,
    lock_manager: TableLockManager,
    metrics_registry: MetricsRegistry,
) -> RecordRepository:
    """Provide a repository over an empty ``shop/orders`` table."""
    manager.create_database(root, "shop")
    manager.create_table(root, "shop", "orders")
    return RecordRepository(
        root,
        "shop",
        "orders",
        storage=storage,
        codec=TableCodec(),
        lock_manager=lock_manager,
        metrics=metrics_registry,
        lock_timeout=5.0,
    )


@pytest.fixture
def store(
    root: Path,
    storage: LocalFileStorage,
    metrics_registry: MetricsRegistry,
) -> DocumentStore:
    """Provide a document store over the test root."""
    return DocumentStore(root, storage=storage, metrics=metrics_registry, lock_timeout=5.0)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
