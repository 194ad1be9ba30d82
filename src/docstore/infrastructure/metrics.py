"""Prometheus metrics for the document store."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all document store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry if registry is not None else REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "docstore_operations_total",
            "Total number of store operations",
            ["operation", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "docstore_operation_latency_seconds",
            "Operation latency in seconds",
            ["operation"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        # Table I/O metrics
        self.table_bytes_read_total = Counter(
            "docstore_table_bytes_read_total",
            "Total bytes read from table files",
            registry=self._registry,
        )

        self.table_bytes_written_total = Counter(
            "docstore_table_bytes_written_total",
            "Total bytes written to table files",
            registry=self._registry,
        )

        self.corrupt_tables_total = Counter(
            "docstore_corrupt_tables_total",
            "Total reads that found corrupt table content",
            registry=self._registry,
        )

        # Lock metrics
        self.lock_wait_seconds = Histogram(
            "docstore_lock_wait_seconds",
            "Time spent waiting for table locks",
            buckets=(0.0001, 0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 30.0),
            registry=self._registry,
        )

        # Store info
        self.info = Info(
            "docstore",
            "Document store information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @contextmanager
    def observe(self, operation: str) -> Iterator[None]:
        """Count an operation and record its latency.

        The operation is counted as ``error`` when the block raises; the
        exception is re-raised unchanged.
        """
        start = time.perf_counter()
        status = "success"
        try:
            yield
        except BaseException:
            status = "error"
            raise
        finally:
            self.operation_latency_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )
            self.operations_total.labels(operation=operation, status=status).inc()


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    The collectors already built by ``get_metrics`` are reused when they
    live in the target registry, so stores created earlier keep reporting.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    target = registry if registry is not None else REGISTRY
    if _metrics is None or _metrics.registry is not target:
        _metrics = MetricsRegistry(target)

    from docstore import __version__
    _metrics.info.info({
        "version": __version__,
    })

    # Start HTTP server for Prometheus scraping
    start_http_server(port, registry=target)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
