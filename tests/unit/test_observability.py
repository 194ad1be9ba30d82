"""Unit tests for logging, metrics and tracing helpers."""

from __future__ import annotations

import io
import json
import os
import subprocess
import sys
import textwrap
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest
import structlog

from docstore.infrastructure.bootstrap import setup_observability
from docstore.infrastructure.config import Config, ObservabilityConfig
from docstore.infrastructure.logging import get_logger, setup_default_logging, setup_logging
from docstore.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from docstore.infrastructure.tracing import trace_function, trace_span


@pytest.fixture
def reset_structlog() -> Generator[None, None, None]:
    """Restore the library logging default after a test reconfigures it."""
    yield
    structlog.reset_defaults()
    setup_default_logging()


@pytest.mark.unit
class TestLogging:
    """Tests for setup_logging."""

    def test_json_output(self, reset_structlog: None) -> None:
        """JSON lines carry the event, level and service."""
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)

        get_logger("test").debug("table_created", table="orders")

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["event"] == "table_created"
        assert entry["table"] == "orders"
        assert entry["level"] == "debug"
        assert entry["service"] == "docstore"
        assert "timestamp" in entry

    def test_level_filters(self, reset_structlog: None) -> None:
        """Events below the configured level are dropped."""
        stream = io.StringIO()
        setup_logging(level="INFO", log_format="json", stream=stream)

        get_logger("test").debug("table_created")

        assert stream.getvalue() == ""

    def test_bound_context(self, reset_structlog: None) -> None:
        """Initial context is bound to every event."""
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)

        get_logger("test", database="shop").info("opened")

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["database"] == "shop"

    def test_silent_without_setup(self, temp_dir: Path) -> None:
        """Store operations print nothing until logging is configured."""
        script = textwrap.dedent(
            """
            import sys
            from docstore.application import DocumentStore

            store = DocumentStore(sys.argv[1])
            store.create_database("shop")
            store.create_table("shop", "orders")
            store.table("shop", "orders").insert({"id": 1, "item": "pen"})
            """
        )
        src = Path(__file__).resolve().parents[2] / "src"
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src), env.get("PYTHONPATH")]))
        env["DOCSTORE_STORAGE__FSYNC"] = "false"

        result = subprocess.run(
            [sys.executable, "-c", script, str(temp_dir)],
            capture_output=True,
            text=True,
            env=env,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout == ""
        assert "_created" not in result.stderr
        assert "record_inserted" not in result.stderr
        assert (temp_dir / "shop" / "orders").is_file()


@pytest.mark.unit
class TestMetricsRegistry:
    """Tests for MetricsRegistry.observe."""

    def test_success_counted(self, metrics_registry: MetricsRegistry) -> None:
        """A clean block is counted as success with a latency sample."""
        with metrics_registry.observe("insert"):
            pass

        registry = metrics_registry.registry
        assert registry.get_sample_value(
            "docstore_operations_total", {"operation": "insert", "status": "success"}
        ) == 1
        assert registry.get_sample_value(
            "docstore_operation_latency_seconds_count", {"operation": "insert"}
        ) == 1

    def test_error_counted_and_reraised(self, metrics_registry: MetricsRegistry) -> None:
        """A raising block is counted as error and the exception propagates."""
        with pytest.raises(KeyError):
            with metrics_registry.observe("delete_by_id"):
                raise KeyError("x")

        assert metrics_registry.registry.get_sample_value(
            "docstore_operations_total", {"operation": "delete_by_id", "status": "error"}
        ) == 1


@pytest.mark.unit
class TestTracing:
    """Tests for tracing helpers without an installed provider."""

    def test_trace_span_skips_none(self) -> None:
        """Spans accept attributes with None values."""
        with trace_span("docstore.test", {"docstore.table": "orders", "docstore.record_id": None}) as span:
            assert span is not None

    def test_trace_function_preserves_result(self) -> None:
        """The decorator returns the wrapped function's result and name."""

        @trace_function("docstore.answer")
        def answer() -> int:
            return 42

        assert answer() == 42
        assert answer.__name__ == "answer"


@pytest.mark.unit
class TestSetupObservability:
    """Tests for setup_observability."""

    def test_defaults_use_process_registry(self, reset_structlog: None) -> None:
        """Without exporters enabled the process-wide registry is returned."""
        config = Config(observability=ObservabilityConfig(log_level="WARNING"))

        assert setup_observability(config) is get_metrics()

    def test_metrics_enabled_after_get_metrics(self, reset_structlog: None) -> None:
        """Enabling the exporter reuses collectors that stores already report to."""
        existing = get_metrics()
        config = Config(
            observability=ObservabilityConfig(
                log_level="WARNING", metrics_enabled=True, metrics_port=9464
            )
        )

        with patch("docstore.infrastructure.metrics.start_http_server") as server:
            metrics = setup_observability(config)

        assert metrics is existing
        server.assert_called_once_with(9464, registry=existing.registry)


@pytest.mark.unit
class TestSetupMetrics:
    """Tests for setup_metrics."""

    def test_repeated_setup_reuses_registry(self) -> None:
        """Calling setup twice does not register the collectors twice."""
        with patch("docstore.infrastructure.metrics.start_http_server"):
            first = setup_metrics(port=9465)
            second = setup_metrics(port=9465)

        assert first is second is get_metrics()
