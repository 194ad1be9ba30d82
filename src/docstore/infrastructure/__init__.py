"""Infrastructure layer - cross-cutting concerns."""

from docstore.infrastructure.bootstrap import setup_observability
from docstore.infrastructure.config import Config, get_config
from docstore.infrastructure.logging import get_logger, setup_logging, setup_logging_from_config
from docstore.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from docstore.infrastructure.tracing import get_tracer, setup_tracing, trace_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
    "setup_observability",
]
