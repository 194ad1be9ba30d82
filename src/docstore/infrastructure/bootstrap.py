"""One-call setup of logging, tracing and metrics from a Config."""

from __future__ import annotations

from docstore.infrastructure.config import Config, get_config
from docstore.infrastructure.logging import get_logger, setup_logging_from_config
from docstore.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from docstore.infrastructure.tracing import setup_tracing


def setup_observability(config: Config | None = None) -> MetricsRegistry:
    """Configure observability as described by ``config.observability``.

    Logging is always configured. Tracing is installed only when an OTLP
    endpoint is set, and the Prometheus exporter is started only when
    ``metrics_enabled`` is true.

    Returns:
        The metrics registry the store should report to.
    """
    config = config or get_config()
    obs = config.observability

    setup_logging_from_config(config)

    if obs.otel_endpoint:
        setup_tracing(service_name=obs.otel_service_name, otlp_endpoint=obs.otel_endpoint)

    metrics = setup_metrics(port=obs.metrics_port) if obs.metrics_enabled else get_metrics()

    get_logger(__name__).info(
        "observability_initialized",
        log_level=obs.log_level,
        tracing=bool(obs.otel_endpoint),
        metrics_port=obs.metrics_port if obs.metrics_enabled else None,
    )
    return metrics
