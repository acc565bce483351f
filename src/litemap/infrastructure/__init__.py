"""Infrastructure layer - cross-cutting concerns."""

from litemap.infrastructure.config import Config, DatabaseConfig, ObservabilityConfig, get_config
from litemap.infrastructure.logging import get_logger, setup_logging
from litemap.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from litemap.infrastructure.tracing import get_tracer, setup_tracing, trace_span

__all__ = [
    "Config",
    "DatabaseConfig",
    "ObservabilityConfig",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
