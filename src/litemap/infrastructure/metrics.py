"""Prometheus metrics for the mapper."""

from __future__ import annotations

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)


class MetricsRegistry:
    """Registry of all mapper metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.statements_total = Counter(
            "litemap_statements_total",
            "Total number of statements executed",
            ["kind", "status"],  # kind: select, insert, ...; status: success, error
            registry=self._registry,
        )

        self.statement_latency_seconds = Histogram(
            "litemap_statement_latency_seconds",
            "Statement latency in seconds",
            ["kind"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        self.statement_cache_total = Counter(
            "litemap_statement_cache_total",
            "Statement cache lookups",
            ["result"],  # hit, miss
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "litemap_transactions_total",
            "Engine transactions ended",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        self.transaction_depth = Gauge(
            "litemap_transaction_depth",
            "Current logical transaction nesting depth",
            registry=self._registry,
        )

        # Descriptor metrics
        self.descriptors_cached = Gauge(
            "litemap_descriptors_cached",
            "Number of cached type descriptors",
            registry=self._registry,
        )

        # Error metrics
        self.errors_total = Counter(
            "litemap_errors_total",
            "Errors latched on database handles",
            ["category"],  # derivation, usage, transaction, engine, application
            registry=self._registry,
        )

        self.info = Info(
            "litemap",
            "Mapper information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from litemap import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
