"""
Defines Prometheus metrics for probes and documents.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog
from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Gauge as _OrigGauge
from prometheus_client import Histogram as _OrigHistogram
from prometheus_client import start_http_server

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, multiple CLI invocations in one
# process) must reuse the registered collectors instead of raising.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing

        try:
            return metric_cls(name, documentation, *args, **kwargs)
        except ValueError:
            return _PROM_REGISTRY._names_to_collectors[name]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)
Gauge = _duplicate_safe_factory(_OrigGauge)
Histogram = _duplicate_safe_factory(_OrigHistogram)


def _create_metrics() -> Dict[str, Any]:
    return {
        "probes_total": Counter(
            "m3usieve_probes_total",
            "Stream probes by final outcome",
            ["outcome"],
        ),
        "probe_latency_seconds": Histogram(
            "m3usieve_probe_latency_seconds",
            "Time spent validating one resource, redirects included",
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0),
        ),
        "probes_in_flight": Gauge(
            "m3usieve_probes_in_flight",
            "Probes currently awaiting a response",
        ),
        "documents_total": Counter(
            "m3usieve_documents_total",
            "Playlist documents processed by result",
            ["result"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()


def start_metrics_server(port: int) -> None:
    """Expose the default registry over HTTP."""
    start_http_server(port)
    logger.info("Prometheus exporter started", port=port)
