"""Metrics server bootstrap.

Registers the service ``MetricRegistry`` (and the exporter self-metrics,
which already live on the same ``CollectorRegistry``) and starts the
Prometheus HTTP endpoint.

Public API:
  setup_metrics_server(registry, host, port) -> (collector_registry, shutdown_callable)
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from prometheus_client import CollectorRegistry, start_http_server
from prometheus_client.gc_collector import GCCollector
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector

from .registry import MetricRegistry

logger = logging.getLogger(__name__)


def build_collector_registry(registry: MetricRegistry, *, runtime_collectors: bool = True) -> CollectorRegistry:
    """Attach the service registry to its self-metrics CollectorRegistry."""
    target = registry.self_metrics.registry
    target.register(registry)
    if runtime_collectors:
        ProcessCollector(registry=target)
        PlatformCollector(registry=target)
        GCCollector(registry=target)
    return target


def setup_metrics_server(registry: MetricRegistry, host: str = "0.0.0.0", port: int = 9180, *,
                         runtime_collectors: bool = True) -> tuple[CollectorRegistry, Callable[[], None]]:
    """Start the metrics HTTP endpoint serving ``registry``.

    Returns the CollectorRegistry and a shutdown callable stopping the server.
    """
    target = build_collector_registry(registry, runtime_collectors=runtime_collectors)
    server, thread = start_http_server(port, addr=host, registry=target)
    logger.info("Metrics server started on %s:%s", host, port)
    logger.info("Metrics available at http://%s:%s/metrics", host, port)

    def _shutdown() -> None:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
        logger.info("Metrics server stopped")

    return target, _shutdown


__all__ = ["setup_metrics_server", "build_collector_registry"]
