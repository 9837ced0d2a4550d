"""Exporter self-observability metrics.

Declared as ``MetricDef`` entries and registered as attributes on a
``SelfMetrics`` holder, bound to an explicit ``CollectorRegistry`` so tests
can build isolated instances instead of touching the process default.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricDef:
    attr: str                 # Attribute name on the holder
    name: str                 # Prometheus metric name
    doc: str                  # Help text
    kind: Any                 # Constructor (Gauge/Counter/Histogram)
    labels: Sequence[str] | None = None

    def register(self, holder: Any, registry: CollectorRegistry):
        if self.labels:
            metric = self.kind(self.name, self.doc, list(self.labels), registry=registry)
        else:
            metric = self.kind(self.name, self.doc, registry=registry)
        setattr(holder, self.attr, metric)
        return metric


SELF_METRIC_SPECS: list[MetricDef] = [
    MetricDef(
        attr="producer_failures",
        name="nova_exporter_producer_failures_total",
        doc="Producer invocations that raised during a scrape",
        kind=Counter,
        labels=["metric"],
    ),
    MetricDef(
        attr="scrape_duration",
        name="nova_exporter_scrape_duration_seconds",
        doc="Wall time of one full producer pass",
        kind=Histogram,
    ),
    MetricDef(
        attr="team_refresh",
        name="nova_exporter_team_refresh_total",
        doc="Team cache refresh attempts by result",
        kind=Counter,
        labels=["result"],
    ),
    MetricDef(
        attr="team_cache_entries",
        name="nova_exporter_team_cache_entries",
        doc="Tenants currently mapped to a team",
        kind=Gauge,
    ),
    MetricDef(
        attr="team_cache_last_refresh",
        name="nova_exporter_team_cache_last_refresh_timestamp_seconds",
        doc="Unix time of the last successful team cache refresh",
        kind=Gauge,
    ),
]


class SelfMetrics:
    """Holder exposing each MetricDef as an attribute."""

    producer_failures: Counter
    scrape_duration: Histogram
    team_refresh: Counter
    team_cache_entries: Gauge
    team_cache_last_refresh: Gauge

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        for spec in SELF_METRIC_SPECS:
            spec.register(self, self.registry)
        logger.debug("Self metrics registered (%s)", len(SELF_METRIC_SPECS))

    def value(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Current sample value by exposition name (tests, diagnostics)."""
        return self.registry.get_sample_value(name, labels or {})


__all__ = ["MetricDef", "SELF_METRIC_SPECS", "SelfMetrics"]
