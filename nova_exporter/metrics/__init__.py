"""Metrics package public interface.

Stable import surfaces:
	from nova_exporter.metrics import MetricRegistry, MetricSpec, NOVA_METRICS
	from nova_exporter.metrics.gating import CatalogPolicy, filter_catalog
	from nova_exporter.metrics.server import setup_metrics_server
"""

from __future__ import annotations

from .catalog import NOVA_METRICS
from .conduit import ListSink, Sample, ScrapeConduit
from .gating import CatalogPolicy, filter_catalog
from .registry import MetricRegistry, ScrapeReport
from .self_metrics import SelfMetrics
from .spec import DECLARED_ONLY, MetricSpec, Producer

__all__ = [
	"NOVA_METRICS",
	"ListSink",
	"Sample",
	"ScrapeConduit",
	"CatalogPolicy",
	"filter_catalog",
	"MetricRegistry",
	"ScrapeReport",
	"SelfMetrics",
	"DECLARED_ONLY",
	"MetricSpec",
	"Producer",
]
