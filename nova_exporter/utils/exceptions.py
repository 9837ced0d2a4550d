"""Exporter exception hierarchy.

A small tree separating configuration problems and catalog contract
violations (fatal, raised before or outside normal scrape handling) from
everything else. Transient upstream failures live in
``nova_exporter.provider.errors``.
"""
from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter exceptions."""


class ConfigError(ExporterError):
    """Configuration-related issues (missing cloud entry, bad values)."""


class CatalogError(ExporterError):
    """Metric catalog contract violation. Never swallowed by the scrape loop."""


class DuplicateMetricError(CatalogError):
    """Two catalog entries share one metric name."""


class UnknownMetricError(CatalogError):
    """A producer referenced a metric name the registry does not hold."""


class LabelMismatchError(CatalogError):
    """Positional label values do not match the declared label names."""


__all__ = [
    "ExporterError",
    "ConfigError",
    "CatalogError",
    "DuplicateMetricError",
    "UnknownMetricError",
    "LabelMismatchError",
]
