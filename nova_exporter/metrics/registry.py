"""Metric registry (exporter).

Owns the active, policy-filtered metric set for one service and runs the
emission protocol:

  * construction resolves the compute microversion, filters the catalog
    (``gating.filter_catalog``) and builds one descriptor per active spec,
    including declared-only specs that a sibling producer writes;
  * ``collect_samples(out)`` invokes every active producer once, in catalog
    order, containing per-producer failures;
  * ``collect()`` is the ``prometheus_client`` collector hook: it runs a pass
    on a worker thread into a bounded ``ScrapeConduit`` and folds the samples
    into gauge families.

Catalog contract violations (unknown metric name, label arity mismatch) are
programming errors and propagate out of the scrape. Any other producer
exception is logged, counted and skipped.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from ..config.settings import ExporterSettings
from ..provider.errors import ProviderError
from ..utils.exceptions import CatalogError, LabelMismatchError, UnknownMetricError
from .catalog import NOVA_METRICS
from .conduit import Sample, SampleSink, ScrapeConduit
from .gating import CatalogPolicy, GatingResult, filter_catalog, parse_microversion
from .self_metrics import SelfMetrics
from .spec import MetricSpec

if TYPE_CHECKING:  # pragma: no cover
    from ..provider.client import CloudClient
    from ..team.cache import TeamCache

logger = logging.getLogger(__name__)

UP_METRIC = "up"


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    fqname: str
    doc: str
    labels: tuple[str, ...]


@dataclass
class ScrapeReport:
    producers_run: int = 0
    failed: list[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed


def resolve_microversion(client: CloudClient, override: str | None) -> str | None:
    """Pick the compute microversion and pin it on the client.

    A concrete override wins. Otherwise (no override, or a symbolic one such
    as "latest") the maximum version advertised by the compute endpoint is
    used, so catalog gating and the wire header agree on one number.
    Discovery failure leaves the version unknown and the client unpinned.
    """
    if override:
        try:
            parse_microversion(override)
        except ValueError:
            logger.info("Compute microversion override %r is not numeric; discovering", override)
        else:
            client.microversion = override
            logger.info("Using compute microversion %s (override)", override)
            return override
    try:
        version = client.get_api_version()
    except ProviderError as e:
        logger.warning("Compute microversion discovery failed: %s", e)
        return None
    if version:
        client.microversion = version
        logger.info("Using compute microversion %s (discovered)", version)
    return version


class MetricRegistry(Collector):
    """Active metric set for one service plus its emission loop."""

    def __init__(self, client: CloudClient, team_cache: TeamCache,
                 settings: ExporterSettings | None = None, *,
                 catalog: Sequence[MetricSpec] = NOVA_METRICS,
                 api_version: str | None = None,
                 self_metrics: SelfMetrics | None = None,
                 service: str = "nova"):
        self.client = client
        self.team_cache = team_cache
        self.settings = settings or ExporterSettings()
        self.service = service
        self.self_metrics = self_metrics or SelfMetrics()
        self.api_version = api_version
        policy = CatalogPolicy(
            api_version=api_version,
            include_slow=self.settings.include_slow,
            disabled=frozenset(self.settings.disabled_metrics),
        )
        self.gating: GatingResult = filter_catalog(catalog, policy)
        if UP_METRIC in {s.name for s in catalog}:
            raise CatalogError(f"{UP_METRIC!r} is reserved for the registry")
        self._specs: dict[str, MetricSpec] = {s.name: s for s in self.gating.active}
        self._descriptors: dict[str, MetricDescriptor] = {}
        for spec in self.gating.active:
            self._add_descriptor(spec.name, spec.doc, spec.labels)
        self._add_descriptor(UP_METRIC, f"{service} API reachable for the last scrape (1 ok, 0 failed)", ())
        logger.info("Registry %s ready: %s active metrics (%s filtered)",
                    service, len(self._specs), len(self.gating.dropped))

    @classmethod
    def from_settings(cls, client: CloudClient, team_cache: TeamCache,
                      settings: ExporterSettings, **kwargs: Any) -> MetricRegistry:
        """Resolve the microversion first, then build the filtered registry."""
        version = resolve_microversion(client, settings.compute_microversion)
        return cls(client, team_cache, settings, api_version=version, **kwargs)

    def _add_descriptor(self, name: str, doc: str, labels: tuple[str, ...]) -> None:
        fqname = f"{self.settings.namespace}_{self.service}_{name}"
        self._descriptors[name] = MetricDescriptor(name, fqname, doc, labels)

    # ------------------------------------------------------------ lookups
    @property
    def metric_names(self) -> list[str]:
        return list(self._specs)

    def spec(self, name: str) -> MetricSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise UnknownMetricError(f"metric {name!r} is not active in registry {self.service}") from None

    def descriptor(self, name: str) -> MetricDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise UnknownMetricError(f"metric {name!r} is not registered in {self.service}") from None

    # ----------------------------------------------------------- emission
    def emit(self, out: SampleSink, name: str, value: float, *label_values: Any) -> None:
        """Write one sample. Names filtered out by policy are a silent no-op."""
        if name not in self._descriptors:
            if name in self.gating.dropped:
                return
            raise UnknownMetricError(f"producer referenced unknown metric {name!r}")
        desc = self._descriptors[name]
        if len(label_values) != len(desc.labels):
            raise LabelMismatchError(
                f"{name}: {len(label_values)} label values for {len(desc.labels)} labels {desc.labels}"
            )
        out.put(Sample(name, tuple(str(v) for v in label_values), float(value)))

    def collect_samples(self, out: SampleSink) -> ScrapeReport:
        """Run every active producer once. Returns after all have been invoked."""
        report = ScrapeReport()
        start = time.monotonic()
        for spec in self._specs.values():
            if not spec.has_producer:
                continue
            report.producers_run += 1
            try:
                spec.producer.produce(self, out)
            except CatalogError:
                raise
            except Exception as e:
                report.failed.append(spec.name)
                self.self_metrics.producer_failures.labels(metric=spec.name).inc()
                logger.error("Producer for %s_%s failed: %s", self.service, spec.name, e,
                             exc_info=not isinstance(e, ProviderError))
        self.emit(out, UP_METRIC, 0 if report.failed else 1)
        report.duration = time.monotonic() - start
        self.self_metrics.scrape_duration.observe(report.duration)
        if report.failed:
            logger.warning("Scrape finished with %s/%s producers failed: %s",
                           len(report.failed), report.producers_run, ", ".join(report.failed))
        else:
            logger.debug("Scrape finished in %.3fs (%s producers)", report.duration, report.producers_run)
        return report

    # ------------------------------------------------- prometheus_client hooks
    def _families(self) -> dict[str, GaugeMetricFamily]:
        return {
            name: GaugeMetricFamily(d.fqname, d.doc, labels=list(d.labels))
            for name, d in self._descriptors.items()
        }

    def describe(self) -> Iterator[GaugeMetricFamily]:
        yield from self._families().values()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        conduit = ScrapeConduit(maxsize=self.settings.conduit_size)
        outcome: dict[str, BaseException] = {}

        def _run() -> None:
            try:
                self.collect_samples(conduit)
            except BaseException as e:  # re-raised on the scrape thread below
                outcome["error"] = e
            finally:
                conduit.close()

        worker = threading.Thread(target=_run, name=f"{self.service}-scrape", daemon=True)
        worker.start()
        families = self._families()
        for sample in conduit:
            families[sample.name].add_metric(list(sample.label_values), sample.value)
        worker.join()
        if "error" in outcome:
            raise outcome["error"]
        yield from families.values()


__all__ = ["MetricRegistry", "MetricDescriptor", "ScrapeReport", "resolve_microversion", "UP_METRIC"]
