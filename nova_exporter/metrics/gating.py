"""Metric catalog gating.

Turns the static catalog into the active, ordered subset for one registry.

Rules (applied in order, first match drops the spec):
  1. deprecated: ``deprecated_since`` set and the running compute
     microversion is at or above it. An unknown microversion keeps the spec.
  2. slow: ``slow`` set and slow metrics are not included.
  3. disabled: name listed in the operator's disable set.

Name uniqueness is checked over the whole catalog before any rule runs, so a
collision fails regardless of policy.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..utils.exceptions import DuplicateMetricError
from .spec import MetricSpec

logger = logging.getLogger(__name__)

REASON_DEPRECATED = "deprecated"
REASON_SLOW = "slow"
REASON_DISABLED = "disabled"


def parse_microversion(version: str) -> tuple[int, ...]:
    """'2.53' -> (2, 53). Raises ValueError for anything non numeric."""
    text = version.strip()
    if text.lower().startswith("v"):
        text = text[1:]
    parts = tuple(int(p) for p in text.split("."))
    if not parts:
        raise ValueError(f"empty microversion {version!r}")
    return parts


def version_at_least(current: str, threshold: str) -> bool:
    return parse_microversion(current) >= parse_microversion(threshold)


@dataclass(frozen=True)
class CatalogPolicy:
    api_version: str | None = None
    include_slow: bool = False
    disabled: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class GatingResult:
    active: tuple[MetricSpec, ...]
    dropped: dict[str, str]                     # name -> reason

    @property
    def active_names(self) -> list[str]:
        return [s.name for s in self.active]


def check_unique(catalog: Iterable[MetricSpec]) -> None:
    seen: set[str] = set()
    for spec in catalog:
        if spec.name in seen:
            raise DuplicateMetricError(f"duplicate metric name {spec.name!r} in catalog")
        seen.add(spec.name)


def drop_reason(spec: MetricSpec, policy: CatalogPolicy) -> str | None:
    if spec.deprecated_since and policy.api_version:
        try:
            if version_at_least(policy.api_version, spec.deprecated_since):
                return REASON_DEPRECATED
        except ValueError:
            logger.warning("Unparseable microversion comparing %s (%s vs %s); keeping metric",
                           spec.name, policy.api_version, spec.deprecated_since)
    if spec.slow and not policy.include_slow:
        return REASON_SLOW
    if spec.name in policy.disabled:
        return REASON_DISABLED
    return None


def filter_catalog(catalog: Sequence[MetricSpec], policy: CatalogPolicy) -> GatingResult:
    """Return the active subset of ``catalog`` in catalog order."""
    check_unique(catalog)
    active: list[MetricSpec] = []
    dropped: dict[str, str] = {}
    for spec in catalog:
        reason = drop_reason(spec, policy)
        if reason is None:
            active.append(spec)
        else:
            dropped[spec.name] = reason
    unknown_disabled = policy.disabled - {s.name for s in catalog}
    if unknown_disabled:
        logger.warning("Disabled metrics not in catalog (ignored): %s", ", ".join(sorted(unknown_disabled)))
    logger.info(
        "metrics.catalog.filtered",
        extra={
            "event": "metrics.catalog.filtered",
            "api_version": policy.api_version,
            "include_slow": policy.include_slow,
            "active_count": len(active),
            "dropped_count": len(dropped),
        },
    )
    return GatingResult(active=tuple(active), dropped=dropped)


__all__ = [
    "CatalogPolicy",
    "GatingResult",
    "filter_catalog",
    "check_unique",
    "drop_reason",
    "parse_microversion",
    "version_at_least",
    "REASON_DEPRECATED",
    "REASON_SLOW",
    "REASON_DISABLED",
]
