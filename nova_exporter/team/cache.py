"""Tenant to team lookup cache.

Readers call ``lookup_team`` on every server sample; the refresh job rebuilds
the whole mapping from the identity service on a period.

Concurrency model:
  * The visible state is one immutable snapshot (``MappingProxyType`` over a
    private dict). ``lookup_team`` reads the current reference once and never
    takes a lock, so it cannot block on a refresh.
  * ``refresh`` lists tenants and builds the complete new mapping with no
    lock held, then swaps the snapshot reference under ``_swap_lock``.
    Readers see the old or the new generation, never a mix.
  * Concurrent ``refresh`` calls coalesce: a call arriving while another is
    in flight returns SKIPPED immediately without touching state.

A tenant whose team tag disappears is absent from the next generation, so its
lookup returns "" again.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..config.settings import DEFAULT_TEAM_SUFFIX
from ..provider.models import Tenant

if TYPE_CHECKING:  # pragma: no cover
    from ..metrics.self_metrics import SelfMetrics

logger = logging.getLogger(__name__)

TenantLister = Callable[[], Iterable[Tenant]]


class RefreshResult(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"


def extract_team(tags: Iterable[str], suffix: str = DEFAULT_TEAM_SUFFIX) -> str:
    """First tag ending with ``suffix`` in tag order, or "".

    Source data is expected to carry at most one team tag per tenant; when it
    carries several the first listed wins.
    """
    for tag in tags:
        if tag.endswith(suffix):
            return tag
    return ""


def build_team_map(tenants: Iterable[Tenant], suffix: str = DEFAULT_TEAM_SUFFIX) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for tenant in tenants:
        team = extract_team(tenant.tags, suffix)
        if team:
            mapping[tenant.id] = team
    return mapping


class TeamCache:
    """Concurrently readable tenant-id -> team-name snapshot."""

    def __init__(self, suffix: str = DEFAULT_TEAM_SUFFIX, *, metrics: SelfMetrics | None = None):
        self.suffix = suffix
        self.metrics = metrics
        self._snapshot: Mapping[str, str] = MappingProxyType({})
        self._generation = 0
        self._refreshed_at: float | None = None
        self._swap_lock = threading.Lock()
        self._refresh_lock = threading.Lock()

    # ---------------------------------------------------------------- reads
    def lookup_team(self, tenant_id: str) -> str:
        return self._snapshot.get(tenant_id, "")

    def snapshot(self) -> Mapping[str, str]:
        return self._snapshot

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def refreshed_at(self) -> float | None:
        return self._refreshed_at

    def __len__(self) -> int:
        return len(self._snapshot)

    # --------------------------------------------------------------- writes
    def replace(self, mapping: Mapping[str, str]) -> int:
        """Publish ``mapping`` as the next generation. Returns its number."""
        frozen = MappingProxyType(dict(mapping))
        with self._swap_lock:
            self._snapshot = frozen
            self._generation += 1
            refreshed_at = self._refreshed_at = time.time()
            generation = self._generation
        if self.metrics is not None:
            self.metrics.team_cache_entries.set(len(frozen))
            self.metrics.team_cache_last_refresh.set(refreshed_at)
        return generation

    def refresh(self, list_tenants: TenantLister) -> RefreshResult:
        """Run one refresh cycle.

        SUCCESS publishes a new generation; ERROR keeps the previous one;
        SKIPPED means another refresh was already in flight.
        """
        if not self._refresh_lock.acquire(blocking=False):
            logger.debug("Team cache refresh already in flight; skipping")
            return self._count(RefreshResult.SKIPPED)
        try:
            logger.info("Updating tenant team map...")
            try:
                tenants = list(list_tenants())
            except Exception as e:
                logger.error("could not list tenants, keeping generation %s: %s", self._generation, e)
                return self._count(RefreshResult.ERROR)
            mapping = build_team_map(tenants, self.suffix)
            generation = self.replace(mapping)
            logger.info("Tenant team map updated (generation=%s tenants=%s teams=%s)",
                        generation, len(tenants), len(mapping))
            return self._count(RefreshResult.SUCCESS)
        finally:
            self._refresh_lock.release()

    def _count(self, result: RefreshResult) -> RefreshResult:
        if self.metrics is not None:
            self.metrics.team_refresh.labels(result=result.value).inc()
        return result


__all__ = ["TeamCache", "RefreshResult", "TenantLister", "extract_team", "build_team_map"]
