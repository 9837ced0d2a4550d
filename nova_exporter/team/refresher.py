"""Periodic team cache refresh thread.

Runs ``TeamCache.refresh`` every ``interval`` seconds for the life of the
process. After a failed listing the next attempt comes on a short
exponential schedule (5s, 10s, 20s, ...) capped at ``max_backoff``; the
first success returns to the normal period.
"""
from __future__ import annotations

import logging
import threading

from .cache import RefreshResult, TeamCache, TenantLister

logger = logging.getLogger(__name__)


class TeamRefresher:
    def __init__(self, cache: TeamCache, list_tenants: TenantLister, interval: float = 300.0,
                 *, max_backoff: float | None = None):
        self.cache = cache
        self.list_tenants = list_tenants
        self.interval = interval
        self.max_backoff = max_backoff if max_backoff is not None else interval * 4
        self.failures = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def next_delay(self) -> float:
        if self.failures == 0:
            return self.interval
        # On failure retry sooner than the full period, growing toward max_backoff.
        base = min(self.interval, 5.0)
        return min(self.max_backoff, base * (2 ** (self.failures - 1)))

    def run_once(self) -> RefreshResult:
        result = self.cache.refresh(self.list_tenants)
        if result is RefreshResult.SUCCESS:
            self.failures = 0
        elif result is RefreshResult.ERROR:
            self.failures += 1
        return result

    def _loop(self, immediate: bool) -> None:
        delay = 0.0 if immediate else self.next_delay()
        while not self._stop.wait(delay):
            try:
                self.run_once()
            except Exception:
                logger.exception("Team refresh iteration failed")
                self.failures += 1
            delay = self.next_delay()

    def start(self, *, immediate: bool = True) -> threading.Thread:
        """Launch the refresh thread.

        With ``immediate=False`` the first refresh waits one ``next_delay()``
        (for callers that already ran ``run_once`` inline).
        """
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        t = threading.Thread(target=self._loop, args=(immediate,), name="nova-team-refresh", daemon=True)
        t.start()
        self._thread = t
        logger.info("Team refresh thread started (interval=%ss)", self.interval)
        return t

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


__all__ = ["TeamRefresher"]
