from __future__ import annotations

import threading

from nova_exporter.provider.errors import ProviderRecoverableError
from nova_exporter.team.cache import RefreshResult, TeamCache
from nova_exporter.team.refresher import TeamRefresher
from tests._helpers import tenants


def test_failures_back_off_and_success_resets():
    state = {"fail": True}

    def lister():
        if state["fail"]:
            raise ProviderRecoverableError("identity unavailable")
        return tenants(("t1", ["infra-team"]))

    r = TeamRefresher(TeamCache(), lister, interval=60, max_backoff=30)
    assert r.next_delay() == 60
    assert r.run_once() is RefreshResult.ERROR
    assert r.next_delay() == 5
    r.run_once()
    assert r.next_delay() == 10
    for _ in range(5):
        r.run_once()
    assert r.next_delay() == 30
    state["fail"] = False
    assert r.run_once() is RefreshResult.SUCCESS
    assert r.failures == 0
    assert r.next_delay() == 60
    assert r.cache.lookup_team("t1") == "infra-team"


def test_background_thread_refreshes_and_stops():
    done = threading.Event()

    def lister():
        done.set()
        return tenants(("t9", ["ops-team"]))

    cache = TeamCache()
    r = TeamRefresher(cache, lister, interval=3600)
    thread = r.start()
    assert r.start() is thread
    assert done.wait(5)
    r.stop()
    assert not thread.is_alive()
    assert cache.lookup_team("t9") == "ops-team"


def test_deferred_start_does_not_list_again():
    calls = []

    def lister():
        calls.append(1)
        return tenants(("t1", ["infra-team"]))

    r = TeamRefresher(TeamCache(), lister, interval=3600)
    r.run_once()
    thread = r.start(immediate=False)
    r.stop()
    assert not thread.is_alive()
    assert len(calls) == 1
