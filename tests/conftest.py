"""Pytest configuration for the exporter.

Responsibilities:
1. Strip exporter / OpenStack environment variables so settings tests are
   deterministic regardless of the developer shell.
2. Provide isolated SelfMetrics / TeamCache instances (each with its own
   CollectorRegistry) so tests never share Prometheus state.
"""
from __future__ import annotations

import os

import pytest

from nova_exporter.metrics.self_metrics import SelfMetrics
from nova_exporter.team.cache import TeamCache

from tests._helpers import FakeClient


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith(("NOVA_EXPORTER_", "OS_")):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def self_metrics() -> SelfMetrics:
    return SelfMetrics()


@pytest.fixture()
def team_cache(self_metrics) -> TeamCache:
    return TeamCache(metrics=self_metrics)


@pytest.fixture()
def fake_client() -> FakeClient:
    return FakeClient()
