"""Catalog gating: deprecation, slow opt-in, operator disables, uniqueness."""
from __future__ import annotations

import pytest

from nova_exporter.metrics.catalog import NOVA_METRICS
from nova_exporter.metrics.gating import (
    REASON_DEPRECATED,
    REASON_DISABLED,
    REASON_SLOW,
    CatalogPolicy,
    filter_catalog,
    parse_microversion,
    version_at_least,
)
from nova_exporter.metrics.spec import DECLARED_ONLY, MetricSpec
from nova_exporter.utils.exceptions import DuplicateMetricError


class _Noop:
    def produce(self, registry, out):
        return None


CATALOG = [
    MetricSpec("a", producer=_Noop()),
    MetricSpec("b", ("x",)),
    MetricSpec("old", producer=_Noop(), deprecated_since="2.53"),
    MetricSpec("slow_one", producer=_Noop(), slow=True),
    MetricSpec("slow_old", producer=_Noop(), slow=True, deprecated_since="2.53"),
    MetricSpec("c", producer=_Noop()),
]


def test_filtering_is_deterministic_and_ordered():
    policy = CatalogPolicy(api_version="2.60", include_slow=True)
    first = filter_catalog(CATALOG, policy)
    second = filter_catalog(list(CATALOG), policy)
    assert first.active_names == second.active_names == ["a", "b", "slow_one", "c"]
    assert first.dropped == second.dropped


@pytest.mark.parametrize("version,kept", [
    ("2.1", True),
    ("2.52", True),
    ("2.9", True),
    ("2.53", False),
    ("2.54", False),
    ("2.100", False),
])
def test_deprecated_since_boundary(version, kept):
    result = filter_catalog(CATALOG, CatalogPolicy(api_version=version))
    assert ("old" in result.active_names) is kept
    if not kept:
        assert result.dropped["old"] == REASON_DEPRECATED


def test_unknown_api_version_keeps_deprecated_specs():
    result = filter_catalog(CATALOG, CatalogPolicy(api_version=None))
    assert "old" in result.active_names


def test_slow_excluded_unless_included():
    excluded = filter_catalog(CATALOG, CatalogPolicy(api_version="2.1", include_slow=False))
    assert "slow_one" not in excluded.active_names
    assert excluded.dropped["slow_one"] == REASON_SLOW
    # Slow and not yet deprecated: still excluded without opt-in
    assert "slow_old" not in excluded.active_names

    included = filter_catalog(CATALOG, CatalogPolicy(api_version="2.1", include_slow=True))
    assert "slow_one" in included.active_names
    assert "slow_old" in included.active_names


def test_slow_and_deprecated_dropped_even_when_slow_included():
    result = filter_catalog(CATALOG, CatalogPolicy(api_version="2.53", include_slow=True))
    assert "slow_one" in result.active_names
    assert "slow_old" not in result.active_names


def test_operator_disable_list():
    result = filter_catalog(CATALOG, CatalogPolicy(disabled=frozenset({"c", "not_a_metric"})))
    assert "c" not in result.active_names
    assert result.dropped["c"] == REASON_DISABLED


def test_declared_only_specs_stay_active():
    result = filter_catalog(CATALOG, CatalogPolicy())
    b = [s for s in result.active if s.name == "b"][0]
    assert b.producer is DECLARED_ONLY
    assert not b.has_producer


def test_duplicate_names_fail_regardless_of_policy():
    dup = [MetricSpec("a"), MetricSpec("a", slow=True)]
    with pytest.raises(DuplicateMetricError):
        filter_catalog(dup, CatalogPolicy(include_slow=False))


def test_microversion_parsing():
    assert parse_microversion("2.53") == (2, 53)
    assert parse_microversion("v2.1") == (2, 1)
    assert version_at_least("2.10", "2.9")
    assert not version_at_least("2.9", "2.10")
    with pytest.raises(ValueError):
        parse_microversion("latest")


def test_unparseable_version_keeps_spec():
    result = filter_catalog(CATALOG, CatalogPolicy(api_version="latest"))
    assert "old" in result.active_names


def test_nova_catalog_is_unique_and_shared_labels_match():
    names = [s.name for s in NOVA_METRICS]
    assert len(names) == len(set(names))
    by_name = {s.name: s for s in NOVA_METRICS}
    hyper = by_name["running_vms"].labels
    for sibling in ("current_workload", "vcpus_used", "free_disk_bytes"):
        assert by_name[sibling].labels == hyper
        assert not by_name[sibling].has_producer
    assert by_name["server_status"].labels[-1] == "team"
    assert all(by_name[n].slow for n in names if n.startswith("limits_"))


def test_nova_catalog_hypervisor_family_drops_together():
    result = filter_catalog(NOVA_METRICS, CatalogPolicy(api_version="2.88"))
    for name in ("running_vms", "vcpus_used", "memory_used_bytes"):
        assert result.dropped[name] == REASON_DEPRECATED
    assert result.dropped["security_groups"] == REASON_DEPRECATED
    assert "server_status" in result.active_names
