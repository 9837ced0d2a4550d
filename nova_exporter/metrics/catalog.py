"""Canonical Nova metric catalog.

Single ordered source of truth for the exporter's metrics. Order is the
exposition order. Entries without a producer are emitted by the preceding
family producer in the same data pass.

Deprecations follow the compute API:
  * 2.36 removed the os-security-groups proxy.
  * 2.88 removed hypervisor capacity fields from os-hypervisors.
"""
from __future__ import annotations

from .producers import (
    AgentStateProducer,
    AvailabilityZonesProducer,
    FlavorsProducer,
    HypervisorsProducer,
    LimitsProducer,
    SecurityGroupsProducer,
    ServersProducer,
    UsageProducer,
)
from .spec import MetricSpec

HYPERVISOR_LABELS = ("hostname", "availability_zone", "aggregates")
LIMIT_LABELS = ("tenant", "tenant_id")
SERVER_STATUS_LABELS = (
    "id", "status", "name", "tenant_id", "user_id", "address_ipv4",
    "address_ipv6", "host_id", "hypervisor_hostname", "uuid",
    "availability_zone", "flavor_id", "team",
)

HYPERVISOR_STATS_REMOVED = "2.88"

NOVA_METRICS: list[MetricSpec] = [
    MetricSpec("flavors", producer=FlavorsProducer(), doc="Number of flavors"),
    MetricSpec("flavor", ("id", "name", "vcpus", "ram", "disk", "is_public"),
               doc="Flavor information (value always 1)"),
    MetricSpec("availability_zones", producer=AvailabilityZonesProducer(),
               doc="Number of availability zones"),
    MetricSpec("security_groups", producer=SecurityGroupsProducer(), deprecated_since="2.36",
               doc="Number of security groups"),
    MetricSpec("total_vms", producer=ServersProducer(), doc="Number of servers across all tenants"),
    MetricSpec("server_status", SERVER_STATUS_LABELS,
               doc="Server status ordinal (see status mapping; -1 unknown)"),
    MetricSpec("agent_state", ("id", "hostname", "service", "adminState", "zone", "disabledReason"),
               producer=AgentStateProducer(), doc="Compute service state (1 up, 0 down)"),
    MetricSpec("running_vms", HYPERVISOR_LABELS, producer=HypervisorsProducer(),
               deprecated_since=HYPERVISOR_STATS_REMOVED, doc="Servers running on the hypervisor"),
    MetricSpec("current_workload", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("vcpus_available", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("vcpus_used", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("memory_available_bytes", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("memory_used_bytes", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("local_storage_available_bytes", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("local_storage_used_bytes", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("free_disk_bytes", HYPERVISOR_LABELS, deprecated_since=HYPERVISOR_STATS_REMOVED),
    MetricSpec("limits_vcpus_max", LIMIT_LABELS, producer=LimitsProducer(), slow=True),
    MetricSpec("limits_vcpus_used", LIMIT_LABELS, slow=True),
    MetricSpec("limits_memory_max", LIMIT_LABELS, slow=True, doc="Tenant RAM quota (MB)"),
    MetricSpec("limits_memory_used", LIMIT_LABELS, slow=True, doc="Tenant RAM in use (MB)"),
    MetricSpec("limits_instances_used", LIMIT_LABELS, slow=True),
    MetricSpec("limits_instances_max", LIMIT_LABELS, slow=True),
    MetricSpec("server_local_gb", ("name", "id", "tenant_id"), producer=UsageProducer(), slow=True,
               doc="Local disk (GB) per server from simple tenant usage"),
]

__all__ = ["NOVA_METRICS", "HYPERVISOR_LABELS", "LIMIT_LABELS", "SERVER_STATUS_LABELS"]
