"""Nova metric producers.

One strategy class per metric family. Each reads the control plane through
``registry.client`` and writes samples via ``registry.emit``; sibling metrics
sharing a data pass are addressed by name.
"""
from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from .status import map_server_status

if TYPE_CHECKING:  # pragma: no cover
    from .conduit import SampleSink
    from .registry import MetricRegistry

MEGABYTE = 1024 * 1024
GIGABYTE = 1024 * MEGABYTE


class FlavorsProducer:
    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        flavors = registry.client.list_flavors()
        registry.emit(out, "flavors", len(flavors))
        for f in flavors:
            registry.emit(out, "flavor", 1, f.id, f.name, f.vcpus, f.ram, f.disk, str(f.is_public).lower())


class AvailabilityZonesProducer:
    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        registry.emit(out, "availability_zones", len(registry.client.list_availability_zones()))


class SecurityGroupsProducer:
    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        registry.emit(out, "security_groups", len(registry.client.list_security_groups()))


class ServersProducer:
    """total_vms plus one server_status sample per server, team enriched."""

    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        servers = registry.client.list_servers(all_tenants=True)
        registry.emit(out, "total_vms", len(servers))
        lookup = registry.team_cache.lookup_team
        for s in servers:
            registry.emit(
                out, "server_status", map_server_status(s.status),
                s.id, s.status, s.name, s.tenant_id, s.user_id, s.access_ipv4,
                s.access_ipv6, s.host_id, s.hypervisor_hostname, s.id,
                s.availability_zone, s.flavor_id, lookup(s.tenant_id),
            )


class AgentStateProducer:
    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        for svc in registry.client.list_compute_services():
            state = 1 if svc.state == "up" else 0
            registry.emit(out, "agent_state", state, svc.id, svc.host, svc.binary,
                          svc.status, svc.zone, svc.disabled_reason)


class HypervisorsProducer:
    """Capacity gauges per hypervisor, labelled with its zone and aggregates."""

    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        client = registry.client
        hypervisors = client.list_hypervisors()
        host_aggregates: dict[str, list[str]] = defaultdict(list)
        host_zone: dict[str, str] = {}
        for agg in client.list_aggregates():
            for host in agg.hosts:
                host_aggregates[host].append(agg.name)
                if agg.availability_zone:
                    host_zone[host] = agg.availability_zone
        for h in hypervisors:
            key = h.service_host or h.hostname
            labels = (h.hostname, host_zone.get(key, ""), ",".join(host_aggregates.get(key, ())))
            registry.emit(out, "running_vms", h.running_vms, *labels)
            registry.emit(out, "current_workload", h.current_workload, *labels)
            registry.emit(out, "vcpus_available", h.vcpus, *labels)
            registry.emit(out, "vcpus_used", h.vcpus_used, *labels)
            registry.emit(out, "memory_available_bytes", h.memory_mb * MEGABYTE, *labels)
            registry.emit(out, "memory_used_bytes", h.memory_mb_used * MEGABYTE, *labels)
            registry.emit(out, "local_storage_available_bytes", h.local_gb * GIGABYTE, *labels)
            registry.emit(out, "local_storage_used_bytes", h.local_gb_used * GIGABYTE, *labels)
            registry.emit(out, "free_disk_bytes", h.free_disk_gb * GIGABYTE, *labels)


class LimitsProducer:
    """Per-tenant quota usage; one limits call per project (slow)."""

    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        client = registry.client
        for tenant in client.list_projects():
            limits = client.get_limits(tenant.id)
            labels = (tenant.name, tenant.id)
            registry.emit(out, "limits_vcpus_max", limits.max_total_cores, *labels)
            registry.emit(out, "limits_vcpus_used", limits.total_cores_used, *labels)
            registry.emit(out, "limits_memory_max", limits.max_total_ram_size, *labels)
            registry.emit(out, "limits_memory_used", limits.total_ram_used, *labels)
            registry.emit(out, "limits_instances_used", limits.total_instances_used, *labels)
            registry.emit(out, "limits_instances_max", limits.max_total_instances, *labels)


class UsageProducer:
    def produce(self, registry: MetricRegistry, out: SampleSink) -> None:
        for usage in registry.client.list_usage():
            for s in usage.servers:
                registry.emit(out, "server_local_gb", s.local_gb, s.name, s.instance_id, s.tenant_id)


__all__ = [
    "FlavorsProducer",
    "AvailabilityZonesProducer",
    "SecurityGroupsProducer",
    "ServersProducer",
    "AgentStateProducer",
    "HypervisorsProducer",
    "LimitsProducer",
    "UsageProducer",
]
