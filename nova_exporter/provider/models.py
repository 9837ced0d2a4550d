"""Plain records extracted from Keystone / Nova payloads.

Producers only ever see these; the raw JSON shapes stay inside the client.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Tenant:
    id: str
    name: str = ""
    tags: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Tenant:
        return cls(
            id=payload["id"],
            name=payload.get("name") or "",
            tags=tuple(payload.get("tags") or ()),
        )


@dataclass(frozen=True)
class Server:
    id: str
    name: str = ""
    status: str = ""
    tenant_id: str = ""
    user_id: str = ""
    access_ipv4: str = ""
    access_ipv6: str = ""
    host_id: str = ""
    hypervisor_hostname: str = ""
    availability_zone: str = ""
    flavor_id: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Server:
        flavor = payload.get("flavor") or {}
        # Pre-2.47 responses carry the flavor id; later ones embed original_name.
        flavor_id = flavor.get("id") or flavor.get("original_name") or ""
        return cls(
            id=payload["id"],
            name=payload.get("name") or "",
            status=payload.get("status") or "",
            tenant_id=payload.get("tenant_id") or "",
            user_id=payload.get("user_id") or "",
            access_ipv4=payload.get("accessIPv4") or "",
            access_ipv6=payload.get("accessIPv6") or "",
            host_id=payload.get("hostId") or "",
            hypervisor_hostname=payload.get("OS-EXT-SRV-ATTR:hypervisor_hostname") or "",
            availability_zone=payload.get("OS-EXT-AZ:availability_zone") or "",
            flavor_id=str(flavor_id),
        )


@dataclass(frozen=True)
class Flavor:
    id: str
    name: str
    vcpus: int
    ram: int
    disk: int
    is_public: bool

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Flavor:
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            vcpus=int(payload.get("vcpus") or 0),
            ram=int(payload.get("ram") or 0),
            disk=int(payload.get("disk") or 0),
            is_public=bool(payload.get("os-flavor-access:is_public", True)),
        )


@dataclass(frozen=True)
class ComputeService:
    id: str
    host: str
    binary: str
    status: str
    state: str
    zone: str
    disabled_reason: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> ComputeService:
        return cls(
            id=str(payload["id"]),
            host=payload.get("host") or "",
            binary=payload.get("binary") or "",
            status=payload.get("status") or "",
            state=payload.get("state") or "",
            zone=payload.get("zone") or "",
            disabled_reason=payload.get("disabled_reason") or "",
        )


@dataclass(frozen=True)
class Hypervisor:
    hostname: str
    service_host: str = ""
    running_vms: int = 0
    current_workload: int = 0
    vcpus: int = 0
    vcpus_used: int = 0
    memory_mb: int = 0
    memory_mb_used: int = 0
    local_gb: int = 0
    local_gb_used: int = 0
    free_disk_gb: int = 0

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Hypervisor:
        def _int(key: str) -> int:
            return int(payload.get(key) or 0)
        return cls(
            hostname=payload.get("hypervisor_hostname") or "",
            service_host=(payload.get("service") or {}).get("host") or "",
            running_vms=_int("running_vms"),
            current_workload=_int("current_workload"),
            vcpus=_int("vcpus"),
            vcpus_used=_int("vcpus_used"),
            memory_mb=_int("memory_mb"),
            memory_mb_used=_int("memory_mb_used"),
            local_gb=_int("local_gb"),
            local_gb_used=_int("local_gb_used"),
            free_disk_gb=_int("free_disk_gb"),
        )


@dataclass(frozen=True)
class Aggregate:
    name: str
    availability_zone: str = ""
    hosts: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> Aggregate:
        return cls(
            name=payload.get("name") or "",
            availability_zone=payload.get("availability_zone") or "",
            hosts=tuple(payload.get("hosts") or ()),
        )


@dataclass(frozen=True)
class ComputeLimits:
    max_total_cores: int = 0
    total_cores_used: int = 0
    max_total_ram_size: int = 0
    total_ram_used: int = 0
    max_total_instances: int = 0
    total_instances_used: int = 0

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> ComputeLimits:
        absolute = (payload.get("limits") or {}).get("absolute") or {}
        def _int(key: str) -> int:
            return int(absolute.get(key) or 0)
        return cls(
            max_total_cores=_int("maxTotalCores"),
            total_cores_used=_int("totalCoresUsed"),
            max_total_ram_size=_int("maxTotalRAMSize"),
            total_ram_used=_int("totalRAMUsed"),
            max_total_instances=_int("maxTotalInstances"),
            total_instances_used=_int("totalInstancesUsed"),
        )


@dataclass(frozen=True)
class ServerUsage:
    instance_id: str
    name: str
    tenant_id: str
    local_gb: float

    @classmethod
    def from_api(cls, payload: dict[str, Any], tenant_id: str) -> ServerUsage:
        return cls(
            instance_id=payload.get("instance_id") or "",
            name=payload.get("name") or "",
            tenant_id=tenant_id,
            local_gb=float(payload.get("local_gb") or 0),
        )


@dataclass(frozen=True)
class TenantUsage:
    tenant_id: str
    servers: tuple[ServerUsage, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> TenantUsage:
        tenant_id = payload.get("tenant_id") or ""
        servers = tuple(
            ServerUsage.from_api(s, tenant_id) for s in payload.get("server_usages") or ()
        )
        return cls(tenant_id=tenant_id, servers=servers)


__all__ = [
    "Tenant",
    "Server",
    "Flavor",
    "ComputeService",
    "Hypervisor",
    "Aggregate",
    "ComputeLimits",
    "ServerUsage",
    "TenantUsage",
]
