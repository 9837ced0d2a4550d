"""OpenStack API client used by producers and the team refresh job.

Thin ``requests`` wrapper around the handful of Keystone v3 and Nova
endpoints the exporter reads. Responsibilities:

  * Keystone v3 token issue (password or application credential) and
    service catalog endpoint resolution (interface + region aware).
  * Transparent re-authentication once on HTTP 401.
  * Compute microversion header on every compute request when set.
  * ``*_links`` pagination.
  * Per-request timeout on every call (scrape deadlines are bounded by it).
  * Translation of ``requests`` failures into ``provider.errors``.

The exporter core only depends on the ``CloudClient`` protocol below; tests
substitute in-memory fakes.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import requests

from ..config.clouds import CloudConfig
from .errors import (
    ProviderAuthError,
    ProviderFatalError,
    classify_provider_exception,
)
from .models import (
    Aggregate,
    ComputeLimits,
    ComputeService,
    Flavor,
    Hypervisor,
    Server,
    Tenant,
    TenantUsage,
)

logger = logging.getLogger(__name__)

COMPUTE = "compute"
IDENTITY = "identity"


class CloudClient(Protocol):
    """Operations the exporter core needs from the control plane."""

    microversion: str | None

    def list_projects(self) -> list[Tenant]: ...
    def list_servers(self, all_tenants: bool = True) -> list[Server]: ...
    def get_api_version(self) -> str | None: ...
    def list_flavors(self) -> list[Flavor]: ...
    def list_availability_zones(self) -> list[str]: ...
    def list_security_groups(self) -> list[str]: ...
    def list_compute_services(self) -> list[ComputeService]: ...
    def list_hypervisors(self) -> list[Hypervisor]: ...
    def list_aggregates(self) -> list[Aggregate]: ...
    def get_limits(self, tenant_id: str) -> ComputeLimits: ...
    def list_usage(self) -> list[TenantUsage]: ...


def _compute_root(endpoint: str) -> str:
    """Strip any project-id suffix so the URL points at the version document."""
    marker = "/v2.1"
    idx = endpoint.find(marker)
    if idx == -1:
        marker = "/v2"
        idx = endpoint.find(marker)
    if idx == -1:
        return endpoint.rstrip("/")
    return endpoint[: idx + len(marker)]


class OpenStackClient:
    """Keystone-authenticated HTTP client for identity + compute."""

    def __init__(self, cloud: CloudConfig, *, timeout: float = 30.0,
                 interface: str | None = None, microversion: str | None = None,
                 session: requests.Session | None = None):
        self.cloud = cloud
        self.timeout = timeout
        self.interface = interface or cloud.interface
        self.microversion = microversion
        self.session = session or requests.Session()
        self.session.verify = cloud.cacert if (cloud.verify and cloud.cacert) else cloud.verify
        self._token: str | None = None
        self._endpoints: dict[str, str] = {}
        self._auth_lock = threading.Lock()

    # ------------------------------------------------------------------ auth
    def _auth_body(self) -> dict[str, Any]:
        c = self.cloud
        if c.uses_application_credential:
            return {"auth": {"identity": {
                "methods": ["application_credential"],
                "application_credential": {
                    "id": c.application_credential_id,
                    "secret": c.application_credential_secret,
                },
            }}}
        if not (c.username and c.password):
            raise ProviderAuthError(f"cloud {c.name!r} has no usable credentials")
        body: dict[str, Any] = {"auth": {"identity": {
            "methods": ["password"],
            "password": {"user": {
                "name": c.username,
                "password": c.password,
                "domain": {"name": c.user_domain_name},
            }},
        }}}
        if c.project_id:
            body["auth"]["scope"] = {"project": {"id": c.project_id}}
        elif c.project_name:
            body["auth"]["scope"] = {"project": {
                "name": c.project_name,
                "domain": {"name": c.project_domain_name},
            }}
        return body

    def _pick_endpoints(self, catalog: list[dict[str, Any]]) -> dict[str, str]:
        found: dict[str, str] = {}
        for service in catalog:
            stype = service.get("type")
            if stype not in (COMPUTE, IDENTITY):
                continue
            for ep in service.get("endpoints") or ():
                if ep.get("interface") != self.interface:
                    continue
                region = self.cloud.region_name
                if region and ep.get("region_id", ep.get("region")) != region:
                    continue
                found[stype] = ep["url"].rstrip("/")
                break
        return found

    def authenticate(self) -> None:
        auth_url = self.cloud.auth_url
        if not auth_url.endswith("/v3"):
            auth_url = auth_url + "/v3"
        try:
            resp = self.session.post(auth_url + "/auth/tokens", json=self._auth_body(), timeout=self.timeout)
            resp.raise_for_status()
            token = resp.headers["X-Subject-Token"]
            catalog = resp.json()["token"].get("catalog") or []
        except (requests.RequestException, KeyError, ValueError) as e:
            raise classify_provider_exception(e)(f"keystone authentication failed: {e}") from e
        endpoints = self._pick_endpoints(catalog)
        endpoints.setdefault(IDENTITY, auth_url)
        self._token = token
        self._endpoints = endpoints
        logger.info("Authenticated against %s (services=%s)", self.cloud.auth_url, sorted(endpoints))

    def _ensure_token(self) -> str:
        with self._auth_lock:
            if self._token is None:
                self.authenticate()
            assert self._token is not None
            return self._token

    def _invalidate(self, token: str) -> None:
        with self._auth_lock:
            if self._token == token:
                self._token = None

    def endpoint(self, service: str) -> str:
        self._ensure_token()
        try:
            return self._endpoints[service]
        except KeyError:
            raise ProviderFatalError(f"service {service!r} not in catalog for interface {self.interface}") from None

    # --------------------------------------------------------------- requests
    def _request(self, service: str, path_or_url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = path_or_url if path_or_url.startswith("http") else self.endpoint(service) + path_or_url
        for attempt in (1, 2):
            token = self._ensure_token()
            headers = {"X-Auth-Token": token, "Accept": "application/json"}
            if service == COMPUTE and self.microversion:
                headers["OpenStack-API-Version"] = f"compute {self.microversion}"
                headers["X-OpenStack-Nova-API-Version"] = self.microversion
            try:
                resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
                if resp.status_code == 401 and attempt == 1:
                    logger.info("Token rejected by %s; re-authenticating", service)
                    self._invalidate(token)
                    continue
                resp.raise_for_status()
                return resp.json()
            except (requests.RequestException, ValueError) as e:
                raise classify_provider_exception(e)(f"GET {url} failed: {e}") from e
        raise ProviderAuthError(f"GET {url} rejected after re-authentication")

    def _paginate(self, service: str, path: str, key: str, params: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        body = self._request(service, path, params)
        while True:
            try:
                items = body[key]
            except KeyError:
                raise ProviderFatalError(f"response for {path} lacks {key!r}") from None
            yield from items
            next_href = None
            for link in body.get(f"{key}_links") or ():
                if link.get("rel") == "next":
                    next_href = link.get("href")
            if not next_href or not items:
                return
            body = self._request(service, next_href)

    # ------------------------------------------------------------- identity
    def list_projects(self) -> list[Tenant]:
        return [Tenant.from_api(p) for p in self._paginate(IDENTITY, "/projects", "projects")]

    # -------------------------------------------------------------- compute
    def get_api_version(self) -> str | None:
        body = self._request(COMPUTE, _compute_root(self.endpoint(COMPUTE)))
        version = (body.get("version") or {}).get("version")
        return version or None

    def list_servers(self, all_tenants: bool = True) -> list[Server]:
        params = {"all_tenants": "True"} if all_tenants else None
        return [Server.from_api(s) for s in self._paginate(COMPUTE, "/servers/detail", "servers", params)]

    def list_flavors(self) -> list[Flavor]:
        return [Flavor.from_api(f) for f in self._paginate(COMPUTE, "/flavors/detail", "flavors", {"is_public": "None"})]

    def list_availability_zones(self) -> list[str]:
        body = self._request(COMPUTE, "/os-availability-zone")
        return [z.get("zoneName", "") for z in body.get("availabilityZoneInfo") or ()]

    def list_security_groups(self) -> list[str]:
        body = self._request(COMPUTE, "/os-security-groups", {"all_tenants": "1"})
        return [str(g.get("id")) for g in body.get("security_groups") or ()]

    def list_compute_services(self) -> list[ComputeService]:
        body = self._request(COMPUTE, "/os-services")
        return [ComputeService.from_api(s) for s in body.get("services") or ()]

    def list_hypervisors(self) -> list[Hypervisor]:
        return [Hypervisor.from_api(h) for h in self._paginate(COMPUTE, "/os-hypervisors/detail", "hypervisors")]

    def list_aggregates(self) -> list[Aggregate]:
        body = self._request(COMPUTE, "/os-aggregates")
        return [Aggregate.from_api(a) for a in body.get("aggregates") or ()]

    def get_limits(self, tenant_id: str) -> ComputeLimits:
        return ComputeLimits.from_api(self._request(COMPUTE, "/limits", {"tenant_id": tenant_id}))

    def list_usage(self, window: timedelta = timedelta(days=1)) -> list[TenantUsage]:
        end = datetime.now(timezone.utc).replace(tzinfo=None)
        params = {
            "detailed": "1",
            "start": (end - window).isoformat(),
            "end": end.isoformat(),
        }
        return [TenantUsage.from_api(u) for u in self._paginate(COMPUTE, "/os-simple-tenant-usage", "tenant_usages", params)]


__all__ = ["CloudClient", "OpenStackClient"]
