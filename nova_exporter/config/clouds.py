from __future__ import annotations

"""clouds.yaml loading.

Resolves one named cloud from the standard OpenStack client config search
path and normalizes it into a CloudConfig consumed by the provider client.

Search order:
  1. explicit path argument / OS_CLIENT_CONFIG_FILE
  2. ./clouds.yaml
  3. ~/.config/openstack/clouds.yaml
  4. /etc/openstack/clouds.yaml
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..utils.exceptions import ConfigError

logger = logging.getLogger(__name__)

SEARCH_PATHS = (
    Path("clouds.yaml"),
    Path.home() / ".config" / "openstack" / "clouds.yaml",
    Path("/etc/openstack/clouds.yaml"),
)


@dataclass(frozen=True)
class CloudConfig:
    name: str
    auth_url: str
    username: str | None = None
    password: str | None = None
    project_name: str | None = None
    project_id: str | None = None
    user_domain_name: str = "Default"
    project_domain_name: str = "Default"
    application_credential_id: str | None = None
    application_credential_secret: str | None = None
    region_name: str | None = None
    interface: str = "public"
    verify: bool = True
    cacert: str | None = None

    @property
    def uses_application_credential(self) -> bool:
        return bool(self.application_credential_id and self.application_credential_secret)


def _find_clouds_file(explicit: str | None) -> Path:
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"clouds file not found: {path}")
        return path
    for candidate in SEARCH_PATHS:
        if candidate.is_file():
            return candidate
    raise ConfigError("no clouds.yaml found in " + ", ".join(str(p) for p in SEARCH_PATHS))


def _parse_cloud(name: str, entry: dict[str, Any]) -> CloudConfig:
    auth = entry.get("auth") or {}
    auth_url = auth.get("auth_url")
    if not auth_url:
        raise ConfigError(f"cloud {name!r} has no auth.auth_url")
    verify = entry.get("verify", True)
    if isinstance(verify, str):
        verify = verify.strip().lower() not in {"0", "false", "no", "off"}
    return CloudConfig(
        name=name,
        auth_url=str(auth_url).rstrip("/"),
        username=auth.get("username"),
        password=auth.get("password"),
        project_name=auth.get("project_name"),
        project_id=auth.get("project_id"),
        user_domain_name=auth.get("user_domain_name", "Default"),
        project_domain_name=auth.get("project_domain_name", "Default"),
        application_credential_id=auth.get("application_credential_id"),
        application_credential_secret=auth.get("application_credential_secret"),
        region_name=entry.get("region_name"),
        interface=entry.get("interface", "public"),
        verify=bool(verify),
        cacert=entry.get("cacert"),
    )


def load_cloud_config(cloud: str, path: str | None = None) -> CloudConfig:
    """Load and normalize a single cloud entry."""
    clouds_file = _find_clouds_file(path)
    try:
        with clouds_file.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {clouds_file}: {e}") from e
    clouds = raw.get("clouds") or {}
    if cloud not in clouds:
        raise ConfigError(f"cloud {cloud!r} not defined in {clouds_file}")
    config = _parse_cloud(cloud, clouds[cloud] or {})
    if not config.verify:
        logger.info("SSL verification disabled for cloud %s", cloud)
    logger.debug("Loaded cloud %s from %s", cloud, clouds_file)
    return config

__all__ = ["CloudConfig", "load_cloud_config", "SEARCH_PATHS"]
