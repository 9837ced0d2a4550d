"""Exporter runtime settings.

Environment Flags (all optional; CLI flags override them):
  NOVA_EXPORTER_LISTEN_HOST / NOVA_EXPORTER_LISTEN_PORT  exposition bind address
  NOVA_EXPORTER_CLOUD            clouds.yaml entry name
  NOVA_EXPORTER_ENDPOINT_TYPE    catalog interface (public/internal/admin)
  NOVA_EXPORTER_SLOW_METRICS=1   include slow (expensive) metrics
  NOVA_EXPORTER_DISABLE_METRICS  comma separated metric names to drop
                                 (--disable-metric values are added to this set)
  NOVA_EXPORTER_TEAM_SUFFIX      tenant tag suffix marking a team (default "-team")
  NOVA_EXPORTER_TEAM_REFRESH_SECONDS  team cache refresh period
  NOVA_EXPORTER_REQUEST_TIMEOUT  per-request timeout for API calls (seconds)
  NOVA_EXPORTER_CONDUIT_SIZE     bounded sample queue size per scrape
  OS_COMPUTE_API_VERSION         compute microversion override
"""
from __future__ import annotations

from dataclasses import dataclass, field

from ..utils.exceptions import ConfigError
from . import env_adapter as env

DEFAULT_TEAM_SUFFIX = "-team"


@dataclass
class ExporterSettings:
    listen_host: str = "0.0.0.0"
    listen_port: int = 9180
    cloud: str = ""
    clouds_file: str | None = None
    endpoint_type: str = "public"
    include_slow: bool = False
    disabled_metrics: frozenset[str] = field(default_factory=frozenset)
    team_suffix: str = DEFAULT_TEAM_SUFFIX
    team_refresh_seconds: float = 300.0
    request_timeout: float = 30.0
    compute_microversion: str | None = None
    conduit_size: int = 1000
    namespace: str = "openstack"
    log_level: str = "INFO"
    log_file: str | None = None

    def validate(self) -> ExporterSettings:
        if not self.cloud:
            raise ConfigError("no cloud selected (set --cloud or NOVA_EXPORTER_CLOUD)")
        if not (0 < self.listen_port < 65536):
            raise ConfigError(f"invalid listen port {self.listen_port}")
        if self.team_refresh_seconds <= 0:
            raise ConfigError("team refresh interval must be positive")
        if self.request_timeout <= 0:
            raise ConfigError("request timeout must be positive")
        if not self.team_suffix:
            raise ConfigError("team suffix must not be empty")
        if self.conduit_size < 1:
            raise ConfigError("conduit size must be at least 1")
        return self


def load_settings(**overrides) -> ExporterSettings:
    """Build settings from the environment, then apply non-None overrides."""
    microversion = env.get_str("OS_COMPUTE_API_VERSION").strip() or None
    settings = ExporterSettings(
        listen_host=env.get_str("NOVA_EXPORTER_LISTEN_HOST", "0.0.0.0"),
        listen_port=env.get_int("NOVA_EXPORTER_LISTEN_PORT", 9180),
        cloud=env.get_str("NOVA_EXPORTER_CLOUD", env.get_str("OS_CLOUD")),
        clouds_file=env.get_str("OS_CLIENT_CONFIG_FILE") or None,
        endpoint_type=env.get_str("NOVA_EXPORTER_ENDPOINT_TYPE", "public"),
        include_slow=env.get_bool("NOVA_EXPORTER_SLOW_METRICS"),
        disabled_metrics=frozenset(env.get_csv("NOVA_EXPORTER_DISABLE_METRICS")),
        team_suffix=env.get_str("NOVA_EXPORTER_TEAM_SUFFIX", DEFAULT_TEAM_SUFFIX),
        team_refresh_seconds=env.get_float("NOVA_EXPORTER_TEAM_REFRESH_SECONDS", 300.0),
        request_timeout=env.get_float("NOVA_EXPORTER_REQUEST_TIMEOUT", 30.0),
        compute_microversion=microversion,
        conduit_size=env.get_int("NOVA_EXPORTER_CONDUIT_SIZE", 1000),
        log_level=env.get_str("NOVA_EXPORTER_LOG_LEVEL", "INFO"),
        log_file=env.get_str("NOVA_EXPORTER_LOG_FILE") or None,
    )
    for key, value in overrides.items():
        if value is None:
            continue
        if not hasattr(settings, key):
            raise ConfigError(f"unknown setting {key!r}")
        if key == "disabled_metrics":
            value = settings.disabled_metrics | frozenset(value)
        setattr(settings, key, value)
    return settings

__all__ = ["ExporterSettings", "load_settings", "DEFAULT_TEAM_SUFFIX"]
