#!/usr/bin/env python3
"""Nova team exporter entrypoint.

Usage:
    nova-exporter --cloud mycloud [--slow-metrics] [--disable-metric NAME ...]
    python -m nova_exporter --help

Startup order: settings -> logging -> cloud config -> client -> team cache
(first refresh inline, then background thread) -> registry (microversion
resolution + catalog gating) -> HTTP server. Blocks until SIGINT/SIGTERM.
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from dotenv import load_dotenv

from .config.clouds import load_cloud_config
from .config.settings import ExporterSettings, load_settings
from .metrics.registry import MetricRegistry
from .metrics.self_metrics import SelfMetrics
from .metrics.server import setup_metrics_server
from .provider.client import OpenStackClient
from .team.cache import TeamCache
from .team.refresher import TeamRefresher
from .utils.exceptions import ExporterError
from .utils.logging_utils import setup_logging
from .version import get_version

logger = logging.getLogger(__name__)


def _parse_listen(value: str) -> tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected host:port, got {value!r}")
    try:
        return host or "0.0.0.0", int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port in {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nova-exporter",
                                     description="OpenStack Nova Prometheus exporter with team labels")
    parser.add_argument("--cloud", help="clouds.yaml entry (env NOVA_EXPORTER_CLOUD / OS_CLOUD)")
    parser.add_argument("--os-client-config", dest="clouds_file", help="path to clouds.yaml")
    parser.add_argument("--endpoint-type", choices=["public", "internal", "admin"], help="catalog interface")
    parser.add_argument("--web.listen-address", dest="listen", type=_parse_listen,
                        help="host:port for the metrics endpoint (default 0.0.0.0:9180)")
    slow = parser.add_mutually_exclusive_group()
    slow.add_argument("--slow-metrics", dest="include_slow", action="store_true", default=None,
                      help="include slow metrics (per-tenant limits, usage)")
    slow.add_argument("--disable-slow-metrics", dest="include_slow", action="store_false",
                      help="exclude slow metrics (default)")
    parser.add_argument("--disable-metric", dest="disabled_metrics", action="append", metavar="NAME",
                        help="drop a metric by short name (repeatable)")
    parser.add_argument("--team-suffix", help="tenant tag suffix marking a team (default -team)")
    parser.add_argument("--team-refresh-interval", dest="team_refresh_seconds", type=float,
                        help="seconds between team cache refreshes")
    parser.add_argument("--request-timeout", type=float, help="per-request API timeout in seconds")
    parser.add_argument("--compute-api-version", dest="compute_microversion",
                        help="compute microversion override (env OS_COMPUTE_API_VERSION)")
    parser.add_argument("--log-level", help="logging level (default INFO)")
    parser.add_argument("--log-file", help="also log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    return parser


def settings_from_args(args: argparse.Namespace) -> ExporterSettings:
    host, port = args.listen if args.listen else (None, None)
    return load_settings(
        cloud=args.cloud,
        clouds_file=args.clouds_file,
        endpoint_type=args.endpoint_type,
        listen_host=host,
        listen_port=port,
        include_slow=args.include_slow,
        disabled_metrics=args.disabled_metrics,
        team_suffix=args.team_suffix,
        team_refresh_seconds=args.team_refresh_seconds,
        request_timeout=args.request_timeout,
        compute_microversion=args.compute_microversion,
        log_level=args.log_level,
        log_file=args.log_file,
    ).validate()


def run(settings: ExporterSettings) -> int:
    cloud = load_cloud_config(settings.cloud, settings.clouds_file)
    client = OpenStackClient(cloud, timeout=settings.request_timeout, interface=settings.endpoint_type)
    self_metrics = SelfMetrics()

    team_cache = TeamCache(settings.team_suffix, metrics=self_metrics)
    refresher = TeamRefresher(team_cache, client.list_projects, settings.team_refresh_seconds)
    refresher.run_once()
    refresher.start(immediate=False)
    try:
        registry = MetricRegistry.from_settings(client, team_cache, settings, self_metrics=self_metrics)
        _, shutdown = setup_metrics_server(registry, settings.listen_host, settings.listen_port)

        stop = threading.Event()

        def _handle(signum, _frame):  # pragma: no cover - signal path
            logger.info("Received signal %s; shutting down", signum)
            stop.set()

        signal.signal(signal.SIGINT, _handle)
        signal.signal(signal.SIGTERM, _handle)
        stop.wait()
        shutdown()
    finally:
        refresher.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ExporterError as e:
        setup_logging()
        logger.error("Invalid configuration: %s", e)
        return 2
    setup_logging(settings.log_level, settings.log_file)
    logger.info("nova-exporter %s starting (cloud=%s)", get_version(), settings.cloud)
    try:
        return run(settings)
    except ExporterError as e:
        logger.error("Startup failed: %s", e)
        return 1
    except OSError as e:
        logger.error("Startup failed (listen %s:%s): %s", settings.listen_host, settings.listen_port, e)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
