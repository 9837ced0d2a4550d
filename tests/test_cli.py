from __future__ import annotations

import argparse
import threading

import pytest

from nova_exporter import cli
from tests._helpers import FakeClient, tenants


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)


def _settings(*argv):
    return cli.settings_from_args(cli.build_parser().parse_args(list(argv)))


def test_parse_listen():
    assert cli._parse_listen("127.0.0.1:9000") == ("127.0.0.1", 9000)
    assert cli._parse_listen(":9100") == ("0.0.0.0", 9100)
    with pytest.raises(argparse.ArgumentTypeError):
        cli._parse_listen("9100")
    with pytest.raises(argparse.ArgumentTypeError):
        cli._parse_listen("host:port")


def test_flags_map_onto_settings():
    s = _settings(
        "--cloud", "prod",
        "--web.listen-address", "127.0.0.1:9911",
        "--slow-metrics",
        "--disable-metric", "flavor",
        "--disable-metric", "agent_state",
        "--team-suffix", ":squad",
        "--team-refresh-interval", "60",
        "--compute-api-version", "2.53",
        "--endpoint-type", "internal",
    )
    assert (s.listen_host, s.listen_port) == ("127.0.0.1", 9911)
    assert s.include_slow is True
    assert s.disabled_metrics == {"flavor", "agent_state"}
    assert s.team_suffix == ":squad"
    assert s.team_refresh_seconds == 60.0
    assert s.compute_microversion == "2.53"
    assert s.endpoint_type == "internal"


def test_flags_override_env(monkeypatch):
    monkeypatch.setenv("NOVA_EXPORTER_CLOUD", "from-env")
    monkeypatch.setenv("NOVA_EXPORTER_SLOW_METRICS", "1")
    s = _settings("--disable-slow-metrics")
    assert s.cloud == "from-env"
    assert s.include_slow is False
    assert _settings().include_slow is True


def test_main_rejects_missing_cloud():
    assert cli.main([]) == 2


def test_main_reports_startup_failure(tmp_path):
    assert cli.main(["--cloud", "prod", "--os-client-config", str(tmp_path / "absent.yaml")]) == 1


def test_port_in_use_exits_cleanly_and_stops_refresh(monkeypatch):
    client = FakeClient(projects=tenants(("t1", ["infra-team"])))

    def _busy(*_a, **_k):
        raise OSError(98, "Address already in use")

    monkeypatch.setattr(cli, "load_cloud_config", lambda *_a: object())
    monkeypatch.setattr(cli, "OpenStackClient", lambda *_a, **_k: client)
    monkeypatch.setattr(cli, "setup_metrics_server", _busy)

    assert cli.main(["--cloud", "prod", "--team-refresh-interval", "3600"]) == 1
    assert client.calls.count("list_projects") == 1
    assert not [t for t in threading.enumerate() if t.name == "nova-team-refresh" and t.is_alive()]
