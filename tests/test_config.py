from __future__ import annotations

import textwrap

import pytest

from nova_exporter.config.clouds import load_cloud_config
from nova_exporter.config.settings import ExporterSettings, load_settings
from nova_exporter.utils.exceptions import ConfigError


def test_settings_defaults_from_empty_env():
    s = load_settings()
    assert s.listen_port == 9180
    assert s.cloud == ""
    assert s.include_slow is False
    assert s.disabled_metrics == frozenset()
    assert s.team_suffix == "-team"
    assert s.compute_microversion is None


def test_settings_read_from_env(monkeypatch):
    monkeypatch.setenv("OS_CLOUD", "fallback")
    monkeypatch.setenv("NOVA_EXPORTER_LISTEN_PORT", "9999")
    monkeypatch.setenv("NOVA_EXPORTER_SLOW_METRICS", "yes")
    monkeypatch.setenv("NOVA_EXPORTER_DISABLE_METRICS", "flavor, agent_state ,")
    monkeypatch.setenv("NOVA_EXPORTER_TEAM_REFRESH_SECONDS", "not-a-number")
    monkeypatch.setenv("OS_COMPUTE_API_VERSION", " 2.79 ")
    s = load_settings()
    assert s.cloud == "fallback"
    assert s.listen_port == 9999
    assert s.include_slow is True
    assert s.disabled_metrics == {"flavor", "agent_state"}
    assert s.team_refresh_seconds == 300.0
    assert s.compute_microversion == "2.79"

    monkeypatch.setenv("NOVA_EXPORTER_CLOUD", "primary")
    assert load_settings().cloud == "primary"


def test_overrides_skip_none_and_reject_unknown(monkeypatch):
    monkeypatch.setenv("NOVA_EXPORTER_CLOUD", "env-cloud")
    s = load_settings(cloud=None, listen_port=9000, disabled_metrics=["a", "a"])
    assert s.cloud == "env-cloud"
    assert s.listen_port == 9000
    assert s.disabled_metrics == frozenset({"a"})
    with pytest.raises(ConfigError):
        load_settings(no_such_setting=1)


@pytest.mark.parametrize("overrides", [
    {"cloud": ""},
    {"listen_port": 0},
    {"listen_port": 70000},
    {"team_refresh_seconds": 0},
    {"request_timeout": -1},
    {"team_suffix": ""},
    {"conduit_size": 0},
])
def test_validate_rejects_bad_values(overrides):
    values = {"cloud": "c", **overrides}
    with pytest.raises(ConfigError):
        ExporterSettings(**values).validate()


def _write(path, body):
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return str(path)


def test_clouds_yaml_password_cloud(tmp_path):
    path = _write(tmp_path / "clouds.yaml", """
        clouds:
          prod:
            region_name: RegionOne
            interface: internal
            cacert: /etc/ssl/ca.pem
            auth:
              auth_url: https://keystone.example:5000/
              username: exporter
              password: secret
              project_name: admin
              user_domain_name: Users
    """)
    c = load_cloud_config("prod", path)
    assert c.auth_url == "https://keystone.example:5000"
    assert c.username == "exporter"
    assert c.user_domain_name == "Users"
    assert c.project_domain_name == "Default"
    assert c.region_name == "RegionOne"
    assert c.interface == "internal"
    assert c.verify is True
    assert c.cacert == "/etc/ssl/ca.pem"
    assert not c.uses_application_credential


def test_clouds_yaml_app_credential_and_verify_string(tmp_path, monkeypatch):
    _write(tmp_path / "clouds.yaml", """
        clouds:
          lab:
            verify: "false"
            auth:
              auth_url: https://keystone.lab/v3
              application_credential_id: abc
              application_credential_secret: xyz
    """)
    monkeypatch.chdir(tmp_path)
    c = load_cloud_config("lab")
    assert c.uses_application_credential
    assert c.verify is False


@pytest.mark.parametrize("body", [
    "clouds:\n  other: {auth: {auth_url: http://x}}\n",
    "clouds:\n  prod: {auth: {username: u}}\n",
    "clouds: [unclosed\n",
])
def test_clouds_yaml_errors(tmp_path, body):
    path = tmp_path / "clouds.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_cloud_config("prod", str(path))


def test_explicit_clouds_file_must_exist(tmp_path):
    with pytest.raises(ConfigError):
        load_cloud_config("prod", str(tmp_path / "missing.yaml"))


def test_cli_disables_add_to_env_disables(monkeypatch):
    monkeypatch.setenv("NOVA_EXPORTER_DISABLE_METRICS", "flavor")
    s = load_settings(disabled_metrics=["agent_state"])
    assert s.disabled_metrics == {"flavor", "agent_state"}
