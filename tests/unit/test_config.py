"""Tests for configuration loading."""

from autoguard.config import load_config


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOGUARD_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("AUTOGUARD_FLEET_PATH", raising=False)

    config = load_config()
    assert config.scoring.include_threshold == 0.3
    assert config.scoring.engine.window_days == 60
    assert config.monitor.anomaly_log_capacity == 500
    assert config.orchestrator.activity_log_capacity == 1000
    assert config.fleet_path is None


def test_load_config_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
scoring:
  include_threshold: 0.2
  brake:
    component: Brake System
    window_days: 30
    mileage_cutoff: 40000
    mileage_bonus: 0.1
monitor:
  active_hours_start: 7
  policies:
    analysis:
      allowed_actions: ["Analyzing vehicle"]
      max_actions_per_minute: 5
fleet_path: fleet.yaml
"""
    )
    monkeypatch.setenv("AUTOGUARD_CONFIG", str(config_path))
    monkeypatch.delenv("AUTOGUARD_FLEET_PATH", raising=False)

    config = load_config()
    assert config.scoring.include_threshold == 0.2
    assert config.scoring.brake.window_days == 30
    assert config.scoring.engine.window_days == 60
    assert config.monitor.active_hours_start == 7
    assert config.monitor.policies["analysis"].max_actions_per_minute == 5
    assert config.fleet_path == "fleet.yaml"


def test_fleet_path_env_override(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("fleet_path: from-file.yaml\n")
    monkeypatch.setenv("AUTOGUARD_FLEET_PATH", "/data/fleet.yaml")

    config = load_config(str(config_path))
    assert config.fleet_path == "/data/fleet.yaml"
