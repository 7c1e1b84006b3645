"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from uploader.config import load_config


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "missing.yaml")
    assert config.storage.backend == "file"
    assert config.scheduler.min_reports_to_send == 100
    assert config.scheduler.periodic_send_all is False
    assert config.logging.format == "console"


def test_yaml_values_are_loaded(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "submit:\n"
        "  endpoint: https://example.test/v2/geosubmit\n"
        "  timeout_seconds: 5\n"
        "scheduler:\n"
        "  interval_seconds: 900\n"
        "  unknown_key: ignored\n"
    )

    config = load_config(path)

    assert config.submit.endpoint == "https://example.test/v2/geosubmit"
    assert config.submit.timeout_seconds == 5
    assert config.scheduler.interval_seconds == 900
    assert not hasattr(config.scheduler, "unknown_key")


def test_env_overrides_win(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("scheduler:\n  interval_seconds: 900\n")
    monkeypatch.setenv("UPLOADER_SCHEDULER_INTERVAL", "60")
    monkeypatch.setenv("UPLOADER_SCHEDULER_SEND_ALL", "true")
    monkeypatch.setenv("UPLOADER_STORAGE_BACKEND", "memory")

    config = load_config(path)

    assert config.scheduler.interval_seconds == 60.0
    assert config.scheduler.periodic_send_all is True
    assert config.storage.backend == "memory"


@pytest.mark.parametrize("value", [0, -5])
def test_min_reports_below_one_rejected_from_yaml(tmp_path, value):
    path = tmp_path / "config.yaml"
    path.write_text(f"scheduler:\n  min_reports_to_send: {value}\n")

    with pytest.raises(ValueError, match="min_reports_to_send"):
        load_config(path)


def test_min_reports_below_one_rejected_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADER_SCHEDULER_MIN_REPORTS", "0")

    with pytest.raises(ValueError, match="min_reports_to_send"):
        load_config(tmp_path / "missing.yaml")
