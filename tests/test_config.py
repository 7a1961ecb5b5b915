"""Tests for environment configuration."""

from pathlib import Path

from espresso_log.config import EspressoLogConfig


def test_config_defaults(monkeypatch):
    for name in ("ESPRESSO_LOG_DATA_PATH", "ESPRESSO_LOG_LEVEL", "ESPRESSO_LOG_RECENT_LIMIT"):
        monkeypatch.delenv(name, raising=False)

    config = EspressoLogConfig.from_env()

    assert config.data_path == Path("~/.espresso-log/data.json").expanduser()
    assert config.log_level == "WARNING"
    assert config.recent_limit == 3


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ESPRESSO_LOG_DATA_PATH", str(tmp_path / "shots.json"))
    monkeypatch.setenv("ESPRESSO_LOG_LEVEL", " debug ")
    monkeypatch.setenv("ESPRESSO_LOG_RECENT_LIMIT", "5")

    config = EspressoLogConfig.from_env()

    assert config.data_path == tmp_path / "shots.json"
    assert config.log_level == "DEBUG"
    assert config.recent_limit == 5


def test_config_invalid_recent_limit_falls_back(monkeypatch):
    monkeypatch.setenv("ESPRESSO_LOG_RECENT_LIMIT", "lots")
    assert EspressoLogConfig.from_env().recent_limit == 3

    monkeypatch.setenv("ESPRESSO_LOG_RECENT_LIMIT", "0")
    assert EspressoLogConfig.from_env().recent_limit == 3


def test_config_unknown_log_level_falls_back(monkeypatch):
    monkeypatch.setenv("ESPRESSO_LOG_LEVEL", "verbose")
    assert EspressoLogConfig.from_env().log_level == "WARNING"

    monkeypatch.setenv("ESPRESSO_LOG_LEVEL", "")
    assert EspressoLogConfig.from_env().log_level == "WARNING"
