"""
Tests for settings loading and the decommission run configuration.
"""

import pytest
from pydantic import ValidationError

from shipyard.config import DecommissionConfig, LogFormat, ShipyardSettings, load_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("SHIPYARD_WORKERS", "SHIPYARD_LOG_LEVEL", "SHIPYARD_MAX_RETRIES"):
        monkeypatch.delenv(name, raising=False)


class TestShipyardSettings:
    def test_defaults(self):
        settings = ShipyardSettings()

        assert settings.service_name == "shipyard"
        assert settings.log_level == "INFO"
        assert settings.log_format is LogFormat.JSON
        assert settings.workers == 4
        assert settings.max_retries == 5

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SHIPYARD_WORKERS", "8")
        monkeypatch.setenv("SHIPYARD_LOG_LEVEL", "debug")

        settings = ShipyardSettings()

        assert settings.workers == 8
        assert settings.log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            ShipyardSettings(log_level="chatty")

    def test_workers_must_be_positive(self):
        with pytest.raises(ValidationError):
            ShipyardSettings(workers=0)


class TestLoadSettings:
    def test_without_file(self):
        assert load_settings().workers == 4

    def test_file_values(self, tmp_path):
        config_file = tmp_path / "shipyard.yaml"
        config_file.write_text("workers: 2\nlog_format: text\nretry_backoff_seconds: 0\n")

        settings = load_settings(config_file)

        assert settings.workers == 2
        assert settings.log_format is LogFormat.TEXT
        assert settings.retry_backoff_seconds == 0

    def test_environment_beats_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "shipyard.yaml"
        config_file.write_text("workers: 2\nmax_retries: 1\n")
        monkeypatch.setenv("SHIPYARD_WORKERS", "6")

        settings = load_settings(config_file)

        assert settings.workers == 6
        assert settings.max_retries == 1

    def test_overrides_beat_everything(self, tmp_path, monkeypatch):
        config_file = tmp_path / "shipyard.yaml"
        config_file.write_text("workers: 2\n")
        monkeypatch.setenv("SHIPYARD_WORKERS", "6")

        assert load_settings(config_file, workers=3).workers == 3

    def test_file_must_hold_a_mapping(self, tmp_path):
        config_file = tmp_path / "shipyard.yaml"
        config_file.write_text("- workers\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_settings(config_file)

    def test_invalid_file_values(self, tmp_path):
        config_file = tmp_path / "shipyard.yaml"
        config_file.write_text("workers: -1\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)


class TestDecommissionConfig:
    def test_clusters_are_stripped(self):
        config = DecommissionConfig(clusters=[" kind-eu ", "", "kind-us"])

        assert config.clusters == ["kind-eu", "kind-us"]
        assert config.dry_run is False

    @pytest.mark.parametrize("clusters", [[], ["", "  "]])
    def test_clusters_are_required(self, clusters):
        with pytest.raises(ValidationError):
            DecommissionConfig(clusters=clusters)
