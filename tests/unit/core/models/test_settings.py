"""Tests for process settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tunnelroute.core.models.config import DEFAULT_IP_ECHO_URL, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("STORE_PATH", "OPERATOR_TOKEN", "API_PORT", "CA_BUNDLE", "LOG_LEVEL"):
        monkeypatch.delenv(f"TUNNELROUTE_{name}", raising=False)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.store_path == Path("data/config/tunnel.json")
        assert settings.operator_token is None
        assert settings.api_port == 8000
        assert settings.ip_echo_url == DEFAULT_IP_ECHO_URL
        assert settings.ca_bundle is None
        assert settings.log_level == "INFO"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("TUNNELROUTE_OPERATOR_TOKEN", "s3cret")
        monkeypatch.setenv("TUNNELROUTE_API_PORT", "9100")

        settings = Settings()

        assert settings.operator_token == "s3cret"
        assert settings.api_port == 9100

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "conf" / "settings.yaml"
        Settings(operator_token="abc", request_timeout=12.5).to_yaml(path)

        loaded = Settings.from_yaml(path)

        assert loaded.operator_token == "abc"
        assert loaded.request_timeout == 12.5

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")

        assert Settings.from_yaml(path).api_host == "127.0.0.1"

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "missing.yaml")
