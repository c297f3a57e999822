"""
Unit tests for configuration management.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tickbooks.config.settings import (
    TickbooksConfig,
    get_config,
    normalize_tick_url,
    reload_config,
)


class TestTickbooksConfig:
    """Test cases for TickbooksConfig."""

    def test_config_with_valid_env_vars(self, test_config):
        """Test configuration loads correctly with valid environment variables."""
        assert test_config.tick_url == "https://acme.tickspot.com"
        assert test_config.tick_email == "billing@acme.test"
        assert test_config.freshbooks_url == "https://acme.freshbooks.com/api/2.1/xml-in"
        assert test_config.environment == "testing"
        assert test_config.debug is True
        assert test_config.log_level == "DEBUG"
        assert test_config.max_retries == 0

    def test_default_values(self, mock_env):
        """Test default configuration values."""
        config = TickbooksConfig()

        assert config.tick_timeout == 15.0
        assert config.freshbooks_timeout == 10.0
        assert config.lenient_xml_parsing is True
        assert config.retry_delay == 1.0

    def test_get_credentials(self, test_config):
        """Test the credential pair handed to the core operations."""
        credentials = test_config.get_credentials()

        assert credentials.time_tracking.base_url == "https://acme.tickspot.com"
        assert credentials.time_tracking.identity == "billing@acme.test"
        assert credentials.time_tracking.secret == "tick-secret"
        assert credentials.invoicing.identity == "fb-token"
        assert credentials.invoicing.secret == ""

    def test_join_store_file(self, test_config, tmp_path):
        assert test_config.join_store_file == Path(tmp_path / "join_records.json")

    def test_missing_required_settings(self, mock_env, monkeypatch):
        monkeypatch.delenv("FRESHBOOKS_TOKEN")

        with pytest.raises(ValidationError) as exc_info:
            TickbooksConfig(_env_file=None)

        assert "FRESHBOOKS_TOKEN" in str(exc_info.value)

    def test_invalid_freshbooks_url(self, mock_env):
        with patch.dict(os.environ, {"FRESHBOOKS_URL": "acme.freshbooks.com"}):
            with pytest.raises(ValidationError) as exc_info:
                TickbooksConfig()

        assert "must start with https://" in str(exc_info.value)

    def test_log_level_validation(self, mock_env):
        with patch.dict(os.environ, {"LOG_LEVEL": "info"}):
            assert TickbooksConfig().log_level == "INFO"

        with patch.dict(os.environ, {"LOG_LEVEL": "VERBOSE"}):
            with pytest.raises(ValidationError):
                TickbooksConfig()

    def test_environment_validation(self, mock_env):
        with patch.dict(os.environ, {"ENVIRONMENT": "Production"}):
            assert TickbooksConfig().environment == "production"

        with patch.dict(os.environ, {"ENVIRONMENT": "staging"}):
            with pytest.raises(ValidationError):
                TickbooksConfig()

    def test_timeouts_must_be_positive(self, mock_env):
        with patch.dict(os.environ, {"TICK_TIMEOUT": "0"}):
            with pytest.raises(ValidationError):
                TickbooksConfig()


class TestNormalizeTickUrl:
    """Test Tick URL normalisation."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("acme", "https://acme.tickspot.com"),
            ("acme.tickspot.com", "https://acme.tickspot.com"),
            ("http://acme.tickspot.com/", "https://acme.tickspot.com"),
            ("https://acme.tickspot.com", "https://acme.tickspot.com"),
            ("  acme  ", "https://acme.tickspot.com"),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_tick_url(value) == expected

    def test_empty_url_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            normalize_tick_url("https://")


class TestConfigGlobals:
    """Test the global configuration helpers."""

    def test_get_config_caches_instance(self, mock_env):
        first = get_config()

        assert get_config() is first

    def test_reload_config_replaces_instance(self, mock_env):
        first = get_config()

        with patch.dict(os.environ, {"TICK_TIMEOUT": "30"}):
            second = reload_config()

        assert second is not first
        assert second.tick_timeout == 30.0
        assert get_config() is second
