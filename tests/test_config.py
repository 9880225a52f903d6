"""Tests for EngineConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from bizcore import EngineConfig, LogLevel, get_config, load_config_from_env, set_config


class TestEngineConfig:
    """Tests for EngineConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating an EngineConfig with defaults."""
        config = EngineConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.service_name is None
        assert config.strict_roles is False
        assert config.log_denials is False

    def test_create_custom_config(self) -> None:
        config = EngineConfig(
            log_level=LogLevel.DEBUG,
            log_json=True,
            service_name="crm-api",
            strict_roles=True,
            log_denials=True,
        )
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.service_name == "crm-api"
        assert config.strict_roles is True
        assert config.log_denials is True

    def test_log_level_from_string(self) -> None:
        config = EngineConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            EngineConfig(log_level="INVALID")

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValueError):
            EngineConfig(redis_url="redis://localhost")  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        config = load_config_from_env()
        assert config.log_level == LogLevel.INFO
        assert config.strict_roles is False
        assert config.log_denials is False

    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "DEBUG",
            "LOG_JSON": "true",
            "SERVICE_NAME": "crm-api",
            "PERMISSIONS_STRICT_ROLES": "yes",
            "PERMISSIONS_LOG_DENIALS": "1",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        config = load_config_from_env()
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.service_name == "crm-api"
        assert config.strict_roles is True
        assert config.log_denials is True

    def test_strict_roles_variants(self) -> None:
        for value in ("true", "1", "yes", "on", "TRUE"):
            with patch.dict(os.environ, {"PERMISSIONS_STRICT_ROLES": value}, clear=True):
                assert load_config_from_env().strict_roles is True
        with patch.dict(os.environ, {"PERMISSIONS_STRICT_ROLES": "off"}, clear=True):
            assert load_config_from_env().strict_roles is False


class TestProcessConfig:
    """Tests for get_config() / set_config()."""

    def test_set_config(self) -> None:
        config = EngineConfig(strict_roles=True)
        set_config(config)
        assert get_config() is config

    @patch.dict(os.environ, {"PERMISSIONS_LOG_DENIALS": "true"}, clear=True)
    def test_reset_reloads_from_env(self) -> None:
        set_config(None)
        config = get_config()
        assert config.log_denials is True
        assert get_config() is config
