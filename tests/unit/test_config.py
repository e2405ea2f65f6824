"""
Tests for configuration models.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from model_catalog_core.config import (
    AppConfig,
    LoggingConfig,
    ProviderEndpointsConfig,
    SecurityConfig,
    SyncConfig,
    get_config,
    reset_config,
    set_config,
)
from model_catalog_core.constants import ProviderName


class TestEnvironmentLoading:
    def test_sync_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("CATALOG_FETCH_TIMEOUT", "7.5")
        monkeypatch.setenv("CATALOG_REFRESH_DEADLINE", "20")
        monkeypatch.setenv("CATALOG_MAX_WORKERS", "3")

        sync = SyncConfig()

        assert sync.fetch_timeout_seconds == 7.5
        assert sync.refresh_deadline_seconds == 20
        assert sync.max_workers == 3

    def test_encryption_key_from_env(self, monkeypatch):
        monkeypatch.setenv("CATALOG_ENCRYPTION_KEY", "k" * 44)
        assert SecurityConfig().encryption_key == "k" * 44

    def test_encryption_key_is_masked(self):
        assert "secret-key" not in repr(SecurityConfig(encryption_key="secret-key"))

    def test_log_queue_flag(self, monkeypatch):
        monkeypatch.setenv("CATALOG_ENABLE_LOGS_QUEUE", "true")
        assert AppConfig.from_env().features.enable_logs_queue is True


class TestValidation:
    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            LoggingConfig(level="LOUD")

    def test_log_level_is_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"


class TestProviderEndpoints:
    def test_every_recognized_provider_has_endpoint(self):
        endpoints = ProviderEndpointsConfig()
        for provider in ProviderName:
            if provider is ProviderName.CUSTOM:
                continue
            assert endpoints.base_url(provider).startswith("https://")

    def test_override(self):
        endpoints = ProviderEndpointsConfig(openai="http://localhost:8080/v1/")
        assert endpoints.base_url(ProviderName.OPENAI) == "http://localhost:8080/v1"


class TestGlobalConfig:
    def test_set_and_reset(self):
        custom = AppConfig(environment="staging")
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config() is not custom
