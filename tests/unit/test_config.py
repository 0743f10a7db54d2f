"""
Unit tests for Configuration module.

Covers defaults, validators and computed properties of the settings object.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from app.core.config import (
    ConfigValidator,
    EnvironmentEnum,
    LogFormatEnum,
    Settings,
    get_config_summary,
    settings,
)


class TestSettings:
    """Test cases for Settings configuration."""

    def test_default_settings(self):
        """Test default configuration values."""
        test_settings = Settings(_env_file=None, environment="development")

        assert test_settings.app_name == "Career Guide Chat API"
        assert test_settings.environment == EnvironmentEnum.development
        assert test_settings.gemini_reply_models_list == ["gemini-2.0-flash"]
        assert test_settings.gemini_title_models_list == ["gemini-2.0-flash", "gemini-1.5-flash"]
        assert test_settings.gemini_temperature == 0.7
        assert test_settings.message_max_length == 10000
        assert test_settings.auth_verify_signature is True

    def test_environment_shortcuts(self):
        assert Settings(environment="prod").environment == EnvironmentEnum.production
        assert Settings(environment="dev").environment == EnvironmentEnum.development
        assert Settings(environment="test").environment == EnvironmentEnum.testing

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="moon")

    @pytest.mark.parametrize("temperature", [-0.1, 2.5])
    def test_temperature_bounds(self, temperature):
        with pytest.raises(ValidationError):
            Settings(gemini_temperature=temperature)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(ai_request_timeout=0)

    def test_title_length_limit(self):
        with pytest.raises(ValidationError):
            Settings(title_max_length=300)

    def test_csv_lists(self):
        test_settings = Settings(
            allowed_origins="http://a.test, http://b.test,",
            gemini_title_models="m1 , m2",
        )
        assert test_settings.allowed_origins_list == ["http://a.test", "http://b.test"]
        assert test_settings.gemini_title_models_list == ["m1", "m2"]

    def test_title_key_falls_back_to_reply_key(self):
        assert Settings(gemini_api_key="k1", title_api_key=None).effective_title_api_key == "k1"
        assert Settings(gemini_api_key="k1", title_api_key="k2").effective_title_api_key == "k2"

    def test_ai_enabled(self):
        assert Settings(gemini_api_key="key").has_ai_enabled
        assert not Settings(gemini_api_key="").has_ai_enabled

    def test_jwks_url(self):
        assert Settings(clerk_jwks_url=None).effective_jwks_url == "https://api.clerk.com/v1/jwks"
        assert (
            Settings(clerk_jwks_url="https://x.clerk.accounts.dev/.well-known/jwks.json").effective_jwks_url
            == "https://x.clerk.accounts.dev/.well-known/jwks.json"
        )

    def test_log_format(self):
        assert Settings(log_format="simple").log_format == LogFormatEnum.simple


class TestConfigValidator:
    """Test cases for ConfigValidator."""

    def test_missing_database_url(self):
        with patch.object(settings, "database_url", None):
            with pytest.raises(ValueError, match="DATABASE_URL"):
                ConfigValidator.validate_required_settings()

    def test_verification_needs_key_material(self):
        with (
            patch.object(settings, "database_url", "postgresql+asyncpg://db"),
            patch.object(settings, "auth_verify_signature", True),
            patch.object(settings, "clerk_secret_key", None),
            patch.object(settings, "clerk_jwks_url", None),
        ):
            with pytest.raises(ValueError, match="CLERK_SECRET_KEY"):
                ConfigValidator.validate_required_settings()

    def test_unverified_tokens_rejected_in_production(self):
        with (
            patch.object(settings, "database_url", "postgresql+asyncpg://db"),
            patch.object(settings, "environment", EnvironmentEnum.production),
            patch.object(settings, "auth_verify_signature", False),
        ):
            with pytest.raises(ValueError, match="AUTH_VERIFY_SIGNATURE"):
                ConfigValidator.validate_required_settings()

    def test_valid_configuration(self):
        with (
            patch.object(settings, "database_url", "postgresql+asyncpg://db"),
            patch.object(settings, "environment", EnvironmentEnum.development),
            patch.object(settings, "auth_verify_signature", True),
            patch.object(settings, "clerk_secret_key", "sk_test"),
        ):
            ConfigValidator.validate_required_settings()

    def test_config_summary(self):
        summary = get_config_summary()

        assert summary["app_name"] == settings.app_name
        assert set(summary["features"]) >= {"ai_enabled", "reply_models", "title_models"}
