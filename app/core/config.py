# python
# app/core/config.py
"""Configuration settings for the Career Guide Chat application.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Career Guide Chat API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Authentication (Clerk) =====
    clerk_secret_key: str | None = Field(default=None, description="Clerk secret key")
    clerk_api_url: AnyHttpUrl = Field(default="https://api.clerk.com", description="Clerk API URL")
    clerk_jwks_url: str | None = Field(
        default=None, description="Clerk JWKS URL (defaults to <clerk_api_url>/v1/jwks)"
    )
    clerk_issuer: str | None = Field(default=None, description="Expected token issuer")
    auth_verify_signature: bool = Field(
        default=True, description="Verify Clerk JWT signatures against the JWKS"
    )

    # ===== AI Service (Gemini) =====
    gemini_api_key: str | None = Field(default=None, description="Google Gemini API key")
    gemini_api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API base URL",
    )
    gemini_reply_models: str = Field(
        default="gemini-2.0-flash",
        description="Models tried in order for chat replies (comma-separated)",
    )
    gemini_temperature: float = Field(default=0.7, description="Sampling temperature")
    gemini_max_tokens: int = Field(default=512, description="Maximum output tokens for replies")
    ai_request_timeout: int = Field(default=30, description="AI request timeout in seconds")

    title_api_key: str | None = Field(
        default=None, description="Gemini API key for title generation (falls back to gemini_api_key)"
    )
    gemini_title_models: str = Field(
        default="gemini-2.0-flash,gemini-1.5-flash",
        description="Models tried in order for session titles (comma-separated)",
    )
    title_max_tokens: int = Field(default=50, description="Maximum output tokens for titles")

    # ===== Application Limits =====
    message_max_length: int = Field(default=10000, description="Maximum message length")
    title_max_length: int = Field(default=255, description="Maximum session title length")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return _split_csv(self.allowed_origins)

    @property
    def gemini_reply_models_list(self) -> list[str]:
        return _split_csv(self.gemini_reply_models)

    @property
    def gemini_title_models_list(self) -> list[str]:
        return _split_csv(self.gemini_title_models)

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Development Settings =====
    docs_url: str = Field(default="/docs", description="API documentation URL")
    redoc_url: str = Field(default="/redoc", description="ReDoc documentation URL")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def has_ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def effective_title_api_key(self) -> str | None:
        return self.title_api_key or self.gemini_api_key

    @property
    def effective_jwks_url(self) -> str:
        if self.clerk_jwks_url:
            return self.clerk_jwks_url
        return f"{str(self.clerk_api_url).rstrip('/')}/v1/jwks"

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
        return v

    @field_validator("gemini_temperature")
    @classmethod
    def validate_temperature(cls, v):
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v

    @field_validator("ai_request_timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("AI request timeout must be positive")
        return v

    @field_validator("title_max_length")
    @classmethod
    def validate_title_length(cls, v):
        if v > 255:
            raise ValueError("Maximum title length cannot exceed 255")
        return v

    @model_validator(mode="after")
    def set_computed_fields(self):
        if not self.test_database_url and self.database_url and "neondb" in self.database_url:
            self.test_database_url = self.database_url.replace("neondb", "neondb_test")
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if settings.auth_verify_signature and not (settings.clerk_secret_key or settings.clerk_jwks_url):
            errors.append("CLERK_SECRET_KEY or CLERK_JWKS_URL is required to verify tokens")
        if settings.is_production and not settings.auth_verify_signature:
            errors.append("AUTH_VERIFY_SIGNATURE cannot be disabled in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "ai_enabled": settings.has_ai_enabled,
            "title_generation_enabled": bool(settings.effective_title_api_key),
            "reply_models": settings.gemini_reply_models_list,
            "title_models": settings.gemini_title_models_list,
            "token_verification": settings.auth_verify_signature,
            "environment": settings.environment,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
        "auth_configured": bool(settings.clerk_secret_key or settings.clerk_jwks_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
]
