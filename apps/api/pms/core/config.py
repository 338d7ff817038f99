"""
Application configuration using Pydantic Settings.

Environment variables use one prefix per section (AUTH_, PERMISSIONS_);
top-level fields are read unprefixed, e.g. LOG_FORMAT=text.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PERMISSIONS_FILE = Path(__file__).resolve().parent.parent / "shared" / "permissions.json"


class AuthSettings(BaseSettings):
    """Authentication configuration (bearer token decoding)."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    secret_key: str = Field(
        default="change-me-in-production",
        description="Secret key for JWT signing",
    )
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30, ge=1)


class PermissionSettings(BaseSettings):
    """Permission engine configuration."""

    model_config = SettingsConfigDict(env_prefix="PERMISSIONS_")

    config_path: Path = Field(
        default=DEFAULT_PERMISSIONS_FILE,
        description="Static role/resource/scope configuration (JSON)",
    )
    default_scope: str = Field(
        default="any",
        min_length=1,
        description="Scope used when an explicit check does not name one",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="PMS Permissions API")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    # Nested settings
    auth: AuthSettings = Field(default_factory=AuthSettings)
    permissions: PermissionSettings = Field(default_factory=PermissionSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in {"json", "text"}:
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shorthand
settings = get_settings()
