"""Caller-side configuration with environment-aware defaults.

This module implements the configuration surface of an application built on
hub-kit using Pydantic Settings: type-safe values with validation, ``.env``
support and nested sections using the ``__`` delimiter.

The request pipeline and the contract compiler never call ``get_settings()``
themselves. The host adapter (``hubkit.api``) and the launcher read settings
and hand explicit values (``JwtConfig``, ``OpenApiConfig``, log settings) to
the core.

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hubkit.core.constants import DEFAULT_JWT_ALGORITHM
from hubkit.security.auth import JwtConfig


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    enable_request_logging: bool = Field(
        default=True,
        description="Emit one structured line per completed request",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class AuthConfig(BaseModel):
    """Bearer token verification settings."""

    jwt_secret: SecretStr | None = Field(
        default=None,
        description="Signing secret for token verification",
    )
    jwt_algorithm: str = Field(
        default=DEFAULT_JWT_ALGORITHM,
        description="Accepted signing algorithm",
    )
    jwt_issuer: str | None = Field(default=None, description="Expected issuer")
    jwt_audience: str | None = Field(default=None, description="Expected audience")
    jwt_leeway_seconds: int = Field(
        default=0,
        ge=0,
        description="Grace period applied to expiry checks (seconds)",
    )

    @field_validator("jwt_issuer", "jwt_audience", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v

    def to_jwt_config(self) -> JwtConfig | None:
        """Build the core token configuration.

        Returns:
            JwtConfig | None: Token configuration, or None when no secret is set.
        """
        if self.jwt_secret is None:
            return None
        return JwtConfig(
            secret=self.jwt_secret.get_secret_value(),
            algorithms=[self.jwt_algorithm],
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
            leeway=self.jwt_leeway_seconds,
        )


class ServerConfig(BaseModel):
    """One entry of the interface document's ``servers`` list."""

    url: str = Field(..., description="Base URL of the server")
    description: str | None = Field(default=None, description="Server description")


class Settings(BaseSettings):
    """Main settings class for a hub-kit application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="hub-kit", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_description: str | None = Field(
        default=None, description="Description rendered into the interface document"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")
    openapi_url: str | None = Field(
        default="/openapi.json", description="Interface document URL"
    )
    health_url: str | None = Field(default="/health", description="Health check URL")
    servers: list[ServerConfig] = Field(
        default_factory=list, description="Servers listed in the interface document"
    )

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    # Token verification
    auth_config: AuthConfig = Field(
        default_factory=AuthConfig, description="Token verification configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = (
                "console" if self.environment == "development" else "json"
            )

    @field_validator("openapi_url", "health_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        _ = cls
        if v == "":
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
