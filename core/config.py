"""Configuration models and loading."""

from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8080",
    # Pages opened from disk send either of these as their origin
    "file://",
    "null",
]


class Settings(BaseSettings):
    """Process-wide proxy settings, fixed at startup."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    host: str = Field("0.0.0.0", description="Listen address")
    port: int = Field(3001, description="Listen port")

    upstream_base_url: str = Field(
        "https://api.apify.com/v2",
        validation_alias=AliasChoices("upstream_base_url", "apify_api_base_url"),
        description="Upstream API base URL",
    )
    upstream_timeout: float | None = Field(
        None, description="Outbound timeout in seconds, client default when unset"
    )

    mount_path: str = Field("/api/apify", description="Proxy mount prefix")
    health_path: str = Field("/health", description="Health check path")

    allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS),
        description="Exact-match CORS origin allow-list",
    )
    max_body_size: int = Field(10 * 1024 * 1024, description="Inbound body cap (bytes)")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )
    log_dir: str = Field("logs", description="Directory for the rolling CLI log")
    log_requests: bool = Field(False, description="Write a JSON log per proxied request")

    @field_validator("upstream_base_url")
    @classmethod
    def _check_upstream(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("upstream base URL must start with http:// or https://")
        return value

    @field_validator("mount_path", "health_path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path must start with '/'")
        if len(value) > 1 and value.endswith("/"):
            raise ValueError("path must not end with '/'")
        return value

    @field_validator("max_body_size")
    @classmethod
    def _check_body_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("max_body_size must be positive")
        return value


def load_settings(**overrides) -> Settings:
    """Build settings from the environment and `.env`, raising ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
