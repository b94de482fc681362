"""
Configuration management for the governance query gateway.

This module uses Pydantic Settings to load configuration from environment variables.
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class GatewaySettings(BaseSettings):
    """
    Central configuration for the query gateway.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # === Document Store ===
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        alias="MONGODB_URI",
        description="Connection string of the MongoDB deployment holding the event mirror",
    )

    mongodb_database: str = Field(
        default="noun",
        alias="MONGODB_DATABASE",
        min_length=1,
        description="Database containing the governance event collections",
    )

    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS",
        ge=1,
        description="How long the driver waits to find a usable server",
    )

    # === HTTP Surface ===
    api_base_path: str = Field(
        default="/api",
        alias="API_BASE_PATH",
        description="Path prefix for the governance routes",
    )

    listen_host: str = Field(
        default="0.0.0.0",
        alias="LISTEN_HOST",
        description="Host address to bind",
    )

    listen_port: int = Field(
        default=8000,
        alias="LISTEN_PORT",
        ge=1,
        le=65535,
        description="Port to bind",
    )

    # === Pagination ===
    default_page_limit: int = Field(
        default=10,
        alias="DEFAULT_PAGE_LIMIT",
        ge=1,
        description="Page size used when a request does not pass `limit`",
    )

    max_page_limit: int = Field(
        default=50,
        alias="MAX_PAGE_LIMIT",
        ge=1,
        description="Upper bound applied to the `limit` query parameter",
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    enable_tracing: bool = Field(
        default=False,
        alias="ENABLE_TRACING",
        description="If true, emit OpenTelemetry spans for requests and store queries",
    )

    otel_exporter_endpoint: str = Field(
        default="http://127.0.0.1:4317",
        alias="OTEL_EXPORTER_OTLP_ENDPOINT",
        description="OTLP gRPC endpoint for exporting traces",
    )

    otel_exporter_insecure: bool = Field(
        default=True,
        alias="OTEL_EXPORTER_OTLP_INSECURE",
        description="Use insecure (non-TLS) connection for OTLP exporter",
    )

    @field_validator("api_base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        """Ensure a leading slash and no trailing slash ("" mounts at the root)."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels} (got {v})")
        return v_upper

    @model_validator(mode="after")
    def validate_page_limits(self) -> Self:
        if self.default_page_limit > self.max_page_limit:
            msg = (
                f"DEFAULT_PAGE_LIMIT ({self.default_page_limit}) must not exceed "
                f"MAX_PAGE_LIMIT ({self.max_page_limit})"
            )
            raise ValueError(msg)
        return self


# Global settings instance
_settings: GatewaySettings | None = None


def get_settings() -> GatewaySettings:
    """
    Get the global GatewaySettings instance.

    This ensures settings are loaded exactly once and reused throughout the application.

    Returns:
        GatewaySettings: The global configuration instance
    """
    global _settings
    if _settings is None:
        _settings = GatewaySettings()
    return _settings
