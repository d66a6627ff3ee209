"""Centralized configuration management with environment-aware defaults.

This module implements the configuration system of the Maestro web API using
Pydantic Settings, providing type-safe configuration with validation and
environment variable support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: Supports .env files and environment overrides
- **Nested configuration**: Uses __ delimiter for complex config structures
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_DESCRIPTION = (
    "The Web API enabling access to the Maestro++ service that supports the "
    "[.NET Core Dependency Flow infrastructure]"
    "(https://github.com/dotnet/arcade/blob/master/Documentation/"
    "DependenciesFlowPlan.md)."
)


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


class ApiDocsConfig(BaseModel):
    """OpenAPI document generation and API versioning configuration."""

    description: str = Field(
        default=DEFAULT_API_DESCRIPTION,
        description="Human-readable description of every versioned document",
    )
    contact_name: str = Field(
        default=".NET Core Engineering",
        description="Contact name published in the document info block",
    )
    contact_email: str = Field(
        default="dnceng@microsoft.com",
        description="Contact address published in the document info block",
    )
    version_query_parameter: str = Field(
        default="api-version",
        min_length=1,
        description="Query parameter carrying the requested API version",
    )
    api_versions: list[str] = Field(
        default_factory=lambda: ["2018-07-16", "2019-01-16", "2020-02-20"],
        min_length=1,
        description="API versions for which a document is generated",
    )
    document_url_template: str = Field(
        default="/api/{version}/swagger.json",
        description="URL template of the per-version OpenAPI document",
    )
    ui_url: str | None = Field(
        default="/swagger",
        description="Swagger UI URL. Disabled when empty.",
    )
    xml_comments_file: str = Field(
        default="Maestro.Web.xml",
        description="File name of the companion XML documentation file",
    )
    content_root_path: Path | None = Field(
        default=None,
        description="Content root used outside development. Defaults to the cwd.",
    )

    @field_validator("document_url_template", mode="after")
    @classmethod
    def validate_document_url_template(cls, v: str) -> str:
        """Ensure the document URL can be built per version."""
        if "{version}" not in v:
            msg = "document_url_template must contain a '{version}' placeholder"
            raise ValueError(msg)
        return v

    @field_validator("ui_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="Maestro", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=True, description="Debug mode flag")

    # API settings
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    # API documentation configuration
    api_docs_config: ApiDocsConfig = Field(
        default_factory=ApiDocsConfig, description="API documentation configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._detect_formatter()

    @property
    def is_development(self) -> bool:
        """Whether the service runs in the development hosting environment."""
        return self.environment == "development"

    def _detect_formatter(self) -> Literal["console", "json"]:
        """Auto-detect log formatter based on environment."""
        # Container platforms collect stdout as structured records
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"
        if self.environment == "development":
            return "console"
        return "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
