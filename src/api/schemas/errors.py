"""Standardized error response schemas for consistent API error handling.

``ErrorResponse`` is the payload of every error returned by the API and the
single error schema referenced by the ``default`` response of every
documented operation.

All API models derive from ``ApiModel`` so that the wire format uses lower
camel case property names, matching the names published in the generated
OpenAPI documents.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.api.openapi.naming import to_camel_case


class ApiModel(BaseModel):
    """Base class of request and response models exposed by the API."""

    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
    )


class ServiceInfo(ApiModel):
    """Service information for error context."""

    name: str = Field(
        ...,
        description="Name of the service",
        examples=["Maestro"],
    )

    version: str = Field(
        ...,
        description="Version of the service",
        examples=["1.0.0"],
    )

    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "staging", "production"],
    )


class ErrorResponse(ApiModel):
    """Standardized error response model for API errors.

    This model ensures all API errors follow a consistent structure,
    making it easier for clients to handle errors programmatically.
    """

    error_code: str = Field(
        ...,
        description="Unique error code identifying the error type",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "UNSUPPORTED_API_VERSION"],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["The api-version query parameter is required"],
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details (e.g., field-specific validation errors)",
        examples=[{"field": "channelId", "reason": "Invalid format"}],
    )

    correlation_id: str | None = Field(
        default=None,
        description="Request correlation ID for tracing and debugging",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )

    request_id: str | None = Field(
        default=None,
        description="Unique request identifier",
        examples=["req-550e8400-e29b-41d4-a716-446655440000"],
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Timestamp when the error occurred (with timezone)",
        examples=["2024-06-14T12:00:00+00:00"],
    )

    severity: str | None = Field(
        default=None,
        description="Error severity level (LOW, MEDIUM, HIGH, CRITICAL)",
        examples=["LOW", "CRITICAL"],
    )

    service_info: ServiceInfo | None = Field(
        default=None,
        description="Information about the service that generated the error",
    )

    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Debug information (only populated in development environments)",
    )
