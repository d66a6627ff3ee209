"""Structured exception hierarchy for consistent error handling.

This module defines the exception system of the Maestro web API.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **MaestroError**: Base exception carrying code, severity and context
- **Request errors**: Validation, not found and authorization failures
- **Documentation errors**: Contract violations detected while generating
  the OpenAPI documents. These are never suppressed; they signal that an
  API model or route declaration must be fixed.
"""

from enum import Enum

from src.core.types import ErrorContext


class ErrorCode(Enum):
    """Standardized error codes for the Maestro web API."""

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    API_VERSION_REQUIRED = "API_VERSION_REQUIRED"
    """The request did not specify an API version."""

    UNSUPPORTED_API_VERSION = "UNSUPPORTED_API_VERSION"
    """The requested API version is not supported by the endpoint."""

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    # Authentication/Authorization errors
    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication failed or user is not authorized for this action."""

    # Documentation generation errors
    MISSING_OPERATION_TAG = "MISSING_OPERATION_TAG"
    """A documented operation does not declare any tag."""

    DUPLICATE_OPERATION_ID = "DUPLICATE_OPERATION_ID"
    """Two operations of one document share an operation id."""

    SCHEMA_ID_COLLISION = "SCHEMA_ID_COLLISION"
    """Two distinct models of one document share a schema name."""


class Severity(Enum):
    """Severity levels for errors."""

    LOW = "LOW"
    """Errors caused by client input that don't impact functionality."""

    MEDIUM = "MEDIUM"
    """Errors that may affect some features but not critical operations."""

    HIGH = "HIGH"
    """Errors impacting critical functionality or security."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention, may prevent the service from working."""


class MaestroError(Exception):
    """Base exception class for all Maestro application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    @property
    def is_expected(self) -> bool:
        """Whether the error occurs during normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(MaestroError):
    """Exception raised when input validation fails.

    Args:
        message: Description of the validation failure
        error_code: Error code (defaults to VALIDATION_ERROR)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class NotFoundError(MaestroError):
    """Exception raised when a requested resource cannot be found."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(MaestroError):
    """Exception raised when authentication or authorization fails."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)


class ApiDocumentationError(MaestroError):
    """Base exception for OpenAPI document generation failures.

    Generation failures are developer-facing contract violations. They are
    expected to surface during build or integration testing and are fatal
    for the document being generated.
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.CRITICAL, context, cause)


class MissingOperationTagError(ApiDocumentationError):
    """Raised when an operation has no tag to prefix its operation id with."""

    def __init__(self, path: str, method: str) -> None:
        super().__init__(
            ErrorCode.MISSING_OPERATION_TAG,
            f"Operation {method.upper()} {path} must declare at least one tag",
            context={"path": path, "method": method},
        )


class DuplicateOperationIdError(ApiDocumentationError):
    """Raised when two operations of one document share an operation id."""

    def __init__(self, operation_id: str, locations: list[str]) -> None:
        super().__init__(
            ErrorCode.DUPLICATE_OPERATION_ID,
            f"Operation id '{operation_id}' is used by {', '.join(locations)}",
            context={"operation_id": operation_id, "locations": locations},
        )


class SchemaIdCollisionError(ApiDocumentationError):
    """Raised when two distinct models would produce the same schema id.

    This means a model was added or changed in one API version without
    updating every operation that can return it, even nested. The schema ids
    must not be disambiguated by full names; the API models must be fixed.
    """

    def __init__(self, schema_id: str, first: type, second: type) -> None:
        first_name = f"{first.__module__}.{first.__qualname__}"
        second_name = f"{second.__module__}.{second.__qualname__}"
        super().__init__(
            ErrorCode.SCHEMA_ID_COLLISION,
            f"Identical schema ids '{schema_id}' detected for types "
            f"{first_name} and {second_name}",
            context={"schema_id": schema_id, "types": [first_name, second_name]},
        )
