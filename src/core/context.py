"""Request context management for correlation ids and API versions."""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_api_version_var: ContextVar[str | None] = ContextVar("api_version", default=None)


class RequestContext:
    """Async-safe storage of request-scoped data.

    Holds the correlation id assigned by the request context middleware and
    the API version resolved from the version query parameter.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context."""
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def set_api_version(api_version: str) -> None:
        """Set the resolved API version for the current context."""
        _api_version_var.set(api_version)

    @staticmethod
    def get_api_version() -> str | None:
        """Get the resolved API version, None when not versioned."""
        return _api_version_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables."""
        _correlation_id_var.set(None)
        _api_version_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID in format 'req-<uuid4>'."""
    return f"req-{uuid.uuid4()}"
