"""API versioning by query parameter.

Endpoints declare the API versions they take part in with ``@api_versions``.
Requests select a version with the ``api-version`` query parameter (the name
is configurable), which is checked by the ``require_api_version`` dependency
attached to versioned routers. Declared versions also decide in which
per-version OpenAPI document an endpoint is published.
"""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import Depends, Request
from loguru import logger

from src.core.config import Settings, get_settings
from src.core.context import RequestContext
from src.core.exceptions import ErrorCode, ValidationError

API_VERSIONS_ATTRIBUTE = "__api_versions__"


def api_versions[F: Callable[..., Any]](*versions: str) -> Callable[[F], F]:
    """Declare the API versions an endpoint is available in.

    Args:
        *versions: Version strings, e.g. ``"2019-01-16"``.

    Returns:
        Callable: Decorator returning the endpoint unchanged.

    Raises:
        ValueError: If no version is given.
    """
    if not versions:
        msg = "An endpoint must declare at least one API version"
        raise ValueError(msg)

    def decorator(endpoint: F) -> F:
        setattr(endpoint, API_VERSIONS_ATTRIBUTE, frozenset(versions))
        return endpoint

    return decorator


def get_api_versions(endpoint: object) -> frozenset[str]:
    """Return the versions declared on an endpoint, empty when unversioned."""
    return getattr(endpoint, API_VERSIONS_ATTRIBUTE, frozenset())


async def require_api_version(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Resolve the requested API version of a versioned endpoint.

    Args:
        request: The incoming request.
        settings: Application settings injected via dependency.

    Returns:
        str: The requested version.

    Raises:
        ValidationError: If the version is missing or not supported by the
            matched endpoint.
    """
    parameter = settings.api_docs_config.version_query_parameter
    requested = request.query_params.get(parameter)
    if not requested:
        raise ValidationError(
            f"The {parameter} query parameter is required",
            error_code=ErrorCode.API_VERSION_REQUIRED,
            context={"parameter": parameter},
        )

    supported = get_api_versions(request.scope.get("endpoint"))
    if requested not in supported:
        raise ValidationError(
            f"API version '{requested}' is not supported by this endpoint",
            error_code=ErrorCode.UNSUPPORTED_API_VERSION,
            context={"requested": requested, "supported": sorted(supported)},
        )

    RequestContext.set_api_version(requested)
    logger.debug("Resolved API version {}", requested)
    return requested


API_VERSION_DEPENDENCY = Depends(require_api_version)
