"""Global exception handlers for the FastAPI application.

Every error leaves the API as an ``ErrorResponse``, the payload documented
as the ``default`` response of every operation.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.schemas.errors import ErrorResponse, ServiceInfo
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.context import RequestContext, generate_request_id
from src.core.exceptions import (
    ErrorCode,
    MaestroError,
    NotFoundError,
    Severity,
    UnauthorizedError,
    ValidationError,
)


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def _render(status_code: int, error_response: ErrorResponse) -> Response:
    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", by_alias=True),
    )


def status_code_for(exc: MaestroError) -> int:
    """Map an application exception to its HTTP status code."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, UnauthorizedError):
        return status.HTTP_401_UNAUTHORIZED
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def maestro_error_handler(request: Request, exc: Exception) -> Response:
    """Handle MaestroError exceptions.

    Args:
        request: The FastAPI request that caused the exception
        exc: The MaestroError exception to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not a MaestroError instance
    """
    if not isinstance(exc, MaestroError):
        raise TypeError(f"Expected MaestroError, got {type(exc).__name__}")

    settings = get_settings()
    correlation_id = RequestContext.get_correlation_id()

    log = logger.warning if exc.is_expected else logger.error
    log(
        "Handling {}: {}",
        type(exc).__name__,
        exc.message,
        error_code=exc.error_code,
        request_method=request.method,
        request_path=request.url.path,
        api_version=RequestContext.get_api_version(),
    )

    debug_info = None
    if settings.environment == "development" and not exc.is_expected:
        debug_info = {
            "exception_type": type(exc).__name__,
            "stack_trace": traceback.format_tb(exc.__traceback__),
        }

    return _render(
        status_code_for(exc),
        ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.context or None,
            correlation_id=correlation_id,
            request_id=generate_request_id(),
            severity=exc.severity.value,
            service_info=get_service_info(settings),
            debug_info=debug_info,
        ),
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions with field-level details.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # ['body', 'channelId'] -> 'channelId'
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:]) or "root"
        field_errors.setdefault(field_name, []).append(
            error.get("msg", "Invalid value")
        )

    logger.warning(
        "Request validation failed",
        request_method=request.method,
        request_path=request.url.path,
        api_version=RequestContext.get_api_version(),
        validation_errors=field_errors,
    )

    return _render(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(
            error_code=ErrorCode.VALIDATION_ERROR.value,
            message="Request validation failed",
            details={"validationErrors": field_errors},
            correlation_id=RequestContext.get_correlation_id(),
            request_id=generate_request_id(),
            severity=Severity.LOW.value,
            service_info=get_service_info(get_settings()),
        ),
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Convert Starlette HTTPException to the standard ErrorResponse format.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code, severity = ErrorCode.INTERNAL_ERROR, Severity.MEDIUM
    if exc.status_code == status.HTTP_400_BAD_REQUEST:
        error_code, severity = ErrorCode.VALIDATION_ERROR, Severity.LOW
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        error_code, severity = ErrorCode.UNAUTHORIZED, Severity.HIGH
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code, severity = ErrorCode.NOT_FOUND, Severity.LOW
    elif exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        severity = Severity.HIGH

    logger.warning(
        "HTTP exception",
        status=exc.status_code,
        request_method=request.method,
        request_path=request.url.path,
        api_version=RequestContext.get_api_version(),
    )

    return _render(
        exc.status_code,
        ErrorResponse(
            error_code=error_code.value,
            message=str(exc.detail),
            correlation_id=RequestContext.get_correlation_id(),
            request_id=generate_request_id(),
            severity=severity.value,
            service_info=get_service_info(get_settings()),
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Convert unhandled exceptions to a safe error response.

    Internal details are hidden from clients in production.
    """
    settings = get_settings()

    logger.opt(exception=exc).error(
        "Unhandled exception: {}",
        type(exc).__name__,
        request_method=request.method,
        request_path=request.url.path,
        api_version=RequestContext.get_api_version(),
    )

    if settings.environment == "production":
        message = "An internal server error occurred"
        details = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}

    return _render(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(
            error_code=ErrorCode.INTERNAL_ERROR.value,
            message=message,
            details=details,
            correlation_id=RequestContext.get_correlation_id(),
            request_id=generate_request_id(),
            severity=Severity.CRITICAL.value,
            service_info=get_service_info(settings),
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(MaestroError, maestro_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
