"""Unit tests for the exception handlers."""

import pytest
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from pytest_mock import MockerFixture
from starlette.exceptions import HTTPException

from src.api.middleware.error_handler import (
    get_service_info,
    http_exception_handler,
    maestro_error_handler,
    status_code_for,
    validation_error_handler,
)
from src.core.config import Settings
from src.core.context import RequestContext
from src.core.exceptions import (
    ApiDocumentationError,
    ErrorCode,
    MaestroError,
    MissingOperationTagError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


@pytest.mark.unit
class TestStatusCodeFor:
    """Test mapping of application exceptions to status codes."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (ValidationError("bad"), status.HTTP_400_BAD_REQUEST),
            (
                ValidationError(
                    "missing", error_code=ErrorCode.API_VERSION_REQUIRED
                ),
                status.HTTP_400_BAD_REQUEST,
            ),
            (NotFoundError("gone"), status.HTTP_404_NOT_FOUND),
            (UnauthorizedError("who"), status.HTTP_401_UNAUTHORIZED),
            (MaestroError("CUSTOM", "boom"), status.HTTP_500_INTERNAL_SERVER_ERROR),
            (
                MissingOperationTagError("/api/builds", "get"),
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        ],
    )
    def test_status_codes(self, exc: MaestroError, expected: int) -> None:
        assert status_code_for(exc) == expected

    def test_documentation_errors_are_critical(self) -> None:
        exc = MissingOperationTagError("/api/builds", "get")

        assert isinstance(exc, ApiDocumentationError)
        assert not exc.is_expected


@pytest.mark.unit
class TestServiceInfo:
    """Test service information of error responses."""

    def test_from_settings(self, api_settings: Settings) -> None:
        info = get_service_info(api_settings)

        assert info.name == "Maestro"
        assert info.version == "1.0.0"
        assert info.environment == "development"


@pytest.mark.unit
class TestHandlerTypeChecks:
    """Test handlers reject exceptions they are not registered for."""

    async def test_maestro_error_handler(self, mocker: MockerFixture) -> None:
        request = mocker.Mock(spec=Request)

        with pytest.raises(TypeError, match="Expected MaestroError, got ValueError"):
            await maestro_error_handler(request, ValueError("x"))

    async def test_validation_error_handler(self, mocker: MockerFixture) -> None:
        request = mocker.Mock(spec=Request)

        with pytest.raises(TypeError, match="Expected RequestValidationError"):
            await validation_error_handler(request, ValueError("x"))

    async def test_http_exception_handler(self, mocker: MockerFixture) -> None:
        request = mocker.Mock(spec=Request)

        with pytest.raises(TypeError, match="Expected HTTPException"):
            await http_exception_handler(request, ValueError("x"))

    async def test_handlers_accept_their_exceptions(
        self, mocker: MockerFixture
    ) -> None:
        request = mocker.Mock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/builds"

        response = await http_exception_handler(
            request, HTTPException(status_code=404, detail="Nothing here")
        )
        validation_response = await validation_error_handler(
            request, RequestValidationError([])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert validation_response.status_code == (
            status.HTTP_422_UNPROCESSABLE_ENTITY
        )


@pytest.mark.unit
class TestHandlerLogging:
    """Test the request context bound to handler log records."""

    async def test_resolved_api_version_is_logged(
        self, mocker: MockerFixture, api_settings: Settings
    ) -> None:
        mocker.patch(
            "src.api.middleware.error_handler.get_settings", return_value=api_settings
        )
        mock_logger = mocker.patch("src.api.middleware.error_handler.logger")
        request = mocker.Mock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/builds/42"
        RequestContext.set_api_version("2020-02-20")

        response = await maestro_error_handler(request, NotFoundError("Build not found"))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["api_version"] == "2020-02-20"

    async def test_api_version_is_none_before_resolution(
        self, mocker: MockerFixture
    ) -> None:
        mock_logger = mocker.patch("src.api.middleware.error_handler.logger")
        request = mocker.Mock(spec=Request)
        request.method = "GET"
        request.url.path = "/api/builds"

        await http_exception_handler(
            request, HTTPException(status_code=404, detail="Nothing here")
        )

        assert mock_logger.warning.call_args.kwargs["api_version"] is None
