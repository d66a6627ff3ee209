"""Unit tests for the logging module."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import orjson
import pytest
from loguru import logger

from src.core import logging as logging_module
from src.core.logging import (
    CORRELATION_ID_DISPLAY_LENGTH,
    MAX_FIELD_VALUE_LENGTH,
    REDACTED,
    InterceptHandler,
    _format_extra_field,
    _LoggingState,
    make_console_formatter,
    serialize_for_json,
    setup_logging,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from src.core.config import Settings


def _record(**extra: Any) -> dict[str, Any]:  # noqa: ANN401
    level = type("Level", (), {"name": "INFO"})()
    return {
        "time": datetime(2020, 2, 20, 12, 0, tzinfo=UTC),
        "level": level,
        "message": "Generated API documentation for version {}",
        "name": "src.api.openapi.generator",
        "function": "generate",
        "line": 42,
        "extra": extra,
        "exception": None,
    }


@pytest.mark.unit
class TestFormatting:
    """Test console and JSON formatting of records."""

    def test_logging_state_initialization(self) -> None:
        assert _LoggingState().configured is False

    @pytest.mark.parametrize(
        ("key", "value", "expected"),
        [
            ("correlation_id", "1234567890abcdef", "correlation_id=12345678"),
            ("api_version", "2020-02-20", "api_version=2020-02-20"),
            ("Authorization", "Bearer secret", f"Authorization={REDACTED}"),
            ("path", "/api/{version}/swagger.json", "path=/api/{{version}}/swagger.json"),
        ],
    )
    def test_format_extra_field(self, key: str, value: str, expected: str) -> None:
        assert _format_extra_field(key, value, {"authorization"}) == expected

    def test_long_values_are_truncated(self) -> None:
        formatted = _format_extra_field("schemas", "x" * 500, set())

        assert len(formatted) == len("schemas=") + MAX_FIELD_VALUE_LENGTH
        assert formatted.endswith("...")

    def test_console_formatter_renders_context(self) -> None:
        formatter = make_console_formatter(["token"])

        line = formatter(
            _record(correlation_id="abcdef0123456789", token="t", _hidden="h")
        )

        assert f"correlation_id={'abcdef0123456789'[:CORRELATION_ID_DISPLAY_LENGTH]}" in line
        assert f"token={REDACTED}" in line
        assert "_hidden" not in line
        assert "version {{}}" in line
        assert line.endswith("\n")

    def test_serialize_for_json(self) -> None:
        output = serialize_for_json(
            _record(version="2020-02-20", operations=4, _internal=True)
        )

        entry = orjson.loads(output)
        assert output.endswith("\n")
        assert entry["level"] == "INFO"
        assert entry["logger"] == "src.api.openapi.generator"
        assert entry["version"] == "2020-02-20"
        assert entry["operations"] == 4
        assert "_internal" not in entry
        assert "exception" not in entry


@pytest.mark.unit
class TestInterceptHandler:
    """Test forwarding of standard library records."""

    def test_forwards_records_to_loguru(self) -> None:
        messages: list[str] = []
        sink_id = logger.add(lambda message: messages.append(message.record["message"]))
        try:
            record = logging.LogRecord(
                "uvicorn.error", logging.INFO, __file__, 1, "Started %s", ("server",), None
            )
            InterceptHandler().emit(record)
        finally:
            logger.remove(sink_id)

        assert messages == ["Started server"]

    def test_unknown_level_uses_level_number(self) -> None:
        messages: list[int] = []
        sink_id = logger.add(
            lambda message: messages.append(message.record["level"].no), level=0
        )
        try:
            record = logging.LogRecord(
                "custom", 25, __file__, 1, "custom level", (), None
            )
            record.levelname = "NOTICE"
            InterceptHandler().emit(record)
        finally:
            logger.remove(sink_id)

        assert messages == [25]


@pytest.mark.unit
class TestSetupLogging:
    """Test one-time logging configuration."""

    def test_configures_once(
        self, mocker: MockerFixture, api_settings: Settings
    ) -> None:
        mocker.patch.object(logging_module, "_state", _LoggingState())
        mock_logger = mocker.patch.object(logging_module, "logger")
        mocker.patch("logging.basicConfig")

        setup_logging(api_settings)
        setup_logging(api_settings)

        mock_logger.remove.assert_called_once()
        mock_logger.add.assert_called_once()
        assert logging_module._state.configured is True

    def test_json_formatter_uses_structured_sink(
        self, mocker: MockerFixture, api_settings: Settings
    ) -> None:
        mocker.patch.object(logging_module, "_state", _LoggingState())
        mock_logger = mocker.patch.object(logging_module, "logger")
        mocker.patch("logging.basicConfig")
        settings = api_settings.model_copy(deep=True)
        settings.log_config.log_formatter_type = "json"

        setup_logging(settings)

        sink = mock_logger.add.call_args.args[0]
        assert callable(sink)
        assert mock_logger.add.call_args.kwargs["diagnose"] is False
