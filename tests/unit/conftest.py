"""Shared fixtures for unit tests."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from src.core.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch]:
    """Remove app-specific environment variables for the duration of a test.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Yields:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "API_DOCS_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)
    for key in ["K_SERVICE", "AWS_EXECUTION_ENV"]:
        monkeypatch.delenv(key, raising=False)

    yield monkeypatch


@pytest.fixture
def production_settings(tmp_path: Path) -> Settings:
    """Production settings whose content root is an empty temporary directory."""
    return Settings(
        environment="production",
        debug=False,
        api_docs_config={"content_root_path": tmp_path},
    )
