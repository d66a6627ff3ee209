"""Root conftest.py for the Maestro test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI

from src.api.main import create_app
from src.core.config import ApiDocsConfig, Settings, get_settings
from src.core.context import RequestContext
from tests.fixtures.sample_api import router


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def api_settings() -> Settings:
    """Development settings documenting three API versions."""
    return Settings(
        environment="development",
        debug=False,
        api_docs_config=ApiDocsConfig(
            api_versions=["2018-07-16", "2019-01-16", "2020-02-20"],
        ),
    )


@pytest.fixture
def sample_app(api_settings: Settings) -> FastAPI:
    """Application serving the versioned sample API.

    Args:
        api_settings: Settings fixture.

    Returns:
        FastAPI: Configured application with the sample routes included.
    """
    application = create_app(api_settings)
    application.include_router(router)
    application.dependency_overrides[get_settings] = lambda: api_settings
    return application
