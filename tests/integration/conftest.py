"""Shared fixtures for integration tests."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient


@pytest.fixture
async def async_client(sample_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Provide an HTTP client bound to the sample application.

    Args:
        sample_app: Application fixture from the root conftest.

    Yields:
        AsyncClient: Client sending requests to the application in-process.
    """
    transport = ASGITransport(app=sample_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
