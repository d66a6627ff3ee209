"""Integration tests for the per-version documentation endpoints."""

import pytest
from httpx import AsyncClient

from src.core.exceptions import ErrorCode
from tests.fixtures.sample_api import V2019, V2020


@pytest.mark.integration
class TestSwaggerDocuments:
    """Test serving of the generated documents."""

    async def test_document_per_version(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"/api/{V2020}/swagger.json")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        document = response.json()
        assert document["info"]["version"] == V2020
        assert document["paths"]["/api/builds"]["get"]["operationId"] == (
            "Builds_ListBuilds"
        )
        assert document["security"] == [{"Bearer": []}]

    async def test_older_version_has_fewer_operations(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.get(f"/api/{V2019}/swagger.json")

        assert response.status_code == 200
        assert "/api/subscriptions" not in response.json()["paths"]

    async def test_document_key_order(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"/api/{V2020}/swagger.json")

        assert list(response.json())[:2] == ["openapi", "info"]

    async def test_unknown_version(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/1999-01-01/swagger.json")

        assert response.status_code == 404
        data = response.json()
        assert data["errorCode"] == ErrorCode.NOT_FOUND.value
        assert data["details"]["version"] == "1999-01-01"

    async def test_default_openapi_routes_are_disabled(
        self, async_client: AsyncClient
    ) -> None:
        for path in ("/openapi.json", "/docs", "/redoc"):
            response = await async_client.get(path)

            assert response.status_code == 404


@pytest.mark.integration
class TestSwaggerUi:
    """Test the Swagger UI page."""

    async def test_defaults_to_latest_version(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/swagger")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert f"/api/{V2020}/swagger.json" in response.text

    async def test_selected_version(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/swagger", params={"version": V2019})

        assert response.status_code == 200
        assert f"/api/{V2019}/swagger.json" in response.text
        assert f'"urls.primaryName": "{V2019}"' in response.text

    async def test_lists_every_version(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/swagger")

        for version in ("2018-07-16", V2019, V2020):
            assert f"/api/{version}/swagger.json" in response.text

    async def test_unknown_version(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/swagger", params={"version": "latest"})

        assert response.status_code == 404
        assert response.json()["errorCode"] == ErrorCode.NOT_FOUND.value
