"""Unit tests for hubkit/api/main.py."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from pytest_mock import MockerFixture

from hubkit.api.main import create_app, create_builder, lifespan, openapi_config
from hubkit.core.config import ServerConfig, Settings


@pytest.mark.unit
class TestLifespan:
    """Test the lifespan context manager for application startup and shutdown."""

    @pytest.mark.timeout(1)
    async def test_logs_startup_and_shutdown(self, mocker: MockerFixture) -> None:
        """Test that startup and shutdown are logged."""
        mock_logger = mocker.patch("hubkit.api.main.logger")
        app = mocker.Mock(title="Test API", version="1.0")

        async with lifespan(app):
            mock_logger.info.assert_called_once_with(
                "Application startup complete - {} v{}", "Test API", "1.0"
            )

        mock_logger.info.assert_called_with("Application shutdown complete")


@pytest.mark.unit
class TestFactories:
    """Test cases for settings-driven factories."""

    def test_openapi_config(self) -> None:
        """Test that document metadata comes from settings."""
        settings = Settings(
            app_name="Svc",
            app_version="2.0",
            app_description="Desc",
            servers=[ServerConfig(url="https://x")],
        )

        config = openapi_config(settings)

        assert config.title == "Svc"
        assert config.version == "2.0"
        assert config.description == "Desc"
        assert config.servers == [ServerConfig(url="https://x")]

    def test_builder_without_secret(self) -> None:
        """Test that no token configuration exists without a secret."""
        builder = create_builder(Settings())

        assert builder.jwt_config is None
        assert builder.compiler is not None
        assert builder.enable_logging

    def test_builder_with_secret(self, settings: Settings) -> None:
        """Test that the builder verifies tokens with the configured secret."""
        builder = create_builder(settings)

        assert builder.jwt_config is not None
        assert builder.jwt_config.algorithms == ["HS256"]
        assert not builder.enable_logging


@pytest.mark.unit
class TestCreateApp:
    """Test cases for the application factory."""

    def test_app_metadata(self, app: FastAPI) -> None:
        """Test that the app carries settings metadata and no framework docs."""
        assert app.title == "Test API"
        assert app.version == "9.9.9"
        assert app.docs_url is None
        assert app.redoc_url is None
        assert app.openapi_url is None

    async def test_framework_docs_disabled(self, client: AsyncClient) -> None:
        """Test that FastAPI's own documentation pages are not served."""
        assert (await client.get("/docs")).status_code == 404
        assert (await client.get("/redoc")).status_code == 404

    async def test_interface_document(self, client: AsyncClient) -> None:
        """Test that the compiled document lists routes in registration order."""
        response = await client.get("/openapi.json")

        assert response.status_code == 200
        document = response.json()
        assert document["openapi"] == "3.0.3"
        assert document["info"] == {"title": "Test API", "version": "9.9.9"}
        assert list(document["paths"]) == ["/items/{item_id}", "/items", "/health"]
        post = document["paths"]["/items"]["post"]
        assert post["security"] == [{"bearerAuth": []}]
        assert list(post["responses"]) == ["201", "401", "403", "422"]
        health = document["paths"]["/health"]["get"]
        assert health["tags"] == ["health"]
        assert health["responses"]["200"]["description"] == "Service is healthy"

    async def test_document_is_stable(self, client: AsyncClient) -> None:
        """Test that repeated fetches return identical bytes."""
        first = await client.get("/openapi.json")
        second = await client.get("/openapi.json")

        assert first.content == second.content

    async def test_health(self, client: AsyncClient) -> None:
        """Test that the health check is served."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.headers["x-correlation-id"]

    def test_disabled_endpoints(self, reset_logging_state: None) -> None:
        """Test that empty URLs disable the document and health endpoints."""
        _ = reset_logging_state
        app = create_app(Settings(openapi_url="", health_url=""))
        paths = {getattr(route, "path", None) for route in app.routes}

        assert "/openapi.json" not in paths
        assert "/health" not in paths

    def test_default_settings(
        self, mocker: MockerFixture, reset_logging_state: None
    ) -> None:
        """Test that cached settings are used when none are given."""
        _ = reset_logging_state
        mock_get_settings = mocker.patch(
            "hubkit.api.main.get_settings", return_value=Settings(app_name="Cached")
        )

        app = create_app()

        mock_get_settings.assert_called_once()
        assert app.title == "Cached"

    def test_sets_up_logging(self, mocker: MockerFixture, settings: Settings) -> None:
        """Test that logging is configured with the given settings."""
        mock_setup = mocker.patch("hubkit.api.main.setup_logging")

        create_app(settings)

        mock_setup.assert_called_once_with(settings)
