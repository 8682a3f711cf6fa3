"""
Tests for core application setup and lifecycle.
"""

import pytest
import os
from unittest.mock import AsyncMock, Mock, patch

from src.core.app import build_context, create_app, ingestion_lifespan, register_tools, run_server
from src.core.context import IngestionContext


class TestCreateApp:
    """Test FastMCP application creation."""

    def test_create_app_name(self):
        """Test that the app is created with the server name."""
        app = create_app()

        assert app.name == "repo-liberator"

    @patch.dict(os.environ, {"HOST": "127.0.0.1", "PORT": "9000"})
    def test_create_app_host_port(self):
        """Test host and port from environment."""
        app = create_app()

        assert app.settings.host == "127.0.0.1"
        assert app.settings.port == 9000

    @pytest.mark.asyncio
    async def test_register_tools(self):
        """Test that the liberation tool is registered."""
        app = create_app()
        register_tools(app)

        tools = await app.list_tools()
        names = [tool.name for tool in tools]

        assert "fetch_github_repository" in names
        tool = next(t for t in tools if t.name == "fetch_github_repository")
        assert "ctx" not in tool.inputSchema["properties"]
        assert "url" in tool.inputSchema["required"]


class TestLifespan:
    """Test application lifespan management."""

    def test_build_context_uses_environment(self):
        """Test that the context is built from environment configuration."""
        context = build_context()

        assert isinstance(context, IngestionContext)
        assert context.config.host.shared_token == "test-shared-token"
        assert context.host_client.config is context.config.host

    @pytest.mark.asyncio
    async def test_lifespan_yields_context_and_closes(self):
        """Test that the lifespan yields a context and closes it on exit."""
        with patch.object(IngestionContext, "close", new_callable=AsyncMock) as mock_close:
            async with ingestion_lifespan(Mock()) as context:
                assert isinstance(context, IngestionContext)
                assert context.ingestion_service is not None

            mock_close.assert_awaited_once()


class TestRunServer:
    """Test server startup transport selection."""

    @pytest.mark.asyncio
    @patch.dict(os.environ, {"TRANSPORT": "stdio"})
    async def test_stdio_transport(self):
        """Test stdio transport selection."""
        with patch("src.core.app.create_app") as mock_create:
            app = Mock()
            app.run_stdio_async = AsyncMock()
            app.run_sse_async = AsyncMock()
            mock_create.return_value = app

            with patch("src.core.app.register_tools") as mock_register:
                await run_server()

            mock_register.assert_called_once_with(app)
            app.run_stdio_async.assert_awaited_once()
            app.run_sse_async.assert_not_called()

    @pytest.mark.asyncio
    @patch.dict(os.environ, {"TRANSPORT": "sse"})
    async def test_sse_transport(self):
        """Test SSE transport selection."""
        with patch("src.core.app.create_app") as mock_create:
            app = Mock()
            app.run_stdio_async = AsyncMock()
            app.run_sse_async = AsyncMock()
            mock_create.return_value = app

            with patch("src.core.app.register_tools"):
                await run_server()

            app.run_sse_async.assert_awaited_once()
