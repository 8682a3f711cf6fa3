"""
Core application module for the repository liberation MCP server.

This module contains the central application setup logic including FastMCP
instance creation, lifespan management, and tool registration.
"""

import os
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from mcp.server.fastmcp import FastMCP
from dotenv import load_dotenv

from .context import IngestionContext
from ..features.ingestion.config.quota import QuotaPolicy
from ..features.ingestion.config.settings import load_ingestion_config
from ..features.ingestion.repository.hosting_client import GitHubApiClient

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from the LOG_LEVEL environment variable."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_context() -> IngestionContext:
    """Build the application context from the environment."""
    config = load_ingestion_config()
    return IngestionContext(
        config=config,
        quota_policy=QuotaPolicy(),
        host_client=GitHubApiClient(config.host),
    )


@asynccontextmanager
async def ingestion_lifespan(server: FastMCP) -> AsyncIterator[IngestionContext]:
    """
    Manages the application lifecycle.

    Args:
        server: The FastMCP server instance

    Yields:
        IngestionContext: The context containing the ingestion components
    """
    context = build_context()
    logger.info("Application context ready")

    try:
        yield context
    except Exception as e:
        logger.error(f"Error in application lifespan: {e}")
        raise
    finally:
        await context.close()
        logger.debug("Application lifespan context manager exiting")


def create_app() -> FastMCP:
    """
    Create and configure the FastMCP application instance.

    Returns:
        FastMCP: Configured FastMCP server instance ready for tool registration
    """
    logger.info("Creating FastMCP application instance...")

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8051"))

    app = FastMCP(
        name="repo-liberator",
        instructions="MCP server that extracts prioritized text files from GitHub repositories",
        host=host,
        port=port,
        lifespan=ingestion_lifespan,
    )

    logger.info(f"FastMCP application created - Host: {host}, Port: {port}")
    return app


def register_tools(app: FastMCP) -> None:
    """
    Register all MCP tools with the application instance.

    Args:
        app: The FastMCP application instance to register tools with
    """
    logger.info("Registering MCP tools...")

    from ..tools import liberation_tools

    app.tool(
        name="fetch_github_repository",
        description="""
        Fetch a GitHub repository snapshot and return its most important text files.

        Files are ranked by structural importance (manifests first, then source
        directories) and truncated to the caller's plan limit. Private repositories
        require the caller's own GitHub token.

        PARAMETERS:
        • url: GitHub URL or owner/name shorthand
        • github_token: Caller's own token (required for private repositories)
        • plan_type: "free" | "pack" | "pro" | "enterprise"
        • subscription_status / credits_remaining: billing facts for tier resolution
        """,
    )(liberation_tools.fetch_github_repository)
    logger.info("Liberation tools imported and registered")

    logger.info("MCP tools registration completed")


async def run_server() -> None:
    """
    Run the MCP server with the appropriate transport protocol.

    The transport is chosen by the TRANSPORT environment variable.
    """
    configure_logging()
    logger.info("Starting repository liberation MCP server...")

    app = create_app()
    register_tools(app)

    transport = os.getenv("TRANSPORT", "sse")
    logger.info(f"Using transport: {transport}")

    try:
        if transport == "sse":
            logger.info("Starting SSE transport server...")
            await app.run_sse_async()
        else:
            logger.info("Starting stdio transport server...")
            await app.run_stdio_async()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down...")
    finally:
        logger.info("Server shutdown completed")
