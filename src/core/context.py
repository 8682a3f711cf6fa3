"""Application context for the repository liberation MCP server."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..features.ingestion.config.quota import QuotaPolicy
from ..features.ingestion.config.settings import IngestionConfig
from ..features.ingestion.repository.hosting_client import GitHubApiClient
from ..features.ingestion.services.ingestion_service import RepositoryIngestionService

logger = logging.getLogger(__name__)


@dataclass
class IngestionContext:
    """Dependency container shared by the MCP tools.

    Holds only read-only configuration, the immutable quota table and the
    stateless ingestion service; every request builds its own pipeline
    state.

    Attributes:
        config: Ingestion configuration loaded from the environment
        quota_policy: Subscription tier limits
        host_client: GitHub API client reused across requests
        ingestion_service: Pipeline orchestration service
    """

    config: IngestionConfig
    quota_policy: QuotaPolicy
    host_client: GitHubApiClient
    ingestion_service: Optional[RepositoryIngestionService] = None

    def __post_init__(self):
        if self.ingestion_service is None:
            self.ingestion_service = RepositoryIngestionService(
                config=self.config,
                host=self.host_client,
                quota_policy=self.quota_policy,
            )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the HTTP connection pool."""
        try:
            await self.host_client.aclose()
            logger.info("GitHub API client closed")
        except Exception as e:
            logger.error(f"Error closing GitHub API client: {e}")
