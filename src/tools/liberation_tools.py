"""Repository liberation MCP tools.

This module contains the MCP tool that runs the ingestion pipeline for a
GitHub repository and returns the prioritized text files as JSON.
"""

import json
import logging
from typing import Optional

from mcp.server.fastmcp import Context

from ..features.ingestion.core.models import IngestionRequest, SubscriptionSnapshot
from ..features.ingestion.services.result_assembler import to_response

logger = logging.getLogger(__name__)


async def fetch_github_repository(
    ctx: Context,
    url: str,
    github_token: Optional[str] = None,
    plan_type: str = "free",
    subscription_status: Optional[str] = None,
    credits_remaining: Optional[int] = None,
) -> str:
    """
    Fetch a repository snapshot and return its prioritized text files.

    Args:
        ctx: The MCP server provided context (automatically provided)
        url: GitHub repository URL or owner/name shorthand
        github_token: The caller's own GitHub token; required for private
                      repositories, never replaced by the server token for them
        plan_type: Caller's subscription plan ("free", "pack", "pro", "enterprise")
        subscription_status: Subscription status (e.g. "active"); when omitted
                             the plan is taken as active
        credits_remaining: Credit balance used for tier resolution

    Returns:
        JSON string with either the extracted files and partial-analysis
        metadata, or an errorKind with message and status code
    """
    service = ctx.request_context.lifespan_context.ingestion_service

    subscription = None
    if subscription_status is not None or credits_remaining is not None:
        subscription = SubscriptionSnapshot(
            plan_type=plan_type,
            status=subscription_status,
            credits_remaining=credits_remaining,
        )

    request = IngestionRequest(
        reference=url,
        caller_token=github_token,
        plan_type=plan_type,
        subscription=subscription,
    )

    outcome = await service.liberate(request)
    return json.dumps(to_response(outcome), indent=2)
