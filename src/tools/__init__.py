"""
MCP Tools for the repository liberation server.

This package contains all MCP tool implementations organized by functionality.
"""

from .liberation_tools import fetch_github_repository

__all__ = [
    "fetch_github_repository",
]
