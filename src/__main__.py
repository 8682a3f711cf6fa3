"""
Entry point for running the repository liberation MCP server as a module.
This allows us to use relative imports properly.
"""

import asyncio

if __name__ == "__main__":
    from .core.app import run_server

    asyncio.run(run_server())
