#!/usr/bin/env python3
"""
Simple entry point for the repository liberation MCP server.
Runs the src package as a module from the project root.
"""

import asyncio

if __name__ == "__main__":
    from src.core.app import run_server

    asyncio.run(run_server())
