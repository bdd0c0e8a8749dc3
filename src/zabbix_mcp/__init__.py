"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

Zabbix MCP Server package.
This package provides a FastMCP-based server for interacting with Zabbix APIs.
"""

from .server import main, build_server

__version__ = "0.1.1"
__all__ = ["main", "build_server"]

# Export the main function for the CLI entry point
def main_cli():
    """CLI entry point for the Zabbix MCP server."""
    main()
