"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

This module implements the FastMCP server for Zabbix integration.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP, Context
from fastmcp.utilities.logging import get_logger

from . import tools
from .cache import CacheRegistry, build_caches
from .client import ZabbixClient
from .config import Settings
from .error_handler import ZabbixMCPError

logger = get_logger(__name__)

# Tool tag constants
HOST_TOOL_TAGS = {"zabbix", "hosts", "inventory"}
MONITORING_TOOL_TAGS = {"zabbix", "monitoring"}
MAINTENANCE_TOOL_TAGS = {"zabbix", "maintenance"}
CACHE_TOOL_TAGS = {"cache", "diagnostics"}


@dataclass
class ZabbixMCPServer:
    """The FastMCP app plus the client and caches it was wired with."""
    mcp: FastMCP
    client: ZabbixClient
    caches: CacheRegistry

    def shutdown(self) -> None:
        """Stop cache sweeps, end a password session and close HTTP connections."""
        self.caches.destroy()
        try:
            self.client.logout()
        except ZabbixMCPError as e:
            logger.warning("Logout failed during shutdown: %s", e)
        self.client.close()


def build_server(settings: Settings, client: Optional[ZabbixClient] = None) -> ZabbixMCPServer:
    """
    Create the caches, the API client and the FastMCP app with all tools registered.

    Args:
        settings: Loaded configuration
        client: Pre-built client (tests); created from settings when omitted
    """
    caches = build_caches(settings)
    if client is None:
        client = ZabbixClient(settings, cache=caches.api)

    mcp = FastMCP(
        name="zabbix_mcp",
        instructions="Zabbix MCP Server - Provides tools for interacting with the Zabbix API"
    )

    @mcp.tool(
        name="zabbix_host_get",
        description="""Retrieve Zabbix hosts with their interfaces and host groups.

Hosts can be selected by direct IDs, by group, by exact filter or wildcard search,
or by identifiers (technical names, visible names or IP addresses) that are
resolved to host IDs first.

Usage examples:
- host_identifiers=["web01", "10.0.0.5"]
- search={"host": "db*"}
- filter={"status": 0}, groupids=["2"]""",
        tags=HOST_TOOL_TAGS
    )
    async def zabbix_host_get(
        ctx: Context,
        host_identifiers: Optional[List[str]] = None,
        hostids: Optional[List[str]] = None,
        groupids: Optional[List[str]] = None,
        filter: Optional[Dict[str, Any]] = None,
        search: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None
    ) -> str:
        return await tools.host_get(
            client, ctx,
            host_identifiers=host_identifiers,
            hostids=hostids,
            groupids=groupids,
            filter=filter,
            search=search,
            limit=limit,
            identifier_cache=caches.general
        )

    @mcp.tool(
        name="zabbix_host_create",
        description="Create a Zabbix host with one agent interface in the given host groups, optionally linking templates.",
        tags=HOST_TOOL_TAGS
    )
    async def zabbix_host_create(
        host: str,
        groupids: List[str],
        ip: str,
        ctx: Context,
        name: Optional[str] = None,
        port: str = "10050",
        templateids: Optional[List[str]] = None
    ) -> str:
        return await tools.host_create(
            client, ctx, host, groupids, ip,
            name=name,
            port=port,
            templateids=templateids,
            identifier_cache=caches.general
        )

    @mcp.tool(
        name="zabbix_host_update",
        description="Update a Zabbix host's visible name, description or monitoring status (0 = monitored, 1 = unmonitored).",
        tags=HOST_TOOL_TAGS
    )
    async def zabbix_host_update(
        hostid: str,
        ctx: Context,
        name: Optional[str] = None,
        status: Optional[int] = None,
        description: Optional[str] = None
    ) -> str:
        return await tools.host_update(
            client, ctx, hostid,
            name=name,
            status=status,
            description=description,
            identifier_cache=caches.general
        )

    @mcp.tool(
        name="zabbix_host_delete",
        description="Delete Zabbix hosts by host ID.",
        tags=HOST_TOOL_TAGS
    )
    async def zabbix_host_delete(hostids: List[str], ctx: Context) -> str:
        return await tools.host_delete(client, ctx, hostids, identifier_cache=caches.general)

    @mcp.tool(
        name="zabbix_hostgroup_get",
        description="List Zabbix host groups, optionally searching by name or limiting to groups that contain hosts.",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_hostgroup_get(ctx: Context, name: Optional[str] = None, with_hosts: bool = False) -> str:
        return await tools.hostgroup_get(client, ctx, name=name, with_hosts=with_hosts)

    @mcp.tool(
        name="zabbix_item_get",
        description="Get Zabbix items and their latest values, filtered by host and key or name patterns (wildcards allowed).",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_item_get(
        ctx: Context,
        hostids: Optional[List[str]] = None,
        key: Optional[str] = None,
        name: Optional[str] = None,
        limit: int = 100
    ) -> str:
        return await tools.item_get(client, ctx, hostids=hostids, key=key, name=name, limit=limit)

    @mcp.tool(
        name="zabbix_trigger_get",
        description="Get Zabbix triggers with readable severity labels. Use only_problems to return triggers currently in problem state.",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_trigger_get(
        ctx: Context,
        hostids: Optional[List[str]] = None,
        only_problems: bool = False,
        min_severity: Optional[str] = None,
        limit: int = 100
    ) -> str:
        return await tools.trigger_get(
            client, ctx, hostids=hostids, only_problems=only_problems, min_severity=min_severity, limit=limit
        )

    @mcp.tool(
        name="zabbix_problem_get",
        description="""Get current Zabbix problems, most recent first, with a per-severity summary.

Severities accept names (not classified, information, warning, average, high, disaster)
or their numeric values 0-5.""",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_problem_get(
        ctx: Context,
        hostids: Optional[List[str]] = None,
        severities: Optional[List[str]] = None,
        acknowledged: Optional[bool] = None,
        limit: int = 100
    ) -> str:
        return await tools.problem_get(
            client, ctx, hostids=hostids, severities=severities, acknowledged=acknowledged, limit=limit
        )

    @mcp.tool(
        name="zabbix_problem_acknowledge",
        description="Acknowledge Zabbix problem events, optionally adding a message and closing the problem.",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_problem_acknowledge(
        eventids: List[str],
        ctx: Context,
        message: Optional[str] = None,
        close: bool = False
    ) -> str:
        return await tools.problem_acknowledge(client, ctx, eventids, message=message, close=close)

    @mcp.tool(
        name="zabbix_history_get",
        description="Read historical values for Zabbix items. history is one of float, character, log, unsigned, text.",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_history_get(
        itemids: List[str],
        ctx: Context,
        history: str = "float",
        time_from: Optional[int] = None,
        time_till: Optional[int] = None,
        limit: int = 100
    ) -> str:
        return await tools.history_get(
            client, ctx, itemids, history=history, time_from=time_from, time_till=time_till, limit=limit
        )

    @mcp.tool(
        name="zabbix_maintenance_get",
        description="List Zabbix maintenance windows, filtered by hosts, host groups or name.",
        tags=MAINTENANCE_TOOL_TAGS
    )
    async def zabbix_maintenance_get(
        ctx: Context,
        hostids: Optional[List[str]] = None,
        groupids: Optional[List[str]] = None,
        name: Optional[str] = None
    ) -> str:
        return await tools.maintenance_get(client, ctx, hostids=hostids, groupids=groupids, name=name)

    @mcp.tool(
        name="zabbix_maintenance_create",
        description="Schedule a one-time Zabbix maintenance window for hosts or host groups. Times are Unix timestamps.",
        tags=MAINTENANCE_TOOL_TAGS
    )
    async def zabbix_maintenance_create(
        name: str,
        active_since: int,
        active_till: int,
        ctx: Context,
        hostids: Optional[List[str]] = None,
        groupids: Optional[List[str]] = None,
        description: str = "",
        collect_data: bool = True
    ) -> str:
        return await tools.maintenance_create(
            client, ctx, name, active_since, active_till,
            hostids=hostids, groupids=groupids, description=description, collect_data=collect_data
        )

    @mcp.tool(
        name="zabbix_maintenance_delete",
        description="Delete Zabbix maintenance windows by ID.",
        tags=MAINTENANCE_TOOL_TAGS
    )
    async def zabbix_maintenance_delete(maintenanceids: List[str], ctx: Context) -> str:
        return await tools.maintenance_delete(client, ctx, maintenanceids)

    @mcp.tool(
        name="zabbix_api_version",
        description="Return the Zabbix API version of the configured server.",
        tags=MONITORING_TOOL_TAGS
    )
    async def zabbix_api_version(ctx: Context) -> str:
        return await tools.api_version(client, ctx)

    @mcp.tool(
        name="cache_stats",
        description="Show hit rate, size, evictions and other statistics for the server's response caches.",
        tags=CACHE_TOOL_TAGS
    )
    async def cache_stats(ctx: Context) -> str:
        return await tools.cache_stats(caches, ctx)

    @mcp.tool(
        name="cache_clear",
        description="Clear one response cache (general, api, risks, vendors) or all of them.",
        tags=CACHE_TOOL_TAGS
    )
    async def cache_clear(ctx: Context, name: Optional[str] = None) -> str:
        return await tools.cache_clear(caches, ctx, name=name)

    return ZabbixMCPServer(mcp=mcp, client=client, caches=caches)


def main():
    """Main entry point for the Zabbix MCP server."""
    settings = Settings.from_env()
    server = build_server(settings)
    try:
        if settings.transport.mode == "http":
            server.mcp.run(
                transport="streamable-http",
                host=settings.transport.host,
                port=settings.transport.port
            )
        else:
            server.mcp.run()
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
