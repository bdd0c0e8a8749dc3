"""
Zabbix Maintenance Tools

Provides tools for listing, scheduling and removing maintenance windows.
"""

import json
from typing import Any, Dict, List, Optional

from fastmcp import Context

from .. import api
from ..client import ZabbixClient
from ..error_handler import tool_error_handler


@tool_error_handler("zabbix_maintenance_get")
async def maintenance_get(
    client: ZabbixClient,
    ctx: Context,
    hostids: Optional[List[str]] = None,
    groupids: Optional[List[str]] = None,
    name: Optional[str] = None
) -> str:
    params: Dict[str, Any] = {}
    if hostids:
        params["hostids"] = hostids
    if groupids:
        params["groupids"] = groupids
    if name:
        params["search"] = {"name": name}

    maintenances = await api.get_maintenances(client, **params)
    await ctx.info(f"Found {len(maintenances)} maintenance windows")
    return json.dumps(maintenances, indent=2)


@tool_error_handler("zabbix_maintenance_create")
async def maintenance_create(
    client: ZabbixClient,
    ctx: Context,
    name: str,
    active_since: int,
    active_till: int,
    hostids: Optional[List[str]] = None,
    groupids: Optional[List[str]] = None,
    description: str = "",
    collect_data: bool = True
) -> str:
    """
    Schedule a one-time maintenance window.

    Args:
        name: Maintenance name
        active_since: Start as a Unix timestamp
        active_till: End as a Unix timestamp
        hostids: Hosts to put into maintenance (optional)
        groupids: Host groups to put into maintenance (optional)
        description: Free text (optional)
        collect_data: Keep collecting data during the window

    Returns:
        JSON string containing the created maintenance IDs
    """
    await ctx.info(f"Creating maintenance window '{name}'")
    result = await api.create_maintenance(
        client,
        name,
        active_since,
        active_till,
        host_ids=hostids,
        group_ids=groupids,
        description=description,
        collect_data=collect_data
    )
    return json.dumps(result, indent=2)


@tool_error_handler("zabbix_maintenance_delete")
async def maintenance_delete(client: ZabbixClient, ctx: Context, maintenanceids: List[str]) -> str:
    await ctx.info(f"Deleting maintenance windows: {', '.join(maintenanceids)}")
    result = await api.delete_maintenances(client, maintenanceids)
    return json.dumps(result, indent=2)
