"""
Zabbix Host Tools

Provides tools for reading and managing Zabbix hosts.
"""

import json
from typing import Any, Dict, List, Optional

from fastmcp import Context

from .. import api
from ..cache import ExpiringCache
from ..client import ZabbixClient
from ..error_handler import tool_error_handler
from ..types import HostStatus


@tool_error_handler("zabbix_host_get")
async def host_get(
    client: ZabbixClient,
    ctx: Context,
    host_identifiers: Optional[List[str]] = None,
    hostids: Optional[List[str]] = None,
    groupids: Optional[List[str]] = None,
    filter: Optional[Dict[str, Any]] = None,
    search: Optional[Dict[str, Any]] = None,
    output: Any = "extend",
    limit: Optional[int] = None,
    identifier_cache: Optional[ExpiringCache] = None
) -> str:
    """
    Get Zabbix hosts, optionally resolving names or IPs to host IDs first.

    Args:
        client: Zabbix API client
        ctx: FastMCP context
        host_identifiers: Technical names, visible names or IPs to resolve
        hostids: Direct host IDs
        groupids: Host group IDs to filter by
        filter: Exact match filter, e.g. {"status": 0}
        search: Wildcard search, e.g. {"host": "web*"}
        output: Properties to return
        limit: Maximum number of hosts
        identifier_cache: Cache for resolved identifiers

    Returns:
        JSON string containing the hosts
    """
    params: Dict[str, Any] = {"output": output, "selectInterfaces": "extend", "selectHostGroups": ["groupid", "name"]}
    ids = list(hostids or [])
    errors: List[str] = []

    if host_identifiers:
        await ctx.info(f"Resolving {len(host_identifiers)} host identifiers")
        resolved, errors = await api.resolve_host_identifiers(client, host_identifiers, identifier_cache)
        if not resolved and not ids:
            return json.dumps({"hosts": [], "errors": errors}, indent=2)
        ids.extend(resolved)

    if ids:
        params["hostids"] = ids
    if groupids:
        params["groupids"] = groupids
    if filter:
        params["filter"] = filter
    if search:
        params["search"] = search
        params["searchWildcardsEnabled"] = True
    if limit:
        params["limit"] = limit

    hosts = [
        {**host, "status_label": HostStatus.label(host["status"])} if "status" in host else host
        for host in await api.get_hosts(client, **params)
    ]

    await ctx.info(f"Found {len(hosts)} hosts")
    result: Dict[str, Any] = {"hosts": hosts}
    if errors:
        result["errors"] = errors
    return json.dumps(result, indent=2, default=str)


@tool_error_handler("zabbix_host_create")
async def host_create(
    client: ZabbixClient,
    ctx: Context,
    host: str,
    groupids: List[str],
    ip: str,
    name: Optional[str] = None,
    port: str = "10050",
    templateids: Optional[List[str]] = None,
    identifier_cache: Optional[ExpiringCache] = None
) -> str:
    """Create a host with a single Zabbix agent interface."""
    params: Dict[str, Any] = {
        "host": host,
        "groups": [{"groupid": group_id} for group_id in groupids],
        "interfaces": [{
            "type": 1,
            "main": 1,
            "useip": 1,
            "ip": ip,
            "dns": "",
            "port": port,
        }],
    }
    if name:
        params["name"] = name
    if templateids:
        params["templates"] = [{"templateid": template_id} for template_id in templateids]

    await ctx.info(f"Creating host {host}")
    result = await api.create_host(client, params, identifier_cache)
    return json.dumps(result, indent=2)


@tool_error_handler("zabbix_host_update")
async def host_update(
    client: ZabbixClient,
    ctx: Context,
    hostid: str,
    name: Optional[str] = None,
    status: Optional[int] = None,
    description: Optional[str] = None,
    identifier_cache: Optional[ExpiringCache] = None
) -> str:
    """Update a host's visible name, monitoring status or description."""
    params: Dict[str, Any] = {"hostid": hostid}
    if name is not None:
        params["name"] = name
    if status is not None:
        params["status"] = HostStatus(status).value
    if description is not None:
        params["description"] = description

    if len(params) == 1:
        raise ValueError("At least one of name, status or description must be provided")

    await ctx.info(f"Updating host {hostid}")
    result = await api.update_host(client, params, identifier_cache)
    return json.dumps(result, indent=2)


@tool_error_handler("zabbix_host_delete")
async def host_delete(
    client: ZabbixClient,
    ctx: Context,
    hostids: List[str],
    identifier_cache: Optional[ExpiringCache] = None
) -> str:
    await ctx.info(f"Deleting hosts: {', '.join(hostids)}")
    result = await api.delete_hosts(client, hostids, identifier_cache)
    return json.dumps(result, indent=2)
