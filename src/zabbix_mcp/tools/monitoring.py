"""
Zabbix Monitoring Tools

Provides tools for host groups, items, triggers, problems and history.
"""

import json
from typing import Any, Dict, List, Optional

from fastmcp import Context

from .. import api
from ..client import ZabbixClient
from ..error_handler import tool_error_handler
from ..types import annotate_severity, severities_to_values, severity_summary


@tool_error_handler("zabbix_hostgroup_get")
async def hostgroup_get(
    client: ZabbixClient,
    ctx: Context,
    name: Optional[str] = None,
    with_hosts: bool = False
) -> str:
    params: Dict[str, Any] = {}
    if name:
        params["search"] = {"name": name}
    if with_hosts:
        params["with_hosts"] = True

    groups = await api.get_host_groups(client, **params)
    await ctx.info(f"Found {len(groups)} host groups")
    return json.dumps(groups, indent=2)


@tool_error_handler("zabbix_item_get")
async def item_get(
    client: ZabbixClient,
    ctx: Context,
    hostids: Optional[List[str]] = None,
    key: Optional[str] = None,
    name: Optional[str] = None,
    limit: int = 100
) -> str:
    """
    Get items with their latest values.

    Args:
        hostids: Hosts to read items from (optional)
        key: Item key search pattern, e.g. "system.cpu*" (optional)
        name: Item name search pattern (optional)
        limit: Maximum number of items

    Returns:
        JSON string containing the items
    """
    params: Dict[str, Any] = {"limit": limit}
    if hostids:
        params["hostids"] = hostids
    search = {}
    if key:
        search["key_"] = key
    if name:
        search["name"] = name
    if search:
        params["search"] = search
        params["searchWildcardsEnabled"] = True

    items = await api.get_items(client, **params)
    await ctx.info(f"Found {len(items)} items")
    return json.dumps(items, indent=2)


@tool_error_handler("zabbix_trigger_get")
async def trigger_get(
    client: ZabbixClient,
    ctx: Context,
    hostids: Optional[List[str]] = None,
    only_problems: bool = False,
    min_severity: Optional[str] = None,
    limit: int = 100
) -> str:
    params: Dict[str, Any] = {"limit": limit, "selectHosts": ["hostid", "name"]}
    if hostids:
        params["hostids"] = hostids
    if only_problems:
        params["only_true"] = True
    if min_severity:
        params["min_severity"] = severities_to_values([min_severity])[0]

    triggers = await api.get_triggers(client, **params)
    triggers = annotate_severity(triggers, field="priority")
    await ctx.info(f"Found {len(triggers)} triggers")
    return json.dumps(triggers, indent=2)


@tool_error_handler("zabbix_problem_get")
async def problem_get(
    client: ZabbixClient,
    ctx: Context,
    hostids: Optional[List[str]] = None,
    severities: Optional[List[str]] = None,
    acknowledged: Optional[bool] = None,
    limit: int = 100
) -> str:
    """
    Get current problems with readable severities and a per-severity summary.

    Args:
        hostids: Restrict to these hosts (optional)
        severities: Severity names or digits, e.g. ["high", "disaster"] (optional)
        acknowledged: Filter on acknowledgement state (optional)
        limit: Maximum number of problems

    Returns:
        JSON string with "summary" and "problems"
    """
    params: Dict[str, Any] = {"limit": limit}
    if hostids:
        params["hostids"] = hostids
    values = severities_to_values(severities)
    if values is not None:
        params["severities"] = values
    if acknowledged is not None:
        params["acknowledged"] = acknowledged

    problems = await api.get_problems(client, **params)
    problems = annotate_severity(problems)
    await ctx.info(f"Found {len(problems)} problems")
    return json.dumps({"summary": severity_summary(problems), "problems": problems}, indent=2)


@tool_error_handler("zabbix_problem_acknowledge")
async def problem_acknowledge(
    client: ZabbixClient,
    ctx: Context,
    eventids: List[str],
    message: Optional[str] = None,
    close: bool = False
) -> str:
    await ctx.info(f"Acknowledging events: {', '.join(eventids)}")
    result = await api.acknowledge_problem(client, eventids, message=message, close=close)
    return json.dumps(result, indent=2)


@tool_error_handler("zabbix_history_get")
async def history_get(
    client: ZabbixClient,
    ctx: Context,
    itemids: List[str],
    history: str = "float",
    time_from: Optional[int] = None,
    time_till: Optional[int] = None,
    limit: int = 100
) -> str:
    params: Dict[str, Any] = {}
    if time_from is not None:
        params["time_from"] = time_from
    if time_till is not None:
        params["time_till"] = time_till

    values = await api.get_history(client, itemids, history=history, limit=limit, **params)
    await ctx.info(f"Read {len(values)} history values")
    return json.dumps(values, indent=2)
