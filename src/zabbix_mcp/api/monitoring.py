"""
Zabbix monitoring data wrappers: host groups, items, triggers, problems and history.
"""

from typing import Any, Dict, List, Optional

from ..client import ZabbixClient
from ..endpoints import (
    HOSTGROUP_GET,
    ITEM_GET,
    TRIGGER_GET,
    PROBLEM_GET,
    EVENT_ACKNOWLEDGE,
    HISTORY_GET,
)

# Problems and history change quickly; keep them for less than the default TTL
VOLATILE_TTL = 30.0

# event.acknowledge action bitmask
ACK_CLOSE = 1
ACK_ACKNOWLEDGE = 2
ACK_MESSAGE = 4

# history.get value types
HISTORY_TYPES = {"float": 0, "character": 1, "log": 2, "unsigned": 3, "text": 4}


async def get_host_groups(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    params = {"output": ["groupid", "name"]}
    params.update(options)
    return await client.cached_request(HOSTGROUP_GET, params)


async def get_items(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    params = {"output": ["itemid", "hostid", "name", "key_", "lastvalue", "units", "value_type"]}
    params.update(options)
    return await client.cached_request(ITEM_GET, params)


async def get_triggers(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    params = {
        "output": ["triggerid", "description", "priority", "status", "value"],
        "expandDescription": True,
    }
    params.update(options)
    return await client.cached_request(TRIGGER_GET, params)


async def get_problems(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    """Get current problems, most recent first."""
    params = {
        "output": "extend",
        "recent": True,
        "sortfield": ["eventid"],
        "sortorder": "DESC",
    }
    params.update(options)
    return await client.cached_request(PROBLEM_GET, params, ttl=VOLATILE_TTL)


async def acknowledge_problem(
    client: ZabbixClient,
    event_ids: List[str],
    message: Optional[str] = None,
    close: bool = False
) -> Dict[str, Any]:
    """
    Acknowledge problem events, optionally with a message and closing them.

    Raises:
        ValueError: If no event IDs are given
    """
    if not event_ids:
        raise ValueError("At least one event ID is required to acknowledge a problem.")

    action = ACK_ACKNOWLEDGE
    params: Dict[str, Any] = {"eventids": list(event_ids)}
    if message:
        action |= ACK_MESSAGE
        params["message"] = message
    if close:
        action |= ACK_CLOSE
    params["action"] = action

    return await client.mutate(EVENT_ACKNOWLEDGE, params, invalidates=("problem.", "trigger."))


async def get_history(
    client: ZabbixClient,
    item_ids: List[str],
    history: str = "float",
    limit: int = 100,
    **options: Any
) -> List[Dict[str, Any]]:
    """
    Get history values for items.

    Raises:
        ValueError: If no item IDs are given or the history type is unknown
    """
    if not item_ids:
        raise ValueError("At least one item ID is required to read history.")
    if history not in HISTORY_TYPES:
        raise ValueError(f"Invalid history type '{history}'. Must be one of: {', '.join(HISTORY_TYPES)}")

    params = {
        "output": "extend",
        "history": HISTORY_TYPES[history],
        "itemids": list(item_ids),
        "sortfield": "clock",
        "sortorder": "DESC",
        "limit": limit,
    }
    params.update(options)
    return await client.cached_request(HISTORY_GET, params, ttl=VOLATILE_TTL)
