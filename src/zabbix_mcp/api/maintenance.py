"""
Zabbix maintenance window wrappers.
"""

from typing import Any, Dict, List, Optional

from ..client import ZabbixClient
from ..endpoints import MAINTENANCE_GET, MAINTENANCE_CREATE, MAINTENANCE_DELETE

# One-time-only timeperiod type
TIMEPERIOD_ONE_TIME = 0


async def get_maintenances(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    params = {"output": "extend", "selectHosts": ["hostid", "name"], "selectTimeperiods": "extend"}
    params.update(options)
    return await client.cached_request(MAINTENANCE_GET, params)


async def create_maintenance(
    client: ZabbixClient,
    name: str,
    active_since: int,
    active_till: int,
    host_ids: Optional[List[str]] = None,
    group_ids: Optional[List[str]] = None,
    description: str = "",
    collect_data: bool = True
) -> Dict[str, Any]:
    """
    Create a one-time maintenance window covering the given hosts or groups.

    Args:
        name: Maintenance name
        active_since: Start as a Unix timestamp
        active_till: End as a Unix timestamp
        host_ids: Hosts under maintenance (optional)
        group_ids: Host groups under maintenance (optional)
        description: Free text (optional)
        collect_data: Keep collecting data during maintenance

    Raises:
        ValueError: If the window is empty or no hosts/groups are given
    """
    if not name:
        raise ValueError("Maintenance name is required.")
    if active_till <= active_since:
        raise ValueError("active_till must be later than active_since.")
    if not host_ids and not group_ids:
        raise ValueError("At least one host ID or group ID is required.")

    params: Dict[str, Any] = {
        "name": name,
        "active_since": active_since,
        "active_till": active_till,
        "description": description,
        "maintenance_type": 0 if collect_data else 1,
        "timeperiods": [{
            "timeperiod_type": TIMEPERIOD_ONE_TIME,
            "start_date": active_since,
            "period": active_till - active_since,
        }],
    }
    if host_ids:
        params["hosts"] = [{"hostid": host_id} for host_id in host_ids]
    if group_ids:
        params["groups"] = [{"groupid": group_id} for group_id in group_ids]

    return await client.mutate(MAINTENANCE_CREATE, params)


async def delete_maintenances(client: ZabbixClient, maintenance_ids: List[str]) -> Dict[str, Any]:
    if not maintenance_ids:
        raise ValueError("At least one maintenance ID is required.")
    return await client.mutate(MAINTENANCE_DELETE, list(maintenance_ids))
