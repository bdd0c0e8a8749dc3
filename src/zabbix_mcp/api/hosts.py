"""
Zabbix host wrappers.
"""

import ipaddress
from typing import Any, Dict, List, Optional, Tuple

from ..cache import ExpiringCache
from ..client import ZabbixClient
from ..endpoints import HOST_GET, HOST_CREATE, HOST_UPDATE, HOST_DELETE, HOSTINTERFACE_GET

DEFAULT_HOST_OUTPUT = ["hostid", "host", "name", "status"]
DEFAULT_INTERFACE_OUTPUT = ["ip", "port", "type", "main"]
HOST_IDENTIFIER_PREFIX = "host-identifier:"
HOST_READ_PREFIXES = ("host.", "hostinterface.")


async def get_hosts(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    """Get hosts; options are passed to host.get as-is."""
    params = {"output": DEFAULT_HOST_OUTPUT, "selectInterfaces": DEFAULT_INTERFACE_OUTPUT}
    params.update(options)
    return await client.cached_request(HOST_GET, params)


async def get_host_interfaces(client: ZabbixClient, **options: Any) -> List[Dict[str, Any]]:
    params = {"output": "extend"}
    params.update(options)
    return await client.cached_request(HOSTINTERFACE_GET, params)


async def create_host(
    client: ZabbixClient,
    params: Dict[str, Any],
    identifier_cache: Optional[ExpiringCache] = None
) -> Dict[str, Any]:
    """
    Create a host.

    Raises:
        ValueError: If 'host', 'groups' or 'interfaces' is missing
    """
    if not params.get("host") or not params.get("groups") or not params.get("interfaces"):
        raise ValueError(
            "Parameters 'host' (technical name), 'groups', and 'interfaces' are required for creating a host."
        )
    return await _write_hosts(client, HOST_CREATE, params, identifier_cache)


async def update_host(
    client: ZabbixClient,
    params: Dict[str, Any],
    identifier_cache: Optional[ExpiringCache] = None
) -> Dict[str, Any]:
    if not params.get("hostid"):
        raise ValueError("Parameter 'hostid' is required for updating a host.")
    return await _write_hosts(client, HOST_UPDATE, params, identifier_cache)


async def delete_hosts(
    client: ZabbixClient,
    host_ids: List[str],
    identifier_cache: Optional[ExpiringCache] = None
) -> Dict[str, Any]:
    if not host_ids or not all(isinstance(host_id, str) and host_id for host_id in host_ids):
        raise ValueError("delete_hosts expects a non-empty list of string host IDs.")
    return await _write_hosts(client, HOST_DELETE, list(host_ids), identifier_cache)


async def _write_hosts(client: ZabbixClient, method: str, params: Any,
                       identifier_cache: Optional[ExpiringCache]) -> Dict[str, Any]:
    # Names and IPs may now point at other hosts, or none
    result = await client.mutate(method, params, invalidates=HOST_READ_PREFIXES)
    if identifier_cache is not None:
        identifier_cache.invalidate(HOST_IDENTIFIER_PREFIX)
    return result


async def resolve_host_identifiers(
    client: ZabbixClient,
    identifiers: List[str],
    cache: Optional[ExpiringCache] = None
) -> Tuple[List[str], List[str]]:
    """
    Resolve host IDs, technical names, visible names or IPs to host IDs.

    Successful resolutions are kept in ``cache`` so repeated lookups of the
    same identifier skip the API.

    Returns:
        (resolved host IDs in first-seen order, error messages)
    """
    if not identifiers:
        return [], ["No host identifiers provided."]

    resolved: Dict[str, None] = {}
    errors: List[str] = []
    not_found: List[str] = []

    for identifier in identifiers:
        cache_key = f"{HOST_IDENTIFIER_PREFIX}{identifier}"
        cached = cache.get(cache_key) if cache is not None else None
        if cached is not None:
            resolved.update(dict.fromkeys(cached))
            continue

        try:
            host_ids = await _resolve_one(client, identifier)
        except Exception as e:
            errors.append(f"Error resolving identifier '{identifier}': {e}")
            continue

        if not host_ids:
            not_found.append(identifier)
            continue

        resolved.update(dict.fromkeys(host_ids))
        if cache is not None:
            cache.set(cache_key, host_ids)

    if not_found:
        errors.append(f"Could not resolve the following identifiers to host IDs: {', '.join(not_found)}")
    return list(resolved), errors


async def _resolve_one(client: ZabbixClient, identifier: str) -> List[str]:
    if identifier.isdigit():
        hosts = await get_hosts(client, hostids=[identifier], output=["hostid"])
        if hosts:
            return [identifier]

    if _is_ip(identifier):
        interfaces = await get_host_interfaces(client, filter={"ip": identifier}, output=["hostid"])
        if interfaces:
            return _unique(iface["hostid"] for iface in interfaces)

    for field in ("host", "name"):
        hosts = await get_hosts(client, filter={field: [identifier]}, output=["hostid"])
        if hosts:
            return _unique(host["hostid"] for host in hosts)

    return []


def _is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _unique(values) -> List[str]:
    return list(dict.fromkeys(values))
