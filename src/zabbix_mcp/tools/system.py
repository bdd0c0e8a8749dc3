"""
Server Tools

Provides tools for the Zabbix API version and the server's caches.
"""

import json
from typing import Optional

from fastmcp import Context

from ..cache import CacheRegistry
from ..client import ZabbixClient
from ..error_handler import tool_error_handler


@tool_error_handler("zabbix_api_version")
async def api_version(client: ZabbixClient, ctx: Context) -> str:
    version = client.api_version()
    await ctx.info(f"Zabbix API version {version}")
    return json.dumps({"version": version, "url": client.settings.api.url}, indent=2)


@tool_error_handler("cache_stats")
async def cache_stats(caches: CacheRegistry, ctx: Context) -> str:
    """
    Report hit/miss/eviction statistics for every named cache.

    Returns:
        JSON object keyed by cache name
    """
    return json.dumps(caches.stats(), indent=2)


@tool_error_handler("cache_clear")
async def cache_clear(caches: CacheRegistry, ctx: Context, name: Optional[str] = None) -> str:
    """Clear one named cache, or all of them when name is omitted."""
    named = caches.all()
    if name is not None and name not in named:
        raise ValueError(f"Unknown cache '{name}'. Must be one of: {', '.join(named)}")

    targets = [name] if name else list(named)
    cleared = {}
    for target in targets:
        cleared[target] = named[target].size()
        named[target].clear()

    await ctx.info(f"Cleared caches: {', '.join(targets)}")
    return json.dumps({"cleared": cleared}, indent=2)
