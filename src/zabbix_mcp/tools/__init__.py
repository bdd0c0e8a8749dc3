"""
Tools package for the Zabbix MCP server.
"""

from .hosts import host_get, host_create, host_update, host_delete
from .monitoring import (
    hostgroup_get,
    item_get,
    trigger_get,
    problem_get,
    problem_acknowledge,
    history_get,
)
from .maintenance import maintenance_get, maintenance_create, maintenance_delete
from .system import api_version, cache_stats, cache_clear

__all__ = [
    'host_get',
    'host_create',
    'host_update',
    'host_delete',
    'hostgroup_get',
    'item_get',
    'trigger_get',
    'problem_get',
    'problem_acknowledge',
    'history_get',
    'maintenance_get',
    'maintenance_create',
    'maintenance_delete',
    'api_version',
    'cache_stats',
    'cache_clear',
]
