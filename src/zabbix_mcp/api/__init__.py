"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

Thin wrappers around Zabbix API methods.
Reads are memoized in the API cache; writes invalidate it.
"""

from .hosts import (
    get_hosts,
    get_host_interfaces,
    create_host,
    update_host,
    delete_hosts,
    resolve_host_identifiers,
)
from .monitoring import (
    get_host_groups,
    get_items,
    get_triggers,
    get_problems,
    acknowledge_problem,
    get_history,
)
from .maintenance import get_maintenances, create_maintenance, delete_maintenances

__all__ = [
    "get_hosts",
    "get_host_interfaces",
    "create_host",
    "update_host",
    "delete_hosts",
    "resolve_host_identifiers",
    "get_host_groups",
    "get_items",
    "get_triggers",
    "get_problems",
    "acknowledge_problem",
    "get_history",
    "get_maintenances",
    "create_maintenance",
    "delete_maintenances",
]
