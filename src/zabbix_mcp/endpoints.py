"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

Zabbix API Method Constants

This module defines all Zabbix JSON-RPC method names used throughout the application.
Centralizing these constants prevents typos and makes API changes easier to manage.
"""


class ZabbixMethods:
    """Zabbix JSON-RPC method constants for consistent usage across the application."""

    # Session
    APIINFO_VERSION = "apiinfo.version"
    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"

    # Hosts
    HOST_GET = "host.get"
    HOST_CREATE = "host.create"
    HOST_UPDATE = "host.update"
    HOST_DELETE = "host.delete"
    HOSTINTERFACE_GET = "hostinterface.get"
    HOSTGROUP_GET = "hostgroup.get"

    # Monitoring data
    ITEM_GET = "item.get"
    TRIGGER_GET = "trigger.get"
    PROBLEM_GET = "problem.get"
    EVENT_ACKNOWLEDGE = "event.acknowledge"
    HISTORY_GET = "history.get"

    # Maintenance windows
    MAINTENANCE_GET = "maintenance.get"
    MAINTENANCE_CREATE = "maintenance.create"
    MAINTENANCE_DELETE = "maintenance.delete"


# Methods that are sent without an Authorization header
UNAUTHENTICATED_METHODS = frozenset({ZabbixMethods.APIINFO_VERSION, ZabbixMethods.USER_LOGIN})

# Convenience exports for simpler imports
APIINFO_VERSION = ZabbixMethods.APIINFO_VERSION
USER_LOGIN = ZabbixMethods.USER_LOGIN
USER_LOGOUT = ZabbixMethods.USER_LOGOUT
HOST_GET = ZabbixMethods.HOST_GET
HOST_CREATE = ZabbixMethods.HOST_CREATE
HOST_UPDATE = ZabbixMethods.HOST_UPDATE
HOST_DELETE = ZabbixMethods.HOST_DELETE
HOSTINTERFACE_GET = ZabbixMethods.HOSTINTERFACE_GET
HOSTGROUP_GET = ZabbixMethods.HOSTGROUP_GET
ITEM_GET = ZabbixMethods.ITEM_GET
TRIGGER_GET = ZabbixMethods.TRIGGER_GET
PROBLEM_GET = ZabbixMethods.PROBLEM_GET
EVENT_ACKNOWLEDGE = ZabbixMethods.EVENT_ACKNOWLEDGE
HISTORY_GET = ZabbixMethods.HISTORY_GET
MAINTENANCE_GET = ZabbixMethods.MAINTENANCE_GET
MAINTENANCE_CREATE = ZabbixMethods.MAINTENANCE_CREATE
MAINTENANCE_DELETE = ZabbixMethods.MAINTENANCE_DELETE
