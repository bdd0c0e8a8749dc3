"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

Environment configuration for the Zabbix MCP server.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from fastmcp.utilities.logging import get_logger

from .error_handler import ConfigurationError

logger = get_logger(__name__)

TRANSPORT_MODES = ("stdio", "http")


@dataclass
class APISettings:
    url: str
    auth_method: str
    api_token: Optional[str] = None
    username: str = "Admin"
    password: Optional[str] = None
    timeout: float = 120.0
    verify_ssl: bool = True


@dataclass
class TransportSettings:
    mode: str = "stdio"
    host: str = "localhost"
    port: int = 3000


@dataclass
class CacheSettings:
    enabled: bool = True
    ttl: float = 300.0
    max_size: int = 500
    cleanup_interval: Optional[float] = 60.0


@dataclass
class Settings:
    api: APISettings
    transport: TransportSettings = field(default_factory=TransportSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If ZABBIX_API_URL is missing, the transport mode
                is unknown, or a numeric variable does not parse
        """
        env = os.environ if environ is None else environ

        url = env.get("ZABBIX_API_URL")
        if not url:
            raise ConfigurationError("ZABBIX_API_URL environment variable is required")

        api_token = env.get("ZABBIX_API_TOKEN") or None
        password = env.get("ZABBIX_PASSWORD") or None
        auth_method = determine_auth_method(api_token, password)

        api = APISettings(
            url=url,
            auth_method=auth_method,
            api_token=api_token,
            username=env.get("ZABBIX_USERNAME") or "Admin",
            password=password,
            timeout=_int(env, "ZABBIX_REQUEST_TIMEOUT", 120000) / 1000,
            verify_ssl=env.get("ZABBIX_IGNORE_SELFSIGNED_CERT", "").lower() != "true",
        )

        mode = env.get("MCP_TRANSPORT_MODE") or "stdio"
        if mode not in TRANSPORT_MODES:
            raise ConfigurationError(
                f"Invalid transport mode: {mode}. Must be 'stdio' or 'http'.",
                {"mode": mode}
            )
        transport = TransportSettings(
            mode=mode,
            host=env.get("MCP_HTTP_HOST") or "localhost",
            port=_int(env, "MCP_HTTP_PORT", 3000),
        )

        interval = _int(env, "CACHE_CLEANUP_INTERVAL", 60)
        cache = CacheSettings(
            enabled=env.get("CACHE_ENABLED", "true").lower() != "false",
            ttl=float(_int(env, "CACHE_TTL", 300)),
            max_size=_int(env, "CACHE_MAX_SIZE", 500),
            cleanup_interval=float(interval) if interval > 0 else None,
        )
        if cache.ttl <= 0 or cache.max_size <= 0:
            raise ConfigurationError(
                "CACHE_TTL and CACHE_MAX_SIZE must be positive",
                {"ttl": cache.ttl, "max_size": cache.max_size}
            )

        return cls(api=api, transport=transport, cache=cache)


def determine_auth_method(api_token: Optional[str], password: Optional[str]) -> str:
    """Pick token auth over password auth; 'none' when neither is configured."""
    if api_token and password:
        logger.warning("Both ZABBIX_API_TOKEN and ZABBIX_PASSWORD are set. Using API token.")
        return "token"
    if api_token:
        logger.info("Using API token authentication")
        return "token"
    if password:
        logger.info("Using username/password authentication")
        return "password"
    logger.error(
        "No authentication credentials provided. "
        "Set either ZABBIX_API_TOKEN or ZABBIX_PASSWORD environment variable."
    )
    return "none"


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", {"variable": name}) from None
