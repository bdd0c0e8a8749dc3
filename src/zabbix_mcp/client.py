"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

This module provides the client for making authenticated JSON-RPC requests to the Zabbix API.
"""

import itertools
import json
from typing import Any, Dict, Iterable, List, Optional, Union

import requests
from fastmcp.utilities.logging import get_logger

from .cache import APICache
from .config import Settings
from .endpoints import APIINFO_VERSION, USER_LOGIN, USER_LOGOUT, UNAUTHENTICATED_METHODS
from .error_handler import ZabbixMCPError, handle_api_response

logger = get_logger(__name__)

Params = Union[Dict[str, Any], List[Any]]


def _create_session(verify_ssl: bool) -> requests.Session:
    """Create a requests session with connection pooling."""
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(
        pool_connections=10,
        pool_maxsize=20,
        max_retries=0
    )
    session.mount('https://', adapter)
    session.mount('http://', adapter)
    session.verify = verify_ssl
    return session


class ZabbixClient:
    """
    JSON-RPC client for the Zabbix API.

    Read calls go through ``cached_request`` and are memoized in the API
    cache; writes go through ``mutate`` and invalidate cached reads of the
    object type they change.
    """

    def __init__(self, settings: Settings, cache: Optional[APICache] = None,
                 session: Optional[requests.Session] = None):
        self.settings = settings
        self.cache = cache if settings.cache.enabled else None
        self._session = session or _create_session(settings.api.verify_ssl)
        self._auth_token: Optional[str] = settings.api.api_token
        self._ids = itertools.count(1)

    @property
    def authenticated(self) -> bool:
        return self._auth_token is not None

    def request(self, method: str, params: Optional[Params] = None) -> Any:
        """
        Make a JSON-RPC request to the Zabbix API.

        Args:
            method: The API method (use constants from endpoints.py)
            params: The method parameters

        Returns:
            The ``result`` member of the JSON-RPC response

        Raises:
            APIError: If the server answers with an HTTP or JSON-RPC error
            ZabbixMCPError: If the HTTP request itself fails
        """
        if method not in UNAUTHENTICATED_METHODS:
            self.ensure_login()

        request_id = next(self._ids)
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params if params is not None else {},
            "id": request_id,
        }
        headers = {"Content-Type": "application/json-rpc"}
        if self._auth_token and method not in UNAUTHENTICATED_METHODS:
            headers["Authorization"] = f"Bearer {self._auth_token}"

        logger.info("Sending request (%s): %s %s", request_id, method, _loggable(method, params))

        try:
            response = self._session.post(
                self.settings.api.url,
                headers=headers,
                json=payload,
                timeout=self.settings.api.timeout
            )
        except requests.RequestException as e:
            logger.error("Request %s (%s) failed: %s", method, request_id, e)
            raise ZabbixMCPError(
                f"Zabbix API request failed for method '{method}': {e}",
                "REQUEST_FAILED",
                {"method": method, "request_id": request_id}
            ) from e

        return handle_api_response(response, method)

    async def cached_request(self, method: str, params: Optional[Dict[str, Any]] = None,
                             ttl: Optional[float] = None) -> Any:
        """Make a read request, serving repeated calls from the API cache."""
        if self.cache is None:
            return self.request(method, params)

        async def call():
            return self.request(method, params)

        return await self.cache.cache_api_call(method, params or {}, call, ttl)

    async def mutate(self, method: str, params: Params,
                     invalidates: Optional[Iterable[str]] = None) -> Any:
        """
        Make a write request and drop cached reads it makes stale.

        By default every cached read of the same object type is invalidated,
        e.g. ``host.update`` invalidates all ``host.*`` keys.
        """
        result = self.request(method, params)
        if self.cache is not None:
            prefixes = invalidates if invalidates is not None else (method.split(".", 1)[0] + ".",)
            for prefix in prefixes:
                self.cache.invalidate(prefix)
        return result

    def login(self) -> str:
        """Log in with username and password and keep the session token."""
        api = self.settings.api
        logger.info("Attempting to log in to Zabbix as %s", api.username)
        try:
            self._auth_token = self.request(USER_LOGIN, {"username": api.username, "password": api.password})
        except ZabbixMCPError:
            self._auth_token = None
            raise
        logger.info("Successfully logged in")
        return self._auth_token

    def logout(self) -> bool:
        """End a password session. Token sessions are left alone."""
        if self.settings.api.auth_method != "password" or not self._auth_token:
            return True
        try:
            result = self.request(USER_LOGOUT, [])
        finally:
            self._auth_token = None
        return bool(result)

    def ensure_login(self) -> Optional[str]:
        """Make sure a token is available, logging in for password auth."""
        if self._auth_token is None and self.settings.api.auth_method == "password":
            self.login()
        return self._auth_token

    def api_version(self) -> str:
        return self.request(APIINFO_VERSION, {})

    def close(self) -> None:
        self._session.close()


def _loggable(method: str, params: Optional[Params]) -> str:
    if method == USER_LOGIN and isinstance(params, dict):
        params = {**params, "password": "***"}
    text = json.dumps(params, default=str)
    if len(text) > 500:
        text = f"{text[:500]}... ({len(text)} chars)"
    return text
