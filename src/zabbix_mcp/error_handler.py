"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

Zabbix MCP Error Handler

Provides standardized error handling for the API client and tools.
"""

from typing import Dict, Optional
from functools import wraps
from fastmcp import Context


class ZabbixMCPError(Exception):
    """Base exception for Zabbix MCP errors."""
    def __init__(self, message: str, error_code: str = "UNKNOWN", details: Optional[Dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class APIError(ZabbixMCPError):
    """Raised when the Zabbix API returns an HTTP or JSON-RPC error."""
    def __init__(self, method: str, status_code: int, response_text: str, rpc_code: Optional[int] = None):
        if rpc_code is not None:
            message = f"Zabbix API error on {method}: {response_text} (Code: {rpc_code})"
        else:
            message = f"Zabbix API error on {method}: HTTP {status_code}"
        details = {"status_code": status_code, "response": response_text}
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        super().__init__(message, "API_ERROR", details)
        self.method = method
        self.status_code = status_code
        self.rpc_code = rpc_code


class ConfigurationError(ZabbixMCPError):
    """Raised when environment configuration is missing or invalid."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


def tool_error_handler(tool_name: str):
    """
    Decorator for tool handlers that provides standardized error handling.

    Args:
        tool_name: The name of the tool

    Returns:
        Decorated function with error handling
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            ctx = None

            # Find Context in arguments or kwargs
            for arg in args:
                if isinstance(arg, Context):
                    ctx = arg
                    break

            if not ctx and isinstance(kwargs.get('ctx'), Context):
                ctx = kwargs['ctx']

            try:
                return await func(*args, **kwargs)

            except ZabbixMCPError as e:
                if ctx:
                    await ctx.error(f"{tool_name} error: {e.message}")
                raise  # Re-raise for tools since they can handle exceptions

            except Exception as e:
                if ctx:
                    await ctx.error(f"Unexpected error in {tool_name}: {str(e)}")

                raise ZabbixMCPError(
                    f"Tool {tool_name} failed: {str(e)}",
                    "TOOL_ERROR"
                ) from e

        return wrapper
    return decorator


def handle_api_response(response, method: str, expected_status: int = 200):
    """
    Check a Zabbix HTTP response and return its JSON-RPC result.

    Raises:
        APIError: If the HTTP status is unexpected or the body carries an error
    """
    if response.status_code != expected_status:
        raise APIError(method, response.status_code, response.text)

    body = response.json()
    error = body.get("error")
    if error:
        text = error.get("message", "Unknown error")
        if error.get("data"):
            text = f"{text} - {error['data']}"
        raise APIError(method, response.status_code, text, rpc_code=error.get("code"))

    return body.get("result")
