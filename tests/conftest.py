"""
Fixtures and test setup for the Pytest suite.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from zabbix_mcp.cache import APICache, ExpiringCache
from zabbix_mcp.config import APISettings, CacheSettings, Settings


class FakeClock:
    """Manually advanced clock for deterministic TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Small cache without a background sweep."""
    cache = ExpiringCache(max_size=5, default_ttl=1.0, cleanup_interval=None, clock=clock)
    yield cache
    cache.destroy()


@pytest.fixture
def api_cache(clock):
    cache = APICache(max_size=3, default_ttl=1.0, cleanup_interval=None, clock=clock)
    yield cache
    cache.destroy()


@pytest.fixture
def settings():
    return Settings(
        api=APISettings(url="https://zabbix.example.com/api_jsonrpc.php", auth_method="token", api_token="secret"),
        cache=CacheSettings(cleanup_interval=None),
    )


@pytest.fixture
def ctx():
    """Stand-in for the FastMCP context; only the logging coroutines are used."""
    ctx = MagicMock()
    ctx.info = AsyncMock()
    ctx.warning = AsyncMock()
    ctx.error = AsyncMock()
    return ctx


def rpc_response(result=None, error=None, status_code=200):
    """Build a fake requests.Response carrying a JSON-RPC body."""
    response = MagicMock()
    response.status_code = status_code
    body = {"jsonrpc": "2.0", "id": 1}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    response.json.return_value = body
    response.text = str(body)
    return response


@pytest.fixture
def make_response():
    return rpc_response
