"""
Copyright (c) 2025 DevRev, Inc.
SPDX-License-Identifier: MIT

Size-limited, expiring caches for the Zabbix MCP server.

Prevents unbounded memory growth by limiting cache size, expiring entries
after a TTL and evicting the least recently used entry when full.
"""

import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)

# Cache configuration constants
DEFAULT_CACHE_SIZE = 1000
DEFAULT_API_CACHE_SIZE = 500
DEFAULT_TTL = 300.0  # 5 minutes
DEFAULT_CLEANUP_INTERVAL = 60.0  # 1 minute

_MISSING = object()


def _tagged(value: Any) -> Dict[str, str]:
    """Key material for values JSON cannot encode; the type name keeps them apart from strings."""
    return {"__type__": f"{type(value).__module__}.{type(value).__qualname__}", "value": str(value)}


@dataclass
class CacheEntry:
    """A cached value and the clock reading after which it is gone."""
    value: Any
    expires_at: float


class ExpiringCache:
    """
    In-memory cache with TTL expiration, LRU eviction and statistics.

    Entries live for ``default_ttl`` seconds unless ``set`` is given a ttl.
    When the cache is full, the entry with the oldest access time is evicted;
    ties go to the first key in ledger order, which is access order.

    A background thread removes expired entries every ``cleanup_interval``
    seconds. Pass ``cleanup_interval=None`` to disable it (tests, scripts).
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_SIZE,
        default_ttl: float = DEFAULT_TTL,
        cleanup_interval: Optional[float] = DEFAULT_CLEANUP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize cache with size limit, default TTL and sweep interval."""
        if not isinstance(max_size, int) or isinstance(max_size, bool) or max_size <= 0:
            raise ValueError(f"max_size must be a positive integer, got {max_size!r}")
        if default_ttl is None or default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl!r}")
        if cleanup_interval is not None and cleanup_interval <= 0:
            raise ValueError(f"cleanup_interval must be positive or None, got {cleanup_interval!r}")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock

        self._entries: Dict[str, CacheEntry] = {}
        # Least recently used first
        self._access_times: OrderedDict[str, float] = OrderedDict()
        self._lock = threading.RLock()
        self.stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "evictions": 0,
            "cleanups": 0,
        }

        self._stop_event = threading.Event()
        self._cleanup_thread: Optional[threading.Thread] = None
        if cleanup_interval is not None:
            self._cleanup_thread = threading.Thread(
                target=self._cleanup_loop,
                name=f"{type(self).__name__.lower()}-cleanup",
                daemon=True,
            )
            self._cleanup_thread.start()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value under key, evicting least recently used entries if full."""
        self._check_key(key)
        if ttl is not None and ttl < 0:
            raise ValueError(f"ttl must not be negative, got {ttl!r}")
        ttl = ttl or self.default_ttl

        with self._lock:
            now = self._clock()

            # Replace in place
            if key in self._entries:
                del self._entries[key]
                del self._access_times[key]

            while len(self._entries) >= self.max_size:
                self._evict_lru()

            self._entries[key] = CacheEntry(value=value, expires_at=now + ttl)
            self._access_times[key] = now
            self.stats["sets"] += 1

        logger.debug("Cache SET: %s (ttl=%ss)", key, ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or default when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)

            if entry is None:
                self.stats["misses"] += 1
                logger.debug("Cache MISS: %s", key)
                return default

            now = self._clock()
            if now > entry.expires_at:
                self._remove(key)
                self.stats["misses"] += 1
                logger.debug("Cache EXPIRED: %s", key)
                return default

            # Move to end of ledger (most recently used)
            self._access_times[key] = now
            self._access_times.move_to_end(key)
            self.stats["hits"] += 1

        logger.debug("Cache HIT: %s", key)
        return entry.value

    def has(self, key: str) -> bool:
        """Check whether key holds a live entry without touching stats or recency."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if self._clock() > entry.expires_at:
                self._remove(key)
                return False
            return True

    def delete(self, key: str) -> bool:
        """Remove key from cache."""
        with self._lock:
            if not self._remove(key):
                return False
            self.stats["deletes"] += 1

        logger.debug("Cache DELETE: %s", key)
        return True

    def clear(self) -> None:
        """Drop every entry. Lifetime statistics are kept."""
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
            self._access_times.clear()

        logger.debug("Cache cleared: %d entries removed", size)

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]

            for key in expired:
                self._remove(key)

            if expired:
                self.stats["cleanups"] += 1

        if expired:
            logger.debug("Cache cleanup: %d expired entries removed", len(expired))
        return len(expired)

    def size(self) -> int:
        """Get current number of cache entries."""
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Return a snapshot of the counters, hit rate, size and capacity."""
        with self._lock:
            snapshot = dict(self.stats)
            lookups = snapshot["hits"] + snapshot["misses"]
            if lookups > 0:
                snapshot["hit_rate"] = f"{snapshot['hits'] / lookups * 100:.2f}%"
            else:
                snapshot["hit_rate"] = "0%"
            snapshot["size"] = len(self._entries)
            snapshot["max_size"] = self.max_size
            return snapshot

    def destroy(self) -> None:
        """Stop the background sweep and drop all entries. Safe to call twice."""
        self._stop_event.set()
        thread = self._cleanup_thread
        self._cleanup_thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self.clear()

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def invalidate(self, prefix: str) -> int:
        """Delete every entry whose key starts with prefix. Returns the count."""
        with self._lock:
            keys = [key for key in self._entries if key.startswith(prefix)]
            for key in keys:
                self.delete(key)
        if keys:
            logger.debug("Cache invalidated %d entries for prefix %s", len(keys), prefix)
        return len(keys)

    def _evict_lru(self) -> None:
        lru_key, _ = self._access_times.popitem(last=False)
        del self._entries[lru_key]
        self.stats["evictions"] += 1
        logger.debug("Cache LRU eviction: %s", lru_key)

    def _remove(self, key: str) -> bool:
        if key not in self._entries:
            return False
        del self._entries[key]
        del self._access_times[key]
        return True

    def _cleanup_loop(self) -> None:
        while not self._stop_event.wait(self.cleanup_interval):
            try:
                self.cleanup()
            except Exception:
                logger.exception("Cache cleanup failed")

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError("Cache key must be a non-empty string")


class APICache(ExpiringCache):
    """Cache for API responses with deterministic key generation."""

    def __init__(
        self,
        max_size: int = DEFAULT_API_CACHE_SIZE,
        default_ttl: float = DEFAULT_TTL,
        cleanup_interval: Optional[float] = DEFAULT_CLEANUP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(max_size, default_ttl, cleanup_interval, clock)

    def generate_key(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Build a cache key from an endpoint and its parameters.

        Parameters are serialized with sorted keys, so two mappings holding
        the same pairs in a different order produce the same key.

        Args:
            endpoint: API method or path, e.g. "host.get"
            params: JSON-serializable parameters (optional)

        Returns:
            Key of the form "<endpoint>:<compact sorted JSON>"
        """
        serialized = json.dumps(params or {}, sort_keys=True, separators=(",", ":"), default=_tagged)
        return f"{endpoint}:{serialized}"

    async def cache_api_call(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]],
        fn: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        """
        Return the cached result for endpoint/params, or await fn() and cache it.

        Failures raised by fn propagate and are never cached. Concurrent misses
        on the same key each call fn.
        """
        key = self.generate_key(endpoint, params)

        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        result = await fn()
        self.set(key, result, ttl)
        return result


@dataclass
class CacheRegistry:
    """Named cache instances owned by the server's composition root."""
    general: ExpiringCache
    api: APICache
    risks: APICache
    vendors: APICache

    def all(self) -> Dict[str, ExpiringCache]:
        return {
            "general": self.general,
            "api": self.api,
            "risks": self.risks,
            "vendors": self.vendors,
        }

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {name: cache.get_stats() for name, cache in self.all().items()}

    def destroy(self) -> None:
        logger.debug("Destroying caches...")
        for cache in self.all().values():
            cache.destroy()


def build_caches(settings) -> CacheRegistry:
    """
    Create the named caches from settings.

    The API cache takes its size and TTL from CACHE_MAX_SIZE / CACHE_TTL; the
    others use fixed profiles (risks are stable data, vendors change often).

    Only the general and API caches are written by the Zabbix tools. The
    risks and vendors caches are reserved profiles exposed through
    cache_stats / cache_clear; they run without a background sweep and
    expire lazily on read.
    """
    interval = settings.cache.cleanup_interval
    return CacheRegistry(
        general=ExpiringCache(max_size=1000, default_ttl=300.0, cleanup_interval=interval),
        api=APICache(
            max_size=settings.cache.max_size,
            default_ttl=settings.cache.ttl,
            cleanup_interval=interval,
        ),
        risks=APICache(max_size=200, default_ttl=600.0, cleanup_interval=None),
        vendors=APICache(max_size=300, default_ttl=180.0, cleanup_interval=None),
    )
