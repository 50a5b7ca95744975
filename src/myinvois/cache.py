"""
Key-value cache with per-entry TTL

The SDK only needs get/put/forget from a cache. Any backing store (Redis,
memcached, a framework cache) can be used by implementing ``CacheStore``;
``MemoryCache`` is the in-process default.
"""

import math
import threading
import time
from typing import Any, Callable, NamedTuple, Optional, Protocol, runtime_checkable

from cachetools import TLRUCache


@runtime_checkable
class CacheStore(Protocol):
    """Minimal cache contract used by the SDK"""

    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None: ...

    def forget(self, key: str) -> None: ...


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCache:
    """
    Thread-safe in-memory cache backed by ``cachetools.TLRUCache``

    Example:
        >>> cache = MemoryCache()
        >>> cache.put("token", {"access_token": "abc"}, ttl_seconds=60)
        >>> cache.get("token")
        {'access_token': 'abc'}
    """

    def __init__(
        self,
        maxsize: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
        return entry.value if entry is not None else None

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = math.inf if ttl_seconds is None else float(ttl_seconds)
        with self._lock:
            if ttl <= 0:
                self._cache.pop(key, None)
                return
            self._cache[key] = _Entry(value, ttl)

    def forget(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
