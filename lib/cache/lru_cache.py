"""
Bounded in-memory LRU cache for lib.cache, dood!

LRUCache keeps values in an OrderedDict ordered by recency of use and evicts
the least recently used entries when either of two limits is exceeded:

- maxSize: number of entries
- maxBytes: total size of stored values as reported by sizeOf()

Entries may also expire after defaultTtl seconds. All operations hold a
threading.RLock, so a single instance can be shared by concurrent request
handlers (and threads, if any). Concurrent writes of the same key are
harmless: the last writer wins.

Example:
    >>> cache = LRUCache[str, str](
    ...     keyGenerator=StringKeyGenerator(),
    ...     maxSize=1000,
    ...     maxBytes=16 * 1024 * 1024,
    ... )
    >>> await cache.set(imageHash, description)
    >>> await cache.get(imageHash)
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple

from .interface import CacheInterface
from .types import K, KeyGenerator, V

logger = logging.getLogger(__name__)


def defaultSizeOf(value: Any) -> int:
    """Size of a cached value in bytes (UTF-8 length for strings), dood!"""
    if isinstance(value, str):
        return len(value.encode("utf-8"))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return len(value)
    return len(str(value).encode("utf-8"))


class LRUCache(CacheInterface[K, V]):
    """
    Thread-safe LRU cache bounded by entry count and total value size, dood!

    Args:
        keyGenerator: Converts keys of type K into string storage keys
        maxSize: Maximum number of entries (must be positive)
        maxBytes: Maximum total size of stored values, 0 disables the limit
        defaultTtl: Entry lifetime in seconds, 0 means entries never expire
        sizeOf: Callable returning the size of a value in bytes
    """

    def __init__(
        self,
        keyGenerator: KeyGenerator[K],
        maxSize: int = 1000,
        maxBytes: int = 0,
        defaultTtl: float = 0,
        sizeOf: Callable[[V], int] = defaultSizeOf,
    ):
        if maxSize <= 0:
            raise ValueError(f"maxSize should be positive, got {maxSize}")
        if maxBytes < 0:
            raise ValueError(f"maxBytes should not be negative, got {maxBytes}")

        self._keyGenerator = keyGenerator
        self._maxSize = maxSize
        self._maxBytes = maxBytes
        self._defaultTtl = defaultTtl
        self._sizeOf = sizeOf

        # storage key -> (value, size, storedAt)
        self._store: OrderedDict[str, Tuple[V, int, float]] = OrderedDict()
        self._totalBytes = 0
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _isExpired(self, storedAt: float, now: float) -> bool:
        return self._defaultTtl > 0 and now - storedAt >= self._defaultTtl

    def _remove(self, storageKey: str) -> None:
        _, size, _ = self._store.pop(storageKey)
        self._totalBytes -= size

    def _evict(self) -> None:
        while self._store and (
            len(self._store) > self._maxSize or (self._maxBytes > 0 and self._totalBytes > self._maxBytes)
        ):
            storageKey, (_, size, _) = self._store.popitem(last=False)
            self._totalBytes -= size
            self._evictions += 1
            logger.debug(f"Evicted {storageKey} ({size} bytes), {len(self._store)} entries left")

    async def get(self, key: K) -> Optional[V]:
        storageKey = self._keyGenerator.generateKey(key)
        with self._lock:
            entry = self._store.get(storageKey)
            if entry is None:
                self._misses += 1
                return None

            value, _, storedAt = entry
            if self._isExpired(storedAt, time.monotonic()):
                logger.debug(f"Entry {storageKey} expired")
                self._remove(storageKey)
                self._misses += 1
                return None

            self._store.move_to_end(storageKey)
            self._hits += 1
            return value

    async def set(self, key: K, value: V) -> bool:
        storageKey = self._keyGenerator.generateKey(key)
        size = self._sizeOf(value)
        if self._maxBytes > 0 and size > self._maxBytes:
            logger.warning(f"Value for {storageKey} is too big to be cached: {size} > {self._maxBytes}")
            return False

        with self._lock:
            if storageKey in self._store:
                self._remove(storageKey)

            self._store[storageKey] = (value, size, time.monotonic())
            self._totalBytes += size
            self._evict()
            return True

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._totalBytes = 0
            logger.debug("Cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def getStats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "enabled": True,
                "entries": len(self._store),
                "bytes": self._totalBytes,
                "maxSize": self._maxSize,
                "maxBytes": self._maxBytes,
                "defaultTtl": self._defaultTtl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }
