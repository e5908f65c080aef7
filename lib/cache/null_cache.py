"""
Null cache implementation for lib.cache, dood!

This module provides a no-op cache implementation that implements the
CacheInterface but doesn't actually cache anything. It is used when caching
is disabled in the pipeline configuration, dood!
"""

from typing import Any, Dict, Optional

from .interface import CacheInterface
from .types import K, V


class NullCache(CacheInterface[K, V]):
    """No-op cache that never stores anything, dood!

    Useful for:
    - Disabling cache in production
    - Testing without cache side effects
    """

    async def get(self, key: K) -> Optional[V]:
        """Always return None (cache miss), dood!"""
        return None

    async def set(self, key: K, value: V) -> bool:
        """Do nothing (don't cache), but pretend to succeed, dood!"""
        return True

    def clear(self) -> None:
        """Do nothing (no-op operation), dood!"""
        pass

    def __len__(self) -> int:
        return 0

    def getStats(self) -> Dict[str, Any]:
        """Return cache statistics indicating cache is disabled, dood!"""
        return {"enabled": False}
