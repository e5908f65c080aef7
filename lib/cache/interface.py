"""
Abstract cache interface for lib.cache, dood!

This module defines the generic CacheInterface that all cache implementations
must follow. The pipeline depends only on this interface, so in-process and
external backing stores can be swapped without touching it, dood!
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional

from .types import K, V


class CacheInterface(ABC, Generic[K, V]):
    """
    Generic cache interface for any key-value storage, dood!

    Type Parameters:
        K: The key type
        V: The value type

    Example:
        >>> cache = LRUCache[str, str](keyGenerator=StringKeyGenerator(), maxSize=100)
        >>> await cache.set("9e107d9d372bb6826bd81d3542a419d6", "A cat on a sofa")
        >>> description = await cache.get("9e107d9d372bb6826bd81d3542a419d6")
        >>> len(cache)  # 1
    """

    @abstractmethod
    async def get(self, key: K) -> Optional[V]:
        """
        Get cached value by key, dood!

        Args:
            key: The cache key to retrieve

        Returns:
            Optional[V]: The cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: K, value: V) -> bool:
        """
        Store value in cache, dood!

        Args:
            key: The cache key to store the value under
            value: The value to cache

        Returns:
            bool: True if the value was successfully stored, False otherwise
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all cached data, dood!"""
        pass

    @abstractmethod
    def __len__(self) -> int:
        """Number of entries currently stored"""
        pass

    @abstractmethod
    def getStats(self) -> Dict[str, Any]:
        """
        Get cache statistics, dood!

        Returns:
            Dict[str, Any]: Implementation specific statistics (entries, limits, hits...)
        """
        pass
