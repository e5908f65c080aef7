"""
lib.cache - Generic cache library for Glimpse, dood!

Core Components:
- CacheInterface: Abstract base class for all cache implementations
- KeyGenerator: Protocol for generating cache keys from objects
- LRUCache: Thread-safe LRU cache bounded by entries and bytes
- NullCache: No-op cache used when caching is disabled

Example Usage:
    >>> from lib.cache import ContentHashKeyGenerator, LRUCache, StringKeyGenerator
    >>>
    >>> cache = LRUCache[str, str](keyGenerator=StringKeyGenerator(), maxSize=1000)
    >>> key = ContentHashKeyGenerator().generateKey(imageData)
    >>> await cache.set(key, "A cat sleeping on a keyboard")
    >>> await cache.get(key)
"""

from .interface import CacheInterface
from .key_generator import ContentHashKeyGenerator, StringKeyGenerator
from .lru_cache import LRUCache, defaultSizeOf
from .null_cache import NullCache
from .types import K, KeyGenerator, T, V

__all__ = [
    # Core types
    "KeyGenerator",
    "K",
    "V",
    "T",
    # Interfaces
    "CacheInterface",
    # Implementations
    "LRUCache",
    "NullCache",
    "defaultSizeOf",
    # Key generators
    "StringKeyGenerator",
    "ContentHashKeyGenerator",
]
