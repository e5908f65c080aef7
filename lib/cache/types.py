"""
Core type definitions and protocols for lib.cache, dood!
"""

from typing import Protocol, TypeVar

# Type variables for generic cache operations, dood!
K = TypeVar("K")  # Key type
V = TypeVar("V")  # Value type
T = TypeVar("T", contravariant=True)  # Generic object type for key generators


class KeyGenerator(Protocol[T]):
    """
    Protocol for generating cache keys from objects, dood!

    Type Parameters:
        T: The type of objects that can be converted to cache keys

    Example:
        >>> class StringKeyGenerator(KeyGenerator[str]):
        ...     def generateKey(self, obj: str) -> str:
        ...         return obj
    """

    def generateKey(self, obj: T) -> str:
        """
        Generate string cache key from object, dood!

        Args:
            obj: The object to convert to a cache key

        Returns:
            str: A string representation suitable for use as a cache key
        """
        ...
