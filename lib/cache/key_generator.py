"""
Built-in key generator implementations for lib.cache, dood!

Available Generators:
    - StringKeyGenerator: Pass-through for string keys
    - ContentHashKeyGenerator: MD5 digest of raw bytes (content addressed keys)
"""

import hashlib
from typing import Union

from .types import KeyGenerator


class StringKeyGenerator(KeyGenerator[str]):
    """
    Pass-through key generator for string keys, dood!

    Note:
        This generator validates that the input is actually a string.
        If you pass a non-string value, it will raise a TypeError, dood!
    """

    def generateKey(self, obj: str) -> str:
        """
        Generate cache key from string input, dood!

        Raises:
            TypeError: If obj is not a string
        """
        if not isinstance(obj, str):
            raise TypeError(f"StringKeyGenerator expects string input, got {type(obj).__name__}, dood!")

        return obj


class ContentHashKeyGenerator(KeyGenerator[Union[bytes, bytearray, memoryview]]):
    """
    128-bit content hash of binary data, dood!

    Identical bytes always produce the same 32-character hex key, so the same
    image sent twice (by anyone, to any chat) maps to one cache entry. The
    digest is used as a lookup key only, it is not a security boundary.

    Example:
        >>> generator = ContentHashKeyGenerator()
        >>> generator.generateKey(b"")
        'd41d8cd98f00b204e9800998ecf8427e'
    """

    def generateKey(self, obj: Union[bytes, bytearray, memoryview]) -> str:
        """
        Generate MD5 hex digest from binary data, dood!

        Raises:
            TypeError: If obj is not bytes-like
        """
        if not isinstance(obj, (bytes, bytearray, memoryview)):
            raise TypeError(f"ContentHashKeyGenerator expects bytes input, got {type(obj).__name__}, dood!")

        return hashlib.md5(obj, usedforsecurity=False).hexdigest()
