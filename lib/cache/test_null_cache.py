"""
Tests for NullCache implementation, dood!
"""

from typing import Any

import pytest

from .interface import CacheInterface
from .null_cache import NullCache


class TestNullCache:
    """Test cases for NullCache class, dood!"""

    def setup_method(self):
        """Set up test fixtures before each test method, dood!"""
        self.cache = NullCache[str, Any]()

    def test_is_cache_interface(self):
        """Test that NullCache can be used wherever a cache is expected, dood!"""
        assert isinstance(self.cache, CacheInterface)

    @pytest.mark.asyncio
    async def test_get_always_returns_none(self):
        """Test that get() always returns None, dood!"""
        assert await self.cache.get("test_key") is None
        assert await self.cache.get("") is None

    @pytest.mark.asyncio
    async def test_set_get_combination(self):
        """Test that set() followed by get() still returns None, dood!"""
        assert await self.cache.set("test_key", "test_value") is True
        assert await self.cache.get("test_key") is None
        assert len(self.cache) == 0

    def test_clear_does_nothing(self):
        """Test that clear() does nothing without errors, dood!"""
        self.cache.clear()
        self.cache.clear()

    def test_get_stats_returns_disabled(self):
        """Test that getStats() returns cache disabled indicator, dood!"""
        assert self.cache.getStats() == {"enabled": False}
