"""
Tests for LRUCache implementation, dood!

Covers:
- Basic cache operations (get, set, clear, len)
- Entry count and byte limits with LRU eviction
- TTL expiration
- Cache statistics
- Content hash keys
"""

import asyncio
import threading
from unittest.mock import patch

import pytest

from .key_generator import ContentHashKeyGenerator, StringKeyGenerator
from .lru_cache import LRUCache, defaultSizeOf


def makeCache(**kwargs) -> LRUCache[str, str]:
    return LRUCache[str, str](keyGenerator=StringKeyGenerator(), **kwargs)


class TestLRUCacheBasic:
    """Test basic cache operations, dood!"""

    def test_cache_initialization(self):
        """Test cache initialization with default parameters, dood!"""
        cache = makeCache()

        assert cache._maxSize == 1000
        assert cache._maxBytes == 0
        assert cache._defaultTtl == 0
        assert len(cache) == 0

    def test_invalid_limits(self):
        """Test that nonsense limits are rejected, dood!"""
        with pytest.raises(ValueError):
            makeCache(maxSize=0)
        with pytest.raises(ValueError):
            makeCache(maxBytes=-1)

    @pytest.mark.asyncio
    async def test_basic_set_and_get(self):
        """Test that a stored value is returned back, dood!"""
        cache = makeCache()

        assert await cache.set("key1", "A cat on a sofa") is True
        assert await cache.get("key1") == "A cat on a sofa"
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_get_nonexistent_key(self):
        """Test getting a never stored key returns None, dood!"""
        cache = makeCache()

        assert await cache.get("missing") is None

    @pytest.mark.asyncio
    async def test_overwrite_same_key(self):
        """Test last writer wins and bytes are not counted twice, dood!"""
        cache = makeCache()

        await cache.set("key", "first")
        await cache.set("key", "second!")

        assert await cache.get("key") == "second!"
        assert len(cache) == 1
        assert cache.getStats()["bytes"] == len("second!")

    @pytest.mark.asyncio
    async def test_clear(self):
        """Test clear() drops every entry, dood!"""
        cache = makeCache()
        await cache.set("a", "1")
        await cache.set("b", "2")

        cache.clear()

        assert len(cache) == 0
        assert cache.getStats()["bytes"] == 0
        assert await cache.get("a") is None


class TestLRUCacheEviction:
    """Test size limits and LRU eviction, dood!"""

    @pytest.mark.asyncio
    async def test_max_size_evicts_least_recently_used(self):
        """Test that the least recently used entry goes first, dood!"""
        cache = makeCache(maxSize=2)

        await cache.set("a", "1")
        await cache.set("b", "2")
        # Touch "a" so "b" becomes the oldest one
        assert await cache.get("a") == "1"
        await cache.set("c", "3")

        assert len(cache) == 2
        assert await cache.get("b") is None
        assert await cache.get("a") == "1"
        assert await cache.get("c") == "3"
        assert cache.getStats()["evictions"] == 1

    @pytest.mark.asyncio
    async def test_max_bytes_evicts(self):
        """Test that total value size stays within maxBytes, dood!"""
        cache = makeCache(maxSize=100, maxBytes=10)

        await cache.set("a", "aaaa")
        await cache.set("b", "bbbb")
        await cache.set("c", "cccc")

        stats = cache.getStats()
        assert stats["bytes"] <= 10
        assert stats["entries"] == 2
        assert await cache.get("a") is None

    @pytest.mark.asyncio
    async def test_value_bigger_than_max_bytes_is_not_stored(self):
        """Test that a single oversized value is refused, dood!"""
        cache = makeCache(maxBytes=4)
        await cache.set("small", "ok")

        assert await cache.set("big", "too long value") is False
        assert await cache.get("big") is None
        assert await cache.get("small") == "ok"

    @pytest.mark.asyncio
    async def test_bytes_counted_as_utf8(self):
        """Test that non-ASCII text is measured in UTF-8 bytes, dood!"""
        cache = makeCache()
        await cache.set("ru", "кот")

        assert cache.getStats()["bytes"] == 6

    def test_default_size_of(self):
        """Test defaultSizeOf for supported value types, dood!"""
        assert defaultSizeOf("abc") == 3
        assert defaultSizeOf("é") == 2
        assert defaultSizeOf(b"\x00\x01") == 2
        assert defaultSizeOf(12345) == 5


class TestLRUCacheTtl:
    """Test TTL expiration, dood!"""

    @pytest.mark.asyncio
    async def test_entry_expires(self):
        """Test that an entry older than defaultTtl is dropped, dood!"""
        cache = makeCache(defaultTtl=60)

        with patch("lib.cache.lru_cache.time.monotonic", return_value=1000.0):
            await cache.set("key", "value")

        with patch("lib.cache.lru_cache.time.monotonic", return_value=1030.0):
            assert await cache.get("key") == "value"

        with patch("lib.cache.lru_cache.time.monotonic", return_value=1061.0):
            assert await cache.get("key") is None

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_zero_ttl_never_expires(self):
        """Test that defaultTtl=0 disables expiration, dood!"""
        cache = makeCache(defaultTtl=0)

        with patch("lib.cache.lru_cache.time.monotonic", return_value=0.0):
            await cache.set("key", "value")

        with patch("lib.cache.lru_cache.time.monotonic", return_value=10.0**9):
            assert await cache.get("key") == "value"


class TestLRUCacheStats:
    """Test cache statistics, dood!"""

    @pytest.mark.asyncio
    async def test_hits_and_misses(self):
        """Test that hits and misses are counted, dood!"""
        cache = makeCache(maxSize=10, maxBytes=1024)
        await cache.set("key", "value")

        await cache.get("key")
        await cache.get("key")
        await cache.get("other")

        stats = cache.getStats()
        assert stats["enabled"] is True
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["entries"] == 1
        assert stats["maxSize"] == 10
        assert stats["maxBytes"] == 1024


class TestLRUCacheConcurrency:
    """Test concurrent access, dood!"""

    @pytest.mark.asyncio
    async def test_concurrent_tasks(self):
        """Test many concurrent writers keep the limits, dood!"""
        cache = makeCache(maxSize=50)

        async def writer(i: int):
            await cache.set(f"key{i % 60}", f"value{i}")
            await cache.get(f"key{(i * 7) % 60}")

        await asyncio.gather(*(writer(i) for i in range(500)))

        assert len(cache) <= 50

    def test_threads(self):
        """Test cache from several threads, dood!"""
        cache = makeCache(maxSize=20, maxBytes=200)

        def worker(n: int):
            loop = asyncio.new_event_loop()
            try:
                for i in range(200):
                    loop.run_until_complete(cache.set(f"{n}-{i}", "x" * (i % 10)))
            finally:
                loop.close()

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = cache.getStats()
        assert stats["entries"] <= 20
        assert stats["bytes"] <= 200


class TestContentHashKeys:
    """Test cache keyed by image content, dood!"""

    def test_same_bytes_same_key(self):
        """Test that identical content gives identical key, dood!"""
        generator = ContentHashKeyGenerator()
        data = b"\xff\xd8\xff\xe0" + b"\x00" * 100

        assert generator.generateKey(data) == generator.generateKey(bytes(data))
        assert len(generator.generateKey(data)) == 32

    def test_different_bytes_different_key(self):
        """Test that different content gives different keys, dood!"""
        generator = ContentHashKeyGenerator()

        assert generator.generateKey(b"\x89PNG1") != generator.generateKey(b"\x89PNG2")

    def test_empty_bytes(self):
        """Test well known digest of empty input, dood!"""
        assert ContentHashKeyGenerator().generateKey(b"") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_rejects_non_bytes(self):
        """Test that strings are not accepted, dood!"""
        with pytest.raises(TypeError):
            ContentHashKeyGenerator().generateKey("not bytes")  # type: ignore[arg-type]

    def test_string_key_generator_rejects_non_strings(self):
        """Test StringKeyGenerator type check, dood!"""
        with pytest.raises(TypeError):
            StringKeyGenerator().generateKey(123)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_cache_with_content_hash_keys(self):
        """Test LRUCache keyed directly by bytes, dood!"""
        cache = LRUCache[bytes, str](keyGenerator=ContentHashKeyGenerator())
        image = b"GIF89a" + b"\x01" * 32

        await cache.set(image, "An animated dog")

        assert await cache.get(bytes(image)) == "An animated dog"
        assert await cache.get(b"GIF89a") is None
