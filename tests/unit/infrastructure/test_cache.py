"""
Unit tests for the key-value store and the cache-aside service.
"""

import pytest
from unittest.mock import AsyncMock

from claimflow.infrastructure.cache.cache_service import (
    CacheService, ClaimCacheKeys, denial_analysis_key
)
from claimflow.infrastructure.cache.store import InMemoryKeyValueStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestInMemoryKeyValueStore:
    """Test cases for InMemoryKeyValueStore."""

    def setup_method(self):
        self.clock = FakeClock()
        self.store = InMemoryKeyValueStore(clock=self.clock)

    @pytest.mark.asyncio
    async def test_set_get_with_ttl(self):
        """Test values disappear once their TTL passes."""
        await self.store.set("a", "1", ttl_seconds=10)
        assert await self.store.get("a") == "1"

        self.clock.now += 10
        assert await self.store.get("a") is None
        assert await self.store.exists("a") is False

    @pytest.mark.asyncio
    async def test_incr_with_expiry(self):
        """Test counters increment and reset after expiry."""
        assert await self.store.incr_with_expiry("c", 60) == 1
        assert await self.store.incr_with_expiry("c", 60) == 2

        self.clock.now += 61
        assert await self.store.incr_with_expiry("c", 60) == 1

    @pytest.mark.asyncio
    async def test_delete_pattern(self):
        """Test glob deletion only touches matching keys."""
        await self.store.set("claims:org-1:list:{}", "x")
        await self.store.set("claims:org-1:detail:c1", "y")
        await self.store.set("claims:org-2:detail:c2", "z")

        deleted = await self.store.delete_pattern("claims:org-1:*")

        assert deleted == 2
        assert await self.store.get("claims:org-2:detail:c2") == "z"

    @pytest.mark.asyncio
    async def test_delete_counts_live_keys(self):
        await self.store.set("a", "1")
        assert await self.store.delete("a", "missing") == 1


class TestCacheService:
    """Test cases for CacheService."""

    @pytest.mark.asyncio
    async def test_json_round_trip(self):
        cache = CacheService(InMemoryKeyValueStore())

        await cache.set("key", {"data": [1, 2], "meta": {"total": 2}})

        assert await cache.get("key") == {"data": [1, 2], "meta": {"total": 2}}

    @pytest.mark.asyncio
    async def test_store_errors_degrade_to_miss(self):
        """Test a failing store never raises out of the cache."""
        store = AsyncMock()
        store.get.side_effect = ConnectionError("down")
        store.set.side_effect = ConnectionError("down")
        store.delete_pattern.side_effect = ConnectionError("down")
        cache = CacheService(store)

        assert await cache.get("key") is None
        await cache.set("key", {"a": 1})
        assert await cache.invalidate_pattern("claims:*") == 0

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_a_miss(self):
        store = InMemoryKeyValueStore()
        await store.set("key", "{not json")

        assert await CacheService(store).get("key") is None

    @pytest.mark.asyncio
    async def test_default_ttl(self):
        """Test entries use the default TTL when none is given."""
        clock = FakeClock()
        cache = CacheService(InMemoryKeyValueStore(clock=clock), default_ttl=5)

        await cache.set("key", 1)
        clock.now += 6

        assert await cache.get("key") is None


class TestCacheKeys:
    """Test cases for cache key layout."""

    def test_list_key_is_order_independent(self):
        """Test equal filters produce the same key."""
        first = ClaimCacheKeys.list_key("org-1", {"status": "pending", "page": 1})
        second = ClaimCacheKeys.list_key("org-1", {"page": 1, "status": "pending"})

        assert first == second
        assert first.startswith("claims:org-1:list:")

    def test_keys_are_scoped_by_organization(self):
        assert ClaimCacheKeys.detail_key("org-1", "c1") != ClaimCacheKeys.detail_key("org-2", "c1")
        assert ClaimCacheKeys.prefix("org-1") == "claims:org-1:*"

    def test_denial_analysis_key(self):
        assert denial_analysis_key("CO-16", "PAYER-1") == "ai:denial:CO-16:PAYER-1"
        assert denial_analysis_key("CO-16", None) == "ai:denial:CO-16:none"
