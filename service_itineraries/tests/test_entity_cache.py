"""
Unit tests for the single-entity cache.
"""

import threading
from datetime import datetime, timezone

import pytest
from pydantic import BaseModel

from service_itineraries.app.cache import ITINERARY, USER, EntityCache


class Snapshot(BaseModel):
    id: str
    title: str
    created_at: datetime


class TestEntityCache:
    """Test cases for EntityCache."""

    @pytest.fixture
    def itinerary(self):
        return {
            "id": "it-1",
            "user_id": "42",
            "title": "Paris Trip",
            "activities": [{"title": "Louvre", "time": "09:00", "location": "Paris"}],
            "is_public": False,
        }

    @pytest.mark.asyncio
    async def test_miss_then_populate(self, entity_cache, itinerary):
        assert await entity_cache.get_cached_entity(ITINERARY, "it-1") is None

        assert await entity_cache.cache_entity(ITINERARY, "it-1", itinerary) is True

        assert await entity_cache.get_cached_entity(ITINERARY, "it-1") == itinerary

    @pytest.mark.asyncio
    async def test_uses_namespace_key_and_ttl(self, entity_cache, fake_redis, itinerary):
        await entity_cache.cache_entity(ITINERARY, "it-1", itinerary)
        await entity_cache.cache_entity(USER, "42", {"id": "42", "name": "John"})

        assert fake_redis.ttls == {"itinerary:it-1": 1800, "user:42": 3600}

    @pytest.mark.asyncio
    async def test_entry_expires_without_sliding(self, entity_cache, clock, itinerary):
        await entity_cache.cache_entity(ITINERARY, "it-1", itinerary)

        clock.advance(1000)
        assert await entity_cache.get_cached_entity(ITINERARY, "it-1") == itinerary

        # the read above did not renew the entry
        clock.advance(800)
        assert await entity_cache.get_cached_entity(ITINERARY, "it-1") is None

    @pytest.mark.asyncio
    async def test_custom_ttls(self, kv_store, fake_redis):
        cache = EntityCache(kv_store, ttls={USER: 5})
        await cache.cache_entity(USER, "42", {"id": "42"})

        assert fake_redis.ttls["user:42"] == 5
        assert cache.ttl_for(ITINERARY) == 1800

    @pytest.mark.asyncio
    async def test_invalidate_entity(self, entity_cache, itinerary):
        await entity_cache.cache_entity(ITINERARY, "it-1", itinerary)

        assert await entity_cache.invalidate_entity(ITINERARY, "it-1") is True
        assert await entity_cache.get_cached_entity(ITINERARY, "it-1") is None
        assert await entity_cache.invalidate_entity(ITINERARY, "it-1") is False

    @pytest.mark.asyncio
    async def test_models_are_cached_as_plain_snapshots(self, entity_cache):
        created = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        await entity_cache.cache_entity(ITINERARY, "it-1", Snapshot(id="it-1", title="Paris", created_at=created))

        cached = await entity_cache.get_cached_entity(ITINERARY, "it-1")

        assert cached == {"id": "it-1", "title": "Paris", "created_at": "2024-06-01T12:00:00Z"}

    @pytest.mark.asyncio
    async def test_live_handles_are_stripped(self, entity_cache):
        value = {"id": "it-1", "lock": threading.Lock(), "tags": ["a", threading.Event(), "b"]}

        await entity_cache.cache_entity(ITINERARY, "it-1", value)

        assert await entity_cache.get_cached_entity(ITINERARY, "it-1") == {"id": "it-1", "tags": ["a", "b"]}

    @pytest.mark.asyncio
    async def test_unknown_kind_is_rejected(self, entity_cache):
        with pytest.raises(ValueError):
            await entity_cache.cache_entity("trip", "1", {})

    @pytest.mark.asyncio
    async def test_unavailable_store_degrades(self, failing_store, itinerary):
        cache = EntityCache(failing_store)

        assert await cache.cache_entity(ITINERARY, "it-1", itinerary) is False
        assert await cache.get_cached_entity(ITINERARY, "it-1") is None
        assert await cache.invalidate_entity(ITINERARY, "it-1") is False

    @pytest.mark.asyncio
    async def test_missing_store_degrades(self, itinerary):
        cache = EntityCache(None)

        assert await cache.cache_entity(ITINERARY, "it-1", itinerary) is False
        assert await cache.get_cached_entity(ITINERARY, "it-1") is None
