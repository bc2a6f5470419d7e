"""
Unit tests for the invalidation coordinator.
"""

from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock

from service_itineraries.app.cache import ITINERARY, PUBLIC_SCOPE, USER, InvalidationCoordinator, itinerary_scopes


def itinerary(user_id="42", is_public=False, itinerary_id="it-1"):
    return SimpleNamespace(id=itinerary_id, user_id=user_id, is_public=is_public)


class TestItineraryScopes:

    def test_private_itinerary_has_owner_scope_only(self):
        assert itinerary_scopes(itinerary()) == ["user:42"]

    def test_public_itinerary_is_also_in_public_scope(self):
        assert itinerary_scopes(itinerary(is_public=True)) == [PUBLIC_SCOPE, "user:42"]

    def test_scopes_union_across_states(self):
        before = itinerary(is_public=True)
        after = itinerary(is_public=False)

        assert itinerary_scopes(before, after) == [PUBLIC_SCOPE, "user:42"]
        assert itinerary_scopes(None, after) == ["user:42"]


class TestInvalidationCoordinator:
    """Test cases for InvalidationCoordinator."""

    @pytest.fixture
    def mocked(self):
        entity_cache = AsyncMock()
        list_cache = AsyncMock()
        return InvalidationCoordinator(entity_cache, list_cache), entity_cache, list_cache

    @pytest.mark.asyncio
    async def test_create_invalidates_lists_only(self, mocked):
        coordinator, entity_cache, list_cache = mocked

        await coordinator.itinerary_created(itinerary())

        list_cache.invalidate_scope.assert_awaited_once_with("user:42")
        entity_cache.invalidate_entity.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_public_invalidates_both_scopes(self, mocked):
        coordinator, _, list_cache = mocked

        await coordinator.itinerary_created(itinerary(is_public=True))

        scopes = sorted(call.args[0] for call in list_cache.invalidate_scope.await_args_list)
        assert scopes == [PUBLIC_SCOPE, "user:42"]

    @pytest.mark.asyncio
    async def test_update_invalidates_entity_and_scopes(self, mocked):
        coordinator, entity_cache, list_cache = mocked

        await coordinator.itinerary_updated(itinerary(is_public=True), itinerary(is_public=False))

        entity_cache.invalidate_entity.assert_awaited_once_with(ITINERARY, "it-1")
        scopes = sorted(call.args[0] for call in list_cache.invalidate_scope.await_args_list)
        assert scopes == [PUBLIC_SCOPE, "user:42"]

    @pytest.mark.asyncio
    async def test_delete_invalidates_entity_and_owner_scope(self, mocked):
        coordinator, entity_cache, list_cache = mocked

        await coordinator.itinerary_deleted(itinerary())

        entity_cache.invalidate_entity.assert_awaited_once_with(ITINERARY, "it-1")
        list_cache.invalidate_scope.assert_awaited_once_with("user:42")

    @pytest.mark.asyncio
    async def test_user_events(self, mocked):
        coordinator, entity_cache, list_cache = mocked

        await coordinator.user_updated("42")
        entity_cache.invalidate_entity.assert_awaited_once_with(USER, "42")
        list_cache.invalidate_scope.assert_not_awaited()

        await coordinator.user_deleted("42")
        list_cache.invalidate_scope.assert_awaited_once_with("user:42")

    @pytest.mark.asyncio
    async def test_purges_real_keys(self, invalidator, entity_cache, list_cache, fake_redis):
        await entity_cache.cache_entity(ITINERARY, "it-1", {"id": "it-1"})
        await entity_cache.cache_entity(ITINERARY, "it-2", {"id": "it-2"})
        await list_cache.cache_list("user:42", {"page": 1}, {"itineraries": []})
        await list_cache.cache_list(PUBLIC_SCOPE, {"page": 1}, {"itineraries": []})

        await invalidator.itinerary_updated(itinerary(is_public=True), itinerary(is_public=True))

        assert fake_redis.keys_now() == ["itinerary:it-2"]
