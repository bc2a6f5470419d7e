"""
Unit tests for the user directory.
"""

import pytest

from shared.errors import NotFoundError, ValidationError
from shared.test_helpers import TestDataFactory
from service_itineraries.app.cache import USER
from service_itineraries.app.users.models import UserCreate, UserUpdate


class TestUserDirectory:
    """Test cases for UserDirectory."""

    @pytest.fixture
    def users(self, components):
        return components.users

    async def _create(self, users, **kwargs):
        return await users.create_user(UserCreate(**TestDataFactory.user_payload(**kwargs)))

    @pytest.mark.asyncio
    async def test_create_normalizes_email(self, users):
        user = await self._create(users, email="John@Example.com")

        assert user.email == "john@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, users):
        await self._create(users, email="john@example.com")

        with pytest.raises(ValidationError) as exc_info:
            await self._create(users, email="JOHN@example.com")
        assert exc_info.value.message == "User already exists"

    @pytest.mark.asyncio
    async def test_cached_user_omits_private_fields(self, users, entity_cache, fake_redis):
        user = await self._create(users)

        fetched = await users.get_user(user.id)
        cached = await entity_cache.get_cached_entity(USER, user.id)

        assert fetched.password_hash is None
        assert "password_hash" not in cached
        assert cached["name"] == "John Doe"
        assert fake_redis.ttls[f"user:{user.id}"] == 3600

    @pytest.mark.asyncio
    async def test_hit_and_miss_return_the_same_user(self, users):
        user = await self._create(users)

        miss = await users.get_user(user.id)
        hit = await users.get_user(user.id)

        assert hit == miss
        assert hit.password_hash is None

    @pytest.mark.asyncio
    async def test_credentials_bypass_cache(self, users):
        user = await self._create(users)
        await users.get_user(user.id)

        assert await users.find_credentials(user.id) == "not-a-real-hash"
        assert await users.find_credentials("missing") is None

    @pytest.mark.asyncio
    async def test_second_lookup_is_served_from_cache(self, users, monkeypatch):
        user = await self._create(users)
        await users.get_user(user.id)

        async def unreachable(doc_id):
            raise AssertionError("store should not be read")

        monkeypatch.setattr(users.store, "get", unreachable)

        assert (await users.get_user(user.id)).name == "John Doe"

    @pytest.mark.asyncio
    async def test_update_invalidates_cached_user(self, users):
        user = await self._create(users)
        await users.get_user(user.id)

        await users.update_user(user.id, UserUpdate(name="Jane Doe"))

        assert (await users.get_user(user.id)).name == "Jane Doe"

    @pytest.mark.asyncio
    async def test_update_rejects_taken_email(self, users):
        await self._create(users, email="john@example.com")
        jane = await self._create(users, name="Jane Doe", email="jane@example.com")

        with pytest.raises(ValidationError) as exc_info:
            await users.update_user(jane.id, UserUpdate(email="John@Example.com"))
        assert exc_info.value.message == "User already exists"

        # keeping one's own address is not a conflict
        updated = await users.update_user(jane.id, UserUpdate(email="JANE@example.com"))
        assert updated.email == "jane@example.com"

    @pytest.mark.asyncio
    async def test_delete_invalidates_user_and_list_scope(self, users, list_cache):
        user = await self._create(users)
        await users.get_user(user.id)
        await list_cache.cache_list(f"user:{user.id}", {"page": 1}, {"itineraries": []})

        await users.delete_user(user.id)

        assert await users.find_user(user.id) is None
        assert await list_cache.get_cached_list(f"user:{user.id}", {"page": 1}) is None
        with pytest.raises(NotFoundError):
            await users.get_user(user.id)

    @pytest.mark.asyncio
    async def test_missing_user(self, users):
        assert await users.find_user("missing") is None
        with pytest.raises(NotFoundError):
            await users.get_user("missing")
        with pytest.raises(NotFoundError):
            await users.update_user("missing", UserUpdate(name="Nobody"))
        with pytest.raises(NotFoundError):
            await users.delete_user("missing")

    @pytest.mark.asyncio
    async def test_works_without_cache(self, degraded_components):
        users = degraded_components.users
        user = await self._create(users)

        await users.update_user(user.id, UserUpdate(name="Jane Doe"))

        assert (await users.get_user(user.id)).name == "Jane Doe"
