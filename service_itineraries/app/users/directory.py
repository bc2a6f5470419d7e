"""
User directory with a read-through user-by-id cache.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from shared.errors import NotFoundError, ValidationError
from shared.logging import get_logger

from ..cache import USER, EntityCache, InvalidationCoordinator
from ..persistence.document_store import DocumentStore
from .models import User, UserCreate, UserUpdate


class UserDirectory:
    """Reads users through the entity cache; writes invalidate it."""

    def __init__(self, store: DocumentStore, entity_cache: EntityCache, invalidator: InvalidationCoordinator):
        self.store = store
        self.entity_cache = entity_cache
        self.invalidator = invalidator
        self.logger = get_logger("itineraries.users")

    async def create_user(self, data: UserCreate) -> User:
        email = data.email.lower()
        if await self.store.count(lambda doc: doc["email"] == email):
            raise ValidationError("User already exists", {"field": "email"})

        now = datetime.now(timezone.utc)
        user = User(
            id=uuid.uuid4().hex,
            name=data.name.strip(),
            email=email,
            password_hash=data.password_hash,
            created_at=now,
            updated_at=now,
        )
        await self.store.insert(user.model_dump())
        self.logger.info("User created", user_id=user.id)
        return user

    async def find_user(self, user_id: str) -> Optional[User]:
        """
        Cached lookup returning the public view of a user.

        Hits and misses return the same shape: private fields are never
        cached, so they are never returned here either. Use
        :meth:`find_credentials` for those.
        """
        cached = await self.entity_cache.get_cached_entity(USER, user_id)
        if cached is not None:
            try:
                return User.model_validate(cached)
            except ModelValidationError:
                self.logger.warning("Discarding malformed cached user", user_id=user_id)

        document = await self.store.get(user_id)
        if document is None:
            return None

        public = User.model_validate(document).public_view()
        await self.entity_cache.cache_entity(USER, user_id, public)
        return User.model_validate(public)

    async def find_credentials(self, user_id: str) -> Optional[str]:
        """Password hash read straight from the store, never from the cache."""
        document = await self.store.get(user_id)
        if document is None:
            return None
        return document.get("password_hash")

    async def get_user(self, user_id: str) -> User:
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_user(self, user_id: str, changes: UserUpdate) -> User:
        document = await self.store.get(user_id)
        if document is None:
            raise NotFoundError("User not found")

        updates = changes.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in updates:
            email = updates["email"] = updates["email"].lower()
            if await self.store.count(lambda doc: doc["email"] == email and doc["id"] != user_id):
                raise ValidationError("User already exists", {"field": "email"})
        user = User.model_validate({**document, **updates, "updated_at": datetime.now(timezone.utc)})

        await self.store.replace(user_id, user.model_dump())
        await self.invalidator.user_updated(user_id)
        return user

    async def delete_user(self, user_id: str) -> None:
        if not await self.store.delete(user_id):
            raise NotFoundError("User not found")
        await self.invalidator.user_deleted(user_id)
        self.logger.info("User deleted", user_id=user_id)
