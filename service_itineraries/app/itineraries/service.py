"""
Itinerary service: read-through caching over the document store, with cache
invalidation on every write.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as ModelValidationError

from shared.errors import AuthorizationError, NotFoundError, ValidationError
from shared.logging import get_logger, set_user_context

from ..cache import ITINERARY, PUBLIC_SCOPE, EntityCache, InvalidationCoordinator, QueryResultCache, user_scope
from ..persistence.document_store import DocumentStore, Predicate
from ..users.directory import UserDirectory
from .models import (
    Itinerary,
    ItineraryCreate,
    ItineraryPage,
    ItineraryQuery,
    ItineraryUpdate,
    ListQuery,
    Pagination,
    PublicItineraryQuery,
    SharedItinerary,
    SharedSummary,
    ShareLink,
)

SHARE_PATH = "/api/itineraries/share/{shareable_id}"


class ItineraryService:
    """Itinerary CRUD, listing and sharing."""

    def __init__(
        self,
        store: DocumentStore,
        entity_cache: EntityCache,
        list_cache: QueryResultCache,
        invalidator: InvalidationCoordinator,
        users: Optional[UserDirectory] = None,
    ):
        self.store = store
        self.entity_cache = entity_cache
        self.list_cache = list_cache
        self.invalidator = invalidator
        self.users = users
        self.logger = get_logger("itineraries.service")

    # Reads

    async def list_itineraries(self, user_id: str, query: ItineraryQuery) -> ItineraryPage:
        """A user's own itineraries, filtered and paginated."""
        set_user_context(user_id)

        def predicate(doc):
            return doc["user_id"] == user_id and query.matches(doc)

        return await self._cached_page(user_scope(user_id), query, predicate)

    async def list_public_itineraries(self, query: PublicItineraryQuery) -> ItineraryPage:
        """Itineraries their owners marked public."""

        def predicate(doc):
            return bool(doc.get("is_public")) and query.matches(doc)

        return await self._cached_page(PUBLIC_SCOPE, query, predicate)

    async def get_itinerary(self, user_id: str, itinerary_id: str) -> Itinerary:
        set_user_context(user_id)
        itinerary = await self._load(itinerary_id)
        if itinerary is None:
            raise NotFoundError("Itinerary not found")
        if itinerary.user_id != user_id:
            raise AuthorizationError("Not authorized to access this itinerary")
        return itinerary

    async def get_shared_itinerary(self, shareable_id: str) -> SharedItinerary:
        itinerary = await self._load(shareable_id)
        if itinerary is None:
            raise NotFoundError("Shared itinerary not found")

        created_by = "Unknown"
        if self.users is not None:
            owner = await self.users.find_user(itinerary.user_id)
            if owner is not None:
                created_by = owner.name

        return SharedItinerary(
            id=itinerary.id,
            title=itinerary.title,
            destination=itinerary.destination,
            start_date=itinerary.start_date,
            end_date=itinerary.end_date,
            activities=itinerary.activities,
            created_at=itinerary.created_at,
            updated_at=itinerary.updated_at,
            duration=itinerary.duration,
            created_by=created_by,
        )

    # Writes

    async def create_itinerary(self, user_id: str, data: ItineraryCreate) -> Itinerary:
        set_user_context(user_id)
        now = datetime.now(timezone.utc)
        itinerary = Itinerary(
            id=uuid.uuid4().hex,
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        await self.store.insert(itinerary.model_dump(exclude={"duration"}))
        await self.invalidator.itinerary_created(itinerary)

        self.logger.info("Itinerary created", itinerary_id=itinerary.id, user_id=user_id)
        return itinerary

    async def update_itinerary(self, user_id: str, itinerary_id: str, changes: ItineraryUpdate) -> Itinerary:
        set_user_context(user_id)
        before = await self._load_owned(user_id, itinerary_id, "update")

        merged = {
            **before.model_dump(exclude={"duration"}),
            **changes.changes(),
            "updated_at": datetime.now(timezone.utc),
        }
        after = Itinerary.model_validate(merged)
        if after.end_date <= after.start_date:
            raise ValidationError("End date must be after start date", {"field": "end_date"})

        await self.store.replace(itinerary_id, after.model_dump(exclude={"duration"}))
        await self.invalidator.itinerary_updated(before, after)

        self.logger.info("Itinerary updated", itinerary_id=itinerary_id, user_id=user_id)
        return after

    async def delete_itinerary(self, user_id: str, itinerary_id: str) -> None:
        set_user_context(user_id)
        itinerary = await self._load_owned(user_id, itinerary_id, "delete")

        await self.store.delete(itinerary_id)
        await self.invalidator.itinerary_deleted(itinerary)

        self.logger.info("Itinerary deleted", itinerary_id=itinerary_id, user_id=user_id)

    async def share_itinerary(self, user_id: str, itinerary_id: str) -> ShareLink:
        set_user_context(user_id)
        itinerary = await self._load_owned(user_id, itinerary_id, "share")

        # The itinerary id doubles as the shareable id.
        return ShareLink(
            shareable_id=itinerary.id,
            share_path=SHARE_PATH.format(shareable_id=itinerary.id),
            shared_data=SharedSummary(
                title=itinerary.title,
                destination=itinerary.destination,
                start_date=itinerary.start_date,
                end_date=itinerary.end_date,
                activities_count=len(itinerary.activities),
            ),
        )

    # Helpers

    async def _cached_page(self, scope: str, query: ListQuery, predicate: Predicate) -> ItineraryPage:
        """
        Serve a list page from the cache, or build it from the store and cache it.

        Not atomic with respect to writers: a page built before a concurrent
        write but stored after that write's invalidation stays stale until
        its TTL expires.
        """
        filters = query.cache_filters()

        cached = await self.list_cache.get_cached_list(scope, filters)
        page = self._validate(ItineraryPage, cached, scope=scope)
        if page is not None:
            return page

        total = await self.store.count(predicate)
        documents = await self.store.find(
            predicate,
            sort_field=query.sort_field,
            descending=query.descending,
            skip=query.skip,
            limit=query.limit,
        )
        page = ItineraryPage(
            itineraries=[Itinerary.model_validate(doc) for doc in documents],
            pagination=Pagination.build(query.page, query.limit, total),
        )

        await self.list_cache.cache_list(scope, filters, page)
        return page

    async def _load(self, itinerary_id: str) -> Optional[Itinerary]:
        """Read-through single itinerary lookup."""
        cached = await self.entity_cache.get_cached_entity(ITINERARY, itinerary_id)
        itinerary = self._validate(Itinerary, cached, itinerary_id=itinerary_id)
        if itinerary is not None:
            return itinerary

        document = await self.store.get(itinerary_id)
        if document is None:
            return None

        itinerary = Itinerary.model_validate(document)
        await self.entity_cache.cache_entity(ITINERARY, itinerary_id, itinerary)
        return itinerary

    async def _load_owned(self, user_id: str, itinerary_id: str, action: str) -> Itinerary:
        """Canonical (uncached) read used before writes."""
        document = await self.store.get(itinerary_id)
        if document is None:
            raise NotFoundError("Itinerary not found")

        itinerary = Itinerary.model_validate(document)
        if itinerary.user_id != user_id:
            raise AuthorizationError(f"Not authorized to {action} this itinerary")
        return itinerary

    def _validate(self, model: Any, cached: Any, **context) -> Optional[Any]:
        """Rebuild a model from a cached payload; malformed payloads are a miss."""
        if cached is None:
            return None
        try:
            return model.model_validate(cached)
        except ModelValidationError as exc:
            self.logger.warning("Discarding malformed cached payload", error=str(exc), **context)
            return None
