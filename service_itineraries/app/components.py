"""
Builds the caches and domain services from settings.
"""

from dataclasses import dataclass, field
from typing import Optional

from shared.config import BaseConfig

from .cache import ITINERARY, USER, EntityCache, InvalidationCoordinator, KeyValueStore, QueryResultCache
from .itineraries.service import ItineraryService
from .persistence.document_store import DocumentStore
from .users.directory import UserDirectory


@dataclass
class Components:
    kv_store: KeyValueStore
    entity_cache: EntityCache
    list_cache: QueryResultCache
    invalidator: InvalidationCoordinator
    users: UserDirectory
    itineraries: ItineraryService
    user_store: DocumentStore = field(repr=False)
    itinerary_store: DocumentStore = field(repr=False)


def build_components(
    kv_store: Optional[KeyValueStore],
    settings: BaseConfig,
    *,
    user_store: Optional[DocumentStore] = None,
    itinerary_store: Optional[DocumentStore] = None,
) -> Components:
    """Wire caches and services around one shared key/value store.

    ``kv_store`` may be None (connect failed or caching disabled); the caches
    then run against a disabled store and every lookup is a miss.
    """
    kv_store = kv_store or KeyValueStore.disabled()
    user_store = user_store or DocumentStore("users")
    itinerary_store = itinerary_store or DocumentStore("itineraries")

    entity_cache = EntityCache(
        kv_store,
        ttls={USER: settings.user_cache_ttl, ITINERARY: settings.itinerary_cache_ttl},
    )
    list_cache = QueryResultCache(
        kv_store,
        user_list_ttl=settings.itinerary_list_cache_ttl,
        public_list_ttl=settings.public_itinerary_list_cache_ttl,
    )
    invalidator = InvalidationCoordinator(entity_cache, list_cache)
    users = UserDirectory(user_store, entity_cache, invalidator)
    itineraries = ItineraryService(itinerary_store, entity_cache, list_cache, invalidator, users=users)

    return Components(
        kv_store=kv_store,
        entity_cache=entity_cache,
        list_cache=list_cache,
        invalidator=invalidator,
        users=users,
        itineraries=itineraries,
        user_store=user_store,
        itinerary_store=itinerary_store,
    )
