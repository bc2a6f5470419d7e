"""
Invalidation policy for mutating operations.

Create: drop every list scope the new entity can appear under.
Update/delete: also drop the entity's own key. Scopes are taken from both the
old and the new state, so an itinerary that stops being public still leaves
the public listing.

Invalidation completes before the mutating call returns. A reader racing the
window between the store write and the purge may still see the old entry.
"""

import asyncio
from typing import Any, Iterable, List, Optional, Set

from shared.logging import get_logger

from .entity_cache import EntityCache
from .keys import ITINERARY, PUBLIC_SCOPE, USER, user_scope
from .list_cache import QueryResultCache


def itinerary_scopes(*itineraries: Any) -> List[str]:
    """Every list scope the given itinerary states are visible under."""
    scopes: Set[str] = set()
    for itinerary in itineraries:
        if itinerary is None:
            continue
        scopes.add(user_scope(itinerary.user_id))
        if itinerary.is_public:
            scopes.add(PUBLIC_SCOPE)
    return sorted(scopes)


class InvalidationCoordinator:
    """Purges entity and list caches after writes to the canonical store."""

    def __init__(self, entity_cache: EntityCache, list_cache: QueryResultCache):
        self.entity_cache = entity_cache
        self.list_cache = list_cache
        self.logger = get_logger("itineraries.cache.invalidation")

    async def invalidate(
        self,
        kind: Optional[str],
        entity_id: Any,
        scopes: Iterable[str],
    ) -> None:
        scopes = list(scopes)
        tasks = [self.list_cache.invalidate_scope(scope) for scope in scopes]
        if kind is not None:
            tasks.append(self.entity_cache.invalidate_entity(kind, entity_id))
        await asyncio.gather(*tasks)

        self.logger.info(
            "Caches invalidated",
            kind=kind,
            entity_id=str(entity_id) if entity_id is not None else None,
            scopes=scopes,
        )

    async def itinerary_created(self, itinerary: Any) -> None:
        await self.invalidate(None, itinerary.id, itinerary_scopes(itinerary))

    async def itinerary_updated(self, before: Any, after: Any) -> None:
        await self.invalidate(ITINERARY, after.id, itinerary_scopes(before, after))

    async def itinerary_deleted(self, itinerary: Any) -> None:
        await self.invalidate(ITINERARY, itinerary.id, itinerary_scopes(itinerary))

    async def user_updated(self, user_id: Any) -> None:
        await self.invalidate(USER, user_id, [])

    async def user_deleted(self, user_id: Any) -> None:
        await self.invalidate(USER, user_id, [user_scope(user_id)])
