"""
Single-entity cache (user-by-id, itinerary-by-id).
"""

from typing import Any, Dict, Optional

from shared.logging import get_logger

from .keys import ITINERARY, USER, entity_key
from .keyvalue import KeyValueStore

DEFAULT_USER_TTL = 3600
DEFAULT_ITINERARY_TTL = 1800


class EntityCache:
    """Fixed-TTL cache of entity snapshots keyed by ``<kind>:<id>``."""

    def __init__(self, store: Optional[KeyValueStore], ttls: Optional[Dict[str, int]] = None):
        self.store = store or KeyValueStore.disabled()
        self.logger = get_logger("itineraries.cache.entity")
        self.ttls = {USER: DEFAULT_USER_TTL, ITINERARY: DEFAULT_ITINERARY_TTL}
        if ttls:
            self.ttls.update(ttls)

    def ttl_for(self, kind: str) -> int:
        try:
            return self.ttls[kind]
        except KeyError:
            raise ValueError(f"Unknown entity kind: {kind!r}") from None

    async def cache_entity(self, kind: str, entity_id: Any, value: Any) -> bool:
        """Store a plain snapshot of ``value``. Returns False if skipped."""
        return await self.store.set_json(entity_key(kind, entity_id), value, self.ttl_for(kind))

    async def get_cached_entity(self, kind: str, entity_id: Any) -> Optional[Any]:
        self.ttl_for(kind)
        return await self.store.get_json(entity_key(kind, entity_id))

    async def invalidate_entity(self, kind: str, entity_id: Any) -> bool:
        self.ttl_for(kind)
        deleted = await self.store.delete(entity_key(kind, entity_id))
        self.logger.debug("Invalidated entity", kind=kind, entity_id=str(entity_id), deleted=deleted)
        return bool(deleted)
