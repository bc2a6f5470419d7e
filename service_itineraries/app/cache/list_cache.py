"""
Query-result cache for paginated itinerary lists.

A cached value is the full response envelope (items plus pagination), so a
hit needs no pagination math. Entries are grouped by scope: one user's
private lists (``user:<id>``) or the public listing (``public``).
"""

from typing import Any, Mapping, Optional

from shared.logging import get_logger

from .keys import PUBLIC_SCOPE, list_key, scope_pattern
from .keyvalue import KeyValueStore

DEFAULT_USER_LIST_TTL = 600
DEFAULT_PUBLIC_LIST_TTL = 300


class QueryResultCache:
    """Scope + filters keyed cache of list envelopes."""

    def __init__(
        self,
        store: Optional[KeyValueStore],
        *,
        user_list_ttl: int = DEFAULT_USER_LIST_TTL,
        public_list_ttl: int = DEFAULT_PUBLIC_LIST_TTL,
    ):
        self.store = store or KeyValueStore.disabled()
        self.user_list_ttl = user_list_ttl
        self.public_list_ttl = public_list_ttl
        self.logger = get_logger("itineraries.cache.lists")

    def ttl_for(self, scope: str) -> int:
        return self.public_list_ttl if scope == PUBLIC_SCOPE else self.user_list_ttl

    async def cache_list(self, scope: str, filters: Mapping[str, Any], envelope: Any) -> bool:
        key = list_key(scope, filters)
        return await self.store.set_json(key, envelope, self.ttl_for(scope))

    async def get_cached_list(self, scope: str, filters: Mapping[str, Any]) -> Optional[Any]:
        return await self.store.get_json(list_key(scope, filters))

    async def invalidate_scope(self, scope: str) -> int:
        """Remove every list page cached under ``scope``, whatever its filters."""
        pattern = scope_pattern(scope)
        deleted = await self.store.delete_matching(pattern)
        self.logger.debug("Invalidated list scope", scope=scope, deleted=deleted)
        return deleted
