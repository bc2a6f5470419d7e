"""
Itinerary caching package.

Read-through, write-invalidate caches in front of the document store. The
store is canonical; every cache operation degrades to a miss or no-op when
Redis is unavailable.
"""

from .entity_cache import EntityCache
from .invalidation import InvalidationCoordinator, itinerary_scopes
from .keys import ITINERARY, PUBLIC_SCOPE, USER, encode_filters, entity_key, list_key, scope_pattern, user_scope
from .keyvalue import KeyValueStore, close, connect, soft_fail
from .list_cache import QueryResultCache

__all__ = [
    "EntityCache",
    "InvalidationCoordinator",
    "itinerary_scopes",
    "ITINERARY",
    "PUBLIC_SCOPE",
    "USER",
    "encode_filters",
    "entity_key",
    "list_key",
    "scope_pattern",
    "user_scope",
    "KeyValueStore",
    "close",
    "connect",
    "soft_fail",
    "QueryResultCache",
]
