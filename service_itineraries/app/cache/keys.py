"""
Cache key construction.

Key shapes:
- user:{user_id}                          single user
- itinerary:{itinerary_id}                single itinerary
- itineraries:{user_id}:{filters_hash}    a user's itinerary list page
- public_itineraries:{filters_hash}       public itinerary list page

List keys share a per-scope prefix so a whole scope can be removed with one
glob pattern without knowing which filter combinations were cached.
"""

import hashlib
import json
from typing import Any, Mapping
from urllib.parse import quote

USER = "user"
ITINERARY = "itinerary"

PUBLIC_SCOPE = "public"
USER_SCOPE_PREFIX = "user:"

USER_LIST_NAMESPACE = "itineraries"
PUBLIC_LIST_NAMESPACE = "public_itineraries"

FILTER_HASH_LENGTH = 32


def _segment(value: Any) -> str:
    """Percent-encode an id so ':' and glob metacharacters stay literal."""
    return quote(str(value), safe="")


def entity_key(kind: str, entity_id: Any) -> str:
    """Key for a single cached entity, e.g. ``itinerary:64f0c2``."""
    return f"{kind}:{_segment(entity_id)}"


def user_scope(user_id: Any) -> str:
    """List scope for one user's private itineraries."""
    return f"{USER_SCOPE_PREFIX}{user_id}"


def encode_filters(filters: Mapping[str, Any]) -> str:
    """
    Canonical, order-independent encoding of list query filters.

    ``None`` values are dropped so an omitted parameter and an explicit null
    share a key. Field order does not matter because keys are sorted before
    hashing.
    """
    stable = {k: v for k, v in filters.items() if v is not None}
    raw = json.dumps(stable, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:FILTER_HASH_LENGTH]


def _scope_prefix(scope: str) -> str:
    if scope == PUBLIC_SCOPE:
        return f"{PUBLIC_LIST_NAMESPACE}:"
    if scope.startswith(USER_SCOPE_PREFIX) and len(scope) > len(USER_SCOPE_PREFIX):
        user_id = scope[len(USER_SCOPE_PREFIX):]
        return f"{USER_LIST_NAMESPACE}:{_segment(user_id)}:"
    raise ValueError(f"Unknown list scope: {scope!r}")


def list_key(scope: str, filters: Mapping[str, Any]) -> str:
    """Key for one cached list page under ``scope``."""
    return f"{_scope_prefix(scope)}{encode_filters(filters)}"


def scope_pattern(scope: str) -> str:
    """Glob pattern matching every list key ever cached under ``scope``."""
    return f"{_scope_prefix(scope)}*"
