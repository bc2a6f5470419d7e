"""
Persistence package.

The document store here is the canonical source of truth for users and
itineraries. Caches in app.cache only ever hold snapshots of it.
"""
