"""
Itineraries Service package for the Travel Itinerary API.

Manages user accounts and travel itineraries with nested activities, with a
read-through cache in front of the document store:

- app.main: FastAPI app, health, and cache connect/close lifecycle.
- app.components: Builds caches and domain services from settings.
- app.cache: Redis-backed entity and list caches plus invalidation policy.
- app.itineraries: Itinerary models and the read-through/write-invalidate service.
- app.users: User records and the cached user directory.
- app.persistence: Canonical document store.

Guidelines:
- The cache is an accelerator only; every operation must stay correct with
  Redis down.
- Invalidate before a mutating call returns.
"""
