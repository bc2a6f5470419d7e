"""
Itineraries service for the Travel Itinerary API.
"""

from typing import Dict, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .cache import keyvalue
from .components import Components, build_components


class ItinerariesService(BaseService):
    """Itineraries service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__("itineraries", 3000, config=config)

        # Usable before startup; replaced once the cache connection is known.
        self.components: Components = build_components(None, self.config)

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "itineraries",
                "message": "Travel Itinerary API - Itineraries Service",
                "version": "1.0.0",
                "capabilities": ["itineraries", "users", "caching"]
            }

    async def start(self):
        """Connect the cache and build caches and services around it."""
        kv_store = await keyvalue.connect(self.config)
        self.components = build_components(
            kv_store,
            self.config,
            user_store=self.components.user_store,
            itinerary_store=self.components.itinerary_store,
        )
        self.components.kv_store.on_connection_change(self._on_cache_connection_change)

        await self.components.user_store.start()
        await self.components.itinerary_store.start()

        self.logger.info("Itineraries service started", caching=self.components.kv_store.available)

    async def stop(self):
        """Stop service components."""
        await keyvalue.close(self.components.kv_store)
        await self.components.user_store.stop()
        await self.components.itinerary_store.stop()

        self.logger.info("Itineraries service stopped")

    def _on_cache_connection_change(self, connected: bool) -> None:
        if connected:
            self.logger.info("Serving with cache")
        else:
            self.logger.warning("Serving without cache until the connection recovers")

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report store and cache status; a missing cache is not unhealthy."""
        dependencies = {}

        kv_store = self.components.kv_store
        if not kv_store.available:
            dependencies["redis"] = "disabled"
        elif await kv_store.ping():
            dependencies["redis"] = "ok"
        else:
            dependencies["redis"] = "degraded"

        stores_ok = (
            await self.components.user_store.health_check()
            and await self.components.itinerary_store.health_check()
        )
        dependencies["document_store"] = "ok" if stores_ok else "error"

        return dependencies


def create_app():
    """Create itineraries service application."""
    service = ItinerariesService()
    return service.app


if __name__ == "__main__":
    service = ItinerariesService()
    service.run()
