from functools import lru_cache
from app.services.geocoding import GeocodingService, geocoding_service
from app.services.routing_engine import HybridRouter


@lru_cache
def get_hybrid_router() -> HybridRouter:
    """
    Process-wide HybridRouter.

    The router owns the road network cache, so every request shares one cache.
    Tests override this dependency with a router built on stub providers.
    """
    return HybridRouter()


def get_geocoding_service() -> GeocodingService:
    return geocoding_service
