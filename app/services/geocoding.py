import httpx
from typing import Optional, Any
from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.geocoding import GeocodeResult
from app.utils.race import first_success, RaceFailedError


class GeocodingService:
    """Free-text place lookup racing Photon and Nominatim, first answer wins"""

    def __init__(
        self,
        photon_url: Optional[str] = None,
        nominatim_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.photon_url = photon_url or settings.PHOTON_URL
        self.nominatim_url = nominatim_url or settings.NOMINATIM_URL
        self.timeout = timeout if timeout is not None else settings.GEOCODE_TIMEOUT_SECONDS
        self.transport = transport

    async def geocode(self, query: str) -> Optional[GeocodeResult]:
        """
        Resolve a place name to coordinates.

        Both providers are queried at once; the first one that returns a match
        wins and the other request is cancelled. A provider without a match
        counts as failed.

        Args:
            query: Free-text address or place name

        Returns:
            GeocodeResult or None if no provider matched in time
        """
        if not query or not query.strip():
            return None

        query = query.strip()
        try:
            result = await first_success(
                [lambda: self._photon(query), lambda: self._nominatim(query)],
                timeout=self.timeout
            )
            logger.info(f"Geocoded '{query}' via {result.provider}: {result.lat},{result.lng}")
            return result
        except RaceFailedError as e:
            logger.warning(f"Geocoding failed for '{query}': {e} ({len(e.errors)} provider errors)")
            return None

    async def _photon(self, query: str) -> GeocodeResult:
        data = await self._get_json(self.photon_url, {"q": query, "limit": 1})
        features = data.get("features") or []
        if not features:
            raise LookupError(f"Photon has no match for '{query}'")

        feature = features[0]
        lon, lat = feature["geometry"]["coordinates"][:2]
        properties = feature.get("properties", {})
        return GeocodeResult(
            query=query,
            lat=lat,
            lng=lon,
            display_name=properties.get("name"),
            provider="photon"
        )

    async def _nominatim(self, query: str) -> GeocodeResult:
        data = await self._get_json(self.nominatim_url, {"q": query, "format": "json", "limit": 1})
        if not data:
            raise LookupError(f"Nominatim has no match for '{query}'")

        place = data[0]
        # Nominatim returns coordinates as strings
        return GeocodeResult(
            query=query,
            lat=float(place["lat"]),
            lng=float(place["lon"]),
            display_name=place.get("display_name"),
            provider="nominatim"
        )

    async def _get_json(self, url: str, params: dict) -> Any:
        async with httpx.AsyncClient(
            transport=self.transport,
            headers={"User-Agent": settings.HTTP_USER_AGENT}
        ) as client:
            response = await client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()


geocoding_service = GeocodingService()
