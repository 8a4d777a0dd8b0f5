"""
Overpass API client for fetching drivable road elements inside a bounding box.
"""

import asyncio
import time
import httpx
from typing import Any, Dict, List, Optional
from app.core.config import settings
from app.core.logging_config import logger
from app.services.routing_engine.road_network import BoundingBox, DRIVABLE_HIGHWAYS


class MapDataError(ValueError):
    """Raised when the map-data provider returns an unusable payload."""


class OverpassClient:
    """Client for the Overpass interpreter endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Overpass client.

        Args:
            url: Interpreter URL (defaults to settings)
            timeout: Wall-clock timeout in seconds for one fetch (defaults to settings)
            transport: Optional httpx transport, used by tests to stub the provider
        """
        self.url = url or settings.OVERPASS_URL
        self.timeout = timeout if timeout is not None else settings.OVERPASS_TIMEOUT_SECONDS
        self.transport = transport

    def build_query(self, bbox: BoundingBox) -> str:
        """Overpass QL for drivable ways in the box plus the nodes they reference."""
        highway_filter = "|".join(DRIVABLE_HIGHWAYS)
        server_timeout = max(1, int(self.timeout))
        return (
            f"[out:json][timeout:{server_timeout}];"
            f'way["highway"~"^({highway_filter})$"]({bbox.to_overpass()});'
            f"out body qt;>;out skel qt;"
        )

    async def fetch_elements(self, bbox: BoundingBox) -> List[Dict[str, Any]]:
        """
        Fetch raw map elements for a bounding box.

        Errors are not handled here: a timeout raises asyncio.TimeoutError,
        a non-2xx response raises httpx.HTTPStatusError and a payload without
        an `elements` list raises MapDataError.

        Args:
            bbox: Padded bounding box to query

        Returns:
            List of Overpass elements (nodes and ways)
        """
        logger.info(f"Fetching road network from Overpass for bbox {bbox.to_overpass()}")
        started = time.perf_counter()

        data = await asyncio.wait_for(self._post(self.build_query(bbox)), timeout=self.timeout)

        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise MapDataError("Overpass response has no 'elements' list")

        logger.info(
            f"Overpass responded in {time.perf_counter() - started:.1f}s "
            f"with {len(elements)} elements"
        )
        return elements

    async def _post(self, query: str) -> Any:
        async with httpx.AsyncClient(
            transport=self.transport,
            headers={"User-Agent": settings.HTTP_USER_AGENT}
        ) as client:
            response = await client.post(self.url, data={"data": query}, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
