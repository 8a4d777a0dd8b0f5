"""
OSRM client for full-geometry driving routes.

Talks to the OSRM /route service and converts its response into a
RouteResult. OSRM uses (lon, lat) ordering everywhere; this module is the
only place that knows about it.
"""

import asyncio
import time
import httpx
from typing import Any, Dict, List, Optional
from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.common import Coordinate
from app.schemas.route import RouteResult, RouteStep

REMOTE_ALGORITHM = "Dijkstra (Contraction Hierarchies)"


class OSRMClient:
    """Client for the OSRM routing API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize OSRM client.

        Args:
            base_url: OSRM server root (defaults to settings)
            profile: Routing profile, e.g. "driving" (defaults to settings)
            timeout: Wall-clock timeout in seconds for one request (defaults to settings)
            transport: Optional httpx transport, used by tests to stub the provider
        """
        self.base_url = (base_url or settings.OSRM_BASE_URL).rstrip("/")
        self.profile = profile or settings.OSRM_PROFILE
        self.timeout = timeout if timeout is not None else settings.OSRM_TIMEOUT_SECONDS
        self.transport = transport

    @staticmethod
    def format_coordinates(coords: List[Coordinate]) -> str:
        """Convert coordinates to OSRM format 'lon,lat;lon,lat'"""
        return ";".join(f"{c.lng},{c.lat}" for c in coords)

    async def get_route(self, start: Coordinate, end: Coordinate) -> Optional[RouteResult]:
        """
        Request a driving route with full geometry and step maneuvers.

        A response with a non-"Ok" code or no routes is a "no route" outcome
        and returns None. Transport errors, non-2xx statuses and timeouts are
        raised to the caller.

        Args:
            start: Origin
            end: Destination

        Returns:
            RouteResult or None if OSRM found no route
        """
        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates([start, end])}"
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "true",
        }

        logger.info(f"Requesting route from OSRM: {start.lat},{start.lng} -> {end.lat},{end.lng}")
        started = time.perf_counter()

        data = await asyncio.wait_for(self._get(url, params), timeout=self.timeout)

        logger.info(f"OSRM responded in {time.perf_counter() - started:.2f}s")

        if data.get("code") != "Ok" or not data.get("routes"):
            logger.warning(f"OSRM returned no route: code={data.get('code')}, message={data.get('message')}")
            return None

        return self.parse_route(data["routes"][0])

    @staticmethod
    def parse_route(route: Dict[str, Any]) -> RouteResult:
        """Convert one OSRM route object into a RouteResult."""
        # GeoJSON coordinates are [lon, lat]
        geometry = [
            Coordinate(lat=lat, lng=lon)
            for lon, lat in route["geometry"]["coordinates"]
        ]

        steps: List[RouteStep] = []
        legs = route.get("legs") or []
        if legs:
            for step in legs[0].get("steps", []):
                steps.append(
                    RouteStep(
                        instruction=describe_maneuver(step),
                        distance=step.get("distance", 0.0),
                        duration=step.get("duration", 0.0),
                    )
                )

        return RouteResult(
            geometry=geometry,
            distance=route["distance"],
            duration=route["duration"],
            steps=steps,
            algorithm=REMOTE_ALGORITHM,
        )

    async def _get(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            transport=self.transport,
            headers={"User-Agent": settings.HTTP_USER_AGENT}
        ) as client:
            response = await client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()


def describe_maneuver(step: Dict[str, Any]) -> str:
    """e.g. 'turn left on Main Street' or 'depart on unnamed road'"""
    maneuver = step.get("maneuver", {})
    name = step.get("name") or "unnamed road"
    modifier = maneuver.get("modifier")
    if modifier:
        return f"{maneuver.get('type')} {modifier} on {name}"
    return f"{maneuver.get('type')} on {name}"
