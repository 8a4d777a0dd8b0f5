"""
Hybrid local/remote route computation.

Short trips are routed locally with A* over a road graph downloaded from
Overpass; long trips, and short trips the local search cannot serve, go to
OSRM. Callers always get a RouteResult or None, never a provider exception.
"""

from typing import List, Optional
from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.common import Coordinate
from app.schemas.route import RouteResult, RouteStep
from app.services.routing_engine.astar import AStarSearch
from app.services.routing_engine.geo_distance import great_circle_distance, path_length
from app.services.routing_engine.network_cache import NetworkCache
from app.services.routing_engine.osrm_client import OSRMClient

LOCAL_ALGORITHM = "A* (local road graph)"


class HybridRouter:
    """
    Chooses between local graph search and the remote routing service.

    The router owns its NetworkCache; pass one in to share or inspect it.
    """

    def __init__(
        self,
        cache: Optional[NetworkCache] = None,
        remote: Optional[OSRMClient] = None,
        search: Optional[AStarSearch] = None,
        threshold_m: Optional[float] = None,
        average_speed_mps: Optional[float] = None
    ):
        self.cache = cache if cache is not None else NetworkCache()
        self.remote = remote if remote is not None else OSRMClient()
        self.search = search if search is not None else AStarSearch(heuristic=settings.SEARCH_HEURISTIC)
        self.threshold_m = settings.LOCAL_ROUTING_THRESHOLD_METERS if threshold_m is None else threshold_m
        self.average_speed_mps = settings.urban_average_speed_mps if average_speed_mps is None else average_speed_mps

    async def compute_route(self, start: Coordinate, end: Coordinate) -> Optional[RouteResult]:
        """
        Compute a driving route between two coordinates.

        Trips at or below the distance threshold try the local search first
        and fall back to OSRM on any failure. Longer trips go straight to OSRM.

        Args:
            start: Origin
            end: Destination

        Returns:
            RouteResult, or None if no engine produced a route
        """
        straight_line = great_circle_distance(start, end)
        logger.info(
            f"Route request: straight-line {straight_line / 1000:.2f} km, "
            f"threshold {self.threshold_m / 1000:.1f} km"
        )

        if straight_line <= self.threshold_m:
            try:
                result = await self.compute_local_route(start, end)
            except Exception as e:
                logger.warning(f"Local routing failed ({type(e).__name__}: {e}), falling back to OSRM")
                result = None
            else:
                if result is None:
                    logger.warning("Local routing found no path, falling back to OSRM")

            if result is not None:
                return result

        return await self.compute_remote_route(start, end)

    async def compute_local_route(self, start: Coordinate, end: Coordinate) -> Optional[RouteResult]:
        """
        A* over the cached road network for the trip's bounding box.

        Fetch and build errors propagate. Returns None when the network has no
        routable nodes or the snapped endpoints are not connected.
        """
        network = await self.cache.get_network(start, end)
        if network.is_empty():
            logger.warning("Road network has no routable nodes, skipping local search")
            return None

        geometry = self.search.find_path(network, start, end)
        if not geometry:
            return None

        return self.build_local_result(geometry)

    def build_local_result(self, geometry: List[Coordinate]) -> RouteResult:
        distance = path_length(geometry)
        duration = distance / self.average_speed_mps
        step = RouteStep(
            instruction=f"Drive {distance / 1000:.1f} km via local road network",
            distance=distance,
            duration=duration
        )
        return RouteResult(
            geometry=geometry,
            distance=distance,
            duration=duration,
            steps=[step],
            algorithm=LOCAL_ALGORITHM
        )

    async def compute_remote_route(self, start: Coordinate, end: Coordinate) -> Optional[RouteResult]:
        try:
            result = await self.remote.get_route(start, end)
        except Exception as e:
            logger.error(f"Remote routing failed: {type(e).__name__}: {e}")
            return None

        if result is None:
            logger.warning("Remote routing returned no route")
        return result

    def reset(self) -> None:
        """Forget every cached road network. Requests already running still complete."""
        self.cache.clear()
