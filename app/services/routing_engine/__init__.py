"""
Routing engine package.

Provides the hybrid local/remote routing core:
- Great-circle and planar distance functions
- Road graph construction from Overpass elements, cached per bounding box
- A* search over a binary min-heap
- OSRM client for long trips and local-search fallback
"""

from .astar import AStarSearch, SearchOutcome
from .hybrid_router import HybridRouter, LOCAL_ALGORITHM
from .network_cache import NetworkCache
from .osrm_client import OSRMClient, REMOTE_ALGORITHM
from .overpass_client import OverpassClient, MapDataError
from .road_network import BoundingBox, Edge, RoadNetwork, build_road_network

__all__ = [
    "AStarSearch",
    "SearchOutcome",
    "HybridRouter",
    "LOCAL_ALGORITHM",
    "NetworkCache",
    "OSRMClient",
    "REMOTE_ALGORITHM",
    "OverpassClient",
    "MapDataError",
    "BoundingBox",
    "Edge",
    "RoadNetwork",
    "build_road_network",
]
