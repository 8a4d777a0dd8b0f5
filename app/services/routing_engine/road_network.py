"""
Road network model and graph construction from Overpass elements.

A `RoadNetwork` is built once per bounding box and only read afterwards, so
the same instance can be shared between concurrent searches.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple
from app.core.logging_config import logger
from app.schemas.common import Coordinate
from app.services.routing_engine.geo_distance import great_circle_distance

# OSM highway classes considered drivable by car
DRIVABLE_HIGHWAYS = (
    "motorway",
    "trunk",
    "primary",
    "secondary",
    "tertiary",
    "residential",
)

ONEWAY_FORWARD = ("yes", "true", "1")
ONEWAY_REVERSE = ("-1", "reverse")


class Edge(NamedTuple):
    source: int
    target: int
    weight: float  # meters


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    @classmethod
    def around(cls, start: Coordinate, end: Coordinate, padding: float) -> "BoundingBox":
        """Smallest box containing both points, grown by `padding` degrees on every side."""
        return cls(
            min_lat=min(start.lat, end.lat) - padding,
            min_lng=min(start.lng, end.lng) - padding,
            max_lat=max(start.lat, end.lat) + padding,
            max_lng=max(start.lng, end.lng) + padding,
        )

    def cache_key(self, precision: int = 4) -> str:
        """Bounds rounded to `precision` decimals, so near-identical boxes share a key."""
        return ",".join(
            f"{value:.{precision}f}"
            for value in (self.min_lat, self.min_lng, self.max_lat, self.max_lng)
        )

    def to_overpass(self) -> str:
        # Overpass expects (south, west, north, east)
        return f"{self.min_lat},{self.min_lng},{self.max_lat},{self.max_lng}"


@dataclass(frozen=True)
class RoadNetwork:
    """
    Directed road graph.

    `nodes` maps every known OSM node id to its coordinate. `adjacency` only
    has keys for nodes with at least one outgoing edge, and every edge target
    is present in `nodes`.
    """
    nodes: Mapping[int, Coordinate]
    adjacency: Mapping[int, List[Edge]] = field(default_factory=dict)

    def neighbors(self, node_id: int) -> List[Edge]:
        return self.adjacency.get(node_id, [])

    def routable_nodes(self) -> Iterable[int]:
        """Node ids that can start or end a search (those with outgoing edges)."""
        return self.adjacency.keys()

    @property
    def edge_count(self) -> int:
        return sum(len(edges) for edges in self.adjacency.values())

    def is_empty(self) -> bool:
        return not self.adjacency


def _oneway_direction(tags: Mapping[str, Any]) -> int:
    """1 for forward-only, -1 for reverse-only, 0 for both directions."""
    value = str(tags.get("oneway", "no")).lower()
    if value in ONEWAY_FORWARD:
        return 1
    if value in ONEWAY_REVERSE:
        return -1
    return 0


def build_road_network(elements: Iterable[Mapping[str, Any]]) -> RoadNetwork:
    """
    Build a directed road graph from raw Overpass elements.

    Nodes are collected first so ways can reference nodes that appear later in
    the payload. Each drivable way contributes one edge per consecutive node
    pair, weighted by great-circle distance, plus the reverse edge unless the
    way is one-way. A pair referencing an unknown node is skipped on its own;
    the rest of the way is kept.

    Args:
        elements: Overpass `elements` list (dicts with a `type` key)

    Returns:
        RoadNetwork built from the elements
    """
    nodes: Dict[int, Coordinate] = {}
    ways: List[Mapping[str, Any]] = []

    for element in elements:
        element_type = element.get("type")
        if element_type == "node":
            nodes[element["id"]] = Coordinate(lat=element["lat"], lng=element["lon"])
        elif element_type == "way":
            ways.append(element)

    adjacency: Dict[int, List[Edge]] = {}
    skipped_segments = 0

    for way in ways:
        tags = way.get("tags") or {}
        if tags.get("highway") not in DRIVABLE_HIGHWAYS:
            continue

        direction = _oneway_direction(tags)
        refs = way.get("nodes") or []

        for a, b in zip(refs, refs[1:]):
            coord_a, coord_b = nodes.get(a), nodes.get(b)
            if coord_a is None or coord_b is None:
                skipped_segments += 1
                continue

            weight = great_circle_distance(coord_a, coord_b)
            if direction >= 0:
                adjacency.setdefault(a, []).append(Edge(a, b, weight))
            if direction <= 0:
                adjacency.setdefault(b, []).append(Edge(b, a, weight))

    network = RoadNetwork(nodes=nodes, adjacency=adjacency)

    logger.info(
        f"Road network built: {len(nodes)} nodes, {len(adjacency)} routable, "
        f"{network.edge_count} edges from {len(ways)} ways"
    )
    if skipped_segments:
        logger.warning(f"Skipped {skipped_segments} way segments referencing unknown nodes")

    return network
