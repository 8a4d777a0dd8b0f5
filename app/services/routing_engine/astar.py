"""
A* shortest-path search over a RoadNetwork.

The default heuristic is the planar approximation, which is cheap but not a
guaranteed lower bound on the haversine edge weights. Paths are therefore
near-optimal rather than provably optimal; use the "great_circle" heuristic
when exact optimality matters more than expansion count.

The open set is a BinaryMinHeap without decrease-key. An improved g-score
pushes a new entry and the superseded one is recognised and skipped when it
is popped (its priority no longer matches g + h for that node).
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
from app.core.logging_config import logger
from app.schemas.common import Coordinate
from app.services.routing_engine.geo_distance import great_circle_distance, planar_approx_distance
from app.services.routing_engine.priority_queue import BinaryMinHeap
from app.services.routing_engine.road_network import RoadNetwork

HEURISTICS: Dict[str, Callable[[Coordinate, Coordinate], float]] = {
    "planar": planar_approx_distance,
    "great_circle": great_circle_distance,
}


@dataclass
class SearchOutcome:
    start_node: int
    end_node: int
    path: Optional[List[int]]  # node ids, None when unreachable
    visited: int = 0
    stale_skipped: int = 0
    elapsed_ms: float = 0.0

    @property
    def found(self) -> bool:
        return self.path is not None


class AStarSearch:
    """Heuristic-guided shortest path search between two coordinates."""

    def __init__(self, heuristic: str = "planar"):
        if heuristic not in HEURISTICS:
            logger.warning(f"Unknown search heuristic '{heuristic}', defaulting to planar")
            heuristic = "planar"
        self.heuristic_name = heuristic
        self.heuristic = HEURISTICS[heuristic]

    @staticmethod
    def nearest_node(network: RoadNetwork, point: Coordinate) -> Optional[int]:
        """
        Closest routable node to `point` by planar distance.

        Only nodes with outgoing edges qualify. Ties keep the first node in
        iteration order. Returns None for a network without routable nodes.
        """
        best_id: Optional[int] = None
        best_distance = float("inf")
        for node_id in network.routable_nodes():
            distance = planar_approx_distance(point, network.nodes[node_id])
            if distance < best_distance:
                best_distance = distance
                best_id = node_id
        return best_id

    def search(self, network: RoadNetwork, start_node: int, end_node: int) -> SearchOutcome:
        """
        Run A* between two node ids of the network.

        Args:
            network: Road graph to search
            start_node: Source node id
            end_node: Target node id

        Returns:
            SearchOutcome with the node path, or path=None if end is unreachable
        """
        started = time.perf_counter()
        target = network.nodes[end_node]
        h_cache: Dict[int, float] = {}

        def h(node_id: int) -> float:
            value = h_cache.get(node_id)
            if value is None:
                value = self.heuristic(network.nodes[node_id], target)
                h_cache[node_id] = value
            return value

        g_score: Dict[int, float] = {start_node: 0.0}
        previous: Dict[int, int] = {}
        open_set: BinaryMinHeap[int] = BinaryMinHeap()
        open_set.push(start_node, h(start_node))

        outcome = SearchOutcome(start_node=start_node, end_node=end_node, path=None)
        reached = False

        while len(open_set):
            node_id, priority = open_set.pop()
            current_g = g_score[node_id]

            # Superseded entry: a cheaper path to this node was pushed later
            if priority > current_g + h(node_id):
                outcome.stale_skipped += 1
                continue

            outcome.visited += 1
            if node_id == end_node:
                reached = True
                break

            for edge in network.neighbors(node_id):
                tentative = current_g + edge.weight
                if tentative < g_score.get(edge.target, float("inf")):
                    g_score[edge.target] = tentative
                    previous[edge.target] = node_id
                    open_set.push(edge.target, tentative + h(edge.target))

        outcome.elapsed_ms = (time.perf_counter() - started) * 1000

        if reached:
            outcome.path = self._reconstruct(previous, start_node, end_node)
            logger.info(
                f"Path found: {len(outcome.path)} nodes, visited {outcome.visited} "
                f"in {outcome.elapsed_ms:.0f}ms ({outcome.stale_skipped} stale entries skipped)"
            )
        else:
            logger.warning(f"No path from {start_node} to {end_node} after visiting {outcome.visited} nodes")

        return outcome

    def find_path(
        self,
        network: RoadNetwork,
        start: Coordinate,
        end: Coordinate
    ) -> Optional[List[Coordinate]]:
        """
        Snap both points to the network and return the path as coordinates.

        Returns None when either point has no routable node nearby or when the
        snapped nodes are not connected.
        """
        start_node = self.nearest_node(network, start)
        end_node = self.nearest_node(network, end)
        if start_node is None or end_node is None:
            logger.warning("No nearby road nodes for local search")
            return None

        logger.info(
            f"Running A* ({self.heuristic_name} heuristic) on {len(network.adjacency)} routable nodes"
        )
        outcome = self.search(network, start_node, end_node)
        if not outcome.found:
            return None
        return [network.nodes[node_id] for node_id in outcome.path]

    @staticmethod
    def _reconstruct(previous: Dict[int, int], start_node: int, end_node: int) -> List[int]:
        path = [end_node]
        node_id = end_node
        while node_id != start_node:
            node_id = previous[node_id]
            path.append(node_id)
        path.reverse()
        return path
