"""
Per-bounding-box cache of built road networks.

Keys are the padded bounding box rounded to a fixed number of decimals, so
repeated queries for nearly the same trip reuse one Overpass download.
Concurrent requests for the same key share a single in-flight fetch.
"""

import asyncio
from collections import OrderedDict
from typing import Dict, Optional
from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.common import Coordinate
from app.services.routing_engine.overpass_client import OverpassClient
from app.services.routing_engine.road_network import BoundingBox, RoadNetwork, build_road_network


class NetworkCache:
    """
    LRU cache of RoadNetwork instances keyed by rounded bounding box.

    Entries are never invalidated, only evicted when `max_entries` is
    exceeded. `max_entries=0` disables eviction.
    """

    def __init__(
        self,
        client: Optional[OverpassClient] = None,
        max_entries: Optional[int] = None,
        padding: Optional[float] = None,
        precision: Optional[int] = None
    ):
        self.client = client if client is not None else OverpassClient()
        self.max_entries = settings.NETWORK_CACHE_MAX_ENTRIES if max_entries is None else max_entries
        self.padding = settings.BBOX_PADDING_DEGREES if padding is None else padding
        self.precision = settings.BBOX_KEY_PRECISION if precision is None else precision

        self._entries: "OrderedDict[str, RoadNetwork]" = OrderedDict()
        self._inflight: Dict[str, asyncio.Task] = {}
        self._waiters: Dict[asyncio.Task, int] = {}
        self._generation = 0
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def bbox_for(self, start: Coordinate, end: Coordinate) -> BoundingBox:
        return BoundingBox.around(start, end, self.padding)

    def key_for(self, start: Coordinate, end: Coordinate) -> str:
        return self.bbox_for(start, end).cache_key(self.precision)

    def get(self, key: str) -> Optional[RoadNetwork]:
        network = self._entries.get(key)
        if network is not None:
            self._entries.move_to_end(key)
        return network

    def put(self, key: str, network: RoadNetwork) -> None:
        self._entries[key] = network
        self._entries.move_to_end(key)
        if self.max_entries and len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.info(f"Road network cache full, evicted {evicted}")

    def clear(self) -> None:
        """
        Drop every cached network.

        Fetches already in flight still complete for the callers awaiting them,
        but their results are not stored and new requests start a fresh fetch.
        """
        self._generation += 1
        self._entries.clear()
        self._inflight.clear()
        self.hits = 0
        self.misses = 0

    async def get_network(self, start: Coordinate, end: Coordinate) -> RoadNetwork:
        """
        Return the road network covering both points, fetching it on a miss.

        Fetch and parse errors propagate unchanged and nothing is cached for
        the key. If every caller waiting on a fetch is cancelled, the fetch is
        cancelled as well and its result never reaches the cache.

        Args:
            start: Route origin
            end: Route destination

        Returns:
            RoadNetwork for the padded bounding box around start and end
        """
        bbox = self.bbox_for(start, end)
        key = bbox.cache_key(self.precision)

        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            logger.info(f"Road network cache HIT for {key}")
            return cached

        task = self._inflight.get(key)
        if task is None:
            self.misses += 1
            logger.info(f"Road network cache MISS for {key}")
            task = asyncio.ensure_future(self._load(key, bbox, self._generation))
            self._inflight[key] = task
        else:
            logger.info(f"Joining in-flight road network fetch for {key}")

        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            return await asyncio.shield(task)
        finally:
            self._release(key, task)

    async def _load(self, key: str, bbox: BoundingBox, generation: int) -> RoadNetwork:
        elements = await self.client.fetch_elements(bbox)
        network = build_road_network(elements)
        # results of fetches started before a clear() are not stored
        if generation == self._generation:
            self.put(key, network)
        return network

    def _release(self, key: str, task: asyncio.Task) -> None:
        remaining = self._waiters.get(task, 0) - 1
        if remaining > 0:
            self._waiters[task] = remaining
            return

        self._waiters.pop(task, None)
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.done():
            logger.info(f"All callers abandoned road network fetch for {key}, cancelling")
            task.cancel()
