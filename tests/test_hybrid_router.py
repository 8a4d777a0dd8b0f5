import asyncio

import httpx
import pytest

from fakes import N1, N2, StubOverpass, json_transport, node, osrm_payload
from app.schemas.common import Coordinate
from app.services.routing_engine.astar import AStarSearch
from app.services.routing_engine.geo_distance import great_circle_distance
from app.services.routing_engine.hybrid_router import LOCAL_ALGORITHM, HybridRouter
from app.services.routing_engine.network_cache import NetworkCache
from app.services.routing_engine.osrm_client import OSRMClient, REMOTE_ALGORITHM

FAR_START = Coordinate(lat=52.5200, lng=13.4050)
FAR_END = Coordinate(lat=52.9700, lng=13.4050)  # ~50km north

REMOTE_PAYLOAD = osrm_payload(
    [(13.4, 52.5), (13.402, 52.502), (13.4, 52.5045)],
    distance=734.0,
    duration=95.0,
    steps=[{"maneuver": {"type": "depart"}, "name": "Hauptstraße", "distance": 734.0, "duration": 95.0}],
)


class CountingSearch(AStarSearch):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def find_path(self, network, start, end):
        self.calls += 1
        return super().find_path(network, start, end)


class StubRemote:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def get_route(self, start, end):
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return self.result


def make_router(overpass=None, remote_payload=REMOTE_PAYLOAD, remote_status=200, search=None):
    remote = OSRMClient(base_url="https://osrm.test", transport=json_transport(remote_payload, status_code=remote_status))
    cache = NetworkCache(client=overpass or StubOverpass(), max_entries=0)
    return HybridRouter(
        cache=cache,
        remote=remote,
        search=search or CountingSearch(),
        threshold_m=12_000,
        average_speed_mps=30 / 3.6,
    )


# ---- end-to-end scenarios ----

@pytest.mark.asyncio
async def test_short_trip_is_routed_locally():
    overpass = StubOverpass()
    router = make_router(overpass=overpass)

    result = await router.compute_route(N1, N2)

    assert result.algorithm == LOCAL_ALGORITHM
    assert result.geometry == [N1, N2]
    assert result.distance == pytest.approx(great_circle_distance(N1, N2))
    assert result.distance == pytest.approx(500, rel=0.01)
    assert result.duration == pytest.approx(result.distance / (30 / 3.6))
    assert len(result.steps) == 1
    assert result.steps[0].distance == result.distance
    assert len(overpass.calls) == 1


@pytest.mark.asyncio
async def test_local_distance_equals_sum_of_geometry_segments():
    result = await make_router().compute_route(N1, Coordinate(lat=52.5045, lng=13.4100))
    assert result.algorithm == LOCAL_ALGORITHM
    pairwise = sum(great_circle_distance(a, b) for a, b in zip(result.geometry, result.geometry[1:]))
    assert result.distance == pytest.approx(pairwise)


@pytest.mark.asyncio
async def test_long_trip_goes_to_remote_unchanged():
    overpass = StubOverpass()
    router = make_router(overpass=overpass)

    result = await router.compute_route(FAR_START, FAR_END)

    assert result.algorithm == REMOTE_ALGORITHM
    assert result.geometry == [
        Coordinate(lat=52.5, lng=13.4),
        Coordinate(lat=52.502, lng=13.402),
        Coordinate(lat=52.5045, lng=13.4),
    ]
    assert result.distance == 734.0
    assert result.duration == 95.0
    assert result.steps[0].instruction == "depart on Hauptstraße"
    assert overpass.calls == []


@pytest.mark.asyncio
async def test_empty_network_falls_back_without_searching():
    search = CountingSearch()
    router = make_router(overpass=StubOverpass(elements=[]), search=search)

    result = await router.compute_route(N1, N2)

    assert result.algorithm == REMOTE_ALGORITHM
    assert search.calls == 0


# ---- fallback and failure ----

@pytest.mark.asyncio
async def test_unreachable_destination_falls_back_to_remote():
    # N2 exists but is only connected to N1 by a way pointing away from it
    elements = [node(1, N1), node(2, N2), node(3, Coordinate(lat=52.5045, lng=13.41)),
                {"type": "way", "id": 1, "nodes": [2, 3], "tags": {"highway": "primary", "oneway": "yes"}},
                {"type": "way", "id": 2, "nodes": [1, 3], "tags": {"highway": "primary", "oneway": "yes"}}]
    router = make_router(overpass=StubOverpass(elements=elements))

    result = await router.compute_route(N1, N2)

    assert result.algorithm == REMOTE_ALGORITHM


@pytest.mark.asyncio
async def test_map_data_failure_falls_back_to_remote():
    router = make_router(overpass=StubOverpass(error=httpx.ConnectError("overpass down")))
    result = await router.compute_route(N1, N2)
    assert result.algorithm == REMOTE_ALGORITHM


@pytest.mark.asyncio
async def test_map_data_timeout_falls_back_to_remote():
    router = make_router(overpass=StubOverpass(error=asyncio.TimeoutError()))
    result = await router.compute_route(N1, N2)
    assert result.algorithm == REMOTE_ALGORITHM


@pytest.mark.asyncio
async def test_remote_not_tried_before_local_resolves():
    remote = StubRemote(result=None)
    router = HybridRouter(cache=NetworkCache(client=StubOverpass(), max_entries=0), remote=remote, threshold_m=12_000)

    result = await router.compute_route(N1, N2)

    assert result.algorithm == LOCAL_ALGORITHM
    assert remote.calls == []


@pytest.mark.asyncio
async def test_remote_error_becomes_not_found():
    router = make_router(remote_payload={"message": "oops"}, remote_status=502)
    assert await router.compute_route(FAR_START, FAR_END) is None


@pytest.mark.asyncio
async def test_all_engines_failing_returns_none():
    remote = StubRemote(error=httpx.ReadTimeout("slow"))
    router = HybridRouter(
        cache=NetworkCache(client=StubOverpass(error=httpx.ConnectError("down")), max_entries=0),
        remote=remote,
        threshold_m=12_000,
    )

    assert await router.compute_route(N1, N2) is None
    assert len(remote.calls) == 1


@pytest.mark.asyncio
async def test_remote_no_route_returns_none():
    router = make_router(remote_payload={"code": "NoRoute", "routes": []})
    assert await router.compute_route(FAR_START, FAR_END) is None


@pytest.mark.asyncio
async def test_threshold_is_inclusive():
    remote = StubRemote(result=None)
    router = HybridRouter(
        cache=NetworkCache(client=StubOverpass(), max_entries=0),
        remote=remote,
        threshold_m=great_circle_distance(N1, N2),
    )
    result = await router.compute_route(N1, N2)
    assert result.algorithm == LOCAL_ALGORITHM


@pytest.mark.asyncio
async def test_repeat_requests_reuse_the_network():
    overpass = StubOverpass()
    router = make_router(overpass=overpass)

    await router.compute_route(N1, N2)
    await router.compute_route(N1, N2)
    assert len(overpass.calls) == 1

    router.reset()
    await router.compute_route(N1, N2)
    assert len(overpass.calls) == 2


# ---- construction and lifecycle ----

def test_injected_dependencies_are_kept_even_when_empty():
    cache = NetworkCache(client=StubOverpass(), max_entries=0)
    remote = StubRemote()
    search = CountingSearch()

    router = HybridRouter(cache=cache, remote=remote, search=search, average_speed_mps=0)

    assert len(cache) == 0
    assert router.cache is cache
    assert router.remote is remote
    assert router.search is search
    assert router.average_speed_mps == 0


class GatedOverpass(StubOverpass):
    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def fetch_elements(self, bbox):
        self.calls.append(bbox)
        await self.release.wait()
        return self.elements


@pytest.mark.asyncio
async def test_reset_during_request_lets_it_finish():
    overpass = GatedOverpass()
    router = make_router(overpass=overpass)

    request = asyncio.ensure_future(router.compute_route(N1, N2))
    await asyncio.sleep(0.01)
    router.reset()
    overpass.release.set()
    result = await request

    assert result.algorithm == LOCAL_ALGORITHM
    assert len(router.cache) == 0


@pytest.mark.asyncio
async def test_remote_timeout_becomes_not_found():
    async def slow(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=REMOTE_PAYLOAD)

    remote = OSRMClient(base_url="https://osrm.test", timeout=0.05, transport=httpx.MockTransport(slow))
    router = HybridRouter(cache=NetworkCache(client=StubOverpass(), max_entries=0), remote=remote, threshold_m=12_000)

    assert await router.compute_route(FAR_START, FAR_END) is None
