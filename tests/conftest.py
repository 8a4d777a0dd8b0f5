import pytest

from fakes import block_elements
from app.services.routing_engine.road_network import build_road_network


@pytest.fixture
def block_network():
    return build_road_network(block_elements())
