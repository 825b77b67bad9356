"""Tests for the paginated fetch and the Page contract."""

import pytest

from neutron_exporter.client.base import NETWORKS, SUBNETS, Page
from neutron_exporter.client.mock_client import MockNetworkingClient
from neutron_exporter.errors import ExtractError, FetchError
from neutron_exporter.fetcher import fetch_all
from neutron_exporter.resources import Subnet


def _subnets(count: int) -> list:
    return [{"id": f"sub-{i}", "name": f"subnet-{i}", "cidr": f"10.0.{i}.0/24", "ip_version": 4}
            for i in range(count)]


@pytest.mark.parametrize("count,page_size", [(0, 3), (1, 3), (6, 3), (7, 3), (5, 1)])
def test_fetch_all_returns_every_record_in_order(count, page_size):
    client = MockNetworkingClient(page_size=page_size, listings={"subnets": _subnets(count)})

    records = fetch_all(client, SUBNETS, Subnet)

    assert [r.id for r in records] == [f"sub-{i}" for i in range(count)]


def test_fetch_all_walks_every_page():
    client = MockNetworkingClient(page_size=2, listings={"subnets": _subnets(5)})
    fetch_all(client, SUBNETS, Subnet)

    assert client.requests == [("subnets", 0), ("subnets", 1), ("subnets", 2)]


def test_fetch_all_applies_filters():
    listing = _subnets(4)
    listing[1]["network_id"] = "net-x"
    listing[3]["network_id"] = "net-x"
    client = MockNetworkingClient(listings={"subnets": listing})

    records = fetch_all(client, SUBNETS, Subnet, filters={"network_id": "net-x"})

    assert [r.id for r in records] == ["sub-1", "sub-3"]


@pytest.mark.parametrize("failing_page", [0, 1, 2])
def test_page_failure_returns_no_partial_result(failing_page):
    client = MockNetworkingClient(page_size=2, listings={"subnets": _subnets(6)})
    client.fail("subnets", page=failing_page)

    with pytest.raises(FetchError) as excinfo:
        fetch_all(client, SUBNETS, Subnet)

    assert excinfo.value.kind == "subnets"
    assert "subnets" in str(excinfo.value)


def test_extraction_failure_is_a_fetch_error():
    client = MockNetworkingClient(listings={"subnets": [{"id": "s1", "ip_version": "six"}]})

    with pytest.raises(ExtractError) as excinfo:
        fetch_all(client, SUBNETS, Subnet)
    assert isinstance(excinfo.value, FetchError)


def test_unexpected_client_error_is_wrapped():
    class BrokenClient(MockNetworkingClient):
        def list_page(self, kind, filters=None):
            raise RuntimeError("socket closed")

    with pytest.raises(FetchError) as excinfo:
        fetch_all(BrokenClient(), NETWORKS, Subnet)

    assert excinfo.value.kind == "networks"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_all_remaining_stops_when_no_more_pages():
    class CountingPage(Page):
        def __init__(self, n, last):
            self.n = n
            self.last = last

        def next(self):
            if self.n == self.last:
                return None, False
            return CountingPage(self.n + 1, self.last), True

    pages = list(CountingPage(0, 3).all_remaining())
    assert [p.n for p in pages] == [0, 1, 2, 3]
