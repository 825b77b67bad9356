"""
Tests for the httpx Neutron client using the fake Neutron server.

Starts the fake server in a thread, points the client at it, and checks
pagination, error mapping, and a full scrape over HTTP.
"""

import threading
import time
from http.server import HTTPServer

import pytest

from neutron_exporter.client.base import AGENTS, NETWORKS, ROUTER_L3_AGENTS, ROUTERS, ResourceKind
from neutron_exporter.client.http_client import NeutronHTTPClient
from neutron_exporter.config import ExporterConfig
from neutron_exporter.engine import NeutronEngine
from neutron_exporter.errors import FetchError
from neutron_exporter.fetcher import fetch_all
from neutron_exporter.mock import fake_neutron_server
from neutron_exporter.mock.fake_neutron_server import _NeutronHandler
from neutron_exporter.resources import Agent, L3Agent, Network, Router


def _start_test_server(port: int) -> HTTPServer:
    server = HTTPServer(("127.0.0.1", port), _NeutronHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    time.sleep(0.2)  # let it bind
    return server


@pytest.fixture(scope="module")
def server_url():
    server = _start_test_server(19696)
    yield "http://127.0.0.1:19696"
    server.shutdown()
    server.server_close()


@pytest.mark.parametrize("page_size", [None, 1, 2, 6, 7])
def test_fetch_all_over_http(server_url, page_size):
    client = NeutronHTTPClient(server_url, page_size=page_size)
    try:
        networks = fetch_all(client, NETWORKS, Network)
    finally:
        client.close()

    expected = [n["id"] for n in fake_neutron_server._inventory.networks]
    assert [n.id for n in networks] == expected


def test_agents_without_id_paginate(server_url):
    client = NeutronHTTPClient(server_url, page_size=1)
    try:
        agents = fetch_all(client, AGENTS, Agent)
    finally:
        client.close()

    assert len(agents) == len(fake_neutron_server._inventory.agents)
    assert agents[-1].id == ""


def test_nested_router_agents(server_url):
    client = NeutronHTTPClient(server_url + "/v2.0/", page_size=2)
    try:
        routers = fetch_all(client, ROUTERS, Router)
        agents = fetch_all(client, ROUTER_L3_AGENTS.for_parent(routers[0].id), L3Agent)
    finally:
        client.close()

    assert len(routers) == len(fake_neutron_server._inventory.routers)
    assert len(agents) == 3


def test_missing_resource_is_fetch_error(server_url):
    client = NeutronHTTPClient(server_url)
    try:
        with pytest.raises(FetchError) as excinfo:
            fetch_all(client, ResourceKind("trunks", "trunks", "trunks"), Network)
    finally:
        client.close()
    assert excinfo.value.kind == "trunks"


def test_unreachable_endpoint_is_fetch_error():
    client = NeutronHTTPClient("http://127.0.0.1:1", timeout_seconds=1.0)
    try:
        with pytest.raises(FetchError):
            fetch_all(client, NETWORKS, Network)
    finally:
        client.close()


def test_engine_scrape_over_http(server_url):
    config = ExporterConfig(region="RegionHTTP", page_size=2)
    engine = NeutronEngine(config, NeutronHTTPClient(server_url, page_size=2))
    try:
        result = engine.scrape()
    finally:
        engine.close()

    assert result.ok, result.errors.summary()
    counts = {
        s.name: s.value for f in result.families for s in f.samples if list(s.labels) == ["region_name"]
    }
    assert counts["openstack_neutron_networks"] == len(fake_neutron_server._inventory.networks)
    assert counts["openstack_neutron_ports"] == len(fake_neutron_server._inventory.ports)


def test_client_name_includes_url():
    client = NeutronHTTPClient("http://localhost:9696")
    assert "localhost:9696/v2.0" in client.name()
    client.close()


def test_token_header_is_sent():
    client = NeutronHTTPClient("http://localhost:9696", token="abc")
    assert client._client.headers["X-Auth-Token"] == "abc"
    client.close()
