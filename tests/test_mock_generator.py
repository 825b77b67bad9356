"""Basic sanity checks for the mock inventory generator."""

from neutron_exporter.mock.generator import MockNeutronInventory


def test_inventory_has_every_resource_kind():
    inv = MockNeutronInventory(seed=42)

    for path in ["floatingips", "networks", "security-groups", "subnets", "ports",
                 "routers", "agents", "network-ip-availabilities"]:
        assert len(inv.listing(path)) > 0, f"empty listing: {path}"


def test_every_router_has_l3_agents():
    inv = MockNeutronInventory(seed=42)

    for router in inv.routers:
        agents = inv.listing(f"routers/{router['id']}/l3-agents")
        assert len(agents) == 3
        assert sum(1 for a in agents if a["ha_state"] == "active") == 1


def test_inventory_includes_unhealthy_records():
    inv = MockNeutronInventory(seed=42)

    assert any(a["id"] == "" for a in inv.agents)
    assert any(p["status"] == "ACTIVE" and not p["fixed_ips"] for p in inv.ports)
    assert any(p["device_owner"] == "neutron:LOADBALANCERV2" and p["status"] != "ACTIVE" for p in inv.ports)
    assert any(r["status"] != "ACTIVE" for r in inv.routers)


def test_deterministic_with_same_seed():
    inv_a = MockNeutronInventory(seed=99)
    inv_b = MockNeutronInventory(seed=99)

    assert inv_a.networks == inv_b.networks
    assert inv_a.ports == inv_b.ports


def test_unknown_path_raises():
    inv = MockNeutronInventory(seed=42)
    try:
        inv.listing("trunks")
        assert False, "expected KeyError"
    except KeyError:
        pass
