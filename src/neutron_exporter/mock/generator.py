"""
Mock Neutron inventory generator.

Produces a fake but plausible region so we can develop and test without
an OpenStack cloud: a handful of tenant networks on VXLAN plus a flat
provider network, ports with bindings, HA routers spread over three
network nodes, and the usual agent zoo. A few records are deliberately
unhealthy so every derived metric has something to count.
"""

import random
import uuid
from typing import Any, Dict, List

ACTIVE = "ACTIVE"
NETWORK_NODES = ["net-node-1", "net-node-2", "net-node-3"]
AGENT_BINARIES = [
    ("neutron-l3-agent", "L3 agent"),
    ("neutron-dhcp-agent", "DHCP agent"),
    ("neutron-metadata-agent", "Metadata agent"),
    ("neutron-openvswitch-agent", "Open vSwitch agent"),
]


class MockNeutronInventory:

    def __init__(self, seed: int = 42, network_count: int = 6, router_count: int = 3):
        self._rng = random.Random(seed)
        self.projects = [self._uuid() for _ in range(3)]
        self.networks = self._make_networks(network_count)
        self.subnets = self._make_subnets()
        self.ports = self._make_ports()
        self.routers, self.router_agents = self._make_routers(router_count)
        self.floatingips = self._make_floating_ips()
        self.security_groups = [
            {"id": self._uuid(), "name": "default", "project_id": p} for p in self.projects
        ]
        self.agents = self._make_agents()
        self.ip_availabilities = self._make_ip_availabilities()

    def _uuid(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def _mac(self) -> str:
        return "fa:16:3e:" + ":".join(f"{self._rng.randrange(256):02x}" for _ in range(3))

    def _make_networks(self, count: int) -> List[Dict[str, Any]]:
        networks = [{
            "id": self._uuid(),
            "name": "public",
            "admin_state_up": True,
            "status": ACTIVE,
            "tenant_id": self.projects[0],
            "project_id": self.projects[0],
            "router:external": True,
            "provider:network_type": "flat",
            "provider:physical_network": "physnet1",
            "provider:segmentation_id": None,
        }]
        for i in range(count - 1):
            project = self._rng.choice(self.projects)
            networks.append({
                "id": self._uuid(),
                "name": f"tenant-net-{i}",
                "admin_state_up": True,
                "status": ACTIVE if i != 2 else "DOWN",
                "tenant_id": project,
                "project_id": project,
                "provider:network_type": "vxlan",
                "provider:physical_network": None,
                "provider:segmentation_id": 1000 + i,
            })
        return networks

    def _make_subnets(self) -> List[Dict[str, Any]]:
        subnets = []
        for i, net in enumerate(self.networks):
            cidr = "203.0.113.0/24" if i == 0 else f"10.0.{i}.0/24"
            subnets.append({
                "id": self._uuid(),
                "name": f"{net['name']}-subnet",
                "network_id": net["id"],
                "cidr": cidr,
                "ip_version": 4,
                "project_id": net["project_id"],
            })
        return subnets

    def _make_ports(self) -> List[Dict[str, Any]]:
        ports = []
        for subnet in self.subnets[1:]:
            prefix = subnet["cidr"].rsplit(".", 1)[0]
            for host in range(self._rng.randint(2, 5)):
                ports.append({
                    "id": self._uuid(),
                    "network_id": subnet["network_id"],
                    "mac_address": self._mac(),
                    "device_owner": "compute:nova",
                    "device_id": self._uuid(),
                    "status": ACTIVE,
                    "admin_state_up": True,
                    "fixed_ips": [{"subnet_id": subnet["id"], "ip_address": f"{prefix}.{10 + host}"}],
                    "binding:host_id": f"compute-{self._rng.randint(1, 8)}",
                    "binding:vif_type": "ovs",
                    "binding:vnic_type": "normal",
                })
        # An active port that lost its address and a load balancer VIP that
        # never came up.
        ports.append({
            "id": self._uuid(),
            "network_id": self.networks[1]["id"],
            "mac_address": self._mac(),
            "device_owner": "compute:nova",
            "device_id": self._uuid(),
            "status": ACTIVE,
            "admin_state_up": True,
            "fixed_ips": [],
            "binding:host_id": "compute-1",
            "binding:vif_type": "ovs",
            "binding:vnic_type": "normal",
        })
        ports.append({
            "id": self._uuid(),
            "network_id": self.networks[1]["id"],
            "mac_address": self._mac(),
            "device_owner": "neutron:LOADBALANCERV2",
            "device_id": self._uuid(),
            "status": "DOWN",
            "admin_state_up": True,
            "fixed_ips": [{"subnet_id": self.subnets[1]["id"], "ip_address": "10.0.1.250"}],
            "binding:host_id": "",
            "binding:vif_type": "unbound",
            "binding:vnic_type": "normal",
        })
        return ports

    def _make_routers(self, count: int):
        routers = []
        agents_by_router: Dict[str, List[Dict[str, Any]]] = {}
        l3_agent_ids = {host: self._uuid() for host in NETWORK_NODES}
        for i in range(count):
            router_id = self._uuid()
            routers.append({
                "id": router_id,
                "name": f"router-{i}",
                "project_id": self._rng.choice(self.projects),
                "admin_state_up": True,
                "status": ACTIVE if i != count - 1 else "ERROR",
                "external_gateway_info": {"network_id": self.networks[0]["id"]},
            })
            active_host = self._rng.choice(NETWORK_NODES)
            agents_by_router[router_id] = [
                {
                    "id": l3_agent_ids[host],
                    "host": host,
                    "ha_state": "active" if host == active_host else "standby",
                    "alive": host != NETWORK_NODES[-1],
                    "admin_state_up": True,
                }
                for host in NETWORK_NODES
            ]
        return routers, agents_by_router

    def _make_floating_ips(self) -> List[Dict[str, Any]]:
        fips = []
        for i in range(5):
            associated = i < 3
            fips.append({
                "id": self._uuid(),
                "floating_network_id": self.networks[0]["id"],
                "router_id": self.routers[0]["id"] if associated else None,
                "status": "DOWN" if i in (2, 4) else ACTIVE,
                "project_id": self._rng.choice(self.projects),
                "floating_ip_address": f"203.0.113.{20 + i}",
                "fixed_ip_address": f"10.0.1.{100 + i}" if associated else None,
            })
        return fips

    def _make_agents(self) -> List[Dict[str, Any]]:
        agents = []
        for host in NETWORK_NODES:
            for binary, agent_type in AGENT_BINARIES:
                agents.append({
                    "id": self._uuid(),
                    "host": host,
                    "binary": binary,
                    "agent_type": agent_type,
                    "alive": host != NETWORK_NODES[-1],
                    "admin_state_up": True,
                })
        # Some ML2 drivers report agents without an id.
        agents.append({
            "id": "",
            "host": "compute-1",
            "binary": "neutron-sriov-nic-agent",
            "agent_type": "NIC Switch agent",
            "alive": True,
            "admin_state_up": False,
        })
        return agents

    def _make_ip_availabilities(self) -> List[Dict[str, Any]]:
        result = []
        for net, subnet in zip(self.networks, self.subnets):
            used = sum(1 for p in self.ports if p["network_id"] == net["id"])
            result.append({
                "network_id": net["id"],
                "network_name": net["name"],
                "project_id": net["project_id"],
                "tenant_id": net["tenant_id"],
                "total_ips": 253,
                "used_ips": used,
                "subnet_ip_availability": [{
                    "subnet_id": subnet["id"],
                    "subnet_name": subnet["name"],
                    "cidr": subnet["cidr"],
                    "ip_version": 4,
                    "total_ips": 253,
                    "used_ips": used,
                }],
            })
        return result

    def listing(self, path: str) -> List[Dict[str, Any]]:
        """Records for a resource path, as the API would return them."""
        if path.startswith("routers/") and path.endswith("/l3-agents"):
            router_id = path.split("/")[1]
            return self.router_agents.get(router_id, [])
        tables = {
            "floatingips": self.floatingips,
            "networks": self.networks,
            "security-groups": self.security_groups,
            "subnets": self.subnets,
            "ports": self.ports,
            "routers": self.routers,
            "agents": self.agents,
            "network-ip-availabilities": self.ip_availabilities,
        }
        if path not in tables:
            raise KeyError(path)
        return tables[path]
