"""
The networking metric catalog.

Order matters only for presentation. Label tuples are the contract with
the collectors in collector/neutron.py: values are emitted positionally.
A descriptor without a collector names its owner in `group`; a family is
registered or filtered as a whole.
"""

from neutron_exporter.collector.neutron import (
    list_agent_states,
    list_floating_ips,
    list_network_ip_availabilities,
    list_networks,
    list_ports,
    list_routers,
    list_security_groups,
    list_subnets,
)
from neutron_exporter.metrics import MetricDescriptor, ValueKind

REGION = ("region_name",)
IP_AVAILABILITY_LABELS = (
    "network_id", "network_name", "ip_version", "cidr", "subnet_name", "project_id", "region_name",
)

NEUTRON_METRICS = (
    MetricDescriptor("floating_ips", REGION, list_floating_ips,
                     documentation="Number of floating IPs"),
    MetricDescriptor("floating_ips_associated_not_active", REGION,
                     documentation="Floating IPs bound to a fixed IP but not ACTIVE", group="floating_ips"),
    MetricDescriptor("floating_ip",
                     ("id", "floating_network_id", "router_id", "status", "project_id",
                      "floating_ip_address", "region_name"),
                     documentation="Floating IP details", group="floating_ips"),
    MetricDescriptor("network",
                     ("id", "name", "admin_state_up", "status", "tenant_id", "project_id",
                      "region_name", "type", "physical_network", "seg_id"),
                     list_networks,
                     documentation="Network details"),
    MetricDescriptor("networks", REGION, group="network", documentation="Number of networks"),
    MetricDescriptor("security_groups", REGION, list_security_groups,
                     documentation="Number of security groups"),
    MetricDescriptor("subnets", REGION, list_subnets, documentation="Number of subnets"),
    MetricDescriptor("port",
                     ("uuid", "network_id", "mac_address", "device_owner", "status",
                      "binding_vif_type", "admin_state_up", "device_id", "region_name"),
                     list_ports,
                     documentation="Port details"),
    MetricDescriptor("ports", REGION, group="port", documentation="Number of ports"),
    MetricDescriptor("ports_no_ips", REGION, group="port",
                     documentation="ACTIVE ports without a fixed IP"),
    MetricDescriptor("ports_lb_not_active", REGION,
                     documentation="Load balancer ports that are not ACTIVE", group="port"),
    MetricDescriptor("router",
                     ("id", "name", "project_id", "admin_state_up", "status",
                      "external_network_id", "region_name"),
                     documentation="Router details", group="routers"),
    MetricDescriptor("routers", REGION, list_routers, documentation="Number of routers"),
    MetricDescriptor("routers_not_active", REGION, group="routers",
                     documentation="Routers that are not ACTIVE"),
    MetricDescriptor("l3_agent_of_router",
                     ("router_id", "l3_agent_id", "ha_state", "agent_alive", "agent_admin_up",
                      "agent_host", "region_name"),
                     documentation="L3 agents hosting a router (1 = agent alive)", group="routers"),
    MetricDescriptor("agent_state", ("id", "hostname", "service", "adminState", "region_name"),
                     list_agent_states, value_kind=ValueKind.COUNTER,
                     documentation="Agent liveness (1 = alive, 0 = dead)"),
    MetricDescriptor("network_ip_availabilities_total", IP_AVAILABILITY_LABELS,
                     list_network_ip_availabilities,
                     documentation="Total IPs in a subnet"),
    MetricDescriptor("network_ip_availabilities_used", IP_AVAILABILITY_LABELS,
                     documentation="Used IPs in a subnet",
                     group="network_ip_availabilities_total"),
)
