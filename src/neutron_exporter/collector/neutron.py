"""
Collectors for the networking service, one per resource kind.

Each lists its resources once per scrape, emits a detail series per
record where the catalog has one, and finishes with the aggregate
counts. Label values are passed in the exact order of the metric's
label schema in catalog.py.
"""

from __future__ import annotations

import re

from neutron_exporter.client import base as kinds
from neutron_exporter.collector.base import CollectContext
from neutron_exporter.errors import IdentifierGenerationError, NumericParseError
from neutron_exporter.fetcher import fetch_all
from neutron_exporter.resources import (
    Agent,
    FloatingIP,
    L3Agent,
    NetworkIPAvailability,
    NetworkWithProvider,
    PortWithBinding,
    Router,
    SecurityGroup,
    Subnet,
)

ACTIVE = "ACTIVE"
LOADBALANCER_OWNER = "neutron:LOADBALANCERV2"

# Plain decimal or exponent literals, plus inf/nan. float() alone would
# also take surrounding whitespace and digit separators.
_NUMBER_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def parse_float(field_name: str, raw: str) -> float:
    if not isinstance(raw, str) or not _NUMBER_RE.fullmatch(raw):
        raise NumericParseError(field_name, raw)
    return float(raw)


def list_floating_ips(ctx: CollectContext, emit):
    """Every floating IP, plus how many are bound to a port but not ACTIVE."""
    fips = fetch_all(ctx.client, kinds.FLOATING_IPS, FloatingIP)

    associated_not_active = 0
    for fip in fips:
        emit("floating_ip", 1,
             fip.id, fip.floating_network_id, fip.router_id, fip.status,
             fip.project_id, fip.floating_ip_address, ctx.region)
        if fip.fixed_ip_address and fip.status != ACTIVE:
            associated_not_active += 1

    emit("floating_ips", len(fips), ctx.region)
    emit("floating_ips_associated_not_active", associated_not_active, ctx.region)


def list_networks(ctx: CollectContext, emit):
    networks = fetch_all(ctx.client, kinds.NETWORKS, NetworkWithProvider)

    for net in networks:
        emit("network", 1,
             net.id, net.name, format_bool(net.admin_state_up), net.status,
             net.tenant_id, net.project_id, ctx.region,
             net.network_type, net.physical_network, net.segmentation_id)

    emit("networks", len(networks), ctx.region)


def list_security_groups(ctx: CollectContext, emit):
    groups = fetch_all(ctx.client, kinds.SECURITY_GROUPS, SecurityGroup)
    emit("security_groups", len(groups), ctx.region)


def list_subnets(ctx: CollectContext, emit):
    subnets = fetch_all(ctx.client, kinds.SUBNETS, Subnet)
    emit("subnets", len(subnets), ctx.region)


def list_ports(ctx: CollectContext, emit):
    """Ports with their binding type. Also counts active ports with no
    address and load balancer ports that aren't ACTIVE; a port can land
    in both."""
    ports = fetch_all(ctx.client, kinds.PORTS, PortWithBinding)

    no_ips = 0
    lb_not_active = 0
    for port in ports:
        if port.status == ACTIVE and not port.fixed_ips:
            no_ips += 1
        if port.device_owner == LOADBALANCER_OWNER and port.status != ACTIVE:
            lb_not_active += 1

        emit("port", 1,
             port.id, port.network_id, port.mac_address, port.device_owner,
             port.status, port.vif_type, format_bool(port.admin_state_up),
             port.device_id, ctx.region)

    emit("ports", len(ports), ctx.region)
    emit("ports_lb_not_active", lb_not_active, ctx.region)
    emit("ports_no_ips", no_ips, ctx.region)


def list_routers(ctx: CollectContext, emit):
    """Routers and the L3 agents hosting each one.

    Needs one extra listing per router. If any of those fails the whole
    collector fails; the registry then drops everything emitted so far.
    """
    routers = fetch_all(ctx.client, kinds.ROUTERS, Router)

    not_active = 0
    for router in routers:
        if router.status != ACTIVE:
            not_active += 1

        agents = fetch_all(ctx.client, kinds.ROUTER_L3_AGENTS.for_parent(router.id), L3Agent)
        for agent in agents:
            emit("l3_agent_of_router", 1 if agent.alive else 0,
                 router.id, agent.id, agent.ha_state, format_bool(agent.alive),
                 format_bool(agent.admin_state_up), agent.host, ctx.region)

        emit("router", 1,
             router.id, router.name, router.project_id, format_bool(router.admin_state_up),
             router.status, router.external_network_id, ctx.region)

    emit("routers", len(routers), ctx.region)
    emit("routers_not_active", not_active, ctx.region)


def list_agent_states(ctx: CollectContext, emit):
    """1 per live agent, 0 per dead one. Agents that come back without an
    id get a generated one so they don't collide with each other."""
    agents = fetch_all(ctx.client, kinds.AGENTS, Agent)

    for agent in agents:
        agent_id = agent.id
        if not agent_id:
            try:
                agent_id = ctx.id_generator()
            except Exception as exc:
                raise IdentifierGenerationError(f"cannot generate id for agent on {agent.host}: {exc}") from exc

        emit("agent_state", 1 if agent.alive else 0,
             agent_id, agent.host, agent.binary,
             "up" if agent.admin_state_up else "down", ctx.region)


def list_network_ip_availabilities(ctx: CollectContext, emit):
    """Total and used addresses per subnet."""
    availabilities = fetch_all(ctx.client, kinds.NETWORK_IP_AVAILABILITIES, NetworkIPAvailability)

    for net in availabilities:
        for subnet in net.subnet_ip_availability:
            labels = (net.network_id, net.network_name, str(subnet.ip_version),
                      subnet.cidr, subnet.subnet_name, net.owner_id, ctx.region)
            emit("network_ip_availabilities_total", parse_float("total_ips", subnet.total_ips), *labels)
            emit("network_ip_availabilities_used", parse_float("used_ips", subnet.used_ips), *labels)
