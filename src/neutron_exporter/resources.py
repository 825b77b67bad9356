"""
Typed records for the networking resources we list, plus the extension
join that folds optional attribute sets (provider network details, port
bindings) onto their base record.

Every field has a zero default so that a record built from a sparse
payload, or a join with a missing extension, is still well formed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Type, TypeVar

T = TypeVar("T")


def _str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return str(value)


def _bool(payload: Mapping[str, Any], key: str) -> bool:
    return bool(payload.get(key) or False)


def _int(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if value in (None, ""):
        return 0
    return int(value)


def join(base, *extensions, into: Type[T]) -> T:
    """Build a flat `into` record from a base record and its extensions.

    An extension only applies when its id matches the base record's id.
    Missing or mismatched extensions leave the joined fields at their
    zero defaults. Base fields are copied as-is and never overwritten.
    """
    values: Dict[str, Any] = {f.name: getattr(base, f.name) for f in fields(base)}
    for ext in extensions:
        if ext is None or getattr(ext, "id", None) != values.get("id"):
            continue
        for f in fields(ext):
            if f.name not in values:
                values[f.name] = getattr(ext, f.name)
    return into(**values)


@dataclass
class FloatingIP:
    id: str = ""
    floating_network_id: str = ""
    router_id: str = ""
    status: str = ""
    project_id: str = ""
    floating_ip_address: str = ""
    fixed_ip_address: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "FloatingIP":
        return cls(
            id=_str(d, "id"),
            floating_network_id=_str(d, "floating_network_id"),
            router_id=_str(d, "router_id"),
            status=_str(d, "status"),
            project_id=_str(d, "project_id"),
            floating_ip_address=_str(d, "floating_ip_address"),
            fixed_ip_address=_str(d, "fixed_ip_address"),
        )


@dataclass
class Network:
    id: str = ""
    name: str = ""
    admin_state_up: bool = False
    status: str = ""
    tenant_id: str = ""
    project_id: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Network":
        return cls(
            id=_str(d, "id"),
            name=_str(d, "name"),
            admin_state_up=_bool(d, "admin_state_up"),
            status=_str(d, "status"),
            tenant_id=_str(d, "tenant_id"),
            project_id=_str(d, "project_id"),
        )


@dataclass
class NetworkProviderExt:
    """The `provider:*` attributes of a network."""

    id: str = ""
    network_type: str = ""
    physical_network: str = ""
    segmentation_id: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "NetworkProviderExt":
        return cls(
            id=_str(d, "id"),
            network_type=_str(d, "provider:network_type"),
            physical_network=_str(d, "provider:physical_network"),
            segmentation_id=_str(d, "provider:segmentation_id"),
        )


@dataclass
class NetworkWithProvider(NetworkProviderExt, Network):

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "NetworkWithProvider":
        return join(Network.from_dict(d), NetworkProviderExt.from_dict(d), into=cls)


@dataclass
class SecurityGroup:
    id: str = ""
    name: str = ""
    project_id: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SecurityGroup":
        return cls(id=_str(d, "id"), name=_str(d, "name"), project_id=_str(d, "project_id"))


@dataclass
class Subnet:
    id: str = ""
    name: str = ""
    network_id: str = ""
    cidr: str = ""
    ip_version: int = 0

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Subnet":
        return cls(
            id=_str(d, "id"),
            name=_str(d, "name"),
            network_id=_str(d, "network_id"),
            cidr=_str(d, "cidr"),
            ip_version=_int(d, "ip_version"),
        )


@dataclass
class Port:
    id: str = ""
    network_id: str = ""
    mac_address: str = ""
    device_owner: str = ""
    device_id: str = ""
    status: str = ""
    admin_state_up: bool = False
    fixed_ips: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Port":
        return cls(
            id=_str(d, "id"),
            network_id=_str(d, "network_id"),
            mac_address=_str(d, "mac_address"),
            device_owner=_str(d, "device_owner"),
            device_id=_str(d, "device_id"),
            status=_str(d, "status"),
            admin_state_up=_bool(d, "admin_state_up"),
            fixed_ips=list(d.get("fixed_ips") or []),
        )


@dataclass
class PortBindingExt:
    """The `binding:*` attributes of a port."""

    id: str = ""
    host_id: str = ""
    vif_type: str = ""
    vnic_type: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PortBindingExt":
        return cls(
            id=_str(d, "id"),
            host_id=_str(d, "binding:host_id"),
            vif_type=_str(d, "binding:vif_type"),
            vnic_type=_str(d, "binding:vnic_type"),
        )


@dataclass
class PortWithBinding(PortBindingExt, Port):

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "PortWithBinding":
        return join(Port.from_dict(d), PortBindingExt.from_dict(d), into=cls)


@dataclass
class Router:
    id: str = ""
    name: str = ""
    project_id: str = ""
    admin_state_up: bool = False
    status: str = ""
    external_network_id: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Router":
        gateway = d.get("external_gateway_info") or {}
        return cls(
            id=_str(d, "id"),
            name=_str(d, "name"),
            project_id=_str(d, "project_id"),
            admin_state_up=_bool(d, "admin_state_up"),
            status=_str(d, "status"),
            external_network_id=_str(gateway, "network_id"),
        )


@dataclass
class L3Agent:
    id: str = ""
    host: str = ""
    ha_state: str = ""
    alive: bool = False
    admin_state_up: bool = False

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "L3Agent":
        return cls(
            id=_str(d, "id"),
            host=_str(d, "host"),
            ha_state=_str(d, "ha_state"),
            alive=_bool(d, "alive"),
            admin_state_up=_bool(d, "admin_state_up"),
        )


@dataclass
class Agent:
    id: str = ""
    host: str = ""
    binary: str = ""
    agent_type: str = ""
    alive: bool = False
    admin_state_up: bool = False

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Agent":
        return cls(
            id=_str(d, "id"),
            host=_str(d, "host"),
            binary=_str(d, "binary"),
            agent_type=_str(d, "agent_type"),
            alive=_bool(d, "alive"),
            admin_state_up=_bool(d, "admin_state_up"),
        )


@dataclass
class SubnetIPAvailability:
    # total/used stay as strings; the API may hand back values too big
    # for a JSON number and the collector owns the parse.
    subnet_id: str = ""
    subnet_name: str = ""
    cidr: str = ""
    ip_version: int = 0
    total_ips: str = ""
    used_ips: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SubnetIPAvailability":
        return cls(
            subnet_id=_str(d, "subnet_id"),
            subnet_name=_str(d, "subnet_name"),
            cidr=_str(d, "cidr"),
            ip_version=_int(d, "ip_version"),
            total_ips=_str(d, "total_ips"),
            used_ips=_str(d, "used_ips"),
        )


@dataclass
class NetworkIPAvailability:
    network_id: str = ""
    network_name: str = ""
    project_id: str = ""
    tenant_id: str = ""
    subnet_ip_availability: List[SubnetIPAvailability] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "NetworkIPAvailability":
        return cls(
            network_id=_str(d, "network_id"),
            network_name=_str(d, "network_name"),
            project_id=_str(d, "project_id"),
            tenant_id=_str(d, "tenant_id"),
            subnet_ip_availability=[
                SubnetIPAvailability.from_dict(s) for s in d.get("subnet_ip_availability") or []
            ],
        )

    @property
    def owner_id(self) -> str:
        """project_id, or tenant_id on older deployments that only set that."""
        return self.project_id or self.tenant_id
