"""
Interface to the networking API.

The exporter only needs two things from a client: start listing a
resource kind, and turn a page into typed records. Pages chain through
`next()` until the client says there are no more. Keeping this abstract
lets the collectors run the same way against the real HTTP API, the
in-memory mock, and test doubles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ResourceKind:
    """A listable resource: display name, URL path and the JSON key of
    the record list in the response body."""

    name: str
    path: str
    key: str

    def for_parent(self, parent_id: str) -> "ResourceKind":
        """Fill a `{id}` placeholder, for nested listings like a router's agents."""
        return ResourceKind(self.name, self.path.format(id=parent_id), self.key)


FLOATING_IPS = ResourceKind("floating IPs", "floatingips", "floatingips")
NETWORKS = ResourceKind("networks", "networks", "networks")
SECURITY_GROUPS = ResourceKind("security groups", "security-groups", "security_groups")
SUBNETS = ResourceKind("subnets", "subnets", "subnets")
PORTS = ResourceKind("ports", "ports", "ports")
ROUTERS = ResourceKind("routers", "routers", "routers")
ROUTER_L3_AGENTS = ResourceKind("router l3 agents", "routers/{id}/l3-agents", "agents")
AGENTS = ResourceKind("agents", "agents", "agents")
NETWORK_IP_AVAILABILITIES = ResourceKind(
    "network IP availabilities", "network-ip-availabilities", "network_ip_availabilities"
)


class Page(ABC):
    """One page of a listing. Consumed once, front to back."""

    @abstractmethod
    def next(self) -> Tuple[Optional["Page"], bool]:
        """Fetch the following page. Returns (page, has_more); when
        has_more is False the page is None."""
        ...

    def all_remaining(self) -> Iterator["Page"]:
        """Yield this page and every page after it."""
        page: Optional[Page] = self
        while page is not None:
            yield page
            page, has_more = page.next()
            if not has_more:
                break


class NetworkingClient(ABC):

    @abstractmethod
    def list_page(self, kind: ResourceKind, filters: Optional[Mapping[str, Any]] = None) -> Page:
        """Fetch the first page of a listing."""
        ...

    @abstractmethod
    def extract_into(self, page: Page, record_type: Type[T]) -> List[T]:
        """Decode one page into records of `record_type`."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        pass
