"""
In-memory client over a MockNeutronInventory, or over hand-built records.
Used for --mock runs and by the tests. Failures can be injected per
resource path to exercise collector error handling.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from neutron_exporter.client.base import NetworkingClient, Page, ResourceKind, T
from neutron_exporter.errors import ExtractError, FetchError
from neutron_exporter.mock.generator import MockNeutronInventory


class MockPage(Page):

    def __init__(self, client: "MockNetworkingClient", kind: ResourceKind, records: List[Dict[str, Any]], offset: int):
        self._client = client
        self.kind = kind
        self._records = records
        self.offset = offset
        self.items = records[offset:offset + client.page_size]

    def next(self) -> Tuple[Optional[Page], bool]:
        next_offset = self.offset + self._client.page_size
        if next_offset >= len(self._records):
            return None, False
        self._client.check_failure(self.kind, next_offset // self._client.page_size)
        return MockPage(self._client, self.kind, self._records, next_offset), True


class MockNetworkingClient(NetworkingClient):

    def __init__(
        self,
        inventory: Optional[MockNeutronInventory] = None,
        page_size: int = 2,
        listings: Optional[Mapping[str, List[Dict[str, Any]]]] = None,
    ):
        self.inventory = inventory if inventory is not None else MockNeutronInventory()
        self.page_size = max(1, page_size)
        self._listings = dict(listings or {})
        # path -> (page index that fails, error)
        self._failures: Dict[str, Tuple[int, Exception]] = {}
        self.requests: List[Tuple[str, int]] = []

    def fail(self, path: str, error: Optional[Exception] = None, page: int = 0):
        """Make listing `path` fail when page number `page` is requested."""
        self._failures[path] = (page, error or ConnectionError(f"injected failure for {path}"))

    def check_failure(self, kind: ResourceKind, page_index: int):
        self.requests.append((kind.path, page_index))
        failure = self._failures.get(kind.path)
        if failure is not None and failure[0] == page_index:
            raise FetchError(kind.name, failure[1])

    def _records(self, kind: ResourceKind) -> List[Dict[str, Any]]:
        if kind.path in self._listings:
            return self._listings[kind.path]
        return self.inventory.listing(kind.path)

    def list_page(self, kind: ResourceKind, filters: Optional[Mapping[str, Any]] = None) -> Page:
        self.check_failure(kind, 0)
        records = self._records(kind)
        if filters:
            records = [r for r in records if all(r.get(k) == v for k, v in filters.items())]
        return MockPage(self, kind, records, 0)

    def extract_into(self, page: Page, record_type: Type[T]) -> List[T]:
        if not isinstance(page, MockPage):
            raise TypeError(f"expected MockPage, got {type(page).__name__}")
        try:
            return [record_type.from_dict(item) for item in page.items]
        except (AttributeError, TypeError, ValueError) as exc:
            raise ExtractError(page.kind.name, exc) from exc

    def name(self) -> str:
        return "Mock Neutron (generated inventory)"
