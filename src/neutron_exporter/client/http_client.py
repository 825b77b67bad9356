"""
Client for a live Neutron endpoint. Lists resources over the v2.0 REST
API and follows the `<key>_links` next-page hrefs Neutron returns when
pagination is enabled.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import httpx

from neutron_exporter.client.base import NetworkingClient, Page, ResourceKind, T
from neutron_exporter.errors import ExtractError, FetchError

log = logging.getLogger(__name__)


class HTTPPage(Page):

    def __init__(self, client: "NeutronHTTPClient", kind: ResourceKind, body: Dict[str, Any]):
        self._client = client
        self.kind = kind
        self.body = body

    def next_url(self) -> Optional[str]:
        for link in self.body.get(f"{self.kind.key}_links") or []:
            if link.get("rel") == "next" and link.get("href"):
                return link["href"]
        return None

    def next(self) -> Tuple[Optional[Page], bool]:
        url = self.next_url()
        # Neutron still sends a next link on a short last page; an empty
        # page means we're done.
        if url is None or not self.body.get(self.kind.key):
            return None, False
        return HTTPPage(self._client, self.kind, self._client.get_json(self.kind, url)), True


class NeutronHTTPClient(NetworkingClient):

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout_seconds: float = 30.0,
        page_size: Optional[int] = None,
    ):
        self._base_url = base_url.rstrip("/")
        if not self._base_url.endswith("/v2.0"):
            self._base_url += "/v2.0"

        headers = {"Accept": "application/json"}
        if token:
            headers["X-Auth-Token"] = token

        self._page_size = page_size
        self._client = httpx.Client(timeout=timeout_seconds, headers=headers)

    def get_json(self, kind: ResourceKind, url: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        log.debug("GET %s params=%s", url, params)
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError(kind.name, exc) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ExtractError(kind.name, f"response is not JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise ExtractError(kind.name, "response body is not an object")
        return body

    def list_page(self, kind: ResourceKind, filters: Optional[Mapping[str, Any]] = None) -> Page:
        params: Dict[str, Any] = dict(filters or {})
        if self._page_size and "limit" not in params:
            params["limit"] = self._page_size
        url = f"{self._base_url}/{kind.path}"
        return HTTPPage(self, kind, self.get_json(kind, url, params=params))

    def extract_into(self, page: Page, record_type: Type[T]) -> List[T]:
        if not isinstance(page, HTTPPage):
            raise TypeError(f"expected HTTPPage, got {type(page).__name__}")
        items = page.body.get(page.kind.key)
        if not isinstance(items, list):
            raise ExtractError(page.kind.name, f"missing {page.kind.key!r} list in response")
        try:
            return [record_type.from_dict(item) for item in items]
        except (AttributeError, TypeError, ValueError) as exc:
            raise ExtractError(page.kind.name, exc) from exc

    def name(self) -> str:
        return f"Neutron ({self._base_url})"

    def close(self):
        self._client.close()
