"""
Generic paginated fetch used by every collector.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Type

from neutron_exporter.client.base import NetworkingClient, ResourceKind, T
from neutron_exporter.errors import FetchError

log = logging.getLogger(__name__)


def fetch_all(
    client: NetworkingClient,
    kind: ResourceKind,
    record_type: Type[T],
    filters: Optional[Mapping[str, Any]] = None,
) -> List[T]:
    """List every record of `kind`, walking pages until the client runs out.

    Records keep page order. Any failure along the way raises FetchError
    naming the resource kind; nothing fetched before it is returned.
    """
    records: List[T] = []
    pages = 0
    try:
        for page in client.list_page(kind, filters).all_remaining():
            records.extend(client.extract_into(page, record_type))
            pages += 1
    except FetchError:
        raise
    except Exception as exc:
        raise FetchError(kind.name, exc) from exc

    log.debug("Fetched %d %s across %d page(s)", len(records), kind.name, pages)
    return records
