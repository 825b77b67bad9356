"""
What a collector gets to work with.

A collector is a plain function `fn(ctx, emit)`: it fetches through
`ctx.client`, derives values, and calls `emit(name, value, *labels)`
once per observation. Raising a CollectorError aborts that collector's
pass without touching the others.
"""

import uuid
from dataclasses import dataclass, field
from typing import Callable

from neutron_exporter.client.base import NetworkingClient


def default_id_generator() -> str:
    return str(uuid.uuid4())


@dataclass
class CollectContext:
    client: NetworkingClient
    region: str
    id_generator: Callable[[], str] = field(default=default_id_generator)
