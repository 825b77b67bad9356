"""
Exporter configuration and the two descriptor filters derived from it.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from neutron_exporter.collector.base import default_id_generator
from neutron_exporter.metrics import MetricDescriptor

DEFAULT_REGION = "RegionOne"
SERVICE_PREFIX = "neutron-"


@dataclass
class ExporterConfig:
    region: str = DEFAULT_REGION
    endpoint: Optional[str] = None
    token: Optional[str] = None
    release: Optional[str] = None
    disable_slow_metrics: bool = False
    disabled_metrics: Tuple[str, ...] = ()
    id_generator: Callable[[], str] = field(default=default_id_generator)
    parallel: bool = True
    page_size: Optional[int] = None
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls, **overrides) -> "ExporterConfig":
        """Defaults from the usual OS_* variables; explicit non-None overrides win."""
        values = dict(
            region=os.environ.get("OS_REGION_NAME", DEFAULT_REGION),
            endpoint=os.environ.get("OS_NETWORK_ENDPOINT"),
            token=os.environ.get("OS_TOKEN"),
            release=os.environ.get("NEUTRON_EXPORTER_RELEASE"),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


_VERSION_RE = re.compile(r"^\d+(\.\d+)*$")


def parse_version(text: str) -> Tuple[int, ...]:
    text = text.strip()
    if not _VERSION_RE.match(text):
        raise ValueError(f"not a dotted numeric version: {text!r}")
    return tuple(int(part) for part in text.split("."))


def version_gate(config: ExporterConfig) -> Callable[[MetricDescriptor], bool]:
    """Keep a descriptor unless it needs a newer release than configured.
    With no release configured everything is kept."""
    if not config.release:
        return lambda descriptor: True
    active = parse_version(config.release)

    def gate(descriptor: MetricDescriptor) -> bool:
        if not descriptor.min_version:
            return True
        return parse_version(descriptor.min_version) <= active

    return gate


def slow_metric_predicate(config: ExporterConfig) -> Callable[[MetricDescriptor], bool]:
    """True for descriptors that should not be registered: slow ones when
    those are disabled, and anything named in disabled_metrics (bare or
    with the `neutron-` prefix)."""
    disabled = {name[len(SERVICE_PREFIX):] if name.startswith(SERVICE_PREFIX) else name
                for name in config.disabled_metrics}

    def skip(descriptor: MetricDescriptor) -> bool:
        if descriptor.name in disabled:
            return True
        return config.disable_slow_metrics and descriptor.slow

    return skip
