"""
Core metric definitions: what a metric looks like in the catalog, the
handle it becomes once registered, and the sinks observations land in.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric


class ValueKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """One catalog entry.

    `collector` is only set on the descriptor that owns a collector; the
    other metrics that collector writes are declared without one.
    """

    name: str
    labels: Tuple[str, ...] = ()
    collector: Optional[Callable] = None
    min_version: Optional[str] = None
    value_kind: ValueKind = ValueKind.GAUGE
    documentation: str = ""
    slow: bool = False
    # Owning collector's metric name; descriptors sharing a group are
    # registered or skipped together.
    group: str = ""

    @property
    def family(self) -> str:
        return self.group or self.name

    @property
    def help_text(self) -> str:
        return self.documentation or self.name


@dataclass(frozen=True)
class MetricHandle:
    descriptor: MetricDescriptor
    full_name: str

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def labels(self) -> Tuple[str, ...]:
        return self.descriptor.labels

    @property
    def value_kind(self) -> ValueKind:
        return self.descriptor.value_kind

    @property
    def arity(self) -> int:
        return len(self.descriptor.labels)

    def new_family(self) -> Metric:
        family_cls = CounterMetricFamily if self.value_kind is ValueKind.COUNTER else GaugeMetricFamily
        return family_cls(self.full_name, self.descriptor.help_text, labels=list(self.labels))


@dataclass(frozen=True)
class Observation:
    metric_name: str
    value: float
    label_values: Tuple[str, ...]


class MetricSink(Protocol):
    def write(
        self,
        handle: MetricHandle,
        value_kind: ValueKind,
        value: float,
        label_values: Sequence[str],
    ) -> None:
        ...


class FamilySink:
    """Collects observations into prometheus_client metric families.

    Safe for concurrent writers. Families come back in the order their
    first observation arrived.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._families: Dict[str, Metric] = {}

    def write(self, handle, value_kind, value, label_values):
        with self._lock:
            family = self._families.get(handle.full_name)
            if family is None:
                family = handle.new_family()
                self._families[handle.full_name] = family
            family.add_metric(list(label_values), float(value))

    def families(self) -> List[Metric]:
        with self._lock:
            return list(self._families.values())

    def observations(self) -> List[Observation]:
        """Flattened view, mostly for the terminal output and tests."""
        result = []
        for family in self.families():
            for sample in family.samples:
                labels = tuple(sample.labels.values())
                result.append(Observation(sample.name, sample.value, labels))
        return result


@dataclass
class BufferedSink:
    """Holds one collector's writes until it finishes.

    A collector that fails part-way never gets committed, so a scrape
    publishes a metric family completely or not at all.
    """

    pending: List[Tuple[MetricHandle, ValueKind, float, Tuple[str, ...]]] = field(default_factory=list)

    def write(self, handle, value_kind, value, label_values):
        self.pending.append((handle, value_kind, float(value), tuple(label_values)))

    def commit(self, target: MetricSink) -> int:
        for handle, value_kind, value, label_values in self.pending:
            target.write(handle, value_kind, value, label_values)
        count = len(self.pending)
        self.pending = []
        return count

    def discard(self) -> int:
        count = len(self.pending)
        self.pending = []
        return count
