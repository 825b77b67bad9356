"""
Emission adapter between collectors and a sink.

Collectors call `emit(name, value, *label_values)`; this resolves the
registered handle, checks the label arity and writes one observation
with the metric's value kind. A name that isn't registered raises
MetricNotRegistered, whether the catalog never declared it or
configuration filtered it out.
"""

from __future__ import annotations

from neutron_exporter.metrics import MetricSink


class Emitter:

    def __init__(self, registry, sink: MetricSink):
        self._registry = registry
        self._sink = sink

    def __call__(self, name: str, value: float, *label_values: str):
        handle = self._registry.lookup(name)
        if __debug__ and len(label_values) != handle.arity:
            raise ValueError(
                f"{name}: got {len(label_values)} label values for {handle.arity} labels {handle.labels}"
            )
        self._sink.write(handle, handle.value_kind, float(value), label_values)
