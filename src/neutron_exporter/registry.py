"""
Metric registry. Built once from the catalog at startup, read-only after
that, so collectors running on worker threads can look handles up
without locking.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from prometheus_client import Counter, Gauge

from neutron_exporter.emitter import Emitter
from neutron_exporter.errors import CollectorError, MetricNotRegistered, RegistryError, ScrapeErrors
from neutron_exporter.metrics import BufferedSink, MetricDescriptor, MetricHandle, MetricSink, ValueKind

log = logging.getLogger(__name__)

DescriptorPredicate = Callable[[MetricDescriptor], bool]

_TYPE_MAP = {
    ValueKind.GAUGE: Gauge,
    ValueKind.COUNTER: Counter,
}


def _validate(descriptor: MetricDescriptor, full_name: str):
    # prometheus_client owns the naming rules; build an unregistered
    # metric and let its constructor reject the schema.
    ctor = _TYPE_MAP[descriptor.value_kind]
    try:
        ctor(full_name, descriptor.help_text, labelnames=list(descriptor.labels), registry=None)
    except ValueError as exc:
        raise RegistryError(f"{descriptor.name}: {exc}") from exc
    if len(set(descriptor.labels)) != len(descriptor.labels):
        raise RegistryError(f"{descriptor.name}: duplicate label in {descriptor.labels}")


class Registry:

    def __init__(self, handles: Dict[str, MetricHandle], collectors: List[Tuple[str, Callable]]):
        self._handles = handles
        self._collectors = tuple(collectors)

    @classmethod
    def build(
        cls,
        catalog: Iterable[MetricDescriptor],
        version_gate: Optional[DescriptorPredicate] = None,
        slow_predicate: Optional[DescriptorPredicate] = None,
        namespace: str = "openstack",
        subsystem: str = "neutron",
    ) -> "Registry":
        """Register every descriptor that passes the gate and isn't slow.

        version_gate returns True to keep a descriptor; slow_predicate
        returns True to skip it. Filtering works on whole families: if any
        member of a group is skipped, its owner and every other member are
        skipped too, so a registered collector never emits an unregistered
        name. Raises RegistryError on a bad schema.
        """
        descriptors = list(catalog)
        declared: Set[str] = set()
        skipped_groups: Set[str] = set()

        for descriptor in descriptors:
            if descriptor.name in declared:
                raise RegistryError(f"duplicate metric name {descriptor.name!r}")
            declared.add(descriptor.name)

            if version_gate is not None and not version_gate(descriptor):
                log.info("Skipping %s family: %s is outside the configured release",
                         descriptor.family, descriptor.name)
                skipped_groups.add(descriptor.family)
            elif slow_predicate is not None and slow_predicate(descriptor):
                log.info("Skipping %s family: %s is disabled", descriptor.family, descriptor.name)
                skipped_groups.add(descriptor.family)

        handles: Dict[str, MetricHandle] = {}
        collectors: List[Tuple[str, Callable]] = []
        seen_fns: Set[int] = set()

        for descriptor in descriptors:
            if descriptor.family in skipped_groups:
                continue

            full_name = "_".join(part for part in (namespace, subsystem, descriptor.name) if part)
            _validate(descriptor, full_name)
            handles[descriptor.name] = MetricHandle(descriptor=descriptor, full_name=full_name)

            fn = descriptor.collector
            if fn is not None and id(fn) not in seen_fns:
                seen_fns.add(id(fn))
                collectors.append((descriptor.name, fn))

        log.info("Registered %d metrics, %d collectors", len(handles), len(collectors))
        return cls(handles, collectors)

    def lookup(self, name: str) -> MetricHandle:
        handle = self._handles.get(name)
        if handle is None:
            raise MetricNotRegistered(name)
        return handle

    def describe(self) -> List[MetricHandle]:
        return list(self._handles.values())

    def collectors(self) -> List[Tuple[str, Callable]]:
        return list(self._collectors)

    def _run_one(self, name: str, fn: Callable, context, sink: MetricSink) -> Optional[CollectorError]:
        buffer = BufferedSink()
        start = time.monotonic()
        try:
            fn(context, Emitter(self, buffer))
        except CollectorError as exc:
            exc.collector = name
            dropped = buffer.discard()
            log.warning("Collector %s failed, dropped %d observation(s): %s", name, dropped, exc)
            return exc
        written = buffer.commit(sink)
        log.debug("Collector %s wrote %d observation(s) in %.3fs", name, written, time.monotonic() - start)
        return None

    def run_all(self, context, sink: MetricSink, parallel: bool = True) -> ScrapeErrors:
        """Run each distinct collector once. Collector failures are gathered
        and returned; anything else (a bug) propagates."""
        errors = ScrapeErrors()
        if not self._collectors:
            return errors

        if parallel and len(self._collectors) > 1:
            with ThreadPoolExecutor(max_workers=len(self._collectors), thread_name_prefix="collector") as pool:
                futures = [
                    (name, pool.submit(self._run_one, name, fn, context, sink))
                    for name, fn in self._collectors
                ]
                results = [(name, future.result()) for name, future in futures]
        else:
            results = [(name, self._run_one(name, fn, context, sink)) for name, fn in self._collectors]

        for name, error in results:
            if error is not None:
                errors.add(name, error)
        return errors
