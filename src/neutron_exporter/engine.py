"""
The exporter engine: one registry, one client, one region.

`collect()` runs a scrape into any sink. `PrometheusCollector` adapts the
engine to prometheus_client so it can be served from a CollectorRegistry.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from neutron_exporter.catalog import NEUTRON_METRICS
from neutron_exporter.client.base import NetworkingClient
from neutron_exporter.collector.base import CollectContext
from neutron_exporter.config import ExporterConfig, slow_metric_predicate, version_gate
from neutron_exporter.errors import ScrapeErrors
from neutron_exporter.metrics import FamilySink, MetricDescriptor, MetricHandle, MetricSink
from neutron_exporter.registry import Registry

log = logging.getLogger(__name__)

NAMESPACE = "openstack"
SUBSYSTEM = "neutron"


@dataclass
class ScrapeResult:
    families: List[Metric]
    errors: ScrapeErrors
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return not self.errors


class NeutronEngine:

    def __init__(
        self,
        config: ExporterConfig,
        client: NetworkingClient,
        catalog: Sequence[MetricDescriptor] = NEUTRON_METRICS,
    ):
        self.config = config
        self.client = client
        # Raises RegistryError on a broken catalog; the exporter must not start.
        self.registry = Registry.build(
            catalog,
            version_gate=version_gate(config),
            slow_predicate=slow_metric_predicate(config),
            namespace=NAMESPACE,
            subsystem=SUBSYSTEM,
        )
        self._context = CollectContext(
            client=client,
            region=config.region,
            id_generator=config.id_generator,
        )

    def describe(self) -> List[MetricHandle]:
        return self.registry.describe()

    def collect(self, sink: MetricSink) -> ScrapeErrors:
        """One full pass over every active collector, writing into `sink`."""
        log.info("Scrape started: source=%s region=%s", self.client.name(), self.config.region)
        errors = self.registry.run_all(self._context, sink, parallel=self.config.parallel)
        if errors:
            log.warning("Scrape finished with %d failed collector(s): %s", len(errors), errors.summary())
        else:
            log.info("Scrape finished")
        return errors

    def scrape(self) -> ScrapeResult:
        sink = FamilySink()
        start = time.monotonic()
        errors = self.collect(sink)
        return ScrapeResult(
            families=sink.families(),
            errors=errors,
            duration_seconds=time.monotonic() - start,
        )

    def name(self) -> str:
        return self.client.name()

    def close(self):
        self.client.close()


class PrometheusCollector(Collector):
    """Serves the engine through prometheus_client.

    Besides the catalog metrics each scrape reports whether every
    collector succeeded, which ones failed, and how long it took.
    """

    def __init__(self, engine: NeutronEngine):
        self._engine = engine
        self._prefix = f"{NAMESPACE}_{SUBSYSTEM}"

    def describe(self) -> Iterator[Metric]:
        for handle in self._engine.describe():
            yield handle.new_family()
        yield from self._status_families(None, 0.0)

    def collect(self) -> Iterator[Metric]:
        result = self._engine.scrape()
        yield from result.families
        yield from self._status_families(result.errors, result.duration_seconds)

    def _status_families(self, errors: Optional[ScrapeErrors], duration: float) -> Iterator[Metric]:
        up = GaugeMetricFamily(f"{self._prefix}_up", "1 if every collector succeeded in this scrape")
        failed = GaugeMetricFamily(
            f"{self._prefix}_collector_failed",
            "1 for each collector that failed in this scrape",
            labels=["collector"],
        )
        elapsed = GaugeMetricFamily(
            f"{self._prefix}_scrape_duration_seconds", "Time spent collecting networking metrics"
        )
        if errors is not None:
            up.add_metric([], 0 if errors else 1)
            for name in errors.failed_collectors:
                failed.add_metric([name], 1)
            elapsed.add_metric([], duration)
        yield up
        yield failed
        yield elapsed
