"""Tests for registry construction, lookup, and running collectors."""

import threading

import pytest

from neutron_exporter.catalog import NEUTRON_METRICS
from neutron_exporter.emitter import Emitter
from neutron_exporter.errors import (
    FetchError,
    MetricNotRegistered,
    RegistryError,
)
from neutron_exporter.metrics import FamilySink, MetricDescriptor, ValueKind
from neutron_exporter.registry import Registry


def test_catalog_names_are_unique():
    names = [d.name for d in NEUTRON_METRICS]
    assert len(names) == len(set(names))
    assert len(names) == 18


def test_catalog_builds_with_expected_collectors():
    registry = Registry.build(NEUTRON_METRICS)

    names = [name for name, _ in registry.collectors()]
    assert names == [
        "floating_ips", "network", "security_groups", "subnets", "port",
        "routers", "agent_state", "network_ip_availabilities_total",
    ]
    assert len(registry.describe()) == 18


def test_catalog_dependents_name_their_owner():
    owners = {d.name for d in NEUTRON_METRICS if d.collector is not None}
    for descriptor in NEUTRON_METRICS:
        if descriptor.collector is None:
            assert descriptor.group in owners, descriptor.name


def test_full_names_are_namespaced():
    registry = Registry.build(NEUTRON_METRICS)
    assert registry.lookup("ports").full_name == "openstack_neutron_ports"
    assert registry.lookup("agent_state").value_kind is ValueKind.COUNTER


def test_duplicate_name_is_fatal():
    catalog = [MetricDescriptor("things", ("region_name",)), MetricDescriptor("things", ("region_name",))]
    with pytest.raises(RegistryError):
        Registry.build(catalog)


@pytest.mark.parametrize("kind", [ValueKind.GAUGE, ValueKind.COUNTER])
@pytest.mark.parametrize("labels", [("__reserved",), ("region_name", "__name__"), ("a", "a")])
def test_bad_label_schema_is_fatal(labels, kind):
    with pytest.raises(RegistryError):
        Registry.build([MetricDescriptor("things", labels, value_kind=kind)])


@pytest.mark.parametrize("kind", [ValueKind.GAUGE, ValueKind.COUNTER])
def test_bad_metric_name_is_fatal(kind):
    # With no namespace or subsystem the full name is empty.
    with pytest.raises(RegistryError) as excinfo:
        Registry.build([MetricDescriptor("", (), value_kind=kind)], namespace="", subsystem="")
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_lookup_unknown_metric_fails_loud():
    registry = Registry.build(NEUTRON_METRICS)
    with pytest.raises(MetricNotRegistered):
        registry.lookup("load_balancers")


def test_version_gate_filters_descriptors():
    catalog = [
        MetricDescriptor("old", ("region_name",), min_version="1.0"),
        MetricDescriptor("new", ("region_name",), min_version="3.0"),
        MetricDescriptor("any", ("region_name",)),
    ]
    registry = Registry.build(catalog, version_gate=lambda d: d.min_version != "3.0")

    assert [h.name for h in registry.describe()] == ["old", "any"]
    with pytest.raises(MetricNotRegistered):
        registry.lookup("new")


def test_slow_predicate_filters_descriptors_and_their_collectors():
    calls = []
    catalog = [
        MetricDescriptor("fast", ("region_name",), lambda ctx, emit: calls.append("fast")),
        MetricDescriptor("slow", ("region_name",), lambda ctx, emit: calls.append("slow"), slow=True),
    ]
    registry = Registry.build(catalog, slow_predicate=lambda d: d.slow)

    assert [name for name, _ in registry.collectors()] == ["fast"]
    registry.run_all(None, FamilySink())
    assert calls == ["fast"]


def test_shared_collector_runs_once():
    calls = []

    def collect(ctx, emit):
        calls.append(1)
        emit("a", 1, "r")
        emit("b", 2, "r")

    catalog = [
        MetricDescriptor("a", ("region_name",), collect),
        MetricDescriptor("b", ("region_name",), collect),
    ]
    registry = Registry.build(catalog)
    sink = FamilySink()

    errors = registry.run_all(None, sink)

    assert not errors
    assert calls == [1]
    assert [o.value for o in sink.observations()] == [1.0, 2.0]


def _family_catalog(collect):
    return [
        MetricDescriptor("count", ("region_name",), collect),
        MetricDescriptor("detail", ("id", "region_name"), group="count"),
        MetricDescriptor("other", ("region_name",), lambda ctx, emit: emit("other", 1, "r")),
    ]


@pytest.mark.parametrize("skipped", ["count", "detail"])
def test_filtering_any_member_drops_the_whole_family(skipped):
    calls = []
    registry = Registry.build(
        _family_catalog(lambda ctx, emit: calls.append(1)),
        slow_predicate=lambda d: d.name == skipped,
    )

    assert [h.name for h in registry.describe()] == ["other"]
    assert [name for name, _ in registry.collectors()] == ["other"]
    registry.run_all(None, FamilySink())
    assert calls == []


def test_emitting_filtered_metric_fails_loud():
    registry = Registry.build(_family_catalog(None), slow_predicate=lambda d: d.name == "detail")
    emit = Emitter(registry, FamilySink())

    with pytest.raises(MetricNotRegistered):
        emit("detail", 1, "x", "r")
    with pytest.raises(MetricNotRegistered):
        emit("count", 1, "r")


def test_collector_emitting_filtered_standalone_metric_propagates():
    # "detail" has no group, so filtering it leaves the collector running.
    def collect(ctx, emit):
        emit("count", 3, "r")
        emit("detail", 1, "x", "r")

    catalog = [
        MetricDescriptor("count", ("region_name",), collect),
        MetricDescriptor("detail", ("id", "region_name")),
    ]
    registry = Registry.build(catalog, slow_predicate=lambda d: d.name == "detail")
    sink = FamilySink()

    with pytest.raises(MetricNotRegistered):
        registry.run_all(None, sink, parallel=False)
    assert sink.observations() == []


def test_emitting_undeclared_metric_propagates():
    def collect(ctx, emit):
        emit("typo", 1, "r")

    registry = Registry.build([MetricDescriptor("count", ("region_name",), collect)])

    with pytest.raises(MetricNotRegistered):
        registry.run_all(None, FamilySink(), parallel=False)


def test_label_arity_mismatch_raises():
    def collect(ctx, emit):
        emit("count", 1, "r", "extra")

    registry = Registry.build([MetricDescriptor("count", ("region_name",), collect)])

    with pytest.raises(ValueError):
        registry.run_all(None, FamilySink(), parallel=False)


@pytest.mark.parametrize("parallel", [True, False])
def test_collector_failure_is_isolated(parallel):
    def good(ctx, emit):
        emit("good", 1, "r")

    def bad(ctx, emit):
        emit("bad", 1, "r")
        raise FetchError("widgets", "connection refused")

    catalog = [
        MetricDescriptor("good", ("region_name",), good),
        MetricDescriptor("bad", ("region_name",), bad),
    ]
    registry = Registry.build(catalog)
    sink = FamilySink()

    errors = registry.run_all(None, sink, parallel=parallel)

    assert errors.failed_collectors == ["bad"]
    assert errors.failures[0][1].collector == "bad"
    assert "widgets" in errors.summary()
    assert [o.metric_name for o in sink.observations()] == ["openstack_neutron_good"]


def test_parallel_run_uses_one_thread_per_collector():
    barrier = threading.Barrier(3, timeout=5)

    def make(name):
        def collect(ctx, emit):
            # Only passes if all three collectors are running at once
            barrier.wait()
            emit(name, 1, "r")
        return collect

    catalog = [MetricDescriptor(n, ("region_name",), make(n)) for n in ("x", "y", "z")]
    registry = Registry.build(catalog)
    sink = FamilySink()

    errors = registry.run_all(None, sink, parallel=True)

    assert not errors
    assert len(sink.observations()) == 3
