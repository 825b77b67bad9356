"""
neutron-exporter entry point.

Usage:
    neutron-exporter --mock serve                         Serve mock metrics on :9180
    neutron-exporter --url http://neutron:9696 serve      Serve a live region
    neutron-exporter --mock scrape                        One scrape, printed as tables
    neutron-exporter --mock describe                      List the active metrics
"""

from __future__ import annotations

import logging
import time

import click

from neutron_exporter import __version__
from neutron_exporter.client.http_client import NeutronHTTPClient
from neutron_exporter.client.mock_client import MockNetworkingClient
from neutron_exporter.config import ExporterConfig
from neutron_exporter.engine import NeutronEngine


log = logging.getLogger("neutron_exporter")


def _build_engine(obj: dict) -> NeutronEngine:
    config: ExporterConfig = obj["config"]
    if not obj["mock"] and not config.endpoint:
        click.echo("Please specify a data source: --mock or --url <endpoint>")
        raise SystemExit(1)

    if obj["mock"]:
        client = MockNetworkingClient(page_size=config.page_size or 2)
    else:
        client = NeutronHTTPClient(
            base_url=config.endpoint,
            token=config.token,
            timeout_seconds=config.timeout_seconds,
            page_size=config.page_size,
        )
    return NeutronEngine(config, client)


@click.group()
@click.version_option(version=__version__, prog_name="neutron-exporter")
@click.option("--mock", is_flag=True, default=False, help="Use a generated fake inventory")
@click.option("--url", default=None, help="Neutron endpoint (e.g. http://controller:9696)")
@click.option("--token", default=None, help="Keystone token (default: $OS_TOKEN)")
@click.option("--region", default=None, help="region_name label value (default: $OS_REGION_NAME)")
@click.option("--release", default=None, help="Active release for version-gated metrics")
@click.option("--page-size", type=int, default=None, help="Records per API page")
@click.option("--timeout", default=30.0, help="HTTP timeout in seconds")
@click.option("--disable-slow-metrics", is_flag=True, default=False, help="Skip metrics marked slow")
@click.option("--disable-metric", "disabled", multiple=True, help="Metric whose collector family to skip, e.g. neutron-port (repeatable)")
@click.option("--sequential", is_flag=True, default=False, help="Run collectors one at a time")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, mock: bool, url: str, token: str, region: str, release: str, page_size: int,
        timeout: float, disable_slow_metrics: bool, disabled: tuple, sequential: bool, verbose: bool):
    """neutron-exporter - OpenStack networking metrics for Prometheus."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["mock"] = mock
    ctx.obj["config"] = ExporterConfig.from_env(
        endpoint=url,
        token=token,
        region=region,
        release=release,
        page_size=page_size,
        timeout_seconds=timeout,
        disable_slow_metrics=disable_slow_metrics,
        disabled_metrics=tuple(disabled),
        parallel=not sequential,
    )


@cli.command()
@click.option("--port", default=9180, help="Port for the /metrics endpoint")
@click.option("--addr", default="0.0.0.0", help="Address to bind")
@click.pass_context
def serve(ctx, port: int, addr: str):
    """Expose metrics over HTTP for Prometheus to scrape."""
    from prometheus_client import CollectorRegistry, start_http_server
    from neutron_exporter.engine import PrometheusCollector

    engine = _build_engine(ctx.obj)
    registry = CollectorRegistry()
    registry.register(PrometheusCollector(engine))

    start_http_server(port, addr=addr, registry=registry)
    click.echo(f"Serving {engine.name()} metrics on http://{addr}:{port}/metrics")
    log.info("Exporter listening on %s:%d", addr, port)

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        pass
    finally:
        engine.close()


@cli.command()
@click.option("--output", type=click.Choice(["table", "jsonl"]), default="table",
              help="Output mode: table (Rich) or jsonl (one JSON line per sample)")
@click.pass_context
def scrape(ctx, output: str):
    """Run a single scrape and print the result."""
    from neutron_exporter.dashboard.terminal import print_scrape, write_jsonl

    engine = _build_engine(ctx.obj)
    try:
        result = engine.scrape()
    finally:
        engine.close()

    if output == "jsonl":
        write_jsonl(result, engine.name())
    else:
        print_scrape(result, engine.name())

    if not result.ok:
        raise SystemExit(2)


@cli.command()
@click.option("--refresh", default=15.0, help="Seconds between scrapes")
@click.pass_context
def watch(ctx, refresh: float):
    """Live terminal view, re-scraping every --refresh seconds."""
    from neutron_exporter.dashboard.terminal import run_watch

    engine = _build_engine(ctx.obj)
    try:
        run_watch(engine, refresh_interval=refresh)
    finally:
        engine.close()


@cli.command()
@click.pass_context
def describe(ctx):
    """List the metrics that are active with the current options."""
    from neutron_exporter.dashboard.terminal import print_catalog

    engine = _build_engine(ctx.obj)
    try:
        print_catalog(engine.describe())
    finally:
        engine.close()


if __name__ == "__main__":
    cli()
