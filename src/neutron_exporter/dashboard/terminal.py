"""Terminal output using Rich: one-shot scrape tables, a live watch view, and JSONL."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from neutron_exporter import __version__
from neutron_exporter.engine import NeutronEngine, ScrapeResult
from neutron_exporter.metrics import MetricHandle

log = logging.getLogger(__name__)

# Families with only a region label are the headline counts
SUMMARY_LABELS = ["region_name"]
MAX_DETAIL_ROWS = 40


def _format_value(value: float) -> str:
    if value == int(value):
        return f"{int(value):,}"
    return f"{value:.2f}"


def build_summary_table(result: ScrapeResult) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")

    for family in result.families:
        if len(family.samples) != 1 or list(family.samples[0].labels) != SUMMARY_LABELS:
            continue
        sample = family.samples[0]
        color = "red" if sample.value and ("not_active" in sample.name or "no_ips" in sample.name) else "white"
        table.add_row(sample.name, f"[{color}]{_format_value(sample.value)}[/{color}]")
    return table


def build_detail_table(result: ScrapeResult, limit: int = MAX_DETAIL_ROWS) -> Table:
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Series")
    table.add_column("Value", justify="right", width=8)

    shown = 0
    total = 0
    for family in result.families:
        for sample in family.samples:
            if list(sample.labels) == SUMMARY_LABELS:
                continue
            total += 1
            if shown >= limit:
                continue
            labels = escape(", ".join(f"{k}={v}" for k, v in sample.labels.items() if k != "region_name" and v))
            table.add_row(f"{sample.name}[dim]{{{labels}}}[/dim]", _format_value(sample.value))
            shown += 1

    if total > shown:
        table.add_row(f"[dim]... {total - shown} more series[/dim]", "")
    return table


def build_errors_panel(result: ScrapeResult) -> Panel:
    if not result.errors:
        return Panel(Text("  All collectors succeeded", style="bold green"), title="Collectors", border_style="green")

    table = Table(show_header=False, expand=True, padding=(0, 1))
    table.add_column("collector", width=32)
    table.add_column("error")
    for name, error in result.errors.failures:
        table.add_row(f"[bold red]{name}[/bold red]", str(error))
    return Panel(table, title=f"Failed collectors ({len(result.errors)})", border_style="red")


def build_display(result: ScrapeResult, source_name: str) -> Layout:
    layout = Layout()

    header = Text(f"  neutron-exporter v{__version__}  |  {source_name}", style="bold white on blue")
    header.append(f"\n  {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}  ", style="dim")
    header.append(f"  scrape took {result.duration_seconds * 1000:.0f}ms", style="dim")

    errors_panel = build_errors_panel(result)

    layout.split_column(
        Layout(Panel(header, border_style="blue"), size=4),
        Layout(name="body"),
        Layout(errors_panel, size=max(3, min(len(result.errors) + 3, 10))),
        Layout(Panel(Text("  Press Ctrl+C to stop", style="dim"), border_style="dim"), size=3),
    )
    layout["body"].split_row(
        Layout(Panel(build_summary_table(result), title="Totals", border_style="cyan"), ratio=1),
        Layout(Panel(build_detail_table(result, limit=20), title="Series", border_style="cyan"), ratio=2),
    )
    return layout


def print_scrape(result: ScrapeResult, source_name: str, console: Optional[Console] = None):
    console = console or Console()
    console.print(f"\n[bold]{source_name}[/bold]  [dim]({result.duration_seconds * 1000:.0f}ms)[/dim]")
    console.print(Panel(build_summary_table(result), title="Totals", border_style="cyan"))
    console.print(Panel(build_detail_table(result), title="Series", border_style="cyan"))
    console.print(build_errors_panel(result))


def print_catalog(handles: List[MetricHandle], console: Optional[Console] = None):
    console = console or Console()
    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Type", width=8)
    table.add_column("Labels")
    for handle in handles:
        table.add_row(f"[cyan]{handle.full_name}[/cyan]", handle.value_kind.value, ", ".join(handle.labels))
    console.print(table)


def write_jsonl(result: ScrapeResult, source_name: str, out=None):
    """One JSON object per sample, for log shippers and scripts."""
    out = out or sys.stdout
    for family in result.families:
        for sample in family.samples:
            record = {
                "metric": sample.name,
                "type": family.type,
                "value": sample.value,
                "labels": dict(sample.labels),
                "source": source_name,
            }
            out.write(json.dumps(record) + "\n")
    for name, error in result.errors.failures:
        out.write(json.dumps({"collector": name, "error": str(error), "source": source_name}) + "\n")
    out.flush()


def run_watch(engine: NeutronEngine, refresh_interval: float = 15.0):
    console = Console()
    source_name = engine.name()

    log.info("Starting watch: source=%s, refresh=%.1fs", source_name, refresh_interval)
    console.print(f"\n[bold]Starting neutron-exporter v{__version__}...[/bold]")
    console.print(f"Source: {source_name}")
    console.print(f"Refresh: every {refresh_interval}s")
    console.print()

    with Live(console=console, refresh_per_second=1, screen=True) as live:
        try:
            while True:
                result = engine.scrape()
                live.update(build_display(result, source_name))
                time.sleep(refresh_interval)
        except KeyboardInterrupt:
            pass

    console.print("\n[dim]Watch stopped.[/dim]")
