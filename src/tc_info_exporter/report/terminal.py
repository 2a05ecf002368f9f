"""One-shot inventory report using Rich, or JSON lines for scripts."""

from __future__ import annotations

import json
from typing import IO, Sequence

from rich.console import Console
from rich.table import Table

from tc_info_exporter.collector.base import ResourceCollector
from tc_info_exporter.metrics import CollectionResult


def _status(result: CollectionResult) -> str:
    if result.ok:
        return "[bold green]UP[/bold green]"
    return f"[bold red]DOWN[/bold red] [dim]({result.error_kind})[/dim]"


def build_status_table(results: Sequence[CollectionResult]) -> Table:
    table = Table(title="Collectors", show_header=True, header_style="bold")
    table.add_column("Collector")
    table.add_column("Status")
    table.add_column("Series", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Pages", justify="right")
    table.add_column("Time", justify="right")

    for r in results:
        skipped = f"[yellow]{r.skipped}[/yellow]" if r.skipped else "0"
        table.add_row(r.collector, _status(r), str(len(r.samples)), skipped,
                      str(r.pages), f"{r.duration_seconds:.2f}s")
    return table


def build_inventory_table(collector: ResourceCollector, result: CollectionResult) -> Table:
    descriptor = collector.describe()
    table = Table(title=descriptor.name, show_header=True, header_style="bold")
    for label in descriptor.label_names:
        table.add_column(label, style="cyan" if label == descriptor.label_names[0] else None)
    for sample in result.samples:
        table.add_row(*sample.label_values)
    return table


def print_inventory(collectors: Sequence[ResourceCollector],
                    results: Sequence[CollectionResult],
                    console: Console = None):
    console = console or Console()

    for collector, result in zip(collectors, results):
        if not result.ok:
            console.print(f"\n[bold red]{collector.name()}[/bold red]  [dim]{result.error}[/dim]")
            continue
        if not result.samples:
            console.print(f"\n[dim]{collector.name()}: no resources found.[/dim]")
            continue
        console.print()
        console.print(build_inventory_table(collector, result))

    console.print()
    console.print(build_status_table(results))
    console.print()


def write_jsonl(results: Sequence[CollectionResult], out: IO[str]):
    """One JSON object per sample, then one status object per collector."""
    for result in results:
        for sample in result.samples:
            record = {"metric": sample.descriptor.name, "value": sample.value}
            record.update(sample.labels())
            out.write(json.dumps(record) + "\n")
    for result in results:
        out.write(json.dumps({"status": result.summary()}) + "\n")
    out.flush()
