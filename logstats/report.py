import io
from typing import Any, Dict, List, Optional

from rich.box import SIMPLE_HEAD
from rich.console import Console
from rich.table import Table

from logstats.store import AggregationStore

PLACEHOLDER = "-"
STALE_WARNING = "New data has been tracked, results shown may be stale. Consider re-running calculate()."
COLUMNS = ["Hits", "Res. Mean", "Res. Median", "Res. Mode", "Top Worker", "Worker Hits"]


def _or_placeholder(value: Any) -> str:
    return PLACEHOLDER if value is None else str(value)


def format_row(hits: int, analysis: Dict[str, Any], top_worker: Dict[str, Any]) -> List[str]:
    mean = analysis.get("mean")
    mode = analysis.get("mode")
    return [
        str(hits),
        PLACEHOLDER if mean is None else f"{mean:.3f}",
        _or_placeholder(analysis.get("median")),
        PLACEHOLDER if not mode else ",".join(str(m) for m in mode),
        _or_placeholder(top_worker.get("id")),
        PLACEHOLDER if top_worker.get("id") is None else _or_placeholder(top_worker.get("count")),
    ]


def summary_rows(store: AggregationStore) -> List[Dict[str, Any]]:
    """
    One entry per endpoint with raw values plus the formatted table cells.
    Raises StatsNotCalculatedError before the first calculate().
    """
    rows = []
    for signature, aggregate in store.results().items():
        analysis = aggregate.analysis or {}
        top_worker = aggregate.top_worker or {}
        rows.append({
            "endpoint": str(signature),
            "method": signature.method,
            "template": signature.template,
            "hits": aggregate.hits,
            "mean": analysis.get("mean"),
            "median": analysis.get("median"),
            "mode": analysis.get("mode"),
            "top_worker": top_worker.get("id"),
            "top_worker_hits": top_worker.get("count"),
            "cells": format_row(aggregate.hits, analysis, top_worker),
        })
    return rows


def build_table(row: Dict[str, Any]) -> Table:
    table = Table(
        title=f"{row['method']} {row['template']}",
        title_justify="left",
        box=SIMPLE_HEAD,
    )
    for column in COLUMNS:
        table.add_column(column, justify="right")
    table.add_row(*row["cells"])
    return table


def show(store: AggregationStore, console: Optional[Console] = None) -> None:
    """Prints one table per tracked endpoint."""
    console = console or Console()
    rows = summary_rows(store)

    if store.dirty:
        console.print()
        console.print(f"[yellow]{STALE_WARNING}[/yellow]")
        console.print()

    for row in rows:
        console.print(build_table(row))
        console.print()

    if store.rejected:
        console.print(f"[dim]{store.rejected} tracked record(s) skipped: unparseable connect/service[/dim]")


def summary_text(store: AggregationStore) -> str:
    """Plain-text rendering of show(), for writing report files."""
    buffer = io.StringIO()
    show(store, Console(file=buffer, width=100, color_system=None))
    return buffer.getvalue()
