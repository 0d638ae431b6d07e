from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from logstats.aggregator import calculate, track
from logstats.logfmt import parse_lines
from logstats.report import show, summary_text
from logstats.store import AggregationStore, load_tracked_requests

LOG_FILE_PATH = Path("logs/sample.log")
REPORTS_DIR = Path("reports")

console = Console()
app = typer.Typer(add_completion=False, rich_markup_mode="rich")


@app.command()
def main(
    log_file: Path = typer.Argument(LOG_FILE_PATH, help="logfmt router log to analyze"),
    tracked: Optional[Path] = typer.Option(
        None, "--tracked", help="File listing METHOD::TEMPLATE requests to track, one per line"
    ),
    reports_dir: Path = typer.Option(REPORTS_DIR, "--reports-dir", help="Where to write the summary"),
) -> None:
    """Per-endpoint hit, response time and worker stats for a router log."""
    if not log_file.is_file():
        console.print(f"[red]Log file not found:[/red] {log_file}")
        raise typer.Exit(1)

    if tracked is not None:
        with tracked.open(encoding="utf-8") as f:
            store = AggregationStore(tracked=load_tracked_requests(f))
    else:
        store = AggregationStore()

    console.print(f"Parsing {log_file}...")
    console.print()

    with log_file.open(encoding="utf-8") as f:
        for record in parse_lines(f):
            track(store, record)

    calculate(store)
    show(store, console)

    reports_dir.mkdir(parents=True, exist_ok=True)
    with reports_dir.joinpath("endpoint_summary.txt").open("w", encoding="utf-8") as file:
        file.write(summary_text(store))


if __name__ == "__main__":
    app()
