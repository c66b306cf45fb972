"""
Crawl commands for running the listing crawl.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from bidcrawl.core.config import ConfigError, CrawlConfig, apply_overrides, load_crawl_config
from bidcrawl.core.crawl.errors import FatalStartupFailure
from bidcrawl.core.logging import setup_logging

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Run crawls and inspect lookup data",
    no_args_is_help=True,
)


def _load_config(config_path: Optional[Path], **overrides) -> CrawlConfig:
    """Load configuration and apply command line overrides."""
    try:
        config = load_crawl_config(config_path)
        return apply_overrides(config, **overrides)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)


def _setup_logging(config: CrawlConfig, verbose: bool) -> None:
    setup_logging(
        level="DEBUG" if verbose else config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )


@app.command("run")
def run_crawl(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Crawl configuration file (default: configs/crawl.yaml)",
    ),
    start_url: Optional[str] = typer.Option(
        None,
        "--start-url",
        "-u",
        help="Listing page to start from",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Result file path",
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--headed",
        help="Run the browser with or without a window",
    ),
    timeout_ms: Optional[int] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Navigation timeout in milliseconds",
    ),
    max_pages: Optional[int] = typer.Option(
        None,
        "--max-pages",
        "-n",
        help="Maximum pages to walk",
    ),
    max_items: Optional[int] = typer.Option(
        None,
        "--max-items",
        help="Stop walking once this many records are collected",
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-j",
        help="Concurrent enrichment workers",
    ),
    no_enrich: bool = typer.Option(
        False,
        "--no-enrich",
        help="Skip detail enrichment",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging",
    ),
) -> None:
    """Crawl every page of the listing grid and write the results.

    Examples:
        bidcrawl crawl run
        bidcrawl crawl run --max-pages 2 --output bids.json
        bidcrawl crawl run --headed --concurrency 2
    """
    from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
    from bidcrawl.core.orchestrator import CrawlRunner

    config = _load_config(
        config_path,
        start_url=start_url,
        output_path=output,
        headless=headless,
        navigation_timeout_ms=timeout_ms,
        max_pages=max_pages,
        max_items=max_items,
        concurrency=concurrency,
    )
    if no_enrich:
        config.enrichment.enabled = False

    _setup_logging(config, verbose)

    console.print()
    console.print(f"[bold]Starting crawl:[/bold] {config.start_url}")
    console.print()

    runner = CrawlRunner(config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"[cyan]Crawling {config.name}...[/cyan]", total=None)
        try:
            result = asyncio.run(runner.run())
        except FatalStartupFailure as e:
            err_console.print(f"[red]Crawl failed:[/red] {e}")
            raise typer.Exit(1)

    console.print()
    _show_summary(config, result.stats)

    if result.output_path:
        console.print()
        console.print(f"[green]OK[/green] Saved {result.stats.records} records to {result.output_path}")


def _show_summary(config: CrawlConfig, stats) -> None:
    """Show summary table of crawl results."""
    table = Table(title="Crawl Summary")

    table.add_column("Site", style="cyan")
    table.add_column("Pages", justify="right")
    table.add_column("Records", justify="right")
    table.add_column("Duplicates", justify="right", style="dim")
    table.add_column("Enriched", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Agencies", justify="right")
    table.add_column("Stopped", justify="center")
    table.add_column("Duration", justify="right")

    duration = f"{stats.duration_seconds:.1f}s" if stats.duration_seconds else "-"
    table.add_row(
        config.name,
        str(stats.pages_walked),
        str(stats.records),
        str(stats.duplicates),
        str(stats.enriched),
        str(stats.failed),
        str(stats.agencies),
        stats.stop_reason or "-",
        duration,
    )

    console.print(table)

    if stats.errors:
        console.print()
        console.print("[red]Errors:[/red]")
        for error in stats.errors[:5]:
            console.print(f"  • {error}")
        if len(stats.errors) > 5:
            console.print(f"  [dim]... and {len(stats.errors) - 5} more[/dim]")


@app.command("agencies")
def show_agencies(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Crawl configuration file (default: configs/crawl.yaml)",
    ),
    start_url: Optional[str] = typer.Option(
        None,
        "--start-url",
        "-u",
        help="Listing page linking to the lookup page",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging",
    ),
) -> None:
    """Show the agency code -> name map used to fill agency_full.

    Examples:
        bidcrawl crawl agencies
    """
    from bidcrawl.core.orchestrator import CrawlRunner

    config = _load_config(config_path, start_url=start_url)
    _setup_logging(config, verbose)

    runner = CrawlRunner(config)
    try:
        agencies = asyncio.run(runner.build_lookup())
    except FatalStartupFailure as e:
        err_console.print(f"[red]Lookup failed:[/red] {e}")
        raise typer.Exit(1)

    if not agencies:
        console.print("[yellow]No agency codes found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Agencies ({len(agencies)})", show_header=True, header_style="bold magenta")
    table.add_column("Code", style="cyan")
    table.add_column("Name")

    for code, name in sorted(agencies.items()):
        table.add_row(code, name)

    console.print(table)
