"""
Configuration commands.

Commands for creating, validating and inspecting crawl configuration files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from bidcrawl.core.config import ConfigError, CrawlConfig, load_crawl_config, validate_config_file
from bidcrawl.core.config.loader import DEFAULT_CONFIG_PATH

console = Console(legacy_windows=False)
err_console = Console(stderr=True, legacy_windows=False)

app = typer.Typer(
    help="Create and check configuration files",
    no_args_is_help=True,
)

CONFIG_HEADER = """\
# bidcrawl crawl configuration
# Values can reference environment variables: ${VAR} or ${VAR:-default}
# Command line flags on `bidcrawl crawl run` override these values.

"""


def render_config(config: CrawlConfig) -> str:
    """YAML text for a configuration, with the file header."""
    data = config.model_dump(mode="json")
    return CONFIG_HEADER + yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


@app.command("init")
def init_config(
    path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--path",
        "-p",
        help="Where to write the configuration",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
) -> None:
    """Write a configuration file holding every default value."""
    if path.exists() and not force:
        err_console.print(f"[red]Config already exists:[/red] {path}")
        err_console.print("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config(CrawlConfig()), encoding="utf-8")

    console.print(Panel.fit(
        f"[bold green]OK - wrote {path}[/bold green]\n\n"
        "Next steps:\n"
        f"  1. Review the file: [yellow]bidcrawl config show --config {path}[/yellow]\n"
        "  2. Run a crawl: [yellow]bidcrawl crawl run --max-pages 2[/yellow]",
        title="[bold]Configuration Created[/bold]",
        border_style="green",
    ))


@app.command("validate")
def validate(
    path: Path = typer.Argument(DEFAULT_CONFIG_PATH, help="Configuration file to check"),
) -> None:
    """Validate a configuration file."""
    errors = validate_config_file(path)

    if errors:
        err_console.print(f"[red]Invalid configuration:[/red] {path}")
        for error in errors:
            err_console.print(f"  • {error}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] {path} is valid")


@app.command("show")
def show(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: configs/crawl.yaml, or built-in defaults)",
    ),
) -> None:
    """Show the effective configuration."""
    try:
        config = load_crawl_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    text = yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False, allow_unicode=True)
    console.print(Syntax(text, "yaml", theme="ansi_dark", word_wrap=True))
