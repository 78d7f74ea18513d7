"""
covmark CLI - inspect and scaffold coverage mark configuration.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from covmark.config import ConfigLoader, CovMarkConfig

app = typer.Typer(
    name="covmark",
    help="Coverage marks - tie each test to the code path it exercises",
    add_completion=False,
)

console = Console()

DEFAULT_CONFIG_FILE = "covmark.yaml"


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from covmark import __version__

        console.print(f"[bold blue]covmark[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """covmark - coverage marks for tests."""
    pass


@app.command()
def config(
    file: str = typer.Option(None, "--file", "-c", help="YAML configuration file"),
    format_: str = typer.Option("console", "--format", "-f", help="Output format: console, json, yaml"),
) -> None:
    """
    Show the effective configuration.

    Reads the given YAML file, or COVMARK_* environment variables when no
    file is given.
    """
    try:
        settings = ConfigLoader.from_yaml(file) if file else ConfigLoader.from_env()
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1) from e

    if format_ == "json":
        console.print_json(json.dumps(settings.model_dump(mode="json")))
    elif format_ == "yaml":
        console.print(settings.to_yaml(), end="")
    elif format_ == "console":
        _display_config(settings, source=file or "environment")
    else:
        console.print(f"[red]Error:[/red] Unknown format: {format_}")
        raise typer.Exit(1)


@app.command()
def init(
    output: str = typer.Option(DEFAULT_CONFIG_FILE, "--output", "-o", help="Where to write the file"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a sample configuration file."""
    target = Path(output)
    if target.exists() and not force:
        console.print(f"[yellow]⚠[/yellow] {target} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    sample = ConfigLoader.generate_sample_config()
    # Round-trip so a broken sample never lands on disk.
    ConfigLoader.from_dict(yaml.safe_load(sample))
    target.write_text(sample)
    console.print(f"[green]✓[/green] Configuration written to {target}")


def _display_config(settings: CovMarkConfig, source: str) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    for name, field in CovMarkConfig.model_fields.items():
        value = getattr(settings, name)
        if isinstance(value, bool):
            shown = "[green]on[/green]" if value else "[red]off[/red]"
        else:
            shown = str(value)
        table.add_row(name, shown, field.description or "")

    console.print(Panel(table, title=f"covmark configuration ({source})", border_style="blue"))


if __name__ == "__main__":
    app()
