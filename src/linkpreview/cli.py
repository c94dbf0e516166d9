"""Command-line interface for linkpreview."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, TextIO

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from linkpreview import __version__
from linkpreview.config import Config, MonitoringConfig, find_config_file
from linkpreview.exceptions import ParseError
from linkpreview.metadata import MetadataResolver, selectors_for
from linkpreview.metadata.selectors import JSON_LD_SELECTORS
from linkpreview.observability import configure_logging
from linkpreview.protocols import Vocabulary

console = Console()
error_console = Console(stderr=True)


def _load_config(config_path: Optional[Path]) -> Config:
    path = config_path or find_config_file()
    if path is not None:
        return Config.from_yaml(path)
    return Config()


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str]) -> None:
    """linkpreview - resolve link preview metadata from HTML."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None
    ctx.obj["log_level"] = log_level


def _configure(ctx: click.Context) -> Config:
    try:
        config = _load_config(ctx.obj["config_path"])
    except (ValidationError, FileNotFoundError) as e:
        error_console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        sys.exit(2)

    monitoring = config.monitoring
    if ctx.obj["log_level"]:
        monitoring = MonitoringConfig(**{**monitoring.model_dump(), "log_level": ctx.obj["log_level"]})
    configure_logging(monitoring)
    return config


@cli.command()
@click.argument("source", type=click.File("r", encoding="utf-8", errors="replace"))
@click.option("--base-url", "-u", default=None, help="URL the document was fetched from")
@click.pass_context
def resolve(ctx: click.Context, source: TextIO, base_url: Optional[str]) -> None:
    """Resolve preview metadata from an HTML file (use - for stdin)."""
    config = _configure(ctx)
    resolver = MetadataResolver(config.resolver, metrics_enabled=False)

    html_text = source.read()
    try:
        metadata = resolver.resolve(html_text, base_url)
    except ParseError as e:
        error_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if metadata.is_empty:
        console.print("[yellow]No preview metadata found.[/yellow]")
        return

    table = Table(title="Preview metadata")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="magenta")
    for metadata_field, value, vocabulary in metadata.items():
        table.add_row(metadata_field.value, escape(value), vocabulary.value)
    console.print(table)


@cli.command()
@click.option(
    "--vocabulary",
    "vocabulary_name",
    type=click.Choice([v.value for v in Vocabulary]),
    default=None,
    help="Only show rows for one vocabulary",
)
def selectors(vocabulary_name: Optional[str]) -> None:
    """Show the selector table used to read each vocabulary."""
    vocabularies = [Vocabulary(vocabulary_name)] if vocabulary_name else list(Vocabulary)

    table = Table(title="Selector set")
    table.add_column("Vocabulary", style="magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Query")
    for vocabulary in vocabularies:
        for selector in selectors_for(vocabulary):
            table.add_row(vocabulary.value, selector.field.value, escape(selector.describe()))
        if vocabulary is Vocabulary.SCHEMA_ORG:
            for json_ld in JSON_LD_SELECTORS:
                table.add_row(vocabulary.value, json_ld.field.value, json_ld.describe())
    console.print(table)


@cli.command("validate-config")
@click.pass_context
def validate_config(ctx: click.Context) -> None:
    """Load the configuration and print the effective settings."""
    config = _configure(ctx)
    console.print("[green]Configuration is valid.[/green]")
    console.print_json(config.model_dump_json())


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
