"""Command line interface for building search indexes."""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from site_search_index.config import SearchConfig, load_config_file
from site_search_index.errors import SearchIndexError
from site_search_index.indexer import SearchIndexer

console = Console()
app = typer.Typer(help="Build client-side fuzzy search indexes from site sources")


def _setup_logging(verbose: bool) -> None:
    """Configure root logging for the command line.

    Args:
        verbose: Log at DEBUG instead of INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _resolve_config(
    config_file: Optional[Path],
    pattern: Optional[List[str]],
    ignore: Optional[List[str]],
    levels: Optional[List[str]],
    workers: Optional[int],
) -> SearchConfig:
    """Load the options file and apply command line overrides.

    Args:
        config_file: YAML or JSON options file, if given.
        pattern: Globs of files to index.
        ignore: Globs of files to skip.
        levels: Index levels.
        workers: Parallel extraction workers.

    Returns:
        The effective configuration.

    Raises:
        ConfigError: If the file or an override is invalid.
    """
    config = load_config_file(config_file) if config_file else SearchConfig()
    overrides: dict[str, Any] = {}
    if pattern:
        overrides["pattern"] = pattern
    if ignore:
        overrides["ignore"] = ignore
    if levels:
        overrides["index_levels"] = levels
    if workers is not None:
        overrides["max_workers"] = workers
    return dataclasses.replace(config, **overrides) if overrides else config


def _print_stats(stats: dict[str, Any]) -> None:
    """Print index statistics as a table.

    Args:
        stats: The ``stats`` object of a search index.
    """
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Group")
    table.add_column("Name")
    table.add_column("Entries", justify="right")

    for entry_type, count in sorted(stats.get("entriesByType", {}).items()):
        table.add_row("type", entry_type, str(count))
    for section_type, count in sorted(stats.get("entriesBySectionType", {}).items()):
        table.add_row("section", section_type, str(count))

    console.print(table)
    console.print(
        f"Total entries: [bold]{stats.get('totalEntries', 0)}[/bold], "
        f"average content length: {stats.get('averageContentLength', 0)}"
    )


@app.command()
def build(
    source: Path = typer.Argument(..., help="Directory with the site sources.", resolve_path=True),
    output: Path = typer.Option(Path("."), "--output", "-o", help="Directory receiving the index"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="YAML or JSON options file"),
    pattern: Optional[List[str]] = typer.Option(None, "--pattern", help="Glob of files to index"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", help="Glob of files to skip"),
    level: Optional[List[str]] = typer.Option(None, "--level", help="Index level: page, section or component"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Documents extracted in parallel"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Build a search index from a directory of sources."""
    _setup_logging(verbose)
    try:
        config = _resolve_config(config_file, pattern, ignore, level, workers)
        indexer = SearchIndexer(config)
        index = indexer.index_from_path(source)
        target = indexer.write_index(index, output)
    except SearchIndexError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    console.print(f"Search index written to [bold]{target}[/bold]")
    _print_stats(index["stats"])


@app.command()
def stats(
    index_file: Path = typer.Argument(..., help="Search index JSON file."),
) -> None:
    """Show the statistics of an existing search index."""
    try:
        index = json.loads(index_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read search index: {exc}") from exc

    if not isinstance(index, dict) or "stats" not in index:
        raise typer.BadParameter("File is not a search index")

    console.print(f"Generated {index.get('generated', 'unknown')} by {index.get('generator', 'unknown')}")
    _print_stats(index["stats"])
