"""
BuildID CLI.

Command-line interface for reading build signatures from package archives.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.config import Config, LocatorConfig, get_config
from .core.exceptions import ResolutionError, ValidationError
from .core.logging import setup_logging

app = typer.Typer(
    name="buildid",
    help="Read the build signature recorded in an application package manifest",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"BuildID v{__version__}")
        raise typer.Exit()


def _with_search_paths(cfg: Config, search_paths: Optional[list[Path]]) -> Config:
    if not search_paths:
        return cfg
    locator = LocatorConfig(search_paths=search_paths, archive_name=cfg.locator.archive_name)
    return cfg.model_copy(update={"locator": locator})


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """BuildID: application build signatures from package manifests."""
    pass


@app.command()
def digest(
    apk_path: Path = typer.Argument(
        ...,
        help="Path to the package archive",
        resolve_path=True,
    ),
    entry: Optional[str] = typer.Option(None, "--entry", "-e", help="Manifest entry inside the archive"),
    marker: Optional[str] = typer.Option(None, "--marker", "-m", help="Marker of the section to read"),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Digest header prefix"),
    explain: bool = typer.Option(False, "--explain", help="Print why no digest was found"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Print the digest recorded for the target marker in an archive."""
    from .services.digest import DigestExtractor

    config = get_config()
    setup_logging(config.model_copy(update={"log_level": "DEBUG"}) if verbose else config)

    extractor = DigestExtractor(config.extractor)
    try:
        result = extractor.extract(apk_path, manifest_entry=entry, target_marker=marker, digest_prefix=prefix)
    except ValidationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2)

    if result.success and result.data:
        console.print(escape(result.data.digest), highlight=False)
        return

    if explain:
        reason = result.metadata.get("reason")
        console.print(f"[red]No digest:[/red] {reason.value if reason else 'unknown'}")
        console.print(f"[dim]{escape(result.error or '')}[/dim]", highlight=False)
    raise typer.Exit(1)


@app.command()
def locate(
    app_id: str = typer.Argument(..., help="Application identifier, e.g. com.example.app"),
    search_path: Optional[list[Path]] = typer.Option(
        None,
        "--search-path",
        "-s",
        help="Directory holding installed archives (repeatable)",
    ),
) -> None:
    """List the archives installed for an application."""
    from .services.locator import PackageLocator

    config = _with_search_paths(get_config(), search_path)
    setup_logging(config)

    try:
        candidates = PackageLocator(config.locator).require_archives(app_id)
    except ValidationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2)
    except ResolutionError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Archives for {app_id}")
    table.add_column("#", style="cyan")
    table.add_column("Path")
    for i, candidate in enumerate(candidates):
        table.add_row(str(i), escape(str(candidate)))
    console.print(table)

    if len(candidates) > 1:
        console.print("[yellow]More than one archive; the first is used[/yellow]")


@app.command()
def identify(
    app_id: str = typer.Argument(..., help="Application identifier, e.g. com.example.app"),
    search_path: Optional[list[Path]] = typer.Option(
        None,
        "--search-path",
        "-s",
        help="Directory holding installed archives (repeatable)",
    ),
) -> None:
    """Resolve an application and print its build signature."""
    from .orchestration import BuildIdentity

    config = _with_search_paths(get_config(), search_path)
    setup_logging(config)

    identity = BuildIdentity(config=config)

    async def run_async() -> str:
        return await identity.load(app_id)

    signature = asyncio.run(run_async())
    console.print(f"[bold]{escape(app_id)}[/bold] {escape(signature)}", highlight=False)
    if not identity.is_known:
        raise typer.Exit(1)


@app.command()
def config() -> None:
    """Show the active configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Manifest Entry", cfg.extractor.manifest_entry)
    table.add_row("Target Marker", cfg.extractor.target_marker)
    table.add_row("Digest Prefix", repr(cfg.extractor.digest_prefix))
    table.add_row("Search Paths", ", ".join(str(p) for p in cfg.locator.search_paths))
    table.add_row("Archive Name", cfg.locator.archive_name)
    table.add_row("Max Workers", str(cfg.task.max_workers))
    table.add_row("Notify Absence", str(cfg.task.notify_absence))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  BUILDID_LOG_LEVEL, BUILDID_SEARCH_PATHS, BUILDID_MAX_WORKERS")
    console.print("  BUILDID_MANIFEST_ENTRY, BUILDID_TARGET_MARKER, BUILDID_DIGEST_PREFIX")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
