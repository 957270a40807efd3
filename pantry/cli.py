"""CLI interface for Pantry."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pantry.consts import DATA_DIR_ENV_VAR, DEFAULT_DATA_DIR
from pantry.models.common import _utc_now
from pantry.models.model_envelope import PersistenceTier
from pantry.models.model_expiry import After, Never
from pantry.storage.path_provider import DataDirPathProvider
from pantry.storage.warehouse import Warehouse

app = typer.Typer(
    name="pantry",
    help="Pantry - File-backed JSON storage with permanent and volatile tiers",
)

console = Console()

TIER_OPTION = typer.Option(PersistenceTier.PERMANENT, "--tier", "-t", help="Storage tier")
DATA_DIR_OPTION = typer.Option(
    DEFAULT_DATA_DIR, "--data-dir", envvar=DATA_DIR_ENV_VAR, help="Root data directory"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _warehouse(key: str, tier: PersistenceTier, data_dir: Path) -> Warehouse:
    return Warehouse(key, tier, paths=DataDirPathProvider(data_dir))


def _format_timestamp(timestamp: float) -> str:
    """Format a unix timestamp with the time left until it passes."""
    moment = datetime.fromtimestamp(timestamp, UTC)
    remaining = (moment - _utc_now()).total_seconds()
    if remaining <= 0:
        return f"{moment.isoformat()} (expired)"
    return f"{moment.isoformat()} (in {remaining:.0f}s)"


@app.command()
def put(
    key: str = typer.Argument(..., help="Entry key (used as the file name)"),
    value: str = typer.Argument(..., help="JSON value to store"),
    tier: PersistenceTier = TIER_OPTION,
    ttl: float = typer.Option(None, "--ttl", help="Expire after this many seconds"),
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Store a JSON value under a key."""
    _configure_logging(verbose)

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Value is not valid JSON: {e}")
        raise typer.Exit(1)

    if ttl is not None and ttl < 0:
        console.print("[red]Error:[/red] --ttl must be >= 0")
        raise typer.Exit(1)

    policy = After(seconds=ttl) if ttl is not None else Never()
    if not _warehouse(key, tier, data_dir).write(parsed, policy):
        console.print(f"[red]Error:[/red] Couldn't store '{key}' (see log for details)")
        raise typer.Exit(1)

    console.print(f"[green]Stored[/green] {key} in {tier.value}")


@app.command()
def get(
    key: str = typer.Argument(..., help="Entry key"),
    field: str = typer.Option(
        None, "--field", "-f", help="Print only this field of the stored object"
    ),
    tier: PersistenceTier = TIER_OPTION,
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print a stored value as JSON."""
    _configure_logging(verbose)

    warehouse = _warehouse(key, tier, data_dir)
    if not warehouse.exists():
        console.print(f"[yellow]Not found:[/yellow] {key}")
        raise typer.Exit(1)

    if field:
        storage = warehouse.load_cache()
        if not isinstance(storage, dict) or field not in storage:
            console.print(f"[yellow]Not found:[/yellow] {key}.{field}")
            raise typer.Exit(1)
        console.print_json(data=warehouse.get_value(field))
        return

    console.print_json(data=warehouse.load_cache())


@app.command()
def exists(
    key: str = typer.Argument(..., help="Entry key"),
    tier: PersistenceTier = TIER_OPTION,
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Check whether a key exists and has not expired. Expired entries are purged."""
    _configure_logging(verbose)

    if _warehouse(key, tier, data_dir).exists():
        console.print(f"[green]yes[/green] {key}")
        return

    console.print(f"[yellow]no[/yellow] {key}")
    raise typer.Exit(1)


@app.command()
def info(
    key: str = typer.Argument(..., help="Entry key"),
    tier: PersistenceTier = TIER_OPTION,
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show an entry's file and expiry without purging it."""
    _configure_logging(verbose)

    warehouse = _warehouse(key, tier, data_dir)
    envelope = warehouse.load_envelope()
    if envelope is None:
        console.print(f"[yellow]Not found:[/yellow] {key}")
        raise typer.Exit(1)

    table = Table(title=f"Entry: {key}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Tier", tier.value)
    table.add_row("Path", str(warehouse.path))
    table.add_row("Type", type(envelope.storage).__name__)
    table.add_row(
        "Expires",
        _format_timestamp(envelope.expires) if envelope.expires is not None else "never",
    )

    console.print(table)


@app.command()
def rm(
    key: str = typer.Argument(..., help="Entry key"),
    tier: PersistenceTier = TIER_OPTION,
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Remove a single entry."""
    _configure_logging(verbose)

    warehouse = _warehouse(key, tier, data_dir)
    if warehouse.path is None or not warehouse.path.exists():
        console.print(f"[yellow]Not found:[/yellow] {key}")
        raise typer.Exit(1)

    if not warehouse.remove():
        console.print(f"[red]Error:[/red] Couldn't remove '{key}' (see log for details)")
        raise typer.Exit(1)

    console.print(f"[green]Removed[/green] {key} from {tier.value}")


@app.command()
def clear(
    tier: PersistenceTier = typer.Option(..., "--tier", "-t", help="Tier to clear"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    data_dir: Path = DATA_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Remove every entry of a tier."""
    _configure_logging(verbose)

    paths = DataDirPathProvider(data_dir)
    directory = paths.namespace_directory(tier)
    if not directory.exists():
        console.print(f"[dim]Nothing to clear in {tier.value}[/dim]")
        return

    if not yes:
        typer.confirm(f"Remove all {tier.value} entries in {directory}?", abort=True)

    if not Warehouse.remove_all(tier, paths=paths):
        console.print(f"[red]Error:[/red] Couldn't clear {tier.value} (see log for details)")
        raise typer.Exit(1)

    console.print(f"[green]Cleared[/green] all {tier.value} entries")


if __name__ == "__main__":
    app()
