"""
CLI for nest.

Commands:
    nest get NAME KEY - Print a cached value
    nest put NAME KEY VALUE - Add or update a value and write the cache
    nest remove NAME KEY - Remove a value and write the cache
    nest show NAME - Describe a cache
    nest list - List cache files in the storage directory
    nest destroy NAME - Delete a cache file
    nest destroy-all - Delete every cache file in the storage directory
    nest config - Show current configuration
    nest version - Print version
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Optional

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nest import __version__
from nest.cache.codec import is_structured
from nest.cache.nest import Nest, destroy, destroy_all
from nest.cache.storage import list_cache_files, read_cache_file
from nest.config import NestConfig, Settings, clear_settings_cache, get_settings
from nest.exceptions import CacheFileError, NestError
from nest.logging import setup_logging

app = typer.Typer(
    name="nest",
    help="Nest - file-backed key-value caches",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


class CliState:
    """Options shared by all commands."""

    def __init__(self, path: Path | None, algorithm: str | None) -> None:
        self.path = path
        self.algorithm = algorithm
        self._config: NestConfig | None = None

    @property
    def config(self) -> NestConfig:
        if self._config is None:
            self._config = _load_config()
        return self._config

    def open(self, name: str) -> Nest:
        try:
            return Nest(name, self.path, self.algorithm, config=self.config)
        except NestError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)

    @property
    def storage_path(self) -> Path | None:
        return self.path if self.path is not None else self.config.get_storage_path()


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError:
        return None


def _load_config() -> NestConfig:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'nest config' to see what's wrong."
        )
        raise typer.Exit(1)
    try:
        return NestConfig.from_settings(settings)
    except NestError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _parse_input(value: str, as_json: bool) -> Any:
    if not as_json:
        return value
    try:
        return orjson.loads(value)
    except orjson.JSONDecodeError as e:
        error_console.print(f"[red]Error:[/red] VALUE is not valid JSON: {e}")
        raise typer.Exit(1)


def _render(value: Any) -> str:
    if is_structured(value) or isinstance(value, (bool, int, float)) or value is None:
        return orjson.dumps(value, option=orjson.OPT_INDENT_2).decode("utf-8")
    return str(value)


@app.callback()
def main_callback(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Option("--path", "-p", help="Storage directory (defaults to NEST_STORAGE_PATH)"),
    ] = None,
    algorithm: Annotated[
        Optional[str],
        typer.Option("--algorithm", "-a", help="Hash algorithm for cache names and keys"),
    ] = None,
) -> None:
    """Nest - file-backed key-value caches."""
    settings = _get_settings_safe()
    if settings is not None:
        setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    ctx.obj = CliState(path, algorithm)


@app.command()
def get(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Cache name")],
    key: Annotated[str, typer.Argument(help="Cache key")],
) -> None:
    """Print a cached value."""
    cache = ctx.obj.open(name)
    if not cache.has(key):
        error_console.print(f"[yellow]Key not found:[/yellow] {key}")
        raise typer.Exit(1)
    console.print(_render(cache.get(key)), markup=False)


@app.command()
def put(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Cache name")],
    key: Annotated[str, typer.Argument(help="Cache key")],
    value: Annotated[str, typer.Argument(help="Value to store")],
    as_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Parse VALUE as JSON"),
    ] = False,
) -> None:
    """Add or update a value and write the cache."""
    cache = ctx.obj.open(name)
    parsed = _parse_input(value, as_json)

    if cache.has(key):
        cache.set(key, parsed)
    else:
        cache.add(key, parsed)

    try:
        cache.write()
    except NestError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Stored[/green] {key} in {name} ({cache.count()} entries)")


@app.command()
def remove(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Cache name")],
    key: Annotated[str, typer.Argument(help="Cache key")],
) -> None:
    """Remove a value and write the cache."""
    cache = ctx.obj.open(name)
    if not cache.has(key):
        error_console.print(f"[yellow]Key not found:[/yellow] {key}")
        raise typer.Exit(1)

    try:
        cache.remove(key).write()
    except NestError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Removed[/green] {key} from {name}")


@app.command()
def show(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Cache name")],
) -> None:
    """Describe a cache: hash, file and number of entries."""
    cache = ctx.obj.open(name)
    file = cache.get_file()
    on_disk = file is not None and file.is_file()

    console.print(
        Panel(
            f"[bold]Name:[/bold] {cache.get_name()}\n"
            f"[bold]Hash:[/bold] {cache.get_hash()}\n"
            f"[bold]Algorithm:[/bold] {cache.get_algorithm()}\n"
            f"[bold]File:[/bold] {file}\n"
            f"[bold]On disk:[/bold] {on_disk}\n"
            f"[bold]Entries:[/bold] {cache.count()}",
            title=f"[bold cyan]{name}[/bold cyan]",
            border_style="cyan",
        )
    )


@app.command(name="list")
def list_caches(ctx: typer.Context) -> None:
    """List cache files in the storage directory."""
    directory = ctx.obj.storage_path
    if directory is None or not directory.is_dir():
        error_console.print(f"[red]Error:[/red] Storage directory not found: {directory}")
        raise typer.Exit(1)

    files = list_cache_files(directory)
    if not files:
        console.print(f"[dim]No caches in {directory}[/dim]")
        return

    table = Table(title=str(directory), show_header=True)
    table.add_column("Hash", style="cyan", no_wrap=True)
    table.add_column("Entries", justify="right")
    table.add_column("Size", justify="right", style="green")

    for file in files:
        try:
            entries = str(len(read_cache_file(file)))
        except CacheFileError:
            entries = "[red]corrupt[/red]"
        table.add_row(file.stem, entries, f"{file.stat().st_size} B")

    console.print(table)


@app.command(name="destroy")
def destroy_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Cache name")],
) -> None:
    """Delete the file of a cache."""
    state: CliState = ctx.obj
    if destroy(name, state.path, state.algorithm, config=state.config):
        console.print(f"[green]Destroyed[/green] {name}")
    else:
        error_console.print(f"[yellow]No cache file for[/yellow] {name}")
        raise typer.Exit(1)


@app.command(name="destroy-all")
def destroy_all_command(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
) -> None:
    """Delete every cache file in the storage directory."""
    state: CliState = ctx.obj
    directory = state.storage_path
    if not yes:
        typer.confirm(f"Delete all caches in {directory}?", abort=True)

    if destroy_all(directory, config=state.config):
        console.print(f"[green]Destroyed all caches in[/green] {directory}")
    else:
        error_console.print(f"[red]Error:[/red] Storage directory not found: {directory}")
        raise typer.Exit(1)


@app.command()
def config() -> None:
    """Show current configuration."""
    console.print()
    settings = _get_settings_safe()

    if settings is None:
        error_console.print("[red]Configuration is invalid.[/red]")
        error_console.print()
        error_console.print("Check these environment variables:")
        error_console.print("  - NEST_HASH_ALGORITHM (must be a hashlib algorithm)")
        error_console.print("  - NEST_FILE_MODE (octal, e.g. 644)")
        error_console.print("  - LOG_LEVEL")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in settings.display().items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"nest version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
