"""Command-line interface for managing login servers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from loginservers.config import get_settings
from loginservers.core.catalog import load_catalog
from loginservers.core.manager import LoginServerManager
from loginservers.core.storage import JsonFileStore

app = typer.Typer(help="Manage the login servers a client connects to.")
console = Console()


def build_manager(
    store_path: Optional[Path] = None, catalog_file: Optional[Path] = None
) -> LoginServerManager:
    """Wire a manager to its JSON store and built-in catalog."""
    settings = get_settings()
    store = JsonFileStore(store_path or settings.store_path)
    catalog = load_catalog(catalog_file or settings.catalog_file)
    return LoginServerManager(store, catalog)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _handle_errors(e: Exception) -> NoReturn:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    raise typer.Exit(1)


def _get_manager(ctx: typer.Context) -> LoginServerManager:
    store_path, catalog_file = ctx.obj
    try:
        return build_manager(store_path, catalog_file)
    except (OSError, ValueError) as e:
        _handle_errors(e)


def _print_servers(manager: LoginServerManager) -> None:
    selected = manager.get_selected_login_server()

    table = Table(title="Login servers")
    table.add_column("", width=1)
    table.add_column("Name")
    table.add_column("URL", no_wrap=True)
    table.add_column("Custom")

    for server in manager.get_login_servers():
        table.add_row(
            "*" if server == selected else "",
            escape(server.name),
            escape(server.url),
            "yes" if server.is_custom else "no",
        )
    console.print(table)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    store: Optional[Path] = typer.Option(
        None, "--store", help="Path to the JSON store (default: $LOGINSERVERS_STORE)"
    ),
    catalog: Optional[Path] = typer.Option(
        None, "--catalog", help="YAML file with built-in servers"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Manage the login servers a client connects to."""
    _configure_logging(verbose)
    ctx.obj = (store, catalog)

    if ctx.invoked_subcommand is None:
        console.print("[bold blue]Login server manager[/bold blue]")
        console.print("Use --help to see available commands")


@app.command("list")
def list_servers(ctx: typer.Context):
    """List all login servers; the selected one is marked with *."""
    _print_servers(_get_manager(ctx))


@app.command()
def show(ctx: typer.Context):
    """Show the selected login server."""
    server = _get_manager(ctx).get_selected_login_server()
    console.print(f"Selected: [bold]{escape(server.name)}[/bold] {escape(server.url)}")


@app.command()
def select(ctx: typer.Context, url: str = typer.Argument(..., help="Exact server URL")):
    """Select a login server by URL."""
    manager = _get_manager(ctx)
    server = manager.get_login_server_from_url(url)
    if server is None:
        _handle_errors(LookupError(f"no login server with url {url}"))

    manager.set_selected_login_server(server)
    console.print(f"[green]Selected {escape(server.name)}[/green]")


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Display name"),
    url: str = typer.Argument(..., help="Server URL"),
):
    """Add a custom login server and select it."""
    server = _get_manager(ctx).add_custom_login_server(name, url)
    console.print(f"[green]Added and selected {escape(server.name)}[/green]")


@app.command()
def sandbox(ctx: typer.Context):
    """Select the sandbox login server."""
    manager = _get_manager(ctx)
    manager.use_sandbox()
    server = manager.get_selected_login_server()
    console.print(f"[green]Selected {escape(server.name)}[/green]")


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Remove all custom login servers and select the default one."""
    manager = _get_manager(ctx)
    if not yes:
        typer.confirm("Forget all custom login servers?", abort=True)

    manager.reset()
    server = manager.get_selected_login_server()
    console.print(f"[green]Reset; selected {escape(server.name)}[/green]")


if __name__ == "__main__":
    app()
