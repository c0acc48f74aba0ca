"""CLI commands using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from marketplace_installer.context import AppContext

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from marketplace_installer import __version__
from marketplace_installer.console import TUI
from marketplace_installer.context import create_context
from marketplace_installer.errors import MarketplaceError
from marketplace_installer.resolver import list_plugins, resolve_plugin

app = typer.Typer(
    name="marketplace-installer",
    help="Install agent and skill plugins from a marketplace manifest",
    add_completion=False,
)

config_app = typer.Typer(help="Configuration commands")

app.add_typer(config_app, name="config")

console = Console()
tui = TUI()

RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        "-r",
        envvar="MARKETPLACE_ROOT",
        help="Discovery root holding plugins/, agents/ and skills/ (default: ./.claude)",
    ),
]
ManifestUrlOption = Annotated[
    str | None,
    typer.Option(
        "--manifest-url",
        "-m",
        envvar="MARKETPLACE_MANIFEST_URL",
        help="Marketplace manifest URL",
    ),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"marketplace-installer v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log each step to stderr")
    ] = False,
) -> None:
    """Install agent and skill plugins from a marketplace manifest."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(1)


def _fail(error: MarketplaceError) -> typer.Exit:
    """Report an error and build the non-zero exit to raise."""
    tui.show_error(escape(str(error)))
    return typer.Exit(1)


# ============================================================================
# Catalog Commands
# ============================================================================


@app.command("list")
def list_command(
    manifest_url: ManifestUrlOption = None,
    _context=None,
) -> None:
    """List available plugins."""
    ctx = _context or create_context(manifest_url=manifest_url)

    try:
        manifest = ctx.resolver.fetch_manifest()
    except MarketplaceError as e:
        raise _fail(e) from e

    tui.show_plugins(list_plugins(manifest))


@app.command()
def info(
    name: Annotated[str, typer.Argument(help="Plugin name")],
    manifest_url: ManifestUrlOption = None,
    _context=None,
) -> None:
    """Show a plugin's agents and skills."""
    ctx = _context or create_context(manifest_url=manifest_url)

    try:
        entry = resolve_plugin(ctx.resolver.fetch_manifest(), name)
    except MarketplaceError as e:
        raise _fail(e) from e

    tui.show_plugin(entry, ctx.resolver.archive_url(entry))


# ============================================================================
# Install Commands
# ============================================================================


@app.command()
def install(
    name: Annotated[str, typer.Argument(help="Plugin to install")],
    root: RootOption = None,
    manifest_url: ManifestUrlOption = None,
    _context=None,
) -> None:
    """Install a plugin into the project."""
    ctx = _context or create_context(root=root, manifest_url=manifest_url)

    try:
        entry = resolve_plugin(ctx.resolver.fetch_manifest(), name)
        tui.show_info(f"Installing plugin: {escape(entry.name)}")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Downloading {escape(ctx.resolver.archive_url(entry))}...", total=None)
            result = ctx.installer.install_plugin(entry)
    except MarketplaceError as e:
        raise _fail(e) from e

    tui.show_install_result(result)


@app.command()
def uninstall(
    name: Annotated[str, typer.Argument(help="Plugin to uninstall")],
    root: RootOption = None,
    _context=None,
) -> None:
    """Uninstall a plugin from the project."""
    ctx = _context or create_context(root=root)

    try:
        result = ctx.installer.uninstall_plugin(name)
    except MarketplaceError as e:
        raise _fail(e) from e

    tui.show_uninstall_result(result)


@app.command()
def installed(
    root: RootOption = None,
    _context=None,
) -> None:
    """Show installed plugins."""
    ctx = _context or create_context(root=root)

    try:
        plugins = ctx.installer.list_installed()
    except MarketplaceError as e:
        raise _fail(e) from e

    tui.show_installed(plugins)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    root: RootOption = None,
    manifest_url: ManifestUrlOption = None,
    _context=None,
) -> None:
    """Show current configuration."""
    ctx = _context or create_context(root=root, manifest_url=manifest_url)
    tui.show_config(ctx.config)


if __name__ == "__main__":
    app()
