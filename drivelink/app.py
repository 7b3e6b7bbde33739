"""Main Typer application for the drivelink CLI.

This module contains the main Typer app instance and registers all command
groups. It provides the entry point for the CLI and handles global options
like debug mode, output formatting and the configuration directory.
"""

import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.traceback import install

from . import __version__
from .config import ConfigManager
from .exceptions import DriveLinkError, ConfigError
from .log import setup_logging
from .render import OutputFormatter
from .utils.exceptions import format_error_for_user

install(show_locals=False)

app = typer.Typer(
    name="drivelink",
    help="Resolve Google Drive image links to loadable URLs",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)
output_formatter = OutputFormatter(console)

_commands_registered = False


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"drivelink {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format (table, json, yaml)",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Probe timeout in seconds (overrides config)",
    ),
    config_dir: Optional[Path] = typer.Option(
        None,
        "--config-dir",
        help="Configuration directory (default: ~/.drivelink)",
        envvar="DRIVELINK_CONFIG_DIR",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """drivelink - resolve Google Drive image links.

    Examples:
        # Show the candidate URLs for a shared link
        drivelink links candidates "https://drive.google.com/file/d/FILE_ID/view"

        # Resolve links by probing each candidate
        drivelink images resolve "https://drive.google.com/open?id=FILE_ID"

        # Resolve every image in a content export
        drivelink images bulk carousel.json --output json
    """
    setup_logging(debug)

    try:
        config_manager = ConfigManager(config_dir)
    except ConfigError as e:
        err_console.print(f"[red]{format_error_for_user(e, debug)}[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["output_format"] = output_format
    ctx.obj["timeout"] = timeout
    ctx.obj["console"] = console
    ctx.obj["config_manager"] = config_manager
    ctx.obj["output_formatter"] = output_formatter

    if debug:
        err_console.print("[dim]Debug mode enabled[/dim]")
        err_console.print(f"[dim]Config file: {config_manager.config_file}[/dim]")
        env_overrides = config_manager.get_environment_overrides()
        if env_overrides:
            err_console.print(f"[dim]Environment overrides active: {', '.join(env_overrides)}[/dim]")


def handle_exceptions(func):
    """Decorator to handle common exceptions in commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DriveLinkError as e:
            ctx = click.get_current_context(silent=True)
            debug = ctx.obj.get("debug", False) if ctx and ctx.obj else False
            err_console.print(f"[red]{format_error_for_user(e, debug)}[/red]")
            if not debug and not isinstance(e, ConfigError):
                err_console.print("[dim]Use --debug for more details[/dim]")
            raise typer.Exit(1)
        except KeyboardInterrupt:
            err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
            raise typer.Exit(130)
    return wrapper


def register_commands() -> None:
    """Register all command groups with the main app."""
    global _commands_registered
    if _commands_registered:
        return

    from .cmds import config_app, images_app, links_app

    app.add_typer(links_app, name="links", help="Inspect and convert Drive links offline")
    app.add_typer(images_app, name="images", help="Resolve image URLs by probing candidates")
    app.add_typer(config_app, name="config", help="Manage configuration")
    _commands_registered = True


def cli() -> None:
    """Entry point for the CLI."""
    register_commands()

    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    cli()
