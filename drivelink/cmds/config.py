"""Configuration management commands for the drivelink CLI."""

import typer
from rich.console import Console
from rich.prompt import Confirm

from ..app import handle_exceptions

app = typer.Typer()
console = Console(stderr=True)


@app.command()
@handle_exceptions
def show(ctx: typer.Context) -> None:
    """Show effective settings and where each value comes from.

    Examples:
        drivelink config show
        drivelink config show --output json
    """
    config_manager = ctx.obj["config_manager"]
    formatter = ctx.obj["output_formatter"]

    values = config_manager.to_dict()
    output_format = formatter.determine_format(ctx.obj["output_format"])
    if output_format in ("json", "yaml"):
        formatter.render({key: entry["value"] for key, entry in values.items()}, format=output_format)
        return

    rows = [{"setting": key, "value": entry["value"], "source": entry["source"]} for key, entry in values.items()]
    formatter.render_table(rows, title="drivelink settings")


@app.command("set")
@handle_exceptions
def set_value(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Setting name"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a configuration value.

    Examples:
        drivelink config set probe_timeout 5
        drivelink config set format_sweep true
        drivelink config set placeholder_url "https://example.com/missing.png"
    """
    settings = ctx.obj["config_manager"].set_value(key, value)
    console.print(f"[green]✓ {key} = {getattr(settings, key)}[/green]")


@app.command()
@handle_exceptions
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset all settings to their defaults."""
    if not yes and not Confirm.ask("Reset all drivelink settings?", default=False, console=console):
        console.print("[yellow]Reset cancelled[/yellow]")
        return

    ctx.obj["config_manager"].reset()
    console.print("[green]✓ Settings reset to defaults[/green]")


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the configuration file path."""
    typer.echo(str(ctx.obj["config_manager"].config_file))
