"""Image resolution commands for the drivelink CLI.

This module provides commands that resolve image URLs by probing their
candidate URLs over HTTP, one by one, until one loads.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..app import handle_exceptions
from ..diagnostics import LoggingSink, MemorySink, MultiSink
from ..inputs import load_references
from ..probe import HttpProber
from ..render import OutputFormatter
from ..service import LinkResolverService

app = typer.Typer()
console = Console(stderr=True)


def get_service_and_formatter(
    ctx: typer.Context,
    format_sweep: Optional[bool] = None,
    max_workers: Optional[int] = None,
) -> tuple[LinkResolverService, MemorySink, OutputFormatter]:
    """Build a resolution service from context settings."""
    settings = ctx.obj["config_manager"].get_settings(
        probe_timeout=ctx.obj["timeout"],
        format_sweep=format_sweep,
        max_workers=max_workers,
    )
    memory = MemorySink()
    service = LinkResolverService(
        settings=settings,
        prober=HttpProber.from_settings(settings),
        sink=MultiSink(memory, LoggingSink()),
    )
    return service, memory, ctx.obj["output_formatter"]


@app.command()
@handle_exceptions
def resolve(
    ctx: typer.Context,
    urls: List[str] = typer.Argument(..., help="Image URLs to resolve"),
    format_sweep: Optional[bool] = typer.Option(
        None,
        "--format-sweep/--no-format-sweep",
        help="Also try format=<ext> variants (overrides config)",
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit with status 1 if any image is exhausted"),
) -> None:
    """Resolve image URLs to loadable URLs.

    Non-Drive URLs are returned unchanged without probing. Drive URLs are
    probed candidate by candidate; when every candidate fails the
    placeholder URL is reported instead.

    Examples:
        drivelink images resolve "https://drive.google.com/file/d/abc/view"
        drivelink images resolve URL1 URL2 --output json
    """
    service, _, formatter = get_service_and_formatter(ctx, format_sweep=format_sweep)

    with service:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Resolving {len(urls)} URL(s)...", total=None)
            outcomes = service.resolve_many(urls)

    formatter.render([outcome.to_row() for outcome in outcomes], format=ctx.obj["output_format"], title="Resolved Images")

    exhausted = [outcome for outcome in outcomes if not outcome.is_resolved]
    if exhausted:
        console.print(f"[yellow]{len(exhausted)} image(s) could not be loaded; placeholder used[/yellow]")
        if strict:
            raise typer.Exit(1)


@app.command()
@handle_exceptions
def check(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Image URL to check"),
) -> None:
    """Check whether an image URL is accessible.

    Walks the whole candidate chain from the start and reports every probe.
    Exits with status 1 when no candidate loads.

    Examples:
        drivelink images check "https://drive.google.com/file/d/abc/view?usp=sharing"
    """
    service, memory, formatter = get_service_and_formatter(ctx)

    with service:
        console.print("[blue]Checking URL accessibility...[/blue]")
        outcome = service.check(url)

    output_format = formatter.determine_format(ctx.obj["output_format"])
    if output_format in ("json", "yaml"):
        data = outcome.model_dump(mode="json")
        data["probes"] = [event.model_dump(mode="json") for event in memory.events]
        formatter.render(data, format=output_format)
    else:
        rows = [
            {"index": event.index, "candidate": event.candidate_url, "loaded": event.ok, "error": event.error}
            for event in memory.events
        ]
        if rows:
            formatter.render_table(rows, title="Probes")

    if outcome.is_resolved:
        if not outcome.attempts:
            console.print("[green]Not a Google Drive URL; it will be used as-is.[/green]")
        else:
            console.print(f"[green]✓ Accessible: {outcome.url}[/green]")
        return

    if not outcome.raw_url:
        console.print("[red]✗ No image URL given.[/red]")
    elif outcome.file_id is None:
        console.print("[red]✗ Could not extract a Google Drive file ID from this URL.[/red]")
    else:
        console.print("[red]✗ No candidate URL loaded. Please check sharing settings.[/red]")
    console.print(f"[dim]Placeholder: {outcome.placeholder_url}[/dim]")
    console.print("[bold]Troubleshooting:[/bold]")
    for tip in outcome.guidance:
        console.print(f"  • {tip}")
    raise typer.Exit(1)


@app.command()
@handle_exceptions
def bulk(
    ctx: typer.Context,
    file_path: Path = typer.Argument(..., help="JSON, YAML or text file of image records"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Images resolved concurrently"),
    format_sweep: Optional[bool] = typer.Option(
        None,
        "--format-sweep/--no-format-sweep",
        help="Also try format=<ext> variants (overrides config)",
    ),
    stats: bool = typer.Option(False, "--stats", help="Include probe statistics"),
) -> None:
    """Resolve every image referenced in a content export.

    Examples:
        # Records exported from the content store
        drivelink images bulk carousel.json

        # Plain list of URLs, one per line
        drivelink images bulk urls.txt --workers 8 --output json
    """
    references = load_references(file_path)
    console.print(f"[blue]Found {len(references)} image(s) to resolve[/blue]")

    service, memory, formatter = get_service_and_formatter(ctx, format_sweep=format_sweep, max_workers=workers)

    with service:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Resolving images...", total=None)
            outcomes = service.resolve_many(reference.raw_url for reference in references)

    rows = []
    for reference, outcome in zip(references, outcomes):
        row = outcome.to_row()
        row["owner"] = reference.owner
        rows.append(row)

    resolved = sum(1 for outcome in outcomes if outcome.is_resolved)
    summary = {
        "total": len(outcomes),
        "resolved": resolved,
        "exhausted": len(outcomes) - resolved,
    }

    output_format = formatter.determine_format(ctx.obj["output_format"])
    if output_format in ("json", "yaml"):
        data = {"images": rows, "summary": summary}
        if stats:
            data["stats"] = memory.get_metrics()
        formatter.render(data, format=output_format)
        return

    formatter.render_table(rows, title="Bulk Resolution")
    console.print(
        f"[green]Resolved {summary['resolved']}[/green] / "
        f"[red]exhausted {summary['exhausted']}[/red] of {summary['total']} image(s)"
    )
    if stats:
        formatter.render_table(
            [{"metric": key, "value": value} for key, value in memory.get_metrics().items()],
            title="Probe Statistics",
        )
