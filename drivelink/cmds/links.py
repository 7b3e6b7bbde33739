"""Offline link commands for the drivelink CLI.

These commands classify, parse and convert Drive links without making any
network request.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from ..app import handle_exceptions
from ..exceptions import InputError
from ..links import convert_links, link_variants
from ..resolver import build_candidate_chain, extract_file_id, is_drive_url

app = typer.Typer()
console = Console(stderr=True)


@app.command()
@handle_exceptions
def classify(
    ctx: typer.Context,
    urls: List[str] = typer.Argument(..., help="URLs to classify"),
) -> None:
    """Report which URLs point at Google Drive.

    Examples:
        drivelink links classify "https://drive.google.com/file/d/abc/view" "https://example.com/a.jpg"
    """
    rows = [
        {"url": url, "drive": is_drive_url(url), "file_id": extract_file_id(url) if is_drive_url(url) else None}
        for url in urls
    ]
    ctx.obj["output_formatter"].render(rows, format=ctx.obj["output_format"], title="URL Classification")


@app.command()
@handle_exceptions
def extract(
    ctx: typer.Context,
    urls: List[str] = typer.Argument(..., help="Drive URLs to parse"),
) -> None:
    """Extract the Drive file ID from each URL.

    Exits with status 1 when any URL has no recognisable file ID.

    Examples:
        drivelink links extract "https://drive.google.com/open?id=abc"
    """
    rows = [{"url": url, "file_id": extract_file_id(url)} for url in urls]
    ctx.obj["output_formatter"].render(rows, format=ctx.obj["output_format"], title="File IDs")

    if any(row["file_id"] is None for row in rows):
        raise typer.Exit(1)


@app.command()
@handle_exceptions
def candidates(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Drive URL"),
    format_sweep: bool = typer.Option(
        False,
        "--format-sweep",
        help="Append format=<ext> variants after the standard candidates",
    ),
) -> None:
    """Show the candidate URLs that would be probed, in order.

    Examples:
        drivelink links candidates "https://drive.google.com/file/d/abc/view"
        drivelink links candidates "https://drive.google.com/file/d/abc/view" --format-sweep
    """
    if not is_drive_url(url):
        console.print("[yellow]Not a Google Drive URL; it is used as-is without probing.[/yellow]")
        return

    file_id = extract_file_id(url)
    if not file_id:
        console.print(f"[red]Could not extract file ID from URL: {url}[/red]")
        raise typer.Exit(1)

    rows = [
        {"index": index, "url": candidate}
        for index, candidate in enumerate(build_candidate_chain(file_id, format_sweep=format_sweep))
    ]
    ctx.obj["output_formatter"].render(
        rows,
        format=ctx.obj["output_format"],
        title=f"Candidates for {file_id}",
    )


@app.command()
@handle_exceptions
def variants(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Drive URL"),
    thumbnail_width: Optional[int] = typer.Option(None, "--width", help="Thumbnail width"),
) -> None:
    """Show every named direct-access form of a Drive file.

    Examples:
        drivelink links variants "https://drive.google.com/file/d/abc/view" --width 1000
    """
    file_id = extract_file_id(url) if is_drive_url(url) else None
    if not file_id:
        console.print(f"[red]Not a Google Drive file URL: {url}[/red]")
        raise typer.Exit(1)

    width = thumbnail_width or ctx.obj["config_manager"].get_settings().thumbnail_width
    rows = [{"variant": name, "url": link} for name, link in link_variants(file_id, width).items()]
    ctx.obj["output_formatter"].render(rows, format=ctx.obj["output_format"], title=f"Variants for {file_id}")


@app.command()
@handle_exceptions
def convert(
    ctx: typer.Context,
    text: Optional[str] = typer.Argument(None, help="Links separated by newlines or commas"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read links from a file"),
    copy: bool = typer.Option(False, "--copy", help="Copy the converted links to the clipboard"),
) -> None:
    """Convert shareable Drive links into direct image links.

    Examples:
        drivelink links convert "https://drive.google.com/file/d/a/view,https://drive.google.com/file/d/b/view"
        drivelink links convert --file links.txt --copy
    """
    if file is not None:
        try:
            text = file.read_text(encoding="utf-8")
        except OSError as e:
            raise InputError(f"Cannot read links file: {e}", file_path=str(file))

    if not text:
        console.print("[red]Provide links as an argument or with --file[/red]")
        raise typer.Exit(1)

    results = convert_links(text)
    ctx.obj["output_formatter"].render(results, format=ctx.obj["output_format"], title="Converted Links")

    failed = sum(1 for result in results if result["error"])
    if failed:
        console.print(f"[yellow]{failed} of {len(results)} links could not be converted[/yellow]")

    converted = [result["converted"] for result in results if result["converted"]]
    if copy and converted:
        try:
            import pyperclip
            pyperclip.copy("\n".join(converted))
            console.print(f"[green]✓ {len(converted)} link(s) copied to clipboard[/green]")
        except ImportError:
            console.print("[yellow]Install 'pyperclip' to enable clipboard support[/yellow]")
        except pyperclip.PyperclipException as e:
            console.print(f"[yellow]Clipboard unavailable: {e}[/yellow]")
