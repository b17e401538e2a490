"""CLI interface for Notetwin."""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from notetwin import __version__
from notetwin.config import Settings, get_settings
from notetwin.database.repository import NoteStoreError, Repository
from notetwin.models.category import Category

app = typer.Typer(
    name="notetwin",
    help="Import markdown notes and browse the Digital Twin notes database.",
    no_args_is_help=True,
)
console = Console()


def get_repository(settings: Settings) -> Repository:
    """Get repository instance for the configured mode."""
    try:
        return Repository.from_settings(settings)
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _preview(text: Optional[str], length: int = 80) -> str:
    if not text:
        return ""
    text = " ".join(text.split())
    return text[:length] + "..." if len(text) > length else text


@app.command("import")
def import_notes(
    path: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="Markdown file to import"
    ),
    text: Optional[str] = typer.Option(
        None, "--text", "-t", help="Raw markdown to import instead of a file"
    ),
):
    """
    Import markdown notes into the local database.

    Reads a file, --text, or standard input. Several notes can be
    imported at once by separating them with a '---' line surrounded
    by blank lines.
    """
    from notetwin.services.ingestion import ImportPayloadError, IngestionPipeline

    settings = get_settings()
    repo = get_repository(settings)
    pipeline = IngestionPipeline(repo)

    try:
        if path is not None:
            result = pipeline.import_file(path)
        else:
            if text is None and not sys.stdin.isatty():
                text = sys.stdin.read()
            result = pipeline.import_payload(form={"text": text})
    except ImportPayloadError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Pass a markdown file, --text, or pipe markdown on stdin.")
        raise typer.Exit(1)
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ {result.message}[/green]")
    if result.ids:
        console.print(f"  IDs: {', '.join(str(i) for i in result.ids)}")


@app.command()
def notes(
    category: str = typer.Option(
        "all",
        "--category",
        "-c",
        help="Filter by category: all, sentimento/sentiment, estudo/study",
    ),
    search: Optional[str] = typer.Option(
        None, "--search", "-s", help="Search title and content"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", min=1, help="Max notes to show"
    ),
):
    """List notes, most recent first."""
    try:
        selected = Category(category)
    except ValueError:
        console.print(f"[red]Unknown category: {category}[/red]")
        raise typer.Exit(1)

    settings = get_settings()
    repo = get_repository(settings)

    try:
        results = repo.list_notes(
            category=selected,
            search=search,
            limit=limit or settings.default_limit,
        )
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print("[yellow]No notes found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Notes")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Tags", style="magenta")
    table.add_column("Folder", style="dim")
    table.add_column("Processed", style="dim")

    for note in results:
        table.add_row(
            str(note.id),
            note.title or _preview(note.content, 40),
            ", ".join(note.tags or []),
            note.folder_path or "",
            (note.processed_at or "")[:19],
        )

    console.print(table)


@app.command()
def show(note_id: int = typer.Argument(..., help="Note ID")):
    """Show a note and its insights."""
    settings = get_settings()
    repo = get_repository(settings)

    try:
        note = repo.get_note_by_id(note_id)
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if note is None:
        console.print(f"[red]Note {note_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[bold cyan]─── Note {note.id} ───[/bold cyan]")
    console.print(f"  [bold]Title:[/bold] {note.title or '(none)'}")
    console.print(f"  [bold]Tags:[/bold] {', '.join(note.tags) if note.tags else '(none)'}")
    console.print(f"  [bold]Folder:[/bold] {note.folder_path or '(none)'}")
    console.print(f"  [bold]Processed:[/bold] {note.processed_at or '(unknown)'}")
    console.print()
    console.print(note.content, markup=False)

    if note.insights:
        console.print(f"\n[bold]Insights ({len(note.insights)}):[/bold]")
        for insight in note.insights:
            console.print(
                f"  [magenta]{insight.insight_type}[/magenta] "
                f"[dim]{insight.created_at or ''}[/dim]"
            )
            console.print(f"    {insight.insight_text}", markup=False)


@app.command()
def insights(
    insight_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only insights of this type"
    ),
    note_id: Optional[int] = typer.Option(
        None, "--note-id", "-n", help="Only insights for this note"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", min=1, help="Max insights to show"
    ),
):
    """List insights, most recent first."""
    settings = get_settings()
    repo = get_repository(settings)

    try:
        results = repo.list_insights(
            insight_type=insight_type,
            note_id=note_id,
            limit=limit or settings.default_limit,
        )
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print("[yellow]No insights found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Insights")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Note")
    table.add_column("Insight")

    for insight in results:
        table.add_row(
            str(insight.id),
            insight.insight_type,
            insight.note_title or f"#{insight.note_id}",
            _preview(insight.insight_text),
        )

    console.print(table)


@app.command("add-insight")
def add_insight(
    note_id: int = typer.Argument(..., help="Note ID"),
    insight_type: str = typer.Argument(..., help="Insight type label"),
    text: str = typer.Argument(..., help="Insight text"),
):
    """Attach an insight to a note (local mode only)."""
    settings = get_settings()
    repo = get_repository(settings)

    try:
        insight_id = repo.add_insight(note_id, insight_type, text)
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ Added insight {insight_id} to note {note_id}[/green]")


@app.command()
def stats():
    """Show note and insight counts."""
    settings = get_settings()
    repo = get_repository(settings)

    try:
        data = repo.get_stats()
    except NoteStoreError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Digital Twin Stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Total Notes", str(data["total_notes"]))
    table.add_row("  Sentimento", str(data["by_category"][Category.SENTIMENT.value]))
    table.add_row("  Estudo", str(data["by_category"][Category.STUDY.value]))
    table.add_row("Total Insights", str(data["total_insights"]))
    table.add_row("", "")
    table.add_row("Supports Upload", "yes" if data["supports_upload"] else "no")

    console.print(table)


@app.command()
def config():
    """Show current configuration."""
    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Notetwin Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Mode", "local" if settings.is_local_mode else "vault (read-only)")
    table.add_row("Database Path", str(settings.database_path))
    table.add_row("Default Limit", str(settings.default_limit))
    table.add_row("Scan Limit", str(settings.scan_limit))

    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"Notetwin v{__version__}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Notetwin - Digital Twin notes store.

    Imports markdown notes (frontmatter or heading titles), categorizes
    them by tags and folder, and lists notes, insights and stats.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
