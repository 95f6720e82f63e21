"""Display formatters and UI helpers for CLI."""

import logging
from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...core.backup import ConflictRecord, ImportOutcome, ImportSession, ImportStatus
from ...database import PresentationSlide, Slide, Song, Tag

console = Console()
logger = logging.getLogger(__name__)

STATUS_STYLES = {
    ImportStatus.SKIPPED: "yellow",
    ImportStatus.OVERWRITTEN: "cyan",
    ImportStatus.ADDED: "green",
    ImportStatus.ADDED_WITH_REASSIGNED_ORDER: "green",
    ImportStatus.FAILED: "red",
}


def display_song_table(
    songs: Sequence[Song], tags_by_song: Dict[int, List[Tag]]
) -> None:
    """Display songs with their tags.

    Args:
        songs: Songs ordered by code and order
        tags_by_song: Tags keyed by song id
    """
    if not songs:
        console.print("[yellow]No songs in the catalogue[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Code", style="cyan", width=8)
    table.add_column("Title", style="white")
    table.add_column("Tags", style="green")

    for song in songs:
        tag_names = ", ".join(tag.name for tag in tags_by_song.get(song.id, []))
        table.add_row(song.display_code, song.title, tag_names)

    console.print(table)
    console.print(f"[dim]{len(songs)} song(s)[/dim]")


def display_song_detail(
    song: Song, slides: Sequence[Slide], tags: Sequence[Tag]
) -> None:
    """Display one song with all of its slides."""
    tag_names = ", ".join(tag.name for tag in tags) or "-"
    console.print(
        f"\n[bold cyan]{song.display_code}[/bold cyan] {song.title}  "
        f"[dim]tags: {tag_names}[/dim]\n"
    )
    for slide in slides:
        console.print(
            Panel(slide.content, title=f"#{slide.slide_number}", expand=False)
        )


def display_presentation(slides: Sequence[PresentationSlide]) -> None:
    """Display presentation slides in running order."""
    if not slides:
        console.print("[yellow]No slides found for the given codes[/yellow]")
        return

    current_song = None
    for slide in slides:
        if slide.song_id != current_song:
            current_song = slide.song_id
            console.print(
                f"\n[bold cyan]{slide.song_code}{slide.song_order}[/bold cyan] "
                f"{slide.song_title}"
            )
        console.print(
            Panel(slide.content, title=f"#{slide.slide_number}", expand=False)
        )


def display_conflict(conflict: ConflictRecord, index: int, total: int) -> None:
    """Show an existing song next to the backup song that collides with it."""
    backup_song = conflict.backup_song
    console.print(
        f"\n[bold yellow]⚠️  Conflict {index + 1}/{total}:[/bold yellow] "
        f"[cyan]{backup_song.display_code}[/cyan] already exists"
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("", style="dim")
    table.add_column("Existing", style="white")
    table.add_column("Backup", style="cyan")
    table.add_row("Title", conflict.existing_song.title, backup_song.title)
    table.add_row("Slides", "", str(len(backup_song.slides)))
    table.add_row("Tags", "", ", ".join(backup_song.tags) or "-")
    console.print(table)


def display_import_outcomes(outcomes: Sequence[ImportOutcome]) -> None:
    """Display the per-song result of an import."""
    if not outcomes:
        console.print("[dim]No songs were imported[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Song", style="cyan", width=8)
    table.add_column("Result")

    for outcome in outcomes:
        style = STATUS_STYLES.get(outcome.status, "white")
        if outcome.status == ImportStatus.ADDED_WITH_REASSIGNED_ORDER:
            result = f"added as {outcome.code}{outcome.new_order}"
        elif outcome.status == ImportStatus.FAILED:
            result = f"failed: {outcome.error}"
        else:
            result = outcome.status.value
        label = f"{outcome.code}{outcome.order}"
        table.add_row(label, f"[{style}]{result}[/{style}]")

    console.print(table)


def display_import_summary(session: ImportSession) -> None:
    """Display totals and the final state of an import session."""
    summary: Dict[str, Any] = session.get_summary()

    if summary["state"] == "cancelled":
        console.print(
            f"\n[yellow]Import cancelled: {summary.get('cancel_reason')}. "
            "Changes already applied were kept.[/yellow]\n"
        )
    else:
        console.print("\n[bold green]✓ Import complete[/bold green]\n")

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Songs in backup", str(summary["songs"]))
    table.add_row("Conflicts", str(summary["conflicts"]))
    for status in ImportStatus:
        if summary[status.value]:
            label = status.value.replace("_", " ").capitalize()
            table.add_row(label, str(summary[status.value]))
    console.print(table)

    failed = summary[ImportStatus.FAILED.value]
    if failed:
        console.print(f"\n[red]⚠️  {failed} song(s) failed to import[/red]")
    if summary.get("tag_merge_error"):
        console.print(
            f"[red]⚠️  Tag vocabulary was not merged: "
            f"{summary['tag_merge_error']}[/red]"
        )


def display_statistics(stats: Dict[str, Any]) -> None:
    """Display catalogue row counts."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", style="green", justify="right")
    for name, count in stats.items():
        table.add_row(name, str(count))
    console.print(table)
