"""Backup export and import commands."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...core.backup import (
    BackupFormatError,
    ConflictStrategy,
    ImportSession,
    ImportSessionController,
    SessionState,
    SnapshotExporter,
    default_backup_filename,
    read_backup,
    save_backup,
)
from ..display import display_conflict, display_import_outcomes, display_import_summary
from .init import WorshipSlidesApp, require_db

console = Console()
logger = logging.getLogger(__name__)

# Prompt answers mapped to strategies; "cancel" stops the session
PROMPT_CHOICES = {
    "skip": ConflictStrategy.SKIP,
    "overwrite": ConflictStrategy.OVERWRITE,
    "new": ConflictStrategy.NEW_CODE,
}


@click.group("backup")
def backup() -> None:
    """Export the catalogue or import a backup file."""
    pass


@backup.command(name="export")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Backup file to write (defaults to a dated file in the backup directory)",
)
@click.pass_obj
def backup_export(app: WorshipSlidesApp, output: Optional[Path]) -> None:
    """Write every song, slide and tag to a JSON backup file."""
    db_service = require_db(app)
    if output is None:
        output = app.config.backup_directory / default_backup_filename()

    envelope = SnapshotExporter(db_service).export_snapshot()
    try:
        save_backup(envelope, output)
    except OSError as e:
        raise click.ClickException(f"Could not write backup: {e}") from e

    console.print(
        f"[green]✓ Exported {len(envelope.songs)} song(s) and "
        f"{len(envelope.tags)} tag(s) to {output}[/green]"
    )


def _resolve_interactively(
    controller: ImportSessionController, session: ImportSession
) -> None:
    """Ask how to handle each conflict until the session ends.

    Interrupting a prompt cancels the session and reports what was applied.
    """
    try:
        _prompt_for_conflicts(controller, session)
    except click.Abort:
        if session.state == SessionState.AWAITING_RESOLUTION:
            controller.cancel(session, reason="interrupted")
        display_import_outcomes(session.outcomes)
        display_import_summary(session)
        raise


def _prompt_for_conflicts(
    controller: ImportSessionController, session: ImportSession
) -> None:
    total = len(session.conflicts)
    while session.state == SessionState.AWAITING_RESOLUTION:
        conflict = session.current_conflict
        if conflict is None:
            break
        display_conflict(conflict, session.current_index, total)

        choice = click.prompt(
            "Keep existing (skip), replace it (overwrite), add under a new "
            "number (new) or stop (cancel)?",
            type=click.Choice([*PROMPT_CHOICES, "cancel"]),
            default="skip",
        )
        if choice == "cancel":
            controller.cancel(session)
            break

        apply_to_all = False
        if session.remaining_conflicts > 1:
            apply_to_all = click.confirm(
                f"Apply '{choice}' to the remaining "
                f"{session.remaining_conflicts - 1} conflict(s)?",
                default=False,
            )
        controller.resolve_next(session, PROMPT_CHOICES[choice], apply_to_all)


@backup.command(name="import")
@click.argument(
    "path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--strategy",
    type=click.Choice([strategy.value for strategy in ConflictStrategy]),
    help="Resolve every conflict the same way without prompting",
)
@click.pass_obj
def backup_import(app: WorshipSlidesApp, path: Path, strategy: Optional[str]) -> None:
    """Import a JSON backup, resolving conflicts with existing songs.

    A conflict is a backup song whose code and order already exist. Songs
    without a conflict are added after all conflicts are resolved.
    """
    db_service = require_db(app)

    if strategy is None and not app.config.interactive_mode:
        raise click.UsageError("--strategy is required in non-interactive mode")

    try:
        raw = read_backup(path)
        controller = ImportSessionController(db_service)
        if strategy is not None:
            session = controller.import_all(raw, ConflictStrategy(strategy))
        else:
            session = controller.prepare_import(raw)
            if session.state == SessionState.AWAITING_RESOLUTION:
                console.print(
                    f"[bold]{len(session.conflicts)} conflict(s) found, "
                    f"{session.clear_count} song(s) can be added directly[/bold]"
                )
                _resolve_interactively(controller, session)
    except BackupFormatError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"Could not read backup: {e}") from e

    display_import_outcomes(session.outcomes)
    display_import_summary(session)
