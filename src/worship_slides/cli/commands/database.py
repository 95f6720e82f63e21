"""Database maintenance commands."""

import logging

import click
from rich.console import Console

from ...database.seed import clear_database, seed_database
from ..display import display_statistics
from .init import WorshipSlidesApp, require_db

console = Console()
logger = logging.getLogger(__name__)


@click.group("db")
def db() -> None:
    """Catalogue database maintenance."""
    pass


@db.command(name="init")
@click.pass_obj
def db_init(app: WorshipSlidesApp) -> None:
    """Create the catalogue database if it does not exist yet."""
    db_service = require_db(app)
    console.print(f"[green]✓ Database ready at {db_service.db_path}[/green]")


@db.command(name="migrate")
@click.pass_obj
def db_migrate(app: WorshipSlidesApp) -> None:
    """Upgrade the database schema to the latest migration."""
    db_service = require_db(app)
    try:
        ran = db_service.run_migrations()
    except Exception as e:
        logger.exception("Migration failed")
        raise click.ClickException(f"Migration failed: {e}") from e

    if ran:
        console.print("[green]✓ Database schema is up to date[/green]")
    else:
        console.print(
            "[yellow]Alembic configuration not found, nothing to do[/yellow]"
        )


@db.command(name="seed")
@click.pass_obj
def db_seed(app: WorshipSlidesApp) -> None:
    """Fill the catalogue with sample songs and tags.

    When songs already exist only the sample tags are attached.
    """
    result = seed_database(require_db(app))
    console.print(
        f"[green]✓ Seeded {result.songs_created} song(s), "
        f"{result.tags_created} new tag(s)[/green]"
    )
    if result.songs_tagged:
        console.print(f"  Tagged {result.songs_tagged} existing song(s)")


@db.command(name="clear")
@click.confirmation_option(prompt="Delete every song in the catalogue?")
@click.pass_obj
def db_clear(app: WorshipSlidesApp) -> None:
    """Delete all songs (tags are kept)."""
    deleted = clear_database(require_db(app))
    console.print(f"[green]✓ Deleted {deleted} song(s)[/green]")


@db.command(name="stats")
@click.pass_obj
def db_stats(app: WorshipSlidesApp) -> None:
    """Show row counts of the catalogue tables."""
    display_statistics(require_db(app).get_statistics())
