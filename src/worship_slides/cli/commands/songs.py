"""Song catalogue commands."""

import logging
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from sqlalchemy.exc import IntegrityError

from ...database import DatabaseService, Song, parse_song_code
from ...models import SongForm
from ..display import display_presentation, display_song_detail, display_song_table
from .init import WorshipSlidesApp, require_db

console = Console()
logger = logging.getLogger(__name__)


def _find_song(db_service: DatabaseService, song_code: str) -> Song:
    parsed = parse_song_code(song_code)
    if parsed is None:
        raise click.BadParameter(
            f"'{song_code}' is not a song code like C12", param_hint="CODE"
        )
    song = db_service.get_song_by_code_order(*parsed)
    if song is None:
        raise click.ClickException(f"Song {song_code.upper()} not found")
    return song


@click.group("songs")
def songs() -> None:
    """Browse and edit the song catalogue."""
    pass


@songs.command(name="list")
@click.option("--tag", "tag_name", help="Only show songs carrying this tag")
@click.pass_obj
def songs_list(app: WorshipSlidesApp, tag_name: Optional[str]) -> None:
    """List songs ordered by code and order."""
    db_service = require_db(app)

    if tag_name:
        tag = db_service.get_tag_by_name(tag_name)
        if tag is None:
            raise click.ClickException(f"Tag '{tag_name}' not found")
        song_list = db_service.get_songs_by_tag_id(tag.id)
    else:
        song_list = db_service.get_all_songs()

    tags_by_song = {
        song.id: db_service.get_tags_by_song_id(song.id) for song in song_list
    }
    display_song_table(song_list, tags_by_song)


@songs.command(name="show")
@click.argument("code")
@click.pass_obj
def songs_show(app: WorshipSlidesApp, code: str) -> None:
    """Show one song and its slides, e.g. ``songs show C3``."""
    db_service = require_db(app)
    song = _find_song(db_service, code)
    display_song_detail(
        song,
        db_service.get_slides_by_song_id(song.id),
        db_service.get_tags_by_song_id(song.id),
    )


@songs.command(name="add")
@click.option("--title", required=True, help="Song title")
@click.option("--code", required=True, help="Song code letter")
@click.option(
    "--order",
    type=int,
    default=None,
    help="Order within the code (defaults to the next free number)",
)
@click.option(
    "--lyric",
    "lyrics",
    multiple=True,
    required=True,
    help="Lyric slide text; repeat for each slide",
)
@click.option("--tag", "tags", multiple=True, help="Tag name; repeatable")
@click.pass_obj
def songs_add(
    app: WorshipSlidesApp,
    title: str,
    code: str,
    order: Optional[int],
    lyrics: Tuple[str, ...],
    tags: Tuple[str, ...],
) -> None:
    """Add a song. The title becomes slide 1."""
    db_service = require_db(app)

    if order is None:
        order = db_service.get_max_order_by_code(code.strip().upper()) + 1

    try:
        form = SongForm.model_validate(
            {
                "title": title,
                "code": code,
                "order": order,
                "lyrics": list(lyrics),
                "tags": list(tags),
            },
            context={"allowed_codes": app.config.allowed_codes},
        )
    except ValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        raise click.ClickException(f"Invalid song: {messages}") from e

    if db_service.get_song_by_code_order(form.code, form.order) is not None:
        raise click.ClickException(f"Song {form.code}{form.order} already exists")

    try:
        song = db_service.create_song_with_content(
            form.title, form.code, form.order, form.slide_pairs(), form.tags
        )
    except IntegrityError as e:
        logger.error("Failed to add song %s%s: %s", form.code, form.order, e)
        raise click.ClickException(
            f"Song {form.code}{form.order} could not be saved"
        ) from e

    console.print(
        f"[green]✓ Added {song.display_code} '{song.title}' "
        f"with {len(form.slide_pairs())} slide(s)[/green]"
    )


@songs.command(name="delete")
@click.argument("code")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def songs_delete(app: WorshipSlidesApp, code: str, yes: bool) -> None:
    """Delete a song with its slides and tag links."""
    db_service = require_db(app)
    song = _find_song(db_service, code)

    if not yes and not click.confirm(
        f"Delete {song.display_code} '{song.title}'?", default=False
    ):
        raise click.Abort()

    db_service.delete_song(song.id)
    console.print(f"[green]✓ Deleted {song.display_code}[/green]")


@songs.command(name="presentation")
@click.argument("codes", nargs=-1, required=True)
@click.pass_obj
def songs_presentation(app: WorshipSlidesApp, codes: Tuple[str, ...]) -> None:
    """Show the slides of several songs in order, e.g. ``C5 C6 A3``.

    Unknown codes are skipped.
    """
    display_presentation(require_db(app).get_slides_for_presentation(list(codes)))
