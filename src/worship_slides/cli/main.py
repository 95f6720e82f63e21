"""Command-line interface for the worship slides catalogue.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any

import click

from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import WorshipSlidesApp, backup, db, songs


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.option("--no-interactive", is_flag=True, help="Disable interactive mode")
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: str, no_interactive: bool) -> None:
    """Worship Slides song catalogue.

    Manage songs, tags and presentation slides, and move the catalogue
    between machines with JSON backups.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()

    config_override = {}
    if no_interactive:
        config_override["interactive_mode"] = False

    app = WorshipSlidesApp(config_override)
    ctx.obj = app
    ctx.call_on_close(app.close)


cli.add_command(db)
cli.add_command(songs)
cli.add_command(backup)


if __name__ == "__main__":
    cli()
