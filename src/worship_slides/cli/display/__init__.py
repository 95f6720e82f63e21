"""CLI display and formatting utilities."""

from .formatters import (
    display_conflict,
    display_import_outcomes,
    display_import_summary,
    display_presentation,
    display_song_detail,
    display_song_table,
    display_statistics,
)

__all__ = [
    "display_conflict",
    "display_import_outcomes",
    "display_import_summary",
    "display_presentation",
    "display_song_detail",
    "display_song_table",
    "display_statistics",
]
