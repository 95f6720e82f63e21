"""Models for the worship slides application."""

from .models import DEFAULT_ALLOWED_CODES, SongForm

__all__ = [
    "SongForm",
    "DEFAULT_ALLOWED_CODES",
]
