"""Worship Slides song catalogue.

Stores worship songs with their lyric slides and tags, builds presentation
slide lists from song codes, and exports or imports JSON backups with
interactive conflict resolution.
"""

__version__ = "1.0.0"

from .config import Config
from .database import DatabaseService, Slide, Song, Tag
from .models import SongForm

__all__ = [
    "Config",
    "DatabaseService",
    "Song",
    "Slide",
    "Tag",
    "SongForm",
]
