"""Database package for the song catalogue.

Contains the pure database layer (models, service, seed data). The backup
import/export engine lives in core/.
"""

from .models import Base, Slide, Song, SongTag, Tag
from .service import DatabaseService, PresentationSlide, parse_song_code

__all__ = [
    # Models
    "Base",
    "Song",
    "Slide",
    "Tag",
    "SongTag",
    # Database service
    "DatabaseService",
    "PresentationSlide",
    "parse_song_code",
]
