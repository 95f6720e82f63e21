"""CLI command modules."""

from .backup import backup
from .database import db
from .init import InitializationError, WorshipSlidesApp, init_db, require_db
from .songs import songs

__all__ = [
    "WorshipSlidesApp",
    "InitializationError",
    "init_db",
    "require_db",
    "db",
    "songs",
    "backup",
]
