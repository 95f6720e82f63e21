"""Backup export and import reconciliation.

Handles snapshot export, conflict detection, conflict resolution and batch
import sessions.
"""

from .backup_file import (
    default_backup_filename,
    load_backup,
    parse_envelope,
    read_backup,
    save_backup,
)
from .conflict_detector import ConflictDetector, conflict_keys
from .errors import BackupFormatError, ImportSessionError
from .exporter import SnapshotExporter
from .models import (
    BACKUP_VERSION,
    BackupEnvelope,
    BackupSlide,
    BackupSongData,
    ConflictRecord,
    ConflictStrategy,
    ImportOutcome,
    ImportStatus,
)
from .resolution_executor import ResolutionExecutor
from .session import ImportSession, ImportSessionController, SessionState

__all__ = [
    # Transfer objects
    "BACKUP_VERSION",
    "BackupEnvelope",
    "BackupSlide",
    "BackupSongData",
    "ConflictRecord",
    "ConflictStrategy",
    "ImportOutcome",
    "ImportStatus",
    # Errors
    "BackupFormatError",
    "ImportSessionError",
    # Backup files
    "default_backup_filename",
    "load_backup",
    "parse_envelope",
    "read_backup",
    "save_backup",
    # Engine
    "SnapshotExporter",
    "ConflictDetector",
    "conflict_keys",
    "ResolutionExecutor",
    "ImportSession",
    "ImportSessionController",
    "SessionState",
]
