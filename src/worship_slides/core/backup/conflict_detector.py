"""Detection of key collisions between a backup and the live catalogue."""

import logging
from typing import Iterable, List, Set, Tuple

from ...database.service import DatabaseService
from .models import BackupEnvelope, BackupSongData, ConflictRecord

logger = logging.getLogger(__name__)


def conflict_keys(conflicts: Iterable[ConflictRecord]) -> Set[Tuple[str, int]]:
    """Return the (code, order) keys covered by ``conflicts``."""
    return {conflict.key for conflict in conflicts}


class ConflictDetector:
    """Finds backup songs whose (code, order) already exists.

    Performs reads only. Running it twice against an unchanged catalogue
    yields the same records in the same order.
    """

    def __init__(self, db_service: DatabaseService):
        """Initialize detector.

        Args:
            db_service: Catalogue database service
        """
        self.db_service = db_service

    def detect_conflicts(self, envelope: BackupEnvelope) -> List[ConflictRecord]:
        """Return one record per colliding backup song, in envelope order."""
        conflicts: List[ConflictRecord] = []
        with self.db_service.get_session() as session:
            for backup_song in envelope.songs:
                existing = self.db_service.get_song_by_code_order(
                    backup_song.code, backup_song.order, session=session
                )
                if existing is not None:
                    conflicts.append(
                        ConflictRecord(backup_song=backup_song, existing_song=existing)
                    )

        logger.info(
            "Detected %d conflict(s) among %d backup songs",
            len(conflicts),
            len(envelope.songs),
        )
        return conflicts

    @staticmethod
    def clear_songs(
        envelope: BackupEnvelope, conflicts: Iterable[ConflictRecord]
    ) -> List[BackupSongData]:
        """Backup songs without a collision, in envelope order."""
        keys = conflict_keys(conflicts)
        return [song for song in envelope.songs if song.key not in keys]
