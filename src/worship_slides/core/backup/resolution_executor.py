"""Resolution strategies for backup songs that collide with the catalogue.

Each resolution is one database transaction: slide replacement, title update
and tag association replacement either all land or none do. A storage failure
is contained to the song being resolved and reported as a ``failed`` outcome.
"""

import logging
from typing import AbstractSet, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database.service import DatabaseService
from .models import (
    BackupSongData,
    ConflictRecord,
    ConflictStrategy,
    ImportOutcome,
    ImportStatus,
)

logger = logging.getLogger(__name__)


class ResolutionExecutor:
    """Applies skip, overwrite or new-code to a single conflict."""

    def __init__(self, db_service: DatabaseService):
        """Initialize resolution executor.

        Args:
            db_service: Catalogue database service
        """
        self.db_service = db_service

    def resolve(
        self,
        conflict: ConflictRecord,
        strategy: ConflictStrategy,
        reserved_orders: AbstractSet[int] = frozenset(),
    ) -> ImportOutcome:
        """Resolve one conflict with the given strategy.

        Args:
            conflict: The colliding backup song and the song it collides with
            strategy: Resolution strategy to apply
            reserved_orders: Orders of the same code that other songs of this
                import still need; new-code allocation skips past them

        Returns:
            Outcome for the backup song. Storage failures give ``failed``.
        """
        backup_song = conflict.backup_song
        strategy = ConflictStrategy(strategy)

        if strategy == ConflictStrategy.SKIP:
            logger.info("Skipped %s", backup_song.display_code)
            return ImportOutcome(
                backup_song.code, backup_song.order, ImportStatus.SKIPPED
            )

        try:
            if strategy == ConflictStrategy.OVERWRITE:
                return self._overwrite(conflict)
            return self._add_with_new_order(backup_song, reserved_orders)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to %s %s: %s", strategy.value, backup_song.display_code, e
            )
            return ImportOutcome(
                backup_song.code,
                backup_song.order,
                ImportStatus.FAILED,
                error=str(e),
            )

    def _overwrite(self, conflict: ConflictRecord) -> ImportOutcome:
        backup_song = conflict.backup_song
        with self.db_service.transaction() as session:
            replaced = self.db_service.replace_song_content(
                conflict.existing_song.id,
                backup_song.title,
                backup_song.slide_pairs(),
                backup_song.tags,
                session=session,
            )

        if not replaced:
            # The row vanished after detection; nothing was written
            logger.warning(
                "Song %s disappeared before overwrite", backup_song.display_code
            )
            return ImportOutcome(
                backup_song.code,
                backup_song.order,
                ImportStatus.FAILED,
                error="existing song no longer exists",
            )

        logger.info("Overwrote %s", backup_song.display_code)
        return ImportOutcome(
            backup_song.code, backup_song.order, ImportStatus.OVERWRITTEN
        )

    def _add_with_new_order(
        self, backup_song: BackupSongData, reserved_orders: AbstractSet[int]
    ) -> ImportOutcome:
        with self.db_service.transaction() as session:
            new_order = self.next_free_order(
                backup_song.code, reserved_orders, session=session
            )
            self.db_service.create_song_with_content(
                backup_song.title,
                backup_song.code,
                new_order,
                backup_song.slide_pairs(),
                backup_song.tags,
                session=session,
            )

        logger.info(
            "Added %s as %s%d", backup_song.display_code, backup_song.code, new_order
        )
        return ImportOutcome(
            backup_song.code,
            backup_song.order,
            ImportStatus.ADDED_WITH_REASSIGNED_ORDER,
            new_order=new_order,
        )

    def next_free_order(
        self,
        code: str,
        reserved_orders: AbstractSet[int] = frozenset(),
        session: Optional[Session] = None,
    ) -> int:
        """Return one past the highest order in use for ``code``.

        The maximum is read from the catalogue on every call, so reassignments
        earlier in the same batch are taken into account. Only correct while
        imports run one at a time. Reserved orders are stepped over.
        """
        candidate = self.db_service.get_max_order_by_code(code, session=session) + 1
        while candidate in reserved_orders:
            candidate += 1
        return candidate
