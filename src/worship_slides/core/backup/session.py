"""Batch import sessions.

An import runs as an explicit ``ImportSession`` owned by the caller and driven
step by step through ``ImportSessionController``:

1. ``prepare_import`` validates the document and detects conflicts once
2. ``resolve_next`` applies a strategy to the current conflict, or to it and
   every later one when ``apply_to_all`` is set
3. once the last conflict is resolved, all clear songs are inserted and the
   tag vocabulary is merged

``cancel`` stops a session waiting for a resolution. Work already applied
stays committed.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ...database.service import DatabaseService
from .backup_file import parse_envelope
from .conflict_detector import ConflictDetector, conflict_keys
from .errors import ImportSessionError
from .models import (
    BackupEnvelope,
    BackupSongData,
    ConflictRecord,
    ConflictStrategy,
    ImportOutcome,
    ImportStatus,
)
from .resolution_executor import ResolutionExecutor

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle of an import session."""

    SCANNING = "scanning"
    AWAITING_RESOLUTION = "awaiting_resolution"
    IMPORTING = "importing"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass
class ImportSession:
    """State of one import, passed explicitly to every controller call."""

    envelope: BackupEnvelope
    conflicts: List[ConflictRecord] = dataclass_field(default_factory=list)
    state: SessionState = SessionState.SCANNING
    current_index: int = 0
    apply_to_all: bool = False
    outcomes: List[ImportOutcome] = dataclass_field(default_factory=list)
    tags_merged: bool = False
    cancel_reason: Optional[str] = None
    tag_merge_error: Optional[str] = None

    @property
    def clear_songs(self) -> List[BackupSongData]:
        """Backup songs without a collision, in envelope order."""
        return ConflictDetector.clear_songs(self.envelope, self.conflicts)

    @property
    def clear_count(self) -> int:
        """Number of backup songs that will be inserted directly."""
        return len(self.clear_songs)

    @property
    def current_conflict(self) -> Optional[ConflictRecord]:
        """Conflict waiting for a strategy, if any."""
        if self.state != SessionState.AWAITING_RESOLUTION:
            return None
        return self.conflicts[self.current_index]

    @property
    def remaining_conflicts(self) -> int:
        """Conflicts not yet resolved."""
        if self.state != SessionState.AWAITING_RESOLUTION:
            return 0
        return len(self.conflicts) - self.current_index

    @property
    def is_finished(self) -> bool:
        """True once the session is done or cancelled."""
        return self.state in (SessionState.DONE, SessionState.CANCELLED)

    def get_summary(self) -> Dict[str, Any]:
        """Counts per outcome status plus the terminal state."""
        counts = Counter(outcome.status.value for outcome in self.outcomes)
        summary: Dict[str, Any] = {
            "state": self.state.value,
            "songs": len(self.envelope.songs),
            "conflicts": len(self.conflicts),
            "clear": self.clear_count,
        }
        summary.update({status.value: counts[status.value] for status in ImportStatus})
        if self.cancel_reason:
            summary["cancel_reason"] = self.cancel_reason
        if self.tag_merge_error:
            summary["tag_merge_error"] = self.tag_merge_error
        return summary


class ImportSessionController:
    """Drives import sessions against the catalogue.

    Holds no per-import state, so several sessions can exist side by side.
    They must still be run one at a time against the same catalogue.
    """

    def __init__(self, db_service: DatabaseService):
        """Initialize controller.

        Args:
            db_service: Catalogue database service
        """
        self.db_service = db_service
        self.detector = ConflictDetector(db_service)
        self.executor = ResolutionExecutor(db_service)

    def prepare_import(self, raw_envelope: Any) -> ImportSession:
        """Validate a backup document and scan it for conflicts.

        With no conflicts the import runs to completion immediately.

        Raises:
            BackupFormatError: if the document is not a valid envelope. Nothing
                is written in that case.
        """
        envelope = parse_envelope(raw_envelope)
        session = ImportSession(envelope=envelope)

        session.conflicts = self.detector.detect_conflicts(envelope)
        if session.conflicts:
            session.state = SessionState.AWAITING_RESOLUTION
            logger.info(
                "Import prepared: %d conflict(s), %d clear song(s)",
                len(session.conflicts),
                session.clear_count,
            )
        else:
            self._finish(session)
        return session

    def resolve_next(
        self,
        session: ImportSession,
        strategy: ConflictStrategy,
        apply_to_all: bool = False,
    ) -> ImportSession:
        """Resolve the current conflict, or it and all later ones.

        Conflicts resolved before ``apply_to_all`` was set are left as they
        are. After the last conflict the clear songs are imported.

        Raises:
            ImportSessionError: if the session is not waiting for a resolution
        """
        if session.state != SessionState.AWAITING_RESOLUTION:
            raise ImportSessionError(
                f"Cannot resolve conflicts in state '{session.state.value}'"
            )

        strategy = ConflictStrategy(strategy)
        session.apply_to_all = apply_to_all
        if apply_to_all:
            last_index = len(session.conflicts)
        else:
            last_index = session.current_index + 1
        reserved = self._reserved_orders(session)

        # Strictly in index order: new-code allocation sees earlier additions
        while session.current_index < last_index:
            conflict = session.conflicts[session.current_index]
            outcome = self.executor.resolve(
                conflict,
                strategy,
                reserved_orders=reserved.get(conflict.backup_song.code, frozenset()),
            )
            session.outcomes.append(outcome)
            session.current_index += 1

        if session.current_index >= len(session.conflicts):
            self._finish(session)
        return session

    def cancel(
        self, session: ImportSession, reason: str = "cancelled by user"
    ) -> ImportSession:
        """Stop a session that is waiting for a resolution.

        Nothing already applied is rolled back, and clear songs are not
        imported.

        Raises:
            ImportSessionError: if the session is not waiting for a resolution
        """
        if session.state != SessionState.AWAITING_RESOLUTION:
            raise ImportSessionError(
                f"Cannot cancel a session in state '{session.state.value}'"
            )
        session.state = SessionState.CANCELLED
        session.cancel_reason = reason
        logger.info(
            "Import cancelled after %d of %d conflict(s): %s",
            session.current_index,
            len(session.conflicts),
            reason,
        )
        return session

    def import_all(
        self, raw_envelope: Any, strategy: ConflictStrategy
    ) -> ImportSession:
        """Run a whole import non-interactively with one strategy."""
        session = self.prepare_import(raw_envelope)
        if session.state == SessionState.AWAITING_RESOLUTION:
            self.resolve_next(session, strategy, apply_to_all=True)
        return session

    def merge_tag_vocabulary(self, tag_names: Iterable[str]) -> int:
        """Create every tag name that does not exist yet.

        Never removes or renames tags; running it again changes nothing.

        Returns:
            Number of tags created
        """
        created = 0
        with self.db_service.transaction() as s:
            for name in tag_names:
                if self.db_service.get_tag_by_name(name, session=s) is None:
                    self.db_service.create_tag(name, session=s)
                    created += 1
        logger.info("Tag vocabulary merged: %d new tag(s)", created)
        return created

    def _finish(self, session: ImportSession) -> None:
        session.state = SessionState.IMPORTING
        for backup_song in session.clear_songs:
            session.outcomes.append(self._insert_clear_song(backup_song))

        if not session.tags_merged:
            try:
                self.merge_tag_vocabulary(session.envelope.tags)
                session.tags_merged = True
            except SQLAlchemyError as e:
                logger.error("Failed to merge tag vocabulary: %s", e)
                session.tag_merge_error = str(e)

        session.state = SessionState.DONE
        logger.info("Import finished: %s", session.get_summary())

    def _insert_clear_song(self, backup_song: BackupSongData) -> ImportOutcome:
        try:
            with self.db_service.transaction() as s:
                self.db_service.create_song_with_content(
                    backup_song.title,
                    backup_song.code,
                    backup_song.order,
                    backup_song.slide_pairs(),
                    backup_song.tags,
                    session=s,
                )
        except SQLAlchemyError as e:
            logger.error("Failed to add %s: %s", backup_song.display_code, e)
            return ImportOutcome(
                backup_song.code, backup_song.order, ImportStatus.FAILED, error=str(e)
            )

        logger.info("Added %s", backup_song.display_code)
        return ImportOutcome(backup_song.code, backup_song.order, ImportStatus.ADDED)

    @staticmethod
    def _reserved_orders(session: ImportSession) -> Dict[str, FrozenSet[int]]:
        keys = conflict_keys(session.conflicts)
        reserved: Dict[str, set] = {}
        for song in session.envelope.songs:
            if song.key not in keys:
                reserved.setdefault(song.code, set()).add(song.order)
        return {code: frozenset(orders) for code, orders in reserved.items()}
