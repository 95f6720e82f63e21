"""Snapshot export of the whole catalogue."""

import logging
from datetime import datetime, timezone

from ...database.service import DatabaseService
from .models import BACKUP_VERSION, BackupEnvelope, BackupSlide, BackupSongData

logger = logging.getLogger(__name__)


class SnapshotExporter:
    """Serializes songs, slides, tags and the tag vocabulary into an envelope."""

    def __init__(self, db_service: DatabaseService):
        """Initialize exporter.

        Args:
            db_service: Catalogue database service
        """
        self.db_service = db_service

    def export_snapshot(self) -> BackupEnvelope:
        """Build an envelope from the current catalogue.

        Songs come ordered by (code, order) and slides by slide number. The
        vocabulary is read separately so tags without songs are kept.
        """
        songs = []
        with self.db_service.get_session() as session:
            for song in self.db_service.get_all_songs(session=session):
                slides = self.db_service.get_slides_by_song_id(song.id, session=session)
                tags = self.db_service.get_tags_by_song_id(song.id, session=session)
                songs.append(
                    BackupSongData(
                        title=song.title,
                        code=song.code,
                        order=song.order,
                        slides=[
                            BackupSlide(
                                slide_number=slide.slide_number, content=slide.content
                            )
                            for slide in slides
                        ],
                        tags=[tag.name for tag in tags],
                    )
                )

            vocabulary = [
                tag.name for tag in self.db_service.get_all_tags(session=session)
            ]

        envelope = BackupEnvelope(
            version=BACKUP_VERSION,
            exported_at=datetime.now(timezone.utc),
            songs=songs,
            tags=vocabulary,
        )
        logger.info(
            "Exported snapshot: %d songs, %d tags", len(songs), len(vocabulary)
        )
        return envelope
