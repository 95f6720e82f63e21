"""Tests for snapshot export."""

from worship_slides.core.backup import BACKUP_VERSION, SnapshotExporter


class TestSnapshotExporter:
    """Test catalogue snapshot export."""

    def test_empty_catalogue(self, db_service):
        """Test exporting an empty catalogue."""
        envelope = SnapshotExporter(db_service).export_snapshot()
        assert envelope.version == BACKUP_VERSION
        assert envelope.songs == []
        assert envelope.tags == []
        assert envelope.exported_at is not None

    def test_export_songs_slides_and_tags(self, db_service):
        """Test songs are ordered by key with slides and tag names."""
        db_service.create_song_with_content(
            "Second", "C", 2, [(2, "Verse"), (1, "Second")], ["Hope"]
        )
        db_service.create_song_with_content("First", "A", 1, [(1, "First")], [])

        envelope = SnapshotExporter(db_service).export_snapshot()

        assert [song.display_code for song in envelope.songs] == ["A1", "C2"]
        c2 = envelope.songs[1]
        assert c2.title == "Second"
        assert c2.slide_pairs() == [(1, "Second"), (2, "Verse")]
        assert c2.tags == ["Hope"]

    def test_vocabulary_includes_unused_tags(self, db_service):
        """Test tags without songs are exported."""
        db_service.create_tag("Unused")
        db_service.create_song_with_content("Song", "C", 1, [(1, "Song")], ["Used"])

        envelope = SnapshotExporter(db_service).export_snapshot()

        assert sorted(envelope.tags) == ["Unused", "Used"]

    def test_export_does_not_modify(self, db_service):
        """Test exporting leaves the catalogue untouched."""
        db_service.create_song_with_content("Song", "C", 1, [(1, "Song")], ["Tag"])
        before = db_service.get_statistics()

        SnapshotExporter(db_service).export_snapshot()

        assert db_service.get_statistics() == before
