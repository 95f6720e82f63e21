"""Tests for backup transfer objects and envelope parsing."""

import pytest

from conftest import make_envelope_doc, make_song_doc
from worship_slides.core.backup import (
    BackupEnvelope,
    BackupFormatError,
    BackupSongData,
    ImportOutcome,
    ImportStatus,
    parse_envelope,
)


class TestBackupSongData:
    """Test backup song validation."""

    def test_code_uppercased(self):
        """Test codes are normalized to uppercase."""
        song = BackupSongData.model_validate(make_song_doc("c", 2))
        assert song.code == "C"
        assert song.key == ("C", 2)
        assert song.display_code == "C2"

    def test_slide_pairs_keep_backup_order(self):
        """Test slides convert to (number, content) pairs as given."""
        song = BackupSongData.model_validate(
            make_song_doc("C", 1, slides=["Title", "Verse 1", "Verse 2"])
        )
        assert song.slide_pairs() == [(1, "Title"), (2, "Verse 1"), (3, "Verse 2")]

    def test_duplicate_slide_numbers_rejected(self):
        """Test two slides with the same number are invalid."""
        doc = make_song_doc("C", 1)
        doc["slides"][1]["slideNumber"] = 1
        with pytest.raises(ValueError):
            BackupSongData.model_validate(doc)

    @pytest.mark.parametrize("code", ["", "C1", "?"])
    def test_invalid_code_rejected(self, code):
        """Test codes must be letters."""
        with pytest.raises(ValueError):
            BackupSongData.model_validate(make_song_doc(code, 1, title="T"))

    def test_order_must_be_positive(self):
        """Test order starts at 1."""
        with pytest.raises(ValueError):
            BackupSongData.model_validate(make_song_doc("C", 0))


class TestParseEnvelope:
    """Test envelope validation."""

    def test_valid_document(self):
        """Test a well-formed document parses."""
        envelope = parse_envelope(
            make_envelope_doc(
                [make_song_doc("C", 1, tags=[" Praise "])], tags=["Praise", "Hope"]
            )
        )
        assert envelope.version == 1
        assert envelope.exported_at is not None
        assert envelope.songs[0].tags == ["Praise"]
        assert envelope.tags == ["Praise", "Hope"]

    def test_envelope_passes_through(self):
        """Test an already parsed envelope is returned as is."""
        envelope = parse_envelope(make_envelope_doc([]))
        assert parse_envelope(envelope) is envelope

    def test_missing_songs_rejected(self):
        """Test the songs field is required."""
        doc = make_envelope_doc([])
        del doc["songs"]
        with pytest.raises(BackupFormatError) as exc_info:
            parse_envelope(doc)
        assert any(error.startswith("songs") for error in exc_info.value.errors)

    def test_unknown_version_rejected(self):
        """Test versions other than 1 are rejected."""
        doc = make_envelope_doc([])
        doc["version"] = 2
        with pytest.raises(BackupFormatError):
            parse_envelope(doc)

    def test_non_object_rejected(self):
        """Test a JSON array is not an envelope."""
        with pytest.raises(BackupFormatError):
            parse_envelope([1, 2, 3])

    def test_errors_name_offending_fields(self):
        """Test validation messages point at the bad song field."""
        doc = make_envelope_doc([make_song_doc("C", 1), make_song_doc("C", 2)])
        del doc["songs"][1]["title"]
        with pytest.raises(BackupFormatError) as exc_info:
            parse_envelope(doc)
        assert "songs.1.title" in str(exc_info.value)

    def test_blank_vocabulary_tag_rejected(self):
        """Test blank tag names in the vocabulary are invalid."""
        with pytest.raises(BackupFormatError):
            parse_envelope(make_envelope_doc([], tags=["Praise", "  "]))

    def test_to_document_uses_aliases(self):
        """Test serialization writes camelCase field names."""
        envelope = BackupEnvelope.model_validate(
            make_envelope_doc([make_song_doc("C", 1)])
        )
        document = envelope.to_document()
        assert "exportedAt" in document
        assert "slideNumber" in document["songs"][0]["slides"][0]


class TestStrictIntegers:
    """Test integer fields reject values of other JSON types."""

    @pytest.mark.parametrize("version", [True, "1", 1.0])
    def test_version_must_be_integer(self, version):
        """Test booleans, strings and floats are not accepted as the version."""
        doc = make_envelope_doc([])
        doc["version"] = version
        with pytest.raises(BackupFormatError):
            parse_envelope(doc)

    @pytest.mark.parametrize("order", [True, "2", 2.0])
    def test_order_must_be_integer(self, order):
        """Test song orders must be JSON integers."""
        with pytest.raises(BackupFormatError):
            parse_envelope(make_envelope_doc([make_song_doc("C", order, title="T")]))

    @pytest.mark.parametrize("slide_number", [True, "1"])
    def test_slide_number_must_be_integer(self, slide_number):
        """Test slide numbers must be JSON integers."""
        song = make_song_doc("C", 1)
        song["slides"][0]["slideNumber"] = slide_number
        with pytest.raises(BackupFormatError):
            parse_envelope(make_envelope_doc([song]))


class TestImportOutcome:
    """Test outcome formatting."""

    def test_reassigned_outcome_str(self):
        """Test reassigned outcomes show the new code."""
        outcome = ImportOutcome(
            "C", 1, ImportStatus.ADDED_WITH_REASSIGNED_ORDER, new_order=3
        )
        assert str(outcome) == "C1 → added as C3"

    def test_skipped_outcome_str(self):
        """Test plain outcomes show the status."""
        assert str(ImportOutcome("A", 2, ImportStatus.SKIPPED)) == "A2 → skipped"
