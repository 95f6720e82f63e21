"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from conftest import make_envelope_doc, make_song_doc
from worship_slides.cli.main import cli
from worship_slides.database.service import DatabaseService


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the CLI at a temporary database and backup directory."""
    path = tmp_path / "worship.db"
    monkeypatch.setenv("WORSHIP_SLIDES_DATABASE_PATH", str(path))
    monkeypatch.setenv("WORSHIP_SLIDES_BACKUP_DIRECTORY", str(tmp_path / "backups"))
    monkeypatch.delenv("WORSHIP_SLIDES_ALLOWED_CODES", raising=False)
    monkeypatch.delenv("WORSHIP_SLIDES_INTERACTIVE", raising=False)
    return path


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def catalogue(db_path):
    """Open the CLI database directly for setup and assertions."""
    service = DatabaseService(db_path)
    yield service
    service.close()


def _write_backup(tmp_path, songs, tags=None):
    path = tmp_path / "import.json"
    path.write_text(
        json.dumps(make_envelope_doc(songs, tags), ensure_ascii=False),
        encoding="utf-8",
    )
    return path


class TestDatabaseCommands:
    """Test the db command group."""

    def test_init(self, runner, db_path):
        """Test init creates the database."""
        result = runner.invoke(cli, ["db", "init"])
        assert result.exit_code == 0, result.output
        assert "Database ready" in result.output
        assert db_path.exists()

    def test_seed_and_stats(self, runner, db_path):
        """Test seeding then showing row counts."""
        result = runner.invoke(cli, ["db", "seed"])
        assert result.exit_code == 0, result.output
        assert "Seeded 8 song(s)" in result.output

        result = runner.invoke(cli, ["db", "stats"])
        assert result.exit_code == 0, result.output
        assert "songs" in result.output

    def test_clear(self, runner, catalogue):
        """Test clear deletes every song after confirmation."""
        catalogue.create_song("Song", "C", 1)

        result = runner.invoke(cli, ["db", "clear", "--yes"])

        assert result.exit_code == 0, result.output
        assert catalogue.get_all_songs() == []


class TestSongCommands:
    """Test the songs command group."""

    def test_add_and_show(self, runner, catalogue):
        """Test adding a song then showing it."""
        result = runner.invoke(
            cli,
            [
                "songs",
                "add",
                "--title",
                "Grace",
                "--code",
                "a",
                "--lyric",
                "line one",
                "--lyric",
                "line two",
                "--tag",
                "Hope",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Added A1" in result.output

        song = catalogue.get_song_by_code_order("A", 1)
        slides = catalogue.get_slides_by_song_id(song.id)
        assert [s.content for s in slides] == ["Grace", "line one", "line two"]

        result = runner.invoke(cli, ["songs", "show", "a1"])
        assert result.exit_code == 0, result.output
        assert "line two" in result.output

    def test_add_defaults_to_next_order(self, runner, catalogue):
        """Test the order defaults to one past the highest for the code."""
        catalogue.create_song("Existing", "C", 4)

        result = runner.invoke(
            cli, ["songs", "add", "--title", "New", "--code", "C", "--lyric", "x"]
        )

        assert result.exit_code == 0, result.output
        assert catalogue.get_song_by_code_order("C", 5).title == "New"

    def test_add_invalid_code(self, runner, db_path):
        """Test codes outside the allowed list are refused."""
        result = runner.invoke(
            cli, ["songs", "add", "--title", "T", "--code", "Z", "--lyric", "x"]
        )
        assert result.exit_code == 1
        assert "Invalid song" in result.output

    def test_add_existing_key(self, runner, catalogue):
        """Test an explicit order that is taken is refused."""
        catalogue.create_song("Existing", "C", 1)
        result = runner.invoke(
            cli,
            ["songs", "add", "--title", "T", "--code", "C", "--order", "1"]
            + ["--lyric", "x"],
        )
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_list_by_tag(self, runner, catalogue):
        """Test filtering the list by tag."""
        catalogue.create_song_with_content("Tagged", "C", 1, [(1, "Tagged")], ["Hope"])
        catalogue.create_song_with_content("Plain", "C", 2, [(1, "Plain")], [])

        result = runner.invoke(cli, ["songs", "list", "--tag", "hope"])

        assert result.exit_code == 0, result.output
        assert "Tagged" in result.output
        assert "Plain" not in result.output

    def test_list_unknown_tag(self, runner, db_path):
        """Test an unknown tag is reported."""
        result = runner.invoke(cli, ["songs", "list", "--tag", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_show_invalid_code(self, runner, db_path):
        """Test a malformed code is a usage error."""
        result = runner.invoke(cli, ["songs", "show", "12"])
        assert result.exit_code == 2

    def test_delete(self, runner, catalogue):
        """Test deleting a song with --yes."""
        catalogue.create_song_with_content("Song", "C", 1, [(1, "Song")], [])

        result = runner.invoke(cli, ["songs", "delete", "C1", "--yes"])

        assert result.exit_code == 0, result.output
        assert catalogue.get_all_songs() == []

    def test_presentation(self, runner, catalogue):
        """Test slides of several songs are shown in order."""
        catalogue.create_song_with_content("First", "C", 5, [(1, "first slide")], [])
        catalogue.create_song_with_content("Second", "A", 3, [(1, "second slide")], [])

        result = runner.invoke(cli, ["songs", "presentation", "A3", "C5"])

        assert result.exit_code == 0, result.output
        assert result.output.index("second slide") < result.output.index("first slide")


class TestBackupCommands:
    """Test the backup command group."""

    def test_export(self, runner, catalogue, tmp_path):
        """Test export writes a versioned JSON document."""
        catalogue.create_song_with_content("Song", "C", 1, [(1, "Song")], ["Hope"])
        output = tmp_path / "out.json"

        result = runner.invoke(cli, ["backup", "export", "-o", str(output)])

        assert result.exit_code == 0, result.output
        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["version"] == 1
        assert document["songs"][0]["code"] == "C"
        assert document["tags"] == ["Hope"]

    def test_export_default_location(self, runner, db_path, tmp_path):
        """Test export defaults to a dated file in the backup directory."""
        result = runner.invoke(cli, ["backup", "export"])

        assert result.exit_code == 0, result.output
        files = list((tmp_path / "backups").glob("worship-backup-*.json"))
        assert len(files) == 1

    def test_import_with_strategy(self, runner, catalogue, tmp_path):
        """Test a non-interactive import with new code."""
        catalogue.create_song("Existing", "C", 1)
        path = _write_backup(
            tmp_path, [make_song_doc("C", 1, title="Backup"), make_song_doc("A", 1)]
        )

        result = runner.invoke(
            cli, ["backup", "import", str(path), "--strategy", "newCode"]
        )

        assert result.exit_code == 0, result.output
        assert "Import complete" in result.output
        assert catalogue.get_song_by_code_order("C", 2).title == "Backup"
        assert catalogue.get_song_by_code_order("A", 1) is not None

    def test_import_interactive_overwrite(self, runner, catalogue, tmp_path):
        """Test answering the conflict prompt."""
        catalogue.create_song("Existing", "C", 1)
        path = _write_backup(tmp_path, [make_song_doc("C", 1, title="Backup")])

        result = runner.invoke(
            cli, ["backup", "import", str(path)], input="overwrite\n"
        )

        assert result.exit_code == 0, result.output
        assert "Conflict 1/1" in result.output
        assert catalogue.get_song_by_code_order("C", 1).title == "Backup"

    def test_import_interactive_apply_to_all(self, runner, catalogue, tmp_path):
        """Test applying the first answer to the remaining conflicts."""
        catalogue.create_song("Existing C1", "C", 1)
        catalogue.create_song("Existing C2", "C", 2)
        path = _write_backup(tmp_path, [make_song_doc("C", 1), make_song_doc("C", 2)])

        result = runner.invoke(cli, ["backup", "import", str(path)], input="new\ny\n")

        assert result.exit_code == 0, result.output
        assert catalogue.get_song_by_code_order("C", 3) is not None
        assert catalogue.get_song_by_code_order("C", 4) is not None

    def test_import_interactive_cancel(self, runner, catalogue, tmp_path):
        """Test cancelling leaves clear songs out."""
        catalogue.create_song("Existing", "C", 1)
        path = _write_backup(tmp_path, [make_song_doc("C", 1), make_song_doc("A", 1)])

        result = runner.invoke(cli, ["backup", "import", str(path)], input="cancel\n")

        assert result.exit_code == 0, result.output
        assert "Import cancelled" in result.output
        assert catalogue.get_song_by_code_order("A", 1) is None

    def test_import_interrupted_prompt_cancels(self, runner, catalogue, tmp_path):
        """Test an interrupted prompt cancels and reports applied changes."""
        catalogue.create_song("Existing C1", "C", 1)
        catalogue.create_song("Existing C2", "C", 2)
        path = _write_backup(
            tmp_path,
            [
                make_song_doc("C", 1, title="Backup C1"),
                make_song_doc("C", 2, title="Backup C2"),
                make_song_doc("A", 1),
            ],
        )

        # Input ends at the second prompt, which aborts like Ctrl-C
        result = runner.invoke(
            cli, ["backup", "import", str(path)], input="overwrite\nn\n"
        )

        assert result.exit_code == 1
        assert "Import cancelled: interrupted" in result.output
        assert "overwritten" in result.output
        assert catalogue.get_song_by_code_order("C", 1).title == "Backup C1"
        assert catalogue.get_song_by_code_order("C", 2).title == "Existing C2"
        assert catalogue.get_song_by_code_order("A", 1) is None

    def test_import_requires_strategy_when_not_interactive(
        self, runner, db_path, tmp_path
    ):
        """Test --no-interactive needs --strategy."""
        path = _write_backup(tmp_path, [])
        result = runner.invoke(cli, ["--no-interactive", "backup", "import", str(path)])
        assert result.exit_code == 2

    def test_import_invalid_backup(self, runner, catalogue, tmp_path):
        """Test a malformed backup is refused without changes."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"version": 1}), encoding="utf-8")

        result = runner.invoke(cli, ["backup", "import", str(path)])

        assert result.exit_code == 1
        assert "Invalid backup document" in result.output
        assert catalogue.get_statistics()["songs"] == 0
