"""Unit tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from notetwin.cli import app
from notetwin.config import get_settings
from notetwin.database.repository import Repository

runner = CliRunner()


@pytest.fixture
def local_env(monkeypatch, temp_db_path):
    """Point the CLI at a temporary local database."""
    monkeypatch.delenv("DIGITAL_TWIN_DB_PATH", raising=False)
    monkeypatch.setenv("DIGITAL_TWIN_LOCAL_DB_PATH", str(temp_db_path))
    get_settings.cache_clear()
    yield temp_db_path
    get_settings.cache_clear()


@pytest.fixture
def vault_env(monkeypatch, vault_repository):
    """Point the CLI at a read-only vault database."""
    monkeypatch.setenv("DIGITAL_TWIN_DB_PATH", str(vault_repository.database_path))
    get_settings.cache_clear()
    yield vault_repository.database_path
    get_settings.cache_clear()


class TestImportCommand:
    """Tests for the import command."""

    def test_import_text(self, local_env):
        """Test importing markdown passed with --text."""
        result = runner.invoke(app, ["import", "--text", "# Hello\nBody text"])

        assert result.exit_code == 0
        assert "Imported 1 note(s)" in result.stdout
        notes = Repository(local_env).list_notes()
        assert notes[0].title == "Hello"

    def test_import_file(self, local_env, tmp_path):
        """Test importing a multi-note file."""
        path = tmp_path / "notes.md"
        path.write_text("One\n\n---\n\nTwo", encoding="utf-8")

        result = runner.invoke(app, ["import", str(path)])

        assert result.exit_code == 0
        assert "Imported 2 note(s)" in result.stdout

    def test_import_stdin(self, local_env):
        result = runner.invoke(app, ["import"], input="From stdin")

        assert result.exit_code == 0
        assert "Imported 1 note(s)" in result.stdout

    def test_import_nothing(self, local_env):
        """Test that an empty payload is a validation error."""
        result = runner.invoke(app, ["import"], input="")

        assert result.exit_code == 1
        assert "Provide 'file' or 'text'" in result.stdout

    def test_import_in_vault_mode(self, vault_env):
        """Test that imports are refused against a vault."""
        result = runner.invoke(app, ["import", "--text", "# Nope"])

        assert result.exit_code == 1
        assert "vault" in result.stdout

    def test_import_stdin_in_vault_mode(self, vault_env):
        """Test that the vault refusal wins over an empty payload."""
        result = runner.invoke(app, ["import"], input="")

        assert result.exit_code == 1
        assert "vault" in result.stdout
        assert "Provide 'file' or 'text'" not in result.stdout


class TestQueryCommands:
    """Tests for notes, show, insights and stats."""

    def test_notes_by_category(self, local_env):
        """Test listing notes filtered by category."""
        repo = Repository(local_env)
        repo.insert_note(content="x", title="Study note", tags=["estudo"])
        repo.insert_note(content="y", title="Diary note", tags=["diario"])

        result = runner.invoke(app, ["notes", "--category", "estudo"])

        assert result.exit_code == 0
        assert "Study note" in result.stdout
        assert "Diary note" not in result.stdout

    def test_notes_by_english_category(self, local_env):
        """Test that English category aliases are accepted."""
        repo = Repository(local_env)
        repo.insert_note(content="x", title="Study note", tags=["estudo"])
        repo.insert_note(content="y", title="Diary note", tags=["diario"])

        result = runner.invoke(app, ["notes", "--category", "sentiment"])

        assert result.exit_code == 0
        assert "Diary note" in result.stdout
        assert "Study note" not in result.stdout

    def test_notes_unknown_category(self, local_env):
        result = runner.invoke(app, ["notes", "--category", "recipes"])

        assert result.exit_code == 1
        assert "Unknown category" in result.stdout

    def test_notes_empty(self, local_env):
        result = runner.invoke(app, ["notes"])

        assert result.exit_code == 0
        assert "No notes found" in result.stdout

    def test_show_note(self, local_env):
        """Test showing a note with its insights."""
        repo = Repository(local_env)
        note_id = repo.insert_note(content="Body", title="Shown")
        repo.add_insight(note_id, "mood", "Upbeat")

        result = runner.invoke(app, ["show", str(note_id)])

        assert result.exit_code == 0
        assert "Shown" in result.stdout
        assert "Upbeat" in result.stdout

    def test_show_missing(self, local_env):
        result = runner.invoke(app, ["show", "42"])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_show_invalid_id(self, local_env):
        """Test that a non-numeric id is rejected."""
        result = runner.invoke(app, ["show", "abc"])
        assert result.exit_code != 0

    def test_insights_and_add_insight(self, local_env):
        """Test adding and listing insights."""
        note_id = Repository(local_env).insert_note(content="x", title="Week")

        added = runner.invoke(app, ["add-insight", str(note_id), "summary", "Busy"])
        listed = runner.invoke(app, ["insights", "--type", "summary"])

        assert added.exit_code == 0
        assert listed.exit_code == 0
        assert "Busy" in listed.stdout

    def test_add_insight_missing_note(self, local_env):
        result = runner.invoke(app, ["add-insight", "7", "summary", "Orphan"])

        assert result.exit_code == 1
        assert "does not exist" in result.stdout

    def test_stats_vault(self, vault_env):
        """Test stats against a vault database."""
        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Supports Upload" in result.stdout
        assert "no" in result.stdout

    def test_missing_vault(self, monkeypatch, tmp_path):
        """Test that a missing vault path is reported with the path."""
        monkeypatch.setenv("DIGITAL_TWIN_DB_PATH", str(tmp_path / "gone.db"))
        get_settings.cache_clear()
        try:
            result = runner.invoke(app, ["notes"])
        finally:
            get_settings.cache_clear()

        assert result.exit_code == 1
        assert "Failed to open Digital Twin database" in result.stdout

    def test_vault_not_a_database(self, monkeypatch, tmp_path):
        """Test that an unreadable vault file exits cleanly with a message."""
        path = tmp_path / "notes.txt"
        path.write_text("this is not sqlite", encoding="utf-8")
        monkeypatch.setenv("DIGITAL_TWIN_DB_PATH", str(path))
        get_settings.cache_clear()
        try:
            result = runner.invoke(app, ["stats"])
        finally:
            get_settings.cache_clear()

        assert result.exit_code == 1
        assert "Failed to open Digital Twin database" in result.stdout


class TestMiscCommands:
    """Tests for config and version."""

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Notetwin v" in result.stdout

    def test_config_shows_mode(self, local_env):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "local" in result.stdout
