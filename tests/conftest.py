"""Pytest fixtures for Notetwin tests."""

import tempfile
from pathlib import Path

import pytest

from notetwin.database.repository import Repository


@pytest.fixture
def temp_db_path():
    """Provide a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def repository(temp_db_path):
    """Provide a local-mode repository with a temporary database."""
    return Repository(temp_db_path)


@pytest.fixture
def vault_repository(temp_db_path):
    """Provide a read-only repository over a pre-populated database."""
    local = Repository(temp_db_path)
    note_id = local.insert_note(
        content="Vault entry", title="From vault", tags=["diario"]
    )
    local.add_insight(note_id, "mood", "Calm week")
    return Repository(temp_db_path, read_only=True)
