"""Repository for note and insight storage.

The store runs in one of two modes, chosen once from settings:

* local: a writable SQLite file created on first use, accepts imports
* external (vault): an existing database opened read-only
"""

import json
import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence, Union

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import DatabaseError, IntegrityError
from sqlalchemy.orm import Session

from notetwin.config import Settings, get_settings
from notetwin.database.schema import (
    InsightRecord,
    NoteRecord,
    init_database,
)
from notetwin.models.category import Category
from notetwin.models.note import Insight, Note
from notetwin.services.classifier import build_category_text, classify, matches_category

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
SCAN_LIMIT = 500


class NoteStoreError(Exception):
    """Base error for the note store."""

    pass


class StorageOpenError(NoteStoreError):
    """The database file could not be opened."""

    pass


class ReadOnlyStoreError(NoteStoreError):
    """A write was attempted while using an external vault database."""

    pass


class Repository:
    """Repository for reading and importing Digital Twin notes."""

    def __init__(
        self,
        database_path: Union[str, Path],
        read_only: bool = False,
        scan_limit: int = SCAN_LIMIT,
    ):
        """Initialize repository for a database file.

        Args:
            database_path: SQLite file path
            read_only: Open an existing vault database without write access
            scan_limit: Recent rows fetched before in-memory filtering

        Raises:
            StorageOpenError: If a vault database is missing or unreadable
        """
        self.database_path = Path(database_path)
        self.read_only = read_only
        self.scan_limit = scan_limit

        if read_only:
            self._check_vault_path()

        try:
            if not read_only:
                self.database_path.parent.mkdir(parents=True, exist_ok=True)
            self.session_factory = init_database(self.database_path, read_only=read_only)
        except (OSError, DatabaseError) as e:
            logger.error("Could not initialize %s: %s", self.database_path, e)
            raise StorageOpenError(self._open_error_message()) from e

        if read_only:
            self._check_vault_schema()
        logger.debug(
            "Opened %s note store at %s",
            "vault" if read_only else "local",
            self.database_path,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Repository":
        """Build the repository for the process-wide mode."""
        settings = settings or get_settings()
        return cls(
            settings.database_path,
            read_only=not settings.is_local_mode,
            scan_limit=settings.scan_limit,
        )

    @property
    def is_local_mode(self) -> bool:
        """True when imports are supported (no vault configured)."""
        return not self.read_only

    def _check_vault_path(self) -> None:
        path = self.database_path
        if not path.is_file() or not os.access(path, os.R_OK):
            logger.error("Vault database not readable: %s", path)
            raise StorageOpenError(self._open_error_message())

    def _check_vault_schema(self) -> None:
        """Fail fast unless the vault is a SQLite database with both tables."""
        with self._session() as session:
            inspector = inspect(session.connection())
            missing = [
                table
                for table in (NoteRecord.__tablename__, InsightRecord.__tablename__)
                if not inspector.has_table(table)
            ]
        if missing:
            logger.error("Vault %s lacks tables: %s", self.database_path, missing)
            raise StorageOpenError(
                self._open_error_message(f"missing table(s) {', '.join(missing)}")
            )

    def _open_error_message(self, reason: Optional[str] = None) -> str:
        detail = f" ({reason})" if reason else ""
        if self.read_only:
            return (
                f"Failed to open Digital Twin database at {self.database_path}{detail}. "
                "Set DIGITAL_TWIN_DB_PATH in .env to an existing database "
                "or unset it to use in-app storage and uploads."
            )
        return (
            f"Failed to open local database at {self.database_path}{detail}. "
            "Check that the directory is writable or set DIGITAL_TWIN_LOCAL_DB_PATH."
        )

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """Open a session with its own connection, closed on exit.

        Database failures other than constraint violations are reported as
        StorageOpenError naming the database path.
        """
        with self.session_factory() as session:
            try:
                session.connection()
            except DatabaseError as e:
                logger.error("Could not connect to %s: %s", self.database_path, e)
                raise StorageOpenError(self._open_error_message(str(e.orig))) from e
            try:
                yield session
            except IntegrityError:
                raise
            except DatabaseError as e:
                logger.error("Query failed on %s: %s", self.database_path, e)
                raise StorageOpenError(self._open_error_message(str(e.orig))) from e

    def _require_local(self, action: str) -> None:
        if not self.is_local_mode:
            raise ReadOnlyStoreError(
                f"Cannot {action} when using vault database {self.database_path}. "
                "Unset DIGITAL_TWIN_DB_PATH to use in-app storage and uploads."
            )

    # ==================== Note Operations ====================

    def list_notes(
        self,
        category: Union[Category, str] = Category.ALL,
        search: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[Note]:
        """List notes, most recently processed first.

        Category and search filters are applied in memory over the most
        recent ``scan_limit`` rows, so older matches outside that window are
        not returned.

        Args:
            category: Category to keep, or "all"
            search: Case-insensitive substring of title, content or body
            limit: Maximum notes returned

        Returns:
            List of notes
        """
        category = Category(category)
        search_lower = search.strip().lower() if search and search.strip() else None
        filtered = category is not Category.ALL or search_lower is not None
        fetch_limit = self.scan_limit if filtered else limit

        with self._session() as session:
            stmt = (
                select(NoteRecord)
                .order_by(NoteRecord.processed_at.desc(), NoteRecord.id.desc())
                .limit(fetch_limit)
            )
            notes = [self._record_to_note(r) for r in session.scalars(stmt).all()]

        if category is not Category.ALL:
            notes = [n for n in notes if matches_category(n.category_text, category)]

        if search_lower is not None:
            notes = [
                n
                for n in notes
                if search_lower in (n.title or "").lower()
                or search_lower in (n.content or "").lower()
                or search_lower in (n.body_content or "").lower()
            ]

        return notes[:limit]

    def get_note_by_id(self, note_id: int) -> Optional[Note]:
        """Get a note with its insights (newest first), or None if absent."""
        with self._session() as session:
            record = session.get(NoteRecord, note_id)
            if record is None:
                return None
            note = self._record_to_note(record)
            note.insights = [self._record_to_insight(r) for r in record.insights]
            return note

    def insert_note(
        self,
        content: str,
        title: Optional[str] = None,
        body_content: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        folder_path: Optional[str] = None,
        frontmatter: Optional[str] = None,
    ) -> int:
        """Insert a note. Only works in local mode.

        Returns:
            The new note ID

        Raises:
            ReadOnlyStoreError: If using a vault database
        """
        self._require_local("insert notes")

        with self._session() as session:
            record = NoteRecord(
                title=title,
                content=content,
                body_content=body_content if body_content is not None else content,
                tags=self._serialize_tags(tags),
                folder_path=folder_path,
                frontmatter=frontmatter,
                processed_at=self._now(),
            )
            session.add(record)
            session.commit()
            logger.debug("Inserted note %s (%r)", record.id, title)
            return record.id

    # ==================== Insight Operations ====================

    def list_insights(
        self,
        insight_type: Optional[str] = None,
        note_id: Optional[int] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[Insight]:
        """List insights, newest first, with the title of their note."""
        stmt = select(InsightRecord, NoteRecord.title).outerjoin(InsightRecord.note)
        if insight_type:
            stmt = stmt.where(InsightRecord.insight_type == insight_type)
        if note_id:
            stmt = stmt.where(InsightRecord.note_id == note_id)
        stmt = stmt.order_by(
            InsightRecord.created_at.desc(), InsightRecord.id.desc()
        ).limit(limit)

        with self._session() as session:
            insights = []
            for record, note_title in session.execute(stmt).all():
                insight = self._record_to_insight(record)
                insight.note_title = note_title
                insights.append(insight)
            return insights

    def add_insight(self, note_id: int, insight_type: str, insight_text: str) -> int:
        """Attach an insight to an existing note. Only works in local mode.

        Raises:
            ReadOnlyStoreError: If using a vault database
            NoteStoreError: If the note does not exist
        """
        self._require_local("add insights")

        with self._session() as session:
            record = InsightRecord(
                note_id=note_id,
                insight_type=insight_type,
                insight_text=insight_text,
                created_at=self._now(),
            )
            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise NoteStoreError(
                    f"Cannot add insight: note {note_id} does not exist"
                ) from e
            return record.id

    # ==================== Statistics ====================

    def get_stats(self) -> dict:
        """Get note/insight counts and per-category note counts.

        Every note is classified, so this scans the whole notes table.
        """
        with self._session() as session:
            total_notes = session.scalar(select(func.count()).select_from(NoteRecord))
            total_insights = session.scalar(
                select(func.count()).select_from(InsightRecord)
            )
            rows = session.execute(
                select(NoteRecord.tags, NoteRecord.folder_path)
            ).all()

        by_category = {Category.SENTIMENT.value: 0, Category.STUDY.value: 0}
        for tags, folder_path in rows:
            text = build_category_text(self._deserialize_tags(tags), folder_path)
            for category in classify(text):
                by_category[category.value] += 1

        return {
            "total_notes": total_notes,
            "total_insights": total_insights,
            "by_category": by_category,
            "supports_upload": self.is_local_mode,
        }

    # ==================== Helper Methods ====================

    def _record_to_note(self, record: NoteRecord) -> Note:
        """Convert database record to Note model."""
        return Note(
            id=record.id,
            title=record.title,
            content=record.content,
            body_content=record.body_content,
            tags=self._deserialize_tags(record.tags),
            folder_path=record.folder_path,
            frontmatter=record.frontmatter,
            processed_at=record.processed_at,
        )

    @staticmethod
    def _record_to_insight(record: InsightRecord) -> Insight:
        """Convert database record to Insight model."""
        return Insight(
            id=record.id,
            note_id=record.note_id,
            insight_type=record.insight_type,
            insight_text=record.insight_text,
            created_at=record.created_at,
        )

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _serialize_tags(tags: Optional[Sequence[str]]) -> Optional[str]:
        """Serialize tags to a JSON array, dropping blanks. Empty becomes NULL."""
        if not tags:
            return None
        cleaned = [t.strip() for t in tags if t and t.strip()]
        return json.dumps(cleaned, ensure_ascii=False) if cleaned else None

    @staticmethod
    def _deserialize_tags(data: Optional[str]) -> Optional[list[str]]:
        """Deserialize a JSON tag array. Unreadable values become None."""
        if not data:
            return None
        try:
            tags = json.loads(data)
        except ValueError:
            return None
        if not isinstance(tags, list):
            return None
        return [str(t) for t in tags if t] or None
