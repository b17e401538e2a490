"""SQLAlchemy database schema for Notetwin."""

import sqlite3
from pathlib import Path
from typing import Optional

from sqlalchemy import (
    Engine,
    ForeignKey,
    Index,
    Integer,
    Text,
    create_engine,
    event,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    sessionmaker,
)
from sqlalchemy.pool import NullPool


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class NoteRecord(Base):
    """Database record for a processed note."""

    __tablename__ = "processed_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    body_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # JSON array
    folder_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    frontmatter: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_at: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # ISO 8601

    # Relationships
    insights: Mapped[list["InsightRecord"]] = relationship(
        "InsightRecord",
        back_populates="note",
        order_by=lambda: (InsightRecord.created_at.desc(), InsightRecord.id.desc()),
    )

    __table_args__ = (Index("idx_notes_processed", "processed_at"),)


class InsightRecord(Base):
    """Database record for an insight derived from a note."""

    __tablename__ = "insights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("processed_notes.id"), nullable=False
    )
    insight_type: Mapped[str] = mapped_column(Text, nullable=False)
    insight_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # ISO 8601

    # Relationships
    note: Mapped["NoteRecord"] = relationship("NoteRecord", back_populates="insights")

    __table_args__ = (Index("idx_insights_note", "note_id"),)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite leaves foreign key enforcement off unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def get_connection_uri(database_path: Path, read_only: bool = False) -> str:
    """SQLite ``file:`` URI for a database file.

    The path is percent-encoded, so ``#``, ``?`` and ``%`` in file names are
    not read as URI syntax.
    """
    mode = "ro" if read_only else "rwc"
    return f"{Path(database_path).resolve().as_uri()}?mode={mode}"


def get_engine(database_path: Path, read_only: bool = False) -> Engine:
    """Create database engine.

    Uses NullPool so every session opens and closes its own connection.
    """
    uri = get_connection_uri(database_path, read_only=read_only)

    def connect() -> sqlite3.Connection:
        return sqlite3.connect(uri, uri=True)

    engine = create_engine("sqlite://", creator=connect, echo=False, poolclass=NullPool)
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create session factory."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_database(
    database_path: Path, read_only: bool = False
) -> sessionmaker[Session]:
    """Initialize database and return session factory.

    The schema is only created for writable databases.
    """
    engine = get_engine(database_path, read_only=read_only)
    if not read_only:
        Base.metadata.create_all(engine)
    return get_session_factory(engine)
