"""Note and insight models for Notetwin."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Insight:
    """A derived annotation attached to a note."""

    note_id: int
    insight_type: str
    insight_text: str

    # Local database metadata
    id: Optional[int] = None
    created_at: Optional[str] = None

    # Filled in by joined listings
    note_title: Optional[str] = None


@dataclass
class Note:
    """Represents a processed note from the Digital Twin database."""

    title: Optional[str]
    content: str

    # Local database metadata
    id: Optional[int] = None
    body_content: Optional[str] = None
    tags: Optional[list[str]] = None
    folder_path: Optional[str] = None
    frontmatter: Optional[str] = None
    processed_at: Optional[str] = None  # ISO 8601

    # Only populated for single-note lookups
    insights: list[Insight] = field(default_factory=list)

    @property
    def category_text(self) -> str:
        """Organizational metadata used for categorization (tags + folder)."""
        from notetwin.services.classifier import build_category_text

        return build_category_text(self.tags, self.folder_path)


@dataclass
class ParsedNote:
    """Structured fields extracted from one markdown document."""

    title: Optional[str]
    content: str
    tags: Optional[list[str]] = None
    folder_path: Optional[str] = None
    frontmatter: Optional[str] = None  # Raw block between the --- fences


@dataclass
class ImportResult:
    """Result of an ingestion run."""

    ids: list[int] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.ids)

    @property
    def message(self) -> str:
        return f"Imported {self.imported} note(s)"
