"""Data models for Notetwin."""

from notetwin.models.category import Category
from notetwin.models.note import ImportResult, Insight, Note, ParsedNote

__all__ = ["Category", "ImportResult", "Insight", "Note", "ParsedNote"]
