"""Services for Notetwin."""

from notetwin.services.classifier import classify, matches_category
from notetwin.services.markdown_parser import parse_markdown_note, parse_markdown_notes

__all__ = [
    "classify",
    "matches_category",
    "parse_markdown_note",
    "parse_markdown_notes",
]
