"""Markdown note parser.

Turns raw markdown into note fields. Two conventions are normalized to the
same shape: a frontmatter block at the top of the document, or a leading
``# Heading`` used as the title. Frontmatter wins when both are present.

The frontmatter is a line-oriented mini-format, not YAML. Only ``title:``,
``tags:``/``tag:`` and ``folder_path:`` are read; other keys are kept in the
raw block but otherwise ignored.
"""

import re
from typing import Optional

from notetwin.models.note import ParsedNote

NOTE_SEPARATOR = "\n\n---\n\n"

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n?", re.DOTALL)
TITLE_RE = re.compile(r"^title:\s*(.+)$", re.MULTILINE)
TAGS_RE = re.compile(r"^tags?:\s*(.+)$", re.MULTILINE)
FOLDER_RE = re.compile(r"^folder_path:\s*(.+)$", re.MULTILINE)
H1_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
QUOTES_RE = re.compile(r"^[\"']|[\"']$")
TAG_SPLIT_RE = re.compile(r"[,\s]+")

# Blank-line padding keeps the separator from matching a frontmatter fence
SEPARATOR_RE = re.compile(r"\n\n---+\n\n")


def _parse_tags(value: str) -> list[str]:
    return [tag for tag in TAG_SPLIT_RE.split(value.strip()) if tag]


def parse_markdown_note(raw: str) -> ParsedNote:
    """Parse one markdown document into note fields.

    Args:
        raw: Markdown text, optionally starting with a frontmatter block

    Returns:
        ParsedNote. ``content`` falls back to ``raw`` when nothing is left
        after removing frontmatter and heading, so it is only empty when
        ``raw`` is.
    """
    content = raw.strip()
    title: Optional[str] = None
    tags: Optional[list[str]] = None
    folder_path: Optional[str] = None
    frontmatter: Optional[str] = None

    fm_match = FRONTMATTER_RE.match(content)
    if fm_match:
        frontmatter = fm_match.group(1)
        content = content[fm_match.end():]

        title_match = TITLE_RE.search(frontmatter)
        if title_match:
            title = QUOTES_RE.sub("", title_match.group(1).strip())

        tags_match = TAGS_RE.search(frontmatter)
        if tags_match:
            tags = _parse_tags(tags_match.group(1))

        folder_match = FOLDER_RE.search(frontmatter)
        if folder_match:
            folder_path = folder_match.group(1).strip()

    # Fallback: first H1 heading as title
    if not title:
        h1_match = H1_RE.search(content)
        if h1_match:
            title = h1_match.group(1).strip()
            content = H1_RE.sub("", content, count=1).strip()

    return ParsedNote(
        title=title,
        content=content.strip() or raw,
        tags=tags or None,
        folder_path=folder_path,
        frontmatter=frontmatter,
    )


def parse_markdown_notes(raw: str) -> list[ParsedNote]:
    """Parse a document that may hold several notes.

    Notes are separated by a line of three or more dashes with a blank line
    on each side. Input without such a separator is a single note.

    Returns:
        Parsed notes in document order; empty for blank input
    """
    trimmed = raw.strip()
    if not trimmed:
        return []

    chunks = [chunk for chunk in SEPARATOR_RE.split(trimmed) if chunk.strip()]
    if len(chunks) > 1:
        return [parse_markdown_note(chunk) for chunk in chunks]

    return [parse_markdown_note(trimmed)]


def is_multi_note(raw: str) -> bool:
    """True when raw contains the canonical note separator."""
    return NOTE_SEPARATOR in raw
