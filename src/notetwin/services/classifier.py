"""Keyword heuristics that assign soft categories to notes.

Categories are never stored. They are computed on read from a note's
organizational metadata (tags and folder), not from its title or content.
"""

from typing import Optional, Sequence, Union

from notetwin.models.category import Category

SENTIMENT_KEYWORDS: frozenset[str] = frozenset(
    {
        "sentimento",
        "emoção",
        "reflexão",
        "reflexoes",
        "pessoal",
        "diário",
        "diario",
        "humor",
        "sentir",
        "reflections",
    }
)

STUDY_KEYWORDS: frozenset[str] = frozenset(
    {
        "estudo",
        "estudos",
        "livro",
        "curso",
        "learning",
        "profissional",
        "documentos",
        "modelos",
    }
)

CATEGORY_KEYWORDS: dict[Category, frozenset[str]] = {
    Category.SENTIMENT: SENTIMENT_KEYWORDS,
    Category.STUDY: STUDY_KEYWORDS,
}


def build_category_text(
    tags: Optional[Sequence[str]], folder_path: Optional[str]
) -> str:
    """Join tags and folder label into the text the classifier inspects."""
    tags_str = " ".join(tags) if tags else ""
    return f"{tags_str} {folder_path or ''}"


def matches_category(text: Optional[str], category: Union[Category, str]) -> bool:
    """Check whether text contains any keyword of the given category.

    Args:
        text: Text to inspect (usually from build_category_text)
        category: Category or category name ("sentimento"/"sentiment",
                  "estudo"/"study", "all")

    Returns:
        True if any keyword occurs case-insensitively. Empty text never
        matches; Category.ALL matches any note.
    """
    category = Category(category)
    if category is Category.ALL:
        return True
    if not text:
        return False
    lower = text.lower()
    return any(keyword in lower for keyword in CATEGORY_KEYWORDS[category])


def classify(text: Optional[str]) -> set[Category]:
    """Return every concrete category the text matches (possibly none)."""
    return {c for c in CATEGORY_KEYWORDS if matches_category(text, c)}
