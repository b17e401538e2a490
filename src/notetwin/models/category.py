"""Note categories for Notetwin."""

from enum import Enum


class Category(str, Enum):
    """Soft category computed from a note's tags and folder."""

    ALL = "all"
    SENTIMENT = "sentimento"  # Personal reflections, diary, mood
    STUDY = "estudo"  # Courses, books, professional learning

    @classmethod
    def _missing_(cls, value: object) -> "Category | None":
        """Accept English aliases and any casing."""
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {"sentiment": cls.SENTIMENT, "study": cls.STUDY}
            if normalized in aliases:
                return aliases[normalized]
            for member in cls:
                if member.value == normalized:
                    return member
        return None
