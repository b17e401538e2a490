"""Unit tests for the Category enum."""

import pytest

from notetwin.models.category import Category


class TestCategoryParsing:
    """Tests for building categories from user input."""

    def test_canonical_values(self):
        assert Category("sentimento") is Category.SENTIMENT
        assert Category("estudo") is Category.STUDY
        assert Category("all") is Category.ALL

    def test_english_aliases(self):
        assert Category("sentiment") is Category.SENTIMENT
        assert Category("study") is Category.STUDY

    def test_case_and_whitespace(self):
        assert Category(" Estudo ") is Category.STUDY

    def test_unknown(self):
        with pytest.raises(ValueError):
            Category("other")
