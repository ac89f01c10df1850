"""Tests for frontmatter parsing."""

import pytest

from sacred_wiki.exceptions import ValidationError
from sacred_wiki.utils.frontmatter import (
    page_from_frontmatter,
    split_frontmatter,
    strip_frontmatter,
)


class TestSplitFrontmatter:
    """Test splitting documents into frontmatter and body."""

    def test_parses_mapping_and_body(self):
        """Test a document with a frontmatter block."""
        data, body = split_frontmatter("---\ntitle: Salos\ncategory: concepts\n---\nBody text\n")

        assert data == {"title": "Salos", "category": "concepts"}
        assert body == "Body text\n"

    def test_document_without_frontmatter(self):
        """Test that plain documents pass through unchanged."""
        data, body = split_frontmatter("# Heading\n\nText")

        assert data == {}
        assert body == "# Heading\n\nText"

    def test_empty_frontmatter_block(self):
        """Test that an empty block yields an empty mapping."""
        data, body = split_frontmatter("---\n---\nBody")

        assert data == {}
        assert body == "Body"

    def test_byte_order_mark_is_ignored(self):
        """Test that a leading BOM does not hide the frontmatter."""
        data, body = split_frontmatter("\ufeff---\ntitle: Kenosis\n---\nText")

        assert data["title"] == "Kenosis"
        assert body == "Text"

    def test_crlf_line_endings(self):
        """Test Windows line endings."""
        data, body = split_frontmatter("---\r\ntitle: Mast\r\n---\r\nText")

        assert data["title"] == "Mast"
        assert body == "Text"

    def test_invalid_yaml_raises(self):
        """Test that malformed YAML raises ValidationError."""
        with pytest.raises(ValidationError):
            split_frontmatter("---\ntitle: [unclosed\n---\nBody")

    def test_non_mapping_raises(self):
        """Test that a YAML list is rejected."""
        with pytest.raises(ValidationError):
            split_frontmatter("---\n- one\n- two\n---\nBody")


class TestPageFromFrontmatter:
    """Test building pages from frontmatter data."""

    def test_all_fields(self):
        """Test that recognised keys are mapped."""
        page = page_from_frontmatter(
            "holy-fool",
            {
                "title": "Holy Fool",
                "description": "Feigned madness",
                "category": "concepts",
                "keywords": ["salos", "yurodstvo"],
                "related": ["yurodivy"],
                "seeAlso": ["salos"],
                "draft": True,
            },
        )

        assert page.slug == "holy-fool"
        assert page.title == "Holy Fool"
        assert page.description == "Feigned madness"
        assert page.category == "concepts"
        assert page.keywords == ["salos", "yurodstvo"]
        assert page.related == ["yurodivy"]
        assert page.see_also == ["salos"]

    def test_missing_title_falls_back_to_slug(self):
        """Test the title fallback."""
        page = page_from_frontmatter("majdhub", {})

        assert page.title == "majdhub"
        assert page.category is None
        assert page.related == []

    def test_scalar_list_values_are_coerced(self):
        """Test that a single string becomes a one-item list."""
        page = page_from_frontmatter("mast", {"keywords": "intoxication", "related": None})

        assert page.keywords == ["intoxication"]
        assert page.related == []


def test_strip_frontmatter():
    """Test that strip_frontmatter returns only the body."""
    assert strip_frontmatter("---\ntitle: X\n---\nBody") == "Body"
    assert strip_frontmatter("No frontmatter") == "No frontmatter"
