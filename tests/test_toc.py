"""Tests for table of contents helpers."""

from sacred_wiki.utils.toc import add_ids_to_headings, extract_toc, heading_id


def test_heading_id():
    """Test anchor ids drop punctuation and hyphenate spaces."""
    assert heading_id("Self-emptying") == "self-emptying"
    assert heading_id("What's in a Name?") == "whats-in-a-name"


def test_extract_toc_levels_two_and_three():
    """Test that only level 2 and 3 headings are collected, in order."""
    content = "# Title\n\n## Origins\n\ntext\n\n### Emesa\n\n#### Too deep\n\n## Legacy\n"

    toc = extract_toc(content)

    assert [(item.id, item.text, item.level) for item in toc] == [
        ("origins", "Origins", 2),
        ("emesa", "Emesa", 3),
        ("legacy", "Legacy", 2),
    ]


def test_extract_toc_empty():
    """Test documents without headings."""
    assert extract_toc("Just a paragraph.") == []


def test_add_ids_to_headings():
    """Test that anchors are appended to headings."""
    result = add_ids_to_headings("## In Orthodoxy\n\nBody\n")

    assert result == "## In Orthodoxy {#in-orthodoxy}\n\nBody\n"
