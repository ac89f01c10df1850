"""Table of contents helpers for wiki pages."""

import re

from sacred_wiki.models.wiki import TocItem

HEADING_PATTERN = re.compile(r"^(#{2,3})[ \t]+(.+)$", re.MULTILINE)


def heading_id(text: str) -> str:
    """Build an anchor id from heading text."""
    anchor = re.sub(r"[^\w\s-]", "", text.lower())
    anchor = re.sub(r"\s+", "-", anchor)
    return anchor.strip("-")


def extract_toc(content: str) -> list[TocItem]:
    """Collect level 2 and 3 headings in document order.

    Args:
        content: Markdown body

    Returns:
        List of TocItem entries
    """
    toc: list[TocItem] = []
    for match in HEADING_PATTERN.finditer(content):
        text = match.group(2).strip()
        toc.append(TocItem(id=heading_id(text), text=text, level=len(match.group(1))))
    return toc


def add_ids_to_headings(content: str) -> str:
    """Append `{#id}` anchors to level 2 and 3 headings."""

    def _anchor(match: re.Match[str]) -> str:
        hashes, text = match.group(1), match.group(2)
        return f"{hashes} {text} {{#{heading_id(text)}}}"

    return HEADING_PATTERN.sub(_anchor, content)
