"""YAML frontmatter parsing for markdown pages."""

import re
from typing import Any

import yaml

from sacred_wiki.exceptions import ValidationError
from sacred_wiki.models.wiki import WikiPage

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)", re.DOTALL
)


def split_frontmatter(source: str) -> tuple[dict[str, Any], str]:
    """Split a markdown document into frontmatter data and body.

    Args:
        source: Raw file content

    Returns:
        Tuple of (frontmatter mapping, body text). Documents without a
        frontmatter block yield an empty mapping and the full text.

    Raises:
        ValidationError: If the frontmatter block is not valid YAML or
            is not a mapping
    """
    source = source.removeprefix("\ufeff")

    match = FRONTMATTER_PATTERN.match(source)
    if not match:
        return {}, source

    raw = match.group(1) or ""
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid frontmatter YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Frontmatter must be a YAML mapping")

    return data, source[match.end():]


def _as_str_list(value: Any) -> list[str]:
    """Coerce a frontmatter value into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return [str(value)]


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def page_from_frontmatter(slug: str, data: dict[str, Any]) -> WikiPage:
    """Build a WikiPage from a parsed frontmatter mapping.

    Unrecognised keys are ignored. Missing title falls back to the slug.
    """
    return WikiPage(
        slug=slug,
        title=_as_optional_str(data.get("title")) or slug,
        description=_as_optional_str(data.get("description")),
        category=_as_optional_str(data.get("category")),
        keywords=_as_str_list(data.get("keywords")),
        related=_as_str_list(data.get("related")),
        see_also=_as_str_list(data.get("seeAlso")),
    )


def strip_frontmatter(source: str) -> str:
    """Return the body of a markdown document without its frontmatter block."""
    source = source.removeprefix("\ufeff")
    match = FRONTMATTER_PATTERN.match(source)
    return source[match.end():] if match else source
