"""Wiki link extraction from markdown text."""

import re
from functools import lru_cache

DEFAULT_ROUTE_PREFIX = "/wiki/"

# [[slug]] or [[label|slug]]
WIKILINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
WHITESPACE_PATTERN = re.compile(r"\s+")


@lru_cache(maxsize=16)
def _route_patterns(prefix: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Compile the markdown-link and bare-route patterns for a route prefix."""
    escaped = re.escape(prefix)
    markdown_link = re.compile(r"\[([^\]]+)\]\(" + escaped + r"([^)]+)\)")
    bare_route = re.compile(escaped + r"([a-z0-9-]+)")
    return markdown_link, bare_route


def normalize_slug(text: str) -> str:
    """Normalize a double-bracket link target into a slug.

    Lower-cases and replaces whitespace runs with single hyphens, so
    `Holy Fool` and `holy-fool` both become `holy-fool`.
    """
    return WHITESPACE_PATTERN.sub("-", text.lower())


def extract_wiki_links(content: str, prefix: str = DEFAULT_ROUTE_PREFIX) -> set[str]:
    """Extract every wiki link target from markdown text.

    Recognised forms:
    - `[label](/wiki/slug)`: slug kept verbatim
    - `[[slug]]` and `[[label|slug]]`: slug normalized with normalize_slug()
    - bare `/wiki/slug` with slug in `[a-z0-9-]`: kept verbatim

    Args:
        content: Markdown body text
        prefix: Wiki route prefix

    Returns:
        Deduplicated set of target slugs
    """
    markdown_link, bare_route = _route_patterns(prefix)
    links: set[str] = set()

    for match in markdown_link.finditer(content):
        links.add(match.group(2))

    for match in WIKILINK_PATTERN.finditer(content):
        links.add(normalize_slug(match.group(2) or match.group(1)))

    for match in bare_route.finditer(content):
        links.add(match.group(1))

    return links
