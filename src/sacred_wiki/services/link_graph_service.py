"""Link graph building over the wiki content directory."""

import logging
import re
from pathlib import Path
from typing import Any

import aiofiles

from sacred_wiki.config.settings import Settings
from sacred_wiki.exceptions import ContentUnavailableError, NotFoundError, ValidationError
from sacred_wiki.models.wiki import LinkGraph, PageView, SearchHit, WikiPage
from sacred_wiki.utils.frontmatter import page_from_frontmatter, split_frontmatter
from sacred_wiki.utils.link_extractor import DEFAULT_ROUTE_PREFIX, extract_wiki_links
from sacred_wiki.utils.toc import extract_toc

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".md"
SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
MIN_SEARCH_QUERY_LENGTH = 2
MAX_SEARCH_QUERY_LENGTH = 100
MAX_MATCH_LINES = 3


def _list_page_files(content_dir: Path) -> list[Path]:
    """List markdown page files, sorted by name.

    Raises:
        ContentUnavailableError: If the directory cannot be listed
    """
    if not content_dir.is_dir():
        raise ContentUnavailableError(f"Content directory not found: {content_dir}")
    try:
        return sorted(
            path
            for path in content_dir.iterdir()
            if path.suffix == PAGE_SUFFIX and path.is_file()
        )
    except OSError as e:
        raise ContentUnavailableError(f"Cannot read content directory {content_dir}: {e}") from e


async def _read_page_file(file_path: Path) -> str:
    try:
        async with aiofiles.open(file_path, encoding="utf-8") as f:
            return await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ContentUnavailableError(f"Cannot read page {file_path}: {e}") from e


async def build_link_graph(
    content_dir: Path | str,
    prefix: str = DEFAULT_ROUTE_PREFIX,
) -> LinkGraph:
    """Build the complete link graph from every page in a directory.

    First pass parses each page and collects its forward links (body links
    plus frontmatter `related` and `seeAlso`). Second pass inverts them into
    backlinks. Targets with no page are kept as dangling edges.

    Args:
        content_dir: Directory containing one markdown file per page
        prefix: Wiki route prefix recognised in body links

    Returns:
        Built link graph

    Raises:
        ContentUnavailableError: If the directory or any page cannot be read
            or parsed. No partial graph is returned.
    """
    content_dir = Path(content_dir)
    graph = LinkGraph()

    for file_path in _list_page_files(content_dir):
        slug = file_path.stem
        source = await _read_page_file(file_path)
        try:
            frontmatter, body = split_frontmatter(source)
        except ValidationError as e:
            raise ContentUnavailableError(f"Invalid frontmatter in {file_path}: {e}") from e

        page = page_from_frontmatter(slug, frontmatter)
        graph.pages[slug] = page
        graph.forward_links[slug] = (
            extract_wiki_links(body, prefix) | set(page.related) | set(page.see_also)
        )

    for source_slug, targets in graph.forward_links.items():
        for target in targets:
            graph.backlinks.setdefault(target, set()).add(source_slug)

    logger.info(
        f"Built link graph from {content_dir}: {len(graph.pages)} pages, "
        f"{sum(len(t) for t in graph.forward_links.values())} links"
    )
    return graph


def _resolve(graph: LinkGraph, slugs: list[str]) -> list[WikiPage]:
    """Map slugs to pages, dropping dangling slugs."""
    return [graph.pages[s] for s in slugs if s in graph.pages]


def get_backlinks(graph: LinkGraph, slug: str) -> list[WikiPage]:
    """Get pages linking to a page, sorted by slug."""
    return _resolve(graph, sorted(graph.backlinks.get(slug, set())))


def get_related_pages(graph: LinkGraph, slug: str) -> list[WikiPage]:
    """Get pages declared in a page's `related` and `seeAlso` frontmatter.

    Frontmatter order is kept, duplicates removed. Unknown slug yields [].
    """
    page = graph.pages.get(slug)
    if page is None:
        return []
    return _resolve(graph, list(dict.fromkeys([*page.related, *page.see_also])))


def get_category_pages(graph: LinkGraph, slug: str) -> list[WikiPage]:
    """Get other pages sharing a page's category."""
    page = graph.pages.get(slug)
    if page is None or not page.category:
        return []
    return [
        p for p in graph.pages.values() if p.category == page.category and p.slug != slug
    ]


def page_url(site_url: str, slug: str, prefix: str = DEFAULT_ROUTE_PREFIX) -> str:
    """Absolute public URL of a page."""
    return f"{site_url.rstrip('/')}{prefix}{slug}"


def graph_to_dict(
    graph: LinkGraph,
    site_url: str,
    prefix: str = DEFAULT_ROUTE_PREFIX,
) -> dict[str, Any]:
    """Serialize a graph into nodes, edges and summary stats."""
    pages = list(graph.pages.values())
    edges = [
        {"from": source, "to": target}
        for source, targets in graph.forward_links.items()
        for target in sorted(targets)
    ]
    categories = list(dict.fromkeys(p.category for p in pages if p.category))

    return {
        "nodes": [
            {
                "id": p.slug,
                "title": p.title,
                "category": p.category,
                "keywords": p.keywords,
                "url": page_url(site_url, p.slug, prefix),
            }
            for p in pages
        ],
        "edges": edges,
        "stats": {
            "total_pages": len(pages),
            "total_links": len(edges),
            "categories": categories,
        },
    }


def sanitize_query(raw: str) -> str:
    """Strip markup characters and script URLs from a search query."""
    cleaned = re.sub(r"[<>]", "", raw)
    cleaned = re.sub(r"javascript:", "", cleaned, flags=re.IGNORECASE)
    return cleaned.strip()


async def search_pages(
    query: str,
    content_dir: Path | str,
    site_url: str,
    max_results: int = 50,
    prefix: str = DEFAULT_ROUTE_PREFIX,
) -> list[SearchHit]:
    """Case-insensitive substring search over page metadata and bodies.

    Args:
        query: Search text (2-100 characters after sanitizing)
        content_dir: Directory containing the pages
        site_url: Public site URL for result links
        max_results: Maximum number of hits
        prefix: Wiki route prefix for result links

    Returns:
        Matching pages with up to three matching body lines each

    Raises:
        ValidationError: If the query is too short or too long
        ContentUnavailableError: If the directory cannot be listed
    """
    needle = sanitize_query(query).lower()
    if len(needle) < MIN_SEARCH_QUERY_LENGTH:
        raise ValidationError(
            f"Query must be at least {MIN_SEARCH_QUERY_LENGTH} characters"
        )
    if len(needle) > MAX_SEARCH_QUERY_LENGTH:
        raise ValidationError(
            f"Query too long (max {MAX_SEARCH_QUERY_LENGTH} characters)"
        )

    hits: list[SearchHit] = []
    for file_path in _list_page_files(Path(content_dir)):
        if len(hits) >= max_results:
            break

        slug = file_path.stem
        try:
            frontmatter, body = split_frontmatter(await _read_page_file(file_path))
        except (ContentUnavailableError, ValidationError) as e:
            logger.warning(f"Skipping page {file_path} in search: {e}")
            continue

        page = page_from_frontmatter(slug, frontmatter)
        searchable = " ".join(
            [page.title, page.description or "", *page.keywords, body]
        ).lower()
        if needle not in searchable:
            continue

        matches = [
            line.strip()
            for line in body.splitlines()
            if needle in line.lower() and line.strip()
        ][:MAX_MATCH_LINES]

        hits.append(
            SearchHit(
                slug=slug,
                title=page.title,
                description=page.description or "",
                category=page.category,
                keywords=page.keywords,
                matches=matches,
                url=page_url(site_url, slug, prefix),
            )
        )

    return hits


class LinkGraphService:
    """Service owning the content directory and a memoized link graph.

    The graph is rebuilt only when the content fingerprint (page names,
    sizes and modification times) changes.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize link graph service.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.content_dir = Path(settings.content_dir)
        self.prefix = settings.wiki_route_prefix
        self._graph: LinkGraph | None = None
        self._fingerprint: tuple[tuple[str, int, int], ...] | None = None

    def _content_fingerprint(self) -> tuple[tuple[str, int, int], ...]:
        fingerprint = []
        for path in _list_page_files(self.content_dir):
            try:
                stat = path.stat()
            except OSError as e:
                raise ContentUnavailableError(f"Cannot stat page {path}: {e}") from e
            fingerprint.append((path.name, stat.st_size, stat.st_mtime_ns))
        return tuple(fingerprint)

    async def get_graph(self) -> LinkGraph:
        """Return the link graph, rebuilding it if content changed.

        Raises:
            ContentUnavailableError: If the content cannot be read
        """
        fingerprint = self._content_fingerprint()
        if self._graph is not None and fingerprint == self._fingerprint:
            return self._graph

        graph = await build_link_graph(self.content_dir, self.prefix)
        self._graph = graph
        self._fingerprint = fingerprint
        return graph

    def invalidate(self) -> None:
        """Drop the memoized graph."""
        self._graph = None
        self._fingerprint = None

    async def search(self, query: str, max_results: int | None = None) -> list[SearchHit]:
        """Search pages in the configured content directory."""
        return await search_pages(
            query,
            self.content_dir,
            self.settings.site_url,
            max_results=max_results or self.settings.search_max_results,
            prefix=self.prefix,
        )

    async def to_dict(self) -> dict[str, Any]:
        """Serialize the current graph."""
        return graph_to_dict(await self.get_graph(), self.settings.site_url, self.prefix)

    async def load_page(self, slug: str) -> PageView:
        """Load one page with its table of contents and link context.

        A graph that cannot be built degrades to empty link lists instead
        of failing the page.

        Raises:
            ValidationError: If the slug is malformed
            NotFoundError: If no page exists for the slug
        """
        if not SLUG_PATTERN.match(slug):
            raise ValidationError(f"Invalid slug: {slug!r}")

        file_path = self.content_dir / f"{slug}{PAGE_SUFFIX}"
        if not file_path.is_file():
            raise NotFoundError(f"Page not found: {slug}")

        source = await _read_page_file(file_path)
        frontmatter, body = split_frontmatter(source)
        view = PageView(
            page=page_from_frontmatter(slug, frontmatter),
            body=body,
            toc=extract_toc(body),
        )

        try:
            graph = await self.get_graph()
        except ContentUnavailableError as e:
            logger.error(f"Link graph unavailable while loading {slug}: {e}")
            view.graph_available = False
            return view

        view.backlinks = get_backlinks(graph, slug)
        view.related = get_related_pages(graph, slug)
        view.category_pages = get_category_pages(graph, slug)
        return view
