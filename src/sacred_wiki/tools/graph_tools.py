"""Link graph MCP tools."""

from dataclasses import asdict
from typing import Any

from sacred_wiki.exceptions import ContentUnavailableError, NotFoundError, ValidationError
from sacred_wiki.models.wiki import WikiPage
from sacred_wiki.services.link_graph_service import (
    LinkGraphService,
    get_backlinks,
    get_category_pages,
    get_related_pages,
)
from sacred_wiki.tools import create_error_response


def _page_summary(page: WikiPage) -> dict[str, Any]:
    return {
        "slug": page.slug,
        "title": page.title,
        "description": page.description,
        "category": page.category,
    }


async def wiki_graph(service: LinkGraphService) -> dict[str, Any]:
    """Return the full link graph as nodes, edges and stats.

    Args:
        service: Link graph service instance

    Returns:
        Graph payload or error response
    """
    try:
        return await service.to_dict()
    except ContentUnavailableError as e:
        return create_error_response(message=str(e), error_type="ContentUnavailableError")


async def wiki_links(service: LinkGraphService, slug: str) -> dict[str, Any]:
    """Return backlinks, related pages and category siblings for a page.

    Unknown slugs yield empty lists.

    Args:
        service: Link graph service instance
        slug: Page slug

    Returns:
        Link context or error response
    """
    if not slug:
        return create_error_response(
            message="slug cannot be empty",
            error_type="ValidationError",
        )

    try:
        graph = await service.get_graph()
    except ContentUnavailableError as e:
        return create_error_response(message=str(e), error_type="ContentUnavailableError")

    return {
        "slug": slug,
        "exists": slug in graph.pages,
        "backlinks": [_page_summary(p) for p in get_backlinks(graph, slug)],
        "related": [_page_summary(p) for p in get_related_pages(graph, slug)],
        "category_pages": [_page_summary(p) for p in get_category_pages(graph, slug)],
    }


async def wiki_page(service: LinkGraphService, slug: str) -> dict[str, Any]:
    """Load a page with its table of contents and link context.

    Args:
        service: Link graph service instance
        slug: Page slug

    Returns:
        Page payload or error response
    """
    try:
        view = await service.load_page(slug)
    except ValidationError as e:
        return create_error_response(message=str(e), error_type="ValidationError")
    except NotFoundError as e:
        return create_error_response(message=str(e), error_type="NotFoundError")
    except ContentUnavailableError as e:
        return create_error_response(message=str(e), error_type="ContentUnavailableError")

    return {
        "page": view.page.model_dump(by_alias=True),
        "body": view.body,
        "toc": [asdict(item) for item in view.toc],
        "backlinks": [_page_summary(p) for p in view.backlinks],
        "related": [_page_summary(p) for p in view.related],
        "category_pages": [_page_summary(p) for p in view.category_pages],
        "graph_available": view.graph_available,
    }


async def wiki_search(
    service: LinkGraphService,
    query: str,
    max_results: int | None = None,
) -> dict[str, Any]:
    """Full-text search across wiki pages.

    Args:
        service: Link graph service instance
        query: Search text (2-100 characters)
        max_results: Maximum number of hits (default from settings)

    Returns:
        Search hits or error response
    """
    if max_results is not None and (max_results < 1 or max_results > 500):
        return create_error_response(
            message="max_results must be between 1 and 500",
            error_type="ValidationError",
        )

    try:
        hits = await service.search(query, max_results=max_results)
    except ValidationError as e:
        return create_error_response(message=str(e), error_type="ValidationError")
    except ContentUnavailableError as e:
        return create_error_response(message=str(e), error_type="ContentUnavailableError")

    return {
        "query": query,
        "count": len(hits),
        "results": [hit.model_dump() for hit in hits],
        "max_results": max_results or service.settings.search_max_results,
    }
