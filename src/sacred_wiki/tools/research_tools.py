"""Research search MCP tools."""

from dataclasses import asdict
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from sacred_wiki.exceptions import ResearchUnavailableError
from sacred_wiki.models.cache import ResearchParams
from sacred_wiki.services.research_cache import ResearchCache
from sacred_wiki.services.research_service import ResearchService
from sacred_wiki.tools import create_error_response


async def research_search(
    service: ResearchService,
    query: str,
    max_results: int = 5,
    search_depth: str = "basic",
    include_domains: list[str] | None = None,
    exclude_domains: list[str] | None = None,
) -> dict[str, Any]:
    """Search the web for research material, using the cache when possible.

    Args:
        service: Research service instance
        query: Search query
        max_results: Maximum results (1-20)
        search_depth: basic or advanced
        include_domains: Only search these domains
        exclude_domains: Skip these domains

    Returns:
        Research result or error response
    """
    try:
        params = ResearchParams(
            query=query,
            max_results=max_results,
            search_depth=search_depth,
            include_domains=include_domains or [],
            exclude_domains=exclude_domains or [],
        )
    except PydanticValidationError as e:
        return create_error_response(
            message="Invalid research parameters",
            error_type="ValidationError",
            details={"errors": e.errors(include_url=False, include_context=False)},
        )

    try:
        result = await service.search(params)
    except ResearchUnavailableError as e:
        return create_error_response(message=str(e), error_type="ResearchUnavailableError")

    return result.model_dump(mode="json")


def research_cache_stats(cache: ResearchCache, cleanup: bool = False) -> dict[str, Any]:
    """Report research cache statistics.

    Args:
        cache: Research cache instance
        cleanup: Remove expired entries first

    Returns:
        Cache statistics, with the number of removed entries when cleaning
    """
    removed = cache.cleanup_expired() if cleanup else 0
    stats = asdict(cache.get_stats())
    stats["removed"] = removed
    return stats
