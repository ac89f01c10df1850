"""MCP server implementation for sacred-wiki."""

import logging
from typing import Any

import httpx
from mcp.server.fastmcp import FastMCP

from sacred_wiki.config.settings import Settings
from sacred_wiki.services.context import ServiceContext, create_service_context
from sacred_wiki.tools import assistant_tools, cost_tools, graph_tools, research_tools

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("sacred-wiki")

# Service context (initialized in main)
context: ServiceContext | None = None
_http_client: httpx.AsyncClient | None = None


async def initialize_services(settings: Settings) -> ServiceContext:
    """Initialize all services.

    Args:
        settings: Application settings

    Returns:
        The initialized service context
    """
    global context, _http_client

    _http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    context = create_service_context(settings, http_client=_http_client)
    logger.info(f"Services initialized (content_dir={settings.content_dir})")
    return context


async def shutdown_services() -> None:
    """Release the shared HTTP client and drop the service context."""
    global context, _http_client
    if context is not None:
        await context.cost_tracker.wait_for_alerts()
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
    context = None


def _require_context() -> ServiceContext:
    if context is None:
        raise RuntimeError("Services not initialized")
    return context


# Graph Tools
@mcp.tool()
async def wiki_graph() -> dict[str, Any]:
    """Get the complete wiki link graph.

    Returns:
        Nodes (pages), edges (links) and stats (page/link counts, categories)
    """
    return await graph_tools.wiki_graph(_require_context().link_graph_service)


@mcp.tool()
async def wiki_links(slug: str) -> dict[str, Any]:
    """Get backlinks, related pages and same-category pages for a page.

    Args:
        slug: Page slug (filename without .md)

    Returns:
        Link context for the page (empty lists for unknown slugs)
    """
    return await graph_tools.wiki_links(_require_context().link_graph_service, slug)


@mcp.tool()
async def wiki_page(slug: str) -> dict[str, Any]:
    """Load a wiki page with its table of contents and link context.

    Args:
        slug: Page slug (filename without .md)

    Returns:
        Page metadata, body, toc, backlinks, related and category pages
    """
    return await graph_tools.wiki_page(_require_context().link_graph_service, slug)


@mcp.tool()
async def wiki_search(query: str, max_results: int | None = None) -> dict[str, Any]:
    """Full-text search over page titles, descriptions, keywords and bodies.

    Args:
        query: Search text (2-100 characters)
        max_results: Maximum number of results

    Returns:
        Matching pages with matching lines
    """
    return await graph_tools.wiki_search(
        _require_context().link_graph_service, query, max_results
    )


# Assistant Tools
@mcp.tool()
async def assistant_route(query: str, selected_text: str | None = None) -> dict[str, Any]:
    """Classify a research question and choose the model to answer it.

    Args:
        query: User question
        selected_text: Text the user highlighted on the page

    Returns:
        Model profile, complexity, reasoning and cost estimate
    """
    return assistant_tools.assistant_route(query, selected_text)


@mcp.tool()
async def assistant_prompt(
    query: str,
    page_context: str | None = None,
    selected_text: str | None = None,
) -> dict[str, Any]:
    """Build a chat request with prompt-cache directives for a question.

    Args:
        query: User question
        page_context: Content of the page being read (cached)
        selected_text: Text the user highlighted on the page

    Returns:
        Request body ready for the chat completion endpoint
    """
    ctx = _require_context()
    return assistant_tools.assistant_prompt(
        query,
        page_context,
        selected_text,
        max_context_chars=ctx.settings.prompt_context_max_chars,
    )


# Research Tools
@mcp.tool()
async def research_search(
    query: str,
    max_results: int = 5,
    search_depth: str = "basic",
    include_domains: list[str] | None = None,
    exclude_domains: list[str] | None = None,
) -> dict[str, Any]:
    """Search the web for research material (cached for 7 days).

    Args:
        query: Search query
        max_results: Maximum results (1-20)
        search_depth: basic or advanced
        include_domains: Only search these domains
        exclude_domains: Skip these domains

    Returns:
        Search results with a cached flag
    """
    return await research_tools.research_search(
        _require_context().research_service,
        query,
        max_results,
        search_depth,
        include_domains,
        exclude_domains,
    )


@mcp.tool()
async def research_cache_stats(cleanup: bool = False) -> dict[str, Any]:
    """Get research cache statistics.

    Args:
        cleanup: Remove expired entries first

    Returns:
        Entry count, hit/miss counters and entry ages
    """
    return research_tools.research_cache_stats(_require_context().research_cache, cleanup)


# Cost Tools
@mcp.tool()
async def cost_log_claude_call(
    model: str,
    input_tokens: int,
    output_tokens: int,
    cached_tokens: int = 0,
    success: bool = True,
    user_id: str | None = None,
    query_id: str | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Record a completed Claude call for cost tracking.

    Args:
        model: Pricing tier (haiku/sonnet)
        input_tokens: Total input tokens
        output_tokens: Output tokens
        cached_tokens: Input tokens served from the prompt cache
        success: Whether the call succeeded
        user_id: Optional user id
        query_id: Optional query id
        error: Error message for failed calls

    Returns:
        The logged entry with its estimated cost
    """
    return await cost_tools.cost_log_claude_call(
        _require_context().cost_tracker,
        model,
        input_tokens,
        output_tokens,
        cached_tokens,
        success,
        user_id,
        query_id,
        error,
    )


@mcp.tool()
async def cost_summary(start: str | None = None, end: str | None = None) -> dict[str, Any]:
    """Summarize API costs.

    Args:
        start: Range start (ISO 8601 with offset)
        end: Range end (ISO 8601 with offset)

    Returns:
        Summary for the range, or trailing daily/weekly/monthly summaries
        with a monthly projection
    """
    return cost_tools.cost_summary(_require_context().cost_tracker, start, end)


@mcp.tool()
async def cost_cleanup() -> dict[str, Any]:
    """Drop cost log entries older than the retention window.

    Returns:
        Removed and remaining entry counts
    """
    return cost_tools.cost_cleanup(_require_context().cost_tracker)


def create_server() -> FastMCP:
    """Create and return MCP server instance.

    Returns:
        FastMCP server instance
    """
    return mcp
