"""Service context wiring for request handlers."""

from dataclasses import dataclass

import httpx

from sacred_wiki.config.settings import Settings
from sacred_wiki.services.cost_tracker import CostTracker
from sacred_wiki.services.link_graph_service import LinkGraphService
from sacred_wiki.services.research_cache import ResearchCache
from sacred_wiki.services.research_service import ResearchService


@dataclass
class ServiceContext:
    """Mutable per-process state, passed explicitly to tool handlers."""

    settings: Settings
    link_graph_service: LinkGraphService
    research_cache: ResearchCache
    cost_tracker: CostTracker
    research_service: ResearchService


def create_service_context(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> ServiceContext:
    """Build every service from settings.

    Args:
        settings: Application settings
        http_client: Optional shared client for research requests and budget alerts

    Returns:
        Wired service context
    """
    research_cache = ResearchCache(
        ttl_seconds=settings.research_cache_ttl_seconds,
        similarity_threshold=settings.research_similarity_threshold,
        max_entries=settings.research_cache_max_entries,
    )
    cost_tracker = CostTracker(settings, http_client=http_client)

    return ServiceContext(
        settings=settings,
        link_graph_service=LinkGraphService(settings),
        research_cache=research_cache,
        cost_tracker=cost_tracker,
        research_service=ResearchService(
            cache=research_cache,
            cost_tracker=cost_tracker,
            settings=settings,
            client=http_client,
        ),
    )
