"""Service layer for sacred-wiki."""

from sacred_wiki.services.context import ServiceContext, create_service_context
from sacred_wiki.services.cost_tracker import CostTracker
from sacred_wiki.services.link_graph_service import LinkGraphService
from sacred_wiki.services.research_cache import ResearchCache
from sacred_wiki.services.research_service import ResearchService

__all__ = [
    "CostTracker",
    "LinkGraphService",
    "ResearchCache",
    "ResearchService",
    "ServiceContext",
    "create_service_context",
]
