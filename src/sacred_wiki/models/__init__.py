"""Data models for sacred-wiki."""

from sacred_wiki.models.cache import (
    CacheControl,
    CachedMessage,
    CacheSavings,
    ResearchCacheEntry,
    ResearchCacheStats,
    ResearchHit,
    ResearchParams,
    ResearchResult,
)
from sacred_wiki.models.cost import (
    ApiService,
    CostLogEntry,
    CostProjection,
    CostSummary,
    ServiceBreakdown,
)
from sacred_wiki.models.routing import (
    ModelProfile,
    ModelTier,
    QueryComplexity,
    RoutingDecision,
)
from sacred_wiki.models.wiki import LinkGraph, PageView, SearchHit, TocItem, WikiPage

__all__ = [
    "ApiService",
    "CacheControl",
    "CachedMessage",
    "CacheSavings",
    "CostLogEntry",
    "CostProjection",
    "CostSummary",
    "LinkGraph",
    "ModelProfile",
    "ModelTier",
    "PageView",
    "QueryComplexity",
    "ResearchCacheEntry",
    "ResearchCacheStats",
    "ResearchHit",
    "ResearchParams",
    "ResearchResult",
    "RoutingDecision",
    "SearchHit",
    "ServiceBreakdown",
    "TocItem",
    "WikiPage",
]
