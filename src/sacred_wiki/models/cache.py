"""Prompt cache and research cache models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class CacheControl(BaseModel):
    """Cache directive understood by the downstream provider."""

    type: Literal["ephemeral"] = "ephemeral"


class CachedMessage(BaseModel):
    """Prompt segment, optionally marked as reusable by the provider cache."""

    role: Literal["system", "user", "assistant"]
    content: str
    cache_control: CacheControl | None = None

    @property
    def cacheable(self) -> bool:
        return self.cache_control is not None


class CacheSavings(BaseModel):
    """Estimated effect of prompt caching on input cost."""

    cached_tokens: float
    regular_cost: float
    cached_cost: float
    savings: float
    savings_percent: float


class ResearchParams(BaseModel):
    """Research search request parameters."""

    query: str = Field(min_length=1, max_length=400)
    max_results: int = Field(default=5, ge=1, le=20)
    search_depth: Literal["basic", "advanced"] = "basic"
    include_domains: list[str] = Field(default_factory=list)
    exclude_domains: list[str] = Field(default_factory=list)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        """Reject whitespace-only queries."""
        if not v.strip():
            raise ValueError("query cannot be blank")
        return v


class ResearchHit(BaseModel):
    """One research search result."""

    title: str = ""
    url: str = ""
    content: str = ""
    score: float = 0.0


class ResearchResult(BaseModel):
    """Result payload of a research search."""

    query: str
    results: list[ResearchHit] = Field(default_factory=list)
    cached: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ResearchCacheEntry:
    """Cached research result with its expiry."""

    key: str
    query: str
    result: ResearchResult
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass
class ResearchCacheStats:
    """Research cache statistics."""

    total_entries: int
    exact_hits: int
    similar_hits: int
    miss_count: int
    hit_rate: float
    oldest_entry_age_seconds: float | None
    newest_entry_age_seconds: float | None
