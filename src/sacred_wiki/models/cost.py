"""Cost tracking models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from sacred_wiki.models.routing import ModelTier


class ApiService(str, Enum):
    """External service billed per call."""

    CLAUDE = "claude"
    TAVILY = "tavily"


class CostLogEntry(BaseModel):
    """Append-only record of one external call."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    service: ApiService
    model: ModelTier | None = None
    endpoint: str
    input_tokens: int | None = Field(default=None, ge=0)
    output_tokens: int | None = Field(default=None, ge=0)
    cached_tokens: int | None = Field(default=None, ge=0)
    cache_hit: bool = False
    estimated_cost: float = Field(ge=0.0)
    user_id: str | None = None
    query_id: str | None = None
    success: bool = True
    error: str | None = None


class ServiceBreakdown(BaseModel):
    """Call count and cost for one bucket."""

    calls: int = 0
    cost: float = 0.0


class CostSummary(BaseModel):
    """Aggregated cost over a time window."""

    period: Literal["daily", "weekly", "monthly"]
    total_cost: float
    claude_cost: float
    tavily_cost: float
    call_count: int
    cache_hit_rate: float
    average_cost_per_call: float
    breakdown: dict[str, ServiceBreakdown]


class CostProjection(BaseModel):
    """Monthly spend projected from the last day of usage."""

    daily_projected: float
    monthly_projected: float
    on_track_for: Literal["under", "over", "on_target"]
    target_budget: float
