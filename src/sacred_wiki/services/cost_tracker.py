"""API cost tracking, aggregation and budget alerts."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal

import httpx

from sacred_wiki.config.settings import Settings
from sacred_wiki.exceptions import ValidationError
from sacred_wiki.models.cost import (
    ApiService,
    CostLogEntry,
    CostProjection,
    CostSummary,
    ServiceBreakdown,
)
from sacred_wiki.models.routing import ModelTier

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Period = Literal["daily", "weekly", "monthly"]

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)
ONE_MONTH = timedelta(days=30)

CLAUDE_ENDPOINT = "/api/ai/chat"
TAVILY_ENDPOINT = "/api/documentation/research"


@dataclass(frozen=True)
class TierPricing:
    """Per-1M-token prices for one model tier."""

    input_per_1m: float
    output_per_1m: float
    cached_input_per_1m: float


# Cached input is billed at a 90% discount
CLAUDE_PRICING: dict[ModelTier, TierPricing] = {
    ModelTier.HAIKU: TierPricing(input_per_1m=0.25, output_per_1m=1.25, cached_input_per_1m=0.025),
    ModelTier.SONNET: TierPricing(input_per_1m=3.0, output_per_1m=15.0, cached_input_per_1m=0.3),
}

TAVILY_COST_PER_REQUEST = 0.005


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_claude_cost(
    input_tokens: int,
    output_tokens: int,
    cached_tokens: int,
    model: ModelTier | str,
) -> float:
    """Calculate the cost of one Claude call in USD.

    Args:
        input_tokens: Total input tokens, cached ones included
        output_tokens: Output tokens
        cached_tokens: Input tokens served from the prompt cache
        model: Pricing tier (haiku/sonnet)

    Returns:
        Estimated cost

    Raises:
        ValidationError: If a count is negative, cached tokens exceed input
            tokens, or the tier is unknown
    """
    try:
        tier = ModelTier(model)
    except ValueError as e:
        raise ValidationError(
            f"Unknown model tier: {model}. Must be one of: "
            f"{', '.join(t.value for t in ModelTier)}"
        ) from e

    if input_tokens < 0 or output_tokens < 0 or cached_tokens < 0:
        raise ValidationError("Token counts cannot be negative")
    if cached_tokens > input_tokens:
        raise ValidationError(
            f"cached_tokens ({cached_tokens}) cannot exceed input_tokens ({input_tokens})"
        )

    pricing = CLAUDE_PRICING[tier]
    cached_cost = (cached_tokens / 1_000_000) * pricing.cached_input_per_1m
    regular_input_cost = ((input_tokens - cached_tokens) / 1_000_000) * pricing.input_per_1m
    output_cost = (output_tokens / 1_000_000) * pricing.output_per_1m
    return cached_cost + regular_input_cost + output_cost


def calculate_tavily_cost(cached: bool, price: float = TAVILY_COST_PER_REQUEST) -> float:
    """Cost of one Tavily request. Cached results are free."""
    return 0.0 if cached else price


def period_for_range(start: datetime, end: datetime) -> Period:
    """Label a time range as daily, weekly or monthly by its duration."""
    duration = end - start
    if duration <= ONE_DAY:
        return "daily"
    if duration <= ONE_WEEK:
        return "weekly"
    return "monthly"


def _sum_cost(entries: list[CostLogEntry]) -> float:
    return sum(entry.estimated_cost for entry in entries)


class CostTracker:
    """In-process cost log with aggregation and a daily budget alert.

    The log lives only as long as the tracker; nothing is persisted.
    """

    def __init__(
        self,
        settings: Settings,
        clock: Clock = _utcnow,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize cost tracker.

        Args:
            settings: Application settings (budgets, retention, webhook)
            clock: Returns the current UTC time
            http_client: Shared client for alert webhooks (created per alert if None)
        """
        self.settings = settings
        self.clock = clock
        self.http_client = http_client
        self.logs: list[CostLogEntry] = []
        self._alert_tasks: set[asyncio.Task[None]] = set()

    async def log_api_call(self, entry: CostLogEntry) -> None:
        """Append a call record and check the daily budget.

        Webhook alerts are posted from background tasks; see wait_for_alerts().
        """
        self.logs.append(entry)

        logger.info(
            "Cost tracker: service=%s model=%s cost=$%.6f cached=%s success=%s",
            entry.service.value,
            entry.model.value if entry.model else "-",
            entry.estimated_cost,
            entry.cache_hit,
            entry.success,
        )

        daily_cost = self.calculate_daily_cost()
        threshold = self.settings.daily_budget_threshold
        if daily_cost > threshold:
            self._emit_budget_alert("daily", daily_cost, threshold)

    async def log_claude_call(
        self,
        model: ModelTier | str,
        input_tokens: int,
        output_tokens: int,
        cached_tokens: int,
        cache_hit: bool,
        success: bool = True,
        user_id: str | None = None,
        query_id: str | None = None,
        error: str | None = None,
    ) -> CostLogEntry:
        """Record a Claude call, computing its cost from token counts."""
        cost = calculate_claude_cost(input_tokens, output_tokens, cached_tokens, model)
        entry = CostLogEntry(
            timestamp=self.clock(),
            service=ApiService.CLAUDE,
            model=ModelTier(model),
            endpoint=CLAUDE_ENDPOINT,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cached_tokens=cached_tokens,
            cache_hit=cache_hit,
            estimated_cost=cost,
            user_id=user_id,
            query_id=query_id,
            success=success,
            error=error,
        )
        await self.log_api_call(entry)
        return entry

    async def log_tavily_call(
        self,
        cached: bool,
        success: bool = True,
        user_id: str | None = None,
        query_id: str | None = None,
        error: str | None = None,
    ) -> CostLogEntry:
        """Record a Tavily call."""
        entry = CostLogEntry(
            timestamp=self.clock(),
            service=ApiService.TAVILY,
            endpoint=TAVILY_ENDPOINT,
            cache_hit=cached,
            estimated_cost=calculate_tavily_cost(cached, self.settings.tavily_cost_per_request),
            user_id=user_id,
            query_id=query_id,
            success=success,
            error=error,
        )
        await self.log_api_call(entry)
        return entry

    def calculate_cost_for_period(self, start: datetime, end: datetime) -> CostSummary:
        """Aggregate costs for entries with start <= timestamp <= end.

        Args:
            start: Range start (inclusive)
            end: Range end (inclusive)

        Returns:
            Cost summary for the range
        """
        logs = [entry for entry in self.logs if start <= entry.timestamp <= end]

        claude_logs = [e for e in logs if e.service == ApiService.CLAUDE]
        tavily_logs = [e for e in logs if e.service == ApiService.TAVILY]
        total_cost = _sum_cost(logs)

        cacheable = [
            e for e in logs if e.cached_tokens is not None or e.service == ApiService.TAVILY
        ]
        cache_hits = sum(1 for e in cacheable if e.cache_hit)

        breakdown: dict[str, ServiceBreakdown] = {}
        for tier in ModelTier:
            tier_logs = [e for e in claude_logs if e.model == tier]
            breakdown[tier.value] = ServiceBreakdown(calls=len(tier_logs), cost=_sum_cost(tier_logs))
        breakdown[ApiService.TAVILY.value] = ServiceBreakdown(
            calls=len(tavily_logs), cost=_sum_cost(tavily_logs)
        )

        return CostSummary(
            period=period_for_range(start, end),
            total_cost=total_cost,
            claude_cost=_sum_cost(claude_logs),
            tavily_cost=_sum_cost(tavily_logs),
            call_count=len(logs),
            cache_hit_rate=cache_hits / len(cacheable) if cacheable else 0.0,
            average_cost_per_call=total_cost / len(logs) if logs else 0.0,
            breakdown=breakdown,
        )

    def _trailing_cost(self, window: timedelta) -> float:
        now = self.clock()
        return self.calculate_cost_for_period(now - window, now).total_cost

    def calculate_daily_cost(self) -> float:
        """Total cost over the last 24 hours."""
        return self._trailing_cost(ONE_DAY)

    def calculate_weekly_cost(self) -> float:
        """Total cost over the last 7 days."""
        return self._trailing_cost(ONE_WEEK)

    def calculate_monthly_cost(self) -> float:
        """Total cost over the last 30 days."""
        return self._trailing_cost(ONE_MONTH)

    def get_all_cost_summaries(self) -> dict[Period, CostSummary]:
        """Summaries for the trailing day, week and month."""
        now = self.clock()
        return {
            "daily": self.calculate_cost_for_period(now - ONE_DAY, now),
            "weekly": self.calculate_cost_for_period(now - ONE_WEEK, now),
            "monthly": self.calculate_cost_for_period(now - ONE_MONTH, now),
        }

    def export_cost_logs(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[CostLogEntry]:
        """Copy of the log, optionally limited to a time range."""
        return [
            entry
            for entry in self.logs
            if (start is None or entry.timestamp >= start)
            and (end is None or entry.timestamp <= end)
        ]

    def cleanup_old_logs(self) -> int:
        """Drop entries older than the retention window.

        Returns:
            Number of entries removed
        """
        cutoff = self.clock() - timedelta(days=self.settings.cost_log_retention_days)
        kept = [entry for entry in self.logs if entry.timestamp >= cutoff]
        removed = len(self.logs) - len(kept)
        self.logs = kept
        logger.info(
            f"Cleaned up {removed} cost log entries, kept {len(kept)} from the last "
            f"{self.settings.cost_log_retention_days} days"
        )
        return removed

    def get_projections(self) -> CostProjection:
        """Project monthly spend from the last 24 hours."""
        daily_cost = self.calculate_daily_cost()
        monthly_projected = daily_cost * 30
        target = self.settings.monthly_target_budget

        if monthly_projected < target * 0.9:
            on_track_for = "under"
        elif monthly_projected > target * 1.1:
            on_track_for = "over"
        else:
            on_track_for = "on_target"

        return CostProjection(
            daily_projected=daily_cost,
            monthly_projected=monthly_projected,
            on_track_for=on_track_for,
            target_budget=target,
        )

    def _emit_budget_alert(self, period: Period, actual: float, threshold: float) -> None:
        """Log a budget alert and schedule its webhook post."""
        logger.warning(
            f"Budget alert: {period} cost ${actual:.2f} exceeds threshold ${threshold:.2f}"
        )

        webhook = self.settings.cost_alert_webhook
        if not webhook:
            return

        payload = {
            "alert": "cost_threshold_exceeded",
            "period": period,
            "actual_cost": actual,
            "threshold": threshold,
            "timestamp": self.clock().isoformat(),
        }
        task = asyncio.get_running_loop().create_task(self._post_alert(webhook, payload))
        self._alert_tasks.add(task)
        task.add_done_callback(self._alert_tasks.discard)

    async def _post_alert(self, webhook: str, payload: dict[str, object]) -> None:
        try:
            if self.http_client is not None:
                response = await self.http_client.post(webhook, json=payload)
            else:
                async with httpx.AsyncClient(
                    timeout=self.settings.http_timeout_seconds
                ) as client:
                    response = await client.post(webhook, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to post budget alert to webhook: {e}")

    async def wait_for_alerts(self) -> None:
        """Wait for pending webhook alerts to finish."""
        if self._alert_tasks:
            await asyncio.gather(*self._alert_tasks)
