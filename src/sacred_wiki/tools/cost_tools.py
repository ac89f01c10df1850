"""Cost tracking MCP tools."""

from datetime import datetime
from typing import Any

from sacred_wiki.exceptions import ValidationError
from sacred_wiki.services.cost_tracker import CostTracker
from sacred_wiki.tools import create_error_response


async def cost_log_claude_call(
    tracker: CostTracker,
    model: str,
    input_tokens: int,
    output_tokens: int,
    cached_tokens: int = 0,
    success: bool = True,
    user_id: str | None = None,
    query_id: str | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Record a completed Claude call.

    Args:
        tracker: Cost tracker instance
        model: Pricing tier (haiku/sonnet)
        input_tokens: Total input tokens
        output_tokens: Output tokens
        cached_tokens: Input tokens served from the prompt cache
        success: Whether the call succeeded
        user_id: Optional user id
        query_id: Optional query id
        error: Error message for failed calls

    Returns:
        Logged entry or error response
    """
    try:
        entry = await tracker.log_claude_call(
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cached_tokens=cached_tokens,
            cache_hit=cached_tokens > 0,
            success=success,
            user_id=user_id,
            query_id=query_id,
            error=error,
        )
    except ValidationError as e:
        return create_error_response(message=str(e), error_type="ValidationError")

    return entry.model_dump(mode="json")


def _parse_time(value: str | None, name: str) -> datetime | None:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"{name} must be an ISO 8601 datetime: {value}") from e
    if parsed.tzinfo is None:
        raise ValidationError(f"{name} must include a timezone offset: {value}")
    return parsed


def cost_summary(
    tracker: CostTracker,
    start: str | None = None,
    end: str | None = None,
) -> dict[str, Any]:
    """Summarize costs for a range, or for the trailing day/week/month.

    Args:
        tracker: Cost tracker instance
        start: Range start (ISO 8601 with offset); requires end
        end: Range end (ISO 8601 with offset); requires start

    Returns:
        Summaries and projection, or error response
    """
    if (start is None) != (end is None):
        return create_error_response(
            message="start and end must be given together",
            error_type="ValidationError",
        )

    try:
        start_dt = _parse_time(start, "start")
        end_dt = _parse_time(end, "end")
    except ValidationError as e:
        return create_error_response(message=str(e), error_type="ValidationError")

    if start_dt is not None and end_dt is not None:
        if start_dt > end_dt:
            return create_error_response(
                message="start must not be after end",
                error_type="ValidationError",
            )
        summary = tracker.calculate_cost_for_period(start_dt, end_dt)
        return {"summary": summary.model_dump()}

    return {
        "summaries": {
            period: summary.model_dump()
            for period, summary in tracker.get_all_cost_summaries().items()
        },
        "projection": tracker.get_projections().model_dump(),
    }


def cost_cleanup(tracker: CostTracker) -> dict[str, Any]:
    """Drop cost log entries older than the retention window."""
    removed = tracker.cleanup_old_logs()
    return {"removed": removed, "remaining": len(tracker.logs)}
