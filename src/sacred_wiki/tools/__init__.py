"""MCP tool implementations."""

from datetime import datetime, timezone
from typing import Any

__all__ = ["create_error_response"]


def create_error_response(
    message: str,
    error_type: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create a structured error payload for tool results.

    Args:
        message: User-facing error message
        error_type: Error type name (e.g., ValidationError, NotFoundError)
        details: Optional additional details

    Returns:
        Error response dictionary
    """
    response: dict[str, Any] = {
        "error": True,
        "message": message,
        "error_type": error_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        response["details"] = details
    return response
