"""Research assistant routing and prompt MCP tools."""

from dataclasses import asdict
from typing import Any

from sacred_wiki.services import prompt_cache, query_router
from sacred_wiki.tools import create_error_response
from sacred_wiki.utils.token_counter import count_tokens


def assistant_route(query: str, selected_text: str | None = None) -> dict[str, Any]:
    """Classify a query and pick the model profile to answer it.

    Args:
        query: User question
        selected_text: Optional text the user highlighted

    Returns:
        Routing decision
    """
    if not query or not query.strip():
        return create_error_response(
            message="query cannot be empty",
            error_type="ValidationError",
        )

    decision = query_router.get_model_recommendation(query, selected_text)
    query_router.log_routing_decision(query, decision.model, decision.complexity)

    model = asdict(decision.model)
    model["tier"] = decision.model.tier.value
    return {
        "model": model,
        "complexity": decision.complexity.value,
        "reasoning": decision.reasoning,
        "estimated_input_tokens": decision.estimated_input_tokens,
        "estimated_cost": query_router.estimate_cost(
            decision.model, decision.estimated_input_tokens, decision.model.max_tokens
        ),
    }


def assistant_prompt(
    query: str,
    page_context: str | None = None,
    selected_text: str | None = None,
    max_context_chars: int = prompt_cache.DEFAULT_CONTEXT_MAX_CHARS,
) -> dict[str, Any]:
    """Route a query and build the cached request body for it.

    Args:
        query: User question
        page_context: Current page content (cached by the provider)
        selected_text: Optional text the user highlighted
        max_context_chars: Character budget for page context

    Returns:
        Request body with the chosen model and complexity, exact input
        token count and estimated prompt cache savings
    """
    if not query or not query.strip():
        return create_error_response(
            message="query cannot be empty",
            error_type="ValidationError",
        )

    if max_context_chars < 10:
        return create_error_response(
            message="max_context_chars must be at least 10",
            error_type="ValidationError",
        )

    complexity = query_router.analyze_query_complexity(query, selected_text)
    model = query_router.model_for_complexity(complexity)
    query_router.log_routing_decision(query, model, complexity)

    request = prompt_cache.build_cached_request(
        model=model.model,
        query=query,
        max_tokens=model.max_tokens,
        page_context=page_context,
        selected_text=selected_text,
        max_context_chars=max_context_chars,
    )
    # First cacheable segment is the system prompt, the rest is page context
    cacheable = [m["content"] for m in request["messages"] if "cache_control" in m]
    savings = prompt_cache.calculate_cache_savings(
        system_prompt_tokens=count_tokens(cacheable[0]),
        context_tokens=sum(count_tokens(text) for text in cacheable[1:]),
    )

    return {
        "complexity": complexity.value,
        "request": request,
        "cacheable_segments": len(cacheable),
        "input_tokens": sum(count_tokens(m["content"]) for m in request["messages"]),
        "cache_savings": savings.model_dump(),
    }
