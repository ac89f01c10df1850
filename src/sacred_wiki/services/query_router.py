"""Query complexity classification and model routing.

Simple queries (definitions, short factual questions) go to the cheap
Haiku profile; everything else goes to Sonnet. The classifier produces
three labels but `medium` and `complex` route identically.
"""

import logging
import re

from sacred_wiki.models.routing import (
    ModelProfile,
    ModelTier,
    QueryComplexity,
    RoutingDecision,
)
from sacred_wiki.utils.token_counter import estimate_tokens

logger = logging.getLogger(__name__)

HAIKU = ModelProfile(
    model="anthropic/claude-3.5-haiku",
    tier=ModelTier.HAIKU,
    max_tokens=400,
    input_cost_per_1m=0.25,
    output_cost_per_1m=1.25,
    description="Fast, cost-effective for simple queries",
)

SONNET = ModelProfile(
    model="anthropic/claude-sonnet-4.5",
    tier=ModelTier.SONNET,
    max_tokens=600,
    input_cost_per_1m=3.0,
    output_cost_per_1m=15.0,
    description="High quality for complex queries",
)

MODELS: dict[ModelTier, ModelProfile] = {
    ModelTier.HAIKU: HAIKU,
    ModelTier.SONNET: SONNET,
}

# Matched against the lower-cased, trimmed query
SIMPLE_PATTERNS = [
    re.compile(p)
    for p in (
        r"^what (is|are|does|do|means?|was|were)\b",
        r"^define\b",
        r"^definition of\b",
        r"^explain.*briefly\b",
        r"^summarize\b",
        r"^summary of\b",
        r"^tldr\b",
        r"^eli5\b",
        r"^quick (question|summary)\b",
        r"^how do (i|you)\b",
        r"^can you (list|name)\b",
        r"^who (is|was|were)\b",
        r"^when (did|was|were)\b",
        r"^where (is|was|were)\b",
    )
]

COMPLEX_PATTERNS = [
    re.compile(p)
    for p in (
        r"compar(e|ison|ative)",
        r"analyz(e|is)",
        r"critic(al|ism|ize)",
        r"evaluat(e|ion)",
        r"\b(why|how come)\b.*\b(because|since|reason)",
        r"relationship between",
        r"implication",
        r"consequence",
        r"synthesiz(e|ing)",
        r"in depth",
        r"detailed (explanation|analysis)",
        r"explore.*connection",
        r"philosophical",
        r"theological",
    )
]

LONG_QUERY_WORDS = 20
SHORT_QUERY_WORDS = 10
SUBSTANTIAL_SELECTION_CHARS = 100
SYSTEM_PROMPT_TOKENS = 500
LOG_QUERY_PREFIX_CHARS = 50

REASONING = {
    QueryComplexity.SIMPLE: (
        "Simple query pattern detected (definitions, basic questions). "
        "Routing to Haiku for cost efficiency."
    ),
    QueryComplexity.MEDIUM: "Medium complexity query. Using Sonnet for balanced quality.",
    QueryComplexity.COMPLEX: (
        "Complex query requiring analysis or synthesis. Using Sonnet for highest quality."
    ),
}


def analyze_query_complexity(
    query: str,
    selected_text: str | None = None,
) -> QueryComplexity:
    """Classify a query. Rules are checked in order, first match wins.

    1. simple-intent pattern -> SIMPLE
    2. complex-intent pattern -> COMPLEX
    3. more than 20 words, or selected text over 100 chars -> MEDIUM
    4. 10 words or fewer -> SIMPLE
    5. otherwise MEDIUM

    Args:
        query: User question
        selected_text: Optional text the user highlighted

    Returns:
        Complexity label
    """
    normalized = query.lower().strip()

    if any(p.search(normalized) for p in SIMPLE_PATTERNS):
        return QueryComplexity.SIMPLE

    if any(p.search(normalized) for p in COMPLEX_PATTERNS):
        return QueryComplexity.COMPLEX

    word_count = len(query.split())
    has_selection = bool(selected_text) and len(selected_text) > SUBSTANTIAL_SELECTION_CHARS

    if word_count > LONG_QUERY_WORDS or has_selection:
        return QueryComplexity.MEDIUM

    if word_count <= SHORT_QUERY_WORDS:
        return QueryComplexity.SIMPLE

    return QueryComplexity.MEDIUM


def model_for_complexity(complexity: QueryComplexity) -> ModelProfile:
    """Map a complexity label to its routing target."""
    if complexity == QueryComplexity.SIMPLE:
        return HAIKU
    return SONNET


def route_query(query: str, selected_text: str | None = None) -> ModelProfile:
    """Select the model profile for a query.

    Args:
        query: User question
        selected_text: Optional text the user highlighted

    Returns:
        HAIKU for simple queries, SONNET otherwise
    """
    complexity = analyze_query_complexity(query, selected_text)
    model = model_for_complexity(complexity)
    log_routing_decision(query, model, complexity)
    return model


def estimate_cost(model: ModelProfile, input_tokens: int, output_tokens: int) -> float:
    """Estimate the cost of one call in USD."""
    input_cost = (input_tokens / 1_000_000) * model.input_cost_per_1m
    output_cost = (output_tokens / 1_000_000) * model.output_cost_per_1m
    return input_cost + output_cost


def get_model_recommendation(
    query: str,
    selected_text: str | None = None,
) -> RoutingDecision:
    """Route a query and explain the choice."""
    complexity = analyze_query_complexity(query, selected_text)
    model = model_for_complexity(complexity)

    estimated_input_tokens = (
        estimate_tokens(query)
        + (estimate_tokens(selected_text) if selected_text else 0)
        + SYSTEM_PROMPT_TOKENS
    )

    return RoutingDecision(
        model=model,
        complexity=complexity,
        reasoning=REASONING[complexity],
        estimated_input_tokens=estimated_input_tokens,
    )


def log_routing_decision(
    query: str,
    model: ModelProfile,
    complexity: QueryComplexity,
) -> None:
    """Emit a routing decision log record."""
    prefix = query[:LOG_QUERY_PREFIX_CHARS]
    if len(query) > LOG_QUERY_PREFIX_CHARS:
        prefix += "..."
    logger.info(
        "Routing decision: query=%r model=%s complexity=%s max_tokens=%d cost=%s/%s",
        prefix,
        model.model,
        complexity.value,
        model.max_tokens,
        model.input_cost_per_1m,
        model.output_cost_per_1m,
    )
