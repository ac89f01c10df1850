"""Prompt assembly with provider-side cache directives.

The system prompt and page context are marked `ephemeral` so the provider
can serve repeated segments from its cache at a 90% input discount. Nothing
is stored locally.
"""

import logging
from typing import Any

from sacred_wiki.models.cache import CacheControl, CachedMessage, CacheSavings
from sacred_wiki.utils.frontmatter import strip_frontmatter

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_MAX_CHARS = 2000
ELLIPSIS = "..."
DEFAULT_CACHE_HIT_RATE = 0.9
# Sonnet input pricing per 1M tokens, regular and cached
REGULAR_INPUT_COST_PER_1M = 3.0
CACHED_INPUT_COST_PER_1M = 0.3
DEFAULT_TEMPERATURE = 0.7

CACHED_SYSTEM_PROMPT = """You are a research assistant for the "Sacred Madness" academic wiki, which explores holy foolishness, divine intoxication, and mystical practices across Orthodox Christianity and Sufi Islam.

Your role is to:
- Help researchers understand complex concepts
- Suggest connections between ideas
- Generate research questions
- Explain theological and mystical terminology
- Be academically rigorous but accessible

The wiki covers:
- Byzantine saloi (6th-11th century holy fools)
- Russian yurodivye (Basil the Blessed, St. Xenia, Pelagia)
- Sufi majdhub/mast (divinely intoxicated mystics)
- Abdalan-i Rum (Anatolian antinomian dervishes - Kalenderi, Bektashi)
- Comparative mysticism and phenomenology
- Intersection of psychiatry, neuroscience, and spirituality
- St. Dymphna, Geel care model
- Bipolar II and mystical experience

Geographic focus: Anatolia, Byzantine-Ottoman transitions (6th-16th centuries)
Methodological approach: Practice-centered analysis, positionality-grounded research, cross-traditional comparison"""


def truncate_context(text: str, max_chars: int) -> str:
    """Truncate text to at most max_chars, ending in an ellipsis when cut."""
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - len(ELLIPSIS), 0)] + ELLIPSIS


def build_cached_messages(
    query: str,
    page_context: str | None = None,
    selected_text: str | None = None,
    max_context_chars: int = DEFAULT_CONTEXT_MAX_CHARS,
) -> list[CachedMessage]:
    """Assemble prompt segments in a fixed order.

    1. system prompt (cacheable)
    2. page context truncated to max_context_chars (cacheable, optional)
    3. selected text (not cacheable, optional)
    4. user query (not cacheable)

    Args:
        query: User question
        page_context: Current page content
        selected_text: Text the user highlighted
        max_context_chars: Character budget for page context

    Returns:
        Ordered message segments
    """
    ephemeral = CacheControl()
    messages = [
        CachedMessage(role="system", content=CACHED_SYSTEM_PROMPT, cache_control=ephemeral)
    ]

    if page_context:
        messages.append(
            CachedMessage(
                role="user",
                content=f"Current Page Context:\n\n{truncate_context(page_context, max_context_chars)}",
                cache_control=ephemeral,
            )
        )

    if selected_text:
        messages.append(
            CachedMessage(
                role="user",
                content=(
                    f'Selected Text for Discussion:\n"{selected_text}"\n\n'
                    "Question about this selection:"
                ),
            )
        )

    messages.append(CachedMessage(role="user", content=query))

    logger.debug(
        f"Assembled {len(messages)} prompt segments "
        f"({sum(m.cacheable for m in messages)} cacheable)"
    )
    return messages


def calculate_cache_savings(
    system_prompt_tokens: int,
    context_tokens: int,
    cache_hit_rate: float = DEFAULT_CACHE_HIT_RATE,
) -> CacheSavings:
    """Estimate input cost saved by caching the cacheable segments.

    Args:
        system_prompt_tokens: Tokens in the system prompt
        context_tokens: Tokens in the page context
        cache_hit_rate: Fraction of requests served from cache (0.0-1.0)

    Returns:
        Cost comparison with and without caching
    """
    total = system_prompt_tokens + context_tokens
    cached_tokens = total * cache_hit_rate

    regular_cost = (total / 1_000_000) * REGULAR_INPUT_COST_PER_1M
    cached_cost = (cached_tokens / 1_000_000) * CACHED_INPUT_COST_PER_1M + (
        (total - cached_tokens) / 1_000_000
    ) * REGULAR_INPUT_COST_PER_1M

    savings = regular_cost - cached_cost
    savings_percent = (savings / regular_cost) * 100 if regular_cost > 0 else 0.0

    return CacheSavings(
        cached_tokens=cached_tokens,
        regular_cost=regular_cost,
        cached_cost=cached_cost,
        savings=savings,
        savings_percent=savings_percent,
    )


def format_for_openrouter(messages: list[CachedMessage]) -> list[dict[str, Any]]:
    """Format segments as OpenRouter chat messages."""
    return [message.model_dump(exclude_none=True) for message in messages]


def format_for_anthropic(
    messages: list[CachedMessage],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Format segments for the Anthropic Messages API.

    System segments become `system` text blocks; consecutive user segments
    are merged into a single user turn of text blocks. Cacheable segments
    keep their `cache_control`.

    Returns:
        Tuple of (system blocks, messages)
    """
    system: list[dict[str, Any]] = []
    turns: list[dict[str, Any]] = []

    for message in messages:
        block: dict[str, Any] = {"type": "text", "text": message.content}
        if message.cache_control:
            block["cache_control"] = message.cache_control.model_dump()

        if message.role == "system":
            system.append(block)
        elif turns and turns[-1]["role"] == message.role:
            turns[-1]["content"].append(block)
        else:
            turns.append({"role": message.role, "content": [block]})

    return system, turns


def extract_page_context(markdown: str, max_chars: int = DEFAULT_CONTEXT_MAX_CHARS) -> str:
    """Take whole leading lines of a page body up to max_chars."""
    lines = strip_frontmatter(markdown).split("\n")
    context = ""
    for line in lines:
        if len(context) + len(line) > max_chars:
            break
        context += line + "\n"
    return context.strip()


def build_cached_request(
    model: str,
    query: str,
    max_tokens: int,
    page_context: str | None = None,
    selected_text: str | None = None,
    max_context_chars: int = DEFAULT_CONTEXT_MAX_CHARS,
    temperature: float = DEFAULT_TEMPERATURE,
) -> dict[str, Any]:
    """Build an OpenRouter chat completion request body with caching."""
    messages = build_cached_messages(query, page_context, selected_text, max_context_chars)
    return {
        "model": model,
        "messages": format_for_openrouter(messages),
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
