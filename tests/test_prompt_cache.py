"""Tests for prompt assembly with cache directives."""

import pytest

from sacred_wiki.services.prompt_cache import (
    CACHED_SYSTEM_PROMPT,
    build_cached_messages,
    build_cached_request,
    calculate_cache_savings,
    extract_page_context,
    format_for_anthropic,
    format_for_openrouter,
    truncate_context,
)


class TestBuildCachedMessages:
    """Test segment order and cache markers."""

    def test_query_only(self):
        """Test the minimal prompt is system plus query."""
        messages = build_cached_messages("What is a salos?")

        assert [m.role for m in messages] == ["system", "user"]
        assert messages[0].content == CACHED_SYSTEM_PROMPT
        assert messages[0].cacheable is True
        assert messages[1].content == "What is a salos?"
        assert messages[1].cacheable is False

    def test_full_prompt_order(self):
        """Test system, context, selection and query appear in that order."""
        messages = build_cached_messages(
            "Why?",
            page_context="Symeon of Emesa threw nuts at the congregation.",
            selected_text="threw nuts",
        )

        assert len(messages) == 4
        assert messages[1].content == (
            "Current Page Context:\n\nSymeon of Emesa threw nuts at the congregation."
        )
        assert messages[2].content == (
            'Selected Text for Discussion:\n"threw nuts"\n\nQuestion about this selection:'
        )
        assert messages[3].content == "Why?"
        assert [m.cacheable for m in messages] == [True, True, False, False]

    def test_long_context_is_truncated(self):
        """Test page context is cut to the character budget with an ellipsis."""
        messages = build_cached_messages("Q", page_context="a" * 3000, max_context_chars=2000)

        context = messages[1].content.removeprefix("Current Page Context:\n\n")
        assert len(context) == 2000
        assert context.endswith("...")

    def test_empty_optional_segments_are_skipped(self):
        """Test empty context and selection add no segments."""
        messages = build_cached_messages("Q", page_context="", selected_text="")

        assert len(messages) == 2


def test_truncate_context():
    """Test truncation keeps short text intact."""
    assert truncate_context("abc", 5) == "abc"
    assert truncate_context("abcdef", 5) == "ab..."


class TestCacheSavings:
    """Test prompt cache savings estimates."""

    def test_default_hit_rate(self):
        """Test savings with a 90% hit rate."""
        savings = calculate_cache_savings(1000, 1000)

        assert savings.cached_tokens == pytest.approx(1800)
        assert savings.regular_cost == pytest.approx(0.006)
        assert savings.cached_cost == pytest.approx(0.00114)
        assert savings.savings == pytest.approx(0.00486)
        assert savings.savings_percent == pytest.approx(81.0)

    def test_zero_tokens(self):
        """Test no tokens means no savings."""
        savings = calculate_cache_savings(0, 0)

        assert savings.regular_cost == 0
        assert savings.savings_percent == 0.0


class TestFormatting:
    """Test provider-specific message formats."""

    def test_format_for_openrouter(self):
        """Test cache_control is present only on cacheable messages."""
        formatted = format_for_openrouter(build_cached_messages("Q"))

        assert formatted[0]["role"] == "system"
        assert formatted[0]["cache_control"] == {"type": "ephemeral"}
        assert formatted[1] == {"role": "user", "content": "Q"}

    def test_format_for_anthropic(self):
        """Test system blocks are separated and user segments merged."""
        messages = build_cached_messages("Q", page_context="ctx", selected_text="sel")

        system, turns = format_for_anthropic(messages)

        assert system == [
            {
                "type": "text",
                "text": CACHED_SYSTEM_PROMPT,
                "cache_control": {"type": "ephemeral"},
            }
        ]
        assert len(turns) == 1
        assert turns[0]["role"] == "user"
        blocks = turns[0]["content"]
        assert len(blocks) == 3
        assert blocks[0]["cache_control"] == {"type": "ephemeral"}
        assert "cache_control" not in blocks[1]
        assert blocks[2] == {"type": "text", "text": "Q"}


def test_extract_page_context_takes_whole_lines():
    """Test context extraction drops frontmatter and stops at a line boundary."""
    markdown = "---\ntitle: X\n---\nline one\nline two\nline three"

    assert extract_page_context(markdown, max_chars=17) == "line one\nline two"


def test_build_cached_request():
    """Test the request body carries model, messages and limits."""
    request = build_cached_request(
        model="anthropic/claude-3.5-haiku",
        query="What is kenosis?",
        max_tokens=400,
        page_context="Self-emptying.",
    )

    assert request["model"] == "anthropic/claude-3.5-haiku"
    assert request["max_tokens"] == 400
    assert request["temperature"] == 0.7
    assert len(request["messages"]) == 3
    assert request["messages"][-1] == {"role": "user", "content": "What is kenosis?"}
