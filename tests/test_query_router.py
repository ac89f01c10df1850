"""Tests for query complexity classification and model routing."""

import logging

import pytest

from sacred_wiki.models.routing import ModelTier, QueryComplexity
from sacred_wiki.services.query_router import (
    HAIKU,
    SONNET,
    analyze_query_complexity,
    estimate_cost,
    get_model_recommendation,
    log_routing_decision,
    route_query,
)

LONG_QUERY = (
    "Tell me about the many ways in which holy fools across Byzantine and Russian "
    "traditions used public spectacle and feigned madness to rebuke powerful rulers"
)


class TestAnalyzeQueryComplexity:
    """Test the ordered classification rules."""

    @pytest.mark.parametrize(
        "query",
        [
            "What is a holy fool?",
            "Define kenosis",
            "Who was Basil the Blessed?",
            "  SUMMARIZE the salos chapter",
        ],
    )
    def test_simple_patterns(self, query: str):
        """Test definition-style questions are simple."""
        assert analyze_query_complexity(query) == QueryComplexity.SIMPLE

    @pytest.mark.parametrize(
        "query",
        [
            "Compare the Byzantine saloi with Sufi majdhub",
            "Please analyze Symeon of Emesa",
            "Explore the connection between madness and sanctity",
            "Give a theological reading of foolishness",
            "Compare the theological implications of sukr and yurodstvo in depth",
        ],
    )
    def test_complex_patterns(self, query: str):
        """Test analytical questions are complex."""
        assert analyze_query_complexity(query) == QueryComplexity.COMPLEX

    def test_simple_pattern_wins_over_complex(self):
        """Test rules are checked in order."""
        query = "What is the theological meaning of kenosis?"

        assert analyze_query_complexity(query) == QueryComplexity.SIMPLE

    def test_long_query_is_medium(self):
        """Test queries over twenty words without patterns."""
        assert analyze_query_complexity(LONG_QUERY) == QueryComplexity.MEDIUM

    def test_substantial_selection_is_medium(self):
        """Test a long selection promotes a short query."""
        assert analyze_query_complexity("Tell me more", "x" * 101) == QueryComplexity.MEDIUM
        assert analyze_query_complexity("Tell me more", "x" * 100) == QueryComplexity.SIMPLE

    def test_short_query_is_simple(self):
        """Test queries of ten words or fewer."""
        assert analyze_query_complexity("Tell me about Basil the Blessed") == QueryComplexity.SIMPLE

    def test_mid_length_query_is_medium(self):
        """Test queries between eleven and twenty words."""
        query = "Tell me about Basil the Blessed and his public rebukes of Ivan the Terrible"

        assert analyze_query_complexity(query) == QueryComplexity.MEDIUM


class TestRouteQuery:
    """Test mapping complexity to model profiles."""

    def test_simple_routes_to_haiku(self):
        """Test simple queries use the cheap model."""
        assert route_query("What is a holy fool?") is HAIKU

    def test_medium_and_complex_route_to_sonnet(self):
        """Test medium and complex queries share the quality model."""
        assert route_query(LONG_QUERY) is SONNET
        assert route_query("Compare saloi and yurodivye") is SONNET

    def test_profiles(self):
        """Test the model profile constants."""
        assert HAIKU.tier == ModelTier.HAIKU
        assert HAIKU.max_tokens == 400
        assert SONNET.tier == ModelTier.SONNET
        assert SONNET.max_tokens == 600


class TestRecommendation:
    """Test cost estimates and routing explanations."""

    def test_estimate_cost(self):
        """Test per-million pricing."""
        assert estimate_cost(HAIKU, 1_000_000, 1_000_000) == pytest.approx(1.5)
        assert estimate_cost(SONNET, 1000, 500) == pytest.approx(0.0105)

    def test_get_model_recommendation(self):
        """Test the recommendation includes reasoning and token estimate."""
        decision = get_model_recommendation("What is kenosis?")

        assert decision.model is HAIKU
        assert decision.complexity == QueryComplexity.SIMPLE
        assert "Haiku" in decision.reasoning
        assert decision.estimated_input_tokens == 4 + 500

    def test_recommendation_counts_selected_text(self):
        """Test selected text adds to the token estimate."""
        decision = get_model_recommendation("Tell me more", "y" * 200)

        assert decision.model is SONNET
        assert decision.estimated_input_tokens == 3 + 50 + 500


def test_log_routing_decision_truncates_query(caplog):
    """Test long queries are shortened in the log record."""
    query = "q" * 60

    with caplog.at_level(logging.INFO, logger="sacred_wiki.services.query_router"):
        log_routing_decision(query, SONNET, QueryComplexity.MEDIUM)

    assert "q" * 50 + "..." in caplog.text
    assert "q" * 51 not in caplog.text
    assert "anthropic/claude-sonnet-4.5" in caplog.text
