"""Tests for configuration management."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sacred_wiki.config import get_settings, reset_settings, set_settings
from sacred_wiki.config.settings import Settings


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self):
        """Test default configuration values."""
        settings = Settings()

        assert settings.content_dir == str(Path.cwd() / "content" / "chapters")
        assert settings.wiki_route_prefix == "/wiki/"
        assert settings.research_cache_ttl_seconds == 604800
        assert settings.research_similarity_threshold == 0.85
        assert settings.daily_budget_threshold == 3.0
        assert settings.monthly_target_budget == 87.0
        assert settings.cost_log_retention_days == 30
        assert settings.prompt_context_max_chars == 2000
        assert settings.tavily_cost_per_request == 0.005
        assert settings.log_level == "INFO"

    def test_custom_settings(self):
        """Test creating settings with custom values."""
        settings = Settings(
            content_dir="/srv/wiki",
            tavily_api_key="test-key",
            research_cache_ttl_seconds=60,
            cost_alert_webhook="https://hooks.example.com/alert",
        )

        assert settings.content_dir == "/srv/wiki"
        assert settings.tavily_api_key == "test-key"
        assert settings.research_cache_ttl_seconds == 60
        assert settings.cost_alert_webhook == "https://hooks.example.com/alert"

    def test_env_variable_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("SACRED_WIKI_CONTENT_DIR", "/env/chapters")
        monkeypatch.setenv("SACRED_WIKI_DAILY_BUDGET_THRESHOLD", "5.5")
        monkeypatch.setenv("SACRED_WIKI_RESEARCH_SIMILARITY_THRESHOLD", "0.9")

        settings = Settings()

        assert settings.content_dir == "/env/chapters"
        assert settings.daily_budget_threshold == 5.5
        assert settings.research_similarity_threshold == 0.9

    def test_env_prefix(self, monkeypatch):
        """Test that SACRED_WIKI_ prefix is required."""
        monkeypatch.setenv("DAILY_BUDGET_THRESHOLD", "10")

        settings = Settings()

        assert settings.daily_budget_threshold == 3.0

    def test_similarity_threshold_bounds(self):
        """Test that similarity threshold must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            Settings(research_similarity_threshold=1.5)

    def test_monthly_budget_below_daily_threshold(self):
        """Test that monthly budget smaller than daily threshold is rejected."""
        with pytest.raises(ValidationError):
            Settings(daily_budget_threshold=10.0, monthly_target_budget=5.0)

    def test_route_prefix_must_be_absolute(self):
        """Test that the wiki route prefix must start with a slash."""
        with pytest.raises(ValidationError):
            Settings(wiki_route_prefix="wiki/")


class TestSettingsSingleton:
    """Test the shared settings accessors."""

    def test_get_settings_is_cached(self):
        """Test that get_settings returns the same instance."""
        reset_settings()
        try:
            assert get_settings() is get_settings()
        finally:
            reset_settings()

    def test_set_settings_replaces_instance(self, test_settings: Settings):
        """Test that set_settings overrides the shared instance."""
        set_settings(test_settings)
        try:
            assert get_settings() is test_settings
        finally:
            reset_settings()
