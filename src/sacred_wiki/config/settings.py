"""Application settings management using Pydantic Settings."""

from pathlib import Path
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_content_dir() -> str:
    """Get default content directory relative to the working directory."""
    return str(Path.cwd() / "content" / "chapters")


class Settings(BaseSettings):
    """Application configuration settings.

    All settings can be configured via environment variables with the
    prefix `SACRED_WIKI_`. For example, `SACRED_WIKI_CONTENT_DIR`.
    """

    # Content
    content_dir: str = Field(
        default_factory=_get_default_content_dir,
        description="Directory containing one markdown file per wiki page",
    )
    wiki_route_prefix: str = Field(
        default="/wiki/",
        min_length=1,
        description="Route prefix recognised in in-body links",
    )
    site_url: str = Field(
        default="https://sacred-madness.vercel.app",
        description="Public site URL used for absolute page links",
    )
    search_max_results: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum number of full-text search results",
    )

    # Prompt cache
    prompt_context_max_chars: int = Field(
        default=2000,
        ge=10,
        le=100_000,
        description="Character budget for cached page context",
    )

    # Research cache
    research_cache_ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60,  # 7 days
        ge=1,
        description="Research cache entry time-to-live in seconds",
    )
    research_similarity_threshold: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Jaccard similarity threshold for a research cache hit",
    )
    research_cache_max_entries: int = Field(
        default=1000,
        ge=1,
        le=100_000,
        description="Maximum number of research cache entries",
    )

    # Research provider
    tavily_api_key: str | None = Field(default=None, description="Tavily API key")
    tavily_api_url: str = Field(
        default="https://api.tavily.com/search", description="Tavily search endpoint"
    )
    tavily_cost_per_request: float = Field(
        default=0.005,
        ge=0.0,
        description="Cost of one uncached Tavily request (USD)",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Timeout for outbound HTTP requests",
    )

    # Cost tracking
    daily_budget_threshold: float = Field(
        default=3.0,
        ge=0.0,
        description="Daily cost (USD) above which a budget alert is emitted",
    )
    monthly_target_budget: float = Field(
        default=87.0,
        ge=0.0,
        description="Monthly target budget (USD) used for projections",
    )
    cost_log_retention_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days of cost log history kept by cleanup",
    )
    cost_alert_webhook: str | None = Field(
        default=None, description="Optional webhook URL for budget alerts"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="SACRED_WIKI_", env_file=".env", env_file_encoding="utf-8"
    )

    @model_validator(mode="after")
    def validate_budget_config(self) -> Self:
        """Validate budget configuration."""
        if self.monthly_target_budget < self.daily_budget_threshold:
            raise ValueError(
                f"monthly_target_budget ({self.monthly_target_budget}) "
                f"must be >= daily_budget_threshold ({self.daily_budget_threshold})"
            )
        if not self.wiki_route_prefix.startswith("/"):
            raise ValueError(
                f"wiki_route_prefix must start with '/': {self.wiki_route_prefix!r}"
            )
        return self
