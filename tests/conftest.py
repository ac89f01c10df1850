"""Pytest configuration and fixtures for sacred-wiki tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sacred_wiki.config.settings import Settings
from sacred_wiki.services.cost_tracker import CostTracker
from sacred_wiki.services.link_graph_service import LinkGraphService
from sacred_wiki.services.research_cache import ResearchCache

SAMPLE_PAGES = {
    "holy-fool.md": """---
title: Holy Fool
description: Feigned madness for the sake of Christ
category: concepts
keywords:
  - salos
  - yurodstvo
related:
  - yurodivy
seeAlso:
  - salos
  - missing-page
---
# Holy Fool

See [[Majdhub]] and [the salos](/wiki/salos).
Kenosis is discussed at /wiki/kenosis.
""",
    "salos.md": """---
title: Salos
category: concepts
---
The Byzantine [[Holy Fool|holy-fool]] of Emesa.
""",
    "yurodivy.md": """---
title: Yurodivy
category: russia
related: [holy-fool]
---
The Russian [[holy fool]], e.g. Basil the Blessed.
""",
    "majdhub.md": """Divinely intoxicated mystic. Compare /wiki/holy-fool.
""",
    "kenosis.md": """---
title: Kenosis
category: concepts
---
## Self-emptying

Kenosis in the letter to the Philippians.

### In Orthodoxy

Ascetic self-emptying.
""",
}


class FakeClock:
    """Controllable clock returning timezone-aware UTC datetimes."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Temporary content directory populated with sample pages."""
    directory = tmp_path / "chapters"
    directory.mkdir()
    for name, text in SAMPLE_PAGES.items():
        (directory / name).write_text(text, encoding="utf-8")
    (directory / "notes.txt").write_text("[[ignored]] /wiki/ignored", encoding="utf-8")
    return directory


@pytest.fixture
def test_settings(content_dir: Path) -> Settings:
    """Test configuration settings."""
    return Settings(
        content_dir=str(content_dir),
        tavily_api_key="test-key",
        cost_alert_webhook=None,
        log_level="DEBUG",
    )


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2025-01-15 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def link_graph_service(test_settings: Settings) -> LinkGraphService:
    """Link graph service over the sample content."""
    return LinkGraphService(settings=test_settings)


@pytest.fixture
def research_cache(clock: FakeClock) -> ResearchCache:
    """Research cache with a 7 day TTL and a fake clock."""
    return ResearchCache(
        ttl_seconds=7 * 24 * 60 * 60,
        similarity_threshold=0.85,
        max_entries=100,
        clock=clock,
    )


@pytest.fixture
def cost_tracker(test_settings: Settings, clock: FakeClock) -> CostTracker:
    """Cost tracker with a fake clock."""
    return CostTracker(settings=test_settings, clock=clock)
