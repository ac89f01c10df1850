"""Tests for server wiring."""

import pytest
import pytest_asyncio

from sacred_wiki import server
from sacred_wiki.config.settings import Settings


@pytest_asyncio.fixture
async def initialized(test_settings: Settings):
    """Initialize server services for one test."""
    context = await server.initialize_services(test_settings)
    yield context
    await server.shutdown_services()


@pytest.mark.asyncio
class TestServer:
    """Test service initialization and tool wrappers."""

    async def test_initialize_services(self, initialized, test_settings: Settings):
        """Test the context is wired from settings."""
        assert server.context is initialized
        assert initialized.settings is test_settings
        assert initialized.research_service.cache is initialized.research_cache
        assert initialized.research_service.cost_tracker is initialized.cost_tracker
        assert initialized.cost_tracker.http_client is initialized.research_service.client
        assert initialized.cost_tracker.http_client is not None

    async def test_tool_wrappers_use_context(self, initialized):
        """Test the registered tools reach the shared services."""
        links = await server.wiki_links("salos")
        logged = await server.cost_log_claude_call("haiku", 100, 50)
        summary = await server.cost_summary()

        assert [p["slug"] for p in links["backlinks"]] == ["holy-fool"]
        assert logged["model"] == "haiku"
        assert summary["summaries"]["daily"]["call_count"] == 1

    async def test_assistant_prompt_uses_context_budget(self, initialized):
        """Test the prompt tool applies the configured context budget."""
        result = await server.assistant_prompt("What is kenosis?", page_context="k" * 5000)

        context_message = result["request"]["messages"][1]["content"]
        assert len(context_message) == len("Current Page Context:\n\n") + 2000

    async def test_tools_require_initialization(self):
        """Test tools fail clearly before initialization."""
        await server.shutdown_services()

        with pytest.raises(RuntimeError):
            await server.wiki_graph()

    async def test_create_server(self):
        """Test the server instance is returned."""
        assert server.create_server() is server.mcp
