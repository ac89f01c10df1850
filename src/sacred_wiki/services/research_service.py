"""Research search through Tavily, backed by the research cache."""

import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from sacred_wiki.config.settings import Settings
from sacred_wiki.exceptions import ResearchUnavailableError
from sacred_wiki.models.cache import ResearchHit, ResearchParams, ResearchResult
from sacred_wiki.services.cost_tracker import CostTracker
from sacred_wiki.services.research_cache import ResearchCache

logger = logging.getLogger(__name__)

# Transport failures and response bodies that do not parse into results
PROVIDER_ERRORS = (
    httpx.HTTPError,
    PydanticValidationError,
    ValueError,
    TypeError,
    AttributeError,
)


class ResearchService:
    """Service for cached research searches."""

    def __init__(
        self,
        cache: ResearchCache,
        cost_tracker: CostTracker,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize research service.

        Args:
            cache: Research result cache
            cost_tracker: Cost tracker for billing records
            settings: Application settings (API key, endpoint, timeout)
            client: HTTP client (a short-lived one is created per request if None)
        """
        self.cache = cache
        self.cost_tracker = cost_tracker
        self.settings = settings
        self.client = client

    async def search(
        self,
        params: ResearchParams,
        user_id: str | None = None,
        query_id: str | None = None,
    ) -> ResearchResult:
        """Search, serving from cache when possible.

        Args:
            params: Research parameters
            user_id: Optional user id for the cost log
            query_id: Optional query id for the cost log

        Returns:
            Research result (`cached=True` when served from cache)

        Raises:
            ResearchUnavailableError: If no API key is configured, the
                provider request fails or its response is malformed
        """
        cached = self.cache.get(params)
        if cached is not None:
            await self.cost_tracker.log_tavily_call(
                cached=True, success=True, user_id=user_id, query_id=query_id
            )
            return cached

        if not self.settings.tavily_api_key:
            raise ResearchUnavailableError("Tavily API key not configured")

        try:
            data = await self._post(params)
            result = ResearchResult(
                query=params.query,
                results=[ResearchHit.model_validate(hit) for hit in data.get("results") or []],
                cached=False,
            )
        except PROVIDER_ERRORS as e:
            await self.cost_tracker.log_tavily_call(
                cached=False, success=False, user_id=user_id, query_id=query_id, error=str(e)
            )
            logger.error(f"Tavily search failed for {params.query!r}: {e}")
            raise ResearchUnavailableError(f"Tavily API error: {e}") from e

        self.cache.set(params, result)
        await self.cost_tracker.log_tavily_call(
            cached=False, success=True, user_id=user_id, query_id=query_id
        )
        logger.info(f"Tavily search for {params.query!r} returned {len(result.results)} results")
        return result

    async def _post(self, params: ResearchParams) -> dict:
        body = {
            "api_key": self.settings.tavily_api_key,
            "query": params.query,
            "max_results": params.max_results,
            "search_depth": params.search_depth,
            "include_domains": params.include_domains,
            "exclude_domains": params.exclude_domains,
        }

        if self.client is not None:
            response = await self.client.post(self.settings.tavily_api_url, json=body)
        else:
            async with httpx.AsyncClient(timeout=self.settings.http_timeout_seconds) as client:
                response = await client.post(self.settings.tavily_api_url, json=body)

        response.raise_for_status()
        return response.json()
