"""Research result cache with exact and word-similarity lookup."""

import hashlib
import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from sacred_wiki.models.cache import (
    ResearchCacheEntry,
    ResearchCacheStats,
    ResearchParams,
    ResearchResult,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_query(query: str) -> str:
    """Lower-case, trim and collapse internal whitespace."""
    return " ".join(query.lower().split())


def normalize_params(params: ResearchParams) -> dict[str, Any]:
    """Normalized parameter mapping used for cache keys."""
    return {
        "query": normalize_query(params.query),
        "max_results": params.max_results,
        "search_depth": params.search_depth,
        "include_domains": sorted(params.include_domains),
        "exclude_domains": sorted(params.exclude_domains),
    }


def generate_cache_key(params: ResearchParams) -> str:
    """SHA-256 over the normalized parameters."""
    payload = json.dumps(normalize_params(params), sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def jaccard_similarity(query1: str, query2: str) -> float:
    """Word-set Jaccard similarity of two queries (case-insensitive)."""
    words1 = set(query1.lower().split())
    words2 = set(query2.lower().split())
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


class ResearchCache:
    """In-memory research cache with TTL expiry.

    Lookup tries the exact normalized-parameter key first, then scans live
    entries for a stored query with Jaccard similarity at or above the
    threshold. Expired entries are evicted lazily, during lookups.
    """

    def __init__(
        self,
        ttl_seconds: int,
        similarity_threshold: float = 0.85,
        max_entries: int = 1000,
        clock: Clock = _utcnow,
    ) -> None:
        """Initialize research cache.

        Args:
            ttl_seconds: Time-to-live for entries in seconds
            similarity_threshold: Minimum Jaccard similarity for a fallback hit
            max_entries: Maximum number of entries kept
            clock: Returns the current UTC time
        """
        self.ttl = timedelta(seconds=ttl_seconds)
        self.similarity_threshold = similarity_threshold
        self.max_entries = max_entries
        self.clock = clock

        # key -> entry, insertion ordered
        self.cache: dict[str, ResearchCacheEntry] = {}

        self.exact_hits = 0
        self.similar_hits = 0
        self.miss_count = 0

    def get(self, params: ResearchParams) -> ResearchResult | None:
        """Get a cached result for the parameters.

        Args:
            params: Research parameters

        Returns:
            Copy of the cached result with `cached=True`, or None
        """
        now = self.clock()
        key = generate_cache_key(params)

        entry = self.cache.get(key)
        if entry is not None:
            if not entry.is_expired(now):
                self.exact_hits += 1
                return entry.result.model_copy(update={"cached": True})
            del self.cache[key]

        similar = self._find_similar(params.query, now)
        if similar is not None:
            self.similar_hits += 1
            logger.debug(f"Similar research cache hit: {params.query!r} ~ {similar.query!r}")
            return similar.result.model_copy(update={"cached": True})

        self.miss_count += 1
        return None

    def set(self, params: ResearchParams, result: ResearchResult) -> None:
        """Store a result under the exact key with a fresh expiry."""
        now = self.clock()
        key = generate_cache_key(params)

        if key not in self.cache and len(self.cache) >= self.max_entries:
            self._evict_oldest()

        # Overwrites move the key to the end of insertion order
        self.cache.pop(key, None)
        self.cache[key] = ResearchCacheEntry(
            key=key,
            query=params.query,
            result=result,
            created_at=now,
            expires_at=now + self.ttl,
        )

    def _find_similar(self, query: str, now: datetime) -> ResearchCacheEntry | None:
        """Scan entries for a similar query, evicting expired ones."""
        for key, entry in list(self.cache.items()):
            if entry.is_expired(now):
                del self.cache[key]
                continue
            if jaccard_similarity(query, entry.query) >= self.similarity_threshold:
                return entry
        return None

    def _evict_oldest(self) -> None:
        oldest_key = min(self.cache, key=lambda k: self.cache[k].created_at)
        del self.cache[oldest_key]

    def cleanup_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        expired = [key for key, entry in self.cache.items() if entry.is_expired(now)]
        for key in expired:
            del self.cache[key]
        if expired:
            logger.info(f"Cleaned {len(expired)} expired research cache entries")
        return len(expired)

    def invalidate(self) -> int:
        """Clear the cache and return the number of entries dropped."""
        count = len(self.cache)
        self.cache.clear()
        return count

    def get_stats(self) -> ResearchCacheStats:
        """Get cache statistics."""
        now = self.clock()
        hits = self.exact_hits + self.similar_hits
        total_requests = hits + self.miss_count

        ages = [(now - entry.created_at).total_seconds() for entry in self.cache.values()]

        return ResearchCacheStats(
            total_entries=len(self.cache),
            exact_hits=self.exact_hits,
            similar_hits=self.similar_hits,
            miss_count=self.miss_count,
            hit_rate=hits / total_requests if total_requests > 0 else 0.0,
            oldest_entry_age_seconds=max(ages) if ages else None,
            newest_entry_age_seconds=min(ages) if ages else None,
        )
