"""
Tadka - Embedding Cache.

Process-local memo of text -> vector. Keys are normalized (lowercase, trimmed)
so "Paneer Tikka " and "paneer tikka" share an entry.

The cache is bounded: least-recently-used entries are evicted past `max_size`
and entries older than `ttl_seconds` are treated as misses. Clearing it at any
time is safe; it only costs extra embedding calls.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from tadka.config import settings
from tadka.core.capabilities import Embedder
from tadka.core.retry import Sleep, retry_with_backoff
from tadka.llm.model_router import TaskType
from tadka.optimization.coalescer import RequestCoalescer

logger = logging.getLogger(__name__)


def normalize_cache_key(text: str) -> str:
    return text.lower().strip()


@dataclass
class EmbeddingCacheEntry:
    normalized_key: str
    vector: list[float]
    expires_at: float | None


class EmbeddingCache:
    """Bounded LRU map from normalized text to embedding vector."""

    def __init__(
        self,
        max_size: int = 500,
        ttl_seconds: float | None = 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, EmbeddingCacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_settings(cls) -> "EmbeddingCache":
        return cls(
            max_size=settings.embedding_cache_max_size,
            ttl_seconds=settings.embedding_cache_ttl_seconds,
        )

    def get(self, text: str) -> list[float] | None:
        """Cached vector for `text`, or None on a miss or expired entry."""
        key = normalize_cache_key(text)
        entry = self._entries.get(key)

        if entry is not None and (entry.expires_at is None or entry.expires_at > self._clock()):
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug(f"[EmbeddingCache] HIT ({self.hit_rate()}% rate)")
            return entry.vector

        if entry is not None:
            del self._entries[key]

        self.misses += 1
        return None

    def set(self, text: str, vector: list[float]) -> None:
        key = normalize_cache_key(text)
        expires_at = self._clock() + self.ttl_seconds if self.ttl_seconds is not None else None

        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = EmbeddingCacheEntry(key, vector, expires_at)

        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("[EmbeddingCache] Cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def hit_rate(self) -> int:
        total = self.hits + self.misses
        return round(self.hits / total * 100) if total else 0

    def stats(self) -> dict:
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate(),
        }


class CachedEmbedder:
    """
    Embedding pipeline: cache lookup, then a coalesced and retried call to the
    underlying Embedder, then cache fill.

    Satisfies the Embedder protocol, so it can be handed to anything that
    embeds text (the vector index adapter, the ingestion script).
    """

    def __init__(
        self,
        embedder: Embedder,
        cache: EmbeddingCache,
        coalescer: RequestCoalescer,
        *,
        retries: int | None = None,
        delay: float | None = None,
        backoff_factor: float | None = None,
        timeout: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self._embedder = embedder
        self.cache = cache
        self._coalescer = coalescer
        self._retries = settings.retry_count if retries is None else retries
        self._delay = settings.retry_base_delay if delay is None else delay
        self._backoff = settings.retry_backoff_factor if backoff_factor is None else backoff_factor
        self._timeout = settings.call_timeout_seconds if timeout is None else timeout
        self._sleep = sleep

    def is_available(self) -> bool:
        return self._embedder.is_available()

    async def embed(self, text: str) -> list[float] | None:
        """Vector for `text`, or None when the text is blank or every attempt failed."""
        if not text.strip():
            return None

        cached = self.cache.get(text)
        if cached is not None:
            return cached

        if not self._embedder.is_available():
            logger.debug("[Embed] Embedder unavailable, skipping")
            return None

        key = self._coalescer.generate_key(TaskType.EMBED, normalize_cache_key(text))
        result = await self._coalescer.request(key, lambda: self._embed_with_retry(text))
        if not result.ok or result.value is None:
            logger.warning(f"[Embed] Failed after {result.attempts} attempts: {result.detail}")
            return None

        self.cache.set(text, result.value)
        return result.value

    async def _embed_with_retry(self, text: str):
        return await retry_with_backoff(
            lambda: self._embedder.embed(text),
            retries=self._retries,
            delay=self._delay,
            backoff_factor=self._backoff,
            timeout=self._timeout,
            sleep=self._sleep,
            label="embed",
        )
