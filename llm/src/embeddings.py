"""
Embedding provider with a per-instance cache and an offline fallback.

A provider built with an LLMClient fetches vectors from the embedding
service and compares them by cosine similarity. A provider built without
one uses a deterministic lexical approximation, so offline runs and tests
behave the same every time.
"""

import asyncio
from typing import Optional

from shared.deduplication.text_processing import (
    approximate_similarity,
    cosine_similarity,
)
from shared.logging import get_logger

from .client import LLMClient

log = get_logger("llm", "embeddings")

CACHE_KEY_LENGTH = 500
DEFAULT_LOCAL_BOOST = 0.3


class EmbeddingCache:
    """Text-keyed vector cache, safe for concurrent coroutines."""

    def __init__(self, key_length: int = CACHE_KEY_LENGTH):
        self.key_length = key_length
        self._vectors: dict[str, list[float]] = {}
        self._lock = asyncio.Lock()

    def key_for(self, text: str) -> str:
        return text[:self.key_length]

    async def get(self, text: str) -> Optional[list[float]]:
        async with self._lock:
            return self._vectors.get(self.key_for(text))

    async def put(self, text: str, vector: list[float]) -> None:
        async with self._lock:
            self._vectors[self.key_for(text)] = vector

    async def clear(self) -> None:
        async with self._lock:
            self._vectors.clear()

    def __len__(self) -> int:
        return len(self._vectors)


class EmbeddingProvider:
    """
    Similarity source for semantic matching.

    Args:
        client: LLMClient used for remote embeddings. None selects the
                local approximation.
        local_boost: Concept-cluster boost for the local approximation
        cache_key_length: Characters of text used as cache key
    """

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        *,
        local_boost: float = DEFAULT_LOCAL_BOOST,
        cache_key_length: int = CACHE_KEY_LENGTH,
    ):
        self.client = client
        self.local_boost = local_boost
        self.cache = EmbeddingCache(cache_key_length)

        self._stats = {
            "requests": 0,
            "cache_hits": 0,
            "failures": 0,
        }

    @property
    def is_remote(self) -> bool:
        return self.client is not None

    async def embed(self, text: str) -> Optional[list[float]]:
        """
        Get the vector for text, using the cache.

        Returns None when no client is configured or the request fails.
        Failures are logged and not cached.
        """
        if self.client is None:
            return None

        cached = await self.cache.get(text)
        if cached is not None:
            self._stats["cache_hits"] += 1
            return cached

        self._stats["requests"] += 1
        response = await self.client.create_embedding(text)
        if not response.success:
            self._stats["failures"] += 1
            log.warning(
                "llm.embeddings.request_failed",
                error=response.error,
                message=response.message,
                text_length=len(text),
            )
            return None

        await self.cache.put(text, response.vector)
        return response.vector

    async def similarity(self, text1: str, text2: str) -> float:
        """
        Similarity between two texts in [0, 1].

        A failed embedding call yields 0.0 for this comparison only.
        """
        if text1 == text2:
            return 1.0

        if self.client is None:
            return approximate_similarity(text1, text2, boost=self.local_boost)

        vec1 = await self.embed(text1)
        if vec1 is None:
            return 0.0
        vec2 = await self.embed(text2)
        if vec2 is None:
            return 0.0
        return max(0.0, min(cosine_similarity(vec1, vec2), 1.0))

    def get_stats(self) -> dict:
        return {
            **self._stats,
            "cached_vectors": len(self.cache),
            "mode": "remote" if self.is_remote else "local",
        }

    async def clear(self) -> None:
        """Drop cached vectors."""
        await self.cache.clear()

    async def close(self) -> None:
        """Drop cached vectors and release the client session."""
        await self.cache.clear()
        if self.client is not None:
            await self.client.close()


def build_embedding_provider(
    config: Optional[dict] = None,
    client: Optional[LLMClient] = None,
    *,
    local_boost: float = DEFAULT_LOCAL_BOOST,
) -> EmbeddingProvider:
    """
    Build a provider from config, falling back to the local approximation.

    A missing embedding credential is an expected state, not an error.

    Args:
        config: Full config dict (reads the `llm` section)
        client: Pre-built client; created from config when None
        local_boost: Boost used if the local approximation is selected
    """
    llm_config = (config or {}).get("llm", {}) or {}

    if client is None:
        client = LLMClient(
            embedding_model=llm_config.get("embedding_model", "text-embedding-3-small"),
            embedding_timeout_seconds=llm_config.get("embedding_timeout_seconds", 30),
        )

    if not client.has_embedding_credentials:
        log.info("llm.embeddings.local_fallback", reason="no embedding credential")
        return EmbeddingProvider(
            None,
            local_boost=local_boost,
            cache_key_length=llm_config.get("cache_key_length", CACHE_KEY_LENGTH),
        )

    log.info("llm.embeddings.remote", model=client.embedding_model)
    return EmbeddingProvider(
        client,
        local_boost=local_boost,
        cache_key_length=llm_config.get("cache_key_length", CACHE_KEY_LENGTH),
    )
