"""
Embedding-based matching strategy.

Similarity comes from an injected EmbeddingProvider: cosine similarity of
service vectors when the provider has a client, otherwise the local
concept-cluster approximation. Thresholds differ between the two modes
because the approximation's score distribution is flatter.
"""

from typing import Optional, Sequence

from llm.src.embeddings import EmbeddingProvider
from shared.deduplication import (
    DuplicateMatch,
    ExistingNote,
    RankedNote,
    TagMatch,
    TAG_SYNONYMS,
    normalize_tag,
)
from shared.logging import get_logger

from .base import MatchingStrategy, classify_match, rank_notes, rank_tag_matches

log = get_logger("accuracy", "strategies.embedding")


def note_text(note: ExistingNote) -> str:
    return f"{note.title}: {note.content}"


class EmbeddingStrategy(MatchingStrategy):
    """Semantic similarity via embeddings."""

    name = "semantic-embeddings"
    description = "Embedding cosine similarity (local approximation when no credential)"

    DEFAULT_LIMIT = 15

    # Remote (service vectors)
    REMOTE_RELATED_MIN = 0.7
    REMOTE_DUPLICATE_MIN = 0.85
    REMOTE_EXACT_TIER = 0.95
    REMOTE_PARAPHRASE_TIER = 0.8
    REMOTE_TAG_MIN = 0.8

    # Local approximation
    LOCAL_RELATED_MIN = 0.3
    LOCAL_DUPLICATE_MIN = 0.6
    LOCAL_EXACT_TIER = 0.9
    LOCAL_PARAPHRASE_TIER = 0.7
    LOCAL_TAG_NORMALIZED = 0.95
    LOCAL_TAG_SYNONYM = 0.9
    LOCAL_TAG_GROUP = 0.85

    def __init__(self, provider: Optional[EmbeddingProvider] = None):
        """
        Args:
            provider: Similarity source. None builds a local approximation
                      provider, so the strategy never needs a credential.
        """
        self.provider = provider or EmbeddingProvider(None)

    @property
    def is_remote(self) -> bool:
        return self.provider.is_remote

    async def cleanup(self) -> None:
        stats = self.provider.get_stats()
        await self.provider.clear()
        log.debug("accuracy.strategies.embedding.cleanup", **stats)

    async def find_related_notes(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> list[RankedNote]:
        limit = self.DEFAULT_LIMIT if limit is None else limit
        if min_score is None:
            min_score = self.REMOTE_RELATED_MIN if self.is_remote else self.LOCAL_RELATED_MIN

        ranked = []
        for note in existing_notes:
            score = await self.provider.similarity(content, note_text(note))
            if score >= min_score and score > 0.0:
                ranked.append(RankedNote(
                    id=note.id,
                    title=note.title,
                    content=note.content,
                    score=score,
                    semantic_score=score,
                ))

        return rank_notes(ranked, limit)

    async def detect_duplicates(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        min_score: Optional[float] = None,
    ) -> list[DuplicateMatch]:
        if self.is_remote:
            exact_at, paraphrase_at = self.REMOTE_EXACT_TIER, self.REMOTE_PARAPHRASE_TIER
            default_min = self.REMOTE_DUPLICATE_MIN
        else:
            exact_at, paraphrase_at = self.LOCAL_EXACT_TIER, self.LOCAL_PARAPHRASE_TIER
            default_min = self.LOCAL_DUPLICATE_MIN
        min_score = default_min if min_score is None else min_score

        matches = []
        for note in existing_notes:
            score = await self.provider.similarity(content, note.content)
            if score >= min_score and score > 0.0:
                matches.append(DuplicateMatch(
                    note_id=note.id,
                    note_title=note.title,
                    similarity_score=score,
                    match_type=classify_match(score, exact_at, paraphrase_at),
                ))

        return sorted(matches, key=lambda m: m.similarity_score, reverse=True)

    async def find_similar_tags(
        self,
        tag_name: str,
        existing_tags: Sequence[str],
    ) -> list[TagMatch]:
        if self.is_remote:
            matches = await self._remote_tag_matches(tag_name, existing_tags)
        else:
            matches = self._local_tag_matches(tag_name, existing_tags)
        return rank_tag_matches(tag_name, matches)

    async def _remote_tag_matches(
        self,
        tag_name: str,
        existing_tags: Sequence[str],
    ) -> list[TagMatch]:
        tag_lower = tag_name.lower()
        matches = []
        for existing in existing_tags:
            if existing.lower() == tag_lower:
                matches.append(TagMatch(existing, 1.0))
                continue
            score = await self.provider.similarity(tag_lower, existing.lower())
            if score >= self.REMOTE_TAG_MIN:
                matches.append(TagMatch(existing, score))
        return matches

    def _local_tag_matches(
        self,
        tag_name: str,
        existing_tags: Sequence[str],
    ) -> list[TagMatch]:
        tag_lower = tag_name.lower()
        normalized = normalize_tag(tag_name)
        matches = []
        for existing in existing_tags:
            existing_lower = existing.lower()
            if existing_lower == tag_lower:
                matches.append(TagMatch(existing, 1.0))
            elif normalize_tag(existing) == normalized:
                matches.append(TagMatch(existing, self.LOCAL_TAG_NORMALIZED))
            elif tag_lower in TAG_SYNONYMS.get(existing_lower, ()):
                matches.append(TagMatch(existing, self.LOCAL_TAG_SYNONYM))
            elif any(
                tag_lower in variants
                and (existing_lower == canonical or existing_lower in variants)
                for canonical, variants in TAG_SYNONYMS.items()
            ):
                matches.append(TagMatch(existing, self.LOCAL_TAG_GROUP))
        return matches
