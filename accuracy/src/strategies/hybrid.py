"""
Hybrid matching strategy: keyword retrieval, then semantic rerank.

Phase 1 narrows the pool with cheap keyword scoring. Phase 2 scores the
surviving candidates semantically and blends both signals.
"""

from typing import Optional, Sequence

from llm.src.embeddings import EmbeddingProvider
from shared.deduplication import (
    DuplicateMatch,
    ExistingNote,
    MatchType,
    RankedNote,
    TagMatch,
    TAG_SYNONYMS,
    keyword_similarity,
    ngram_overlap,
    normalize_tag,
)
from shared.logging import get_logger

from .base import MatchingStrategy, classify_match, rank_notes, rank_tag_matches
from .lexical import LexicalStrategy

log = get_logger("accuracy", "strategies.hybrid")

HYBRID_LOCAL_BOOST = 0.35


class HybridStrategy(MatchingStrategy):
    """Keyword filtering + semantic reranking."""

    name = "hybrid"
    description = "Keyword filtering + semantic reranking for balanced speed and accuracy"

    # Retrieval
    KEYWORD_CANDIDATE_LIMIT = 30
    FINAL_RESULT_LIMIT = 15
    KEYWORD_NORMALIZER = 20.0
    KEYWORD_WEIGHT = 0.3
    SEMANTIC_WEIGHT = 0.7
    RELATED_MIN = 0.3

    # Duplicates
    DUPLICATE_MIN = 0.55
    EXACT_OVERLAP = 0.8
    CONFIDENT_SEMANTIC = 0.6
    EXACT_TIER = 0.85
    PARAPHRASE_TIER = 0.65

    # Tags
    TAG_NORMALIZED = 0.98
    TAG_DIRECT_SYNONYM = 0.92
    TAG_REVERSE_SYNONYM = 0.90
    TAG_SAME_GROUP = 0.88
    TAG_SUBSTRING = 0.75

    def __init__(
        self,
        provider: Optional[EmbeddingProvider] = None,
        *,
        keyword_candidate_limit: int = KEYWORD_CANDIDATE_LIMIT,
        lexical: Optional[LexicalStrategy] = None,
    ):
        """
        Args:
            provider: Semantic similarity source (local approximation if None)
            keyword_candidate_limit: Phase 1 candidate count
            lexical: Keyword scorer used for phase 1
        """
        self.provider = provider or EmbeddingProvider(None, local_boost=HYBRID_LOCAL_BOOST)
        self.keyword_candidate_limit = keyword_candidate_limit
        self.lexical = lexical or LexicalStrategy()

    async def cleanup(self) -> None:
        await self.provider.clear()

    def _select_candidates(
        self,
        keywords: list[str],
        existing_notes: Sequence[ExistingNote],
    ) -> list[tuple[ExistingNote, int]]:
        """Phase 1: top keyword-scored notes, or the head of the pool if none score."""
        scored = [(note, self.lexical.score_note(keywords, note)) for note in existing_notes]
        small_pool = len(existing_notes) <= self.keyword_candidate_limit
        candidates = [pair for pair in scored if pair[1] > 0 or small_pool]
        candidates.sort(key=lambda pair: pair[1], reverse=True)
        candidates = candidates[:self.keyword_candidate_limit]

        if not candidates:
            candidates = scored[:self.keyword_candidate_limit]
        return candidates

    async def find_related_notes(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> list[RankedNote]:
        limit = self.FINAL_RESULT_LIMIT if limit is None else limit
        min_score = self.RELATED_MIN if min_score is None else min_score
        if not existing_notes:
            return []

        keywords = self.lexical.keywords(content)
        candidates = self._select_candidates(keywords, existing_notes)

        ranked = []
        for note, keyword_score in candidates:
            semantic = await self.provider.similarity(content, f"{note.title} {note.content}")
            normalized_keyword = min(keyword_score / self.KEYWORD_NORMALIZER, 1.0)
            combined = self.KEYWORD_WEIGHT * normalized_keyword + self.SEMANTIC_WEIGHT * semantic
            if combined >= min_score:
                ranked.append(RankedNote(
                    id=note.id,
                    title=note.title,
                    content=note.content,
                    score=combined,
                    semantic_score=semantic,
                    keyword_score=float(keyword_score),
                ))

        log.debug(
            "accuracy.strategies.hybrid.related",
            pool=len(existing_notes),
            candidates=len(candidates),
            results=len(ranked),
        )
        return rank_notes(ranked, limit)

    def blend(self, semantic: float, lexical: float) -> float:
        """Adaptive blend: trust a confident semantic score, otherwise lean on both."""
        if semantic >= self.CONFIDENT_SEMANTIC:
            return 0.85 * semantic + 0.15 * lexical
        return 0.4 * lexical + 0.6 * semantic

    async def detect_duplicates(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        min_score: Optional[float] = None,
    ) -> list[DuplicateMatch]:
        min_score = self.DUPLICATE_MIN if min_score is None else min_score

        matches = []
        for note in existing_notes:
            overlap = ngram_overlap(content, note.content)
            if overlap >= self.EXACT_OVERLAP:
                matches.append(DuplicateMatch(
                    note_id=note.id,
                    note_title=note.title,
                    similarity_score=overlap,
                    match_type=MatchType.EXACT,
                ))
                continue

            semantic = await self.provider.similarity(content, note.content)
            score = self.blend(semantic, keyword_similarity(
                content, note.content, min_length=self.lexical.min_keyword_length,
            ))
            if score >= min_score:
                matches.append(DuplicateMatch(
                    note_id=note.id,
                    note_title=note.title,
                    similarity_score=score,
                    match_type=classify_match(score, self.EXACT_TIER, self.PARAPHRASE_TIER),
                ))

        return sorted(matches, key=lambda m: m.similarity_score, reverse=True)

    async def find_similar_tags(
        self,
        tag_name: str,
        existing_tags: Sequence[str],
    ) -> list[TagMatch]:
        tag_lower = tag_name.lower()
        normalized = normalize_tag(tag_name)

        matches = []
        for existing in existing_tags:
            score = self._tag_score(tag_lower, normalized, existing.lower())
            if score is not None:
                matches.append(TagMatch(existing, score))

        return rank_tag_matches(tag_name, matches)

    def _tag_score(self, tag_lower: str, normalized: str, existing_lower: str) -> Optional[float]:
        if existing_lower == tag_lower:
            return 1.0
        if normalize_tag(existing_lower) == normalized:
            return self.TAG_NORMALIZED
        if tag_lower in TAG_SYNONYMS.get(existing_lower, ()):
            return self.TAG_DIRECT_SYNONYM
        for canonical, variants in TAG_SYNONYMS.items():
            if tag_lower in variants:
                if existing_lower == canonical:
                    return self.TAG_REVERSE_SYNONYM
                if existing_lower in variants:
                    return self.TAG_SAME_GROUP
        if tag_lower in existing_lower or existing_lower in tag_lower:
            return self.TAG_SUBSTRING
        return None
