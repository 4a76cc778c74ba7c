"""
Keyword-based matching strategy.

Relatedness is keyword presence in title and content; duplicates add a
word 3-gram overlap check so verbatim copies are caught even when long
text dilutes keyword overlap.
"""

from typing import Optional, Sequence

from shared.deduplication import (
    DuplicateMatch,
    ExistingNote,
    MatchType,
    RankedNote,
    TagMatch,
    char_overlap,
    extract_keywords,
    keyword_similarity,
    ngram_overlap,
    normalize_tag,
    score_by_keywords,
)
from shared.logging import get_logger

from .base import MatchingStrategy, classify_match, rank_notes, rank_tag_matches

log = get_logger("accuracy", "strategies.lexical")


class LexicalStrategy(MatchingStrategy):
    """Keyword extraction + title/content scoring."""

    name = "keyword-baseline"
    description = "Keyword extraction with stop-word filtering and weighted title/content scoring"

    # Thresholds
    DEFAULT_LIMIT = 15
    DEFAULT_MIN_SCORE = 0.0
    DUPLICATE_MIN_SCORE = 0.85
    EXACT_OVERLAP = 0.8
    EXACT_TIER = 0.8
    TAG_NORMALIZED_SCORE = 0.95
    TAG_SUBSTRING_SCORE = 0.7
    TAG_CHAR_OVERLAP_MIN = 0.6

    def __init__(
        self,
        *,
        max_keywords: int = 10,
        min_keyword_length: int = 4,
        title_weight: int = 2,
        content_weight: int = 1,
    ):
        self.max_keywords = max_keywords
        self.min_keyword_length = min_keyword_length
        self.title_weight = title_weight
        self.content_weight = content_weight

    def keywords(self, content: str) -> list[str]:
        return extract_keywords(
            content,
            limit=self.max_keywords,
            min_length=self.min_keyword_length,
        )

    def score_note(self, keywords: Sequence[str], note: ExistingNote) -> int:
        return score_by_keywords(
            keywords,
            note.title,
            note.content,
            title_weight=self.title_weight,
            content_weight=self.content_weight,
        )

    async def find_related_notes(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> list[RankedNote]:
        limit = self.DEFAULT_LIMIT if limit is None else limit
        min_score = self.DEFAULT_MIN_SCORE if min_score is None else min_score

        keywords = self.keywords(content)
        if not keywords or not existing_notes:
            return []

        ranked = []
        for note in existing_notes:
            score = self.score_note(keywords, note)
            if score > min_score:
                ranked.append(RankedNote(
                    id=note.id,
                    title=note.title,
                    content=note.content,
                    score=float(score),
                    keyword_score=float(score),
                ))

        return rank_notes(ranked, limit)

    async def detect_duplicates(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        min_score: Optional[float] = None,
    ) -> list[DuplicateMatch]:
        min_score = self.DUPLICATE_MIN_SCORE if min_score is None else min_score

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

            similarity = keyword_similarity(
                content, note.content, min_length=self.min_keyword_length,
            )
            if similarity >= min_score:
                matches.append(DuplicateMatch(
                    note_id=note.id,
                    note_title=note.title,
                    similarity_score=similarity,
                    match_type=classify_match(similarity, self.EXACT_TIER, None),
                ))

        log.debug(
            "accuracy.strategies.lexical.duplicates",
            pool=len(existing_notes),
            matches=len(matches),
            min_score=min_score,
        )
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
            existing_lower = existing.lower()

            if existing_lower == tag_lower:
                matches.append(TagMatch(existing, 1.0))
            elif normalize_tag(existing) == normalized:
                matches.append(TagMatch(existing, self.TAG_NORMALIZED_SCORE))
            elif tag_lower in existing_lower or existing_lower in tag_lower:
                matches.append(TagMatch(existing, self.TAG_SUBSTRING_SCORE))
            else:
                overlap = char_overlap(tag_lower, existing_lower)
                if overlap > self.TAG_CHAR_OVERLAP_MIN:
                    matches.append(TagMatch(existing, overlap))

        return rank_tag_matches(tag_name, matches)
