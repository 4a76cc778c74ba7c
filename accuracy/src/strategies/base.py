"""
Base class for note matching strategies.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from shared.deduplication import (
    DuplicateMatch,
    ExistingNote,
    MatchType,
    RankedNote,
    TagMatch,
)


class MatchingStrategy(ABC):
    """
    Pluggable algorithm for relatedness ranking, duplicate detection and
    tag similarity.

    Operations are side-effect free apart from internal caches, which are
    released by cleanup().
    """

    name: str = ""
    description: str = ""

    async def initialize(self) -> None:
        """Prepare resources before a run."""

    async def cleanup(self) -> None:
        """Release resources and caches after a run."""

    @abstractmethod
    async def find_related_notes(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> list[RankedNote]:
        """
        Rank existing notes by relatedness to content.

        Returns:
            At most `limit` notes above `min_score`, highest score first.
            An empty pool yields an empty list.
        """

    @abstractmethod
    async def detect_duplicates(
        self,
        content: str,
        existing_notes: Sequence[ExistingNote],
        *,
        min_score: Optional[float] = None,
    ) -> list[DuplicateMatch]:
        """Find existing notes that duplicate content, highest similarity first."""

    @abstractmethod
    async def find_similar_tags(
        self,
        tag_name: str,
        existing_tags: Sequence[str],
    ) -> list[TagMatch]:
        """Find existing tags similar to tag_name, highest score first."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def classify_match(score: float, exact_at: float, paraphrase_at: Optional[float]) -> MatchType:
    """Derive a match tier from a similarity score."""
    if score >= exact_at:
        return MatchType.EXACT
    if paraphrase_at is not None and score >= paraphrase_at:
        return MatchType.PARAPHRASE
    return MatchType.PARTIAL


def rank_tag_matches(tag_name: str, matches: list[TagMatch]) -> list[TagMatch]:
    """Sort tag matches descending; an exact case-insensitive match ranks first."""
    tag_lower = tag_name.lower()
    return sorted(
        matches,
        key=lambda m: (m.tag.lower() != tag_lower, -m.score),
    )


def rank_notes(notes: list[RankedNote], limit: int) -> list[RankedNote]:
    """Sort ranked notes descending by score and truncate."""
    return sorted(notes, key=lambda n: n.score, reverse=True)[:limit]
