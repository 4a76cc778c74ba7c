"""
Consolidation decision engine.

Turns a candidate's ranked duplicate matches into a consolidate-or-create
decision. Consolidation appends the new content to the existing note as an
additional insight; existing content is never overwritten.
"""

from typing import Optional, Sequence

from shared.logging import get_logger

from .models import ConsolidationDecision, DuplicateMatch, ExistingNote

log = get_logger("shared", "deduplication.consolidation")

DEFAULT_CONSOLIDATION_THRESHOLD = 0.7
MERGE_SEPARATOR = "\n\nAdditional insight: "


def merge_content(existing_content: str, new_content: str) -> str:
    """Append new content to an existing note's content."""
    return f"{existing_content}{MERGE_SEPARATOR}{new_content}"


class ConsolidationChecker:
    """
    Decides whether a candidate note should merge into an existing note.

    A candidate consolidates with its best duplicate match only when that
    match's similarity is strictly above the threshold. Raising the threshold
    can therefore only reduce the number of consolidations.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_CONSOLIDATION_THRESHOLD,
        *,
        stats_log_interval: int = 0,
    ):
        """
        Initialize the checker.

        Args:
            threshold: Minimum similarity (exclusive) required to consolidate
            stats_log_interval: Log stats every N decisions (0 to disable)
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")

        self.threshold = threshold
        self.stats_log_interval = stats_log_interval

        self._stats = {
            "decisions": 0,
            "consolidations": 0,
            "new_notes": 0,
        }

    def decide(
        self,
        new_content: str,
        matches: Sequence[DuplicateMatch],
        existing_notes: Sequence[ExistingNote],
    ) -> ConsolidationDecision:
        """
        Decide between consolidating and creating a new note.

        Args:
            new_content: Content of the candidate note
            matches: Duplicate matches for the candidate, any order
            existing_notes: Pool the matches refer to

        Returns:
            ConsolidationDecision; empty when a new note should be created
        """
        self._stats["decisions"] += 1
        best = max(matches, key=lambda m: m.similarity_score, default=None)

        if best is None or best.similarity_score <= self.threshold:
            self._stats["new_notes"] += 1
            self._maybe_log_stats()
            return ConsolidationDecision(match=best)

        target = self._find_note(best, existing_notes)
        existing_content = target.content if target else ""
        self._stats["consolidations"] += 1

        log.debug(
            "deduplication.consolidation.merge",
            note_id=best.note_id,
            note_title=best.note_title,
            similarity=round(best.similarity_score, 3),
            match_type=best.match_type.value,
        )
        self._maybe_log_stats()

        return ConsolidationDecision(
            consolidated_with=best.note_title,
            merged_content=merge_content(existing_content, new_content),
            match=best,
        )

    @staticmethod
    def _find_note(
        match: DuplicateMatch,
        existing_notes: Sequence[ExistingNote],
    ) -> Optional[ExistingNote]:
        for note in existing_notes:
            if note.id == match.note_id:
                return note
        return None

    def get_stats(self) -> dict:
        """Get decision statistics."""
        return dict(self._stats)

    def log_stats(self) -> None:
        """Log current decision statistics."""
        stats = self.get_stats()
        rate = (
            stats["consolidations"] / stats["decisions"] * 100
            if stats["decisions"] > 0 else 0.0
        )
        log.info(
            "deduplication.consolidation.stats",
            decisions=stats["decisions"],
            consolidations=stats["consolidations"],
            new_notes=stats["new_notes"],
            consolidation_rate_pct=round(rate, 1),
            threshold=self.threshold,
        )

    def _maybe_log_stats(self) -> None:
        """Log stats if interval reached."""
        if (
            self.stats_log_interval > 0 and
            self._stats["decisions"] % self.stats_log_interval == 0
        ):
            self.log_stats()
