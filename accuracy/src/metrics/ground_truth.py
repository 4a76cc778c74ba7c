"""
Ground-truth matching helpers.

Contains:
- Title and pattern matching
- Expected-note lookup by confidence
- Consolidation expectation checks
- Connection evaluation
- Tag reuse expectations
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from shared.deduplication import normalize_tag

from ..models import (
    Connection,
    ExpectedConsolidation,
    ExpectedNote,
    ExtractedNoteResult,
)

# Canonical tag -> variants that should have reused it
TAG_REUSE_GROUPS: dict[str, tuple[str, ...]] = {
    "machine-learning": ("ml", "machine learning", "machinelearning", "deep-learning"),
    "artificial-intelligence": ("ai", "artificial intelligence", "artificialintelligence"),
    "productivity": ("productive", "being-productive", "efficiency"),
    "note-taking": ("notes", "note-management", "notetaking", "pkm"),
    "software-development": ("programming", "coding", "development"),
    "health": ("wellness", "wellbeing", "well-being"),
    "fitness": ("exercise", "workout", "workouts", "physical-fitness"),
    "habits": ("habit", "routines", "daily-habits"),
    "learning": ("education", "study", "studying"),
}

MATCH_CONFIDENCE = 0.5


def matches_pattern(text: str, pattern: str) -> bool:
    """Case-insensitive substring match against 'a|b' alternatives."""
    text_lower = text.lower()
    return any(
        alt.strip() and alt.strip() in text_lower
        for alt in pattern.lower().split("|")
    )


def title_matches_patterns(title: str, patterns: Sequence[str]) -> bool:
    return any(matches_pattern(title, pattern) for pattern in patterns)


def expected_note_confidence(extracted: ExtractedNoteResult, expected: ExpectedNote) -> float:
    """Title 0.4, required phrases 0.4 (fractional), expected tags 0.2 (fractional)."""
    score = 0.0
    if title_matches_patterns(extracted.title, expected.title_patterns):
        score += 0.4

    content_lower = extracted.content.lower()
    phrases_found = sum(
        1 for phrase in expected.required_phrases if phrase.lower() in content_lower
    )
    score += 0.4 * phrases_found / max(len(expected.required_phrases), 1)

    actual_tags = {t.lower() for t in extracted.tags}
    tags_found = sum(1 for tag in expected.expected_tags if tag.lower() in actual_tags)
    score += 0.2 * tags_found / max(len(expected.expected_tags), 1)
    return score


def find_matching_expected_note(
    extracted: ExtractedNoteResult,
    expected_notes: Sequence[ExpectedNote],
) -> tuple[Optional[ExpectedNote], float]:
    """
    Find the expected note best described by an extracted note.

    Returns:
        (expected note or None, best confidence). A match needs confidence > 0.5.
    """
    best, best_confidence = None, 0.0
    for expected in expected_notes:
        confidence = expected_note_confidence(extracted, expected)
        if confidence > best_confidence:
            best, best_confidence = expected, confidence
    if best_confidence > MATCH_CONFIDENCE:
        return best, best_confidence
    return None, best_confidence


def find_expected_consolidation(
    extracted: ExtractedNoteResult,
    expectations: Sequence[ExpectedConsolidation],
) -> Optional[ExpectedConsolidation]:
    """First expectation whose content pattern matches the note (document-scoped if set)."""
    for expectation in expectations:
        if (
            expectation.document_id is not None
            and expectation.document_id != extracted.source_document_id
        ):
            continue
        if re.search(expectation.new_content_pattern, extracted.content, re.IGNORECASE):
            return expectation
    return None


def target_matches(actual_title: Optional[str], expected_title: str) -> bool:
    """Consolidation target check: the expected title appears in the actual one."""
    if not actual_title:
        return False
    return expected_title.lower() in actual_title.lower()


@dataclass
class ConsolidationCheck:
    """How one extracted note's consolidation compares to expectations."""
    expectation: Optional[ExpectedConsolidation]
    did_consolidate: bool
    actual_target: Optional[str]

    @property
    def should_have_consolidated(self) -> bool:
        return self.expectation is not None

    @property
    def expected_target(self) -> Optional[str]:
        return self.expectation.existing_note_title if self.expectation else None

    @property
    def correct_target(self) -> bool:
        return (
            self.expectation is not None
            and self.did_consolidate
            and target_matches(self.actual_target, self.expectation.existing_note_title)
        )


def check_consolidation(
    extracted: ExtractedNoteResult,
    expectations: Sequence[ExpectedConsolidation],
) -> ConsolidationCheck:
    return ConsolidationCheck(
        expectation=find_expected_consolidation(extracted, expectations),
        did_consolidate=extracted.is_consolidated,
        actual_target=extracted.consolidated_with,
    )


def evaluate_connections(
    actual: Sequence[Connection],
    expected: ExpectedNote,
) -> int:
    """
    Count expected connections satisfied by actual ones.

    Each actual connection can satisfy at most one expectation.
    """
    available = list(actual)
    correct = 0
    for exp in expected.expected_connections:
        accepted = {t.lower() for t in exp.types}
        for conn in available:
            if matches_pattern(conn.target_title, exp.target_title_pattern) and conn.type.lower() in accepted:
                available.remove(conn)
                correct += 1
                break
    return correct


def should_reuse_tag(new_tag: str, existing_tags: Sequence[str]) -> Optional[str]:
    """
    Existing tag that a new tag should have reused, if any.

    Checks exact match, known synonym groups and normalized equality.
    """
    new_lower = new_tag.lower()
    new_normalized = normalize_tag(new_tag)

    for existing in existing_tags:
        if existing.lower() == new_lower:
            return existing

    for existing in existing_tags:
        existing_lower = existing.lower()
        if new_lower in TAG_REUSE_GROUPS.get(existing_lower, ()):
            return existing
        for canonical, variants in TAG_REUSE_GROUPS.items():
            if new_lower in variants and (existing_lower == canonical or existing_lower in variants):
                return existing
        if normalize_tag(existing) == new_normalized:
            return existing

    return None
