"""
Extraction providers.

A provider turns one document into candidate notes, given the current pool.

Contains:
- ExtractionProvider protocol
- MockExtractionProvider: strategy-driven, deterministic
- LLMExtractionProvider: Claude-backed live extraction
"""

import json
import re
from typing import Optional, Protocol, Sequence

from shared.deduplication import ConsolidationChecker, Document, ExistingNote
from shared.logging import get_logger
from llm.src.client import LLMCallback

from .models import Connection, ConnectionType, ExtractedNoteResult
from .strategies import MatchingStrategy

log = get_logger("accuracy", "extraction")

DEFAULT_TAG_CANDIDATES = ("learning", "productivity", "habits", "writing")
FALLBACK_TAG = "uncategorized"
MIN_PARAGRAPH_LENGTH = 50
TITLE_WORDS = 6
RELATED_LIMIT = 5
CONTEXT_LIMIT = 15
TAG_REUSE_SCORE = 0.8
CONNECTION_MIN_SCORE = 0.5
MAX_CONNECTIONS = 3


class ExtractionParseError(ValueError):
    """Raised when an extraction response has no usable JSON notes payload."""
    pass


class ExtractionProvider(Protocol):
    """Produces candidate notes for one document."""

    async def extract(
        self,
        document: Document,
        existing_notes: Sequence[ExistingNote],
        existing_tags: Sequence[str],
        strategy: MatchingStrategy,
    ) -> list[ExtractedNoteResult]:
        ...


def split_paragraphs(text: str, min_length: int = MIN_PARAGRAPH_LENGTH) -> list[str]:
    """Blank-line separated paragraphs longer than min_length."""
    paragraphs = (p.strip() for p in re.split(r"\n\s*\n", text))
    return [p for p in paragraphs if len(p) > min_length]


def make_title(paragraph: str, words: int = TITLE_WORDS) -> str:
    return " ".join(paragraph.split()[:words]) + "..."


async def consolidate(
    content: str,
    existing_notes: Sequence[ExistingNote],
    strategy: MatchingStrategy,
    checker: ConsolidationChecker,
) -> tuple[Optional[str], Optional[str]]:
    """Run duplicate detection and the decision engine for one candidate."""
    duplicates = await strategy.detect_duplicates(content, existing_notes)
    decision = checker.decide(content, duplicates, existing_notes)
    return decision.consolidated_with, decision.merged_content


# =============================================================================
# Mock provider
# =============================================================================

class MockExtractionProvider:
    """
    Simulates extraction with the strategy's own matching.

    Each paragraph becomes one candidate note; consolidation, tags and
    connections all come from the strategy, so differences between runs
    reflect the strategy alone.
    """

    def __init__(
        self,
        checker: Optional[ConsolidationChecker] = None,
        tag_candidates: Sequence[str] = DEFAULT_TAG_CANDIDATES,
    ):
        self.checker = checker or ConsolidationChecker()
        self.tag_candidates = tuple(tag_candidates)

    async def extract(
        self,
        document: Document,
        existing_notes: Sequence[ExistingNote],
        existing_tags: Sequence[str],
        strategy: MatchingStrategy,
    ) -> list[ExtractedNoteResult]:
        results = []

        for paragraph in split_paragraphs(document.content):
            related = await strategy.find_related_notes(
                paragraph, existing_notes, limit=RELATED_LIMIT
            )
            consolidated_with, merged = await consolidate(
                paragraph, existing_notes, strategy, self.checker
            )
            tags = await self._pick_tags(paragraph, existing_tags, strategy)

            connections = [
                Connection(
                    target_title=note.title,
                    type=ConnectionType.RELATED.value,
                    strength=min(note.score / 10, 1.0),
                )
                for note in related
                if note.score > CONNECTION_MIN_SCORE
            ][:MAX_CONNECTIONS]

            results.append(ExtractedNoteResult(
                title=make_title(paragraph),
                content=paragraph,
                tags=tags,
                consolidated_with=consolidated_with,
                merged_content=merged,
                connections=connections,
                source_document_id=document.id,
            ))

        log.debug(
            "accuracy.extraction.mock_extracted",
            document_id=document.id,
            notes=len(results),
            consolidated=sum(1 for r in results if r.is_consolidated),
        )
        return results

    async def _pick_tags(
        self,
        paragraph: str,
        existing_tags: Sequence[str],
        strategy: MatchingStrategy,
    ) -> list[str]:
        tags: list[str] = []
        lowered = paragraph.lower()

        for candidate in self.tag_candidates:
            similar = await strategy.find_similar_tags(candidate, existing_tags)
            if similar and similar[0].score > TAG_REUSE_SCORE:
                chosen = similar[0].tag
            elif candidate in lowered:
                chosen = candidate
            else:
                continue
            if chosen not in tags:
                tags.append(chosen)

        return tags or [FALLBACK_TAG]


# =============================================================================
# Live provider
# =============================================================================

EXTRACTION_PROMPT = """You are extracting atomic notes from a piece of personal writing.

Each note holds exactly one idea. Reuse existing tags where they fit. If a note
restates an existing note, still return it; consolidation is decided separately.

=== EXISTING NOTES ===
{existing_notes}

=== RELATED CONTEXT ===
{related_notes}

=== EXISTING TAGS ===
{existing_tags}

=== DOCUMENT ===
{document}

Return a JSON object with:
- notes: array of objects, each with
  - title: short descriptive title
  - content: the note body, in the author's voice
  - tags: array of tag names
  - connections: array of {{"target_title": ..., "type": "related|supports|contradicts|extends|example_of|parent|part_of|belongs_to", "strength": 0-1}}
"""


def _format_notes(notes: Sequence, limit: int = CONTEXT_LIMIT) -> str:
    lines = [f"- {note.title}: {note.content[:200]}" for note in list(notes)[:limit]]
    return "\n".join(lines) or "(none)"


def parse_extraction_response(text: str) -> list[dict]:
    """
    Pull the notes array out of a model response.

    Raises:
        ExtractionParseError: No JSON object, invalid JSON, or no notes array
    """
    json_match = re.search(r"\{.*\}", text, re.DOTALL)
    if not json_match:
        raise ExtractionParseError("No JSON object in extraction response")
    try:
        data = json.loads(json_match.group())
    except json.JSONDecodeError as e:
        raise ExtractionParseError(f"Invalid JSON in extraction response: {e}") from e

    notes = data.get("notes") if isinstance(data, dict) else None
    if not isinstance(notes, list):
        raise ExtractionParseError("Extraction response has no 'notes' array")
    return [n for n in notes if isinstance(n, dict)]


class LLMExtractionProvider:
    """
    Extracts notes with a language model.

    Consolidation is still decided locally from the strategy's duplicate
    detection, so live runs remain comparable with mock runs.
    """

    def __init__(
        self,
        llm_callback: LLMCallback,
        checker: Optional[ConsolidationChecker] = None,
    ):
        self.llm_callback = llm_callback
        self.checker = checker or ConsolidationChecker()

    def build_prompt(
        self,
        document: Document,
        existing_notes: Sequence[ExistingNote],
        existing_tags: Sequence[str],
        related: Sequence,
    ) -> str:
        return EXTRACTION_PROMPT.format(
            existing_notes=_format_notes(existing_notes),
            related_notes=_format_notes(related),
            existing_tags=", ".join(existing_tags) or "(none)",
            document=document.content,
        )

    async def extract(
        self,
        document: Document,
        existing_notes: Sequence[ExistingNote],
        existing_tags: Sequence[str],
        strategy: MatchingStrategy,
    ) -> list[ExtractedNoteResult]:
        related = await strategy.find_related_notes(
            document.content, existing_notes, limit=CONTEXT_LIMIT
        )
        prompt = self.build_prompt(document, existing_notes, existing_tags, related)

        log.info(
            "accuracy.extraction.llm_request",
            document_id=document.id,
            prompt_length=len(prompt),
            related=len(related),
        )
        response = await self.llm_callback(prompt)
        raw_notes = parse_extraction_response(response)

        results = []
        for raw in raw_notes:
            title = str(raw.get("title") or "").strip()
            content = str(raw.get("content") or "").strip()
            if not title or not content:
                continue

            consolidated_with, merged = await consolidate(
                content, existing_notes, strategy, self.checker
            )
            results.append(ExtractedNoteResult(
                title=title,
                content=content,
                tags=[str(t) for t in raw.get("tags") or []],
                consolidated_with=consolidated_with,
                merged_content=merged,
                connections=[
                    Connection.from_dict(c) for c in raw.get("connections") or []
                    if isinstance(c, dict)
                ],
                source_document_id=document.id,
            ))

        log.info(
            "accuracy.extraction.llm_extracted",
            document_id=document.id,
            returned=len(raw_notes),
            kept=len(results),
        )
        return results
