"""
Data models for note matching and consolidation.

Contains:
- MatchType enum
- ExistingNote dataclass
- Document dataclass
- RankedNote dataclass
- DuplicateMatch dataclass
- TagMatch dataclass
- ConsolidationDecision dataclass
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class MatchType(str, Enum):
    """Tier of a duplicate match, derived from its similarity score."""
    EXACT = "exact"
    PARAPHRASE = "paraphrase"
    PARTIAL = "partial"


@dataclass
class ExistingNote:
    """A note already in the knowledge base."""
    id: str
    title: str
    content: str
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExistingNote":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            tags=list(data.get("tags", [])),
        )


@dataclass(frozen=True)
class Document:
    """Immutable extraction input."""
    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "metadata": dict(self.metadata),
        }


@dataclass
class RankedNote:
    """A relatedness result. Lists of these are sorted by descending score."""
    id: str
    title: str
    content: str
    score: float
    semantic_score: Optional[float] = None
    keyword_score: Optional[float] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "score": self.score,
        }
        if self.semantic_score is not None:
            data["semantic_score"] = self.semantic_score
        if self.keyword_score is not None:
            data["keyword_score"] = self.keyword_score
        return data


@dataclass
class DuplicateMatch:
    """A candidate duplicate of new content among existing notes."""
    note_id: str
    note_title: str
    similarity_score: float  # 0.0 to 1.0
    match_type: MatchType = MatchType.PARTIAL

    def __post_init__(self):
        if isinstance(self.match_type, str):
            self.match_type = MatchType(self.match_type)

    def to_dict(self) -> dict:
        return {
            "note_id": self.note_id,
            "note_title": self.note_title,
            "similarity_score": self.similarity_score,
            "match_type": self.match_type.value,
        }


@dataclass
class TagMatch:
    """An existing tag similar to a proposed one."""
    tag: str
    score: float

    def to_dict(self) -> dict:
        return {"tag": self.tag, "score": self.score}


@dataclass
class ConsolidationDecision:
    """Outcome of the consolidate-or-create decision for one candidate."""
    consolidated_with: Optional[str] = None  # Title of the existing note
    merged_content: Optional[str] = None
    match: Optional[DuplicateMatch] = None

    @property
    def should_consolidate(self) -> bool:
        return self.consolidated_with is not None
