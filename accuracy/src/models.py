"""
Data models for extraction runs and ground truth.

Contains:
- ConnectionType enum
- Connection, ExtractedNoteResult dataclasses
- ExpectedConnection, ExpectedNote, ExpectedConsolidation dataclasses
- TestScenario dataclass
- DocumentExtractionResult dataclass
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from shared.deduplication import Document, ExistingNote


class ConnectionType(str, Enum):
    """Link types an extracted note may carry."""
    RELATED = "related"
    SUPPORTS = "supports"
    CONTRADICTS = "contradicts"
    EXTENDS = "extends"
    EXAMPLE_OF = "example_of"
    # Hierarchical
    PARENT = "parent"
    PART_OF = "part_of"
    BELONGS_TO = "belongs_to"


@dataclass
class Connection:
    """A link from an extracted note to another note."""
    target_title: str
    type: str = ConnectionType.RELATED.value
    strength: float = 0.5

    def to_dict(self) -> dict:
        return {
            "target_title": self.target_title,
            "type": self.type,
            "strength": self.strength,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Connection":
        return cls(
            target_title=data.get("target_title") or data.get("targetTitle", ""),
            type=data.get("type", ConnectionType.RELATED.value),
            strength=float(data.get("strength", 0.5)),
        )


@dataclass
class ExtractedNoteResult:
    """A candidate note produced by one extraction call."""
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    consolidated_with: Optional[str] = None
    merged_content: Optional[str] = None
    connections: list[Connection] = field(default_factory=list)
    source_document_id: Optional[str] = None

    @property
    def is_consolidated(self) -> bool:
        return self.consolidated_with is not None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "content": self.content,
            "tags": list(self.tags),
            "consolidated_with": self.consolidated_with,
            "merged_content": self.merged_content,
            "connections": [c.to_dict() for c in self.connections],
            "source_document_id": self.source_document_id,
        }


@dataclass
class ExpectedConnection:
    """Ground-truth link: target pattern ('a|b' alternatives) and accepted types."""
    target_title_pattern: str
    types: list[str] = field(default_factory=lambda: [ConnectionType.RELATED.value])


@dataclass
class ExpectedNote:
    """Ground-truth description of a note that should be extracted."""
    title_patterns: list[str]
    required_phrases: list[str] = field(default_factory=list)
    should_consolidate_with: Optional[str] = None
    expected_tags: list[str] = field(default_factory=list)
    expected_connections: list[ExpectedConnection] = field(default_factory=list)


@dataclass
class ExpectedConsolidation:
    """Ground-truth consolidation of new content into an existing note."""
    new_content_pattern: str  # Case-insensitive regex
    existing_note_title: str
    merged_content_phrases: list[str] = field(default_factory=list)
    document_id: Optional[str] = None  # Restrict to notes from this document


@dataclass
class TestScenario:
    """A named, read-only evaluation scenario."""
    __test__ = False  # not a pytest class

    name: str
    description: str
    documents: list[Document]
    existing_notes: list[ExistingNote] = field(default_factory=list)
    existing_tags: list[str] = field(default_factory=list)
    expected_notes: list[ExpectedNote] = field(default_factory=list)
    expected_consolidations: list[ExpectedConsolidation] = field(default_factory=list)

    def reversed(self) -> "TestScenario":
        """Same scenario with document order reversed."""
        return replace(
            self,
            name=f"{self.name} (reversed)",
            documents=list(reversed(self.documents)),
        )


@dataclass
class DocumentExtractionResult:
    """Notes and timing for one processed document."""
    document_id: str
    notes: list[ExtractedNoteResult]
    matching_time_ms: float = 0.0
    extraction_time_ms: float = 0.0

    @property
    def total_time_ms(self) -> float:
        return self.matching_time_ms + self.extraction_time_ms
