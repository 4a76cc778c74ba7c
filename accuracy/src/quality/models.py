"""
Data models for note quality (NVQ) scoring.

Contains:
- QualityNote dataclass
- Component score dataclasses (Why, Metadata, Taxonomy, Connectivity, Originality)
- NVQBreakdown, NVQScore dataclasses
- NVQEvaluationResult dataclass
- QualityMetrics dataclass
"""

from dataclasses import dataclass, field
from typing import Optional

from ..models import Connection


@dataclass
class QualityNote:
    """A candidate note with the fields NVQ scoring reads."""
    title: str
    content: str
    tags: list[str] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    purpose_statement: Optional[str] = None
    status: Optional[str] = None
    note_type: Optional[str] = None
    stakeholder: Optional[str] = None
    project: Optional[str] = None


@dataclass
class WhyScore:
    score: int
    has_first_person: bool = False
    has_purpose_statement: bool = False
    is_actionable: bool = False
    raw_statement: Optional[str] = None


@dataclass
class MetadataScore:
    score: int
    fields_present: int = 0
    has_status: bool = False
    has_type: bool = False
    has_stakeholder: bool = False
    has_project: bool = False
    project: Optional[str] = None


@dataclass
class TaxonomyScore:
    score: int
    total_tags: int = 0
    functional_tags: int = 0
    topic_tags: int = 0
    exceeds_limit: bool = False


@dataclass
class ConnectivityScore:
    score: int
    upward_links: list[str] = field(default_factory=list)
    sideways_links: list[str] = field(default_factory=list)

    @property
    def has_upward_link(self) -> bool:
        return bool(self.upward_links)

    @property
    def has_sideways_link(self) -> bool:
        return bool(self.sideways_links)

    @property
    def meets_minimum(self) -> bool:
        return self.has_upward_link and self.has_sideways_link


@dataclass
class OriginalityScore:
    score: int
    synthesis_matches: int = 0

    @property
    def has_original_insight(self) -> bool:
        return self.synthesis_matches > 0


@dataclass
class NVQBreakdown:
    why: WhyScore
    metadata: MetadataScore
    taxonomy: TaxonomyScore
    connectivity: ConnectivityScore
    originality: OriginalityScore

    def component_scores(self) -> dict[str, int]:
        return {
            "why": self.why.score,
            "metadata": self.metadata.score,
            "taxonomy": self.taxonomy.score,
            "connectivity": self.connectivity.score,
            "originality": self.originality.score,
        }


@dataclass
class NVQScore:
    """Five-component note quality score, 0-10."""
    total: int
    breakdown: NVQBreakdown
    passing: bool
    failing_components: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "breakdown": self.breakdown.component_scores(),
            "passing": self.passing,
            "failing_components": list(self.failing_components),
        }


@dataclass
class NVQEvaluationResult:
    """Score and diagnostics for one note."""
    note_title: str
    score: NVQScore
    issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "note_title": self.note_title,
            "score": self.score.to_dict(),
            "issues": list(self.issues),
        }


COMPONENT_RANGES = {
    "why": 3,
    "metadata": 2,
    "taxonomy": 2,
    "connectivity": 2,
    "originality": 1,
}


def empty_distributions() -> dict[str, dict[int, int]]:
    return {name: {s: 0 for s in range(top + 1)} for name, top in COMPONENT_RANGES.items()}


@dataclass
class QualityMetrics:
    """Aggregate NVQ statistics over a set of notes."""
    total_notes_evaluated: int = 0
    mean_nvq: float = 0.0
    median_nvq: float = 0.0
    min_nvq: int = 0
    max_nvq: int = 0
    passing_count: int = 0
    failure_counts: dict[str, int] = field(
        default_factory=lambda: {name: 0 for name in COMPONENT_RANGES}
    )
    distributions: dict[str, dict[int, int]] = field(default_factory=empty_distributions)
    notes_with_purpose: int = 0
    notes_with_complete_metadata: int = 0
    notes_with_functional_tags: int = 0
    notes_with_two_links: int = 0
    notes_that_are_synthesis: int = 0
    top_issues: list[tuple[str, int]] = field(default_factory=list)

    @property
    def passing_rate(self) -> float:
        if not self.total_notes_evaluated:
            return 0.0
        return self.passing_count / self.total_notes_evaluated

    def failure_rate(self, component: str) -> float:
        if not self.total_notes_evaluated:
            return 0.0
        return self.failure_counts.get(component, 0) / self.total_notes_evaluated

    def to_dict(self) -> dict:
        return {
            "total_notes_evaluated": self.total_notes_evaluated,
            "mean_nvq": self.mean_nvq,
            "median_nvq": self.median_nvq,
            "min_nvq": self.min_nvq,
            "max_nvq": self.max_nvq,
            "passing_rate": self.passing_rate,
            "failure_rates": {name: self.failure_rate(name) for name in COMPONENT_RANGES},
            "distributions": {
                name: {str(k): v for k, v in dist.items()}
                for name, dist in self.distributions.items()
            },
            "notes_with_purpose": self.notes_with_purpose,
            "notes_with_complete_metadata": self.notes_with_complete_metadata,
            "notes_with_functional_tags": self.notes_with_functional_tags,
            "notes_with_two_links": self.notes_with_two_links,
            "notes_that_are_synthesis": self.notes_that_are_synthesis,
            "top_issues": [{"issue": issue, "count": count} for issue, count in self.top_issues],
        }
