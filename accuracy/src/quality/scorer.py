"""
NVQ scoring engine.

Scores a note on the 10-point NVQ scorecard:
- Why (0-3): first-person voice, explicit purpose, actionable language
- Metadata (0-2): status, type, stakeholder, project
- Taxonomy (0-2): functional vs topic tags
- Connectivity (0-2): upward + sideways links
- Originality (0-1): synthesis vs raw information

The pass/fail verdict depends only on the total. Component minimums are
reported as diagnostics.
"""

import statistics
from collections import Counter
from typing import Iterable, Optional, Sequence

from shared.logging import get_logger

from ..models import Connection, ConnectionType, ExtractedNoteResult
from . import patterns
from .models import (
    COMPONENT_RANGES,
    ConnectivityScore,
    MetadataScore,
    NVQBreakdown,
    NVQEvaluationResult,
    NVQScore,
    OriginalityScore,
    QualityMetrics,
    QualityNote,
    TaxonomyScore,
    WhyScore,
)

log = get_logger("accuracy", "quality.scorer")

DEFAULT_PASSING_THRESHOLD = 7
DEFAULT_COMPONENT_MINIMUMS = {name: 1 for name in COMPONENT_RANGES}
DEFAULT_MAX_TAGS = 5


def to_quality_note(note: ExtractedNoteResult) -> QualityNote:
    """
    Derive NVQ fields from an extracted note's content.

    Reads 'Status:', 'Type:', 'Stakeholder:', 'Project:' and 'Purpose:' lines,
    plus project wikilinks.
    """
    content = note.merged_content or note.content
    purpose = patterns.first_field(patterns.PURPOSE_FIELD, content)
    if purpose is None:
        sentence = patterns.PURPOSE_SENTENCE.search(content)
        purpose = sentence.group(0) if sentence else None

    return QualityNote(
        title=note.title,
        content=content,
        tags=list(note.tags),
        connections=list(note.connections),
        purpose_statement=purpose,
        status=patterns.canonical_value(
            patterns.first_field(patterns.STATUS_FIELD, content), patterns.STATUS_VALUES
        ),
        note_type=patterns.canonical_value(
            patterns.first_field(patterns.TYPE_FIELD, content), patterns.TYPE_VALUES
        ),
        stakeholder=patterns.canonical_value(
            patterns.first_field(patterns.STAKEHOLDER_FIELD, content), patterns.STAKEHOLDER_VALUES
        ),
        project=patterns.extract_project_name(content),
    )


class NVQScorer:
    """
    Scores notes against the NVQ rubric.

    Args:
        passing_threshold: Minimum total for a passing note
        component_minimums: Per-component minimum for diagnostics
        functional_prefixes: Tag prefixes counted as functional
        mocs: Map-of-content titles that count as upward link targets
        projects: Project names that count as upward link targets
        max_tags: Tag count above which taxonomy loses a point
    """

    def __init__(
        self,
        *,
        passing_threshold: int = DEFAULT_PASSING_THRESHOLD,
        component_minimums: Optional[dict[str, int]] = None,
        functional_prefixes: Sequence[str] = patterns.DEFAULT_FUNCTIONAL_PREFIXES,
        mocs: Sequence[str] = (),
        projects: Sequence[str] = (),
        max_tags: int = DEFAULT_MAX_TAGS,
    ):
        self.passing_threshold = passing_threshold
        self.component_minimums = {**DEFAULT_COMPONENT_MINIMUMS, **(component_minimums or {})}
        self.functional_prefixes = tuple(p.lower() for p in functional_prefixes)
        self.upward_targets = tuple(t.lower() for t in (*mocs, *projects) if t)
        self.max_tags = max_tags

    # =========================================================================
    # Single note
    # =========================================================================

    def score(self, note: QualityNote) -> NVQScore:
        """Score one note."""
        breakdown = NVQBreakdown(
            why=self.score_why(note),
            metadata=self.score_metadata(note),
            taxonomy=self.score_taxonomy(note),
            connectivity=self.score_connectivity(note),
            originality=self.score_originality(note),
        )
        components = breakdown.component_scores()
        total = sum(components.values())

        return NVQScore(
            total=total,
            breakdown=breakdown,
            passing=total >= self.passing_threshold,
            failing_components=[
                name for name, value in components.items()
                if value < self.component_minimums.get(name, 0)
            ],
        )

    def score_why(self, note: QualityNote) -> WhyScore:
        purpose = note.purpose_statement or ""
        text = f"{note.title}\n{note.content}\n{purpose}"

        has_first_person = bool(patterns.FIRST_PERSON.search(text))
        has_purpose = bool(purpose.strip()) or bool(patterns.PURPOSE_STARTERS.search(text))
        is_actionable = bool(patterns.ACTIONABLE.search(text))

        return WhyScore(
            score=int(has_first_person) + int(has_purpose) + int(is_actionable),
            has_first_person=has_first_person,
            has_purpose_statement=has_purpose,
            is_actionable=is_actionable,
            raw_statement=purpose or None,
        )

    def score_metadata(self, note: QualityNote) -> MetadataScore:
        project = note.project or patterns.extract_project_name(note.content)
        has_status = patterns.canonical_value(note.status, patterns.STATUS_VALUES) is not None
        has_type = patterns.canonical_value(note.note_type, patterns.TYPE_VALUES) is not None
        has_stakeholder = (
            patterns.canonical_value(note.stakeholder, patterns.STAKEHOLDER_VALUES) is not None
        )
        has_project = bool(project)

        present = sum((has_status, has_type, has_stakeholder, has_project))
        if present >= 3:
            score = 2
        elif present >= 2:
            score = 1
        else:
            score = 0

        return MetadataScore(
            score=score,
            fields_present=present,
            has_status=has_status,
            has_type=has_type,
            has_stakeholder=has_stakeholder,
            has_project=has_project,
            project=project,
        )

    def is_functional_tag(self, tag: str) -> bool:
        return tag.lower().lstrip("#").startswith(self.functional_prefixes)

    def score_taxonomy(self, note: QualityNote) -> TaxonomyScore:
        functional = sum(1 for tag in note.tags if self.is_functional_tag(tag))
        topic = len(note.tags) - functional
        exceeds = len(note.tags) > self.max_tags

        if functional and not topic:
            score = 2
        elif functional:
            score = 1
        else:
            score = 0
        if exceeds:
            score = max(0, score - 1)

        return TaxonomyScore(
            score=score,
            total_tags=len(note.tags),
            functional_tags=functional,
            topic_tags=topic,
            exceeds_limit=exceeds,
        )

    def _is_upward(self, conn: Connection) -> bool:
        target = conn.target_title.lower()
        return (
            conn.type.lower() in patterns.UPWARD_TYPES
            or bool(patterns.HIERARCHY_MARKER.search(target))
            or any(name in target for name in self.upward_targets)
        )

    def score_connectivity(self, note: QualityNote) -> ConnectivityScore:
        links = list(note.connections) + [
            Connection(target_title=target, type=ConnectionType.RELATED.value)
            for target in patterns.extract_wikilinks(note.content)
        ]

        upward, sideways = [], []
        for conn in links:
            if self._is_upward(conn):
                upward.append(conn.target_title)
            elif conn.type.lower() in patterns.SIDEWAYS_TYPES:
                sideways.append(conn.target_title)

        if upward and sideways:
            score = 2
        elif upward or sideways:
            score = 1
        else:
            score = 0

        return ConnectivityScore(score=score, upward_links=upward, sideways_links=sideways)

    def score_originality(self, note: QualityNote) -> OriginalityScore:
        matches = patterns.count_synthesis_matches(f"{note.title}\n{note.content}")
        return OriginalityScore(score=1 if matches else 0, synthesis_matches=matches)

    # =========================================================================
    # Batches
    # =========================================================================

    def identify_issues(self, score: NVQScore) -> list[str]:
        """Human-readable problems behind a score."""
        b = score.breakdown
        issues = []
        if not b.why.has_purpose_statement:
            issues.append('Missing purpose statement ("I am keeping this because...")')
        if not b.why.is_actionable:
            issues.append("Purpose is not actionable")
        if b.metadata.fields_present < 2:
            issues.append("Missing metadata fields (Status, Type, Stakeholder, Project)")
        if b.taxonomy.topic_tags > b.taxonomy.functional_tags:
            issues.append("Too many topic tags, not enough functional tags")
        if b.taxonomy.exceeds_limit:
            issues.append(f"Exceeds {self.max_tags} tag limit; note may need to be split")
        if not b.connectivity.has_upward_link:
            issues.append("Missing upward link to MOC or Project")
        if not b.connectivity.has_sideways_link:
            issues.append("Missing sideways link to related concept")
        if not b.originality.has_original_insight:
            issues.append("No personal synthesis; add interpretation")
        return issues

    def evaluate(self, note: QualityNote) -> NVQEvaluationResult:
        score = self.score(note)
        return NVQEvaluationResult(
            note_title=note.title,
            score=score,
            issues=self.identify_issues(score),
        )

    def evaluate_notes(
        self,
        notes: Iterable[QualityNote],
    ) -> tuple[list[NVQEvaluationResult], QualityMetrics]:
        """Score many notes and aggregate."""
        results = [self.evaluate(note) for note in notes]
        return results, aggregate_quality(results)


def aggregate_quality(results: Sequence[NVQEvaluationResult], top_n: int = 5) -> QualityMetrics:
    """Aggregate NVQ results; counts are summed, rates recomputed from counts."""
    metrics = QualityMetrics()
    if not results:
        return metrics

    totals = [r.score.total for r in results]
    issue_counter: Counter = Counter()

    for result in results:
        b = result.score.breakdown
        for name, value in b.component_scores().items():
            metrics.distributions[name][value] = metrics.distributions[name].get(value, 0) + 1
            if value == 0:
                metrics.failure_counts[name] += 1
        if result.score.passing:
            metrics.passing_count += 1
        if b.why.has_purpose_statement:
            metrics.notes_with_purpose += 1
        if b.metadata.fields_present >= 3:
            metrics.notes_with_complete_metadata += 1
        if b.taxonomy.functional_tags > 0:
            metrics.notes_with_functional_tags += 1
        if b.connectivity.meets_minimum:
            metrics.notes_with_two_links += 1
        if b.originality.has_original_insight:
            metrics.notes_that_are_synthesis += 1
        issue_counter.update(result.issues)

    metrics.total_notes_evaluated = len(results)
    metrics.mean_nvq = statistics.fmean(totals)
    metrics.median_nvq = statistics.median(totals)
    metrics.min_nvq = min(totals)
    metrics.max_nvq = max(totals)
    metrics.top_issues = issue_counter.most_common(top_n)
    return metrics


def generate_quality_recommendations(metrics: QualityMetrics) -> list[str]:
    """Suggestions for the weakest NVQ components."""
    if not metrics.total_notes_evaluated:
        return []

    recommendations = []
    if metrics.failure_rate("why") > 0.3:
        recommendations.append(
            "Prompt for a first-person purpose statement (\"I am keeping this because...\")"
        )
    if metrics.failure_rate("metadata") > 0.3:
        recommendations.append("Emit Status, Type and Stakeholder fields for every note")
    if metrics.failure_rate("taxonomy") > 0.3:
        recommendations.append("Prefer functional tags (task/, skill/, insight/) over topic tags")
    if metrics.failure_rate("connectivity") > 0.3:
        recommendations.append("Link each note upward to a project or MOC and sideways to a peer")
    if metrics.failure_rate("originality") > 0.5:
        recommendations.append("Ask for personal interpretation instead of restated facts")
    if metrics.passing_rate < 0.7:
        recommendations.append(
            f"Only {metrics.passing_rate:.0%} of notes reach NVQ 7; address the components above"
        )
    return recommendations


def get_nvq_scorer(config: Optional[dict] = None) -> NVQScorer:
    """
    Factory function to create an NVQScorer.

    Args:
        config: Full config dict or its `quality` section
    """
    quality_config = (config or {}).get("quality", config or {}) or {}
    return NVQScorer(
        passing_threshold=quality_config.get("passing_threshold", DEFAULT_PASSING_THRESHOLD),
        component_minimums=quality_config.get("component_minimums"),
        functional_prefixes=quality_config.get(
            "functional_prefixes", patterns.DEFAULT_FUNCTIONAL_PREFIXES
        ),
        mocs=quality_config.get("mocs", ()) or (),
        projects=quality_config.get("projects", ()) or (),
        max_tags=quality_config.get("max_tags", DEFAULT_MAX_TAGS),
    )
