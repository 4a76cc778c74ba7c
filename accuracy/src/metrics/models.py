"""
Metrics data models.

All metrics are immutable counter bundles. Ratios are properties recomputed
from the counters, so adding two bundles and reading a ratio always gives
the counter-sum answer, never an average of ratios.
"""

from dataclasses import dataclass, field, fields
from typing import Optional


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero."""
    return numerator / denominator if denominator else 0.0


class _CounterSum:
    """Field-wise addition for counter dataclasses."""

    def __add__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return type(self)(**{
            f.name: getattr(self, f.name) + getattr(other, f.name)
            for f in fields(self)
        })


@dataclass(frozen=True)
class DuplicateDetectionMetrics(_CounterSum):
    """Confusion counts for consolidate-vs-create decisions."""
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    true_negatives: int = 0

    @property
    def precision(self) -> float:
        return safe_ratio(self.true_positives, self.true_positives + self.false_positives)

    @property
    def recall(self) -> float:
        return safe_ratio(self.true_positives, self.true_positives + self.false_negatives)

    @property
    def f1_score(self) -> float:
        p, r = self.precision, self.recall
        return safe_ratio(2 * p * r, p + r)

    def to_dict(self) -> dict:
        return {
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "false_negatives": self.false_negatives,
            "true_negatives": self.true_negatives,
            "precision": self.precision,
            "recall": self.recall,
            "f1_score": self.f1_score,
        }


@dataclass(frozen=True)
class ConsolidationMetrics(_CounterSum):
    """Outcome counts for expected and unexpected consolidations."""
    total_expected: int = 0
    correct: int = 0
    missed: int = 0
    wrong_target: int = 0
    correct_new: int = 0
    incorrect: int = 0  # Consolidated when a new note was expected

    @property
    def decisions(self) -> int:
        return self.correct + self.missed + self.wrong_target + self.correct_new + self.incorrect

    @property
    def accuracy(self) -> float:
        return safe_ratio(self.correct + self.correct_new, self.decisions)

    def to_dict(self) -> dict:
        return {
            "total_expected": self.total_expected,
            "correct": self.correct,
            "missed": self.missed,
            "wrong_target": self.wrong_target,
            "correct_new": self.correct_new,
            "incorrect": self.incorrect,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class TagReuseMetrics(_CounterSum):
    """How assigned tags relate to the existing tag vocabulary."""
    total_tags_assigned: int = 0
    reused_existing: int = 0
    correctly_created_new: int = 0
    should_have_reused: int = 0

    @property
    def reuse_rate(self) -> float:
        return safe_ratio(self.reused_existing, self.reused_existing + self.should_have_reused)

    def to_dict(self) -> dict:
        return {
            "total_tags_assigned": self.total_tags_assigned,
            "reused_existing": self.reused_existing,
            "correctly_created_new": self.correctly_created_new,
            "should_have_reused": self.should_have_reused,
            "reuse_rate": self.reuse_rate,
        }


@dataclass(frozen=True)
class ConnectionMetrics(_CounterSum):
    """Expected vs actual connections."""
    expected: int = 0
    actual: int = 0
    correct: int = 0

    @property
    def missed(self) -> int:
        return self.expected - self.correct

    @property
    def spurious(self) -> int:
        return self.actual - self.correct

    @property
    def precision(self) -> float:
        return safe_ratio(self.correct, self.actual)

    @property
    def recall(self) -> float:
        return safe_ratio(self.correct, self.expected)

    def to_dict(self) -> dict:
        return {
            "expected": self.expected,
            "actual": self.actual,
            "correct": self.correct,
            "missed": self.missed,
            "spurious": self.spurious,
            "precision": self.precision,
            "recall": self.recall,
        }


@dataclass(frozen=True)
class TimingMetrics(_CounterSum):
    """Summed wall-clock time in milliseconds."""
    total_ms: float = 0.0
    extraction_ms: float = 0.0
    matching_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_ms": self.total_ms,
            "extraction_ms": self.extraction_ms,
            "matching_ms": self.matching_ms,
        }


@dataclass(frozen=True)
class ExtractionMetrics(_CounterSum):
    """
    All counters for one or more (scenario, strategy) runs.

    `runs` counts how many run results were summed in, for averaging timing.
    """
    duplicates: DuplicateDetectionMetrics = field(default_factory=DuplicateDetectionMetrics)
    consolidation: ConsolidationMetrics = field(default_factory=ConsolidationMetrics)
    tags: TagReuseMetrics = field(default_factory=TagReuseMetrics)
    connections: ConnectionMetrics = field(default_factory=ConnectionMetrics)
    timing: TimingMetrics = field(default_factory=TimingMetrics)
    runs: int = 1

    @classmethod
    def zero(cls, runs: int = 1) -> "ExtractionMetrics":
        """All-zero metrics, used for failed runs."""
        return cls(runs=runs)

    @property
    def average_time_ms(self) -> float:
        return safe_ratio(self.timing.total_ms, self.runs)

    def to_dict(self) -> dict:
        return {
            "duplicate_detection": self.duplicates.to_dict(),
            "consolidation": self.consolidation.to_dict(),
            "tag_reuse": self.tags.to_dict(),
            "connections": self.connections.to_dict(),
            "timing": {**self.timing.to_dict(), "average_ms": self.average_time_ms},
            "runs": self.runs,
        }


def aggregate_metrics(results: list[ExtractionMetrics]) -> ExtractionMetrics:
    """
    Sum counters across runs.

    An empty list gives zero metrics with runs=0.
    """
    total: Optional[ExtractionMetrics] = None
    for metrics in results:
        total = metrics if total is None else total + metrics
    return total if total is not None else ExtractionMetrics.zero(runs=0)
