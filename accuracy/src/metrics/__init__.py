"""
Extraction metrics: ground-truth comparison and counter-sum aggregation.
"""

from .models import (
    safe_ratio,
    DuplicateDetectionMetrics,
    ConsolidationMetrics,
    TagReuseMetrics,
    ConnectionMetrics,
    TimingMetrics,
    ExtractionMetrics,
    aggregate_metrics,
)
from .calculator import (
    calculate_duplicate_metrics,
    calculate_consolidation_metrics,
    calculate_tag_reuse_metrics,
    calculate_connection_metrics,
    calculate_metrics,
)
from .ground_truth import (
    matches_pattern,
    title_matches_patterns,
    find_matching_expected_note,
    check_consolidation,
    evaluate_connections,
    should_reuse_tag,
)

__all__ = [
    # Models
    "safe_ratio",
    "DuplicateDetectionMetrics",
    "ConsolidationMetrics",
    "TagReuseMetrics",
    "ConnectionMetrics",
    "TimingMetrics",
    "ExtractionMetrics",
    "aggregate_metrics",
    # Calculator
    "calculate_duplicate_metrics",
    "calculate_consolidation_metrics",
    "calculate_tag_reuse_metrics",
    "calculate_connection_metrics",
    "calculate_metrics",
    # Ground truth
    "matches_pattern",
    "title_matches_patterns",
    "find_matching_expected_note",
    "check_consolidation",
    "evaluate_connections",
    "should_reuse_tag",
]
