"""
Note quality (NVQ) scoring.
"""

from .models import (
    QualityNote,
    NVQScore,
    NVQBreakdown,
    NVQEvaluationResult,
    QualityMetrics,
)
from .scorer import (
    NVQScorer,
    to_quality_note,
    aggregate_quality,
    generate_quality_recommendations,
    get_nvq_scorer,
)

__all__ = [
    "QualityNote",
    "NVQScore",
    "NVQBreakdown",
    "NVQEvaluationResult",
    "QualityMetrics",
    "NVQScorer",
    "to_quality_note",
    "aggregate_quality",
    "generate_quality_recommendations",
    "get_nvq_scorer",
]
