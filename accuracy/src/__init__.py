"""
Accuracy module - runs extraction scenarios through matching strategies and
scores the results.

Strategies rank related notes, detect duplicates and match tags; the harness
feeds scenarios through them one document at a time; metrics and NVQ scoring
turn the extracted notes into comparable numbers.
"""

from .harness import (
    ExtractionHarness,
    HarnessStateError,
    ScenarioResult,
    run_comparison,
    run_scenario,
)
from .reporter import ExtractionReport, build_report

__all__ = [
    "ExtractionHarness",
    "HarnessStateError",
    "ScenarioResult",
    "run_comparison",
    "run_scenario",
    "ExtractionReport",
    "build_report",
]
