"""
Extraction Accuracy Harness

Evaluates note-extraction matching strategies against hand-authored ground truth.
"""

from .src import ExtractionHarness, run_comparison, run_scenario

__all__ = ["ExtractionHarness", "run_comparison", "run_scenario"]
