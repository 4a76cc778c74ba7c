"""
Built-in evaluation scenarios.
"""

from .content import CONTENT_BLOCKS, ContentBlock
from .scenarios import (
    exact_duplicate_scenario,
    paraphrase_scenario,
    tag_synonym_scenario,
    cross_document_scenario,
    quality_samples_scenario,
    get_all_scenarios,
    get_scenario,
    list_scenarios,
)

__all__ = [
    "CONTENT_BLOCKS",
    "ContentBlock",
    "exact_duplicate_scenario",
    "paraphrase_scenario",
    "tag_synonym_scenario",
    "cross_document_scenario",
    "quality_samples_scenario",
    "get_all_scenarios",
    "get_scenario",
    "list_scenarios",
]
