"""
Note matching and consolidation primitives.

Provides the building blocks shared by every matching strategy:
- Keyword extraction and keyword scoring
- Set, n-gram, character and vector similarity
- Tag normalization and synonym lookup
- The consolidate-or-create decision engine

Usage:
    from shared.deduplication import ConsolidationChecker, DuplicateMatch

    checker = ConsolidationChecker(threshold=0.7)
    decision = checker.decide(new_content, matches, existing_notes)
    if decision.should_consolidate:
        print(f"Merge into: {decision.consolidated_with}")
"""

# Models
from .models import (
    MatchType,
    ExistingNote,
    Document,
    RankedNote,
    DuplicateMatch,
    TagMatch,
    ConsolidationDecision,
)

# Decision engine
from .consolidation import (
    ConsolidationChecker,
    DEFAULT_CONSOLIDATION_THRESHOLD,
    merge_content,
)

# Text processing functions
from .text_processing import (
    STOP_WORDS,
    TAG_SYNONYMS,
    tokenize,
    extract_keywords,
    score_by_keywords,
    jaccard_similarity,
    keyword_similarity,
    extract_word_ngrams,
    ngram_overlap,
    char_overlap,
    cosine_similarity,
    normalize_tag,
    synonym_group,
    concept_boost,
    approximate_similarity,
)

# Utility functions
from .utils import (
    load_config,
    load_dedup_config,
    get_consolidation_checker,
)

__all__ = [
    # Models
    "MatchType",
    "ExistingNote",
    "Document",
    "RankedNote",
    "DuplicateMatch",
    "TagMatch",
    "ConsolidationDecision",
    # Decision engine
    "ConsolidationChecker",
    "DEFAULT_CONSOLIDATION_THRESHOLD",
    "merge_content",
    # Text processing
    "STOP_WORDS",
    "TAG_SYNONYMS",
    "tokenize",
    "extract_keywords",
    "score_by_keywords",
    "jaccard_similarity",
    "keyword_similarity",
    "extract_word_ngrams",
    "ngram_overlap",
    "char_overlap",
    "cosine_similarity",
    "normalize_tag",
    "synonym_group",
    "concept_boost",
    "approximate_similarity",
    # Utils
    "load_config",
    "load_dedup_config",
    "get_consolidation_checker",
]
