"""
Text processing and similarity primitives for note matching.

Contains:
- Keyword extraction (stop-word filtering, frequency ranking)
- Set similarity (Jaccard)
- Word n-gram overlap
- Character-multiset overlap
- Cosine vector similarity
- Tag normalization and synonym lookup
- Concept-cluster approximation of semantic similarity
"""

import re
from collections import Counter
from typing import Optional, Sequence

import numpy as np


# Common stop words to ignore in keyword extraction
STOP_WORDS = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need",
    "to", "of", "in", "for", "on", "with", "at", "by", "from", "as",
    "into", "through", "during", "before", "after", "above", "below",
    "between", "under", "again", "further", "then", "once", "here",
    "there", "when", "where", "why", "how", "all", "each", "every",
    "both", "few", "more", "most", "other", "some", "such", "no", "nor",
    "not", "only", "own", "same", "so", "than", "too", "very", "just",
    "and", "but", "or", "if", "because", "until", "while", "about",
    "this", "that", "these", "those", "which", "who", "whom", "whose",
    "what", "it", "its", "itself", "they", "them", "their", "we", "us",
    "our", "you", "your", "he", "him", "his", "she", "her", "i", "me", "my",
    # Conversational filler that carries no topic
    "really", "think", "feel", "like", "want", "going", "know", "make",
    "getting", "also", "even", "much", "well", "back", "now", "way",
    "over", "take", "come", "good", "look", "give", "use", "time", "see",
    "out", "day", "get", "made", "find", "long", "thing", "things",
})

DEFAULT_KEYWORD_LIMIT = 10
MIN_KEYWORD_LENGTH = 4

# Curated clusters: two texts that both hit >= 2 terms of one cluster are
# treated as talking about the same idea even with little shared vocabulary.
CONCEPT_CLUSTERS: tuple[tuple[str, ...], ...] = (
    ("compound", "exponential", "incremental", "growth", "daily", "improvements",
     "consistent", "accumulate", "stack", "gains", "compounding", "progress", "dramatic"),
    ("exercise", "physical", "activity", "cognitive", "mental", "clarity", "stress",
     "anxiety", "walk", "movement", "bodily", "imaginative", "function", "enhances", "lowers"),
    ("sleep", "rest", "memory", "consolidation", "learn", "slumber", "knowledge", "brain",
     "processes", "integrate", "cement", "recall", "acquisition", "incorporates"),
    ("zettelkasten", "atomic", "note", "single", "idea", "granularity", "atomicity",
     "remixed", "recombination", "interconnected", "network", "evolving", "understanding"),
    ("habit", "routine", "behavior", "improvement", "change", "self-improvement",
     "adjustment", "behavioral", "practices", "sustainable", "modest", "dramatic"),
    ("writing", "flow", "creative", "draft", "editing", "revision", "distractions",
     "critic", "generative", "editor", "phase", "trusting", "eliminating", "interruptions"),
    ("refactor", "code", "structure", "tests", "incremental", "behavior", "functionality",
     "restructuring", "design", "gradual", "modifications"),
)

# canonical tag -> known variants
TAG_SYNONYMS: dict[str, tuple[str, ...]] = {
    "machine-learning": ("ml", "ai", "artificial-intelligence", "deep-learning", "neural-networks"),
    "artificial-intelligence": ("ai", "ml", "machine-learning", "deep-learning"),
    "productivity": ("efficiency", "productive", "output", "performance"),
    "note-taking": ("notes", "notetaking", "pkm", "knowledge-management", "zettelkasten"),
    "knowledge-management": ("pkm", "note-taking", "notes", "zettelkasten"),
    "health": ("wellness", "wellbeing", "healthy", "medical"),
    "fitness": ("exercise", "workout", "physical", "training"),
    "habits": ("habit", "routines", "behavior", "practices"),
    "learning": ("study", "education", "knowledge", "training"),
    "writing": ("author", "content", "creative-writing"),
    "software-development": ("programming", "coding", "development", "software"),
    "self-improvement": ("personal-development", "growth", "improvement"),
}


# =============================================================================
# Keywords
# =============================================================================

def tokenize(text: str) -> list[str]:
    """Lowercase, drop punctuation and split on whitespace."""
    return re.sub(r"[^\w\s]", "", text.lower()).split()


def extract_keywords(
    text: str,
    limit: int = DEFAULT_KEYWORD_LIMIT,
    min_length: int = MIN_KEYWORD_LENGTH,
) -> list[str]:
    """
    Extract the most frequent meaningful words from text.

    Args:
        text: Source text
        limit: Maximum number of keywords to keep
        min_length: Shortest token accepted as a keyword

    Returns:
        Keywords ordered by descending frequency (ties keep first-seen order)
    """
    words = [
        word for word in tokenize(text)
        if len(word) >= min_length and word not in STOP_WORDS
    ]
    return [word for word, _ in Counter(words).most_common(limit)]


def score_by_keywords(
    keywords: Sequence[str],
    title: str,
    content: str,
    title_weight: int = 2,
    content_weight: int = 1,
) -> int:
    """Score a note by keyword presence; title hits weigh more than content hits."""
    title_lower = title.lower()
    content_lower = content.lower()
    score = 0
    for keyword in keywords:
        if keyword in title_lower:
            score += title_weight
        if keyword in content_lower:
            score += content_weight
    return score


# =============================================================================
# Set and sequence similarity
# =============================================================================

def jaccard_similarity(set1: set, set2: set) -> float:
    """Calculate Jaccard similarity between two sets."""
    if not set1 or not set2:
        return 0.0
    intersection = len(set1 & set2)
    union = len(set1 | set2)
    return intersection / union if union > 0 else 0.0


def keyword_similarity(
    text1: str,
    text2: str,
    limit: int = 20,
    min_length: int = MIN_KEYWORD_LENGTH,
) -> float:
    """Jaccard similarity over the top keyword sets of two texts."""
    return jaccard_similarity(
        set(extract_keywords(text1, limit=limit, min_length=min_length)),
        set(extract_keywords(text2, limit=limit, min_length=min_length)),
    )


def extract_word_ngrams(text: str, n: int = 3) -> set[str]:
    """Extract whitespace-delimited word n-grams."""
    words = text.lower().split()
    return {" ".join(words[i:i + n]) for i in range(len(words) - n + 1)}


def ngram_overlap(text1: str, text2: str, n: int = 3) -> float:
    """
    Fraction of shared word n-grams relative to the smaller set.

    Catches verbatim copying that keyword scoring under-weights on long text.
    """
    ngrams1 = extract_word_ngrams(text1, n)
    ngrams2 = extract_word_ngrams(text2, n)
    if not ngrams1 or not ngrams2:
        return 0.0
    return len(ngrams1 & ngrams2) / min(len(ngrams1), len(ngrams2))


def char_overlap(text1: str, text2: str) -> float:
    """Character-multiset overlap: 2 x shared chars / combined length."""
    total = len(text1) + len(text2)
    if total == 0:
        return 0.0
    shared = sum((Counter(text1) & Counter(text2)).values())
    return 2 * shared / total


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """Cosine similarity between two vectors; 0.0 when either has no magnitude."""
    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)
    if a.shape != b.shape or a.size == 0:
        return 0.0
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


# =============================================================================
# Tags
# =============================================================================

def normalize_tag(tag: str) -> str:
    """Lowercase and strip '#', hyphens, underscores and whitespace."""
    return re.sub(r"[-_\s]", "", tag.lower().lstrip("#"))


def synonym_group(tag: str) -> Optional[str]:
    """Return the canonical tag whose group contains `tag`, if any."""
    tag_lower = tag.lower()
    if tag_lower in TAG_SYNONYMS:
        return tag_lower
    for canonical, variants in TAG_SYNONYMS.items():
        if tag_lower in variants:
            return canonical
    return None


# =============================================================================
# Local semantic approximation
# =============================================================================

def _content_words(text: str) -> set[str]:
    return {word for word in re.split(r"\W+", text.lower()) if len(word) > 3}


def concept_boost(text1: str, text2: str, boost: float) -> float:
    """
    Boost for two texts that both hit the same concept cluster.

    The multiplier is tiered on the weaker side's hit count
    (>= 4 hits: 2x, >= 3: 1.5x, >= 2: 1x) and the strongest cluster wins.
    """
    lower1 = text1.lower()
    lower2 = text2.lower()
    best = 0.0
    for cluster in CONCEPT_CLUSTERS:
        hits = min(
            sum(1 for term in cluster if term in lower1),
            sum(1 for term in cluster if term in lower2),
        )
        if hits >= 4:
            best = max(best, boost * 2)
        elif hits >= 3:
            best = max(best, boost * 1.5)
        elif hits >= 2:
            best = max(best, boost)
    return best


def approximate_similarity(text1: str, text2: str, boost: float = 0.35) -> float:
    """
    Deterministic stand-in for embedding similarity.

    Word-level Jaccard plus a concept-cluster boost, capped at 1.0.
    """
    if text1.lower() == text2.lower():
        return 1.0
    similarity = jaccard_similarity(_content_words(text1), _content_words(text2))
    return min(similarity + concept_boost(text1, text2, boost), 1.0)
