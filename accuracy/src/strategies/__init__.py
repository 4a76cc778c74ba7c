"""
Matching strategies and their registry.

Each strategy is one StrategyKind member; create_strategy() builds a fresh
instance for a kind, so runs never share strategy state.

Usage:
    from accuracy.src.strategies import StrategyKind, create_strategy

    strategy = create_strategy("hybrid")
    related = await strategy.find_related_notes(text, notes, limit=5)
"""

from enum import Enum
from typing import Optional, Union

from llm.src.embeddings import EmbeddingProvider

from .base import MatchingStrategy, classify_match, rank_tag_matches
from .embedding import EmbeddingStrategy
from .hybrid import HYBRID_LOCAL_BOOST, HybridStrategy
from .lexical import LexicalStrategy


class UnknownStrategyError(ValueError):
    """Raised when a strategy key does not name a StrategyKind."""
    pass


class StrategyKind(str, Enum):
    """Available matching strategies."""
    LEXICAL = "keyword-baseline"
    EMBEDDING = "semantic-embeddings"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value: Union[str, "StrategyKind"]) -> "StrategyKind":
        """Resolve a key (or a member) to a StrategyKind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownStrategyError(
                f"Unknown strategy '{value}'. Available: {', '.join(list_strategies())}"
            ) from None


def list_strategies() -> list[str]:
    """Registry keys, in declaration order."""
    return [kind.value for kind in StrategyKind]


def create_strategy(
    kind: Union[str, StrategyKind],
    *,
    embedding_provider: Optional[EmbeddingProvider] = None,
    config: Optional[dict] = None,
) -> MatchingStrategy:
    """
    Build a new strategy instance.

    Args:
        kind: StrategyKind or its key
        embedding_provider: Similarity source for the embedding and hybrid
                            strategies. None selects the local approximation.
        config: Full config dict (reads `deduplication` keyword settings)
    """
    kind = StrategyKind.parse(kind)
    dedup_config = (config or {}).get("deduplication", {}) or {}

    lexical = LexicalStrategy(
        max_keywords=dedup_config.get("max_keywords", 10),
        min_keyword_length=dedup_config.get("min_keyword_length", 4),
        title_weight=dedup_config.get("title_match_weight", 2),
        content_weight=dedup_config.get("content_match_weight", 1),
    )

    if kind is StrategyKind.LEXICAL:
        return lexical
    if kind is StrategyKind.EMBEDDING:
        return EmbeddingStrategy(embedding_provider)
    return HybridStrategy(
        embedding_provider or EmbeddingProvider(None, local_boost=HYBRID_LOCAL_BOOST),
        keyword_candidate_limit=dedup_config.get(
            "keyword_candidate_limit", HybridStrategy.KEYWORD_CANDIDATE_LIMIT
        ),
        lexical=lexical,
    )


__all__ = [
    "MatchingStrategy",
    "LexicalStrategy",
    "EmbeddingStrategy",
    "HybridStrategy",
    "HYBRID_LOCAL_BOOST",
    "StrategyKind",
    "UnknownStrategyError",
    "create_strategy",
    "list_strategies",
    "classify_match",
    "rank_tag_matches",
]
