"""Tests for matching strategies and their registry."""

import pytest

from shared.deduplication import ConsolidationChecker, ExistingNote, MatchType
from llm.src.embeddings import EmbeddingProvider

from accuracy.src.fixtures import CONTENT_BLOCKS
from accuracy.src.strategies import (
    EmbeddingStrategy,
    HybridStrategy,
    LexicalStrategy,
    StrategyKind,
    UnknownStrategyError,
    create_strategy,
    list_strategies,
)

ALL_KINDS = list(StrategyKind)


class TestRegistry:
    """Tests for strategy lookup and construction."""

    def test_list_strategies(self):
        assert list_strategies() == ["keyword-baseline", "semantic-embeddings", "hybrid"]

    @pytest.mark.parametrize("key,cls", [
        ("keyword-baseline", LexicalStrategy),
        ("semantic-embeddings", EmbeddingStrategy),
        ("hybrid", HybridStrategy),
    ])
    def test_create_by_key(self, key, cls):
        strategy = create_strategy(key)
        assert isinstance(strategy, cls)
        assert strategy.name == key

    def test_parse_is_lenient(self):
        assert StrategyKind.parse(" HYBRID ") is StrategyKind.HYBRID
        assert StrategyKind.parse(StrategyKind.LEXICAL) is StrategyKind.LEXICAL

    def test_unknown_strategy(self):
        with pytest.raises(UnknownStrategyError, match="Available"):
            create_strategy("tf-idf")

    def test_unknown_strategy_is_value_error(self):
        with pytest.raises(ValueError):
            StrategyKind.parse("nope")

    def test_fresh_instances(self):
        assert create_strategy("hybrid") is not create_strategy("hybrid")

    def test_injected_provider(self):
        provider = EmbeddingProvider(None, local_boost=0.1)
        strategy = create_strategy("semantic-embeddings", embedding_provider=provider)
        assert strategy.provider is provider

    def test_config_keyword_settings(self):
        strategy = create_strategy(
            "keyword-baseline",
            config={"deduplication": {"max_keywords": 3, "title_match_weight": 5}},
        )
        assert strategy.max_keywords == 3
        assert strategy.title_weight == 5


class TestCommonBehavior:
    """Edge cases every strategy shares."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ALL_KINDS)
    async def test_empty_pool(self, kind):
        strategy = create_strategy(kind)
        assert await strategy.find_related_notes("Habits compound over time.", []) == []
        assert await strategy.detect_duplicates("Habits compound over time.", []) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ALL_KINDS)
    async def test_single_short_word(self, kind, note_pool):
        strategy = create_strategy(kind)
        assert await strategy.find_related_notes("cat", note_pool) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ALL_KINDS)
    async def test_related_sorted_and_limited(self, kind, note_pool):
        strategy = create_strategy(kind)
        content = CONTENT_BLOCKS["compound_learning"].paraphrase + " Writing drafts in flow."

        related = await strategy.find_related_notes(content, note_pool, limit=2)

        assert len(related) <= 2
        scores = [note.score for note in related]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ALL_KINDS)
    async def test_identical_content_is_exact(self, kind, note_pool):
        strategy = create_strategy(kind)
        content = CONTENT_BLOCKS["writing_flow"].original

        matches = await strategy.detect_duplicates(content, note_pool)

        assert matches[0].note_id == "n2"
        assert matches[0].similarity_score == pytest.approx(1.0)
        assert matches[0].match_type is MatchType.EXACT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ALL_KINDS)
    async def test_exact_tag_ranks_first(self, kind):
        strategy = create_strategy(kind)
        matches = await strategy.find_similar_tags(
            "Productivity", ["productivity-tools", "productivity"]
        )
        assert matches[0].tag == "productivity"
        assert matches[0].score == 1.0


class TestLexicalStrategy:
    """Tests for keyword matching."""

    @pytest.mark.asyncio
    async def test_title_hits_rank_higher(self, note_pool):
        strategy = LexicalStrategy()
        related = await strategy.find_related_notes("refactoring keeps tests green", note_pool)

        assert related[0].id == "n3"
        assert related[0].keyword_score == related[0].score

    @pytest.mark.asyncio
    async def test_min_score_filters(self, note_pool):
        strategy = LexicalStrategy()
        related = await strategy.find_related_notes(
            "refactoring keeps tests green", note_pool, min_score=100
        )
        assert related == []

    @pytest.mark.asyncio
    async def test_normalized_tag(self):
        strategy = LexicalStrategy()
        matches = await strategy.find_similar_tags("Machine_Learning", ["machine-learning", "gardening"])

        assert [m.tag for m in matches] == ["machine-learning"]
        assert matches[0].score == LexicalStrategy.TAG_NORMALIZED_SCORE

    @pytest.mark.asyncio
    async def test_substring_tag(self):
        strategy = LexicalStrategy()
        matches = await strategy.find_similar_tags("habit", ["habits"])
        assert matches[0].score == LexicalStrategy.TAG_SUBSTRING_SCORE

    @pytest.mark.asyncio
    async def test_duplicates_respect_keyword_length(self):
        pool = [ExistingNote(id="a", title="Pets", content="fish birds dogs cats")]
        content = "cats dogs birds fish"

        default = await LexicalStrategy().detect_duplicates(content, pool, min_score=0.5)
        strict = LexicalStrategy(min_keyword_length=8)

        assert [m.note_id for m in default] == ["a"]
        assert strict.keywords(content) == []
        assert await strict.detect_duplicates(content, pool, min_score=0.5) == []


class TestEmbeddingStrategy:
    """Tests for embedding similarity."""

    @pytest.mark.asyncio
    async def test_local_synonym_tag(self):
        strategy = EmbeddingStrategy()
        matches = await strategy.find_similar_tags("wellness", ["health", "gardening"])

        assert [m.tag for m in matches] == ["health"]
        assert matches[0].score == EmbeddingStrategy.LOCAL_TAG_SYNONYM

    @pytest.mark.asyncio
    async def test_failing_service_yields_nothing(self, failing_llm_client, note_pool):
        strategy = EmbeddingStrategy(EmbeddingProvider(failing_llm_client))
        content = CONTENT_BLOCKS["compound_learning"].paraphrase

        assert strategy.is_remote
        assert await strategy.find_related_notes(content, note_pool) == []
        assert await strategy.detect_duplicates(content, note_pool) == []

    @pytest.mark.asyncio
    async def test_cleanup_clears_cache(self, mock_vectors_client):
        provider = EmbeddingProvider(mock_vectors_client)
        strategy = EmbeddingStrategy(provider)
        await strategy.find_related_notes("first text", [ExistingNote("n1", "t", "other text")])
        assert len(provider.cache) > 0

        await strategy.cleanup()

        assert len(provider.cache) == 0


class TestHybridStrategy:
    """Tests for keyword retrieval with semantic rerank."""

    @pytest.mark.asyncio
    async def test_near_verbatim_restatement_consolidates(self):
        spaced = CONTENT_BLOCKS["spaced_repetition"]
        pool = [ExistingNote(id="n1", title="Spaced repetition", content=spaced.original)]
        strategy = HybridStrategy()

        matches = await strategy.detect_duplicates(spaced.paraphrase, pool)

        assert matches
        assert matches[0].similarity_score >= 0.7
        assert matches[0].match_type in (MatchType.EXACT, MatchType.PARAPHRASE)

        decision = ConsolidationChecker(threshold=0.7).decide(spaced.paraphrase, matches, pool)
        assert decision.consolidated_with == "Spaced repetition"
        assert decision.merged_content.startswith(spaced.original)

    @pytest.mark.asyncio
    async def test_related_carries_both_scores(self, note_pool):
        strategy = HybridStrategy()
        content = CONTENT_BLOCKS["writing_flow"].paraphrase

        related = await strategy.find_related_notes(content, note_pool)

        assert related[0].id == "n2"
        assert related[0].semantic_score is not None
        assert related[0].keyword_score is not None

    def test_blend_trusts_confident_semantic(self):
        strategy = HybridStrategy()
        assert strategy.blend(0.8, 0.0) == pytest.approx(0.68)
        assert strategy.blend(0.5, 0.5) == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_synonym_tags(self):
        strategy = HybridStrategy()
        matches = await strategy.find_similar_tags("ml", ["machine-learning", "gardening"])

        assert [m.tag for m in matches] == ["machine-learning"]
        assert matches[0].score == HybridStrategy.TAG_DIRECT_SYNONYM
