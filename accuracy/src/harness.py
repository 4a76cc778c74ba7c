"""
Extraction harness.

Runs one scenario through one strategy and scores the result. Each
(scenario, strategy) pair gets its own harness, strategy, embedding provider
and note pool; a failure inside a pair is turned into a flagged result
instead of aborting the batch.

Contains:
- HarnessStateError
- ExtractionHarness: setup -> run_extraction -> evaluate -> teardown
- ScenarioResult dataclass
- run_scenario(): the per-pair failure boundary
- run_comparison(): bounded-concurrency fan-out over pairs
"""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

from shared.deduplication import ExistingNote, get_consolidation_checker
from shared.logging import get_logger
from llm.src.embeddings import DEFAULT_LOCAL_BOOST, EmbeddingProvider, build_embedding_provider

from .extraction import DEFAULT_TAG_CANDIDATES, ExtractionProvider, MockExtractionProvider
from .metrics import ExtractionMetrics, calculate_metrics
from .models import DocumentExtractionResult, ExtractedNoteResult, TestScenario
from .quality import NVQEvaluationResult, NVQScorer, QualityMetrics, aggregate_quality, to_quality_note
from .strategies import (
    HYBRID_LOCAL_BOOST,
    MatchingStrategy,
    StrategyKind,
    create_strategy,
)

log = get_logger("accuracy", "harness")

CONTEXT_LIMIT = 15
DEFAULT_CONCURRENCY = 4

EmbeddingProviderFactory = Callable[[StrategyKind], Optional[EmbeddingProvider]]
ExtractionProviderFactory = Callable[[], ExtractionProvider]


class HarnessStateError(RuntimeError):
    """Raised when harness steps are called out of order."""
    pass


class ExtractionHarness:
    """
    Drives one scenario through a strategy and an extraction provider.

    Documents are processed strictly in order. Notes extracted from a
    document (unless consolidated) join the pool before the next document,
    so later documents can match earlier ones but never the reverse.

    Usage:
        harness = ExtractionHarness(strategy, MockExtractionProvider())
        await harness.setup(scenario)
        results = await harness.run_extraction()
        metrics = harness.evaluate(results)
        await harness.teardown()
    """

    def __init__(
        self,
        strategy: MatchingStrategy,
        provider: ExtractionProvider,
        *,
        scorer: Optional[NVQScorer] = None,
    ):
        self.strategy = strategy
        self.provider = provider
        self.scorer = scorer

        self._scenario: Optional[TestScenario] = None
        self.existing_notes: list[ExistingNote] = []
        self.existing_tags: list[str] = []

    @property
    def is_ready(self) -> bool:
        return self._scenario is not None

    def _require_setup(self, step: str) -> TestScenario:
        if self._scenario is None:
            raise HarnessStateError(f"{step}() called before setup()")
        return self._scenario

    async def setup(self, scenario: TestScenario) -> None:
        """Seed the pool from the scenario and initialize the strategy."""
        self._scenario = scenario
        self.existing_notes = [
            ExistingNote(id=n.id, title=n.title, content=n.content, tags=list(n.tags))
            for n in scenario.existing_notes
        ]
        self.existing_tags = list(scenario.existing_tags)
        await self.strategy.initialize()

    async def run_extraction(self) -> list[DocumentExtractionResult]:
        """Process every document in order, growing the pool as it goes."""
        scenario = self._require_setup("run_extraction")
        results = []

        for document in scenario.documents:
            start = time.perf_counter()
            await self.strategy.find_related_notes(
                document.content, self.existing_notes, limit=CONTEXT_LIMIT
            )
            matching_ms = (time.perf_counter() - start) * 1000

            start = time.perf_counter()
            notes = await self.provider.extract(
                document, self.existing_notes, self.existing_tags, self.strategy
            )
            extraction_ms = (time.perf_counter() - start) * 1000

            self._fold_into_pool(notes)

            results.append(DocumentExtractionResult(
                document_id=document.id,
                notes=notes,
                matching_time_ms=matching_ms,
                extraction_time_ms=extraction_ms,
            ))
            log.debug(
                "accuracy.harness.document_processed",
                scenario=scenario.name,
                strategy=self.strategy.name,
                document_id=document.id,
                notes=len(notes),
                pool_size=len(self.existing_notes),
            )

        return results

    def _fold_into_pool(self, notes: Sequence[ExtractedNoteResult]) -> None:
        for note in notes:
            if note.is_consolidated:
                continue
            self.existing_notes.append(ExistingNote(
                id=f"new-{uuid.uuid4().hex[:12]}",
                title=note.title,
                content=note.content,
                tags=list(note.tags),
            ))
            for tag in note.tags:
                if tag not in self.existing_tags:
                    self.existing_tags.append(tag)

    def evaluate(self, results: Sequence[DocumentExtractionResult]) -> ExtractionMetrics:
        """Compare extracted notes against the scenario's ground truth."""
        scenario = self._require_setup("evaluate")
        return calculate_metrics(results, scenario)

    def evaluate_quality(
        self,
        results: Sequence[DocumentExtractionResult],
    ) -> list[NVQEvaluationResult]:
        """NVQ results for every extracted note; empty without a scorer."""
        self._require_setup("evaluate_quality")
        if self.scorer is None:
            return []
        return [
            self.scorer.evaluate(to_quality_note(note))
            for result in results
            for note in result.notes
        ]

    async def teardown(self) -> None:
        """Release strategy caches and reset in-memory state."""
        try:
            await self.strategy.cleanup()
        finally:
            self._scenario = None
            self.existing_notes = []
            self.existing_tags = []


# =============================================================================
# Pair runner
# =============================================================================

@dataclass
class ScenarioResult:
    """Outcome of one (scenario, strategy) pair."""
    scenario_name: str
    strategy_name: str
    metrics: ExtractionMetrics
    extracted_notes: list[ExtractedNoteResult] = field(default_factory=list)
    nvq_results: list[NVQEvaluationResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def quality(self) -> Optional[QualityMetrics]:
        if not self.nvq_results:
            return None
        return aggregate_quality(self.nvq_results)

    def to_dict(self) -> dict:
        quality = self.quality
        return {
            "scenario_name": self.scenario_name,
            "strategy_name": self.strategy_name,
            "metrics": self.metrics.to_dict(),
            "extracted_notes": [n.to_dict() for n in self.extracted_notes],
            "quality": quality.to_dict() if quality else None,
            "nvq_results": [r.to_dict() for r in self.nvq_results],
            "error": self.error,
        }


def default_embedding_provider_factory(config: Optional[dict] = None) -> EmbeddingProviderFactory:
    """One fresh provider per pair; the lexical strategy needs none."""

    def factory(kind: StrategyKind) -> Optional[EmbeddingProvider]:
        if kind is StrategyKind.LEXICAL:
            return None
        boost = HYBRID_LOCAL_BOOST if kind is StrategyKind.HYBRID else DEFAULT_LOCAL_BOOST
        return build_embedding_provider(config, local_boost=boost)

    return factory


def default_extraction_provider_factory(config: Optional[dict] = None) -> ExtractionProviderFactory:
    dedup_config = (config or {}).get("deduplication", {}) or {}

    def factory() -> ExtractionProvider:
        return MockExtractionProvider(
            get_consolidation_checker(config),
            tag_candidates=dedup_config.get("tag_candidates", DEFAULT_TAG_CANDIDATES),
        )

    return factory


async def run_scenario(
    scenario: TestScenario,
    kind: Union[str, StrategyKind],
    *,
    config: Optional[dict] = None,
    scorer: Optional[NVQScorer] = None,
    embedding_provider_factory: Optional[EmbeddingProviderFactory] = None,
    extraction_provider_factory: Optional[ExtractionProviderFactory] = None,
) -> ScenarioResult:
    """
    Run one (scenario, strategy) pair.

    Never raises for failures inside the pair: the error is logged and
    returned as a ScenarioResult with zero metrics and the error text.

    Args:
        scenario: Scenario to run
        kind: Strategy kind or key
        config: Full config dict
        scorer: NVQ scorer; quality is skipped when None
        embedding_provider_factory: Builds the pair's embedding provider
        extraction_provider_factory: Builds the pair's extraction provider
    """
    kind = StrategyKind.parse(kind)
    embedding_factory = embedding_provider_factory or default_embedding_provider_factory(config)
    extraction_factory = extraction_provider_factory or default_extraction_provider_factory(config)

    embedding_provider: Optional[EmbeddingProvider] = None
    harness: Optional[ExtractionHarness] = None
    start = time.perf_counter()

    try:
        embedding_provider = embedding_factory(kind)
        strategy = create_strategy(kind, embedding_provider=embedding_provider, config=config)
        harness = ExtractionHarness(strategy, extraction_factory(), scorer=scorer)

        await harness.setup(scenario)
        results = await harness.run_extraction()
        metrics = harness.evaluate(results)
        nvq_results = harness.evaluate_quality(results)

        log.info(
            "accuracy.harness.pair_complete",
            scenario=scenario.name,
            strategy=kind.value,
            documents=len(results),
            f1=round(metrics.duplicates.f1_score, 3),
            consolidation_accuracy=round(metrics.consolidation.accuracy, 3),
            tag_reuse_rate=round(metrics.tags.reuse_rate, 3),
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return ScenarioResult(
            scenario_name=scenario.name,
            strategy_name=kind.value,
            metrics=metrics,
            extracted_notes=[note for r in results for note in r.notes],
            nvq_results=nvq_results,
        )

    except Exception as e:
        log.error(
            "accuracy.harness.pair_failed",
            scenario=scenario.name,
            strategy=kind.value,
            error=str(e),
            error_type=type(e).__name__,
        )
        return ScenarioResult(
            scenario_name=scenario.name,
            strategy_name=kind.value,
            metrics=ExtractionMetrics.zero(),
            error=str(e) or type(e).__name__,
        )

    finally:
        if harness is not None:
            try:
                await harness.teardown()
            except Exception as e:
                log.warning("accuracy.harness.teardown_failed", error=str(e))
        if embedding_provider is not None:
            await embedding_provider.close()


async def run_comparison(
    scenarios: Sequence[TestScenario],
    kinds: Sequence[Union[str, StrategyKind]],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    **kwargs,
) -> list[ScenarioResult]:
    """
    Run every (scenario, strategy) pair with bounded concurrency.

    Results come back in scenario-major order regardless of completion order.
    Extra keyword arguments are passed to run_scenario().
    """
    parsed = [StrategyKind.parse(k) for k in kinds]
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run_pair(scenario: TestScenario, kind: StrategyKind) -> ScenarioResult:
        async with semaphore:
            return await run_scenario(scenario, kind, **kwargs)

    log.info(
        "accuracy.harness.comparison_start",
        scenarios=len(scenarios),
        strategies=[k.value for k in parsed],
        concurrency=concurrency,
    )
    return list(await asyncio.gather(*(
        run_pair(scenario, kind) for scenario in scenarios for kind in parsed
    )))
