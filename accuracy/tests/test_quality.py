"""Tests for NVQ note quality scoring."""

import pytest

from accuracy.src.fixtures.scenarios import (
    QUALITY_PURPOSE_NOTE,
    QUALITY_RAW_NOTE,
    QUALITY_STRONG_NOTE,
)
from accuracy.src.models import Connection, ExtractedNoteResult
from accuracy.src.quality import (
    NVQScorer,
    QualityNote,
    aggregate_quality,
    generate_quality_recommendations,
    get_nvq_scorer,
    to_quality_note,
)


@pytest.fixture
def scorer():
    return NVQScorer()


@pytest.fixture
def maximal_note():
    return QualityNote(
        title="Batching email",
        content=(
            "I am keeping this because batching email will help me protect mornings.\n"
            "I realized that checking mail hourly cost me my best focus."
        ),
        tags=["project/thesis", "insight/focus"],
        connections=[
            Connection("Deep Work MOC", "parent"),
            Connection("Attention Residue", "related"),
        ],
        purpose_statement="I am keeping this because batching email will help me protect mornings.",
        status="Sapling",
        note_type="Reflection",
        stakeholder="Self",
        project="Thesis",
    )


def extracted(content, **kwargs):
    return ExtractedNoteResult(title=kwargs.pop("title", "Sample"), content=content, **kwargs)


class TestScore:
    """Tests for the total score."""

    def test_maximal_note_scores_ten(self, scorer, maximal_note):
        score = scorer.score(maximal_note)

        assert score.total == 10
        assert score.passing
        assert score.failing_components == []

    def test_empty_note_fails(self, scorer):
        score = scorer.score(QualityNote(title="", content=""))

        assert score.total <= 3
        assert not score.passing
        assert set(score.failing_components) == {
            "why", "metadata", "taxonomy", "connectivity", "originality"
        }

    def test_bare_note_with_synthesis_still_fails(self, scorer):
        content = (
            "I am keeping this because it will help me plan reviews. "
            "I realized this suggests a pattern."
        )
        score = scorer.score(QualityNote(title="", content=content))
        components = score.breakdown.component_scores()

        assert components["originality"] == 1
        assert components["metadata"] == components["taxonomy"] == components["connectivity"] == 0
        assert score.total == components["why"] + 1
        assert score.total <= 4
        assert not score.passing

    def test_total_is_sum_of_components(self, scorer, maximal_note):
        for note in (maximal_note, QualityNote(title="t", content=QUALITY_PURPOSE_NOTE)):
            score = scorer.score(note)
            assert score.total == sum(score.breakdown.component_scores().values())
            assert 0 <= score.total <= 10

    def test_passing_depends_only_on_total(self, scorer):
        note = to_quality_note(extracted(QUALITY_STRONG_NOTE))
        score = scorer.score(note)

        assert score.total == 8
        assert score.passing
        assert score.failing_components == ["taxonomy"]

    def test_custom_passing_threshold(self, maximal_note):
        assert not NVQScorer(passing_threshold=11).score(maximal_note).passing


class TestComponents:
    """Tests for individual NVQ components."""

    def test_why(self, scorer):
        why = scorer.score_why(QualityNote(
            title="t",
            content="This helps me decide, in order to ship faster.",
        ))
        assert why.has_first_person
        assert why.is_actionable
        assert not why.has_purpose_statement
        assert why.score == 2

    def test_metadata_tiers(self, scorer):
        two = QualityNote(title="t", content="", status="Seed", note_type="Logic")
        three = QualityNote(title="t", content="", status="Seed", note_type="Logic", stakeholder="Self")
        bogus = QualityNote(title="t", content="", status="Ripe", note_type="Poem")

        assert scorer.score_metadata(two).score == 1
        assert scorer.score_metadata(three).score == 2
        assert scorer.score_metadata(bogus).score == 0

    def test_project_from_content(self, scorer):
        note = QualityNote(title="t", content="Notes for the Garden Planner project.")
        metadata = scorer.score_metadata(note)
        assert metadata.has_project
        assert metadata.project == "Garden Planner"

    def test_taxonomy(self, scorer):
        functional = QualityNote(title="t", content="", tags=["task/review", "#skill/writing"])
        mixed = QualityNote(title="t", content="", tags=["task/review", "writing"])
        topics = QualityNote(title="t", content="", tags=["writing", "habits"])
        too_many = QualityNote(title="t", content="", tags=[f"task/{i}" for i in range(6)])

        assert scorer.score_taxonomy(functional).score == 2
        assert scorer.score_taxonomy(mixed).score == 1
        assert scorer.score_taxonomy(topics).score == 0
        assert scorer.score_taxonomy(too_many).score == 1
        assert scorer.score_taxonomy(too_many).exceeds_limit

    def test_connectivity_from_wikilinks(self, scorer):
        note = QualityNote(title="t", content="See [[Writing MOC]] and [[Flow State]].")
        connectivity = scorer.score_connectivity(note)

        assert connectivity.upward_links == ["Writing MOC"]
        assert connectivity.sideways_links == ["Flow State"]
        assert connectivity.score == 2

    def test_configured_upward_targets(self):
        scorer = NVQScorer(projects=["Thesis"])
        note = QualityNote(title="t", content="", connections=[Connection("Thesis outline", "related")])
        assert scorer.score_connectivity(note).upward_links == ["Thesis outline"]

    def test_originality(self, scorer):
        assert scorer.score_originality(QualityNote(title="t", content="This suggests a pattern.")).score == 1
        assert scorer.score_originality(QualityNote(title="t", content=QUALITY_RAW_NOTE)).score == 0


class TestToQualityNote:
    """Tests for deriving NVQ fields from extracted content."""

    def test_reads_fields(self):
        note = to_quality_note(extracted(QUALITY_STRONG_NOTE, tags=["project/focus"]))

        assert note.status == "Sapling"
        assert note.note_type == "Reflection"
        assert note.stakeholder == "Self"
        assert note.project == "Thesis"
        assert note.purpose_statement.startswith("I am keeping this because")
        assert note.tags == ["project/focus"]

    def test_purpose_field(self):
        note = to_quality_note(extracted(QUALITY_PURPOSE_NOTE))

        assert note.purpose_statement.startswith("This helps me remember")
        assert note.status == "Seed"
        assert note.note_type == "Technical"
        assert note.stakeholder is None

    def test_prefers_merged_content(self):
        note = to_quality_note(extracted("short", merged_content="Old.\n\nAdditional insight: short"))
        assert note.content.startswith("Old.")

    def test_raw_note_scores_low(self, scorer):
        score = scorer.score(to_quality_note(extracted(QUALITY_RAW_NOTE)))
        assert score.total <= 1
        assert not score.passing


class TestAggregation:
    """Tests for batch aggregation and recommendations."""

    def test_aggregate(self, scorer, maximal_note):
        results, metrics = scorer.evaluate_notes([maximal_note, QualityNote(title="", content="")])

        assert len(results) == 2
        assert metrics.total_notes_evaluated == 2
        assert metrics.mean_nvq == pytest.approx(5.0)
        assert metrics.median_nvq == pytest.approx(5.0)
        assert metrics.min_nvq == 0
        assert metrics.max_nvq == 10
        assert metrics.passing_rate == pytest.approx(0.5)
        assert metrics.failure_rate("why") == pytest.approx(0.5)
        assert metrics.distributions["why"] == {0: 1, 1: 0, 2: 0, 3: 1}
        assert metrics.notes_with_two_links == 1

    def test_empty_aggregate(self):
        metrics = aggregate_quality([])
        assert metrics.total_notes_evaluated == 0
        assert metrics.passing_rate == 0.0
        assert generate_quality_recommendations(metrics) == []

    def test_issues_reported(self, scorer):
        result = scorer.evaluate(QualityNote(title="", content=""))
        assert "Missing upward link to MOC or Project" in result.issues
        assert result.to_dict()["score"]["passing"] is False

    def test_recommendations(self, scorer, maximal_note):
        _, metrics = scorer.evaluate_notes([maximal_note, QualityNote(title="", content="")])

        recommendations = generate_quality_recommendations(metrics)

        assert len(recommendations) == 5
        assert recommendations[-1].startswith("Only 50%")

    def test_factory_reads_quality_section(self):
        scorer = get_nvq_scorer({"quality": {"passing_threshold": 5, "projects": ["Thesis"]}})
        assert scorer.passing_threshold == 5
        assert scorer.upward_targets == ("thesis",)
