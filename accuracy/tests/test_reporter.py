"""Tests for report building, thresholds and the CLI."""

import io
import json
import os
import re
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

from shared.deduplication.utils import PROJECT_ROOT

from accuracy.main import EXIT_OK, EXIT_THRESHOLD, EXIT_USAGE, main, resolve_output_dir
from accuracy.src.harness import ScenarioResult
from accuracy.src.metrics import (
    ConsolidationMetrics,
    DuplicateDetectionMetrics,
    ExtractionMetrics,
    TagReuseMetrics,
)
from accuracy.src.quality import NVQScorer, QualityNote
from accuracy.src.reporter import (
    build_report,
    check_thresholds,
    format_ci_lines,
    overall_score,
    print_report,
    save_report,
    select_best_strategy,
)


def perfect_metrics():
    return ExtractionMetrics(
        duplicates=DuplicateDetectionMetrics(true_positives=2),
        consolidation=ConsolidationMetrics(total_expected=2, correct=2),
        tags=TagReuseMetrics(total_tags_assigned=4, reused_existing=4),
    )


def result(scenario, strategy, metrics=None, **kwargs):
    return ScenarioResult(
        scenario_name=scenario,
        strategy_name=strategy,
        metrics=metrics or ExtractionMetrics.zero(),
        **kwargs,
    )


@pytest.fixture
def results():
    return [
        result("Exact", "keyword-baseline"),
        result("Exact", "hybrid", perfect_metrics()),
        result("Paraphrase", "keyword-baseline", error="boom"),
        result("Paraphrase", "hybrid", perfect_metrics()),
    ]


class TestBestStrategy:
    """Tests for strategy ranking."""

    def test_overall_score(self):
        assert overall_score(perfect_metrics()) == pytest.approx(1.0)
        assert overall_score(ExtractionMetrics.zero()) == 0.0

    def test_tie_goes_to_earlier(self):
        metrics = {"a": ExtractionMetrics.zero(), "b": ExtractionMetrics.zero()}
        assert select_best_strategy(metrics) == "a"

    def test_empty(self):
        assert select_best_strategy({}) is None


class TestBuildReport:
    """Tests for report aggregation."""

    def test_aggregates_per_strategy(self, results):
        report = build_report(results)

        assert report.best_strategy == "hybrid"
        assert report.strategy_metrics["hybrid"].runs == 2
        assert report.strategy_metrics["hybrid"].duplicates.true_positives == 4
        assert set(report.by_scenario) == {"Exact", "Paraphrase"}
        assert [r.error for r in report.errors] == ["boom"]
        assert report.quality is None

    def test_run_id_format(self, results):
        report = build_report(results)
        assert re.fullmatch(r"run-\d{8}-\d{6}-[0-9a-f]{6}", report.run_id)
        assert build_report(results, run_id="fixed").run_id == "fixed"

    def test_quality_from_best_strategy(self):
        nvq = NVQScorer().evaluate(QualityNote(title="", content=""))
        report = build_report([
            result("Q", "keyword-baseline", nvq_results=[nvq, nvq]),
            result("Q", "hybrid", perfect_metrics(), nvq_results=[nvq]),
        ])

        assert report.quality.total_notes_evaluated == 1
        assert any("NVQ 7" in rec for rec in report.recommendations)

    def test_save_report(self, results, tmp_path):
        report = build_report(results, run_id="run-test")

        path = save_report(report, tmp_path / "out")

        assert path.name == "extraction-accuracy-run-test.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["summary"]["best_strategy"] == "hybrid"
        assert data["summary"]["strategy_metrics"]["hybrid"]["overall_score"] == pytest.approx(1.0)
        assert len(data["raw_results"]) == 4

    def test_print_report(self, results):
        buffer = io.StringIO()
        print_report(build_report(results), Console(file=buffer, width=160))

        output = buffer.getvalue()
        assert "Strategy Comparison" in output
        assert "hybrid" in output
        assert "boom" in output


class TestThresholds:
    """Tests for threshold checks and CI output."""

    def test_pass(self, results):
        report = build_report(results)
        failures = check_thresholds(report)

        assert failures == []
        lines = format_ci_lines(report, failures)
        assert lines[0] == "STATUS=PASS"
        assert "BEST_STRATEGY=hybrid" in lines
        assert "F1_SCORE=1.000" in lines

    def test_fail(self):
        report = build_report([result("Exact", "keyword-baseline")])
        failures = check_thresholds(report)

        assert len(failures) == 3
        assert format_ci_lines(report, failures)[0] == "STATUS=FAIL"

    def test_custom_thresholds(self, results):
        report = build_report(results)
        assert check_thresholds(report, {"f1_score": 1.01}) == ["F1 score 100.0% below 101%"]

    def test_quality_threshold(self, results):
        report = build_report(results)
        failures = check_thresholds(report, check_quality=True)
        assert failures == ["NVQ passing rate 0.0% below 70%"]

    def test_no_results(self):
        assert check_thresholds(build_report([])) == ["No strategy results"]


class TestCli:
    """Tests for the command-line entry point."""

    def test_list(self):
        assert main(["--list"]) == EXIT_OK

    def test_unknown_strategy(self):
        assert main(["--strategy", "tf-idf"]) == EXIT_USAGE

    def test_unknown_scenario(self):
        assert main(["--scenario", "No Such Scenario"]) == EXIT_USAGE

    def test_live_without_key(self):
        with patch.dict(os.environ, {}, clear=True):
            assert main(["--live"]) == EXIT_USAGE

    def test_ci_run(self, tmp_path, capsys):
        code = main([
            "--strategy", "keyword-baseline",
            "--scenario", "exact duplicate detection",
            "--ci",
            "--output", str(tmp_path),
        ])

        out = capsys.readouterr().out
        assert code in (EXIT_OK, EXIT_THRESHOLD)
        assert "BEST_STRATEGY=keyword-baseline" in out
        assert ("STATUS=PASS" in out) == (code == EXIT_OK)
        assert list(tmp_path.glob("extraction-accuracy-*.json"))

    def test_config_output_dir_anchored_to_project_root(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert resolve_output_dir(None, {"output_dir": "results"}) == PROJECT_ROOT / "results"
        assert resolve_output_dir(None, {}) == PROJECT_ROOT / "results"

    def test_config_output_dir_absolute(self, tmp_path):
        assert resolve_output_dir(None, {"output_dir": str(tmp_path)}) == tmp_path

    def test_cli_output_dir_wins(self):
        assert resolve_output_dir("out", {"output_dir": "results"}) == Path("out")
