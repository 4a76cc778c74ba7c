"""
Report generation for extraction accuracy runs.

Builds an ExtractionReport from pair results, saves it as JSON, renders it
with rich and produces the terse KEY=value lines used in CI.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from shared.logging import get_logger

from .harness import ScenarioResult
from .metrics import ExtractionMetrics, aggregate_metrics
from .quality import QualityMetrics, aggregate_quality, generate_quality_recommendations
from .quality.models import COMPONENT_RANGES

log = get_logger("accuracy", "reporter")

SCORE_WEIGHTS = {"f1": 0.4, "consolidation": 0.3, "tags": 0.3}

DEFAULT_THRESHOLDS = {
    "f1_score": 0.7,
    "consolidation_accuracy": 0.7,
    "tag_reuse_rate": 0.8,
    "nvq_passing_rate": 0.7,
}


def overall_score(metrics: ExtractionMetrics) -> float:
    """Weighted blend used to rank strategies."""
    return (
        metrics.duplicates.f1_score * SCORE_WEIGHTS["f1"]
        + metrics.consolidation.accuracy * SCORE_WEIGHTS["consolidation"]
        + metrics.tags.reuse_rate * SCORE_WEIGHTS["tags"]
    )


def select_best_strategy(strategy_metrics: dict[str, ExtractionMetrics]) -> Optional[str]:
    """Highest overall score; ties go to the earlier strategy."""
    best_name, best_score = None, -1.0
    for name, metrics in strategy_metrics.items():
        score = overall_score(metrics)
        if score > best_score:
            best_name, best_score = name, score
    return best_name


def generate_recommendations(strategy_metrics: dict[str, ExtractionMetrics]) -> list[str]:
    """Suggestions derived from aggregated per-strategy metrics."""
    if not strategy_metrics:
        return []

    def best_by(attr):
        return max(strategy_metrics.items(), key=lambda item: attr(item[1]))

    f1_name, f1_metrics = best_by(lambda m: m.duplicates.f1_score)
    cons_name, cons_metrics = best_by(lambda m: m.consolidation.accuracy)
    tag_name, tag_metrics = best_by(lambda m: m.tags.reuse_rate)

    recommendations = []
    if f1_name == cons_name == tag_name:
        recommendations.append(f'Use "{f1_name}" - it performs best across all metrics')
    else:
        recommendations.append(
            f'Best for duplicate detection: "{f1_name}" (F1: {f1_metrics.duplicates.f1_score:.1%})'
        )
        recommendations.append(
            f'Best for consolidation: "{cons_name}" '
            f"(Accuracy: {cons_metrics.consolidation.accuracy:.1%})"
        )
        recommendations.append(
            f'Best for tag reuse: "{tag_name}" (Rate: {tag_metrics.tags.reuse_rate:.1%})'
        )

    for name, metrics in strategy_metrics.items():
        if metrics.duplicates.recall < 0.7:
            recommendations.append(
                f'"{name}": Improve duplicate recall - too many duplicates being missed'
            )
        if metrics.tags.reuse_rate < 0.8:
            recommendations.append(
                f'"{name}": Improve tag matching - too many synonymous tags being created'
            )
        if metrics.consolidation.missed > metrics.consolidation.correct:
            recommendations.append(
                f'"{name}": Improve consolidation detection - more consolidations missed than caught'
            )

    return recommendations


# =============================================================================
# Report model
# =============================================================================

@dataclass
class ExtractionReport:
    """Everything one CLI run produced."""
    run_id: str
    timestamp: str
    best_strategy: Optional[str]
    strategy_metrics: dict[str, ExtractionMetrics]
    by_scenario: dict[str, dict[str, ExtractionMetrics]]
    results: list[ScenarioResult]
    quality: Optional[QualityMetrics] = None
    recommendations: list[str] = field(default_factory=list)

    @property
    def best_metrics(self) -> Optional[ExtractionMetrics]:
        if self.best_strategy is None:
            return None
        return self.strategy_metrics[self.best_strategy]

    @property
    def errors(self) -> list[ScenarioResult]:
        return [r for r in self.results if r.failed]

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "summary": {
                "best_strategy": self.best_strategy,
                "strategy_metrics": {
                    name: {**m.to_dict(), "overall_score": overall_score(m)}
                    for name, m in self.strategy_metrics.items()
                },
                "quality": self.quality.to_dict() if self.quality else None,
                "recommendations": list(self.recommendations),
            },
            "by_scenario": {
                scenario: {name: m.to_dict() for name, m in per_strategy.items()}
                for scenario, per_strategy in self.by_scenario.items()
            },
            "raw_results": [r.to_dict() for r in self.results],
        }


def build_report(results: Sequence[ScenarioResult], run_id: Optional[str] = None) -> ExtractionReport:
    """
    Aggregate pair results into a report.

    Metrics are summed per strategy across scenarios before any ratio is
    read. Quality is aggregated over the best strategy's notes.
    """
    now = datetime.now(timezone.utc)
    run_id = run_id or f"run-{now.strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"

    per_strategy: dict[str, list[ExtractionMetrics]] = {}
    by_scenario: dict[str, dict[str, ExtractionMetrics]] = {}
    for result in results:
        per_strategy.setdefault(result.strategy_name, []).append(result.metrics)
        by_scenario.setdefault(result.scenario_name, {})[result.strategy_name] = result.metrics

    strategy_metrics = {name: aggregate_metrics(ms) for name, ms in per_strategy.items()}
    best = select_best_strategy(strategy_metrics)

    nvq_results = [
        nvq for r in results if r.strategy_name == best for nvq in r.nvq_results
    ]
    quality = aggregate_quality(nvq_results) if nvq_results else None

    recommendations = generate_recommendations(strategy_metrics)
    if quality is not None:
        recommendations.extend(generate_quality_recommendations(quality))

    return ExtractionReport(
        run_id=run_id,
        timestamp=now.isoformat(),
        best_strategy=best,
        strategy_metrics=strategy_metrics,
        by_scenario=by_scenario,
        results=list(results),
        quality=quality,
        recommendations=recommendations,
    )


def save_report(report: ExtractionReport, output_dir: Path) -> Path:
    """Write the report as extraction-accuracy-{run_id}.json."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"extraction-accuracy-{report.run_id}.json"
    path.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
    log.info("accuracy.reporter.saved", path=str(path), results=len(report.results))
    return path


# =============================================================================
# Thresholds and CI output
# =============================================================================

def check_thresholds(
    report: ExtractionReport,
    thresholds: Optional[dict] = None,
    *,
    check_quality: bool = False,
) -> list[str]:
    """
    Threshold failures for the best strategy.

    Returns:
        Human-readable failure descriptions; empty when everything passes
    """
    limits = {**DEFAULT_THRESHOLDS, **(thresholds or {})}
    metrics = report.best_metrics
    if metrics is None:
        return ["No strategy results"]

    checks = [
        ("F1 score", metrics.duplicates.f1_score, limits["f1_score"]),
        ("Consolidation accuracy", metrics.consolidation.accuracy, limits["consolidation_accuracy"]),
        ("Tag reuse rate", metrics.tags.reuse_rate, limits["tag_reuse_rate"]),
    ]
    if check_quality:
        passing = report.quality.passing_rate if report.quality else 0.0
        checks.append(("NVQ passing rate", passing, limits["nvq_passing_rate"]))

    return [
        f"{label} {value:.1%} below {limit:.0%}"
        for label, value, limit in checks
        if value < limit
    ]


def format_ci_lines(report: ExtractionReport, failures: Sequence[str]) -> list[str]:
    metrics = report.best_metrics or ExtractionMetrics.zero(runs=0)
    lines = [
        f"STATUS={'FAIL' if failures else 'PASS'}",
        f"BEST_STRATEGY={report.best_strategy or ''}",
        f"F1_SCORE={metrics.duplicates.f1_score:.3f}",
        f"CONSOLIDATION_ACCURACY={metrics.consolidation.accuracy:.3f}",
        f"TAG_REUSE_RATE={metrics.tags.reuse_rate:.3f}",
    ]
    if report.quality is not None:
        lines.append(f"NVQ_PASSING_RATE={report.quality.passing_rate:.3f}")
    return lines


# =============================================================================
# Rich rendering
# =============================================================================

def format_percent(value: float, good: float = 0.8, ok: float = 0.6) -> str:
    if value >= good:
        color = "green"
    elif value >= ok:
        color = "yellow"
    else:
        color = "red"
    return f"[{color}]{value:.1%}[/{color}]"


def _metrics_table(title: str, rows: dict[str, ExtractionMetrics], best: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("Strategy", style="cyan")
    table.add_column("F1", justify="right")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")
    table.add_column("Consolidation", justify="right")
    table.add_column("Tag Reuse", justify="right")
    table.add_column("Conn. Recall", justify="right")
    table.add_column("Avg ms", justify="right")

    for name, m in rows.items():
        label = f"[bold]{name}[/bold] *" if name == best else name
        table.add_row(
            label,
            format_percent(m.duplicates.f1_score),
            format_percent(m.duplicates.precision),
            format_percent(m.duplicates.recall),
            format_percent(m.consolidation.accuracy),
            format_percent(m.tags.reuse_rate),
            format_percent(m.connections.recall),
            f"{m.average_time_ms:.1f}",
        )
    return table


def _quality_table(quality: QualityMetrics) -> Table:
    table = Table(title="Note Quality (NVQ)")
    table.add_column("Component", style="cyan")
    table.add_column("Max", justify="right")
    table.add_column("Failure Rate", justify="right")
    table.add_column("Distribution")

    for name, top in COMPONENT_RANGES.items():
        dist = quality.distributions.get(name, {})
        rate = quality.failure_rate(name)
        color = "green" if rate <= 0.2 else "yellow" if rate <= 0.4 else "red"
        table.add_row(
            name,
            str(top),
            f"[{color}]{rate:.1%}[/{color}]",
            "  ".join(f"{score}:{dist.get(score, 0)}" for score in range(top + 1)),
        )
    return table


def print_report(report: ExtractionReport, console: Optional[Console] = None) -> None:
    """Render the report to the console."""
    console = console or Console()

    best = report.best_metrics
    summary = [f"[bold]Run:[/bold] {report.run_id}"]
    if best is not None:
        summary.append(
            f"[bold]Best strategy:[/bold] {report.best_strategy} "
            f"(score {overall_score(best):.3f})"
        )
    if report.quality is not None:
        summary.append(
            f"[bold]NVQ:[/bold] mean {report.quality.mean_nvq:.1f}, "
            f"passing {format_percent(report.quality.passing_rate, good=0.7, ok=0.5)}"
        )
    if report.errors:
        summary.append(f"[red]{len(report.errors)} run(s) failed[/red]")
    console.print(Panel("\n".join(summary), title="Extraction Accuracy"))

    console.print(_metrics_table("Strategy Comparison", report.strategy_metrics, report.best_strategy))

    for scenario, per_strategy in report.by_scenario.items():
        console.print(_metrics_table(scenario, per_strategy))

    for result in report.errors:
        console.print(
            f"[red]✗ {result.scenario_name} / {result.strategy_name}: {result.error}[/red]"
        )

    if report.quality is not None:
        console.print(_quality_table(report.quality))
        for issue, count in report.quality.top_issues:
            console.print(f"  • {issue} ({count})")

    if report.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for rec in report.recommendations:
            console.print(f"  • {rec}")
