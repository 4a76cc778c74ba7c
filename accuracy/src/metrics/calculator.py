"""
Metrics calculator: compares extracted notes against scenario ground truth.
"""

from typing import Sequence

from shared.logging import get_logger

from ..models import (
    DocumentExtractionResult,
    ExpectedConsolidation,
    ExpectedNote,
    ExtractedNoteResult,
    TestScenario,
)
from .ground_truth import (
    check_consolidation,
    evaluate_connections,
    find_matching_expected_note,
    should_reuse_tag,
)
from .models import (
    ConnectionMetrics,
    ConsolidationMetrics,
    DuplicateDetectionMetrics,
    ExtractionMetrics,
    TagReuseMetrics,
    TimingMetrics,
)

log = get_logger("accuracy", "metrics.calculator")


def _surfaced_expectations(
    extracted_notes: Sequence[ExtractedNoteResult],
    expectations: Sequence[ExpectedConsolidation],
) -> set[int]:
    """Indices of expectations matched by at least one extracted note."""
    surfaced = set()
    for note in extracted_notes:
        check = check_consolidation(note, expectations)
        if check.expectation is not None:
            surfaced.add(next(
                i for i, e in enumerate(expectations) if e is check.expectation
            ))
    return surfaced


def calculate_duplicate_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    expectations: Sequence[ExpectedConsolidation],
) -> DuplicateDetectionMetrics:
    """
    Classify every extracted note's consolidation as TP/FP/FN/TN.

    A wrong-target consolidation counts as both FP and FN. An expectation
    that no extracted note matched at all adds one FN.
    """
    tp = fp = fn = tn = 0

    for note in extracted_notes:
        check = check_consolidation(note, expectations)
        if check.should_have_consolidated:
            if check.correct_target:
                tp += 1
            elif check.did_consolidate:
                fp += 1
                fn += 1
            else:
                fn += 1
        elif check.did_consolidate:
            fp += 1
        else:
            tn += 1

    fn += len(expectations) - len(_surfaced_expectations(extracted_notes, expectations))

    return DuplicateDetectionMetrics(
        true_positives=tp,
        false_positives=fp,
        false_negatives=fn,
        true_negatives=tn,
    )


def calculate_consolidation_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    expectations: Sequence[ExpectedConsolidation],
) -> ConsolidationMetrics:
    """Separate correct, wrong-target, missed and correctly-new outcomes."""
    correct = missed = wrong_target = correct_new = incorrect = 0

    for note in extracted_notes:
        check = check_consolidation(note, expectations)
        if check.should_have_consolidated:
            if check.correct_target:
                correct += 1
            elif check.did_consolidate:
                wrong_target += 1
            else:
                missed += 1
        elif check.did_consolidate:
            incorrect += 1
        else:
            correct_new += 1

    missed += len(expectations) - len(_surfaced_expectations(extracted_notes, expectations))

    return ConsolidationMetrics(
        total_expected=len(expectations),
        correct=correct,
        missed=missed,
        wrong_target=wrong_target,
        correct_new=correct_new,
        incorrect=incorrect,
    )


def calculate_tag_reuse_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    existing_tags: Sequence[str],
) -> TagReuseMetrics:
    """Classify each assigned tag as reused, should-have-reused or new."""
    existing_lower = {t.lower() for t in existing_tags}
    total = reused = created_new = should_have_reused = 0

    for note in extracted_notes:
        for tag in note.tags:
            total += 1
            if tag.lower() in existing_lower:
                reused += 1
            elif should_reuse_tag(tag, existing_tags) is not None:
                should_have_reused += 1
            else:
                created_new += 1

    return TagReuseMetrics(
        total_tags_assigned=total,
        reused_existing=reused,
        correctly_created_new=created_new,
        should_have_reused=should_have_reused,
    )


def calculate_connection_metrics(
    extracted_notes: Sequence[ExtractedNoteResult],
    expected_notes: Sequence[ExpectedNote],
) -> ConnectionMetrics:
    """
    Match expected notes to extracted notes, then compare their connections.

    Connections on notes with no expected counterpart are spurious; expected
    connections of notes never extracted are missed.
    """
    expected_total = actual_total = correct = 0
    matched: set[int] = set()

    for note in extracted_notes:
        actual_total += len(note.connections)
        expected, _ = find_matching_expected_note(note, expected_notes)
        if expected is None:
            continue
        matched.add(next(i for i, e in enumerate(expected_notes) if e is expected))
        expected_total += len(expected.expected_connections)
        correct += evaluate_connections(note.connections, expected)

    for i, expected in enumerate(expected_notes):
        if i not in matched:
            expected_total += len(expected.expected_connections)

    return ConnectionMetrics(
        expected=expected_total,
        actual=actual_total,
        correct=correct,
    )


def calculate_timing(results: Sequence[DocumentExtractionResult]) -> TimingMetrics:
    return TimingMetrics(
        total_ms=sum(r.total_time_ms for r in results),
        extraction_ms=sum(r.extraction_time_ms for r in results),
        matching_ms=sum(r.matching_time_ms for r in results),
    )


def calculate_metrics(
    results: Sequence[DocumentExtractionResult],
    scenario: TestScenario,
) -> ExtractionMetrics:
    """
    Calculate all metrics for one (scenario, strategy) run.

    Args:
        results: Per-document extraction results, in processing order
        scenario: Scenario supplying ground truth and the initial tag vocabulary
    """
    notes = [note for result in results for note in result.notes]

    metrics = ExtractionMetrics(
        duplicates=calculate_duplicate_metrics(notes, scenario.expected_consolidations),
        consolidation=calculate_consolidation_metrics(notes, scenario.expected_consolidations),
        tags=calculate_tag_reuse_metrics(notes, scenario.existing_tags),
        connections=calculate_connection_metrics(notes, scenario.expected_notes),
        timing=calculate_timing(results),
    )

    log.debug(
        "accuracy.metrics.calculated",
        scenario=scenario.name,
        notes=len(notes),
        f1=round(metrics.duplicates.f1_score, 3),
        consolidation_accuracy=round(metrics.consolidation.accuracy, 3),
        tag_reuse_rate=round(metrics.tags.reuse_rate, 3),
    )
    return metrics
