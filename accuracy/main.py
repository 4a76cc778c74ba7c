#!/usr/bin/env python3
"""
Extraction Accuracy Runner

Usage:
    python run_accuracy.py                              # keyword-baseline, all scenarios
    python run_accuracy.py --strategy hybrid            # one strategy
    python run_accuracy.py --compare                    # every strategy side by side
    python run_accuracy.py --scenario "Paraphrase Detection"
    python run_accuracy.py --compare --quality          # include NVQ scoring
    python run_accuracy.py --live                       # extract with Claude
    python run_accuracy.py --ci                         # KEY=value output only
    python run_accuracy.py --list                       # strategies and scenarios

Exit codes:
    0  all thresholds met
    1  a threshold was missed
    2  usage error
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

from shared.deduplication import get_consolidation_checker, load_config
from shared.deduplication.utils import PROJECT_ROOT
from shared.logging import configure_logging, get_logger

from accuracy.src.extraction import LLMExtractionProvider
from accuracy.src.fixtures import get_all_scenarios, get_scenario, list_scenarios
from accuracy.src.harness import DEFAULT_CONCURRENCY, run_comparison
from accuracy.src.quality import get_nvq_scorer
from accuracy.src.reporter import (
    build_report,
    check_thresholds,
    format_ci_lines,
    print_report,
    save_report,
)
from accuracy.src.strategies import (
    StrategyKind,
    UnknownStrategyError,
    list_strategies,
)

log = get_logger("accuracy", "main")

console = Console(force_terminal=True)

EXIT_OK = 0
EXIT_THRESHOLD = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extraction-accuracy",
        description="Evaluate note-extraction matching strategies against ground truth.",
    )
    parser.add_argument("--strategy", default=None,
                        help="Strategy to run (default: accuracy.default_strategy or keyword-baseline)")
    parser.add_argument("--scenario", default=None, help="Run a single scenario by name")
    parser.add_argument("--compare", action="store_true", help="Run every strategy")
    parser.add_argument("--quality", action="store_true", help="Score extracted notes with NVQ")
    parser.add_argument("--live", action="store_true", help="Extract with Claude instead of the mock")
    parser.add_argument("--output", default=None, help="Directory for the JSON report")
    parser.add_argument("--ci", action="store_true", help="Print KEY=value lines only")
    parser.add_argument("--list", action="store_true", help="List strategies and scenarios")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def resolve_output_dir(cli_output: Optional[str], accuracy_config: dict) -> Path:
    """CLI paths resolve from the working directory, config paths from the project root."""
    if cli_output:
        return Path(cli_output)
    return PROJECT_ROOT / accuracy_config.get("output_dir", "results")


def cmd_list() -> int:
    console.print("[bold]Strategies[/bold]")
    for key in list_strategies():
        console.print(f"  • {key}")
    console.print("\n[bold]Scenarios[/bold]")
    for name in list_scenarios():
        console.print(f"  • {name}")
    return EXIT_OK


async def run(args: argparse.Namespace, config: dict) -> int:
    accuracy_config = config.get("accuracy", {}) or {}

    # Resolve strategies
    try:
        if args.compare:
            kinds = list(StrategyKind)
        else:
            key = args.strategy or accuracy_config.get("default_strategy", StrategyKind.LEXICAL.value)
            kinds = [StrategyKind.parse(key)]
    except UnknownStrategyError as e:
        console.print(f"[red]{e}[/red]")
        return EXIT_USAGE

    # Resolve scenarios
    if args.scenario:
        scenario = get_scenario(args.scenario)
        if scenario is None:
            console.print(
                f"[red]Unknown scenario '{args.scenario}'. "
                f"Available: {', '.join(list_scenarios())}[/red]"
            )
            return EXIT_USAGE
        scenarios = [scenario]
    else:
        scenarios = get_all_scenarios()

    extraction_factory = None
    llm_client = None
    if args.live:
        from llm.src.client import LLMClient

        llm_config = config.get("llm", {}) or {}
        llm_client = LLMClient(
            claude_model=llm_config.get("claude_model", "claude-sonnet-4-20250514"),
            max_tokens=llm_config.get("max_tokens", 4096),
        )
        if not llm_client.has_claude_credentials:
            console.print("[red]--live requires ANTHROPIC_API_KEY[/red]")
            return EXIT_USAGE
        callback = llm_client.claude_callback()

        def extraction_factory():
            return LLMExtractionProvider(callback, get_consolidation_checker(config))

    scorer = get_nvq_scorer(config) if args.quality else None

    if not args.ci:
        console.print(
            f"\n[bold]Running {len(scenarios)} scenario(s) × {len(kinds)} strategy(ies)"
            f"{' with Claude' if args.live else ''}...[/bold]\n"
        )

    try:
        results = await run_comparison(
            scenarios,
            kinds,
            concurrency=accuracy_config.get("concurrency", DEFAULT_CONCURRENCY),
            config=config,
            scorer=scorer,
            extraction_provider_factory=extraction_factory,
        )
    finally:
        if llm_client is not None:
            await llm_client.close()

    report = build_report(results)
    report_path = save_report(report, resolve_output_dir(args.output, accuracy_config))

    failures = check_thresholds(
        report,
        accuracy_config.get("thresholds"),
        check_quality=args.quality,
    )

    if args.ci:
        for line in format_ci_lines(report, failures):
            print(line)
    else:
        print_report(report, console)
        console.print(f"\nReport saved to [cyan]{report_path}[/cyan]")
        if failures:
            console.print("\n[red][bold]FAILED[/bold][/red]")
            for failure in failures:
                console.print(f"  [red]✗ {failure}[/red]")
        else:
            console.print("\n[green]✓ All thresholds met[/green]")

    log.info(
        "accuracy.run_complete",
        run_id=report.run_id,
        best_strategy=report.best_strategy,
        failures=len(failures),
        errors=len(report.errors),
    )
    return EXIT_THRESHOLD if failures else EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else None)

    if args.list:
        return cmd_list()

    config = load_config(args.config)

    try:
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped.[/yellow]")
        return EXIT_THRESHOLD


if __name__ == "__main__":
    sys.exit(main())
