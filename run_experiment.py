#!/usr/bin/env python3
"""Entry point for running G(n, p) threshold sweeps.

Chains the stages into a single command:
config -> sweep design -> concurrent trials -> statistics -> result.json,
results.csv -> threshold curve figure.

Usage:
    python run_experiment.py --analysis connected --n 1000 --trials 500
    python run_experiment.py --config config.json --dry-run
    python run_experiment.py --analysis diameter --n 200 --executor thread --verbose
"""

import argparse
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Generator

from gnpsweep.config import (
    ANCHOR_CONFIG,
    ExperimentConfig,
    config_from_json,
    full_config_hash,
    sweep_config_hash,
)
from gnpsweep.config.experiment import ANALYSES, EXECUTORS
from gnpsweep.results import generate_experiment_id

log = logging.getLogger(__name__)


@contextmanager
def stage_timer(name: str) -> Generator[None, None, None]:
    """Context manager that prints stage banners with elapsed time."""
    print(f"\n=== {name} ===")
    log.info("Starting: %s", name)
    t0 = time.monotonic()
    yield
    elapsed = time.monotonic() - t0
    print(f"... done in {elapsed:.1f}s")
    log.info("Completed: %s in %.1fs", name, elapsed)


def run_pipeline(
    config: ExperimentConfig,
    results_dir: str = "results",
    plot: bool = True,
) -> Path:
    """Run the sweep described by `config` and persist everything.

    Returns:
        Path to the output directory.
    """
    # Lazy imports to keep --dry-run fast
    from gnpsweep.analysis import summarize_sweep
    from gnpsweep.experiment import (
        AnalysisKind,
        SweepAborted,
        points_for_config,
        run_configured_sweep,
        theoretical_threshold,
    )
    from gnpsweep.reproducibility import get_git_hash
    from gnpsweep.results import write_result, write_results_csv

    pipeline_start = time.monotonic()
    log.info("Seed: %d", config.seed)
    log.info("Git hash: %s", get_git_hash())

    threshold = config.sweep.threshold
    if threshold is None:
        threshold = theoretical_threshold(
            AnalysisKind(config.sweep.analysis),
            config.graph.n,
            config.sweep.diameter_bound,
        )

    with stage_timer("Sweep Design"):
        points = points_for_config(config)
        for point in points:
            log.info(
                "  p=%.6g expected=%s trials=%d",
                point.probability, point.expected_outcome, point.trial_count,
            )

    aborted = None
    with stage_timer("Monte-Carlo Trials"):
        try:
            table = run_configured_sweep(config)
        except SweepAborted as exc:
            log.error("Sweep aborted: %s", exc)
            table = exc.table
            aborted = exc

    with stage_timer("Statistics"):
        summary = summarize_sweep(table, threshold=threshold)
        log.info(
            "Estimated threshold: %s (theory %.6g)",
            summary["estimated_threshold"], threshold,
        )

    with stage_timer("Write Results"):
        output_dir = write_result(config, table, summary=summary, results_dir=results_dir)
        write_results_csv(table, output_dir / "results.csv")

    if plot:
        with stage_timer("Visualization"):
            from gnpsweep.visualization import render_threshold_curve

            render_threshold_curve(table, output_dir, threshold=threshold)

    total_elapsed = time.monotonic() - pipeline_start
    print(f"\n{'=' * 60}")
    print(f"Pipeline complete in {total_elapsed:.1f}s")
    print(f"  Experiment: {output_dir.name}")
    print(f"  Output:     {output_dir}")
    print(f"{'':2}{'p':>12} {'expected':>9} {'rate':>7} {'status':>11}")
    for row in table:
        print(f"{'':2}{row.point.probability:>12.6g} "
              f"{str(row.point.expected_outcome):>9} "
              f"{row.success_rate:>7.3f} {row.status.value:>11}")
    print(f"{'=' * 60}")

    if aborted is not None:
        raise aborted
    return output_dir


def build_config(args: argparse.Namespace) -> ExperimentConfig:
    """Start from --config (or the anchor config) and apply CLI overrides."""
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        config = config_from_json(config_path.read_text())
    else:
        config = ANCHOR_CONFIG

    sweep_overrides = {}
    if args.analysis is not None:
        sweep_overrides["analysis"] = args.analysis
    if args.trials is not None:
        sweep_overrides["trials_per_point"] = args.trials
    execution_overrides = {}
    if args.executor is not None:
        execution_overrides["executor"] = args.executor
    if args.workers is not None:
        execution_overrides["max_workers"] = args.workers

    return replace(
        config,
        graph=replace(config.graph, n=args.n) if args.n is not None else config.graph,
        sweep=replace(config.sweep, **sweep_overrides),
        execution=replace(config.execution, **execution_overrides),
        seed=args.seed if args.seed is not None else config.seed,
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Estimate G(n, p) thresholds with a Monte-Carlo sweep"
    )
    parser.add_argument("--config", type=str, help="Path to experiment config JSON file")
    parser.add_argument("--analysis", choices=ANALYSES, help="Predicate to sweep")
    parser.add_argument("--n", type=int, help="Vertices per graph")
    parser.add_argument("--trials", type=int, help="Trials per probability point")
    parser.add_argument("--seed", type=int, help="Master seed")
    parser.add_argument("--executor", choices=EXECUTORS, help="Worker pool kind")
    parser.add_argument("--workers", type=int, help="Worker pool size")
    parser.add_argument(
        "--results-dir", type=str, default="results", help="Base output directory"
    )
    parser.add_argument("--no-plot", action="store_true", help="Skip the figure")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the sweep plan without running trials",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable DEBUG-level logging",
    )
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except ValueError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    experiment_id = generate_experiment_id(config)
    print(f"Experiment ID: {experiment_id}")
    print(f"Config hash:   {full_config_hash(config)}")
    print(f"Sweep hash:    {sweep_config_hash(config)}")
    print()
    print(f"Graph:     n={config.graph.n}")
    print(f"Sweep:     analysis={config.sweep.analysis}, "
          f"threshold={config.sweep.threshold or 'theoretical'}, "
          f"down={config.sweep.down_jump_pct}, up={config.sweep.up_jump_pct}, "
          f"trials={config.sweep.trials_per_point}")
    print(f"Execution: {config.execution.executor} "
          f"(workers={config.execution.max_workers or 'auto'})")
    print(f"Seed:      {config.seed}")

    if args.dry_run:
        from gnpsweep.experiment import points_for_config

        print(f"\nSweep plan for experiment {experiment_id}:")
        for i, point in enumerate(points_for_config(config)):
            print(f"  {i + 1:2d}. p={point.probability:.6g} "
                  f"expected={point.expected_outcome} trials={point.trial_count}")
        print(f"\nOutput: {args.results_dir}/{experiment_id}/")
        print("  - result.json")
        print("  - results.csv")
        if not args.no_plot:
            print("  - figures/threshold_curve.{png,svg}")
        print("\n[dry-run] Config loaded successfully. Exiting.")
        return

    try:
        run_pipeline(config, results_dir=args.results_dir, plot=not args.no_plot)
    except Exception:
        log.exception("Pipeline failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
