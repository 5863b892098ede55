"""Monte-Carlo sweep harness: fan trials out to a worker pool, fold results in.

Trials return their boolean through a future and the harness sums them on
its own thread, so no counter is ever shared between workers. Points run
one after another; all trials of a point resolve before its row is
finalized and progress is reported.
"""

import logging
import threading
import time
from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import Callable

import numpy as np

from gnpsweep.config.experiment import ExperimentConfig
from gnpsweep.experiment.sweep import points_for_config
from gnpsweep.experiment.trial import (
    AnalysisKind,
    DiameterComparison,
    TrialSpec,
    run_seeded_trial,
    run_trial,
)
from gnpsweep.experiment.types import PointStatus, ProbabilityPoint, ResultsTable
from gnpsweep.graph.adjacency import InvalidArgument
from gnpsweep.reproducibility.seed import master_sequence
from gnpsweep.reproducibility.source import RandomSource, SourceUnavailable

log = logging.getLogger(__name__)

ProgressSink = Callable[[int, int, float], None]

EXECUTORS = ("process", "thread")
_POLL_SECONDS = 0.05  # how often a waiting harness checks for cancellation


class SweepAborted(RuntimeError):
    """A systemic failure stopped the sweep.

    `table` holds everything collected up to the failure; rows that are not
    COMPLETE say which points are partial or missing. The triggering error
    is chained as __cause__.
    """

    def __init__(self, message: str, table: ResultsTable) -> None:
        super().__init__(message)
        self.table = table


def log_progress(point_index: int, total_points: int, elapsed: float) -> None:
    """Default ProgressSink: one INFO line per finished point."""
    log.info("Point %d/%d done in %.2fs", point_index + 1, total_points, elapsed)


def make_executor(kind: str = "process", max_workers: int | None = None) -> Executor:
    if kind == "process":
        return ProcessPoolExecutor(max_workers=max_workers)
    if kind == "thread":
        return ThreadPoolExecutor(max_workers=max_workers)
    raise InvalidArgument(f"executor must be one of {EXECUTORS}, got {kind!r}")


def _dispatch(
    pool: Executor,
    spec: TrialSpec,
    trial_count: int,
    root: np.random.SeedSequence | None,
    source: RandomSource | None,
    cancel: threading.Event | None,
) -> list[Future]:
    """Submit up to trial_count trials, stopping early if cancel is set."""
    seeds = root.spawn(trial_count) if source is None else None
    futures: list[Future] = []
    for k in range(trial_count):
        if cancel is not None and cancel.is_set():
            break
        if source is None:
            futures.append(pool.submit(run_seeded_trial, spec, seeds[k]))
        else:
            futures.append(
                pool.submit(
                    run_trial,
                    spec.vertex_count,
                    spec.probability,
                    spec.analysis,
                    spec.expected_outcome,
                    source,
                    spec.comparison,
                    spec.diameter_bound,
                )
            )
    return futures


def _collect(
    table: ResultsTable,
    index: int,
    futures: list[Future],
    cancel: threading.Event | None,
) -> tuple[int, int]:
    """Wait for a point's futures, updating its row as results land.

    Returns (success_count, completed_trials). SourceUnavailable from a
    trial propagates after the remaining futures are cancelled.
    """
    successes = 0
    completed = 0
    pending = set(futures)
    while pending:
        done, pending = wait(pending, timeout=_POLL_SECONDS, return_when=FIRST_COMPLETED)
        for fut in done:
            if fut.cancelled():
                continue
            try:
                matched = fut.result()
            except BaseException:
                for other in pending:
                    other.cancel()
                table.update(index, success_count=successes, completed_trials=completed)
                raise
            completed += 1
            successes += bool(matched)
        if done:
            table.update(index, success_count=successes, completed_trials=completed)
        if pending and cancel is not None and cancel.is_set():
            for fut in pending:
                fut.cancel()
    return successes, completed


def run_sweep(
    points: list[ProbabilityPoint],
    vertex_count: int,
    analysis: AnalysisKind,
    comparison: DiameterComparison = DiameterComparison.GREATER,
    diameter_bound: int = 2,
    seed: int | np.random.SeedSequence | None = None,
    source: RandomSource | None = None,
    executor: str = "process",
    max_workers: int | None = None,
    progress: ProgressSink | None = log_progress,
    cancel: threading.Event | None = None,
) -> ResultsTable:
    """Run every point's trials concurrently and return the finished table.

    Each point's trial_count trials are submitted together. By default each
    trial gets its own generator seeded from a child of `seed` (spawned in
    dispatch order), so the counts depend only on the seed. Passing a
    shared `source` instead makes all trials draw from it; that needs the
    thread executor.

    Args:
        points: Sweep points, processed in order.
        vertex_count: Vertices per trial graph.
        analysis: Predicate evaluated by each trial.
        comparison: Diameter comparison (DIAMETER analysis only).
        diameter_bound: Right-hand side of the diameter comparison.
        seed: Master seed; None draws fresh OS entropy.
        source: Optional shared RandomSource.
        executor: "process" or "thread".
        max_workers: Pool size; None lets concurrent.futures decide.
        progress: Called as progress(index, total, elapsed) after each point
            completes. None disables reporting.
        cancel: When set, no further trials are dispatched, pending ones
            are cancelled, and the partial table is returned with the
            affected rows marked INCOMPLETE.

    Returns:
        Finalized ResultsTable.

    Raises:
        InvalidArgument: If the sweep parameters are unusable.
        SweepAborted: If the random source fails. Carries the partial table.
    """
    try:
        analysis = AnalysisKind(analysis)
        comparison = DiameterComparison(comparison)
    except ValueError as exc:
        raise InvalidArgument(str(exc)) from exc
    if vertex_count < 0:
        raise InvalidArgument(f"vertex_count must be >= 0, got {vertex_count}")
    if source is not None and executor != "thread":
        raise InvalidArgument("a shared random source requires the thread executor")

    table = ResultsTable(list(points), analysis=analysis.value, vertex_count=vertex_count)
    root = None
    if source is None:
        root = seed if isinstance(seed, np.random.SeedSequence) else master_sequence(seed)

    total = len(table)
    log.info(
        "Sweep: %s on n=%d, %d points, %s executor",
        analysis.value,
        vertex_count,
        total,
        executor,
    )

    pool = make_executor(executor, max_workers)
    try:
        for index, row in enumerate(table.rows):
            if cancel is not None and cancel.is_set():
                table.cancelled = True
                break

            point = row.point
            spec = TrialSpec(
                vertex_count=vertex_count,
                probability=point.probability,
                analysis=analysis,
                expected_outcome=point.expected_outcome,
                comparison=comparison,
                diameter_bound=diameter_bound,
            )
            table.update(index, status=PointStatus.RUNNING)
            t0 = time.monotonic()

            futures = _dispatch(pool, spec, point.trial_count, root, source, cancel)
            try:
                successes, completed = _collect(table, index, futures, cancel)
            except SourceUnavailable as exc:
                table.update(
                    index,
                    status=PointStatus.INCOMPLETE,
                    elapsed=time.monotonic() - t0,
                )
                table.aborted = True
                table.finalize()
                log.error(
                    "Sweep aborted at point %d/%d (p=%.6g): %s",
                    index + 1,
                    total,
                    point.probability,
                    exc,
                )
                raise SweepAborted(
                    f"random source failed at point {index} "
                    f"(p={point.probability:.6g}); "
                    f"{len(table.incomplete_indices())} of {total} points incomplete",
                    table,
                ) from exc

            elapsed = time.monotonic() - t0
            status = (
                PointStatus.COMPLETE
                if completed == point.trial_count
                else PointStatus.INCOMPLETE
            )
            table.update(
                index,
                status=status,
                success_count=successes,
                completed_trials=completed,
                elapsed=elapsed,
            )
            log.info(
                "p=%.6g expected=%s: %d/%d matched (%s)",
                point.probability,
                point.expected_outcome,
                successes,
                point.trial_count,
                status.value,
            )

            if status is PointStatus.INCOMPLETE:
                table.cancelled = True
                break
            if progress is not None:
                progress(index, total, elapsed)
    finally:
        pool.shutdown(wait=True, cancel_futures=True)

    if table.cancelled:
        log.warning(
            "Sweep cancelled: %d of %d points incomplete",
            len(table.incomplete_indices()),
            total,
        )
    return table.finalize()


def run_configured_sweep(
    config: ExperimentConfig,
    progress: ProgressSink | None = log_progress,
    cancel: threading.Event | None = None,
) -> ResultsTable:
    """Build the sweep described by `config` and run it."""
    points = points_for_config(config)
    return run_sweep(
        points,
        vertex_count=config.graph.n,
        analysis=AnalysisKind(config.sweep.analysis),
        comparison=DiameterComparison(config.sweep.diameter_comparison),
        diameter_bound=config.sweep.diameter_bound,
        seed=config.seed,
        executor=config.execution.executor,
        max_workers=config.execution.max_workers,
        progress=progress,
        cancel=cancel,
    )
