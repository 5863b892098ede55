"""Tests for the concurrent sweep harness."""

import math
import threading
import time
from dataclasses import replace

import pytest

from gnpsweep.analysis import is_monotonic, outcome_rates
from gnpsweep.config import ANCHOR_CONFIG, ExecutionConfig, GraphConfig, SweepConfig
from gnpsweep.experiment import (
    AnalysisKind,
    PointStatus,
    ProbabilityPoint,
    SweepAborted,
    build_threshold_sweep,
    make_executor,
    run_configured_sweep,
    run_sweep,
)
from gnpsweep.graph import InvalidArgument
from gnpsweep.reproducibility import RandomSource, SourceUnavailable, make_source


class FlakySource(RandomSource):
    """Serves `budget` draws, then fails for good."""

    def __init__(self, budget: int) -> None:
        self.budget = budget
        self.calls = 0
        self._lock = threading.Lock()

    def next(self) -> float:
        with self._lock:
            self.calls += 1
            if self.calls > self.budget:
                raise SourceUnavailable("source exhausted")
        return 0.5


class DeviceErrorSource(RandomSource):
    """Fails with an OS-level error rather than SourceUnavailable."""

    def next(self) -> float:
        raise OSError("entropy device gone")


class SlowCancellingSource(RandomSource):
    """Sets `cancel` once `after` draws have been served; every draw is slow."""

    def __init__(self, cancel: threading.Event, after: int) -> None:
        self.cancel = cancel
        self.after = after
        self.draws = 0

    def next(self) -> float:
        return 0.5

    def draw(self, count: int):
        time.sleep(0.01)
        self.draws += 1
        if self.draws >= self.after:
            self.cancel.set()
        return super().draw(count)


def extremes(trials: int = 20) -> list[ProbabilityPoint]:
    """p=0 (never connected) and p=1 (always connected)."""
    return [
        ProbabilityPoint(0.0, False, trials),
        ProbabilityPoint(1.0, True, trials),
    ]


class TestRunSweep:
    """Basic aggregation and table bookkeeping."""

    def test_deterministic_points_all_match(self) -> None:
        table = run_sweep(
            extremes(), 8, AnalysisKind.CONNECTED, seed=1, executor="thread"
        )
        assert table.complete
        assert table.finalized
        assert [r.success_count for r in table] == [20, 20]
        assert [r.completed_trials for r in table] == [20, 20]
        assert table.records() == [(0.0, False, 1.0), (1.0, True, 1.0)]

    def test_unseeded_sweep_uses_fresh_entropy(self) -> None:
        table = run_sweep(extremes(3), 4, AnalysisKind.CONNECTED, executor="thread")
        assert table.complete
        assert [r.success_count for r in table] == [3, 3]

    def test_mismatched_expectations_count_zero(self) -> None:
        points = [ProbabilityPoint(0.0, True, 15)]
        table = run_sweep(points, 6, AnalysisKind.CONNECTED, seed=1, executor="thread")
        assert table[0].success_count == 0
        assert table[0].success_rate == 0.0
        assert table[0].status is PointStatus.COMPLETE

    def test_table_metadata(self) -> None:
        table = run_sweep(
            extremes(5), 6, AnalysisKind.ISOLATED, seed=1, executor="thread"
        )
        assert table.analysis == "isolated"
        assert table.vertex_count == 6
        assert not table.aborted
        assert not table.cancelled

    def test_finalized_table_is_read_only(self) -> None:
        table = run_sweep(extremes(2), 4, AnalysisKind.CONNECTED, seed=1, executor="thread")
        with pytest.raises(RuntimeError, match="finalized"):
            table.update(0, success_count=0)

    def test_same_seed_same_counts(self) -> None:
        points = [ProbabilityPoint(0.25, True, 60), ProbabilityPoint(0.4, True, 60)]
        a = run_sweep(points, 10, AnalysisKind.CONNECTED, seed=7, executor="thread",
                      max_workers=1)
        b = run_sweep(points, 10, AnalysisKind.CONNECTED, seed=7, executor="thread",
                      max_workers=6)
        assert [r.success_count for r in a] == [r.success_count for r in b]

    def test_different_seeds_usually_differ(self) -> None:
        points = [ProbabilityPoint(0.3, True, 200)]
        counts = {
            run_sweep(points, 10, AnalysisKind.CONNECTED, seed=s, executor="thread")[0]
            .success_count
            for s in range(5)
        }
        assert len(counts) > 1

    def test_process_executor(self) -> None:
        table = run_sweep(
            extremes(6), 6, AnalysisKind.CONNECTED, seed=3,
            executor="process", max_workers=2,
        )
        assert table.complete
        assert [r.success_count for r in table] == [6, 6]

    def test_shared_source_with_threads(self) -> None:
        table = run_sweep(
            extremes(10), 6, AnalysisKind.CONNECTED,
            source=make_source(5), executor="thread", max_workers=4,
        )
        assert [r.success_count for r in table] == [10, 10]

    def test_shared_source_requires_threads(self) -> None:
        with pytest.raises(InvalidArgument, match="thread"):
            run_sweep(extremes(), 6, AnalysisKind.CONNECTED,
                      source=make_source(5), executor="process")

    def test_unknown_analysis(self) -> None:
        with pytest.raises(InvalidArgument):
            run_sweep(extremes(), 6, "treewidth", executor="thread")

    def test_unknown_executor(self) -> None:
        with pytest.raises(InvalidArgument, match="executor"):
            make_executor("cluster")

    def test_empty_sweep(self) -> None:
        table = run_sweep([], 6, AnalysisKind.CONNECTED, seed=1, executor="thread")
        assert len(table) == 0
        assert table.complete


class TestProgressAndCancellation:
    """Progress callbacks and cooperative cancellation."""

    def test_progress_called_per_point(self) -> None:
        calls = []
        run_sweep(
            extremes(3), 5, AnalysisKind.CONNECTED, seed=1, executor="thread",
            progress=lambda i, total, elapsed: calls.append((i, total, elapsed)),
        )
        assert [(i, total) for i, total, _ in calls] == [(0, 2), (1, 2)]
        assert all(elapsed >= 0 for _, _, elapsed in calls)

    def test_cancel_before_start(self) -> None:
        cancel = threading.Event()
        cancel.set()
        table = run_sweep(extremes(), 5, AnalysisKind.CONNECTED, seed=1,
                          executor="thread", cancel=cancel)
        assert table.cancelled
        assert not table.complete
        assert [r.status for r in table] == [PointStatus.PENDING, PointStatus.PENDING]
        assert table.incomplete_indices() == [0, 1]

    def test_cancel_after_first_point(self) -> None:
        cancel = threading.Event()
        table = run_sweep(
            extremes(4), 5, AnalysisKind.CONNECTED, seed=1, executor="thread",
            progress=lambda i, total, elapsed: cancel.set(), cancel=cancel,
        )
        assert table[0].status is PointStatus.COMPLETE
        assert table[0].success_count == 4
        assert table[1].status is PointStatus.PENDING
        assert table.cancelled
        assert table.incomplete_indices() == [1]

    def test_cancel_while_point_running(self) -> None:
        cancel = threading.Event()
        calls = []
        points = [ProbabilityPoint(0.5, True, 100)] * 3
        table = run_sweep(
            points, 4, AnalysisKind.CONNECTED,
            source=SlowCancellingSource(cancel, after=3),
            executor="thread", max_workers=1, cancel=cancel,
            progress=lambda i, total, elapsed: calls.append(i),
        )
        row = table[0]
        assert row.status is PointStatus.INCOMPLETE
        assert 0 < row.completed_trials < row.point.trial_count
        assert table.cancelled
        assert not table.aborted
        assert [r.status for r in table][1:] == [PointStatus.PENDING] * 2
        assert table.incomplete_indices() == [0, 1, 2]
        assert calls == []


class TestAbort:
    """A failing random source aborts the whole sweep with partial results."""

    def test_broken_source_aborts(self) -> None:
        with pytest.raises(SweepAborted) as info:
            run_sweep(extremes(5), 4, AnalysisKind.CONNECTED,
                      source=FlakySource(0), executor="thread")
        table = info.value.table
        assert table.aborted
        assert table.finalized
        assert isinstance(info.value.__cause__, SourceUnavailable)
        assert table[0].status is PointStatus.INCOMPLETE
        assert table[1].status is PointStatus.PENDING

    def test_failure_mid_sweep_keeps_completed_points(self) -> None:
        # n=4 -> 6 draws per trial; the first point's 5 trials use exactly 30
        source = FlakySource(30)
        with pytest.raises(SweepAborted) as info:
            run_sweep(extremes(5), 4, AnalysisKind.CONNECTED,
                      source=source, executor="thread", max_workers=3)
        table = info.value.table
        assert table[0].status is PointStatus.COMPLETE
        assert table[0].success_count == 5
        assert table[1].status is PointStatus.INCOMPLETE
        assert table.incomplete_indices() == [1]
        assert "1 of 2 points incomplete" in str(info.value)

    def test_foreign_source_error_aborts_with_table(self) -> None:
        with pytest.raises(SweepAborted) as info:
            run_sweep(extremes(5), 4, AnalysisKind.CONNECTED,
                      source=DeviceErrorSource(), executor="thread")
        table = info.value.table
        assert table.aborted
        assert table.finalized
        cause = info.value.__cause__
        assert isinstance(cause, SourceUnavailable)
        assert isinstance(cause.__cause__, OSError)
        assert table.incomplete_indices() == [0, 1]


class TestThresholdLaw:
    """Connectivity probability rises through the ln(n)/n band."""

    def test_connectivity_rate_increases_through_threshold(self) -> None:
        n = 100
        points = build_threshold_sweep(
            math.log(n) / n, 0.15, 0.3, expected_below=False, trial_count=200
        )
        table = run_sweep(points, n, AnalysisKind.CONNECTED, seed=2024,
                          executor="thread", max_workers=4)
        rates = outcome_rates(table)
        assert is_monotonic(rates, increasing=True, tolerance=0.05)
        assert rates[0] < 0.2
        assert rates[-1] > 0.9

    def test_isolation_rate_decreases_through_threshold(self) -> None:
        n = 100
        points = build_threshold_sweep(
            math.log(n) / n, 0.15, 0.3, expected_below=True, trial_count=200
        )
        table = run_sweep(points, n, AnalysisKind.ISOLATED, seed=77,
                          executor="thread", max_workers=4)
        rates = outcome_rates(table)
        assert is_monotonic(rates, increasing=False, tolerance=0.05)
        assert rates[0] > 0.8
        assert rates[-1] < 0.1


class TestConfiguredSweep:
    """run_configured_sweep wires the config through."""

    def test_small_config(self) -> None:
        cfg = replace(
            ANCHOR_CONFIG,
            graph=GraphConfig(n=20),
            sweep=SweepConfig(trials_per_point=8),
            execution=ExecutionConfig(executor="thread", max_workers=2),
        )
        table = run_configured_sweep(cfg, progress=None)
        assert len(table) == 10
        assert table.complete
        assert all(r.completed_trials == 8 for r in table)
