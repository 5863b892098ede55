"""Sweep data structures: probability points, per-point results, results table."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator

from gnpsweep.graph.adjacency import InvalidArgument

DEFAULT_TRIALS = 500


class PointStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"  # cancelled or aborted before all trials resolved


@dataclass(frozen=True, slots=True)
class ProbabilityPoint:
    """One cell of a sweep: edge probability, expected outcome, trial budget."""

    probability: float
    expected_outcome: bool
    trial_count: int = DEFAULT_TRIALS

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise InvalidArgument(
                f"probability must be in [0, 1], got {self.probability}"
            )
        if self.trial_count < 1:
            raise InvalidArgument(
                f"trial_count must be positive, got {self.trial_count}"
            )


@dataclass(frozen=True, slots=True)
class PointResult:
    """Snapshot of one point's progress.

    success_count counts trials whose outcome matched the expected outcome.
    completed_trials counts every trial that resolved (match or not).
    """

    point: ProbabilityPoint
    status: PointStatus = PointStatus.PENDING
    success_count: int = 0
    completed_trials: int = 0
    elapsed: float = 0.0  # seconds spent on this point

    @property
    def success_rate(self) -> float:
        """success_count / trial_count (the full budget, not completed trials)."""
        return self.success_count / self.point.trial_count

    @property
    def observed_rate(self) -> float | None:
        """success_count / completed_trials, or None if nothing completed."""
        if self.completed_trials == 0:
            return None
        return self.success_count / self.completed_trials


class ResultsTable:
    """Ordered per-point results for one sweep.

    Rows are frozen snapshots. The harness replaces them as points advance
    and calls finalize() when the sweep ends, after which the table is
    read-only.
    """

    def __init__(
        self,
        points: list[ProbabilityPoint],
        analysis: str,
        vertex_count: int,
    ) -> None:
        self.analysis = analysis
        self.vertex_count = vertex_count
        self.aborted = False
        self.cancelled = False
        self._rows = [PointResult(point=p) for p in points]
        self._final = False

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[PointResult]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> PointResult:
        return self._rows[index]

    def __repr__(self) -> str:
        done = sum(r.status is PointStatus.COMPLETE for r in self._rows)
        return (
            f"ResultsTable(analysis={self.analysis!r}, n={self.vertex_count}, "
            f"complete={done}/{len(self._rows)})"
        )

    @property
    def rows(self) -> tuple[PointResult, ...]:
        return tuple(self._rows)

    @property
    def finalized(self) -> bool:
        return self._final

    @property
    def complete(self) -> bool:
        return all(r.status is PointStatus.COMPLETE for r in self._rows)

    def incomplete_indices(self) -> list[int]:
        """Indices of rows that are not COMPLETE (partial or never started)."""
        return [
            i for i, r in enumerate(self._rows) if r.status is not PointStatus.COMPLETE
        ]

    def update(self, index: int, **changes) -> PointResult:
        """Replace row `index` with a copy carrying `changes`."""
        if self._final:
            raise RuntimeError("ResultsTable is finalized and can no longer change")
        row = replace(self._rows[index], **changes)
        self._rows[index] = row
        return row

    def finalize(self) -> "ResultsTable":
        self._final = True
        return self

    def records(self) -> list[tuple[float, bool, float]]:
        """(probability, expected_outcome, success_rate) per row, in sweep order."""
        return [
            (r.point.probability, r.point.expected_outcome, r.success_rate)
            for r in self._rows
        ]
