"""Statistical summaries of a finished sweep.

Confidence intervals are Wilson score intervals from scipy.stats.binomtest.
The empirical threshold is a linear interpolation of where the predicate
rate crosses one half.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
from scipy.stats import binomtest

if TYPE_CHECKING:
    from gnpsweep.experiment.types import PointResult, ResultsTable


def success_interval(
    success_count: int, trials: int, confidence: float = 0.95
) -> tuple[float, float]:
    """Wilson score interval for a success proportion.

    Returns (nan, nan) when no trials completed.
    """
    if trials <= 0:
        return float("nan"), float("nan")
    ci = binomtest(success_count, trials).proportion_ci(
        confidence_level=confidence, method="wilson"
    )
    return float(ci.low), float(ci.high)


def outcome_rate(row: PointResult) -> float | None:
    """Fraction of completed trials in which the predicate held.

    A trial "succeeds" when its outcome matches the expected one, so for
    points expecting False the predicate rate is the complement of the
    success rate.
    """
    rate = row.observed_rate
    if rate is None:
        return None
    return rate if row.point.expected_outcome else 1.0 - rate


def outcome_rates(table: ResultsTable) -> np.ndarray:
    """Predicate rate per row as a float array (nan for rows with no trials)."""
    rates = [outcome_rate(row) for row in table]
    return np.array([np.nan if r is None else r for r in rates], dtype=np.float64)


def is_monotonic(
    rates: np.ndarray, increasing: bool = True, tolerance: float = 0.0
) -> bool:
    """True if `rates` never moves against the trend by more than `tolerance`.

    NaN entries are skipped.
    """
    values = np.asarray(rates, dtype=np.float64)
    values = values[~np.isnan(values)]
    if len(values) < 2:
        return True
    steps = np.diff(values)
    if not increasing:
        steps = -steps
    return bool((steps >= -tolerance).all())


def estimate_threshold(table: ResultsTable, level: float = 0.5) -> float | None:
    """Probability at which the predicate rate first crosses `level`.

    Linearly interpolates between the two bracketing points. Works for
    predicates that rise (connectivity) or fall (isolation) with p.
    Returns None if the rates never cross `level`.
    """
    probs = np.array([row.point.probability for row in table], dtype=np.float64)
    rates = outcome_rates(table)
    keep = ~np.isnan(rates)
    probs, rates = probs[keep], rates[keep]

    for i in range(len(rates) - 1):
        a, b = rates[i] - level, rates[i + 1] - level
        if a == 0:
            return float(probs[i])
        if a * b < 0:
            frac = a / (a - b)
            return float(probs[i] + frac * (probs[i + 1] - probs[i]))
    if len(rates) and rates[-1] == level:
        return float(probs[-1])
    return None


def summarize_sweep(
    table: ResultsTable,
    threshold: float | None = None,
    confidence: float = 0.95,
) -> dict[str, Any]:
    """JSON-ready summary: per-point rates with intervals, trend, crossing.

    Args:
        table: Finished (possibly partial) results table.
        threshold: Theoretical threshold to report alongside the estimate.
        confidence: Confidence level for the Wilson intervals.
    """
    points: list[dict[str, Any]] = []
    for row in table:
        low, high = success_interval(row.success_count, row.completed_trials, confidence)
        rate = outcome_rate(row)
        points.append(
            {
                "probability": row.point.probability,
                "expected_outcome": row.point.expected_outcome,
                "trial_count": row.point.trial_count,
                "completed_trials": row.completed_trials,
                "success_count": row.success_count,
                "success_rate": row.success_rate,
                "outcome_rate": rate,
                "ci_low": None if np.isnan(low) else low,
                "ci_high": None if np.isnan(high) else high,
                "status": row.status.value,
                "elapsed_seconds": row.elapsed,
            }
        )

    rates = outcome_rates(table)
    finite = rates[~np.isnan(rates)]
    increasing = bool(len(finite) < 2 or finite[-1] >= finite[0])
    return {
        "analysis": table.analysis,
        "vertex_count": table.vertex_count,
        "complete": table.complete,
        "aborted": table.aborted,
        "cancelled": table.cancelled,
        "confidence": confidence,
        "theoretical_threshold": threshold,
        "estimated_threshold": estimate_threshold(table),
        "trend": "increasing" if increasing else "decreasing",
        "monotonic": is_monotonic(rates, increasing=increasing),
        "points": points,
    }
