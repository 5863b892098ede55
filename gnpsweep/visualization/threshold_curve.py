"""Threshold curve: predicate rate against edge probability across a sweep."""

import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from gnpsweep.analysis.statistics import outcome_rates, success_interval
from gnpsweep.experiment.types import ResultsTable
from gnpsweep.visualization.style import (
    ABOVE_COLOR,
    BELOW_COLOR,
    RATE_COLOR,
    THRESHOLD_COLOR,
    apply_style,
    save_figure,
)

log = logging.getLogger(__name__)


def plot_threshold_curve(
    table: ResultsTable,
    threshold: float | None = None,
    confidence: float = 0.95,
    ax: plt.Axes | None = None,
) -> plt.Figure:
    """Plot the fraction of trials where the predicate held, per probability.

    Points are colored by expected outcome, with a Wilson band around the
    curve and a dotted vertical line at `threshold` when given. Rows with
    no completed trials are left out.

    Args:
        table: Results table from a sweep.
        threshold: Theoretical threshold to mark.
        confidence: Confidence level of the band.
        ax: Optional axes to draw into.

    Returns:
        Matplotlib Figure.
    """
    apply_style()
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    else:
        fig = ax.figure

    probs = np.array([row.point.probability for row in table], dtype=np.float64)
    rates = outcome_rates(table)
    lows, highs = [], []
    for row in table:
        low, high = success_interval(row.success_count, row.completed_trials, confidence)
        if not row.point.expected_outcome:
            # band on the predicate rate is the mirrored success band
            low, high = 1.0 - high, 1.0 - low
        lows.append(low)
        highs.append(high)
    lows_arr = np.array(lows, dtype=np.float64)
    highs_arr = np.array(highs, dtype=np.float64)

    keep = ~np.isnan(rates)
    ax.plot(probs[keep], rates[keep], color=RATE_COLOR, linewidth=2.0, zorder=2)
    ax.fill_between(
        probs[keep], lows_arr[keep], highs_arr[keep],
        color=RATE_COLOR, alpha=0.15, zorder=1,
    )

    expected = np.array([row.point.expected_outcome for row in table], dtype=bool)
    for flag, color, label in (
        (False, BELOW_COLOR, "expected False"),
        (True, ABOVE_COLOR, "expected True"),
    ):
        mask = keep & (expected == flag)
        if mask.any():
            ax.scatter(probs[mask], rates[mask], color=color, s=30, zorder=3, label=label)

    if threshold is not None:
        ax.axvline(
            x=threshold, color=THRESHOLD_COLOR, linestyle=":", linewidth=1.5,
            alpha=0.8, label=f"threshold p={threshold:.4g}",
        )

    ax.set_xlabel("Edge probability p")
    ax.set_ylabel(f"P({table.analysis})")
    ax.set_ylim(-0.05, 1.05)
    ax.set_title(f"G(n={table.vertex_count}, p): {table.analysis}")
    ax.legend(loc="best")
    return fig


def render_threshold_curve(
    table: ResultsTable,
    output_dir: str | Path,
    threshold: float | None = None,
) -> tuple[Path, Path]:
    """Plot and save the threshold curve as figures/threshold_curve.{png,svg}."""
    fig = plot_threshold_curve(table, threshold=threshold)
    paths = save_figure(fig, Path(output_dir) / "figures", "threshold_curve")
    log.info("Threshold curve saved to %s", paths[0])
    return paths
