"""Figures for sweep results."""

from gnpsweep.visualization.style import apply_style, save_figure
from gnpsweep.visualization.threshold_curve import (
    plot_threshold_curve,
    render_threshold_curve,
)

__all__ = [
    "apply_style",
    "plot_threshold_curve",
    "render_threshold_curve",
    "save_figure",
]
