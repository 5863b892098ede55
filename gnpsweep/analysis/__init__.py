"""Graph analysis primitives and sweep statistics."""

from gnpsweep.analysis.distances import (
    DISCONNECTED,
    UNREACHED,
    bfs_distances,
    diameter,
    is_connected,
    is_isolated,
)
from gnpsweep.analysis.statistics import (
    estimate_threshold,
    is_monotonic,
    outcome_rate,
    outcome_rates,
    success_interval,
    summarize_sweep,
)

__all__ = [
    "DISCONNECTED",
    "UNREACHED",
    "bfs_distances",
    "diameter",
    "estimate_threshold",
    "is_connected",
    "is_isolated",
    "is_monotonic",
    "outcome_rate",
    "outcome_rates",
    "success_interval",
    "summarize_sweep",
]
