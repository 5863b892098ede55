"""Threshold sweep design: turn one threshold constant into a bracketing sweep.

Theory (Erdős–Rényi): connectivity and the disappearance of isolated
vertices share the threshold ln(n)/n. Diameter d sets in around
p^d * n^(d-1) = 2 ln(n), i.e. sqrt(2 ln(n) / n) for d = 2.
"""

import logging
import math

from gnpsweep.config.experiment import ExperimentConfig
from gnpsweep.experiment.trial import AnalysisKind, DiameterComparison
from gnpsweep.experiment.types import DEFAULT_TRIALS, ProbabilityPoint
from gnpsweep.graph.adjacency import InvalidArgument

log = logging.getLogger(__name__)

POINTS_PER_SIDE = 5


def theoretical_threshold(
    analysis: AnalysisKind, n: int, diameter_bound: int = 2
) -> float:
    """Textbook G(n, p) threshold for `analysis` on n vertices."""
    if n < 2:
        raise InvalidArgument(f"threshold needs n >= 2, got {n}")
    analysis = AnalysisKind(analysis)
    if analysis is AnalysisKind.DIAMETER:
        if diameter_bound < 2:
            raise InvalidArgument(
                f"diameter threshold needs bound >= 2, got {diameter_bound}"
            )
        d = diameter_bound
        return min(1.0, (2.0 * math.log(n) / n ** (d - 1)) ** (1.0 / d))
    return math.log(n) / n


def expected_below_for(
    analysis: AnalysisKind,
    comparison: DiameterComparison = DiameterComparison.GREATER,
) -> bool:
    """Predicate value expected below the threshold.

    Connectivity and "diameter == bound" only set in above the threshold;
    isolated vertices and "diameter > bound" are what you see below it.
    """
    analysis = AnalysisKind(analysis)
    if analysis is AnalysisKind.ISOLATED:
        return True
    if analysis is AnalysisKind.DIAMETER:
        return DiameterComparison(comparison) is DiameterComparison.GREATER
    return False


def build_threshold_sweep(
    threshold: float,
    down_jump_pct: float,
    up_jump_pct: float,
    expected_below: bool = False,
    trial_count: int = DEFAULT_TRIALS,
) -> list[ProbabilityPoint]:
    """Ten points bracketing `threshold`, in ascending probability order.

    Below: threshold * (1 - k * down_jump_pct) for k = 5, 4, ..., 1.
    Above: threshold * (1 + k * up_jump_pct) for k = 1, 2, ..., 5.

    Args:
        threshold: Theoretical threshold probability, in (0, 1].
        down_jump_pct: Relative step below the threshold (0.1 = 10%).
        up_jump_pct: Relative step above the threshold.
        expected_below: Outcome expected for points below the threshold;
            points above expect the opposite.
        trial_count: Trials per point.

    Raises:
        InvalidArgument: If any parameter is out of range or a generated
            probability falls outside [0, 1].
    """
    if not 0.0 < threshold <= 1.0:
        raise InvalidArgument(f"threshold must be in (0, 1], got {threshold}")
    if down_jump_pct <= 0 or up_jump_pct <= 0:
        raise InvalidArgument(
            f"jump percentages must be positive, got down={down_jump_pct} "
            f"up={up_jump_pct}"
        )

    below = [
        threshold * (1.0 - k * down_jump_pct) for k in range(POINTS_PER_SIDE, 0, -1)
    ]
    above = [threshold * (1.0 + k * up_jump_pct) for k in range(1, POINTS_PER_SIDE + 1)]

    if below[0] < 0.0:
        raise InvalidArgument(
            f"down_jump_pct={down_jump_pct} pushes the lowest point below 0 "
            f"({below[0]:.6g})"
        )
    if above[-1] > 1.0:
        raise InvalidArgument(
            f"up_jump_pct={up_jump_pct} pushes the highest point above 1 "
            f"({above[-1]:.6g})"
        )

    points = [ProbabilityPoint(p, expected_below, trial_count) for p in below]
    points += [ProbabilityPoint(p, not expected_below, trial_count) for p in above]
    log.debug(
        "Sweep around %.6g: %s", threshold, ", ".join(f"{p.probability:.6g}" for p in points)
    )
    return points


def points_for_config(config: ExperimentConfig) -> list[ProbabilityPoint]:
    """Build the sweep described by `config.sweep` for `config.graph.n` vertices."""
    sweep = config.sweep
    analysis = AnalysisKind(sweep.analysis)
    comparison = DiameterComparison(sweep.diameter_comparison)

    threshold = sweep.threshold
    if threshold is None:
        threshold = theoretical_threshold(analysis, config.graph.n, sweep.diameter_bound)

    expected_below = sweep.expected_below
    if expected_below is None:
        expected_below = expected_below_for(analysis, comparison)

    return build_threshold_sweep(
        threshold,
        sweep.down_jump_pct,
        sweep.up_jump_pct,
        expected_below=expected_below,
        trial_count=sweep.trials_per_point,
    )
