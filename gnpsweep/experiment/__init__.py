"""Monte-Carlo experiment: trials, sweep design, and the concurrent harness."""

from gnpsweep.experiment.types import (
    DEFAULT_TRIALS,
    PointResult,
    PointStatus,
    ProbabilityPoint,
    ResultsTable,
)
from gnpsweep.experiment.trial import (
    AnalysisKind,
    DiameterComparison,
    TrialSpec,
    evaluate_outcome,
    run_seeded_trial,
    run_trial,
)
from gnpsweep.experiment.sweep import (
    POINTS_PER_SIDE,
    build_threshold_sweep,
    expected_below_for,
    points_for_config,
    theoretical_threshold,
)
from gnpsweep.experiment.harness import (
    ProgressSink,
    SweepAborted,
    log_progress,
    make_executor,
    run_configured_sweep,
    run_sweep,
)

__all__ = [
    "AnalysisKind",
    "DEFAULT_TRIALS",
    "DiameterComparison",
    "POINTS_PER_SIDE",
    "PointResult",
    "PointStatus",
    "ProbabilityPoint",
    "ProgressSink",
    "ResultsTable",
    "SweepAborted",
    "TrialSpec",
    "build_threshold_sweep",
    "evaluate_outcome",
    "expected_below_for",
    "log_progress",
    "make_executor",
    "points_for_config",
    "run_configured_sweep",
    "run_seeded_trial",
    "run_sweep",
    "run_trial",
    "theoretical_threshold",
]
