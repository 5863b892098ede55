"""Experiment ID generation with scannable parameter slug format."""

from datetime import datetime, timezone

from gnpsweep.config.experiment import ExperimentConfig


def generate_experiment_id(config: ExperimentConfig) -> str:
    """Generate a scannable experiment ID from config parameters.

    Format: {analysis}_n{n}_t{trials}_s{seed}_{YYYYMMDD}_{HHMMSS}
    Example: connected_n1000_t500_s42_20260224_143012
    """
    ts = datetime.now(timezone.utc)
    return (
        f"{config.sweep.analysis}"
        f"_n{config.graph.n}"
        f"_t{config.sweep.trials_per_point}"
        f"_s{config.seed}"
        f"_{ts.strftime('%Y%m%d_%H%M%S')}"
    )
