"""Anchor configuration: single source of truth for default experiment parameters."""

from gnpsweep.config.experiment import ExperimentConfig

# All-default values: n=1000, connectivity sweep around ln(n)/n with 10%
# steps, 500 trials per point, process pool, seed=42.
ANCHOR_CONFIG = ExperimentConfig()
