"""Experiment configuration system with frozen, hashable, serializable dataclasses."""

from gnpsweep.config.experiment import (
    ExecutionConfig,
    ExperimentConfig,
    GraphConfig,
    SweepConfig,
)
from gnpsweep.config.defaults import ANCHOR_CONFIG
from gnpsweep.config.hashing import config_hash, full_config_hash, sweep_config_hash
from gnpsweep.config.serialization import (
    config_from_dict,
    config_from_json,
    config_to_dict,
    config_to_json,
)

__all__ = [
    "ANCHOR_CONFIG",
    "ExecutionConfig",
    "ExperimentConfig",
    "GraphConfig",
    "SweepConfig",
    "config_from_dict",
    "config_from_json",
    "config_hash",
    "config_to_dict",
    "config_to_json",
    "full_config_hash",
    "sweep_config_hash",
]
