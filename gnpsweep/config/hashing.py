"""Deterministic config hashing using SHA-256 over sorted JSON."""

import hashlib
import json
from dataclasses import asdict
from typing import Any

from gnpsweep.config.experiment import ExperimentConfig


def config_hash(config: Any, exclude: tuple[str, ...] = ()) -> str:
    """First 16 hex characters of the SHA-256 of a dataclass's sorted JSON.

    Args:
        config: Any dataclass instance (or sub-config).
        exclude: Top-level field names left out of the hash.
    """
    d = asdict(config)
    for name in exclude:
        d.pop(name, None)
    serialized = json.dumps(d, sort_keys=True, ensure_ascii=True, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:16]


def sweep_config_hash(config: ExperimentConfig) -> str:
    """Identity of the experimental design: graph + sweep, no seed or execution.

    Two runs of the same design with different seeds or pool sizes share
    this hash, which makes them easy to pool in later analysis.
    """
    return config_hash(
        config, exclude=("seed", "execution", "description", "tags")
    )


def full_config_hash(config: ExperimentConfig) -> str:
    """Hash for full experiment identity, seed included."""
    return config_hash(config)
