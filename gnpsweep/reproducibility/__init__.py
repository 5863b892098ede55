"""Reproducibility infrastructure: random sources, seeding, and code provenance."""

from gnpsweep.reproducibility.git_hash import get_git_hash
from gnpsweep.reproducibility.seed import (
    master_sequence,
    spawn_trial_seeds,
    verify_seed_determinism,
)
from gnpsweep.reproducibility.source import (
    GeneratorSource,
    RandomSource,
    SourceUnavailable,
    make_source,
)

__all__ = [
    "GeneratorSource",
    "RandomSource",
    "SourceUnavailable",
    "get_git_hash",
    "make_source",
    "master_sequence",
    "spawn_trial_seeds",
    "verify_seed_determinism",
]
