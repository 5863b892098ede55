"""Experiment configuration dataclasses, all frozen and slotted."""

from dataclasses import dataclass, field

ANALYSES = ("connected", "diameter", "isolated")
COMPARISONS = ("greater", "equal")
EXECUTORS = ("process", "thread")


@dataclass(frozen=True, slots=True)
class GraphConfig:
    """G(n, p) graph parameters."""

    n: int = 1000  # number of vertices per trial graph


@dataclass(frozen=True, slots=True)
class SweepConfig:
    """Threshold sweep design and trial budget."""

    analysis: str = "connected"  # connected | diameter | isolated
    threshold: float | None = None  # None -> theoretical threshold for n
    down_jump_pct: float = 0.1  # relative step between points below threshold
    up_jump_pct: float = 0.1  # relative step between points above threshold
    trials_per_point: int = 500
    diameter_comparison: str = "greater"  # greater | equal
    diameter_bound: int = 2
    expected_below: bool | None = None  # None -> analysis-specific default


@dataclass(frozen=True, slots=True)
class ExecutionConfig:
    """Worker pool settings."""

    executor: str = "process"  # process | thread
    max_workers: int | None = None  # None -> concurrent.futures default


@dataclass(frozen=True, slots=True)
class ExperimentConfig:
    """Top-level experiment configuration composing all sub-configs.

    All fields are frozen and typed. Cross-parameter validation runs
    in __post_init__ to reject invalid configurations early.
    """

    graph: GraphConfig = field(default_factory=GraphConfig)
    sweep: SweepConfig = field(default_factory=SweepConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    seed: int = 42
    description: str = ""
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.graph.n < 2:
            raise ValueError(f"graph.n must be >= 2, got {self.graph.n}")
        if self.sweep.analysis not in ANALYSES:
            raise ValueError(
                f"sweep.analysis must be one of {ANALYSES}, "
                f"got {self.sweep.analysis!r}"
            )
        if self.sweep.diameter_comparison not in COMPARISONS:
            raise ValueError(
                f"sweep.diameter_comparison must be one of {COMPARISONS}, "
                f"got {self.sweep.diameter_comparison!r}"
            )
        if self.sweep.diameter_bound < 1:
            raise ValueError(
                f"sweep.diameter_bound must be >= 1, got {self.sweep.diameter_bound}"
            )
        if self.sweep.threshold is not None and not 0.0 < self.sweep.threshold <= 1.0:
            raise ValueError(
                f"sweep.threshold must be in (0, 1], got {self.sweep.threshold}"
            )
        if self.sweep.down_jump_pct <= 0 or self.sweep.up_jump_pct <= 0:
            raise ValueError(
                f"sweep jump percentages must be positive, got "
                f"down={self.sweep.down_jump_pct} up={self.sweep.up_jump_pct}"
            )
        # 5 steps below the threshold must stay at or above p = 0
        if 5 * self.sweep.down_jump_pct > 1.0:
            raise ValueError(
                f"sweep.down_jump_pct ({self.sweep.down_jump_pct}) must be <= 0.2"
            )
        if self.sweep.trials_per_point < 1:
            raise ValueError(
                f"sweep.trials_per_point must be >= 1, "
                f"got {self.sweep.trials_per_point}"
            )
        if self.execution.executor not in EXECUTORS:
            raise ValueError(
                f"execution.executor must be one of {EXECUTORS}, "
                f"got {self.execution.executor!r}"
            )
        if self.execution.max_workers is not None and self.execution.max_workers < 1:
            raise ValueError(
                f"execution.max_workers must be >= 1, "
                f"got {self.execution.max_workers}"
            )
