"""Single Monte-Carlo trial: build, randomize, analyze, compare.

A trial owns its Graph from construction to return. The only side effect
is consuming draws from its random source.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from gnpsweep.analysis.distances import (
    DISCONNECTED,
    diameter,
    is_connected,
    is_isolated,
)
from gnpsweep.graph.adjacency import Graph, InvalidArgument
from gnpsweep.reproducibility.source import RandomSource, make_source

log = logging.getLogger(__name__)


class AnalysisKind(str, Enum):
    CONNECTED = "connected"
    DIAMETER = "diameter"
    ISOLATED = "isolated"


class DiameterComparison(str, Enum):
    GREATER = "greater"  # diameter > bound, disconnected counts as infinite
    EQUAL = "equal"  # diameter == bound, disconnected never equal


@dataclass(frozen=True, slots=True)
class TrialSpec:
    """Everything a worker needs to run one trial (picklable)."""

    vertex_count: int
    probability: float
    analysis: AnalysisKind
    expected_outcome: bool
    comparison: DiameterComparison = DiameterComparison.GREATER
    diameter_bound: int = 2


def evaluate_outcome(
    graph: Graph,
    analysis: AnalysisKind,
    comparison: DiameterComparison = DiameterComparison.GREATER,
    diameter_bound: int = 2,
) -> bool:
    """Boolean predicate selected by `analysis`, evaluated on `graph`."""
    try:
        analysis = AnalysisKind(analysis)
        comparison = DiameterComparison(comparison)
    except ValueError as exc:
        raise InvalidArgument(str(exc)) from exc

    if analysis is AnalysisKind.CONNECTED:
        return is_connected(graph)
    if analysis is AnalysisKind.ISOLATED:
        return is_isolated(graph)
    if analysis is AnalysisKind.DIAMETER:
        d = diameter(graph)
        if comparison is DiameterComparison.GREATER:
            return d == DISCONNECTED or d > diameter_bound
        return d == diameter_bound
    raise AssertionError(f"unhandled analysis kind: {analysis!r}")


def run_trial(
    vertex_count: int,
    p: float,
    analysis: AnalysisKind,
    expected_outcome: bool,
    source: RandomSource,
    comparison: DiameterComparison = DiameterComparison.GREATER,
    diameter_bound: int = 2,
) -> bool:
    """Run one randomized trial and report whether it matched expectations.

    InvalidArgument raised while building or analyzing the graph counts as a
    non-match. SourceUnavailable is not caught.
    """
    try:
        graph = Graph(vertex_count).randomize(p, source)
        outcome = evaluate_outcome(graph, analysis, comparison, diameter_bound)
    except InvalidArgument as exc:
        log.debug("Trial n=%d p=%s counted as non-match: %s", vertex_count, p, exc)
        return False
    return outcome == expected_outcome


def run_seeded_trial(spec: TrialSpec, seed: np.random.SeedSequence) -> bool:
    """Worker entry point: run `spec` with a private generator seeded by `seed`."""
    return run_trial(
        spec.vertex_count,
        spec.probability,
        spec.analysis,
        spec.expected_outcome,
        make_source(seed),
        spec.comparison,
        spec.diameter_bound,
    )
