"""Uniform random sources consumed by graph randomization.

A RandomSource hands out floats in [0, 1). Sources are passed around
explicitly; nothing in the package touches a global RNG.
"""

import logging
import threading

import numpy as np

log = logging.getLogger(__name__)


class SourceUnavailable(RuntimeError):
    """Raised when a random source can no longer produce draws.

    Fatal to a whole sweep: trial runners never swallow it.
    """


class RandomSource:
    """Base class for uniform [0, 1) sources.

    Subclasses implement next(). draw() defaults to repeated next() calls,
    so a minimal source (e.g. a fixed sequence in tests) only needs next().
    """

    def next(self) -> float:
        raise NotImplementedError

    def draw(self, count: int) -> np.ndarray:
        """Draw `count` values, in order, as a float64 array.

        Raises:
            SourceUnavailable: If next() fails, whatever the underlying error.
        """
        try:
            return np.fromiter(
                (self.next() for _ in range(count)), dtype=np.float64, count=count
            )
        except SourceUnavailable:
            raise
        except Exception as exc:
            raise SourceUnavailable(
                f"random source failed while drawing {count} values"
            ) from exc


class GeneratorSource(RandomSource):
    """RandomSource backed by a numpy Generator.

    Draws are serialized with a lock so one instance may be shared by
    several threads. Any failure of the underlying generator surfaces as
    SourceUnavailable.
    """

    def __init__(self, rng: np.random.Generator) -> None:
        self._rng = rng
        self._lock = threading.Lock()

    def next(self) -> float:
        return float(self.draw(1)[0])

    def draw(self, count: int) -> np.ndarray:
        with self._lock:
            try:
                return self._rng.random(count)
            except Exception as exc:
                raise SourceUnavailable(
                    f"random source failed while drawing {count} values"
                ) from exc

    def __getstate__(self) -> dict:
        # Locks don't pickle; process workers get a fresh one.
        return {"_rng": self._rng}

    def __setstate__(self, state: dict) -> None:
        self._rng = state["_rng"]
        self._lock = threading.Lock()


def make_source(seed: int | np.random.SeedSequence | None = None) -> GeneratorSource:
    """Build a GeneratorSource from an int seed or a SeedSequence.

    None seeds from OS entropy (non-reproducible runs).
    """
    return GeneratorSource(np.random.default_rng(seed))
