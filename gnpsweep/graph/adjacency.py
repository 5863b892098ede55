"""Undirected adjacency-list graph with G(n, p) randomization.

Each trial builds one Graph, randomizes it once, then hands it to the
analysis functions read-only. Edges are only ever appended.
"""

import logging

import numpy as np
import scipy.sparse

from gnpsweep.reproducibility.source import RandomSource

log = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Raised for bad vertex counts, self-loops, or probabilities outside [0, 1]."""


class OutOfRange(InvalidArgument, IndexError):
    """Raised when a vertex index falls outside [0, vertex_count)."""


class Graph:
    """Undirected graph over vertices 0..vertex_count-1.

    adjacency[u] lists the neighbors of u in insertion order. Adding the
    same edge twice records it twice; every analysis only looks at
    membership, so multiplicity never changes a result.
    """

    def __init__(self, vertex_count: int) -> None:
        if isinstance(vertex_count, bool) or not isinstance(vertex_count, (int, np.integer)):
            raise InvalidArgument(
                f"vertex_count must be an integer, got {type(vertex_count).__name__}"
            )
        if vertex_count < 0:
            raise InvalidArgument(f"vertex_count must be >= 0, got {vertex_count}")
        self.vertex_count = int(vertex_count)
        self.adjacency: list[list[int]] = [[] for _ in range(self.vertex_count)]
        self._edge_records = 0
        self._sparse: scipy.sparse.csr_matrix | None = None

    def __repr__(self) -> str:
        return f"Graph(vertex_count={self.vertex_count}, edges={self._edge_records})"

    def __str__(self) -> str:
        # one bracketed neighbor row per vertex, in insertion order
        return "\n".join(
            "[" + ",".join(str(v) for v in nbrs) + "]" for nbrs in self.adjacency
        )

    def _check_vertex(self, v: int) -> None:
        if not 0 <= v < self.vertex_count:
            raise OutOfRange(
                f"vertex {v} out of range for graph with {self.vertex_count} vertices"
            )

    def add_edge(self, u: int, v: int) -> "Graph":
        """Insert the undirected edge (u, v).

        Raises:
            OutOfRange: If u or v is not a valid vertex index.
            InvalidArgument: If u == v.
        """
        self._check_vertex(u)
        self._check_vertex(v)
        if u == v:
            raise InvalidArgument(f"self-loop on vertex {u} is not allowed")
        self.adjacency[u].append(v)
        self.adjacency[v].append(u)
        self._edge_records += 1
        self._sparse = None
        return self

    def randomize(self, p: float, source: RandomSource) -> "Graph":
        """Add each edge (i, j), i < j, independently with probability p.

        Draws exactly one uniform value per unordered pair, in row-major
        pair order, as a single batch of V(V-1)/2 values. An edge is added
        when its value is < p, so p=0 adds nothing and p=1 adds every pair.

        Args:
            p: Edge probability in [0, 1].
            source: Uniform [0, 1) source. SourceUnavailable from the source
                propagates unchanged.

        Raises:
            InvalidArgument: If p is outside [0, 1] (or NaN).
        """
        if not 0.0 <= p <= 1.0:
            raise InvalidArgument(f"p must be in [0, 1], got {p}")

        n = self.vertex_count
        if n < 2:
            return self

        rows, cols = np.triu_indices(n, k=1)
        values = source.draw(len(rows))
        hits = np.flatnonzero(values < p)
        for k in hits:
            self.add_edge(int(rows[k]), int(cols[k]))

        log.debug("Randomized graph n=%d p=%.6f: %d edges", n, p, len(hits))
        return self

    def neighbors(self, v: int) -> list[int]:
        self._check_vertex(v)
        return self.adjacency[v]

    def degree(self, v: int) -> int:
        """Number of edge records incident to v (duplicates count)."""
        self._check_vertex(v)
        return len(self.adjacency[v])

    @property
    def edge_count(self) -> int:
        """Number of add_edge calls, duplicates included."""
        return self._edge_records

    def to_sparse(self) -> scipy.sparse.csr_matrix:
        """Symmetric 0/1 adjacency matrix (duplicates collapsed).

        Built once and reused until the next add_edge. Callers must not
        modify the returned matrix.
        """
        if self._sparse is not None:
            return self._sparse
        n = self.vertex_count
        rows = np.array(
            [u for u, nbrs in enumerate(self.adjacency) for _ in nbrs], dtype=np.int64
        )
        cols = np.array([v for nbrs in self.adjacency for v in nbrs], dtype=np.int64)
        data = np.ones(len(rows), dtype=np.float64)
        mat = scipy.sparse.csr_matrix((data, (rows, cols)), shape=(n, n))
        mat.data[:] = 1.0
        self._sparse = mat
        return mat
