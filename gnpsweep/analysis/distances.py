"""Breadth-first distance analysis: distances, diameter, connectivity, isolation.

Traversals run on the graph's CSR adjacency matrix through
scipy.sparse.csgraph. All functions treat the graph as read-only.
"""

import logging

import numpy as np
from scipy.sparse.csgraph import connected_components, shortest_path

from gnpsweep.graph.adjacency import Graph, OutOfRange

log = logging.getLogger(__name__)

UNREACHED = -1  # distance sentinel for vertices with no path from start
DISCONNECTED = -1  # diameter sentinel: infinite / undefined diameter


def bfs_distances(graph: Graph, start: int) -> np.ndarray:
    """Hop distances from `start` to every vertex.

    Args:
        graph: Graph to traverse.
        start: Source vertex. Ignored when the graph is empty.

    Returns:
        int64 array of length vertex_count. Entry i is the shortest-path
        edge count from start to i, or UNREACHED.

    Raises:
        OutOfRange: If start is not a vertex of a non-empty graph.
    """
    n = graph.vertex_count
    if n == 0:
        return np.full(0, UNREACHED, dtype=np.int64)
    if not 0 <= start < n:
        raise OutOfRange(f"start vertex {start} out of range for {n} vertices")

    hops = shortest_path(
        graph.to_sparse(), method="D", directed=False, unweighted=True, indices=start
    )
    dist = np.full(n, UNREACHED, dtype=np.int64)
    reached = np.isfinite(hops)
    dist[reached] = hops[reached].astype(np.int64)
    return dist


def diameter(graph: Graph) -> int:
    """Greatest shortest-path distance over all vertex pairs.

    Runs bfs_distances from each vertex in index order and stops at the
    first BFS that leaves a vertex unreached, returning DISCONNECTED without
    running the remaining searches.

    Returns:
        The diameter, 0 for graphs with fewer than two vertices, or
        DISCONNECTED (-1) if the graph is not connected.
    """
    best = 0
    for start in range(graph.vertex_count):
        dist = bfs_distances(graph, start)
        if (dist == UNREACHED).any():
            log.debug("Diameter early exit: BFS from %d left vertices unreached", start)
            return DISCONNECTED
        best = max(best, int(dist.max()))
    return best


def is_isolated(graph: Graph) -> bool:
    """True iff at least one vertex has degree 0. False for an empty graph."""
    return any(not nbrs for nbrs in graph.adjacency)


def is_connected(graph: Graph) -> bool:
    """True iff the graph has a single connected component.

    Graphs with fewer than two vertices are vacuously connected.
    """
    if graph.vertex_count < 2:
        return True
    n_components, _ = connected_components(graph.to_sparse(), directed=False)
    return n_components == 1
