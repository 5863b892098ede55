"""Graph representation for G(n, p) trials."""

from gnpsweep.graph.adjacency import Graph, InvalidArgument, OutOfRange

__all__ = [
    "Graph",
    "InvalidArgument",
    "OutOfRange",
]
