"""Utility helpers shared across graph partitioners."""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Sequence

import networkx as nx

from scene_clustering.products.scene_graph import WEIGHT, ImageId

WeightedAdjacency = dict[ImageId, dict[ImageId, int]]


def min_key(keys: Iterable[ImageId]) -> int:
    """Return smallest key or a large sentinel for empty collections."""
    return min(keys, default=10**18)


def graph_adjacency(graph: nx.Graph, keys: Iterable[ImageId] | None = None) -> WeightedAdjacency:
    """Build a weighted undirected adjacency map, optionally restricted to the subgraph induced by `keys`.

    Nodes appear in the graph's node order (or the order of `keys`); self-loops are dropped.
    """
    nodes = list(graph.nodes) if keys is None else list(keys)
    keep = set(nodes)
    adjacency: WeightedAdjacency = {}
    for i in nodes:
        adjacency[i] = {
            j: int(data.get(WEIGHT, 1)) for j, data in graph.adj[i].items() if j != i and j in keep
        }
    return adjacency


def restrict_adjacency(
    adjacency: Mapping[ImageId, Mapping[ImageId, int]], keys: Sequence[ImageId]
) -> WeightedAdjacency:
    """Return the adjacency of the subgraph induced by `keys`."""
    keep = set(keys)
    return {i: {j: w for j, w in adjacency[i].items() if j in keep} for i in keys}


def weighted_degrees(adjacency: Mapping[ImageId, Mapping[ImageId, int]]) -> dict[ImageId, int]:
    """Total incident edge weight per vertex."""
    return {i: sum(neighbors.values()) for i, neighbors in adjacency.items()}


def cut_weight(adjacency: Mapping[ImageId, Mapping[ImageId, int]], side: set[ImageId]) -> int:
    """Sum of the weights of edges with exactly one endpoint in `side`."""
    return sum(w for i in side for j, w in adjacency[i].items() if j not in side)


def normalized_cut_cost(cut: int, volume_a: int, volume_b: int) -> float:
    """Largest ratio of cut weight to side volume over the two sides of a bisection.

    A side without any incident weight costs nothing when the cut is empty and is infinitely bad otherwise.
    """

    def ratio(volume: int) -> float:
        if volume > 0:
            return cut / volume
        return 0.0 if cut == 0 else math.inf

    return max(ratio(volume_a), ratio(volume_b))


def partition_local_keys(keys: list[ImageId], num_bins: int) -> list[list[ImageId]]:
    """Deterministically split keys into balanced contiguous bins, larger bins first."""
    n = len(keys)
    base = n // num_bins
    rem = n % num_bins
    bins: list[list[ImageId]] = []
    start = 0
    for idx in range(num_bins):
        size = base + (1 if idx < rem else 0)
        bins.append(keys[start : start + size])
        start += size
    return bins
