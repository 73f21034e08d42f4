"""Multilevel normalized-cut graph partitioner.

The vertex set is split into the requested number of groups by recursive bisection, always splitting the largest
group next. Each bisection follows the usual multilevel scheme: the graph is coarsened by heavy-edge matching,
the coarsest graph is bisected by trying many candidate splits (greedy graph growing from several seeds and a
spectral sweep over the Fiedler vector), and the split is projected back level by level while boundary vertices
are moved greedily.

A bisection (A, B) with cut weight c is scored by max(c / vol(A), c / vol(B)), where vol is the total incident
edge weight of a side. Ties go to the smaller cut, then to the more balanced split, then to the split whose side
containing the smallest image id has the lexicographically smallest sorted id tuple, which makes the result
independent of anything but the image ids and weights.
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass, field
from typing import Optional

import networkx as nx
import numpy as np

import scene_clustering.utils.logger as logger_utils
from scene_clustering.common.exceptions import ConfigurationError
from scene_clustering.graph_partitioner.graph_partitioner_base import GraphPartitionerBase
from scene_clustering.graph_partitioner.partition_utils import (
    WeightedAdjacency,
    cut_weight,
    graph_adjacency,
    min_key,
    normalized_cut_cost,
    restrict_adjacency,
    weighted_degrees,
)
from scene_clustering.products.scene_graph import ImageId

logger = logger_utils.get_logger()

# (cost, cut, imbalance, sorted ids of the side holding the smallest id)
SplitKey = tuple[float, int, int, tuple[ImageId, ...]]


@dataclass
class _Level:
    """One level of the coarsening hierarchy.

    Coarse vertices are named after their smallest member. `node_weights` counts member images and `volumes` sums
    their incident weight in the graph being bisected, so that cut, volume and balance are exact at every level.
    """

    nodes: list[ImageId]
    adjacency: WeightedAdjacency
    node_weights: dict[ImageId, int]
    volumes: dict[ImageId, int]
    # Maps every vertex of the next finer level to its vertex at this level (empty for the finest level).
    fine_to_coarse: dict[ImageId, ImageId] = field(default_factory=dict)

    def external_degree(self, v: ImageId) -> int:
        return sum(self.adjacency[v].values())


@dataclass
class _SplitState:
    """Side A of a bisection with its running cut, volume and weight."""

    side: set[ImageId]
    cut: int
    volume: int
    weight: int


class NormalizedCutPartitioner(GraphPartitionerBase):
    """Graph partitioner minimizing a normalized cut with multilevel recursive bisection."""

    def __init__(
        self,
        min_part_fraction: float = 0.25,
        coarsest_size: int = 32,
        refinement_passes: int = 4,
        max_seeds: int = 32,
        spectral_max_size: int = 256,
    ) -> None:
        """
        Initialize the NormalizedCutPartitioner.

        Args:
            min_part_fraction: each side of a bisection keeps at least this fraction of the images, in (0, 0.5].
            coarsest_size: coarsening stops once a level has at most this many vertices.
            refinement_passes: maximum number of boundary refinement sweeps per level.
            max_seeds: maximum number of seeds used for greedy graph growing on the coarsest level.
            spectral_max_size: largest coarsest level on which the spectral sweep is run (0 disables it).
        """
        super().__init__(process_name="NormalizedCutPartitioner")
        if not 0.0 < min_part_fraction <= 0.5:
            raise ConfigurationError(f"min_part_fraction must be in (0, 0.5], got {min_part_fraction}.")
        if coarsest_size < 2:
            raise ConfigurationError(f"coarsest_size must be at least 2, got {coarsest_size}.")
        if refinement_passes < 0 or max_seeds < 1 or spectral_max_size < 0:
            raise ConfigurationError(
                "refinement_passes and spectral_max_size must be non-negative and max_seeds positive, got "
                f"{refinement_passes}, {spectral_max_size} and {max_seeds}."
            )
        self._min_part_fraction = min_part_fraction
        self._coarsest_size = coarsest_size
        self._refinement_passes = refinement_passes
        self._max_seeds = max_seeds
        self._spectral_max_size = spectral_max_size

    def __repr__(self) -> str:
        return (
            f"NormalizedCutPartitioner(min_part_fraction={self._min_part_fraction}, "
            f"coarsest_size={self._coarsest_size}, refinement_passes={self._refinement_passes}, "
            f"max_seeds={self._max_seeds}, spectral_max_size={self._spectral_max_size})"
        )

    def run(self, graph: nx.Graph, num_parts: int) -> dict[ImageId, int]:
        """Split the graph into `num_parts` groups by repeatedly bisecting the largest group."""
        adjacency = graph_adjacency(graph)
        parts: list[list[ImageId]] = [list(adjacency)]

        while len(parts) < num_parts:
            # Largest part first, ties to the part holding the smaller image id.
            idx = max(range(len(parts)), key=lambda p: (len(parts[p]), -min_key(parts[p])))
            part = parts.pop(idx)
            side_a = self.bisect(restrict_adjacency(adjacency, part))
            parts.append([v for v in part if v in side_a])
            parts.append([v for v in part if v not in side_a])

        parts.sort(key=min_key)
        return {image_id: label for label, part in enumerate(parts) for image_id in part}

    def bisect(self, adjacency: WeightedAdjacency) -> set[ImageId]:
        """Bisect the graph given by `adjacency` (at least two vertices) and return one side."""
        finest = _Level(
            nodes=sorted(adjacency),
            adjacency=adjacency,
            node_weights={v: 1 for v in adjacency},
            volumes=weighted_degrees(adjacency),
        )
        total_weight = len(finest.nodes)
        min_side = max(1, math.ceil(self._min_part_fraction * total_weight))
        min_side = min(min_side, total_weight // 2)

        levels = [finest]
        max_node_weight = max(2, math.ceil(1.5 * total_weight / self._coarsest_size))
        while len(levels[-1].nodes) > self._coarsest_size:
            coarse = self._coarsen(levels[-1], max_node_weight)
            if len(coarse.nodes) > 0.9 * len(levels[-1].nodes):
                break
            levels.append(coarse)

        coarsest = levels[-1]
        side = self._initial_bisection(coarsest, min_side)
        if side is None:
            # Heavy coarse vertices can make the balance constraint infeasible; fall back to any non-empty split.
            min_side = 1
            side = self._initial_bisection(coarsest, min_side)
            if side is None:
                raise RuntimeError(
                    f"{self.process_name} found no bisection of a level with {len(coarsest.nodes)} vertices."
                )
        side = self._refine(coarsest, side, min_side)

        for finer, coarser in zip(reversed(levels[:-1]), reversed(levels[1:])):
            side = {v for v in finer.nodes if coarser.fine_to_coarse[v] in side}
            side = self._refine(finer, side, min_side)

        total_volume = sum(finest.volumes.values())
        cut, volume = self._cut_and_volume(finest, side)
        logger.debug(
            "%s: bisected %d images into %d + %d over %d levels (cut=%d, cost=%.4f)",
            self.process_name,
            total_weight,
            len(side),
            total_weight - len(side),
            len(levels),
            cut,
            normalized_cut_cost(cut, volume, total_volume - volume),
        )
        return side

    def _coarsen(self, level: _Level, max_node_weight: int) -> _Level:
        """Contract a heavy-edge matching of `level` into the next coarser level."""
        match: dict[ImageId, ImageId] = {}
        for u in level.nodes:
            if u in match:
                continue
            best_key: Optional[tuple[int, ImageId]] = None
            for v, w in level.adjacency[u].items():
                if v in match or level.node_weights[u] + level.node_weights[v] > max_node_weight:
                    continue
                key = (-w, v)
                if best_key is None or key < best_key:
                    best_key = key
            if best_key is None:
                match[u] = u
            else:
                partner = best_key[1]
                match[u] = match[partner] = min(u, partner)

        nodes = sorted(set(match.values()))
        adjacency: WeightedAdjacency = {c: {} for c in nodes}
        node_weights = dict.fromkeys(nodes, 0)
        volumes = dict.fromkeys(nodes, 0)
        for u in level.nodes:
            cu = match[u]
            node_weights[cu] += level.node_weights[u]
            volumes[cu] += level.volumes[u]
            for v, w in level.adjacency[u].items():
                cv = match[v]
                if cu != cv:
                    adjacency[cu][cv] = adjacency[cu].get(cv, 0) + w

        return _Level(
            nodes=nodes, adjacency=adjacency, node_weights=node_weights, volumes=volumes, fine_to_coarse=match
        )

    def _initial_bisection(self, level: _Level, min_side: int) -> Optional[set[ImageId]]:
        """Return the best balance-feasible candidate split of the coarsest level, or None if there is none."""
        total_weight = sum(level.node_weights.values())
        best: Optional[tuple[SplitKey, set[ImageId]]] = None

        orderings = [self._growing_order(level, seed) for seed in self._seeds(level)]
        if len(level.nodes) <= self._spectral_max_size:
            orderings.append(self._spectral_order(level))

        for order in orderings:
            candidate = self._best_prefix(level, order, min_side, total_weight)
            if candidate is not None and (best is None or candidate[0] < best[0]):
                best = candidate
        return None if best is None else best[1]

    def _seeds(self, level: _Level) -> list[ImageId]:
        if len(level.nodes) <= self._max_seeds:
            return list(level.nodes)
        step = math.ceil(len(level.nodes) / self._max_seeds)
        return level.nodes[::step]

    def _growing_order(self, level: _Level, seed: ImageId) -> list[ImageId]:
        """Order vertices by greedily growing a region from `seed`, strongest connection to the region first.

        Vertices unreachable from the region are taken in ascending id order.
        """
        visited: set[ImageId] = set()
        order: list[ImageId] = []
        connection: dict[ImageId, int] = {seed: 0}
        heap: list[tuple[int, ImageId]] = [(0, seed)]
        next_unvisited = 0

        while len(order) < len(level.nodes):
            v: Optional[ImageId] = None
            while heap:
                neg_conn, candidate = heapq.heappop(heap)
                if candidate not in visited and -neg_conn == connection[candidate]:
                    v = candidate
                    break
            if v is None:
                while level.nodes[next_unvisited] in visited:
                    next_unvisited += 1
                v = level.nodes[next_unvisited]
            visited.add(v)
            order.append(v)
            for nb, w in level.adjacency[v].items():
                if nb not in visited:
                    connection[nb] = connection.get(nb, 0) + w
                    heapq.heappush(heap, (-connection[nb], nb))
        return order

    def _spectral_order(self, level: _Level) -> list[ImageId]:
        """Order vertices along the Fiedler vector of the normalized Laplacian."""
        index = {v: k for k, v in enumerate(level.nodes)}
        n = len(level.nodes)
        W = np.zeros((n, n), dtype=np.float64)
        for u in level.nodes:
            for v, w in level.adjacency[u].items():
                W[index[u], index[v]] = w
            # Weight internal to a coarse vertex acts as a self-loop.
            W[index[u], index[u]] = level.volumes[u] - level.external_degree(u)
        degrees = np.array([level.volumes[v] for v in level.nodes], dtype=np.float64)
        inv_sqrt = np.zeros(n, dtype=np.float64)
        inv_sqrt[degrees > 0] = 1.0 / np.sqrt(degrees[degrees > 0])

        laplacian = np.eye(n) - inv_sqrt[:, None] * W * inv_sqrt[None, :]
        _, eigenvectors = np.linalg.eigh(laplacian)
        fiedler = np.round(inv_sqrt * eigenvectors[:, 1], decimals=12)
        return sorted(level.nodes, key=lambda v: (fiedler[index[v]], v))

    def _best_prefix(
        self, level: _Level, order: list[ImageId], min_side: int, total_weight: int
    ) -> Optional[tuple[SplitKey, set[ImageId]]]:
        """Evaluate every balance-feasible prefix of `order` as side A and return the best one."""
        total_volume = sum(level.volumes.values())
        state = _SplitState(side=set(), cut=0, volume=0, weight=0)
        best_key: Optional[SplitKey] = None
        best_length = 0

        for length, v in enumerate(order, start=1):
            if state.weight + level.node_weights[v] > total_weight - min_side:
                break
            self._move(level, state, v)
            if state.weight < min_side:
                continue
            imbalance = abs(total_weight - 2 * state.weight)
            cost = normalized_cut_cost(state.cut, state.volume, total_volume - state.volume)
            # Cheap prefilter before materializing the id tuple.
            if best_key is not None and (cost, state.cut, imbalance) > best_key[:3]:
                continue
            key: SplitKey = (cost, state.cut, imbalance, self._canonical_ids(level, state.side))
            if best_key is None or key < best_key:
                best_key, best_length = key, length

        if best_key is None:
            return None
        return best_key, set(order[:best_length])

    @staticmethod
    def _canonical_ids(level: _Level, side: set[ImageId]) -> tuple[ImageId, ...]:
        """Sorted ids of whichever side holds the smallest vertex."""
        if level.nodes[0] in side:
            return tuple(sorted(side))
        return tuple(v for v in level.nodes if v not in side)

    @staticmethod
    def _move(level: _Level, state: _SplitState, v: ImageId) -> None:
        """Move `v` across the split, updating the running cut, volume and weight of side A."""
        joining = v not in state.side
        conn_a = sum(w for nb, w in level.adjacency[v].items() if nb in state.side)
        conn_b = level.external_degree(v) - conn_a
        if joining:
            state.side.add(v)
            state.cut += conn_b - conn_a
            state.volume += level.volumes[v]
            state.weight += level.node_weights[v]
        else:
            state.side.remove(v)
            state.cut += conn_a - conn_b
            state.volume -= level.volumes[v]
            state.weight -= level.node_weights[v]

    @staticmethod
    def _cut_and_volume(level: _Level, side: set[ImageId]) -> tuple[int, int]:
        return cut_weight(level.adjacency, side), sum(level.volumes[u] for u in side)

    def _refine(self, level: _Level, side: set[ImageId], min_side: int) -> set[ImageId]:
        """Greedily move boundary vertices while that lowers (cost, cut, imbalance) and keeps the balance."""
        total_weight = sum(level.node_weights.values())
        total_volume = sum(level.volumes.values())
        cut, volume = self._cut_and_volume(level, side)
        state = _SplitState(
            side=set(side), cut=cut, volume=volume, weight=sum(level.node_weights[v] for v in side)
        )

        def score(s: _SplitState) -> tuple[float, int, int]:
            cost = normalized_cut_cost(s.cut, s.volume, total_volume - s.volume)
            return cost, s.cut, abs(total_weight - 2 * s.weight)

        current = score(state)
        for _ in range(self._refinement_passes):
            boundary = [
                v
                for v in level.nodes
                if any((nb in state.side) != (v in state.side) for nb in level.adjacency[v])
            ]
            moved = False
            for v in boundary:
                delta = level.node_weights[v] if v not in state.side else -level.node_weights[v]
                if not min_side <= state.weight + delta <= total_weight - min_side:
                    continue
                self._move(level, state, v)
                candidate = score(state)
                if candidate < current:
                    current = candidate
                    moved = True
                else:
                    self._move(level, state, v)  # undo
            if not moved:
                break
        return state.side
