"""
Defining image pairs, the weighted scene (co-visibility) graph, and the graph builder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import networkx as nx

import scene_clustering.utils.logger as logger_utils
from scene_clustering.common.exceptions import InvalidInputError

logger = logger_utils.get_logger()

ImageId = int
ImageIdPair = tuple[ImageId, ImageId]

WEIGHT = "weight"


def canonical_pair(i: ImageId, j: ImageId) -> ImageIdPair:
    """Return the pair in canonical undirected order, i.e. (min, max)."""
    return (i, j) if i < j else (j, i)


@dataclass(frozen=True)
class SceneGraph:
    """Weighted co-visibility graph over images.

    Attributes:
        image_ids: every image referenced by an edge, in first-seen order.
        edge_weights: summed inlier weight per canonical (i, j) pair, i < j.
        graph: networkx view of the same data; nodes inserted in `image_ids` order, edges carry a "weight".
    """

    image_ids: tuple[ImageId, ...]
    edge_weights: Dict[ImageIdPair, int]
    graph: nx.Graph

    def __len__(self) -> int:
        return len(self.image_ids)

    @property
    def num_edges(self) -> int:
        return len(self.edge_weights)


def build_scene_graph(image_pairs: Sequence[ImageIdPair], weights: Sequence[int]) -> SceneGraph:
    """Build the indexed scene graph from verified image pairs.

    If the same unordered pair occurs more than once, its weights are summed.

    Args:
        image_pairs: (i, j) image id pairs from the matching stage.
        weights: number of verified inliers per pair, index-aligned with `image_pairs`.

    Returns:
        SceneGraph with vertices in first-seen order.

    Raises:
        InvalidInputError: on empty input, length mismatch, negative weight, negative id or self-loop.
    """
    if len(image_pairs) != len(weights):
        raise InvalidInputError(
            f"Got {len(image_pairs)} image pairs but {len(weights)} weights; the sequences must be index-aligned."
        )
    if len(image_pairs) == 0:
        raise InvalidInputError("At least one image pair is required to build a scene graph.")

    image_ids: dict[ImageId, None] = {}  # insertion-ordered set
    edge_weights: dict[ImageIdPair, int] = {}
    num_duplicates = 0
    for (i, j), weight in zip(image_pairs, weights):
        i, j, weight = int(i), int(j), int(weight)
        if weight < 0:
            raise InvalidInputError(f"Image pair ({i}, {j}) has negative weight {weight}.")
        if i < 0 or j < 0:
            raise InvalidInputError(f"Image pair ({i}, {j}) contains a negative image id.")
        if i == j:
            raise InvalidInputError(f"Image pair ({i}, {j}) is a self-loop.")
        image_ids.setdefault(i)
        image_ids.setdefault(j)
        pair = canonical_pair(i, j)
        if pair in edge_weights:
            num_duplicates += 1
        edge_weights[pair] = edge_weights.get(pair, 0) + weight

    if num_duplicates > 0:
        logger.warning("Summed weights of %d duplicate image pairs.", num_duplicates)

    graph = nx.Graph()
    graph.add_nodes_from(image_ids)
    graph.add_weighted_edges_from((i, j, w) for (i, j), w in edge_weights.items())

    component_sizes = sorted((len(c) for c in nx.connected_components(graph)), reverse=True)
    logger.info(
        "Built scene graph with %d images and %d edges; connected component sizes: %s",
        graph.number_of_nodes(),
        graph.number_of_edges(),
        str(component_sizes),
    )
    return SceneGraph(image_ids=tuple(image_ids), edge_weights=edge_weights, graph=graph)


def induced_subgraph(graph: nx.Graph, image_ids: Sequence[ImageId]) -> nx.Graph:
    """Return a standalone copy of the subgraph induced by `image_ids`.

    Nodes are inserted in the order given, so node iteration on the result is deterministic.
    """
    keep = set(image_ids)
    subgraph = nx.Graph()
    subgraph.add_nodes_from(image_ids)
    for i in image_ids:
        for j, data in graph.adj[i].items():
            if j in keep and i < j:
                subgraph.add_edge(i, j, weight=data.get(WEIGHT, 1))
    return subgraph
