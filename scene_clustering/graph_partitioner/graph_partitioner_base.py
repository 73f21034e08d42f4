"""Base class for graph partitioners."""

from __future__ import annotations

from abc import ABC, abstractmethod

import networkx as nx

from scene_clustering.common.exceptions import ConfigurationError
from scene_clustering.products.scene_graph import ImageId


class GraphPartitionerBase(ABC):
    """Base class for all graph partitioners.

    A graph partitioner splits the vertices of a weighted scene graph into a requested number of disjoint groups,
    so that the cluster tree builder can recurse on each group independently.
    """

    def __init__(self, process_name: str = "GraphPartitioner"):
        """Initialize the base graph partitioner.

        Args:
            process_name: Name of the process, used for logging.
        """
        self.process_name = process_name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(process_name={self.process_name})"

    def partition(self, graph: nx.Graph, num_parts: int) -> list[list[ImageId]] | None:
        """Split the vertices of `graph` into `num_parts` groups.

        Args:
            graph: weighted scene (sub)graph; edge weights are stored under the "weight" attribute.
            num_parts: number of groups requested.

        Returns:
            Exactly `num_parts` non-empty, pairwise-disjoint groups covering every vertex, ordered by their smallest
            image id, each group listing ids in the graph's node order. None if the graph has fewer than
            `num_parts` vertices and therefore cannot be split.
        """
        if num_parts < 1:
            raise ConfigurationError(f"{self.process_name}: num_parts must be at least 1, got {num_parts}.")
        if graph.number_of_nodes() < num_parts:
            return None
        if num_parts == 1:
            return [list(graph.nodes)]

        labels = self.run(graph, num_parts)

        groups: dict[int, list[ImageId]] = {}
        for image_id in graph.nodes:
            groups.setdefault(labels[image_id], []).append(image_id)
        if len(groups) != num_parts:
            raise RuntimeError(f"{self.process_name} produced {len(groups)} groups instead of {num_parts}.")
        return sorted(groups.values(), key=min)

    @abstractmethod
    def run(self, graph: nx.Graph, num_parts: int) -> dict[ImageId, int]:
        """Assign a group label to every vertex.

        Called only with `2 <= num_parts <= graph.number_of_nodes()`; every label in `range(num_parts)` must be used.

        Args:
            graph: weighted scene (sub)graph.
            num_parts: number of groups requested.
        Returns:
            Mapping from image id to group label.
        """
