"""Recursive construction of the overlapping cluster tree."""

from __future__ import annotations

from typing import Optional, Sequence

import networkx as nx

import scene_clustering.utils.logger as logger_utils
from scene_clustering.graph_partitioner.graph_partitioner_base import GraphPartitionerBase
from scene_clustering.options import SceneClusteringOptions
from scene_clustering.products.cluster_tree import Cluster
from scene_clustering.products.scene_graph import WEIGHT, ImageId, induced_subgraph

logger = logger_utils.get_logger()


class ClusterTreeBuilder:
    """Builds a cluster subtree by recursively splitting images with a graph partitioner and adding overlap.

    Each child of a split is an enlarged group: the images the partitioner assigned to it followed by overlap
    images borrowed from its siblings. The child's own split then distributes all of these images, so overlap
    images reach the leaves below it. A child's overlap is capped so that it stays strictly smaller than its
    parent, which bounds the depth of the tree.
    """

    def __init__(self, options: SceneClusteringOptions, partitioner: GraphPartitionerBase) -> None:
        self.options = options
        self.partitioner = partitioner

    def split(
        self, graph: nx.Graph, image_ids: Sequence[ImageId]
    ) -> Optional[list[tuple[list[ImageId], list[ImageId]]]]:
        """Split the images of one node into child groups with their overlap images.

        Args:
            graph: full scene graph.
            image_ids: all images of the node (its group followed by its own overlap images).

        Returns:
            One (group image ids, overlap image ids) tuple per child, or None if the node is a leaf.
        """
        if len(image_ids) <= self.options.leaf_max_num_images:
            return None

        subgraph = induced_subgraph(graph, image_ids)
        groups = self.partitioner.partition(subgraph, self.options.branching)
        if groups is None:
            logger.warning(
                "Cannot split %d images into %d groups; keeping a leaf above the %d image limit.",
                len(image_ids),
                self.options.branching,
                self.options.leaf_max_num_images,
            )
            return None

        overlaps = select_overlap_images(subgraph, groups, self.options.image_overlap)
        # Enlarged children stay strictly smaller than the node.
        overlaps = [overlap[: len(image_ids) - len(group) - 1] for group, overlap in zip(groups, overlaps)]
        logger.debug(
            "Split %d images into groups of sizes %s with overlap sizes %s",
            len(image_ids),
            [len(g) for g in groups],
            [len(o) for o in overlaps],
        )
        return list(zip(groups, overlaps))

    def build(
        self, graph: nx.Graph, group_ids: Sequence[ImageId], overlap_ids: Sequence[ImageId] = ()
    ) -> Cluster:
        """Recursively build and return the subtree rooted at a node holding `group_ids` plus `overlap_ids`."""
        image_ids = tuple(group_ids) + tuple(overlap_ids)
        child_specs = self.split(graph, image_ids)
        if child_specs is None:
            return Cluster(value=image_ids, overlap_image_ids=tuple(overlap_ids))

        children = tuple(self.build(graph, group, overlap) for group, overlap in child_specs)
        return Cluster(value=image_ids, children=children, overlap_image_ids=tuple(overlap_ids))


def select_overlap_images(
    graph: nx.Graph, groups: Sequence[Sequence[ImageId]], image_overlap: int
) -> list[list[ImageId]]:
    """Pick, for every group, up to `image_overlap` images of the other groups to duplicate into it.

    Candidates are images outside the group joined to it by at least one edge, ranked by their total edge weight
    into the group (strongest first), ties by ascending image id.

    Args:
        graph: the subgraph that was split.
        groups: disjoint image groups of one split.
        image_overlap: maximum number of overlap images per group.

    Returns:
        Overlap image ids per group, in rank order.
    """
    if image_overlap == 0:
        return [[] for _ in groups]

    label = {image_id: k for k, group in enumerate(groups) for image_id in group}
    scores: list[dict[ImageId, int]] = [{} for _ in groups]
    for i, j, data in graph.edges(data=True):
        label_i, label_j = label[i], label[j]
        if label_i == label_j:
            continue
        w = int(data.get(WEIGHT, 1))
        scores[label_i][j] = scores[label_i].get(j, 0) + w
        scores[label_j][i] = scores[label_j].get(i, 0) + w

    return [
        [image_id for image_id, _ in sorted(candidates.items(), key=lambda kv: (-kv[1], kv[0]))[:image_overlap]]
        for candidates in scores
    ]
