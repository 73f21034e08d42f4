"""Hierarchical scene clustering with overlap.

The scene graph (images as vertices, verified inlier counts as edge weights) is partitioned with a normalized-cut
graph partitioner into a tree of clusters. Clusters are split until they hold at most `leaf_max_num_images`
images, and every child borrows up to `image_overlap` strongly connected images from its siblings so that the
results of independent per-leaf reconstructions can be merged later.
"""

from __future__ import annotations

from typing import Optional, Sequence

import networkx as nx
from dask.distributed import Client

import scene_clustering.utils.logger as logger_utils
import scene_clustering.utils.tree_dask as tree_dask
from scene_clustering.cluster_tree_builder import ClusterTreeBuilder
from scene_clustering.common.exceptions import AlreadyPartitionedError, ConfigurationError
from scene_clustering.graph_partitioner.graph_partitioner_base import GraphPartitionerBase
from scene_clustering.graph_partitioner.normalized_cut_partitioner import NormalizedCutPartitioner
from scene_clustering.options import SceneClusteringOptions
from scene_clustering.products.cluster_tree import Cluster
from scene_clustering.products.scene_graph import ImageId, ImageIdPair, build_scene_graph

logger = logger_utils.get_logger()


class SceneClustering:
    """Owns the cluster tree of one scene; `partition` builds it once, the accessors read it."""

    def __init__(
        self,
        options: Optional[SceneClusteringOptions] = None,
        partitioner: Optional[GraphPartitionerBase] = None,
    ) -> None:
        """
        Args:
            options: tree shape options; defaults to `SceneClusteringOptions()`.
            partitioner: graph partitioner used at every split; defaults to `NormalizedCutPartitioner()`.
        """
        self.options = options if options is not None else SceneClusteringOptions()
        self.partitioner = partitioner if partitioner is not None else NormalizedCutPartitioner()
        self._root_cluster: Optional[Cluster] = None

    def __repr__(self) -> str:
        return f"SceneClustering(options={self.options}, partitioner={self.partitioner})"

    def partition(
        self,
        image_pairs: Sequence[ImageIdPair],
        weights: Sequence[int],
        client: Optional[Client] = None,
    ) -> Cluster:
        """Build the cluster tree from verified image pairs.

        Args:
            image_pairs: (i, j) image id pairs.
            weights: number of verified inliers per pair, index-aligned with `image_pairs`.
            client: optional Dask client; when given, the subtrees below the root are built concurrently.

        Returns:
            The root cluster, also available through `get_root_cluster`.

        Raises:
            AlreadyPartitionedError: if this object already holds a tree.
            ConfigurationError: if the options are invalid.
            InvalidInputError: if the pairs or weights are malformed.
        """
        if self._root_cluster is not None:
            raise AlreadyPartitionedError("SceneClustering.partition may only be called once per object.")
        if not self.options.check():
            raise ConfigurationError(f"Invalid scene clustering options: {self.options}")

        scene_graph = build_scene_graph(image_pairs, weights)
        builder = ClusterTreeBuilder(self.options, self.partitioner)
        logger.info("Partitioning %d images with %s", len(scene_graph), self.options)

        if client is None:
            root = builder.build(scene_graph.graph, scene_graph.image_ids)
        else:
            root = self._build_with_client(client, builder, scene_graph.graph, list(scene_graph.image_ids))

        self._root_cluster = root
        self.log_partition_details()
        return root

    @staticmethod
    def _build_with_client(
        client: Client, builder: ClusterTreeBuilder, graph: nx.Graph, image_ids: list[ImageId]
    ) -> Cluster:
        """Split the root locally, then build each child subtree as a Dask task."""
        child_specs = builder.split(graph, image_ids)
        if child_specs is None:
            return builder.build(graph, image_ids)

        futures = tree_dask.submit_subtree_builds(client, builder.build, graph, child_specs)
        children = tree_dask.gather_subtrees(client, futures)
        return Cluster(value=tuple(image_ids), children=children)

    def get_root_cluster(self) -> Optional[Cluster]:
        """Return the root of the cluster tree, or None before `partition` has been called."""
        return self._root_cluster

    def get_leaf_clusters(self) -> list[Cluster]:
        """Return every leaf cluster once, in left-to-right depth-first order."""
        if self._root_cluster is None:
            return []
        return list(self._root_cluster.leaves())

    def log_partition_details(self) -> None:
        """Log the cluster tree structure and leaf size statistics."""
        if self._root_cluster is None:
            logger.info("0 leaf clusters found.")
            return

        leaf_sizes = [len(leaf) for leaf in self.get_leaf_clusters()]
        logger.info(
            "Cluster tree: %d nodes, depth %d, %d leaves with %d-%d images",
            self._root_cluster.num_nodes(),
            self._root_cluster.depth(),
            len(leaf_sizes),
            min(leaf_sizes),
            max(leaf_sizes),
        )
        logger.debug("Cluster Tree:\n%s", self._root_cluster)
