"""Graph partitioner that splits images into contiguous runs of ids.

Useful for sequential captures (video, drone strips) where neighbouring ids are co-visible, and as a cheap baseline.
"""

import networkx as nx

import scene_clustering.utils.logger as logger_utils
from scene_clustering.graph_partitioner.graph_partitioner_base import GraphPartitionerBase
from scene_clustering.graph_partitioner.partition_utils import partition_local_keys
from scene_clustering.products.scene_graph import ImageId

logger = logger_utils.get_logger()


class SequentialPartitioner(GraphPartitionerBase):
    """Graph partitioner that ignores edge weights and bins the sorted image ids into balanced contiguous groups."""

    def __init__(self):
        """Initialize the partitioner."""
        super().__init__(process_name="SequentialPartitioner")

    def run(self, graph: nx.Graph, num_parts: int) -> dict[ImageId, int]:
        """Assign the sorted ids to `num_parts` contiguous bins.

        Args:
            graph: input scene graph.
            num_parts: number of bins.

        Returns:
            Mapping from image id to bin index.
        """
        bins = partition_local_keys(sorted(graph.nodes), num_parts)
        logger.debug("SequentialPartitioner: split %d images into bins of sizes %s", len(graph), [len(b) for b in bins])
        return {image_id: label for label, keys in enumerate(bins) for image_id in keys}
