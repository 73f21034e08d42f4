# Short-name exports for partitioner classes.
#
# Usage (Hydra/Python):
#   _target_: scene_clustering.graph_partitioner.NormalizedCut   # NormalizedCutPartitioner
#   _target_: scene_clustering.graph_partitioner.Sequential      # SequentialPartitioner

from .graph_partitioner_base import GraphPartitionerBase
from .normalized_cut_partitioner import NormalizedCutPartitioner
from .sequential_partitioner import SequentialPartitioner

# Lightweight aliases so configs can reference shorter names.
NormalizedCut = NormalizedCutPartitioner
Sequential = SequentialPartitioner

__all__ = [
    "GraphPartitionerBase",
    "NormalizedCut",
    "NormalizedCutPartitioner",
    "Sequential",
    "SequentialPartitioner",
]
