from scene_clustering.common.exceptions import AlreadyPartitionedError, ConfigurationError, InvalidInputError
from scene_clustering.options import SceneClusteringOptions
from scene_clustering.products.cluster_tree import Cluster
from scene_clustering.scene_clustering import SceneClustering

__all__ = [
    "AlreadyPartitionedError",
    "Cluster",
    "ConfigurationError",
    "InvalidInputError",
    "SceneClustering",
    "SceneClusteringOptions",
]
