"""Exceptions raised by scene clustering before any partitioning work is done."""


class InvalidInputError(ValueError):
    """Raised when the image pairs / weights handed to the graph builder are malformed."""


class ConfigurationError(ValueError):
    """Raised when clustering options or partitioner parameters are inconsistent."""


class AlreadyPartitionedError(RuntimeError):
    """Raised when `SceneClustering.partition` is called on an object that already holds a cluster tree."""
