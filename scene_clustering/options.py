"""Options controlling the hierarchical scene clustering."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SceneClusteringOptions:
    """Configuration of the cluster tree.

    Fields:
        branching: number of children created at every split of the hierarchy.
        image_overlap: number of images each child borrows from its siblings at the split that creates it.
        leaf_max_num_images: maximum number of (non-overlap) images in a leaf; larger clusters are split further.
            A leaf therefore holds at most `leaf_max_num_images + image_overlap` images.
    """

    branching: int = 2
    image_overlap: int = 50
    leaf_max_num_images: int = 500

    def check(self) -> bool:
        """Return True iff the options are consistent and can be used for partitioning."""
        return self.branching >= 2 and self.leaf_max_num_images >= 1 and self.image_overlap >= 0
