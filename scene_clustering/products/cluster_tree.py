"""Cluster tree data structures built on top of generic trees."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, cast

from scene_clustering.products.scene_graph import ImageId
from scene_clustering.utils.tree import PreOrderIter, Tree


@dataclass(frozen=True)
class Cluster(Tree[tuple[ImageId, ...]]):
    """Tree node holding the images assigned to one cluster of the hierarchy.

    The payload (`value`, also exposed as `image_ids`) lists the images of this node without duplicates: first the
    images the parent's split assigned to it, then `overlap_image_ids`, the images duplicated in from sibling
    groups of that same split.
    """

    overlap_image_ids: tuple[ImageId, ...] = ()

    @property
    def image_ids(self) -> tuple[ImageId, ...]:
        return self.value

    def _child_clusters(self) -> tuple["Cluster", ...]:
        return cast(tuple["Cluster", ...], self.children)

    def core_image_ids(self) -> tuple[ImageId, ...]:
        """Images assigned to this node by the split that created it, excluding overlap images."""
        if not self.overlap_image_ids:
            return self.value
        overlap = set(self.overlap_image_ids)
        return tuple(i for i in self.value if i not in overlap)

    def all_image_ids(self) -> FrozenSet[ImageId]:
        """Return the set of unique image ids contained in this cluster and all descendants."""
        return frozenset(image_id for node in PreOrderIter(self) for image_id in node.value)

    def __len__(self) -> int:
        return len(self.value)

    def __repr__(self) -> str:
        """Return an indented string representation of the cluster tree, showing image ids at each node."""

        def repr_helper(node: "Cluster", indent: int = 0) -> str:
            prefix = " " * indent
            node_type = "Leaf" if node.is_leaf() else "Cluster"
            line = f"{prefix}{node_type} ({len(node.value)}): {list(node.core_image_ids())}"
            if node.overlap_image_ids:
                line += f" + overlap {list(node.overlap_image_ids)}"
            lines = [line]
            for child in node._child_clusters():
                lines.append(repr_helper(child, indent + 2))
            return "\n".join(lines)

        return repr_helper(self)
