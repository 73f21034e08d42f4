"""Generic immutable rooted trees used to hold cluster hierarchies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, Tuple, TypeVar, cast

T = TypeVar("T")
U = TypeVar("U")
Self = TypeVar("Self", bound="Tree[Any]")


@dataclass(frozen=True)
class Tree(Generic[T]):
    """Immutable rooted tree node storing a payload and an ordered tuple of child subtrees."""

    value: T
    children: Tuple["Tree[T]", ...] = ()

    def is_leaf(self) -> bool:
        """Return True if this node has no children."""
        return len(self.children) == 0

    def leaves(self: Self) -> Tuple[Self, ...]:
        """Return leaf nodes in left-to-right depth-first order."""
        if self.is_leaf():
            return (self,)
        leaves: list[Self] = []
        for child in self.children:
            leaves.extend(cast(Self, child).leaves())
        return tuple(leaves)

    def depth(self) -> int:
        """Number of edges on the longest root-to-leaf path."""
        return self.fold(lambda _, child_depths: 1 + max(child_depths) if child_depths else 0)

    def num_nodes(self) -> int:
        return self.fold(lambda _, child_counts: 1 + sum(child_counts))

    def fold(self, fn: Callable[[T, Tuple[U, ...]], U]) -> U:
        """Reduce the tree bottom-up.

        Args:
            fn: called once per node with the node payload and the tuple of results already computed for its
                children (an empty tuple at the leaves).

        Returns:
            The value produced by `fn` at the root.

        Example:
            tree = Tree(1, (Tree(2), Tree(3, (Tree(4),))))
            tree.fold(lambda v, children: v + sum(children))  # yields 10
        """
        child_results = tuple(child.fold(fn) for child in self.children)
        return fn(self.value, child_results)


class PreOrderIter(Generic[T]):
    """Iterator over nodes in a pre-order traversal (parent before children)."""

    def __init__(self, root: Tree[T]) -> None:
        self.root = root

    def __iter__(self) -> Iterator[Tree[T]]:
        yield self.root
        for child in self.root.children:
            yield from PreOrderIter(child)
