"""Unit tests for the Cluster tree node."""

import unittest

from scene_clustering.products.cluster_tree import Cluster
from scene_clustering.utils.tree import PreOrderIter


class TestCluster(unittest.TestCase):
    def setUp(self) -> None:
        """A root split into two leaves that share two overlap images."""
        self.left = Cluster(value=(0, 1, 2, 3), overlap_image_ids=(3,))
        self.right = Cluster(value=(3, 4, 2), overlap_image_ids=(2,))
        self.root = Cluster(value=(0, 1, 2, 3, 4), children=(self.left, self.right))

    def test_image_ids_is_the_payload(self) -> None:
        self.assertEqual(self.root.image_ids, (0, 1, 2, 3, 4))
        self.assertEqual(len(self.root), 5)

    def test_core_image_ids_drop_overlap(self) -> None:
        self.assertEqual(self.left.core_image_ids(), (0, 1, 2))
        self.assertEqual(self.right.core_image_ids(), (3, 4))
        self.assertEqual(self.root.core_image_ids(), self.root.image_ids)

    def test_all_image_ids(self) -> None:
        self.assertEqual(self.root.all_image_ids(), frozenset(range(5)))
        self.assertEqual(self.right.all_image_ids(), frozenset({2, 3, 4}))

    def test_leaves_keep_child_order(self) -> None:
        leaves = self.root.leaves()

        self.assertEqual(len(leaves), 2)
        self.assertIs(leaves[0], self.left)
        self.assertIs(leaves[1], self.right)
        self.assertIsInstance(leaves[0], Cluster)

    def test_equality_includes_overlap(self) -> None:
        self.assertEqual(self.left, Cluster(value=(0, 1, 2, 3), overlap_image_ids=(3,)))
        self.assertNotEqual(self.left, Cluster(value=(0, 1, 2, 3)))

    def test_preorder_iteration(self) -> None:
        self.assertEqual([len(node.value) for node in PreOrderIter(self.root)], [5, 4, 3])

    def test_repr(self) -> None:
        expected = "\n".join(
            [
                "Cluster (5): [0, 1, 2, 3, 4]",
                "  Leaf (4): [0, 1, 2] + overlap [3]",
                "  Leaf (3): [3, 4] + overlap [2]",
            ]
        )
        self.assertEqual(repr(self.root), expected)


if __name__ == "__main__":
    unittest.main()
