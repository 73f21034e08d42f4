"""Unit tests for the scene graph builder."""

import unittest

from scene_clustering.common.exceptions import InvalidInputError
from scene_clustering.products.scene_graph import (
    build_scene_graph,
    canonical_pair,
    induced_subgraph,
)


class TestSceneGraph(unittest.TestCase):
    def test_vertices_in_first_seen_order(self) -> None:
        """Image ids are listed in the order they first appear in the pairs."""
        scene_graph = build_scene_graph([(7, 3), (3, 9), (1, 7)], [5, 6, 7])

        self.assertEqual(scene_graph.image_ids, (7, 3, 9, 1))
        self.assertEqual(list(scene_graph.graph.nodes), [7, 3, 9, 1])
        self.assertEqual(len(scene_graph), 4)

    def test_edges_are_canonical(self) -> None:
        scene_graph = build_scene_graph([(7, 3), (3, 9)], [5, 6])

        self.assertDictEqual(scene_graph.edge_weights, {(3, 7): 5, (3, 9): 6})
        self.assertEqual(scene_graph.graph[7][3]["weight"], 5)
        self.assertEqual(scene_graph.num_edges, 2)

    def test_duplicate_pairs_sum_weights(self) -> None:
        """The same unordered pair given twice, in either orientation, accumulates its weights."""
        scene_graph = build_scene_graph([(0, 1), (1, 2), (1, 0)], [10, 3, 4])

        self.assertDictEqual(scene_graph.edge_weights, {(0, 1): 14, (1, 2): 3})
        self.assertEqual(scene_graph.graph[0][1]["weight"], 14)

    def test_zero_weight_edge_is_kept(self) -> None:
        scene_graph = build_scene_graph([(0, 1), (1, 2)], [0, 3])

        self.assertEqual(scene_graph.image_ids, (0, 1, 2))
        self.assertEqual(scene_graph.edge_weights[(0, 1)], 0)

    def test_length_mismatch_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            build_scene_graph([(0, 1), (1, 2)], [1])

    def test_empty_input_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            build_scene_graph([], [])

    def test_negative_weight_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            build_scene_graph([(0, 1), (1, 2)], [1, -1])

    def test_self_loop_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            build_scene_graph([(0, 1), (2, 2)], [1, 1])

    def test_negative_id_raises(self) -> None:
        with self.assertRaises(InvalidInputError):
            build_scene_graph([(0, -1)], [1])

    def test_invalid_input_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            build_scene_graph([(0, 1)], [])

    def test_induced_subgraph(self) -> None:
        """Only edges with both endpoints inside are kept, nodes follow the requested order."""
        scene_graph = build_scene_graph([(0, 1), (1, 2), (2, 3), (0, 3)], [1, 2, 3, 4])

        subgraph = induced_subgraph(scene_graph.graph, [2, 0, 1])

        self.assertEqual(list(subgraph.nodes), [2, 0, 1])
        self.assertSetEqual({tuple(sorted(e)) for e in subgraph.edges}, {(0, 1), (1, 2)})
        self.assertEqual(subgraph[1][2]["weight"], 2)

    def test_canonical_pair(self) -> None:
        self.assertEqual(canonical_pair(4, 2), (2, 4))
        self.assertEqual(canonical_pair(2, 4), (2, 4))


if __name__ == "__main__":
    unittest.main()
