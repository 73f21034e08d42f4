"""Unit tests for the multilevel normalized-cut partitioner."""

from __future__ import annotations

import itertools
import unittest
from unittest.mock import patch

import networkx as nx

from scene_clustering.common.exceptions import ConfigurationError
from scene_clustering.graph_partitioner import NormalizedCut, NormalizedCutPartitioner
from scene_clustering.graph_partitioner.partition_utils import graph_adjacency


def _clique_chain(num_cliques: int, clique_size: int, internal_weight: int = 10, bridge_weight: int = 1) -> nx.Graph:
    """Cliques of consecutive ids, consecutive cliques joined by a single weak edge."""
    graph = nx.Graph()
    for c in range(num_cliques):
        members = range(c * clique_size, (c + 1) * clique_size)
        graph.add_weighted_edges_from((i, j, internal_weight) for i, j in itertools.combinations(members, 2))
        if c > 0:
            graph.add_edge(c * clique_size - 1, c * clique_size, weight=bridge_weight)
    return graph


def _grid(rows: int, cols: int) -> nx.Graph:
    graph = nx.Graph()
    for r in range(rows):
        for c in range(cols):
            if c + 1 < cols:
                graph.add_edge(r * cols + c, r * cols + c + 1, weight=1)
            if r + 1 < rows:
                graph.add_edge(r * cols + c, (r + 1) * cols + c, weight=1)
    return graph


class TestNormalizedCutPartitioner(unittest.TestCase):
    def setUp(self) -> None:
        self.partitioner = NormalizedCutPartitioner()

    def assert_valid_partition(self, graph: nx.Graph, groups: list[list[int]], num_parts: int) -> None:
        self.assertEqual(len(groups), num_parts)
        self.assertTrue(all(groups))
        flat = [v for group in groups for v in group]
        self.assertEqual(len(flat), len(set(flat)))
        self.assertSetEqual(set(flat), set(graph.nodes))
        self.assertEqual([min(g) for g in groups], sorted(min(g) for g in groups))

    def test_two_cliques_split_at_weak_edge(self) -> None:
        graph = _clique_chain(num_cliques=2, clique_size=5)

        groups = self.partitioner.partition(graph, 2)

        self.assertEqual(groups, [[0, 1, 2, 3, 4], [5, 6, 7, 8, 9]])

    def test_three_cliques_three_parts(self) -> None:
        graph = _clique_chain(num_cliques=3, clique_size=5)

        groups = self.partitioner.partition(graph, 3)

        self.assertEqual(groups, [list(range(0, 5)), list(range(5, 10)), list(range(10, 15))])

    def test_disconnected_components_are_separated(self) -> None:
        graph = _clique_chain(num_cliques=2, clique_size=10)
        graph.remove_edge(9, 10)

        groups = self.partitioner.partition(graph, 2)

        self.assertEqual(groups, [list(range(10)), list(range(10, 20))])

    def test_edgeless_graph_is_split_evenly(self) -> None:
        graph = nx.Graph()
        graph.add_nodes_from(range(6))

        groups = self.partitioner.partition(graph, 2)

        self.assertEqual(groups, [[0, 1, 2], [3, 4, 5]])

    def test_grid_parts_are_balanced(self) -> None:
        """A 20x20 grid split in four keeps every part reasonably large."""
        graph = _grid(20, 20)

        groups = self.partitioner.partition(graph, 4)

        self.assert_valid_partition(graph, groups, 4)
        for group in groups:
            self.assertGreaterEqual(len(group), 25)

    def test_groups_follow_graph_node_order(self) -> None:
        graph = nx.Graph()
        graph.add_nodes_from([9, 2, 7, 0, 5, 3])
        graph.add_weighted_edges_from([(9, 7, 10), (7, 5, 10), (9, 5, 10), (2, 0, 10), (0, 3, 10), (2, 3, 10)])
        graph.add_edge(5, 3, weight=1)

        groups = self.partitioner.partition(graph, 2)

        self.assertEqual(groups, [[2, 0, 3], [9, 7, 5]])

    def test_insertion_order_does_not_change_result(self) -> None:
        graph = _clique_chain(num_cliques=3, clique_size=6, bridge_weight=3)
        shuffled = nx.Graph()
        edges = sorted(graph.edges(data="weight"), key=lambda e: (e[1] * 7 + e[0] * 13) % 23)
        shuffled.add_weighted_edges_from(edges)

        expected = [sorted(g) for g in self.partitioner.partition(graph, 3)]
        actual = [sorted(g) for g in self.partitioner.partition(shuffled, 3)]

        self.assertEqual(actual, expected)

    def test_bisect_respects_min_part_fraction(self) -> None:
        """A single pendant vertex is not cut off when the balance constraint forbids it."""
        graph = _clique_chain(num_cliques=1, clique_size=7)
        graph.add_edge(6, 7, weight=1)

        side = NormalizedCutPartitioner(min_part_fraction=0.25).bisect(graph_adjacency(graph))

        self.assertGreaterEqual(len(side), 2)
        self.assertLessEqual(len(side), 6)

    def test_multilevel_path_is_split_in_the_middle(self) -> None:
        """A long path exercises coarsening and refinement; the best cut is a single edge near the center."""
        graph = nx.path_graph(200)
        nx.set_edge_attributes(graph, 1, "weight")

        groups = NormalizedCutPartitioner(coarsest_size=8).partition(graph, 2)

        self.assert_valid_partition(graph, groups, 2)
        self.assertEqual(groups[0], list(range(len(groups[0]))))
        self.assertGreaterEqual(len(groups[0]), 50)
        self.assertGreaterEqual(len(groups[1]), 50)

    def test_single_part_and_too_few_nodes(self) -> None:
        graph = _clique_chain(num_cliques=1, clique_size=3)

        self.assertEqual(self.partitioner.partition(graph, 1), [[0, 1, 2]])
        self.assertIsNone(self.partitioner.partition(graph, 4))

    def test_invalid_num_parts_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            self.partitioner.partition(_clique_chain(1, 3), 0)

    def test_invalid_parameters_raise(self) -> None:
        with self.assertRaises(ConfigurationError):
            NormalizedCutPartitioner(min_part_fraction=0.0)
        with self.assertRaises(ConfigurationError):
            NormalizedCutPartitioner(min_part_fraction=0.6)
        with self.assertRaises(ConfigurationError):
            NormalizedCutPartitioner(coarsest_size=1)
        with self.assertRaises(ConfigurationError):
            NormalizedCutPartitioner(max_seeds=0)

    def test_missing_bisection_raises(self) -> None:
        partitioner = NormalizedCutPartitioner()
        graph = _clique_chain(num_cliques=2, clique_size=3)

        with patch.object(NormalizedCutPartitioner, "_initial_bisection", return_value=None):
            with self.assertRaises(RuntimeError):
                partitioner.partition(graph, 2)

    def test_alias(self) -> None:
        self.assertIs(NormalizedCut, NormalizedCutPartitioner)


if __name__ == "__main__":
    unittest.main()
