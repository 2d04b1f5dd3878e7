import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import polars as pl
import scipy.sparse as sp

from graphtab.core.builders import (
    add_full_graph,
    combine_graphs,
    create_random_graph,
    from_adj_matrix,
)
from graphtab.core.errors import IncompatibleGraphs, OutOfRangeParameter, ShapeMismatch
from graphtab.core.graph import Graph
from graphtab.core.selection import select_nodes_by_id


def _edges(g: Graph) -> list[tuple[int, int]]:
    return list(zip(g.edges.get_column("from"), g.edges.get_column("to")))


class TestCombineGraphs(unittest.TestCase):
    def setUp(self):
        self.a = Graph(nodes={"id": [1, 2, 3], "x": [1, 2, 3]}, edges={"from": [1, 2], "to": [2, 3]})
        self.b = Graph(nodes={"id": [1, 2], "y": ["p", "q"]}, edges={"from": [1], "to": [2]})

    def test_counts_add_up_without_collisions(self):
        g = combine_graphs(self.a, self.b)
        self.assertEqual(g.node_count, 5)
        self.assertEqual(g.edge_count, 3)
        self.assertEqual(len(set(g.node_ids())), 5)
        self.assertEqual(g.node_ids(), [1, 2, 3, 4, 5])
        self.assertEqual(_edges(g)[-1], (4, 5))
        self.assertEqual(g.edge_ids(), [1, 2, 3])
        self.assertEqual((g.last_id, g.last_edge_id), (5, 3))

    def test_columns_aligned(self):
        g = combine_graphs(self.a, self.b)
        self.assertEqual(g.nodes.get_column("x"), [1, 2, 3, None, None])
        self.assertEqual(g.nodes.get_column("y"), [None, None, None, "p", "q"])

    def test_offset_uses_high_water_mark(self):
        a = self.a.remove_node(3)
        g = combine_graphs(a, self.b)
        self.assertEqual(g.node_ids(), [1, 2, 4, 5])

    def test_selection_cleared_and_metadata_from_first(self):
        a = select_nodes_by_id(self.a.with_metadata(name="left"), [1])
        g = combine_graphs(a, self.b.with_metadata(name="right"))
        self.assertTrue(g.selection.is_empty())
        self.assertEqual(g.name, "left")

    def test_directedness_must_match(self):
        u = Graph(directed=False)
        with self.assertRaises(IncompatibleGraphs):
            combine_graphs(self.a, u)


class TestFromAdjMatrix(unittest.TestCase):
    def test_directed_row_major(self):
        g = from_adj_matrix([[0, 1, 1], [0, 0, 0], [1, 0, 0]])
        self.assertTrue(g.directed)
        self.assertEqual(_edges(g), [(1, 2), (1, 3), (3, 1)])

    def test_undirected_lower_triangle(self):
        m = np.array([[0, 1, 1], [1, 0, 0], [1, 0, 0]])
        g = from_adj_matrix(m, mode="undirected")
        self.assertFalse(g.directed)
        self.assertEqual(_edges(g), [(1, 2), (1, 3)])

    def test_diagonal(self):
        m = [[1, 0], [0, 0]]
        self.assertEqual(from_adj_matrix(m).edge_count, 1)
        self.assertEqual(from_adj_matrix(m, use_diag=False).edge_count, 0)

    def test_weighted_and_sparse(self):
        m = sp.csr_matrix(np.array([[0, 2.5], [0, 0]]))
        g = from_adj_matrix(m, weighted=True)
        self.assertEqual(g.edges.get_column("weight"), [2.5])

    def test_polars_names_become_labels(self):
        df = pl.DataFrame({"a": [0, 1], "b": [1, 0]})
        g = from_adj_matrix(df)
        self.assertEqual(g.nodes.get_column("label"), ["a", "b"])

    def test_errors(self):
        with self.assertRaises(ShapeMismatch):
            from_adj_matrix([[0, 1, 0], [1, 0, 0]])
        with self.assertRaises(OutOfRangeParameter):
            from_adj_matrix([[0]], mode="mixed")


class TestAddFullGraph(unittest.TestCase):
    def test_directed_and_undirected_counts(self):
        self.assertEqual(add_full_graph(Graph(), 3).edge_count, 6)
        self.assertEqual(add_full_graph(Graph(directed=False), 3).edge_count, 3)
        self.assertEqual(add_full_graph(Graph(directed=False), 3, keep_loops=True).edge_count, 6)

    def test_labels_type_rel(self):
        g = add_full_graph(Graph(), 3, type="k", rel="r")
        self.assertEqual(g.nodes.get_column("label"), ["1", "2", "3"])
        self.assertEqual(set(g.nodes.get_column("type")), {"k"})
        self.assertEqual(set(g.edges.get_column("rel")), {"r"})
        g2 = add_full_graph(Graph(), 2, label=["x", "y"])
        self.assertEqual(g2.nodes.get_column("label"), ["x", "y"])
        g3 = add_full_graph(Graph(), 2, label=False)
        self.assertEqual(g3.nodes.get_column("label"), [None, None])

    def test_appends_to_existing_graph(self):
        g = Graph(nodes={"id": [1, 2]}, edges={"from": [1], "to": [2]})
        g = add_full_graph(g, 3)
        self.assertEqual(g.node_ids(), [1, 2, 3, 4, 5])
        self.assertEqual(g.nodes.get_column("label")[2:], ["3", "4", "5"])
        self.assertEqual(g.edge_count, 1 + 6)
        self.assertEqual(g.last_id, 5)

    def test_undirected_weights_from_lower_triangle(self):
        w = np.array([[0, 9, 9], [1, 0, 9], [2, 3, 0]])
        g = add_full_graph(Graph(directed=False), 3, edge_wt_matrix=w)
        self.assertEqual(_edges(g), [(1, 2), (1, 3), (2, 3)])
        self.assertEqual(g.edges.get_column("weight"), [1.0, 2.0, 3.0])

    def test_directed_weights_and_names(self):
        w = pl.DataFrame({"a": [0.0, 0.5], "b": [0.25, 0.0]})
        g = add_full_graph(Graph(), 2, edge_wt_matrix=w)
        self.assertEqual(_edges(g), [(1, 2), (2, 1)])
        self.assertEqual(g.edges.get_column("weight"), [0.25, 0.5])
        self.assertEqual(g.nodes.get_column("label"), ["a", "b"])


class TestCreateRandomGraph(unittest.TestCase):
    def test_shape_and_simplicity(self):
        g = create_random_graph(10, 15, seed=3)
        self.assertEqual((g.node_count, g.edge_count), (10, 15))
        pairs = _edges(g)
        self.assertTrue(all(u < v for u, v in pairs))
        self.assertEqual(len(set(pairs)), 15)
        self.assertEqual(pairs, sorted(pairs))

    def test_seeded_runs_repeat(self):
        a = create_random_graph(8, 10, directed=True, seed=42)
        b = create_random_graph(8, 10, directed=True, seed=42)
        self.assertEqual(_edges(a), _edges(b))
        self.assertEqual(a.nodes.get_column("value"), b.nodes.get_column("value"))
        self.assertTrue(all(u != v for u, v in _edges(a)))

    def test_values_and_labels(self):
        g = create_random_graph(20, 5, seed=1)
        self.assertEqual(g.nodes.get_column("label")[:3], ["1", "2", "3"])
        for v in g.nodes.get_column("value"):
            self.assertTrue(0 <= v <= 10)
            self.assertEqual((v * 2) % 1, 0)

    def test_fully_connected(self):
        g = create_random_graph(12, 11, fully_connected=True, seed=7)
        self.assertTrue(all(g.degree(n) >= 1 for n in g.node_ids()))
        with self.assertRaises(OutOfRangeParameter):
            create_random_graph(12, 5, fully_connected=True)

    def test_fully_connected_without_edges(self):
        with self.assertRaises(OutOfRangeParameter):
            create_random_graph(5, 0, fully_connected=True, seed=1)
        with self.assertRaises(OutOfRangeParameter):
            create_random_graph(1, 0, fully_connected=True)

    def test_complete_pair_sets(self):
        full = [(u, v) for u in range(1, 6) for v in range(u + 1, 6)]
        self.assertEqual(_edges(create_random_graph(5, 10, seed=2)), full)
        self.assertEqual(_edges(create_random_graph(5, 10, fully_connected=True, seed=2)), full)
        ordered = [(u, v) for u in range(1, 5) for v in range(1, 5) if u != v]
        self.assertEqual(_edges(create_random_graph(4, 12, directed=True, seed=2)), ordered)

    def test_sparse_graph_on_many_nodes(self):
        g = create_random_graph(20000, 10, seed=1)
        self.assertEqual((g.node_count, g.edge_count), (20000, 10))
        pairs = _edges(g)
        self.assertEqual(len(set(pairs)), 10)
        self.assertTrue(all(1 <= u < v <= 20000 for u, v in pairs))

    def test_too_many_edges(self):
        with self.assertRaises(OutOfRangeParameter):
            create_random_graph(4, 7)
        self.assertEqual(create_random_graph(4, 12, directed=True).edge_count, 12)


if __name__ == "__main__":
    unittest.main()
