import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from graphtab.core.errors import DanglingReference, OutOfRangeParameter, ProtectedColumn
from graphtab.core.graph import Graph
from graphtab.core.selection import Selection, select_edges_by_edge_id, select_nodes_by_id


def _triangle(directed=True) -> Graph:
    return Graph(
        nodes={"id": [1, 2, 3]},
        edges={"from": [1, 1, 2], "to": [2, 3, 3]},
        directed=directed,
    )


class TestGraphConstruction(unittest.TestCase):
    def test_empty_graph(self):
        g = Graph()
        self.assertTrue(g.is_empty())
        self.assertEqual((g.node_count, g.edge_count, g.last_id, g.last_edge_id), (0, 0, 0, 0))

    def test_edge_ids_generated(self):
        g = _triangle()
        self.assertEqual(g.edge_ids(), [1, 2, 3])
        self.assertEqual(g.last_edge_id, 3)

    def test_dangling_edge_rejected(self):
        with self.assertRaises(DanglingReference):
            Graph(nodes={"id": [1]}, edges={"from": [1], "to": [2]})

    def test_bad_time(self):
        with self.assertRaises(OutOfRangeParameter):
            Graph(time="yesterday")
        g = Graph(time="2024-03-01T12:00:00", name="g1")
        self.assertEqual(g.tz, "GMT")
        self.assertEqual(g.with_metadata(tz="UTC").tz, "UTC")


class TestStructuralOps(unittest.TestCase):
    def test_add_node_allocates_and_never_reuses(self):
        g, a = Graph().add_node(type="t", label="a")
        g, b = g.add_node()
        self.assertEqual((a, b), (1, 2))
        g = g.remove_node(b)
        g, c = g.add_node()
        self.assertEqual(c, 3)
        self.assertEqual(g.last_id, 3)
        self.assertEqual(g.node_ids(), [1, 3])

    def test_add_node_extra_attrs(self):
        g, n = Graph().add_node(label="x", value=2.5)
        self.assertEqual(g.nodes.get_column("value"), [2.5])
        with self.assertRaises(ProtectedColumn):
            g.add_node(id=9)

    def test_values_are_immutable(self):
        g = _triangle()
        g2, _ = g.add_node()
        g3 = g2.add_edge(1, 4)
        self.assertEqual(g.node_count, 3)
        self.assertEqual(g.edge_count, 3)
        self.assertEqual(g2.edge_count, 3)
        self.assertEqual(g3.edge_count, 4)
        self.assertEqual(g.degree(1, "out"), 2)
        self.assertEqual(g3.degree(1, "out"), 3)

    def test_add_n_nodes(self):
        g = Graph().add_n_nodes(3, type="x", label=["a", "b", "c"])
        self.assertEqual(g.node_ids(), [1, 2, 3])
        self.assertEqual(g.nodes.get_column("type"), ["x", "x", "x"])
        with self.assertRaises(OutOfRangeParameter):
            g.add_n_nodes(2, label=["only one"])

    def test_add_edge_dangling(self):
        g = _triangle()
        with self.assertRaises(DanglingReference):
            g.add_edge(1, 99)
        self.assertEqual(g.edge_count, 3)

    def test_degree(self):
        g = _triangle()
        self.assertEqual(g.degree(1, "out"), 2)
        self.assertEqual(g.degree(3, "in"), 2)
        self.assertEqual(g.degree(2), 2)
        self.assertEqual(g.neighbors(2, "out"), frozenset({3}))
        self.assertEqual(g.neighbors(2), frozenset({1, 3}))
        with self.assertRaises(OutOfRangeParameter):
            g.degree(1, "sideways")

    def test_undirected_ignores_direction_and_counts_loops_twice(self):
        g = Graph(nodes={"id": [1, 2]}, edges={"from": [1, 1], "to": [1, 2]}, directed=False)
        self.assertEqual(g.degree(1), 3)
        self.assertEqual(g.degree(1, "in"), 3)
        self.assertEqual(g.loops(1), 1)
        self.assertEqual(g.neighbors(2, "out"), frozenset({1}))

    def test_remove_node_cascades(self):
        g = _triangle()
        g2 = g.remove_node(1)
        self.assertEqual(g2.edge_count, 1)
        ends = set(g2.edges.get_column("from")) | set(g2.edges.get_column("to"))
        self.assertNotIn(1, ends)
        self.assertEqual(g2.degree(3, "in"), 1)
        with self.assertRaises(DanglingReference):
            g2.remove_node(1)

    def test_remove_node_prunes_selection(self):
        g = select_nodes_by_id(_triangle(), [1, 2])
        g = select_edges_by_edge_id(g, [1, 3])
        g2 = g.remove_node(1)
        self.assertEqual(g2.selection, Selection({2}, {3}))

    def test_remove_edge_by_id_and_pair(self):
        g = _triangle()
        self.assertEqual(g.remove_edge(2).edge_ids(), [1, 3])
        self.assertEqual(g.remove_edge(from_=2, to=3).edge_ids(), [1, 2])
        with self.assertRaises(DanglingReference):
            g.remove_edge(from_=3, to=2)
        with self.assertRaises(OutOfRangeParameter):
            g.remove_edge(1, from_=1, to=2)
        with self.assertRaises(OutOfRangeParameter):
            g.remove_edge()

    def test_remove_edge_undirected_both_orientations(self):
        g = Graph(nodes={"id": [1, 2]}, edges={"from": [1, 2], "to": [2, 1]}, directed=False)
        self.assertEqual(g.get_edge_ids(2, 1), [1, 2])
        self.assertEqual(g.remove_edge(from_=2, to=1).edge_count, 0)

    def test_edge_ids_not_reused(self):
        g = _triangle().remove_edge(3)
        g = g.add_edge(3, 1)
        self.assertEqual(g.edge_ids(), [1, 2, 4])
        self.assertTrue(g.has_edge(3, 1))
        self.assertEqual(g.get_edge_ids(3, 1), [4])

    def test_incident_edges(self):
        self.assertEqual(_triangle().incident_edges(3), [2, 3])


if __name__ == "__main__":
    unittest.main()
