import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import polars as pl

from graphtab.core.errors import (
    ColumnNotFound,
    DanglingReference,
    DuplicateKey,
    NonNumericColumn,
    OutOfRangeParameter,
)
from graphtab.core.graph import Graph
from graphtab.pipelines.colorize import colorize_edge_attrs, colorize_node_attrs
from graphtab.pipelines.join import join_edge_attrs, join_node_attrs, table_from_mapping
from graphtab.pipelines.rescale import rescale_edge_attrs, rescale_node_attrs
from graphtab.pipelines.similarity import get_common_nbrs, get_dice_similarity

VALUES = [3, 4, 6, 9.5, 2.5, 9, 9.5, 7, 6.5, 1]
GRAY = "#D9D9D9"


def _valued(values) -> Graph:
    n = len(values)
    return Graph(nodes={"id": list(range(1, n + 1)), "value": values})


class TestColorize(unittest.TestCase):
    def test_cut_points(self):
        g = colorize_node_attrs(_valued(VALUES), "value", "color", cut_points=[1, 3, 5, 7, 9])
        c = g.nodes.get_column("color")
        self.assertEqual(c[4], "#440154")  # 2.5 in [1, 3)
        self.assertEqual(c[9], "#440154")  # 1 in [1, 3)
        self.assertEqual(c[7], "#FDE725")  # 7 in [7, 9)
        self.assertEqual(c[0], c[1])  # 3 and 4 share [3, 5)
        self.assertEqual(c[2], c[8])  # 6 and 6.5 share [5, 7)
        self.assertNotIn(c[0], (c[2], c[4], c[7], GRAY))
        self.assertEqual([c[3], c[5], c[6]], [GRAY] * 3)  # 9.5, 9, 9.5

    def test_alpha(self):
        g = colorize_node_attrs(_valued(VALUES), "value", "color", cut_points=[1, 3, 5, 7, 9], alpha=80)
        c = g.nodes.get_column("color")
        self.assertEqual(c[4], "#440154CC")
        self.assertEqual(c[3], GRAY)
        g = colorize_node_attrs(_valued(VALUES), "value", "color", alpha=100)
        self.assertTrue(all(len(x) == 7 for x in g.nodes.get_column("color")))
        with self.assertRaises(OutOfRangeParameter):
            colorize_node_attrs(_valued(VALUES), "value", "color", alpha=120)

    def test_categorical_first_seen(self):
        g = Graph(nodes={"id": [1, 2, 3, 4], "grp": ["b", "a", "b", None]})
        c = colorize_node_attrs(g, "grp", "color").nodes.get_column("color")
        self.assertEqual(c, ["#440154", "#FDE725", "#440154", GRAY])

    def test_bad_cut_points(self):
        with self.assertRaises(OutOfRangeParameter):
            colorize_node_attrs(_valued(VALUES), "value", "color", cut_points=[5, 1])
        with self.assertRaises(OutOfRangeParameter):
            colorize_node_attrs(_valued(VALUES), "value", "color", cut_points=[1])
        with self.assertRaises(ColumnNotFound):
            colorize_node_attrs(_valued(VALUES), "nope", "color")

    def test_edges(self):
        g = Graph(nodes={"id": [1, 2]}, edges={"from": [1, 2], "to": [2, 1], "rel": ["a", "b"]})
        c = colorize_edge_attrs(g, "rel", "color", default_color="#000000").edges.get_column("color")
        self.assertEqual(c, ["#440154", "#FDE725"])


class TestRescale(unittest.TestCase):
    def test_unit_range(self):
        g = rescale_node_attrs(_valued([1, 2, 3]), "value", node_attr_to="scaled")
        self.assertEqual(g.nodes.get_column("scaled"), [0.0, 0.5, 1.0])
        self.assertEqual(g.nodes.get_column("value"), [1, 2, 3])

    def test_round_trip(self):
        orig = [2.0, 3.5, 7.25, 10.0]
        g = rescale_node_attrs(_valued(orig), "value")
        g = rescale_node_attrs(g, "value", 2.0, 10.0)
        for a, b in zip(orig, g.nodes.get_column("value")):
            self.assertAlmostEqual(a, b, places=2)

    def test_rounds_to_three_digits(self):
        g = rescale_node_attrs(_valued([0, 1, 3]), "value")
        self.assertEqual(g.nodes.get_column("value"), [0.0, 0.333, 1.0])

    def test_explicit_source_range_and_empty_cells(self):
        g = rescale_node_attrs(_valued([5.0, None]), "value", from_lower_bound=0, from_upper_bound=10)
        self.assertEqual(g.nodes.get_column("value"), [0.5, None])

    def test_zero_width_warns(self):
        with self.assertWarns(RuntimeWarning):
            g = rescale_node_attrs(_valued([4, 4]), "value", 0, 10)
        self.assertEqual(g.nodes.get_column("value"), [5.0, 5.0])

    def test_color_gradient(self):
        g = rescale_node_attrs(_valued([0, 5, 10]), "value", "red", "blue", node_attr_to="fill")
        c = g.nodes.get_column("fill")
        self.assertEqual((c[0], c[2]), ("#FF0000", "#0000FF"))
        # mixed in Lab: a bright magenta, not the dull RGB average #7F0080
        r, gr, b = (int(c[1][i : i + 2], 16) for i in (1, 3, 5))
        self.assertGreaterEqual(r, 0xB8)
        self.assertLessEqual(gr, 0x10)
        self.assertTrue(0x70 <= b <= 0xA0)

    def test_errors(self):
        with self.assertRaises(OutOfRangeParameter):
            rescale_node_attrs(_valued([1, 2]), "value", "red", 1)
        g = Graph(nodes={"id": [1, 2], "txt": ["a", "b"]})
        with self.assertRaises(NonNumericColumn):
            rescale_node_attrs(g, "txt")

    def test_edges(self):
        g = Graph(nodes={"id": [1, 2]}, edges={"from": [1, 2], "to": [2, 1], "w": [10, 20]})
        g = rescale_edge_attrs(g, "w", 1, 2)
        self.assertEqual(g.edges.get_column("w"), [1.0, 2.0])


class TestJoin(unittest.TestCase):
    def setUp(self):
        self.g = Graph(nodes={"id": [1, 2, 3], "label": ["a", "b", "c"]})

    def test_join_on_id_by_default(self):
        df = pl.DataFrame({"id": [3, 1], "score": [0.3, 0.1]})
        g = join_node_attrs(self.g, df)
        self.assertEqual(g.node_ids(), [1, 2, 3])
        self.assertEqual(g.nodes.get_column("score"), [0.1, None, 0.3])

    def test_natural_join(self):
        df = pl.DataFrame({"label": ["b", "c"], "size": [2, 3]})
        g = join_node_attrs(self.g, df)
        self.assertEqual(g.nodes.get_column("size"), [None, 2, 3])

    def test_explicit_keys(self):
        df = {"name": ["a"], "flag": [True]}
        g = join_node_attrs(self.g, df, by_graph="label", by_df="name")
        self.assertEqual(g.nodes.get_column("flag"), [True, None, None])
        with self.assertRaises(OutOfRangeParameter):
            join_node_attrs(self.g, df, by_graph="label")

    def test_fan_out_refused(self):
        df = pl.DataFrame({"id": [1, 1], "x": [1, 2]})
        with self.assertRaises(DuplicateKey):
            join_node_attrs(self.g, df)

    def test_algorithm_result(self):
        df = table_from_mapping({1: 0.5, 2: 0.25, 3: 0.25}, "centrality")
        g = join_node_attrs(self.g, df)
        self.assertEqual(g.nodes.get_column("centrality"), [0.5, 0.25, 0.25])

    def test_edges(self):
        g = Graph(nodes={"id": [1, 2]}, edges={"from": [1, 2], "to": [2, 1]})
        g = join_edge_attrs(g, pl.DataFrame({"id": [2], "cost": [9]}))
        self.assertEqual(g.edges.get_column("cost"), [None, 9])


class TestSimilarity(unittest.TestCase):
    def setUp(self):
        self.g = Graph(
            nodes={"id": [1, 2, 3, 4, 5]},
            edges={"from": [1, 1, 2, 3], "to": [2, 3, 3, 4]},
            directed=False,
        )

    def test_dice_values(self):
        m = get_dice_similarity(self.g)
        self.assertEqual(m.ids, (1, 2, 3, 4, 5))
        self.assertEqual(m.value(1, 2), 0.5)
        self.assertEqual(m.value(1, 4), 0.667)
        self.assertTrue(np.array_equal(m.values, m.values.T))

    def test_dice_diagonal(self):
        m = get_dice_similarity(self.g)
        self.assertEqual([m.value(n, n) for n in (1, 2, 3, 4)], [1.0] * 4)
        self.assertEqual(m.value(5, 5), 0.0)

    def test_dice_subset_and_frame(self):
        m = get_dice_similarity(self.g, nodes=[4, 1])
        self.assertEqual(m.values.shape, (2, 2))
        df = m.to_frame()
        self.assertEqual(df.columns, ["id", "4", "1"])
        with self.assertRaises(DanglingReference):
            get_dice_similarity(self.g, nodes=[9])

    def test_common_neighbors(self):
        g = Graph(
            nodes={"id": [1, 2, 3, 4, 5, 6]},
            edges={"from": [1, 1, 2, 2, 5], "to": [3, 4, 3, 4, 6]},
            directed=False,
        )
        self.assertEqual(get_common_nbrs(g, [1, 2]), frozenset({3, 4}))
        self.assertEqual(get_common_nbrs(g, [1, 5]), frozenset())
        with self.assertRaises(OutOfRangeParameter):
            get_common_nbrs(g, [1])
        with self.assertRaises(DanglingReference):
            get_common_nbrs(g, [1, 99])


if __name__ == "__main__":
    unittest.main()
