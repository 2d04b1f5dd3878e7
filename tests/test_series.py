import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from graphtab.core.errors import OutOfRangeParameter
from graphtab.core.graph import Graph
from graphtab.core.series import (
    GraphSeries,
    add_to_series,
    get_graph_from_series,
    graph_count,
    remove_from_series,
    series_info,
)


class TestGraphSeries(unittest.TestCase):
    def setUp(self):
        self.g1 = Graph(nodes={"id": [1, 2]}, edges={"from": [1], "to": [2]}, name="first")
        self.g2 = Graph(nodes={"id": [1]}, directed=False, time="2024-05-01 10:00:00", tz="UTC")

    def test_add_get_remove(self):
        s = add_to_series(self.g2, add_to_series(self.g1, GraphSeries()))
        self.assertEqual(graph_count(s), 2)
        self.assertIs(get_graph_from_series(s, 1), self.g1)
        s2 = remove_from_series(s, 1)
        self.assertEqual(graph_count(s2), 1)
        self.assertIs(get_graph_from_series(s2, 1), self.g2)
        self.assertEqual(graph_count(s), 2)
        self.assertEqual(graph_count(remove_from_series(s)), 1)
        with self.assertRaises(OutOfRangeParameter):
            get_graph_from_series(s, 3)

    def test_series_info(self):
        info = series_info(GraphSeries([self.g1, self.g2]))
        self.assertEqual(
            info.columns, ["graph", "name", "date_time", "tz", "nodes", "edges", "directed"]
        )
        rows = info.to_dicts()
        self.assertEqual(rows[0]["graph"], 1)
        self.assertEqual(rows[0]["name"], "first")
        self.assertIsNone(rows[0]["date_time"])
        self.assertEqual((rows[0]["nodes"], rows[0]["edges"], rows[0]["directed"]), (2, 1, True))
        self.assertEqual((rows[1]["tz"], rows[1]["directed"]), ("UTC", False))

    def test_empty_series_info(self):
        info = series_info(GraphSeries())
        self.assertEqual(info.height, 0)
        self.assertEqual(len(info.columns), 7)

    def test_temporal_series_needs_time(self):
        s = GraphSeries(series_type="temporal")
        s = add_to_series(self.g2, s)
        with self.assertRaises(OutOfRangeParameter):
            add_to_series(self.g1, s)
        with self.assertRaises(OutOfRangeParameter):
            GraphSeries(series_type="weekly")


if __name__ == "__main__":
    unittest.main()
