import os
import sys
import tempfile
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import polars as pl

from graphtab.core.graph import Graph
from graphtab.pipelines.rescale import rescale_node_attrs


class TestHistory(unittest.TestCase):
    def test_events_accumulate_per_value(self):
        g0 = Graph()
        g1, _ = g0.add_node(label="a")
        g2 = g1.add_edge(1, 1)
        self.assertEqual([e["op"] for e in g0.history()], ["create_graph"])
        self.assertEqual([e["op"] for e in g2.history()], ["create_graph", "add_node", "add_edge"])
        versions = [e["version"] for e in g2.history()]
        self.assertEqual(versions, sorted(versions))
        self.assertTrue(g2.history()[-1]["ts_utc"].endswith("Z"))

    def test_pipeline_ops_logged(self):
        g = Graph(nodes={"id": [1, 2], "v": [1, 3]})
        g = rescale_node_attrs(g, "v")
        evt = g.history()[-1]
        self.assertEqual(evt["op"], "rescale_node_attrs")
        self.assertEqual(evt["attr_from"], "v")

    def test_disable_and_mark(self):
        g = Graph().with_history(False)
        g, _ = g.add_node()
        self.assertEqual(len(g.history()), 1)
        g = g.with_history(True).mark("checkpoint")
        self.assertEqual(g.history()[-1]["label"], "checkpoint")

    def test_long_chains_share_history(self):
        g = Graph()
        for k in range(300):
            g = g.mark(f"step {k}")
        events = g.history()
        self.assertEqual(len(events), 301)
        self.assertEqual(events[1]["label"], "step 0")
        self.assertEqual(events[-1]["label"], "step 299")
        self.assertEqual(len(g.mark("one more").history()), 302)
        self.assertEqual(len(g.history()), 301)

    def test_large_fields_are_summarized(self):
        small = Graph().add_n_nodes(3).history()[-1]
        self.assertEqual(small["result"], [1, 2, 3])
        big = Graph().add_n_nodes(60).history()[-1]
        self.assertEqual(big["result"], "<<list of 60>>")
        self.assertEqual(big["n"], 60)

    def test_dataframe_and_export(self):
        g, _ = Graph().add_node(type="t")
        df = g.history(as_df=True)
        self.assertIsInstance(df, pl.DataFrame)
        self.assertEqual(df.get_column("op").to_list(), ["create_graph", "add_node"])
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "hist.csv")
            self.assertEqual(g.export_history(path), 2)
            self.assertEqual(pl.read_csv(path).height, 2)
            self.assertEqual(g.export_history(os.path.join(tmp, "hist.ndjson")), 2)


if __name__ == "__main__":
    unittest.main()
