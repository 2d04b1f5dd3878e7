"""
CSV import/export for graphs, done with Polars IO (no stdlib `csv`).

Public entry points:
- load_csv_to_graph(edges_path, nodes_path=None, directed=True, **options) -> Graph
- write_csv(graph, edges_path, nodes_path=None) -> None

An edge list needs a source column (`from`, `source` or `src`) and a target column
(`to`, `target` or `dst`); every other column becomes an edge attribute. A nodes file,
when given, needs an `id` column. Without it the nodes are the distinct endpoints.
"""
from __future__ import annotations

import polars as pl

from ..adapters.dataframe_adapter import from_dataframes
from ..core.graph import Graph
from ..core.structure import DEFAULT_TZ

__all__ = ["load_csv_to_graph", "write_csv"]


def load_csv_to_graph(
    edges_path,
    nodes_path=None,
    directed: bool = True,
    *,
    separator: str = ",",
    name: str | None = None,
    time=None,
    tz: str = DEFAULT_TZ,
    **read_options,
) -> Graph:
    """Read an edge list (and optionally a node table) into a Graph.

    Extra keyword arguments go to :func:`polars.read_csv`.
    """
    edges = pl.read_csv(edges_path, separator=separator, **read_options)
    nodes = pl.read_csv(nodes_path, separator=separator, **read_options) if nodes_path else None
    return from_dataframes(nodes, edges, directed=directed, name=name, time=time, tz=tz)


def write_csv(graph: Graph, edges_path, nodes_path=None, *, separator: str = ",") -> None:
    """Write the edge table (and the node table when ``nodes_path`` is given)."""
    graph.edges.frame.write_csv(edges_path, separator=separator)
    if nodes_path is not None:
        graph.nodes.frame.write_csv(nodes_path, separator=separator)
