from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from .errors import OutOfRangeParameter
from .graph import Graph

__all__ = [
    "GraphSeries",
    "add_to_series",
    "remove_from_series",
    "get_graph_from_series",
    "graph_count",
    "series_info",
]

SERIES_TYPES = ("sequential", "temporal")

_INFO_SCHEMA = {
    "graph": pl.Int64,
    "name": pl.Utf8,
    "date_time": pl.Utf8,
    "tz": pl.Utf8,
    "nodes": pl.Int64,
    "edges": pl.Int64,
    "directed": pl.Boolean,
}


class GraphSeries:
    """Immutable, ordered collection of graphs.

    ``series_type`` is ``"sequential"`` or ``"temporal"``; a temporal series only
    accepts graphs that carry a ``time``. Positions are 1-based throughout, matching
    the ``graph`` column of :func:`series_info`.
    """

    __slots__ = ("graphs", "series_type")

    def __init__(self, graphs: Iterable[Graph] = (), series_type: str = "sequential"):
        if series_type not in SERIES_TYPES:
            raise OutOfRangeParameter(
                f"series_type must be one of {SERIES_TYPES}, got {series_type!r}"
            )
        graphs = tuple(graphs)
        for g in graphs:
            _check_member(g, series_type)
        self.graphs = graphs
        self.series_type = series_type

    def __len__(self) -> int:
        return len(self.graphs)

    def __iter__(self):
        return iter(self.graphs)

    def __repr__(self) -> str:
        return f"<GraphSeries | type={self.series_type} · graphs={len(self.graphs)}>"


def _check_member(graph, series_type: str) -> None:
    if not isinstance(graph, Graph):
        raise TypeError(f"Expected a Graph, got {type(graph).__name__}")
    if series_type == "temporal" and graph.time is None:
        raise OutOfRangeParameter("Graphs in a temporal series must have a time")


def _position(series: GraphSeries, index: int) -> int:
    n = len(series.graphs)
    if not 1 <= index <= n:
        raise OutOfRangeParameter(f"Index {index} is outside the series (1..{n})")
    return index - 1


def add_to_series(graph: Graph, series: GraphSeries) -> GraphSeries:
    _check_member(graph, series.series_type)
    return GraphSeries(series.graphs + (graph,), series.series_type)


def remove_from_series(series: GraphSeries, index: int | None = None) -> GraphSeries:
    """Drop the graph at 1-based ``index`` (the last one by default)."""
    pos = _position(series, len(series.graphs) if index is None else index)
    return GraphSeries(series.graphs[:pos] + series.graphs[pos + 1 :], series.series_type)


def get_graph_from_series(series: GraphSeries, index: int) -> Graph:
    return series.graphs[_position(series, index)]


def graph_count(series: GraphSeries) -> int:
    return len(series.graphs)


def series_info(series: GraphSeries) -> pl.DataFrame:
    """One row per graph: ``graph, name, date_time, tz, nodes, edges, directed``."""
    rows = [
        {
            "graph": i,
            "name": g.name,
            "date_time": g.time,
            "tz": g.tz,
            "nodes": g.node_count,
            "edges": g.edge_count,
            "directed": g.directed,
        }
        for i, g in enumerate(series.graphs, start=1)
    ]
    return pl.DataFrame(rows, schema=_INFO_SCHEMA)
