from __future__ import annotations

import polars as pl

from ..core.graph import Graph
from ..core.structure import DEFAULT_TZ, FROM, ID, LABEL, TO

__all__ = ["to_dataframes", "from_dataframes", "detect_endpoint_columns"]

SOURCE_NAMES = ("from", "source", "src")
TARGET_NAMES = ("to", "target", "dst")


def detect_endpoint_columns(columns) -> tuple[str, str]:
    """Find the source/target columns of an edge list (case-insensitive).

    Raises
    ------
    ValueError
        If either column cannot be found.
    """
    lower = {c.lower(): c for c in columns}
    src = next((lower[n] for n in SOURCE_NAMES if n in lower), None)
    dst = next((lower[n] for n in TARGET_NAMES if n in lower), None)
    if src is None or dst is None:
        raise ValueError(
            f"Edge table needs a source column {SOURCE_NAMES} and a target column "
            f"{TARGET_NAMES}; got {list(columns)}"
        )
    return src, dst


def to_dataframes(graph: "Graph") -> dict[str, pl.DataFrame]:
    """
    Export graph to Polars DataFrames.

    Returns
    -------
    dict
        ``{"nodes": ndf, "edges": edf}``; both are the graph's own (immutable) frames.
    """
    return {"nodes": graph.nodes.frame, "edges": graph.edges.frame}


def from_dataframes(
    nodes: pl.DataFrame | None = None,
    edges: pl.DataFrame | None = None,
    *,
    directed: bool = True,
    name: str | None = None,
    time=None,
    tz: str = DEFAULT_TZ,
) -> "Graph":
    """
    Import a graph from Polars DataFrames.

    Nodes DataFrame (optional):
        - Required: id
        - Optional: type, label, any attribute columns

    Edges DataFrame (optional):
        - Required: a source and a target column (``from``/``source``/``src`` and
          ``to``/``target``/``dst``)
        - Optional: id, rel, attribute columns

    Without a nodes table the nodes are the distinct edge endpoints. Integer
    endpoints are used as node ids directly; any other endpoint values (e.g.
    gene names) are given ids 1..n in sorted order and kept as ``label``.

    Returns
    -------
    Graph
    """
    if edges is not None:
        src, dst = detect_endpoint_columns(edges.columns)
        edges = edges.rename({c: t for c, t in ((src, FROM), (dst, TO)) if c != t})

    if nodes is None and edges is not None and edges.height:
        ends = pl.concat([edges.get_column(FROM), edges.get_column(TO)]).unique().sort()
        if ends.dtype.is_integer():
            nodes = pl.DataFrame({ID: ends.cast(pl.Int64)})
        else:
            names = ends.cast(pl.Utf8)
            nodes = pl.DataFrame(
                {ID: pl.int_range(1, len(names) + 1, eager=True), LABEL: names}
            )
            mapping = dict(zip(names.to_list(), nodes.get_column(ID).to_list()))
            edges = edges.with_columns(
                pl.col(FROM).cast(pl.Utf8).replace_strict(mapping, return_dtype=pl.Int64),
                pl.col(TO).cast(pl.Utf8).replace_strict(mapping, return_dtype=pl.Int64),
            )
    return Graph(nodes, edges, directed=directed, name=name, time=time, tz=tz)
