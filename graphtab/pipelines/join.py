from __future__ import annotations

from collections.abc import Mapping

import polars as pl

from ..core.errors import OutOfRangeParameter
from ..core.graph import Graph
from ..core.structure import ID
from ..core.table import as_frame
from ._scope import replace_store, store_of

__all__ = ["join_node_attrs", "join_edge_attrs", "table_from_mapping"]


def table_from_mapping(mapping: Mapping, column: str, key: str = ID) -> pl.DataFrame:
    """Turn ``{id: value}`` (e.g. a centrality result) into a joinable two-column table."""
    keys = list(mapping)
    return pl.DataFrame(
        {key: keys, column: [mapping[k] for k in keys]},
        strict=False,
    )


def _join(graph: Graph, scope: str, df, by_graph, by_df) -> Graph:
    if (by_graph is None) != (by_df is None):
        raise OutOfRangeParameter("Both column specifications must be provided.")
    right = as_frame(df)
    if by_graph is None and ID in right.columns:
        by_graph = by_df = ID
    store = store_of(graph, scope)
    joined = store.left_join(right, by_graph, by_df)
    added = [c for c in joined.columns if c not in store.columns]
    return replace_store(
        graph, scope, joined, f"join_{scope}_attrs", by_graph=by_graph, by_df=by_df, added=added
    )


def join_node_attrs(graph: Graph, df, by_graph=None, by_df=None) -> Graph:
    """Left-join the columns of ``df`` onto the node table.

    Parameters
    ----------
    df : polars.DataFrame | AttributeTable | Mapping
        External table.
    by_graph, by_df : str, optional
        Key column in the node table and in ``df``; both or neither. With neither,
        joins on ``id`` when ``df`` has one, otherwise on every shared column name.

    Returns
    -------
    Graph
        Same nodes in the same order; nodes without a match carry nulls in the new
        columns. Name clashes get a ``_right`` suffix.

    Raises
    ------
    OutOfRangeParameter
        If only one key is given.
    DuplicateKey
        If a node matches more than one row of ``df``.
    """
    return _join(graph, "node", df, by_graph, by_df)


def join_edge_attrs(graph: Graph, df, by_graph=None, by_df=None) -> Graph:
    """Edge counterpart of :func:`join_node_attrs` (``id`` is the edge id)."""
    return _join(graph, "edge", df, by_graph, by_df)
