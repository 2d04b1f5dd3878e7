from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from .errors import DanglingReference, OutOfRangeParameter, ProtectedColumn, ShapeMismatch
from .graph import Graph
from .stores import EdgeStore, NodeStore
from .structure import FROM, ID, LABEL, REL, TO, TYPE, AttrScope
from .table import _as_values

__all__ = [
    "get_node_attrs",
    "set_node_attrs",
    "get_edge_attrs",
    "set_edge_attrs",
    "node_info",
    "edge_info",
    "set_global_graph_attrs",
    "get_global_graph_attrs",
    "delete_global_graph_attrs",
    "clear_global_graph_attrs",
]


def _node_store(x) -> NodeStore:
    if isinstance(x, Graph):
        return x.nodes
    if isinstance(x, NodeStore):
        return x
    raise TypeError(f"Expected a Graph or NodeStore, got {type(x).__name__}")


def _edge_store(x) -> EdgeStore:
    if isinstance(x, Graph):
        return x.edges
    if isinstance(x, EdgeStore):
        return x
    raise TypeError(f"Expected a Graph or EdgeStore, got {type(x).__name__}")


def _values_by_id(store, attr: str, rows: list[int]) -> dict:
    if store.column_kind(attr) == "numeric":
        col = store.numeric_column(attr)
    else:
        col = store.get_column(attr)
    ids = store.ids()
    return {ids[r]: col[r] for r in sorted(rows, key=lambda r: ids[r])}


# Node attributes


def get_node_attrs(x, node_attr: str, nodes: Iterable[int] | None = None) -> dict:
    """Values of ``node_attr`` keyed by node id, sorted by id.

    Works on a Graph or a bare NodeStore. Numeric columns come back as floats.

    Raises
    ------
    ProtectedColumn
        If ``node_attr`` is ``"id"``.
    ColumnNotFound
        If the column does not exist.
    """
    if node_attr == ID:
        raise ProtectedColumn("This is not a node attribute.")
    store = _node_store(x)
    store._require(node_attr)
    rows = range(store.height) if nodes is None else store.rows_for(nodes)
    return _values_by_id(store, node_attr, list(rows))


def set_node_attrs(x, node_attr: str, values, nodes: Iterable[int] | None = None):
    """Set ``node_attr`` for ``nodes`` (all nodes if omitted).

    ``values`` is either one value or one value per targeted node, in the order the
    nodes are given. Returns the same kind of handle it received; a Graph keeps its
    selection.
    """
    if node_attr == ID:
        raise ProtectedColumn("You cannot alter values of 'id'")
    store = _node_store(x)
    rows = None
    if nodes is not None:
        nodes = list(nodes)
        rows = store.rows_for(nodes)
        vals = _as_values(values)
        if len(vals) not in (1, len(rows)):
            raise ShapeMismatch(
                f"Got {len(vals)} values for {len(rows)} nodes; supply one value or one per node"
            )
    updated = store.set_column(node_attr, values, rows=rows)
    if isinstance(x, Graph):
        return x._with_nodes(updated, "set_node_attrs", node_attr=node_attr, nodes=nodes)
    return updated


# Edge attributes


def _edge_rows(store: EdgeStore, from_, to) -> list[int]:
    if from_ is not None and to is not None:
        from_, to = _as_values(from_), _as_values(to)
        if len(from_) != len(to):
            raise ShapeMismatch("from_ and to must have the same length")
    src = set(_as_values(from_)) if from_ is not None else None
    dst = set(_as_values(to)) if to is not None else None
    df = store.frame
    return [
        r
        for r, (u, v) in enumerate(zip(df.get_column(FROM), df.get_column(TO)))
        if (src is None or u in src) and (dst is None or v in dst)
    ]


def get_edge_attrs(x, edge_attr: str, from_=None, to=None) -> dict:
    """Values of ``edge_attr`` keyed by edge id, optionally filtered by endpoints."""
    if edge_attr in (ID, FROM, TO):
        raise ProtectedColumn("This is not an edge attribute.")
    store = _edge_store(x)
    store._require(edge_attr)
    return _values_by_id(store, edge_attr, _edge_rows(store, from_, to))


def set_edge_attrs(x, edge_attr: str, values, from_=None, to=None):
    """Set ``edge_attr`` on every edge whose ``from`` is in ``from_`` and ``to`` in ``to``.

    Either filter may be omitted. ``values`` is one value or one per matching edge
    (in table order).

    Raises
    ------
    ProtectedColumn
        For ``id``, ``from`` and ``to``.
    ShapeMismatch
        If ``from_`` and ``to`` differ in length, or ``values`` fits neither shape.
    """
    if edge_attr in (ID, FROM, TO):
        raise ProtectedColumn(f"You cannot alter values of '{edge_attr}'")
    store = _edge_store(x)
    rows = _edge_rows(store, from_, to)
    updated = store.set_column(edge_attr, values, rows=rows)
    if isinstance(x, Graph):
        return x._with_edges(updated, "set_edge_attrs", edge_attr=edge_attr, rows=len(rows))
    return updated


# Info tables


def node_info(graph: Graph) -> pl.DataFrame | None:
    """Per-node summary: ``id, type, label, deg, indeg, outdeg, loops``.

    Returns ``None`` for a graph without nodes.
    """
    if graph.is_empty():
        return None
    store = graph.nodes
    ids = store.ids()
    adj = graph._adj
    deg, indeg, outdeg, loops = [], [], [], []
    for n in ids:
        n_out = len(adj.out_edges(n))
        n_in = len(adj.in_edges(n))
        deg.append(n_out + n_in)
        if graph.directed:
            indeg.append(n_in)
            outdeg.append(n_out)
        else:
            indeg.append(n_out + n_in)
            outdeg.append(n_out + n_in)
        loops.append(adj.loops(n))
    return pl.DataFrame(
        {
            ID: ids,
            TYPE: store.get_column(TYPE),
            LABEL: store.get_column(LABEL),
            "deg": deg,
            "indeg": indeg,
            "outdeg": outdeg,
            "loops": loops,
        },
        schema={
            ID: pl.Int64,
            TYPE: pl.Utf8,
            LABEL: pl.Utf8,
            "deg": pl.Int64,
            "indeg": pl.Int64,
            "outdeg": pl.Int64,
            "loops": pl.Int64,
        },
    )


def edge_info(graph: Graph) -> pl.DataFrame | None:
    """``id, from, to, rel`` for every edge, or ``None`` if there are none."""
    if graph.edge_count == 0:
        return None
    return graph.edges.frame.select([ID, FROM, TO, REL])


# Global graph attributes


def _scope(attr_type) -> str:
    try:
        return AttrScope(attr_type).value
    except ValueError:
        raise OutOfRangeParameter(
            f"attr_type must be one of 'graph'|'node'|'edge', got {attr_type!r}"
        ) from None


def set_global_graph_attrs(graph: Graph, attr, value, attr_type) -> Graph:
    """Set one or several global attribute defaults.

    ``attr``, ``value`` and ``attr_type`` are scalars or equal-length sequences.
    Existing entries with the same name and type are replaced.
    """
    attrs, vals, types = _as_values(attr), _as_values(value), _as_values(attr_type)
    if not (len(attrs) == len(vals) == len(types)):
        raise ShapeMismatch("attr, value and attr_type must have the same length")
    ga = graph.global_attrs
    for a, v, t in zip(attrs, vals, types):
        ga[_scope(t)][a] = v
    return graph._with_global_attrs(ga, "set_global_graph_attrs", attr=attrs, attr_type=types)


def get_global_graph_attrs(graph: Graph) -> pl.DataFrame:
    """Global attributes as a frame with columns ``attr``, ``value``, ``attr_type``."""
    rows = [
        {"attr": a, "value": None if v is None else str(v), "attr_type": scope}
        for scope, attrs in graph._global_attrs.items()
        for a, v in attrs.items()
    ]
    return pl.DataFrame(rows, schema={"attr": pl.Utf8, "value": pl.Utf8, "attr_type": pl.Utf8})


def delete_global_graph_attrs(graph: Graph, attr=None, attr_type=None) -> Graph:
    """Remove global attributes by name and/or type.

    With only ``attr_type`` every attribute of that type goes; with only ``attr`` the
    name is removed from every type.
    """
    if attr is None and attr_type is None:
        raise OutOfRangeParameter("Provide attr, attr_type, or both")
    ga = graph.global_attrs
    scopes = list(ga) if attr_type is None else [_scope(attr_type)]
    names = None if attr is None else set(_as_values(attr))
    removed = 0
    for s in scopes:
        if names is None:
            removed += len(ga[s])
            ga[s] = {}
            continue
        for a in names & set(ga[s]):
            del ga[s][a]
            removed += 1
    if attr is not None and not removed:
        raise DanglingReference(f"No global attribute named {sorted(names)}")
    return graph._with_global_attrs(ga, "delete_global_graph_attrs", attr=attr, attr_type=attr_type)


def clear_global_graph_attrs(graph: Graph) -> Graph:
    return graph._with_global_attrs({}, "clear_global_graph_attrs")
