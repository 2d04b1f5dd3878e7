"""Selections: the focused subset of nodes/edges that ``*_ws`` operations act on.

A :class:`Selection` is an immutable value. It rides along on every Graph (as
``graph.selection``) and can also be passed explicitly to any ``*_ws`` function, in
which case the explicit value wins and the graph's own selection is ignored.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import polars as pl

from .errors import InvalidSelection, OutOfRangeParameter
from .structure import FROM, ID, TO

if TYPE_CHECKING:
    from .graph import Graph

__all__ = [
    "Selection",
    "select_nodes",
    "select_nodes_by_id",
    "select_edges",
    "select_edges_by_edge_id",
    "clear_selection",
    "get_selection",
    "invert_selection",
    "set_node_attrs_ws",
    "set_edge_attrs_ws",
    "trav_out",
    "trav_in",
    "trav_both",
    "delete_nodes_ws",
    "delete_edges_ws",
]

_SET_OPS = ("union", "intersect", "difference")


@dataclass(frozen=True)
class Selection:
    nodes: frozenset = field(default_factory=frozenset)
    edges: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "nodes", frozenset(self.nodes))
        object.__setattr__(self, "edges", frozenset(self.edges))

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges


def _combine(current: frozenset, new: Iterable[int], set_op: str) -> frozenset:
    new = frozenset(new)
    if set_op == "union":
        return current | new
    if set_op == "intersect":
        return current & new
    if set_op == "difference":
        return current - new
    raise OutOfRangeParameter(f"set_op must be one of {_SET_OPS}, got {set_op!r}")


def _resolve(graph: "Graph", selection: Selection | None) -> Selection:
    return graph.selection if selection is None else selection


def select_nodes(
    graph: "Graph",
    conditions: pl.Expr | Callable[[dict], bool] | None = None,
    set_op: str = "union",
    nodes: Iterable[int] | None = None,
) -> "Graph":
    """Select nodes matching ``conditions`` (restricted to ``nodes`` if given).

    ``conditions`` is a Polars expression over the node table, e.g.
    ``pl.col("value") > 3``, or a callable over each row dict. The result is merged
    into the current node selection with ``set_op``.
    """
    store = graph.nodes
    candidates = store.ids() if nodes is None else [n for n in nodes if store.has(n)]
    if conditions is not None:
        hits = {store.ids()[i] for i in store.filter(conditions)}
        candidates = [n for n in candidates if n in hits]
    sel = graph.selection
    new = Selection(_combine(sel.nodes, candidates, set_op), sel.edges)
    return graph._with_selection(new, "select_nodes", set_op=set_op, result=sorted(new.nodes))


def select_nodes_by_id(graph: "Graph", nodes: Iterable[int], set_op: str = "union") -> "Graph":
    nodes = list(nodes)
    for n in nodes:
        graph._require_node(n)
    return select_nodes(graph, set_op=set_op, nodes=nodes)


def select_edges(
    graph: "Graph",
    conditions: pl.Expr | Callable[[dict], bool] | None = None,
    set_op: str = "union",
    from_: Iterable[int] | None = None,
    to: Iterable[int] | None = None,
    edges: Iterable[int] | None = None,
) -> "Graph":
    """Select edges by attribute ``conditions``, endpoints and/or edge ids."""
    store = graph.edges
    ids = store.ids()
    if edges is not None:
        wanted = set(edges)
        candidates = [e for e in ids if e in wanted]
    else:
        candidates = ids
    if from_ is not None or to is not None:
        frame = store.frame
        keep = set()
        src = set(from_) if from_ is not None else None
        dst = set(to) if to is not None else None
        for eid, u, v in zip(frame.get_column(ID), frame.get_column(FROM), frame.get_column(TO)):
            if (src is None or u in src) and (dst is None or v in dst):
                keep.add(eid)
        candidates = [e for e in candidates if e in keep]
    if conditions is not None:
        hits = {ids[i] for i in store.filter(conditions)}
        candidates = [e for e in candidates if e in hits]
    sel = graph.selection
    new = Selection(sel.nodes, _combine(sel.edges, candidates, set_op))
    return graph._with_selection(new, "select_edges", set_op=set_op, result=sorted(new.edges))


def select_edges_by_edge_id(graph: "Graph", edges: Iterable[int], set_op: str = "union") -> "Graph":
    edges = list(edges)
    for e in edges:
        graph.edges.row_index(e)
    return select_edges(graph, set_op=set_op, edges=edges)


def clear_selection(graph: "Graph") -> "Graph":
    return graph._with_selection(Selection(), "clear_selection")


def get_selection(graph: "Graph") -> Selection:
    return graph.selection


def invert_selection(graph: "Graph") -> "Graph":
    """Swap the selected nodes (and/or edges) for the unselected ones."""
    sel = graph.selection
    if sel.is_empty():
        raise InvalidSelection("There is no selection to invert")
    nodes = frozenset(graph.node_ids()) - sel.nodes if sel.nodes else sel.nodes
    edges = frozenset(graph.edge_ids()) - sel.edges if sel.edges else sel.edges
    return graph._with_selection(Selection(nodes, edges), "invert_selection")


def set_node_attrs_ws(graph: "Graph", node_attr: str, value, selection: Selection | None = None) -> "Graph":
    """Set ``node_attr`` on the selected nodes; the selection persists.

    ``value`` is one value or one per selected node, in ascending id order.

    Raises
    ------
    InvalidSelection
        If no nodes are selected.
    """
    sel = _resolve(graph, selection)
    if not sel.nodes:
        raise InvalidSelection("There is no selection of nodes available.")
    ids = sorted(sel.nodes)
    store = graph.nodes
    updated = store.set_column(node_attr, value, rows=store.rows_for(ids))
    return graph._with_nodes(updated, "set_node_attrs_ws", node_attr=node_attr, nodes=ids)


def set_edge_attrs_ws(graph: "Graph", edge_attr: str, value, selection: Selection | None = None) -> "Graph":
    sel = _resolve(graph, selection)
    if not sel.edges:
        raise InvalidSelection("There is no selection of edges available.")
    ids = sorted(sel.edges)
    store = graph.edges
    updated = store.set_column(edge_attr, value, rows=store.rows_for(ids))
    return graph._with_edges(updated, "set_edge_attrs_ws", edge_attr=edge_attr, edges=ids)


def _traverse(graph: "Graph", selection: Selection | None, direction: str, op: str) -> "Graph":
    sel = _resolve(graph, selection)
    if not sel.nodes:
        raise InvalidSelection("There is no selection of nodes available.")
    reached = set()
    for n in sel.nodes:
        reached |= graph.neighbors(n, direction)
    new = Selection(reached, graph.selection.edges)
    return graph._with_selection(new, op, result=sorted(reached))


def trav_out(graph: "Graph", selection: Selection | None = None) -> "Graph":
    """Move the node selection to the successors of the selected nodes."""
    return _traverse(graph, selection, "out", "trav_out")


def trav_in(graph: "Graph", selection: Selection | None = None) -> "Graph":
    """Move the node selection to the predecessors of the selected nodes."""
    return _traverse(graph, selection, "in", "trav_in")


def trav_both(graph: "Graph", selection: Selection | None = None) -> "Graph":
    return _traverse(graph, selection, "all", "trav_both")


def delete_nodes_ws(graph: "Graph", selection: Selection | None = None) -> "Graph":
    """Remove the selected nodes (cascading to their edges) and clear the selection."""
    sel = _resolve(graph, selection)
    if not sel.nodes:
        raise InvalidSelection("There is no selection of nodes available.")
    g = graph.remove_nodes(sorted(sel.nodes), _op="delete_nodes_ws")
    return g._with_selection(Selection(), "clear_selection")


def delete_edges_ws(graph: "Graph", selection: Selection | None = None) -> "Graph":
    sel = _resolve(graph, selection)
    if not sel.edges:
        raise InvalidSelection("There is no selection of edges available.")
    g = graph.remove_edges(sorted(sel.edges), _op="delete_edges_ws")
    return g._with_selection(Selection(), "clear_selection")
