try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install graphtab[networkx]"
    ) from e

import warnings
from enum import Enum
from typing import Any

import polars as pl

from ..core.graph import Graph
from ..core.structure import FROM, ID, LABEL, REL, TO, TYPE

__all__ = ["to_nx", "from_nx", "to_backend", "NetworkXAdapter"]


def _serialize_value(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    if hasattr(v, "items"):
        return dict(v)
    return v


def _attrs(row: dict, skip: tuple, public_only: bool) -> dict:
    out = {}
    for k, v in row.items():
        if k in skip or v is None:
            continue
        if public_only and str(k).startswith("__"):
            continue
        out[k] = _serialize_value(v)
    return out


def to_nx(graph: "Graph", *, public_only: bool = False):
    """
    Export Graph to a NetworkX Multi(Di)Graph.

    Parameters
    ----------
    graph : Graph
        Source graph instance.
    public_only : bool
        If True, strip attributes whose name starts with "__".

    Returns
    -------
    networkx.MultiGraph | networkx.MultiDiGraph
        Node keys are node ids and edge keys are edge ids, so every parallel edge
        survives. Empty (null) cells are left out of the attribute dicts.
    """
    G = nx.MultiDiGraph() if graph.directed else nx.MultiGraph()
    G.graph.update(graph.global_attrs.get("graph", {}))
    if graph.name is not None:
        G.graph["name"] = graph.name

    for row in graph.nodes.rows():
        G.add_node(row[ID], **_attrs(row, (ID,), public_only))
    for row in graph.edges.rows():
        G.add_edge(row[FROM], row[TO], key=row[ID], **_attrs(row, (ID, FROM, TO), public_only))
    return G


def _is_node_id(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and x > 0


def from_nx(nxG, directed=None) -> "Graph":
    """
    Import a NetworkX graph.

    Parameters
    ----------
    nxG : networkx.Graph | DiGraph | MultiGraph | MultiDiGraph
    directed : bool, optional
        Defaults to ``nxG.is_directed()``.

    Returns
    -------
    Graph

    Notes
    -----
    Positive integer node keys are kept as node ids. Any other keys are replaced by
    ids 1..n in iteration order, with the original key kept as ``label`` when the
    node has none; a ``RuntimeWarning`` reports the relabelling. Integer edge keys
    of a multigraph become edge ids when they are unique and positive.
    """
    if directed is None:
        directed = nxG.is_directed()
    keys = list(nxG.nodes)
    if all(_is_node_id(k) for k in keys):
        ids = {k: k for k in keys}
    else:
        warnings.warn(
            "Node keys are not positive integers; assigning ids 1..n", RuntimeWarning, stacklevel=2
        )
        ids = {k: i for i, k in enumerate(keys, start=1)}

    node_rows = []
    for k, data in nxG.nodes(data=True):
        row = {ID: ids[k], TYPE: None, LABEL: None}
        row.update({a: v for a, v in data.items() if a != ID})
        if row[LABEL] is None and ids[k] != k:
            row[LABEL] = str(k)
        node_rows.append(row)

    if nxG.is_multigraph():
        raw = list(nxG.edges(keys=True, data=True))
        eids = [key for _, _, key, _ in raw]
        triples = [(u, v, data) for u, v, _, data in raw]
    else:
        triples = list(nxG.edges(data=True))
        eids = []
    if not (eids and all(_is_node_id(e) for e in eids) and len(set(eids)) == len(eids)):
        eids = list(range(1, len(triples) + 1))

    edge_rows = []
    for eid, (u, v, data) in zip(eids, triples):
        row = {ID: eid, FROM: ids[u], TO: ids[v], REL: None}
        row.update({a: val for a, val in data.items() if a not in (ID, FROM, TO)})
        edge_rows.append(row)

    nodes = pl.DataFrame(node_rows, infer_schema_length=None) if node_rows else None
    edges = pl.DataFrame(edge_rows, infer_schema_length=None) if edge_rows else None
    return Graph(nodes, edges, directed=directed, name=nxG.graph.get("name"))


def to_backend(graph, **kwargs):
    """Conversion used by ``G.nx``; see :func:`to_nx`."""
    return to_nx(graph, **kwargs)


class NetworkXAdapter:
    def export(self, graph, **kwargs):
        return to_nx(graph, **kwargs)

    def load(self, nxG, **kwargs):
        return from_nx(nxG, **kwargs)
