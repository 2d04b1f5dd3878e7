try:
    import igraph as ig
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'python-igraph' is not installed. "
        "Install with: pip install graphtab[igraph]"
    ) from e

import warnings

import polars as pl

from ..core.graph import Graph
from ..core.structure import FROM, ID, LABEL, REL, TO, TYPE

__all__ = ["to_igraph", "from_igraph", "to_backend", "IGraphAdapter"]

EID = "eid"


def to_igraph(graph: "Graph") -> "ig.Graph":
    """
    Export Graph to igraph.

    Returns
    -------
    igraph.Graph
        Vertex ``i`` is the ``i``-th row of the node table; its id is kept as the
        string vertex attribute ``name``. Edge ids go to the edge attribute ``eid``.
        Every other column becomes a vertex or edge attribute of the same name.
    """
    ids = graph.node_ids()
    pos = {n: i for i, n in enumerate(ids)}
    edges = graph.edges.frame
    pairs = [(pos[u], pos[v]) for u, v in zip(edges.get_column(FROM), edges.get_column(TO))]
    G = ig.Graph(n=len(ids), edges=pairs, directed=graph.directed)

    G.vs["name"] = [str(n) for n in ids]
    for col in graph.nodes.columns:
        if col != ID:
            G.vs[col] = graph.nodes.get_column(col)
    G.es[EID] = edges.get_column(ID).to_list()
    for col in graph.edges.columns:
        if col not in (ID, FROM, TO):
            G.es[col] = edges.get_column(col).to_list()
    if graph.name is not None:
        G["name"] = graph.name
    return G


def _vertex_ids(igG) -> list[int]:
    n = igG.vcount()
    if "name" in igG.vs.attributes():
        try:
            ids = [int(x) for x in igG.vs["name"]]
        except (TypeError, ValueError):
            ids = []
        if len(ids) == n and all(i > 0 for i in ids) and len(set(ids)) == n:
            return ids
        warnings.warn(
            "Vertex names are not unique positive integers; assigning ids 1..n",
            RuntimeWarning,
            stacklevel=3,
        )
    return list(range(1, n + 1))


def from_igraph(igG, directed=None) -> "Graph":
    """
    Import an igraph.Graph.

    Vertex ``name`` attributes that parse as unique positive integers become node
    ids; otherwise ids 1..n follow vertex order. ``type`` and ``label`` vertex
    attributes fill the matching node columns, every other vertex attribute becomes
    a node attribute. Edges keep ``rel`` and their other attributes; an ``eid``
    attribute is reused as the edge id when valid.
    """
    if directed is None:
        directed = igG.is_directed()
    ids = _vertex_ids(igG)
    n = len(ids)

    nodes = {ID: ids}
    vattrs = igG.vs.attributes()
    nodes[TYPE] = igG.vs[TYPE] if TYPE in vattrs else [None] * n
    nodes[LABEL] = igG.vs[LABEL] if LABEL in vattrs else [None] * n
    for a in vattrs:
        if a not in ("name", ID, TYPE, LABEL):
            nodes[a] = igG.vs[a]

    m = igG.ecount()
    eattrs = igG.es.attributes()
    eids = list(range(1, m + 1))
    if EID in eattrs:
        cand = igG.es[EID]
        if all(isinstance(e, int) and e > 0 for e in cand) and len(set(cand)) == m:
            eids = list(cand)
    ends = igG.get_edgelist()
    edges = {
        ID: eids,
        FROM: [ids[u] for u, _ in ends],
        TO: [ids[v] for _, v in ends],
        REL: igG.es[REL] if REL in eattrs else [None] * m,
    }
    for a in eattrs:
        if a not in (EID, ID, FROM, TO, REL):
            edges[a] = igG.es[a]

    name = igG["name"] if "name" in igG.attributes() else None
    return Graph(
        pl.DataFrame(nodes, strict=False),
        pl.DataFrame(edges, strict=False),
        directed=directed,
        name=name,
    )


def to_backend(graph, **kwargs):
    """Conversion used by ``G.ig``; see :func:`to_igraph`."""
    return to_igraph(graph, **kwargs)


class IGraphAdapter:
    def export(self, graph, **kwargs):
        return to_igraph(graph, **kwargs)

    def load(self, igG, **kwargs):
        return from_igraph(igG, **kwargs)
