from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import polars as pl
import scipy.sparse as sp

from ._adjacency import AdjacencyIndex
from .errors import IncompatibleGraphs, OutOfRangeParameter, ShapeMismatch
from .graph import Graph
from .selection import Selection
from .stores import EdgeStore, NodeStore
from .structure import (
    FROM,
    ID,
    LABEL,
    RANDOM_VALUE_MAX,
    RANDOM_VALUE_STEP,
    REL,
    TO,
    TYPE,
    VALUE,
    WEIGHT,
)
from .table import concat_frames

__all__ = [
    "combine_graphs",
    "from_adj_matrix",
    "add_full_graph",
    "create_random_graph",
]


def combine_graphs(x: Graph, y: Graph) -> Graph:
    """Union of two graphs; ``y``'s ids are shifted past ``x``'s high-water marks.

    Node ids of ``y`` (and its edges' ``from``/``to``) are offset by ``x.last_id``,
    its edge ids by ``x.last_edge_id``. Columns are aligned; attributes only one side
    has are null on the other. Global attributes, name and time come from ``x``
    and the selection is cleared.

    Raises
    ------
    IncompatibleGraphs
        If one graph is directed and the other is not.
    """
    if x.directed != y.directed:
        raise IncompatibleGraphs("Both graphs must be either directed or undirected")
    node_off, edge_off = x.last_id, x.last_edge_id
    y_nodes = y.nodes.frame.with_columns(pl.col(ID) + node_off)
    y_edges = y.edges.frame.with_columns(
        pl.col(ID) + edge_off, pl.col(FROM) + node_off, pl.col(TO) + node_off
    )
    nodes = NodeStore(concat_frames(x.nodes.frame, y_nodes))
    edges = EdgeStore(concat_frames(x.edges.frame, y_edges))
    return x._derive(
        "combine_graphs",
        {"nodes_added": y.node_count, "edges_added": y.edge_count, "node_offset": node_off},
        _nodes=nodes,
        _edges=edges,
        _adj=AdjacencyIndex.build(nodes.ids(), edges.endpoints()),
        last_id=x.last_id + y.last_id,
        last_edge_id=x.last_edge_id + y.last_edge_id,
        selection=Selection(),
    )


def _as_matrix(matrix) -> tuple[np.ndarray, list[str] | None]:
    names = None
    if isinstance(matrix, pl.DataFrame):
        names = list(matrix.columns)
        a = matrix.to_numpy()
    elif sp.issparse(matrix):
        a = matrix.toarray()
    else:
        a = np.asarray(matrix)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ShapeMismatch(f"The matrix must be square, got shape {a.shape}")
    return a.astype(float), names


def _adj_pairs(a: np.ndarray, directed: bool, use_diag: bool) -> list[tuple[int, int, float]]:
    """Nonzero cells as 0-based ``(from, to, value)`` triples.

    Directed matrices are read row-major. Undirected ones are read from the lower
    triangle, column-major, and emitted as ``(min, max)``.
    """
    n = a.shape[0]
    out = []
    if directed:
        for i in range(n):
            for j in range(n):
                if (i != j or use_diag) and a[i, j] != 0:
                    out.append((i, j, a[i, j]))
        return out
    for j in range(n):
        for i in range(j, n):
            if (i != j or use_diag) and a[i, j] != 0:
                out.append((j, i, a[i, j]))
    return out


def from_adj_matrix(matrix, mode: str = "directed", weighted: bool = False, use_diag: bool = True) -> Graph:
    """Build a graph from a square adjacency matrix.

    Parameters
    ----------
    matrix : array-like | scipy.sparse matrix | polars.DataFrame
        ``n x n`` matrix. Node ``i`` (0-based row/column) becomes node id ``i + 1``.
        A Polars frame's column names become node labels.
    mode : {"directed", "undirected"}
        Undirected graphs only read the lower triangle.
    weighted : bool, default False
        Store each nonzero cell value in a ``weight`` edge column.
    use_diag : bool, default True
        Whether diagonal cells create self-loops.

    Raises
    ------
    ShapeMismatch
        If the matrix is not square.
    OutOfRangeParameter
        For an unknown ``mode``.
    """
    if mode not in ("directed", "undirected"):
        raise OutOfRangeParameter(f"mode must be 'directed' or 'undirected', got {mode!r}")
    a, names = _as_matrix(matrix)
    directed = mode == "directed"
    n = a.shape[0]
    nodes = pl.DataFrame(
        {ID: list(range(1, n + 1)), TYPE: [None] * n, LABEL: names or [None] * n},
        schema={ID: pl.Int64, TYPE: pl.Utf8, LABEL: pl.Utf8},
    )
    pairs = _adj_pairs(a, directed, use_diag)
    cols = {
        ID: list(range(1, len(pairs) + 1)),
        FROM: [u + 1 for u, _, _ in pairs],
        TO: [v + 1 for _, v, _ in pairs],
        REL: [None] * len(pairs),
    }
    schema = {ID: pl.Int64, FROM: pl.Int64, TO: pl.Int64, REL: pl.Utf8}
    if weighted:
        cols[WEIGHT] = [float(w) for _, _, w in pairs]
        schema[WEIGHT] = pl.Float64
    return Graph(nodes, pl.DataFrame(cols, schema=schema), directed=directed)


def add_full_graph(
    graph: Graph,
    n: int,
    type: str | None = None,
    label: bool | Sequence[str] | None = True,
    rel: str | None = None,
    edge_wt_matrix=None,
    keep_loops: bool = False,
) -> Graph:
    """Add a complete graph on ``n`` new nodes.

    Directed graphs get one edge per ordered pair, undirected ones one per
    unordered pair; self-loops only with ``keep_loops``. ``edge_wt_matrix`` (``n x
    n``) supplies a ``weight`` per edge: cell ``(i, j)`` for ``i -> j`` when
    directed, the lower-triangle cell ``(max, min)`` when undirected.

    ``label=True`` labels each new node with its id, or with the weight matrix's
    column names when it is a Polars frame; a sequence of ``n`` labels is used as
    given; ``False``/``None`` leaves labels empty.
    """
    n = int(n)
    if n < 1:
        raise OutOfRangeParameter(f"n must be at least 1, got {n}")
    weights, names = (None, None)
    if edge_wt_matrix is not None:
        weights, names = _as_matrix(edge_wt_matrix)
        if weights.shape[0] != n:
            raise ShapeMismatch(f"edge_wt_matrix must be {n} x {n}, got {weights.shape}")

    ones = np.ones((n, n))
    pairs = _adj_pairs(ones, graph.directed, keep_loops)
    offset = graph.last_id
    ids = list(range(offset + 1, offset + n + 1))

    if isinstance(label, bool) or label is None:
        if label and names is not None:
            labels = names
        elif label:
            labels = [str(i) for i in ids]
        else:
            labels = [None] * n
    else:
        labels = [None if v is None else str(v) for v in label]
        if len(labels) != n:
            raise ShapeMismatch(f"Expected {n} labels, got {len(labels)}")

    nodes = pl.DataFrame(
        {ID: list(range(1, n + 1)), TYPE: [type] * n, LABEL: labels},
        schema={ID: pl.Int64, TYPE: pl.Utf8, LABEL: pl.Utf8},
    )
    cols = {
        ID: list(range(1, len(pairs) + 1)),
        FROM: [u + 1 for u, _, _ in pairs],
        TO: [v + 1 for _, v, _ in pairs],
        REL: [rel] * len(pairs),
    }
    schema = {ID: pl.Int64, FROM: pl.Int64, TO: pl.Int64, REL: pl.Utf8}
    if weights is not None:
        if graph.directed:
            cols[WEIGHT] = [float(weights[u, v]) for u, v, _ in pairs]
        else:
            cols[WEIGHT] = [float(weights[v, u]) for u, v, _ in pairs]
        schema[WEIGHT] = pl.Float64
    new = Graph(nodes, pl.DataFrame(cols, schema=schema), directed=graph.directed)
    return combine_graphs(graph, new)


def _row_starts(n: int) -> np.ndarray:
    # flat index of the first (u, u + 1) pair in row u of the upper triangle
    u = np.arange(n, dtype=np.int64)
    return u * n - u * (u + 1) // 2


def _pairs_from_index(k: np.ndarray, n: int, directed: bool) -> list[tuple[int, int]]:
    """Decode flat pair indices into 1-based ``(from, to)`` pairs without loops."""
    if directed:
        u, r = np.divmod(k, n - 1)
        v = np.where(r < u, r, r + 1)
    else:
        starts = _row_starts(n)
        u = np.searchsorted(starts, k, side="right") - 1
        v = k - starts[u] + u + 1
    return [(int(a) + 1, int(b) + 1) for a, b in zip(u, v)]


def _pair_index(u: int, v: int, n: int, directed: bool) -> int:
    u, v = u - 1, v - 1
    if directed:
        return u * (n - 1) + (v if v < u else v - 1)
    return u * n - u * (u + 1) // 2 + v - u - 1


def create_random_graph(
    n: int,
    m: int,
    directed: bool = False,
    fully_connected: bool = False,
    seed: int | None = None,
) -> Graph:
    """Random simple graph with ``n`` nodes and ``m`` edges (no loops, no multi-edges).

    Parameters
    ----------
    n, m : int
        Node and edge counts. ``m`` may not exceed the number of possible pairs.
    directed : bool, default False
    fully_connected : bool, default False
        Draw a random spanning tree first so no node is isolated; requires
        ``n >= 2`` and ``m >= n - 1``.
    seed : int, optional
        Seed for ``numpy.random.default_rng``.

    Notes
    -----
    Nodes are labelled with their id and carry a ``value`` drawn from
    ``0, 0.5, ..., 10``. Edges are stored sorted by ``(from, to)``.
    """
    n, m = int(n), int(m)
    if n < 0 or m < 0:
        raise OutOfRangeParameter("n and m must be non-negative")
    possible = n * (n - 1) if directed else n * (n - 1) // 2
    if m > possible:
        raise OutOfRangeParameter(
            f"A graph of {n} nodes holds at most {possible} edges without loops or multi-edges, got m={m}"
        )
    rng = np.random.default_rng(seed)

    def key(u, v):
        return (u, v) if directed else (min(u, v), max(u, v))

    chosen: list[tuple[int, int]] = []
    used = set()
    if fully_connected:
        if n < 2 or m < n - 1:
            raise OutOfRangeParameter("A fully connected graph needs n >= 2 and m >= n - 1")
        order = rng.permutation(n) + 1
        for k in range(1, n):
            parent = int(order[rng.integers(0, k)])
            child = int(order[k])
            pair = key(parent, child)
            chosen.append(pair)
            used.add(_pair_index(*pair, n, directed))

    remaining = m - len(chosen)
    if remaining > 0:
        # enough draws to cover the tree pairs that get dropped
        picks = rng.choice(possible, size=remaining + len(used), replace=False)
        fresh = [int(k) for k in picks if int(k) not in used][:remaining]
        chosen.extend(_pairs_from_index(np.asarray(fresh, dtype=np.int64), n, directed))
    chosen.sort()

    steps = np.arange(0.0, RANDOM_VALUE_MAX + RANDOM_VALUE_STEP, RANDOM_VALUE_STEP)
    ids = list(range(1, n + 1))
    nodes = pl.DataFrame(
        {
            ID: ids,
            TYPE: [None] * n,
            LABEL: [str(i) for i in ids],
            VALUE: [float(v) for v in rng.choice(steps, size=n)],
        },
        schema={ID: pl.Int64, TYPE: pl.Utf8, LABEL: pl.Utf8, VALUE: pl.Float64},
    )
    edges = pl.DataFrame(
        {
            ID: list(range(1, len(chosen) + 1)),
            FROM: [u for u, _ in chosen],
            TO: [v for _, v in chosen],
            REL: [None] * len(chosen),
        },
        schema={ID: pl.Int64, FROM: pl.Int64, TO: pl.Int64, REL: pl.Utf8},
    )
    return Graph(nodes, edges, directed=directed)
