from __future__ import annotations

from collections.abc import Iterable

import numpy as np
import polars as pl
import scipy.sparse as sp

from ..core.errors import DanglingReference, OutOfRangeParameter
from ..core.graph import Graph
from ..core.structure import DEFAULT_ROUND_TO, ID, Direction, as_direction

__all__ = ["SimilarityMatrix", "get_dice_similarity", "get_common_nbrs"]


class SimilarityMatrix:
    """Square, symmetric similarity scores labelled by node id."""

    __slots__ = ("ids", "values", "_pos")

    def __init__(self, ids: Iterable[int], values: np.ndarray):
        self.ids = tuple(ids)
        self.values = np.asarray(values, dtype=float)
        if self.values.shape != (len(self.ids), len(self.ids)):
            raise ValueError("values must be a square matrix matching ids")
        self._pos = {n: i for i, n in enumerate(self.ids)}

    def __repr__(self) -> str:
        return f"<SimilarityMatrix | nodes={len(self.ids)}>"

    def value(self, u: int, v: int) -> float:
        try:
            return float(self.values[self._pos[u], self._pos[v]])
        except KeyError as e:
            raise DanglingReference(f"Node {e.args[0]} is not in the matrix") from None

    def to_frame(self) -> pl.DataFrame:
        """One row per node: ``id`` then one column per node id (as text)."""
        data = {ID: list(self.ids)}
        for j, n in enumerate(self.ids):
            data[str(n)] = self.values[:, j].tolist()
        return pl.DataFrame(data)


def _neighbor_matrix(graph: Graph, direction: Direction) -> tuple[list[int], sp.csr_matrix]:
    ids = graph.node_ids()
    pos = {n: i for i, n in enumerate(ids)}
    rows, cols = [], []
    for n in ids:
        for m in graph.neighbors(n, direction):
            if m != n:
                rows.append(pos[n])
                cols.append(pos[m])
    B = sp.csr_matrix(
        (np.ones(len(rows)), (rows, cols)), shape=(len(ids), len(ids)), dtype=float
    )
    return ids, B


def get_dice_similarity(graph: Graph, nodes: Iterable[int] | None = None, direction="all", round_to: int = DEFAULT_ROUND_TO) -> SimilarityMatrix:
    """Pairwise Dice similarity of neighbor sets.

    ``2 |N(u) & N(v)| / (|N(u)| + |N(v)|)``, where ``N`` follows ``direction``
    (ignored in undirected graphs) and never contains the node itself. Two empty
    neighbor sets score ``0.0``.

    Parameters
    ----------
    nodes : iterable of int, optional
        Restrict rows/columns to these nodes (in the given order). Neighbor sets are
        still taken from the whole graph.
    round_to : int, default 3

    Raises
    ------
    DanglingReference
        If a requested node is not in the graph.
    """
    direction = as_direction(direction)
    ids, B = _neighbor_matrix(graph, direction)
    pos = {n: i for i, n in enumerate(ids)}
    if nodes is None:
        chosen = ids
    else:
        chosen = list(nodes)
        missing = [n for n in chosen if n not in pos]
        if missing:
            raise DanglingReference(f"One or more nodes provided not in graph: {missing}")
    idx = [pos[n] for n in chosen]
    sub = B[idx]
    inter = (sub @ sub.T).toarray()
    sizes = np.asarray(sub.sum(axis=1)).ravel()
    denom = sizes[:, None] + sizes[None, :]
    with np.errstate(divide="ignore", invalid="ignore"):
        dice = np.where(denom > 0, 2.0 * inter / denom, 0.0)
    return SimilarityMatrix(chosen, np.round(dice, round_to))


def get_common_nbrs(graph: Graph, nodes: Iterable[int], direction="all") -> frozenset[int]:
    """Nodes adjacent to every node in ``nodes``.

    Raises
    ------
    OutOfRangeParameter
        If fewer than two nodes are given.
    DanglingReference
        If a node is not in the graph.
    """
    nodes = list(dict.fromkeys(nodes))
    if len(nodes) < 2:
        raise OutOfRangeParameter("At least two nodes are needed to find common neighbors")
    common = None
    for n in nodes:
        nbrs = graph.neighbors(n, direction)
        common = nbrs if common is None else common & nbrs
    return frozenset(common)
