from __future__ import annotations

from collections.abc import Iterable

from .structure import Direction


class AdjacencyIndex:
    """Persistent incidence index: node -> {edge_id: other endpoint}.

    ``_out[u]`` maps every edge leaving ``u`` to its target, ``_in[v]`` every edge
    entering ``v`` to its source. Updates copy the outer dicts plus only the inner
    dicts of touched nodes, so an older index held by another Graph value is never
    affected.
    """

    __slots__ = ("_out", "_in")

    def __init__(self, out: dict | None = None, in_: dict | None = None):
        self._out = out if out is not None else {}
        self._in = in_ if in_ is not None else {}

    @classmethod
    def build(cls, node_ids: Iterable[int], edges: Iterable[tuple[int, int, int]]):
        out = {n: {} for n in node_ids}
        in_ = {n: {} for n in out}
        for eid, u, v in edges:
            out[u][eid] = v
            in_[v][eid] = u
        return cls(out, in_)

    # ---- copy-on-write updates ----

    def with_nodes(self, node_ids: Iterable[int]) -> "AdjacencyIndex":
        out, in_ = dict(self._out), dict(self._in)
        for n in node_ids:
            out[n] = {}
            in_[n] = {}
        return AdjacencyIndex(out, in_)

    def without_nodes(self, node_ids: Iterable[int]) -> "AdjacencyIndex":
        # incident edges must already be gone
        out, in_ = dict(self._out), dict(self._in)
        for n in node_ids:
            out.pop(n, None)
            in_.pop(n, None)
        return AdjacencyIndex(out, in_)

    def with_edges(self, edges: Iterable[tuple[int, int, int]]) -> "AdjacencyIndex":
        out, in_ = dict(self._out), dict(self._in)
        copied_out, copied_in = set(), set()
        for eid, u, v in edges:
            if u not in copied_out:
                out[u] = dict(out[u])
                copied_out.add(u)
            if v not in copied_in:
                in_[v] = dict(in_[v])
                copied_in.add(v)
            out[u][eid] = v
            in_[v][eid] = u
        return AdjacencyIndex(out, in_)

    def without_edges(self, edges: Iterable[tuple[int, int, int]]) -> "AdjacencyIndex":
        out, in_ = dict(self._out), dict(self._in)
        copied_out, copied_in = set(), set()
        for eid, u, v in edges:
            if u in out:
                if u not in copied_out:
                    out[u] = dict(out[u])
                    copied_out.add(u)
                out[u].pop(eid, None)
            if v in in_:
                if v not in copied_in:
                    in_[v] = dict(in_[v])
                    copied_in.add(v)
                in_[v].pop(eid, None)
        return AdjacencyIndex(out, in_)

    # ---- queries ----

    def __contains__(self, node_id) -> bool:
        return node_id in self._out

    def out_edges(self, node_id: int) -> dict[int, int]:
        return self._out[node_id]

    def in_edges(self, node_id: int) -> dict[int, int]:
        return self._in[node_id]

    def incident(self, node_id: int) -> set[int]:
        return set(self._out[node_id]) | set(self._in[node_id])

    def degree(self, node_id: int, direction: Direction, directed: bool) -> int:
        n_out = len(self._out[node_id])
        n_in = len(self._in[node_id])
        if not directed or direction is Direction.ALL:
            return n_out + n_in
        return n_out if direction is Direction.OUT else n_in

    def loops(self, node_id: int) -> int:
        return sum(1 for t in self._out[node_id].values() if t == node_id)

    def neighbors(self, node_id: int, direction: Direction, directed: bool) -> set[int]:
        if not directed or direction is Direction.ALL:
            return set(self._out[node_id].values()) | set(self._in[node_id].values())
        if direction is Direction.OUT:
            return set(self._out[node_id].values())
        return set(self._in[node_id].values())

    def edges_between(self, u: int, v: int, directed: bool) -> list[int]:
        hits = [eid for eid, t in self._out.get(u, {}).items() if t == v]
        if not directed and u != v:
            hits += [eid for eid, t in self._out.get(v, {}).items() if t == u]
        return sorted(hits)
