from __future__ import annotations

import copy
import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import polars as pl

from ._adjacency import AdjacencyIndex
from ._state import _State
from .errors import DanglingReference, OutOfRangeParameter, ProtectedColumn
from .selection import Selection
from .stores import EdgeStore, NodeStore
from .structure import (
    DEFAULT_TZ,
    FROM,
    ID,
    LABEL,
    REL,
    TO,
    TYPE,
    AttrScope,
    Direction,
    as_direction,
)

__all__ = [
    "Graph",
]


def _normalize_global_attrs(global_attrs) -> dict[str, dict[str, Any]]:
    out = {s.value: {} for s in AttrScope}
    for scope, attrs in (global_attrs or {}).items():
        try:
            key = AttrScope(scope).value
        except ValueError:
            raise OutOfRangeParameter(
                f"attr_type must be one of 'graph'|'node'|'edge', got {scope!r}"
            ) from None
        out[key].update(dict(attrs))
    return out


def _check_time(time) -> str | None:
    if time is None:
        return None
    if isinstance(time, datetime):
        return time.isoformat()
    try:
        datetime.fromisoformat(str(time))
    except ValueError:
        raise OutOfRangeParameter(f"Graph time {time!r} is not an ISO-8601 date/time") from None
    return str(time)


class Graph:
    """Attributed graph value: a node table, an edge table and a directedness flag.

    Parameters
    ----------
    nodes : NodeStore | polars.DataFrame | dict, optional
        Node table (ndf). Needs an integer ``id`` column; ``type`` and ``label`` are
        created empty if missing.
    edges : EdgeStore | polars.DataFrame | dict, optional
        Edge table (edf) with ``from`` and ``to`` columns referencing node ids. An
        ``id`` column is generated (1..E) when absent.
    directed : bool, default True
        Fixed for the lifetime of the graph and every graph derived from it.
    global_attrs : dict, optional
        ``{"graph"|"node"|"edge": {name: default}}`` for downstream renderers.
    name, time, tz : optional
        Series metadata. ``time`` must be ISO-8601; ``tz`` defaults to ``"GMT"``.

    Notes
    -----
    - Graph values are immutable. Every structural or attribute operation returns a
      new Graph and leaves the receiver untouched.
    - ``last_id`` / ``last_edge_id`` are high-water marks: ids are allocated as
      ``last + 1`` and never reused, even after removals or merges.
    - Degree and neighbor queries are answered from an adjacency index updated on
      every structural change.
    """

    __slots__ = (
        "directed",
        "_nodes",
        "_edges",
        "last_id",
        "last_edge_id",
        "_global_attrs",
        "selection",
        "name",
        "time",
        "tz",
        "_adj",
        "_state",
    )

    def __init__(
        self,
        nodes=None,
        edges=None,
        directed: bool = True,
        *,
        global_attrs=None,
        name: str | None = None,
        time=None,
        tz: str = DEFAULT_TZ,
    ):
        node_store = nodes if isinstance(nodes, NodeStore) else NodeStore(nodes)
        if edges is not None and not isinstance(edges, EdgeStore):
            frame = edges if isinstance(edges, pl.DataFrame) else pl.DataFrame(edges)
            if ID not in frame.columns:
                frame = frame.with_columns(pl.int_range(1, frame.height + 1, dtype=pl.Int64).alias(ID))
            edges = frame
        edge_store = edges if isinstance(edges, EdgeStore) else EdgeStore(edges)
        edge_store.check_endpoints(node_store.index())

        self.directed = bool(directed)
        self._nodes = node_store
        self._edges = edge_store
        self.last_id = max(node_store.ids(), default=0)
        self.last_edge_id = max(edge_store.ids(), default=0)
        self._global_attrs = _normalize_global_attrs(global_attrs)
        self.selection = Selection()
        self.name = name
        self.time = _check_time(time)
        self.tz = tz
        self._adj = AdjacencyIndex.build(node_store.ids(), edge_store.endpoints())
        self._state = _State().derive(
            "create_graph", directed=self.directed, n=node_store.height, e=edge_store.height
        )

    def __repr__(self) -> str:
        return f"<Graph | V={self.node_count} · E={self.edge_count} · directed={self.directed}>"

    def _derive(self, op: str, fields: dict | None = None, **changes) -> "Graph":
        """Return a copy of this graph with ``changes`` applied and ``op`` logged."""
        new = object.__new__(Graph)
        for slot in Graph.__slots__:
            setattr(new, slot, changes.pop(slot, getattr(self, slot)))
        if changes:
            raise TypeError(f"Unknown graph fields: {sorted(changes)}")
        new._state = self._state.derive(op, **(fields or {}))
        return new

    # Read-only views

    @property
    def nodes(self) -> NodeStore:
        """The node table (ndf)."""
        return self._nodes

    @property
    def edges(self) -> EdgeStore:
        """The edge table (edf)."""
        return self._edges

    @property
    def global_attrs(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._global_attrs)

    @property
    def node_count(self) -> int:
        return self._nodes.height

    @property
    def edge_count(self) -> int:
        return self._edges.height

    def is_empty(self) -> bool:
        return self._nodes.height == 0

    def node_ids(self) -> list[int]:
        return self._nodes.ids()

    def edge_ids(self) -> list[int]:
        return self._edges.ids()

    def has_node(self, node_id) -> bool:
        return self._nodes.has(node_id)

    def _require_node(self, node_id) -> None:
        if not self._nodes.has(node_id):
            raise DanglingReference(f"Node {node_id} does not exist")

    def get_edge_ids(self, from_, to) -> list[int]:
        """Ids of every edge between ``from_`` and ``to`` (either orientation if undirected)."""
        return self._adj.edges_between(from_, to, self.directed)

    def has_edge(self, from_, to) -> bool:
        return bool(self.get_edge_ids(from_, to))

    def incident_edges(self, node_id) -> list[int]:
        self._require_node(node_id)
        return sorted(self._adj.incident(node_id))

    def degree(self, node_id, direction: Direction | str = "all") -> int:
        """Number of incident edges of ``node_id``.

        ``direction`` selects in/out/all edges in a directed graph and is ignored in
        an undirected one. A self-loop counts twice towards the ``all`` degree.
        """
        self._require_node(node_id)
        return self._adj.degree(node_id, as_direction(direction), self.directed)

    def loops(self, node_id) -> int:
        self._require_node(node_id)
        return self._adj.loops(node_id)

    def neighbors(self, node_id, direction: Direction | str = "all") -> frozenset[int]:
        self._require_node(node_id)
        return frozenset(self._adj.neighbors(node_id, as_direction(direction), self.directed))

    # Structural operations

    def add_node(self, type: str | None = None, label: str | None = None, **attrs) -> tuple["Graph", int]:
        """Add one node.

        Returns
        -------
        tuple[Graph, int]
            The new graph and the id allocated to the node (``last_id + 1``).
        """
        if ID in attrs:
            raise ProtectedColumn("Node ids are allocated by the graph")
        node_id = self.last_id + 1
        row = {ID: node_id, TYPE: type, LABEL: label, **attrs}
        g = self._derive(
            "add_node",
            {"type": type, "label": label, "attrs": attrs, "result": node_id},
            _nodes=self._nodes.insert([row]),
            _adj=self._adj.with_nodes([node_id]),
            last_id=node_id,
        )
        return g, node_id

    def add_n_nodes(self, n: int, type: str | None = None, label=None) -> "Graph":
        """Add ``n`` nodes sharing ``type``; ``label`` is one value or ``n`` values."""
        n = int(n)
        if n < 0:
            raise OutOfRangeParameter(f"n must be non-negative, got {n}")
        if n == 0:
            return self
        ids = list(range(self.last_id + 1, self.last_id + n + 1))
        if label is None or isinstance(label, str):
            labels = [label] * n
        else:
            labels = list(label)
            if len(labels) != n:
                raise OutOfRangeParameter(f"Expected {n} labels, got {len(labels)}")
        rows = [{ID: i, TYPE: type, LABEL: lab} for i, lab in zip(ids, labels)]
        return self._derive(
            "add_n_nodes",
            {"n": n, "type": type, "result": ids},
            _nodes=self._nodes.insert(rows),
            _adj=self._adj.with_nodes(ids),
            last_id=ids[-1],
        )

    def add_edge(self, from_, to, rel: str | None = None, **attrs) -> "Graph":
        """Add one edge ``from_ -> to``.

        Raises
        ------
        DanglingReference
            If either endpoint is not a node of the graph.
        """
        return self.add_edges([(from_, to)], rel=rel, _op="add_edge", **attrs)

    def add_edges(self, pairs: Iterable[tuple[int, int]], rel: str | None = None, _op: str = "add_edges", **attrs) -> "Graph":
        """Add one edge per ``(from, to)`` pair, all sharing ``rel`` and ``attrs``."""
        reserved = {ID, FROM, TO} & set(attrs)
        if reserved:
            raise ProtectedColumn(f"Cannot pass {sorted(reserved)} as edge attributes")
        pairs = [(u, v) for u, v in pairs]
        if not pairs:
            return self
        eid0 = self.last_edge_id
        rows = [
            {ID: eid0 + k, FROM: u, TO: v, REL: rel, **attrs}
            for k, (u, v) in enumerate(pairs, start=1)
        ]
        edges = self._edges.insert(rows, self._nodes.index())
        triples = [(r[ID], r[FROM], r[TO]) for r in rows]
        return self._derive(
            _op,
            {"pairs": pairs, "rel": rel, "attrs": attrs, "result": [t[0] for t in triples]},
            _edges=edges,
            _adj=self._adj.with_edges(triples),
            last_edge_id=eid0 + len(rows),
        )

    def remove_node(self, node_id) -> "Graph":
        """Remove a node and every edge incident to it."""
        return self.remove_nodes([node_id], _op="remove_node")

    def remove_nodes(self, node_ids: Iterable[int], _op: str = "remove_nodes") -> "Graph":
        node_ids = list(dict.fromkeys(node_ids))
        for n in node_ids:
            self._require_node(n)
        incident = set()
        for n in node_ids:
            incident |= self._adj.incident(n)
        g = self._drop_edges(sorted(incident)) if incident else self
        gone = set(node_ids)
        sel = g.selection
        return g._derive(
            _op,
            {"node_ids": node_ids, "cascaded_edges": sorted(incident)},
            _nodes=g._nodes.remove(node_ids),
            _adj=g._adj.without_nodes(node_ids),
            selection=Selection(sel.nodes - gone, sel.edges - incident),
        )

    def remove_edge(self, edge_id=None, *, from_=None, to=None) -> "Graph":
        """Remove an edge by id, or every edge between ``from_`` and ``to``."""
        by_pair = from_ is not None or to is not None
        if (edge_id is None) == (not by_pair):
            raise OutOfRangeParameter("Provide either edge_id OR (from_ and to), but not both.")
        if by_pair:
            if from_ is None or to is None:
                raise OutOfRangeParameter("Both from_ and to are required.")
            ids = self.get_edge_ids(from_, to)
            if not ids:
                raise DanglingReference(f"No edge between {from_} and {to}")
        else:
            self._edges.row_index(edge_id)
            ids = [edge_id]
        return self.remove_edges(ids, _op="remove_edge")

    def remove_edges(self, edge_ids: Iterable[int], _op: str = "remove_edges") -> "Graph":
        edge_ids = list(dict.fromkeys(edge_ids))
        for e in edge_ids:
            self._edges.row_index(e)
        g = self._drop_edges(edge_ids)
        return g._derive(_op, {"edge_ids": edge_ids})

    def _drop_edges(self, edge_ids: list[int]) -> "Graph":
        # unlogged helper; callers log the operation that needed it
        store = self._edges
        rows = store.rows_for(edge_ids)
        frame = store.frame
        triples = [(frame[r, ID], frame[r, FROM], frame[r, TO]) for r in rows]
        g = object.__new__(Graph)
        for slot in Graph.__slots__:
            setattr(g, slot, getattr(self, slot))
        g._edges = store.drop_rows(rows)
        g._adj = self._adj.without_edges(triples)
        g.selection = Selection(self.selection.nodes, self.selection.edges - set(edge_ids))
        return g

    # Table replacement (attribute pipelines)

    def _with_nodes(self, store: NodeStore, op: str, **fields) -> "Graph":
        if not isinstance(store, NodeStore):
            store = NodeStore(store)
        if store.index().keys() != self._nodes.index().keys():
            raise OutOfRangeParameter("Attribute operations must not change the node set")
        return self._derive(op, fields, _nodes=store)

    def _with_edges(self, store: EdgeStore, op: str, **fields) -> "Graph":
        if not isinstance(store, EdgeStore):
            store = EdgeStore(store)
        if sorted(store.endpoints()) != sorted(self._edges.endpoints()):
            raise OutOfRangeParameter("Attribute operations must not change the edge set")
        return self._derive(op, fields, _edges=store)

    def _with_selection(self, selection: Selection, op: str, **fields) -> "Graph":
        return self._derive(op, fields, selection=selection)

    def _with_global_attrs(self, global_attrs: Mapping, op: str, **fields) -> "Graph":
        return self._derive(op, fields, _global_attrs=_normalize_global_attrs(global_attrs))

    def with_metadata(self, *, name=..., time=..., tz=...) -> "Graph":
        """Return a graph with updated ``name`` / ``time`` / ``tz`` (omitted ones kept)."""
        changes = {}
        if name is not ...:
            changes["name"] = name
        if time is not ...:
            changes["time"] = _check_time(time)
        if tz is not ...:
            changes["tz"] = tz
        return self._derive("with_metadata", dict(changes), **changes)

    # History

    def history(self, as_df: bool = False):
        """Return the append-only mutation history of this graph value.

        Parameters
        ----------
        as_df : bool, default False
            If True, return a Polars DF [DataFrame]; otherwise a list of dicts.

        Returns
        -------
        list[dict] or polars.DataFrame
            Each event includes ``version``, ``ts_utc`` (ISO-8601 UTC), ``mono_ns``
            (monotonic nanoseconds since import), ``op`` and the call fields. Events
            of the graphs this one was derived from come first.
        """
        events = [dict(e) for e in self._state.history]
        if not as_df:
            return events
        core = ("version", "ts_utc", "mono_ns", "op")
        rows = [
            {k: (v if k in core else json.dumps(v)) for k, v in e.items()} for e in events
        ]
        return pl.DataFrame(rows, infer_schema_length=None)

    def with_history(self, enabled: bool = True) -> "Graph":
        """Return the same graph with history recording switched on or off."""
        g = object.__new__(Graph)
        for slot in Graph.__slots__:
            setattr(g, slot, getattr(self, slot))
        g._state = self._state.toggled(enabled)
        return g

    def mark(self, label: str) -> "Graph":
        """Return the same graph with a manual ``mark`` event appended to its history."""
        return self._derive("mark", {"label": label})

    def export_history(self, path: str) -> int:
        """Write the mutation history to ``path``.

        Supported extensions: ``.parquet``, ``.ndjson``/``.jsonl``, ``.json``, ``.csv``.
        Unknown extensions default to Parquet by appending ``.parquet``.

        Returns
        -------
        int
            Number of events written (0 if the history is empty).
        """
        if not self._state.history:
            return 0
        df = self.history(as_df=True)
        p = str(path).lower()
        if p.endswith(".parquet"):
            df.write_parquet(path)
        elif p.endswith(".ndjson") or p.endswith(".jsonl"):
            df.write_ndjson(path)
        elif p.endswith(".json"):
            df.write_json(path)
        elif p.endswith(".csv"):
            df.write_csv(path)
        else:
            df.write_parquet(str(path) + ".parquet")
        return df.height

    # Lazy backend proxies

    @property
    def nx(self):
        """Lazy NetworkX proxy: ``G.nx.degree_centrality()`` runs on a cached conversion."""
        from ..adapters.manager import get_proxy

        return get_proxy("networkx", self)

    @property
    def ig(self):
        """Lazy python-igraph proxy: ``G.ig.pagerank()`` runs on a cached conversion."""
        from ..adapters.manager import get_proxy

        return get_proxy("igraph", self)
