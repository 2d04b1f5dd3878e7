from collections.abc import Mapping

import polars as pl


class BackendProxy:
    """Forward attribute access to a backend library, bound to a cached conversion.

    ``G.nx.degree_centrality()`` calls ``networkx.degree_centrality(nxG)``; names the
    module lacks are looked up on the converted graph itself, so ``G.ig.pagerank()``
    calls ``igG.pagerank()``.
    """

    def __init__(self, graph, backend_name):
        from .manager import ensure_materialized

        self._graph = graph
        self._backend = ensure_materialized(backend_name, graph)

    def __getattr__(self, name):
        # Try backend-level function (e.g., networkx.shortest_path)
        fn = getattr(self._backend["module"], name, None)
        if callable(fn):

            def wrapped(*args, **kwargs):
                return fn(self._backend["graph"], *args, **kwargs)

            return wrapped

        # Otherwise forward attribute to the backend graph itself
        return getattr(self._backend["graph"], name)

    @property
    def graph(self):
        """The converted backend graph."""
        return self._backend["graph"]

    def as_node_table(self, result, column: str) -> pl.DataFrame:
        """Turn a per-node algorithm result into an ``id``/``column`` table.

        Accepts a mapping keyed by node id (NetworkX style) or a sequence with one
        value per node in vertex order (igraph style).
        """
        from ..pipelines.join import table_from_mapping

        if isinstance(result, Mapping):
            return table_from_mapping(result, column)
        values = list(result)
        ids = self._graph.node_ids()
        if len(values) != len(ids):
            raise ValueError(f"Expected {len(ids)} values, one per node, got {len(values)}")
        return table_from_mapping(dict(zip(ids, values)), column)
