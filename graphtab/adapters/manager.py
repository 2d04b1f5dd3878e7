from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

from ._proxy import BackendProxy

if TYPE_CHECKING:
    from ..core.graph import Graph

__all__ = [
    "ensure_materialized",
    "get_adapter",
    "get_proxy",
]

# backend name -> (library to import, adapter module that converts Graph -> backend graph)
_REGISTRY = {
    "networkx": ("networkx", "graphtab.adapters.networkx"),
    "igraph": ("igraph", "graphtab.adapters.igraph"),
}


def get_adapter(name: str):
    """Return a *new* adapter instance of the requested backend."""
    try:
        _, modname = _REGISTRY[name.lower()]
    except KeyError:
        raise ValueError(f"No adapter registered for '{name}'") from None
    mod = importlib.import_module(modname)
    cls = {"networkx": "NetworkXAdapter", "igraph": "IGraphAdapter"}[name.lower()]
    return getattr(mod, cls)()


def get_proxy(backend_name: str, graph: "Graph") -> BackendProxy:
    """Return a lazy proxy so users can write `G.nx.<algo>()`."""
    if backend_name not in _REGISTRY:
        raise ValueError(f"No backend '{backend_name}' registered")
    return BackendProxy(graph, backend_name)


def ensure_materialized(backend_name: str, graph: "Graph") -> dict:
    """
    Convert *graph* into the requested backend object once and cache the result on
    the graph's private state object. Returns the cache entry:
    {"module": nx, "graph": nx.MultiDiGraph, "version": int}
    """
    cache = graph._state._backend_cache  # per-instance cache
    entry = cache.get(backend_name)

    if entry is None or graph._state.dirty_since(entry["version"]):
        libname, adapter = _REGISTRY[backend_name]
        backend_module = importlib.import_module(libname)
        converted = importlib.import_module(adapter).to_backend(graph)
        entry = cache[backend_name] = {
            "module": backend_module,
            "graph": converted,
            "version": graph._state.version,
        }

    return entry
