# graphtab/__init__.py
"""graphtab: single import, full API."""
from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    # namespaces
    "adapters": "graphtab.adapters",
    "io": "graphtab.io",
    "core": "graphtab.core",
    "pipelines": "graphtab.pipelines",
    "utils": "graphtab.utils",
    # adapter modules (direct convenience)
    "networkx": "graphtab.adapters.networkx",
    "igraph": "graphtab.adapters.igraph",
    "dataframe": "graphtab.adapters.dataframe_adapter",
    # io modules
    "csvio": "graphtab.io.csv",
}

_sel = "graphtab.core.selection"
_attrs = "graphtab.core.attrs"
_build = "graphtab.core.builders"
_series = "graphtab.core.series"

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Core
    "Graph": ("graphtab.core.graph", "Graph"),
    "AttributeTable": ("graphtab.core.table", "AttributeTable"),
    "NodeStore": ("graphtab.core.stores", "NodeStore"),
    "EdgeStore": ("graphtab.core.stores", "EdgeStore"),
    "Direction": ("graphtab.core.structure", "Direction"),

    # Structural builders
    "combine_graphs": (_build, "combine_graphs"),
    "from_adj_matrix": (_build, "from_adj_matrix"),
    "add_full_graph": (_build, "add_full_graph"),
    "create_random_graph": (_build, "create_random_graph"),

    # Attribute access
    "get_node_attrs": (_attrs, "get_node_attrs"),
    "set_node_attrs": (_attrs, "set_node_attrs"),
    "get_edge_attrs": (_attrs, "get_edge_attrs"),
    "set_edge_attrs": (_attrs, "set_edge_attrs"),
    "node_info": (_attrs, "node_info"),
    "edge_info": (_attrs, "edge_info"),
    "set_global_graph_attrs": (_attrs, "set_global_graph_attrs"),
    "get_global_graph_attrs": (_attrs, "get_global_graph_attrs"),
    "delete_global_graph_attrs": (_attrs, "delete_global_graph_attrs"),
    "clear_global_graph_attrs": (_attrs, "clear_global_graph_attrs"),

    # Selections
    "Selection": (_sel, "Selection"),
    "select_nodes": (_sel, "select_nodes"),
    "select_nodes_by_id": (_sel, "select_nodes_by_id"),
    "select_edges": (_sel, "select_edges"),
    "select_edges_by_edge_id": (_sel, "select_edges_by_edge_id"),
    "clear_selection": (_sel, "clear_selection"),
    "get_selection": (_sel, "get_selection"),
    "invert_selection": (_sel, "invert_selection"),
    "set_node_attrs_ws": (_sel, "set_node_attrs_ws"),
    "set_edge_attrs_ws": (_sel, "set_edge_attrs_ws"),
    "trav_out": (_sel, "trav_out"),
    "trav_in": (_sel, "trav_in"),
    "trav_both": (_sel, "trav_both"),
    "delete_nodes_ws": (_sel, "delete_nodes_ws"),
    "delete_edges_ws": (_sel, "delete_edges_ws"),

    # Series
    "GraphSeries": (_series, "GraphSeries"),
    "add_to_series": (_series, "add_to_series"),
    "remove_from_series": (_series, "remove_from_series"),
    "get_graph_from_series": (_series, "get_graph_from_series"),
    "graph_count": (_series, "graph_count"),
    "series_info": (_series, "series_info"),

    # Pipelines
    "join_node_attrs": ("graphtab.pipelines.join", "join_node_attrs"),
    "join_edge_attrs": ("graphtab.pipelines.join", "join_edge_attrs"),
    "table_from_mapping": ("graphtab.pipelines.join", "table_from_mapping"),
    "colorize_node_attrs": ("graphtab.pipelines.colorize", "colorize_node_attrs"),
    "colorize_edge_attrs": ("graphtab.pipelines.colorize", "colorize_edge_attrs"),
    "rescale_node_attrs": ("graphtab.pipelines.rescale", "rescale_node_attrs"),
    "rescale_edge_attrs": ("graphtab.pipelines.rescale", "rescale_edge_attrs"),
    "get_dice_similarity": ("graphtab.pipelines.similarity", "get_dice_similarity"),
    "get_common_nbrs": ("graphtab.pipelines.similarity", "get_common_nbrs"),

    # NetworkX / igraph adapters (optional dependencies)
    "to_nx": ("graphtab.adapters.networkx", "to_nx"),
    "from_nx": ("graphtab.adapters.networkx", "from_nx"),
    "to_igraph": ("graphtab.adapters.igraph", "to_igraph"),
    "from_igraph": ("graphtab.adapters.igraph", "from_igraph"),

    # DataFrames / CSV
    "to_dataframes": ("graphtab.adapters.dataframe_adapter", "to_dataframes"),
    "from_dataframes": ("graphtab.adapters.dataframe_adapter", "from_dataframes"),
    "load_csv_to_graph": ("graphtab.io.csv", "load_csv_to_graph"),
    "write_csv": ("graphtab.io.csv", "write_csv"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("graphtab")
except PackageNotFoundError:
    __version__ = "0.0.0"
