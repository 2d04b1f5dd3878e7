from ..core.graph import Graph


def store_of(graph: Graph, scope: str):
    return graph.nodes if scope == "node" else graph.edges


def replace_store(graph: Graph, scope: str, store, op: str, **fields) -> Graph:
    if scope == "node":
        return graph._with_nodes(store, op, **fields)
    return graph._with_edges(store, op, **fields)
