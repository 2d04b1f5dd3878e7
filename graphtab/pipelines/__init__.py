from .join import join_node_attrs, join_edge_attrs, table_from_mapping
from .colorize import colorize_node_attrs, colorize_edge_attrs
from .rescale import rescale_node_attrs, rescale_edge_attrs
from .similarity import SimilarityMatrix, get_common_nbrs, get_dice_similarity

__all__ = [
    "join_node_attrs",
    "join_edge_attrs",
    "table_from_mapping",
    "colorize_node_attrs",
    "colorize_edge_attrs",
    "rescale_node_attrs",
    "rescale_edge_attrs",
    "SimilarityMatrix",
    "get_dice_similarity",
    "get_common_nbrs",
]
