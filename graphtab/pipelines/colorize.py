from __future__ import annotations

from collections.abc import Sequence

from ..core.errors import OutOfRangeParameter
from ..core.graph import Graph
from ..core.structure import DEFAULT_COLOR
from ..utils.colors import alpha_hex, viridis
from ..utils.validation import is_empty_cell, unique_iter
from ._scope import replace_store, store_of

__all__ = ["colorize_node_attrs", "colorize_edge_attrs"]


def _check_cut_points(cut_points) -> list[float]:
    cuts = [float(c) for c in cut_points]
    if len(cuts) < 2:
        raise OutOfRangeParameter("At least two cut points are needed")
    if any(b <= a for a, b in zip(cuts, cuts[1:])):
        raise OutOfRangeParameter("Cut points must be strictly increasing")
    return cuts


def _bucket(v, cuts: list[float]) -> int | None:
    # half-open [c_i, c_i+1); the last cut point closes nothing
    for i in range(len(cuts) - 1):
        if cuts[i] <= v < cuts[i + 1]:
            return i
    return None


def colorize_values(values: list, cut_points=None, alpha=None, default_color: str = DEFAULT_COLOR) -> list[str]:
    """Colour a column of cell values with the viridis palette.

    Without ``cut_points`` each distinct non-empty value gets its own colour, in
    first-seen order. With ``k`` cut points, numeric values fall into ``k - 1``
    half-open buckets. Cells that get no palette colour keep ``default_color``.
    """
    suffix = alpha_hex(alpha)
    if cut_points is None:
        levels = list(unique_iter(v for v in values if not is_empty_cell(v)))
        palette = dict(zip(levels, (c + suffix for c in viridis(len(levels)))))
        return [default_color if is_empty_cell(v) else palette[v] for v in values]

    cuts = _check_cut_points(cut_points)
    palette = [c + suffix for c in viridis(len(cuts) - 1)]
    out = []
    for v in values:
        if is_empty_cell(v):
            out.append(default_color)
            continue
        try:
            num = float(v)
        except (TypeError, ValueError):
            out.append(default_color)
            continue
        b = _bucket(num, cuts)
        out.append(default_color if b is None else palette[b])
    return out


def _colorize(graph: Graph, scope: str, attr_from: str, attr_to: str, cut_points, alpha, default_color) -> Graph:
    store = store_of(graph, scope)
    colors = colorize_values(store.get_column(attr_from), cut_points, alpha, default_color)
    updated = store.set_column(attr_to, colors)
    return replace_store(
        graph,
        scope,
        updated,
        f"colorize_{scope}_attrs",
        attr_from=attr_from,
        attr_to=attr_to,
        cut_points=cut_points,
        alpha=alpha,
    )


def colorize_node_attrs(
    graph: Graph,
    node_attr_from: str,
    node_attr_to: str,
    cut_points: Sequence[float] | None = None,
    alpha: float | None = None,
    default_color: str = DEFAULT_COLOR,
) -> Graph:
    """Write a viridis colour per node into ``node_attr_to`` based on ``node_attr_from``.

    Parameters
    ----------
    cut_points : sequence of float, optional
        Strictly increasing bucket boundaries (at least two). Bucket ``i`` holds
        values ``c_i <= v < c_{i+1}``; values outside every bucket, or not numeric,
        keep ``default_color``.
    alpha : float, optional
        Opacity 0-100 appended to palette colours as two hex digits. ``None`` or
        100 appends nothing.
    default_color : str, default "#D9D9D9"

    Raises
    ------
    ColumnNotFound
        If ``node_attr_from`` is not a node column.
    OutOfRangeParameter
        For bad cut points or an ``alpha`` outside ``[0, 100]``.
    """
    return _colorize(graph, "node", node_attr_from, node_attr_to, cut_points, alpha, default_color)


def colorize_edge_attrs(
    graph: Graph,
    edge_attr_from: str,
    edge_attr_to: str,
    cut_points: Sequence[float] | None = None,
    alpha: float | None = None,
    default_color: str = DEFAULT_COLOR,
) -> Graph:
    """Edge counterpart of :func:`colorize_node_attrs`."""
    return _colorize(graph, "edge", edge_attr_from, edge_attr_to, cut_points, alpha, default_color)
