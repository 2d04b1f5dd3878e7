from __future__ import annotations

import math
import warnings

from ..core.errors import OutOfRangeParameter
from ..core.graph import Graph
from ..core.structure import RESCALE_DIGITS
from ..utils.colors import gradient, is_color_name
from ._scope import replace_store, store_of

__all__ = ["rescale_node_attrs", "rescale_edge_attrs", "rescale_values"]


def _observed_range(nums: list) -> tuple[float, float] | None:
    finite = [v for v in nums if v is not None and math.isfinite(v)]
    if not finite:
        return None
    return min(finite), max(finite)


def rescale_values(nums: list, to_lower=0, to_upper=1, from_lower=None, from_upper=None) -> list:
    """Map ``nums`` linearly onto ``[to_lower, to_upper]``.

    The source range is ``[from_lower, from_upper]`` when both are given, else the
    observed finite range. Numeric targets are rounded to three decimals. When both
    targets are colour names the result is a CIELAB gradient of ``#RRGGBB`` strings.
    ``None`` stays ``None``.
    """
    lo_color, hi_color = is_color_name(to_lower), is_color_name(to_upper)
    if lo_color != hi_color:
        raise OutOfRangeParameter("Bounds must both be numbers or both be colour names")
    if not lo_color:
        try:
            to_lower, to_upper = float(to_lower), float(to_upper)
        except (TypeError, ValueError):
            raise OutOfRangeParameter(
                f"Unknown bounds {to_lower!r}, {to_upper!r}: expected numbers or colour names"
            ) from None

    if from_lower is not None and from_upper is not None:
        src = (float(from_lower), float(from_upper))
    else:
        src = _observed_range(nums)
    if src is None:
        return [None] * len(nums)

    lo, hi = src
    if hi == lo:
        warnings.warn(
            f"Source range has zero width ({lo}); mapping every value to the midpoint",
            RuntimeWarning,
            stacklevel=3,
        )
        pos = [None if v is None else 0.5 for v in nums]
    else:
        pos = [None if v is None else (v - lo) / (hi - lo) for v in nums]

    if lo_color:
        return gradient(to_lower, to_upper, pos)
    span = to_upper - to_lower
    return [None if p is None else round(to_lower + p * span, RESCALE_DIGITS) for p in pos]


def _rescale(graph: Graph, scope: str, attr_from, to_lower, to_upper, attr_to, from_lower, from_upper) -> Graph:
    store = store_of(graph, scope)
    nums = store.numeric_column(attr_from)
    out = rescale_values(nums, to_lower, to_upper, from_lower, from_upper)
    target = attr_to or attr_from
    updated = store.set_column(target, out)
    return replace_store(
        graph,
        scope,
        updated,
        f"rescale_{scope}_attrs",
        attr_from=attr_from,
        attr_to=target,
        to=[to_lower, to_upper],
        source=[from_lower, from_upper],
    )


def rescale_node_attrs(
    graph: Graph,
    node_attr_from: str,
    to_lower_bound=0,
    to_upper_bound=1,
    node_attr_to: str | None = None,
    from_lower_bound=None,
    from_upper_bound=None,
) -> Graph:
    """Rescale a numeric node attribute onto a new numeric range or colour gradient.

    Parameters
    ----------
    node_attr_from : str
        Numeric node column to rescale.
    to_lower_bound, to_upper_bound : float | str
        Target range. Two colour names (e.g. ``"red"``, ``"steelblue"``) produce a
        colour gradient instead of numbers.
    node_attr_to : str, optional
        Column to write; overwrites ``node_attr_from`` when omitted.
    from_lower_bound, from_upper_bound : float, optional
        Explicit source range; both must be given, otherwise the observed range is
        used.

    Raises
    ------
    NonNumericColumn
        If ``node_attr_from`` holds text.
    OutOfRangeParameter
        If one bound is a colour and the other a number.

    Warns
    -----
    RuntimeWarning
        When the source range has zero width.
    """
    return _rescale(
        graph, "node", node_attr_from, to_lower_bound, to_upper_bound,
        node_attr_to, from_lower_bound, from_upper_bound,
    )


def rescale_edge_attrs(
    graph: Graph,
    edge_attr_from: str,
    to_lower_bound=0,
    to_upper_bound=1,
    edge_attr_to: str | None = None,
    from_lower_bound=None,
    from_upper_bound=None,
) -> Graph:
    """Edge counterpart of :func:`rescale_node_attrs`."""
    return _rescale(
        graph, "edge", edge_attr_from, to_lower_bound, to_upper_bound,
        edge_attr_to, from_lower_bound, from_upper_bound,
    )
