from enum import Enum

import polars as pl

from .errors import OutOfRangeParameter

__all__ = [
    "Direction",
    "AttrScope",
    "ID",
    "TYPE",
    "LABEL",
    "FROM",
    "TO",
    "REL",
    "WEIGHT",
    "VALUE",
    "NODE_SCHEMA",
    "EDGE_SCHEMA",
    "DEFAULT_COLOR",
    "DEFAULT_TZ",
    "DEFAULT_ROUND_TO",
    "RESCALE_DIGITS",
    "as_direction",
]


class Direction(str, Enum):
    """Which incident edges a degree or neighbor query looks at.

    Attributes:
        IN: Edges pointing at the node
        OUT: Edges leaving the node
        ALL: Both
    """

    IN = "in"
    OUT = "out"
    ALL = "all"


class AttrScope(str, Enum):
    """Scope of a global attribute default (GRAPH, NODE, EDGE)."""

    GRAPH = "graph"
    NODE = "node"
    EDGE = "edge"


# Column names
ID = "id"
TYPE = "type"
LABEL = "label"
FROM = "from"
TO = "to"
REL = "rel"
WEIGHT = "weight"
VALUE = "value"

NODE_SCHEMA = {ID: pl.Int64, TYPE: pl.Utf8, LABEL: pl.Utf8}
EDGE_SCHEMA = {ID: pl.Int64, FROM: pl.Int64, TO: pl.Int64, REL: pl.Utf8}

# Defaults
DEFAULT_COLOR = "#D9D9D9"  # gray85
DEFAULT_TZ = "GMT"
DEFAULT_ROUND_TO = 3
RESCALE_DIGITS = 3
RANDOM_VALUE_STEP = 0.5
RANDOM_VALUE_MAX = 10.0


def as_direction(direction) -> Direction:
    try:
        return Direction(direction)
    except ValueError:
        raise OutOfRangeParameter(
            f"direction must be one of 'in'|'out'|'all', got {direction!r}"
        ) from None

"""
Node and edge tables share one representation: a Polars frame keyed by an integer
`id` column. Edges reference nodes through `from`/`to`.
"""
