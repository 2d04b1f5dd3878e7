from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

import polars as pl

from .errors import (
    DanglingReference,
    DuplicateIdentity,
    DuplicateKey,
    OutOfRangeParameter,
    ProtectedColumn,
)
from .structure import EDGE_SCHEMA, FROM, ID, NODE_SCHEMA, TO
from .table import AttributeTable, as_frame

__all__ = ["NodeStore", "EdgeStore"]


def _with_required(frame, schema: dict) -> pl.DataFrame:
    """Add missing required columns, cast them to their dtypes, move them first."""
    if frame is None:
        return pl.DataFrame(schema=schema)
    df = as_frame(frame)
    missing = [pl.lit(None).cast(dt).alias(c) for c, dt in schema.items() if c not in df.columns]
    if missing:
        df = df.with_columns(missing)
    casts = []
    for c, dt in schema.items():
        if df.schema[c] == dt:
            continue
        if dt == pl.Utf8:
            casts.append(pl.col(c).cast(pl.Utf8))
        else:
            casts.append(pl.col(c).cast(dt, strict=True))
    if casts:
        try:
            df = df.with_columns(casts)
        except pl.exceptions.PolarsError as e:
            raise OutOfRangeParameter(
                f"Columns {[c for c, dt in schema.items() if dt == pl.Int64]} must hold integers"
            ) from e
    order = list(schema) + [c for c in df.columns if c not in schema]
    return df.select(order)


def _check_ids(df: pl.DataFrame, what: str) -> None:
    ids = df.get_column(ID)
    if ids.null_count():
        raise OutOfRangeParameter(f"{what} ids must not be empty")
    if df.height and ids.min() < 1:
        raise OutOfRangeParameter(f"{what} ids must be positive integers")
    dup = ids.filter(ids.is_duplicated()).unique().sort().to_list()
    if dup:
        raise DuplicateIdentity(f"Duplicate {what.lower()} ids: {dup}")


class _Store(AttributeTable):
    """Attribute table whose ``id`` column is a unique positive integer identity."""

    __slots__ = ("_index",)

    SCHEMA: dict = {}
    PROTECTED: frozenset = frozenset({ID})
    WHAT = "Row"

    def __init__(self, frame=None):
        df = _with_required(frame, self.SCHEMA)
        _check_ids(df, self.WHAT)
        super().__init__(df, key=ID)
        self._index = None

    def _replace(self, df: pl.DataFrame):
        new = super()._replace(df)
        new._index = None
        return new

    def index(self) -> dict[int, int]:
        """Map of id -> row position (built once per store value)."""
        if self._index is None:
            self._index = {i: r for r, i in enumerate(self._df.get_column(ID).to_list())}
        return self._index

    def ids(self) -> list[int]:
        return self._df.get_column(ID).to_list()

    def has(self, item_id) -> bool:
        return item_id in self.index()

    def row_index(self, item_id) -> int:
        try:
            return self.index()[item_id]
        except KeyError:
            raise DanglingReference(f"{self.WHAT} {item_id} not found") from None

    def rows_for(self, ids: Iterable[int]) -> list[int]:
        return [self.row_index(i) for i in ids]

    def set_column(self, name: str, values, rows=None):
        if name in self.PROTECTED:
            raise ProtectedColumn(f"You cannot alter values of '{name}'")
        return super().set_column(name, values, rows)

    def drop_column(self, name: str):
        if name in self.SCHEMA:
            raise ProtectedColumn(f"Column '{name}' is required")
        return super().drop_column(name)

    def left_join(self, other, on_self=None, on_other=None, suffix: str = "_right"):
        """Left join keeping exactly one row per identity.

        Raises
        ------
        DuplicateKey
            If a row matches several right-hand rows; a fan-out would duplicate ids.
        """
        joined = super().left_join(other, on_self, on_other, suffix)
        if joined.height != self.height:
            counts = joined.frame.get_column(ID).value_counts()
            dup = counts.filter(pl.col("count") > 1).get_column(ID).sort().to_list()
            raise DuplicateKey(f"Joined table matches {self.WHAT.lower()}s {dup} more than once")
        return joined

    def remove(self, ids: Iterable[int]):
        return self.drop_rows(self.rows_for(ids))

    def _check_new_ids(self, rows: list[dict]) -> None:
        counts = Counter(r[ID] for r in rows)
        seen = self.index()
        dup = sorted(i for i, c in counts.items() if c > 1 or i in seen)
        if dup:
            raise DuplicateIdentity(f"Duplicate {self.WHAT.lower()} ids: {dup}")


class NodeStore(_Store):
    """Node attribute table (ndf): ``id``, ``type``, ``label`` plus any attributes."""

    __slots__ = ()

    SCHEMA = NODE_SCHEMA
    WHAT = "Node"

    def insert(self, rows: list[dict]):
        """Append node rows; ``DuplicateIdentity`` if an id already exists."""
        self._check_new_ids(rows)
        return self.append_rows(rows)


class EdgeStore(_Store):
    """Edge attribute table (edf): ``id``, ``from``, ``to``, ``rel`` plus attributes."""

    __slots__ = ()

    SCHEMA = EDGE_SCHEMA
    PROTECTED = frozenset({ID, FROM, TO})
    WHAT = "Edge"

    def endpoints(self) -> list[tuple[int, int, int]]:
        df = self._df
        return list(zip(df.get_column(ID), df.get_column(FROM), df.get_column(TO)))

    def check_endpoints(self, node_ids) -> None:
        """Raise ``DanglingReference`` if any edge points at a node not in ``node_ids``."""
        for eid, u, v in self.endpoints():
            for end in (u, v):
                if end is None or end not in node_ids:
                    raise DanglingReference(f"Edge {eid} references missing node {end}")

    def insert(self, rows: list[dict], node_ids):
        """Append edge rows after checking identities and endpoints."""
        self._check_new_ids(rows)
        for r in rows:
            for end in (r[FROM], r[TO]):
                if end not in node_ids:
                    raise DanglingReference(f"Node {end} does not exist")
        return self.append_rows(rows)

    def between(self, from_, to, directed: bool = True) -> list[int]:
        """Ids of edges ``from_ -> to`` (and ``to -> from_`` when undirected)."""
        df = self._df
        hit = (pl.col(FROM) == from_) & (pl.col(TO) == to)
        if not directed:
            hit = hit | ((pl.col(FROM) == to) & (pl.col(TO) == from_))
        return sorted(df.filter(hit).get_column(ID).to_list())
