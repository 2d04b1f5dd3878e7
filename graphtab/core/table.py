from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import numpy as np
import polars as pl

from .errors import ColumnNotFound, NonNumericColumn, OutOfRangeParameter, ShapeMismatch

__all__ = [
    "AttributeTable",
    "as_frame",
    "align_frames",
    "concat_frames",
]

_ROW = "__row_nr"


def pl_dtype_for_value(v):
    """Infer an appropriate Polars dtype for a Python value.

    Returns one of ``pl.Null``, ``pl.Boolean``, ``pl.Int64``, ``pl.Float64`` or
    ``pl.Utf8``. Enums, containers and anything else are stored as text.
    """
    if v is None:
        return pl.Null
    if isinstance(v, (bool, np.bool_)):
        return pl.Boolean
    if isinstance(v, (int, np.integer)):
        return pl.Int64
    if isinstance(v, (float, np.floating)):
        return pl.Float64
    return pl.Utf8


def _is_numeric_dtype(dtype) -> bool:
    return dtype.is_numeric()


def supertype(left, right):
    """Dtype both sides can be cast to without losing rows.

    ``Null`` yields to the other side, two numerics widen to ``Float64``, any other
    conflict upcasts to ``Utf8``.
    """
    if left == pl.Null:
        return right
    if right == pl.Null or left == right:
        return left
    if _is_numeric_dtype(left) and _is_numeric_dtype(right):
        return pl.Float64
    return pl.Utf8


def _coerce(v, dtype):
    if v is None:
        return None
    if dtype == pl.Utf8:
        if isinstance(v, enum.Enum):
            return str(v.value)
        return v if isinstance(v, str) else str(v)
    if dtype == pl.Float64:
        return float(v)
    if dtype == pl.Int64:
        return int(v)
    if dtype == pl.Boolean:
        return bool(v)
    return v


def _as_values(values) -> list:
    if isinstance(values, pl.Series):
        return values.to_list()
    if isinstance(values, np.ndarray):
        return values.tolist()
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        return [values]
    return list(values)


def _as_list(cols) -> list[str]:
    if isinstance(cols, str):
        return [cols]
    return list(cols)


def as_frame(obj) -> pl.DataFrame:
    """Accept a Polars frame, an AttributeTable, or anything ``pl.DataFrame`` takes."""
    if isinstance(obj, AttributeTable):
        return obj.frame
    if isinstance(obj, pl.DataFrame):
        return obj
    return pl.DataFrame(obj)


def align_frames(a: pl.DataFrame, b: pl.DataFrame) -> tuple[pl.DataFrame, pl.DataFrame]:
    """Give ``a`` and ``b`` the same columns (``a``'s order first) and dtypes.

    Missing columns are added null-filled; dtype conflicts are resolved with
    :func:`supertype`.
    """
    a_casts, b_casts = [], []
    for c in a.columns:
        if c not in b.columns:
            b_casts.append(pl.lit(None).cast(a.schema[c]).alias(c))
    for c in b.columns:
        if c not in a.columns:
            a_casts.append(pl.lit(None).cast(b.schema[c]).alias(c))
    if a_casts:
        a = a.with_columns(a_casts)
    if b_casts:
        b = b.with_columns(b_casts)

    a_casts, b_casts = [], []
    for c in a.columns:
        left, right = a.schema[c], b.schema[c]
        if left == right:
            continue
        target = supertype(left, right)
        if left != target:
            a_casts.append(pl.col(c).cast(target))
        if right != target:
            b_casts.append(pl.col(c).cast(target))
    if a_casts:
        a = a.with_columns(a_casts)
    if b_casts:
        b = b.with_columns(b_casts)
    return a, b.select(a.columns)


def concat_frames(a: pl.DataFrame, b: pl.DataFrame) -> pl.DataFrame:
    a, b = align_frames(a, b)
    return pl.concat([a, b], how="vertical")


class AttributeTable:
    """Ordered, immutable attribute table keyed by an identity column.

    Wraps a Polars DF [DataFrame]. Every operation returns a new table; the wrapped
    frame is never modified in place, so two tables derived from one another never
    share mutable state.

    Parameters
    ----------
    frame : polars.DataFrame | AttributeTable | dict | list[dict] | None
        Initial rows. ``None`` yields an empty table holding only the key column.
    key : str, default "id"
        Name of the identity column.

    Notes
    -----
    Cells are Number (numeric dtypes), Text (``Utf8``) or Empty (null). The kind of a
    column is computed on demand by :meth:`column_kind`; no schema is fixed up front.
    """

    __slots__ = ("_df", "key")

    def __init__(self, frame=None, key: str = "id"):
        if frame is None:
            df = pl.DataFrame(schema={key: pl.Int64})
        else:
            df = as_frame(frame)
        if key not in df.columns:
            raise ColumnNotFound(f"Key column '{key}' not found")
        self._df = df
        self.key = key

    def _replace(self, df: pl.DataFrame):
        new = object.__new__(type(self))
        new._df = df
        new.key = self.key
        return new

    # Basic access

    @property
    def frame(self) -> pl.DataFrame:
        """The underlying Polars frame. Treat it as read-only."""
        return self._df

    @property
    def columns(self) -> list[str]:
        return self._df.columns

    @property
    def height(self) -> int:
        return self._df.height

    def __len__(self) -> int:
        return self._df.height

    def __contains__(self, name) -> bool:
        return name in self._df.columns

    def __repr__(self) -> str:
        return f"<{type(self).__name__} | rows={self.height} · cols={self.columns}>"

    def _require(self, name: str) -> None:
        if name not in self._df.columns:
            raise ColumnNotFound(f"Column '{name}' not found")

    def get_column(self, name: str) -> list:
        """Values of ``name``, one per row, in row order."""
        self._require(name)
        return self._df.get_column(name).to_list()

    def rows(self, indices: Iterable[int] | None = None) -> list[dict]:
        if indices is None:
            return self._df.to_dicts()
        idx = list(indices)
        if not idx:
            return []
        return self._df[idx].to_dicts()

    def row(self, index: int) -> dict:
        return self._df.row(index, named=True)

    # Column kinds

    def _numeric_series(self, name: str) -> pl.Series:
        s = self._df.get_column(name)
        if s.dtype == pl.Null:
            return pl.Series(name, [None] * s.len(), dtype=pl.Float64)
        if _is_numeric_dtype(s.dtype):
            return s.cast(pl.Float64)
        if s.dtype == pl.Utf8:
            return s.str.strip_chars().cast(pl.Float64, strict=False)
        return s.cast(pl.Float64, strict=False)

    def column_kind(self, name: str) -> str:
        """Return ``"numeric"``, ``"text"`` or ``"empty"`` for column ``name``.

        A column is numeric when every non-empty cell parses as a number; empty
        strings count as Empty.
        """
        self._require(name)
        s = self._df.get_column(name)
        present = s.is_not_null()
        if s.dtype == pl.Utf8:
            present = present & (s.str.strip_chars() != "")
        if not present.any():
            return "empty"
        if _is_numeric_dtype(s.dtype):
            return "numeric"
        if s.dtype == pl.Boolean:
            return "text"
        parsed = self._numeric_series(name).is_not_null()
        return "numeric" if bool((parsed | ~present).all()) else "text"

    def numeric_column(self, name: str) -> list[float | None]:
        """Values of ``name`` as floats (Empty cells become ``None``).

        Raises
        ------
        NonNumericColumn
            If any non-empty cell does not parse as a number.
        """
        if self.column_kind(name) == "text":
            raise NonNumericColumn(f"Column '{name}' holds non-numeric values")
        return self._numeric_series(name).to_list()

    # Column updates

    def set_column(self, name: str, values, rows: Iterable[int] | None = None):
        """Assign ``values`` to column ``name`` on the filtered rows.

        Parameters
        ----------
        name : str
            Column to write; created null-filled if missing.
        values : Any | Sequence
            One value (broadcast to every filtered row) or exactly one value per
            filtered row, assigned in the order ``rows`` lists them.
        rows : Iterable[int], optional
            Row indices to write. Defaults to all rows.

        Returns
        -------
        AttributeTable

        Raises
        ------
        ShapeMismatch
            If ``values`` is neither of length 1 nor of the filtered row count.
        """
        n = self.height
        if rows is None:
            targets = list(range(n))
        else:
            targets = list(dict.fromkeys(rows))
            if targets and (min(targets) < 0 or max(targets) >= n):
                raise OutOfRangeParameter(f"Row index out of range for table of {n} rows")
        vals = _as_values(values)
        if len(vals) == 1:
            vals = vals * len(targets)
        elif len(vals) != len(targets):
            raise ShapeMismatch(
                f"Got {len(vals)} values for {len(targets)} rows; "
                "supply one value or one per row"
            )

        full = len(targets) == n
        if name in self._df.columns and not full:
            current = self._df.get_column(name).to_list()
            dtype = self._df.schema[name]
        else:
            current = [None] * n
            dtype = pl.Null
        for v in vals:
            dtype = supertype(dtype, pl_dtype_for_value(v))
        for i, v in zip(targets, vals):
            current[i] = v
        if dtype == pl.Null:
            dtype = pl.Utf8
        series = pl.Series(name, [_coerce(v, dtype) for v in current], dtype=dtype)
        return self._replace(self._df.with_columns(series))

    def drop_column(self, name: str):
        self._require(name)
        if name == self.key:
            raise OutOfRangeParameter(f"Cannot drop key column '{name}'")
        return self._replace(self._df.drop(name))

    # Joins and filters

    def left_join(self, other, on_self=None, on_other=None, suffix: str = "_right"):
        """Left join ``other`` onto this table, R ``merge(all.x = TRUE)`` style.

        Parameters
        ----------
        other : AttributeTable | polars.DataFrame | dict
            Right-hand table.
        on_self, on_other : str | list[str], optional
            Key columns. Both or neither. With neither, joins on every column name the
            two tables share (natural join).
        suffix : str, default "_right"
            Appended to right-hand non-key columns whose name clashes.

        Returns
        -------
        AttributeTable
            Every row of ``self`` in its original order; unmatched rows carry nulls in
            the new columns. A row matching several right rows fans out into several
            result rows, as ``merge`` does.
        """
        right = as_frame(other)
        left = self._df
        if (on_self is None) != (on_other is None):
            raise OutOfRangeParameter("Both column specifications must be provided.")
        if on_self is None:
            left_on = [c for c in left.columns if c in right.columns]
            if not left_on:
                raise ColumnNotFound("No shared columns to join on")
            right_on = list(left_on)
        else:
            left_on, right_on = _as_list(on_self), _as_list(on_other)
            if len(left_on) != len(right_on):
                raise ShapeMismatch("Join key lists must have equal length")
            for c in left_on:
                self._require(c)
            for c in right_on:
                if c not in right.columns:
                    raise ColumnNotFound(f"Column '{c}' not found in joined table")

        casts = []
        for lcol, rcol in zip(left_on, right_on):
            ldt, rdt = left.schema[lcol], right.schema[rcol]
            if ldt != rdt:
                casts.append(pl.col(rcol).cast(ldt, strict=False))
        if casts:
            right = right.with_columns(casts)

        left = left.with_row_index(_ROW)
        joined = left.join(
            right, left_on=left_on, right_on=right_on, how="left", suffix=suffix
        )
        # drop right-hand key copies if the backend kept them
        extra = [
            r for l, r in zip(left_on, right_on)
            if r != l and r in joined.columns and r not in self._df.columns
        ]
        if extra:
            joined = joined.drop(extra)
        joined = joined.sort(_ROW, maintain_order=True).drop(_ROW)
        return self._replace(joined)

    def filter(self, predicate: Callable[[dict], bool] | pl.Expr) -> Iterator[int]:
        """Lazily yield the indices of rows matching ``predicate``.

        ``predicate`` is either a Polars expression evaluated over the table or a
        callable receiving each row as a dict.
        """
        if isinstance(predicate, pl.Expr):
            try:
                mask = self._df.select(predicate.alias("__mask")).get_column("__mask")
            except pl.exceptions.ColumnNotFoundError as e:
                raise ColumnNotFound(f"Condition refers to a missing column: {e}") from e
            for i, hit in enumerate(mask):
                if hit:
                    yield i
            return
        for i, row in enumerate(self._df.iter_rows(named=True)):
            if predicate(row):
                yield i

    # Row updates

    def append_rows(self, rows):
        """Append ``rows`` (list of dicts or frame), aligning columns and dtypes."""
        if isinstance(rows, pl.DataFrame):
            new = rows
        else:
            rows = list(rows)
            if not rows:
                return self
            new = pl.DataFrame(rows, infer_schema_length=None)
        if new.height == 0:
            return self
        return self._replace(concat_frames(self._df, new))

    def take(self, indices: Iterable[int]):
        idx = list(indices)
        return self._replace(self._df[idx] if idx else self._df.clear())

    def drop_rows(self, indices: Iterable[int]):
        drop = set(indices)
        if not drop:
            return self
        keep = [i for i in range(self.height) if i not in drop]
        return self.take(keep)

    def with_frame(self, frame):
        """Same kind of table over a new frame (re-validated by subclasses)."""
        return type(self)(frame) if type(self) is not AttributeTable else AttributeTable(frame, self.key)

    def equals(self, other: "AttributeTable") -> bool:
        return self.key == other.key and self._df.equals(other.frame)
