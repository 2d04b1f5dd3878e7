from collections.abc import Callable, Iterable
from itertools import filterfalse
from typing import Any, TypeVar

from ..core.errors import OutOfRangeParameter

T = TypeVar("T")


def unique_iter(iterable: Iterable[T], key: Callable[[T], Any] | None = None) -> Iterable[T]:
    """Yield distinct elements in first-seen order."""
    seen: set[Any] = set()
    seen_add = seen.add
    if key is None:
        for element in filterfalse(seen.__contains__, iterable):
            seen_add(element)
            yield element
    else:
        for element in iterable:
            k = key(element)
            if k not in seen:
                seen_add(k)
                yield element


def is_empty_cell(v) -> bool:
    """Null, NaN and blank strings are Empty cells."""
    if v is None:
        return True
    if isinstance(v, float) and v != v:
        return True
    return isinstance(v, str) and not v.strip()


def check_range(name: str, value, lo, hi) -> None:
    if value < lo or value > hi:
        raise OutOfRangeParameter(f"{name} must be between {lo} and {hi}, got {value}")
