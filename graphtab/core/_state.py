import time
from datetime import UTC, datetime

import numpy as np

_CLOCK0 = time.perf_counter_ns()

# longer sequences in event fields are logged as a summary tag
MAX_FIELD_ITEMS = 50


def _utcnow_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _jsonify(x):
    # Make args/return JSON-safe & compact.
    if x is None or isinstance(x, (bool, int, float, str)):
        return x
    if isinstance(x, (set, frozenset, list, tuple)) and len(x) > MAX_FIELD_ITEMS:
        return f"<<{type(x).__name__} of {len(x)}>>"
    if isinstance(x, (set, frozenset)):
        return sorted((_jsonify(v) for v in x), key=str)
    if isinstance(x, (list, tuple)):
        return [_jsonify(v) for v in x]
    if isinstance(x, dict):
        return {str(k): _jsonify(v) for k, v in x.items()}
    if isinstance(x, np.generic):
        return x.item()
    # Polars, SciPy, graphs, or other heavy objects -> just a tag
    return f"<<{type(x).__name__}>>"


class _State:
    """Version counter, mutation history and backend cache of one Graph value.

    Events are kept in a linked chain of ``(previous, event)`` cells, so a derived
    state shares its parent's chain and appending costs the same at any depth. The
    backend cache starts empty, so a cached conversion can never describe a
    different graph.
    """

    __slots__ = ("version", "_events", "enabled", "_backend_cache")

    def __init__(self, version: int = 0, events: tuple | None = None, enabled: bool = True):
        self.version = version
        self._events = events
        self.enabled = enabled
        self._backend_cache = {}

    @property
    def history(self) -> tuple:
        out = []
        cell = self._events
        while cell is not None:
            cell, evt = cell
            out.append(evt)
        return tuple(reversed(out))

    def dirty_since(self, version: int) -> bool:
        return self.version > version

    def derive(self, op: str, **fields) -> "_State":
        if not self.enabled:
            return _State(self.version + 1, self._events, False)
        version = self.version + 1
        evt = {
            "version": version,
            "ts_utc": _utcnow_iso(),  # ISO-8601 with Z
            "mono_ns": time.perf_counter_ns() - _CLOCK0,
            "op": op,
        }
        for k, v in fields.items():
            evt[k] = _jsonify(v)
        return _State(version, (self._events, evt), True)

    def toggled(self, enabled: bool) -> "_State":
        return _State(self.version, self._events, bool(enabled))
