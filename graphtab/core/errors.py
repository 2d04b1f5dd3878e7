"""Exceptions raised by graphtab.

Every error also derives from the builtin a caller would expect (``KeyError`` for
missing things, ``ValueError`` for bad shapes or arguments), so plain
``except ValueError`` keeps working.
"""

__all__ = [
    "GraphTabError",
    "ColumnNotFound",
    "ShapeMismatch",
    "DuplicateIdentity",
    "DuplicateKey",
    "DanglingReference",
    "InvalidSelection",
    "IncompatibleGraphs",
    "OutOfRangeParameter",
    "NonNumericColumn",
    "ProtectedColumn",
]


class GraphTabError(Exception):
    """Base class for all graphtab errors."""


class ColumnNotFound(GraphTabError, KeyError):
    def __str__(self):
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class ShapeMismatch(GraphTabError, ValueError):
    pass


class DuplicateIdentity(GraphTabError, ValueError):
    pass


class DuplicateKey(GraphTabError, ValueError):
    pass


class DanglingReference(GraphTabError, KeyError):
    def __str__(self):
        return str(self.args[0]) if self.args else ""


class InvalidSelection(GraphTabError, ValueError):
    pass


class IncompatibleGraphs(GraphTabError, ValueError):
    pass


class OutOfRangeParameter(GraphTabError, ValueError):
    pass


class NonNumericColumn(GraphTabError, ValueError):
    pass


class ProtectedColumn(GraphTabError, ValueError):
    pass
