from .structure import *
from .errors import *
from .table import AttributeTable
from .stores import EdgeStore, NodeStore
from .graph import Graph
from .selection import *
from .attrs import *
from .builders import *
from .series import *

__all__ = ["structure", "errors", "selection", "attrs", "builders", "series", "AttributeTable", "NodeStore", "EdgeStore", "Graph"]
