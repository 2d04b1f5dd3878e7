"""Optional backends: which ones are importable, and their adapter objects."""
from importlib import util

from .manager import _REGISTRY, get_adapter

__all__ = ["available_backends", "load_adapter"]


def _importable(libname: str) -> bool:
    return util.find_spec(libname) is not None


def available_backends() -> dict[str, bool]:
    """``{backend: importable}`` for every registered backend."""
    return {name: _importable(lib) for name, (lib, _) in _REGISTRY.items()}


def load_adapter(name: str):
    """Adapter instance for ``name`` (``"networkx"`` or ``"igraph"``).

    Raises ``ValueError`` for an unknown backend and ``ModuleNotFoundError`` when
    the backend library is missing (the igraph distribution is ``python-igraph``).
    """
    key = name.lower()
    if key not in _REGISTRY:
        raise ValueError(f"Unknown adapter '{name}'")
    if not _importable(_REGISTRY[key][0]):
        raise ModuleNotFoundError(
            f"Optional backend '{name}' is not installed. "
            f"Install with `pip install graphtab[{key}]`."
        )
    return get_adapter(key)
