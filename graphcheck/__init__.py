# graphcheck/__init__.py
"""graphcheck: correctness harness for distributed graph analytics."""

from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    "core": "graphcheck.core",
    "distributed": "graphcheck.distributed",
    "validation": "graphcheck.validation",
    "algorithms": "graphcheck.algorithms",
    "harness": "graphcheck.harness",
    "io": "graphcheck.io",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Containers
    "EdgeList": ("graphcheck.core._Adjacency", "EdgeList"),
    "Graph": ("graphcheck.core.graph", "Graph"),
    "GraphProperties": ("graphcheck.core.graph", "GraphProperties"),
    "GraphTypes": ("graphcheck.core._Types", "GraphTypes"),
    "TYPE_COMBOS": ("graphcheck.core._Types", "TYPE_COMBOS"),
    "RenumberMap": ("graphcheck.core._Renumber", "RenumberMap"),
    "build_adjacency": ("graphcheck.core._Adjacency", "build_adjacency"),
    # Equivalence
    "compare_graphs": ("graphcheck.validation.equivalence", "compare_graphs"),
    "compare_vectors": ("graphcheck.validation.equivalence", "compare_vectors"),
    "assert_equal_graphs": ("graphcheck.validation.equivalence", "assert_equal_graphs"),
    "assert_equal_vectors": ("graphcheck.validation.equivalence", "assert_equal_vectors"),
    # Collectives
    "run_workers": ("graphcheck.distributed.comms", "run_workers"),
    # Harness
    "ExecutionContext": ("graphcheck.harness.context", "ExecutionContext"),
    "verify_graph_construction": ("graphcheck.harness.verify", "verify_graph_construction"),
    "verify_distributed_algorithm": ("graphcheck.harness.verify", "verify_distributed_algorithm"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("graphcheck")
except PackageNotFoundError:
    __version__ = "0.0.0"
