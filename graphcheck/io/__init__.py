"""graphcheck.io: edge-list input sources with lazy symbol loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_lazy_symbols: dict[str, tuple[str, str]] = {
    "InputGraph": ("graphcheck.io.edgelist_io", "InputGraph"),
    "from_dataframe": ("graphcheck.io.edgelist_io", "from_dataframe"),
    "read_edge_csv": ("graphcheck.io.edgelist_io", "read_edge_csv"),
    "read_matrix_market": ("graphcheck.io.edgelist_io", "read_matrix_market"),
    "generate_rmat": ("graphcheck.io.edgelist_io", "generate_rmat"),
    "input_graph_from_edgelist": ("graphcheck.io.edgelist_io", "input_graph_from_edgelist"),
}

__all__ = sorted(_lazy_symbols)


def __getattr__(name: str) -> Any:
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))
