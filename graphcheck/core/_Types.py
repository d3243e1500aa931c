from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class GraphTypes:
    """Widths used for vertex ids, edge offsets and edge weights.

    Parameters
    --
    vertex_dtype : numpy dtype
        Integer type of vertex ids (``indices`` and renumbering maps).
    edge_dtype : numpy dtype
        Integer type of edge counts (``offsets``).
    weight_dtype : numpy dtype
        Floating type of edge weights and result vectors.

    """

    vertex_dtype: type = np.int32
    edge_dtype: type = np.int32
    weight_dtype: type = np.float32

    @property
    def name(self):
        v = np.dtype(self.vertex_dtype).name
        e = np.dtype(self.edge_dtype).name
        w = np.dtype(self.weight_dtype).name
        return f"{v}_{e}_{w}"

    def max_vertices(self) -> int:
        return int(np.iinfo(self.vertex_dtype).max)

    def max_edges(self) -> int:
        return int(np.iinfo(self.edge_dtype).max)


DEFAULT_TYPES = GraphTypes()

TYPE_COMBOS = {
    "int32_int32_float32": GraphTypes(np.int32, np.int32, np.float32),
    "int32_int64_float32": GraphTypes(np.int32, np.int64, np.float32),
    "int64_int64_float32": GraphTypes(np.int64, np.int64, np.float32),
    "int32_int32_float64": GraphTypes(np.int32, np.int32, np.float64),
    "int32_int64_float64": GraphTypes(np.int32, np.int64, np.float64),
    "int64_int64_float64": GraphTypes(np.int64, np.int64, np.float64),
}
