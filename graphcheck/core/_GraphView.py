import numpy as np
import scipy.sparse as sp

from ._Adjacency import expand_majors, iter_edges


class GraphView:
    """Read-only accessor over a :class:`Graph`'s compressed adjacency.

    Exposes the arrays without copying them; the arrays are flagged
    non-writeable by the owning graph. Derived data (degrees, expanded
    majors) is computed on first access and cached.

    Parameters
    --
    graph : Graph
        Owning container.

    """

    def __init__(self, graph):
        self._graph = graph
        self._degrees_cache = None
        self._majors_cache = None

    # ==================== Properties ====================

    @property
    def offsets(self):
        return self._graph._offsets

    @property
    def indices(self):
        return self._graph._indices

    @property
    def weights(self):
        """Edge weights parallel to ``indices``, or None for unweighted graphs."""
        return self._graph._weights

    @property
    def number_of_vertices(self) -> int:
        return self._graph.number_of_vertices

    @property
    def number_of_minor_vertices(self) -> int:
        return self._graph.number_of_minor_vertices

    @property
    def number_of_edges(self) -> int:
        return self._graph.number_of_edges

    @property
    def is_symmetric(self) -> bool:
        return self._graph.properties.is_symmetric

    @property
    def is_multigraph(self) -> bool:
        return self._graph.properties.is_multigraph

    @property
    def is_weighted(self) -> bool:
        return self._graph._weights is not None

    @property
    def store_transposed(self) -> bool:
        return self._graph.store_transposed

    @property
    def types(self):
        return self._graph.types

    # ==================== Per-vertex access ====================

    def _check_vertex(self, v):
        if not 0 <= v < self.number_of_vertices:
            raise IndexError(f"vertex {v} outside [0, {self.number_of_vertices})")

    def degree(self, v) -> int:
        """Out-degree (in-degree for transposed graphs) of major vertex ``v``."""
        self._check_vertex(v)
        return int(self.offsets[v + 1] - self.offsets[v])

    def degrees(self):
        """Degrees of all major vertices (cached)."""
        if self._degrees_cache is None:
            self._degrees_cache = np.diff(self.offsets)
            self._degrees_cache.flags.writeable = False
        return self._degrees_cache

    def neighbors(self, v):
        """Minor endpoints stored in ``v``'s bucket, in storage order."""
        self._check_vertex(v)
        return self.indices[self.offsets[v] : self.offsets[v + 1]]

    def bucket(self, v):
        """``(neighbor, weight)`` pairs of ``v``'s bucket; weight is None when unweighted."""
        self._check_vertex(v)
        start, stop = int(self.offsets[v]), int(self.offsets[v + 1])
        nbrs = self.indices[start:stop].tolist()
        if self.weights is None:
            return [(u, None) for u in nbrs]
        return list(zip(nbrs, self.weights[start:stop].tolist()))

    # ==================== Whole-graph access ====================

    def majors(self):
        """Major id of every stored edge (cached)."""
        if self._majors_cache is None:
            self._majors_cache = expand_majors(self.offsets)
            self._majors_cache.flags.writeable = False
        return self._majors_cache

    def edges(self):
        """``(srcs, dsts, weights)`` arrays in storage order, oriented as the input was."""
        majors = self.majors()
        minors = self.indices.astype(np.int64)
        if self.store_transposed:
            return minors, majors, self.weights
        return majors, minors, self.weights

    def iter_edges(self):
        """Yield ``(major, minor, weight)`` triples bucket by bucket."""
        return iter_edges(self.offsets, self.indices, self.weights)

    def to_scipy(self):
        """Copy into a ``scipy.sparse.csr_matrix`` (rows are majors).

        Duplicate entries of a multigraph are kept, not summed. Unweighted
        graphs get ones as data.
        """
        data = (
            np.ones(self.number_of_edges, dtype=self.types.weight_dtype)
            if self.weights is None
            else self.weights.copy()
        )
        return sp.csr_matrix(
            (data, self.indices.copy(), self.offsets.copy()),
            shape=(self.number_of_vertices, self.number_of_minor_vertices),
        )

    def __repr__(self):
        return (
            f"GraphView(V={self.number_of_vertices}, E={self.number_of_edges}, "
            f"weighted={self.is_weighted}, transposed={self.store_transposed})"
        )
