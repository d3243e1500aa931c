from dataclasses import dataclass

import numpy as np

from ._Adjacency import EdgeList, build_adjacency, expand_majors, warn_on_multi_edges
from ._errors import InvalidInput, StructuralInvariantViolation
from ._GraphView import GraphView
from ._Types import DEFAULT_TYPES


@dataclass(frozen=True)
class GraphProperties:
    """Claims declared about a graph at construction time.

    Neither flag is checked unless the graph is built with
    ``verify_properties=True``.
    """

    is_symmetric: bool = False
    is_multigraph: bool = False


# ===================================


def check_structure(offsets, indices, weights, number_of_vertices, number_of_edges=None,
                    number_of_minor_vertices=None):
    """Validate the offsets/indices contract of a compressed adjacency structure.

    Parameters
    --
    offsets, indices : array-like
    weights : array-like or None
    number_of_vertices : int
        Declared major vertex count.
    number_of_edges : int, optional
        Declared edge count; defaults to ``len(indices)``.
    number_of_minor_vertices : int, optional
        Exclusive bound for entries of ``indices``; defaults to ``number_of_vertices``.

    Raises
    --
    StructuralInvariantViolation
        On the first broken invariant.

    """
    offsets = np.asarray(offsets)
    indices = np.asarray(indices)
    if number_of_edges is None:
        number_of_edges = len(indices)
    if number_of_minor_vertices is None:
        number_of_minor_vertices = number_of_vertices

    if offsets.ndim != 1 or len(offsets) == 0:
        raise StructuralInvariantViolation("offsets must be a non-empty 1-d array (length V + 1)")
    if number_of_vertices < 0:
        raise StructuralInvariantViolation(f"negative number_of_vertices {number_of_vertices}")
    if len(offsets) != number_of_vertices + 1:
        raise StructuralInvariantViolation(
            f"offsets length {len(offsets)} != number_of_vertices + 1 ({number_of_vertices + 1})"
        )
    if len(indices) != number_of_edges:
        raise StructuralInvariantViolation(
            f"indices length {len(indices)} != number_of_edges ({number_of_edges})"
        )
    if weights is not None and len(weights) != number_of_edges:
        raise StructuralInvariantViolation(
            f"weights length {len(weights)} != number_of_edges ({number_of_edges})"
        )
    if offsets[0] != 0:
        raise StructuralInvariantViolation(f"offsets[0] is {offsets[0]}, expected 0")
    if offsets[-1] != number_of_edges:
        raise StructuralInvariantViolation(
            f"offsets[-1] is {offsets[-1]}, expected number_of_edges ({number_of_edges})"
        )
    steps = np.diff(offsets)
    if steps.size and steps.min() < 0:
        v = int(np.argmax(steps < 0))
        raise StructuralInvariantViolation(
            f"offsets decrease at vertex {v}: {offsets[v]} -> {offsets[v + 1]}"
        )
    if len(indices) and (indices.min() < 0 or indices.max() >= number_of_minor_vertices):
        raise StructuralInvariantViolation(
            f"indices outside [0, {number_of_minor_vertices}): "
            f"min {indices.min()}, max {indices.max()}"
        )


def _canonical_triples(majors, minors, weights):
    keys = (minors, majors) if weights is None else (weights, minors, majors)
    order = np.lexsort(keys)
    return majors[order], minors[order], (None if weights is None else weights[order])


def is_symmetric_adjacency(offsets, indices, weights=None) -> bool:
    """True if every stored edge ``(u, v, w)`` has a matching reverse ``(v, u, w)``.

    Multiplicity counts: two copies of ``(u, v)`` need two copies of ``(v, u)``.
    """
    offsets = np.asarray(offsets)
    majors = expand_majors(offsets)
    minors = np.asarray(indices).astype(np.int64)
    w = None if weights is None else np.asarray(weights)
    fwd = _canonical_triples(majors, minors, w)
    rev = _canonical_triples(minors, majors, w)
    if not (np.array_equal(fwd[0], rev[0]) and np.array_equal(fwd[1], rev[1])):
        return False
    if w is None:
        return True
    return bool(np.array_equal(fwd[2], rev[2], equal_nan=True))


def has_multi_edges(offsets, indices) -> bool:
    """True if some bucket holds the same neighbor more than once."""
    majors = expand_majors(offsets)
    if len(majors) < 2:
        return False
    pairs = np.stack([majors, np.asarray(indices).astype(np.int64)], axis=1)
    return len(np.unique(pairs, axis=0)) < len(pairs)


class Graph:
    """Immutable compressed-adjacency graph plus its metadata.

    The adjacency is built once, by :func:`build_adjacency`, and stored in
    read-only arrays. There is no mutation API: a changed graph is a new
    ``Graph``.

    Parameters
    --
    edgelist : EdgeList or iterable of tuples
        Edges to build from.
    number_of_vertices : int, optional
        Major vertex count; inferred as ``max(id) + 1`` when omitted.
    properties : GraphProperties, optional
        Symmetry / multigraph claims.
    store_transposed : bool, default False
        Destination-major (in-edge) storage when True.
    types : GraphTypes, optional
        Array widths; defaults to the edge list's.
    number_of_minor_vertices : int, optional
        Exclusive bound for neighbor ids when it differs from the major
        count (a partition owning a slice of the majors).
    verify_properties : bool, default False
        Check the ``properties`` claims and raise ``InvalidInput`` if false.
        By default they are trusted.

    Notes
    -
    - Symmetry is only meaningful when majors and minors share one id range;
      a partition graph cannot be verified as symmetric on its own.

    See Also
    --
    Graph.from_csr, GraphView

    """

    def __init__(
        self,
        edgelist,
        number_of_vertices=None,
        *,
        properties=None,
        store_transposed=False,
        types=None,
        number_of_minor_vertices=None,
        verify_properties=False,
    ):
        if not isinstance(edgelist, EdgeList):
            edgelist = EdgeList.from_tuples(edgelist, types=types or DEFAULT_TYPES)
        types = types or edgelist.types
        if edgelist.types != types:
            edgelist = edgelist.astype(types)
        properties = properties or GraphProperties()

        offsets, indices, weights = build_adjacency(
            edgelist,
            store_transposed=store_transposed,
            number_of_vertices=number_of_vertices,
            number_of_minor_vertices=number_of_minor_vertices,
            types=types,
        )
        n = len(offsets) - 1
        self._init_arrays(
            offsets,
            indices,
            weights,
            number_of_vertices=n,
            number_of_minor_vertices=n if number_of_minor_vertices is None else number_of_minor_vertices,
            properties=properties,
            store_transposed=store_transposed,
            types=types,
        )
        if verify_properties:
            self._verify_properties()
        else:
            warn_on_multi_edges(edgelist, properties.is_multigraph)

    @classmethod
    def from_csr(
        cls,
        offsets,
        indices,
        weights=None,
        *,
        number_of_vertices=None,
        number_of_edges=None,
        properties=None,
        store_transposed=False,
        types=DEFAULT_TYPES,
        number_of_minor_vertices=None,
        verify_properties=False,
    ):
        """Wrap an already-built compressed structure (e.g. one produced by an engine under test).

        Declared counts default to what the arrays imply; when given they
        are checked against the arrays.

        Raises
        --
        StructuralInvariantViolation
            If the arrays break the offsets/indices contract.

        """
        offsets = np.asarray(offsets)
        indices = np.asarray(indices)
        if number_of_vertices is None:
            number_of_vertices = len(offsets) - 1
        if number_of_edges is None:
            number_of_edges = len(indices)
        if number_of_minor_vertices is None:
            number_of_minor_vertices = number_of_vertices
        check_structure(
            offsets, indices, weights, number_of_vertices, number_of_edges, number_of_minor_vertices
        )
        g = cls.__new__(cls)
        g._init_arrays(
            offsets,
            indices,
            weights,
            number_of_vertices=number_of_vertices,
            number_of_minor_vertices=number_of_minor_vertices,
            properties=properties or GraphProperties(),
            store_transposed=store_transposed,
            types=types,
        )
        if verify_properties:
            g._verify_properties()
        return g

    def _init_arrays(self, offsets, indices, weights, *, number_of_vertices,
                     number_of_minor_vertices, properties, store_transposed, types):
        """INTERNAL: Take private read-only copies of the arrays and validate them."""
        self.types = types
        self.properties = properties
        self.store_transposed = bool(store_transposed)
        self.number_of_vertices = int(number_of_vertices)
        self.number_of_minor_vertices = int(number_of_minor_vertices)

        self._offsets = np.array(offsets, dtype=types.edge_dtype)
        self._indices = np.array(indices, dtype=types.vertex_dtype)
        self._weights = None if weights is None else np.array(weights, dtype=types.weight_dtype)
        self.number_of_edges = len(self._indices)

        check_structure(
            self._offsets,
            self._indices,
            self._weights,
            self.number_of_vertices,
            self.number_of_edges,
            self.number_of_minor_vertices,
        )
        for arr in (self._offsets, self._indices, self._weights):
            if arr is not None:
                arr.flags.writeable = False
        self._view = None

    def _verify_properties(self):
        """INTERNAL: Check the declared symmetry / multigraph claims."""
        if self.properties.is_symmetric:
            if self.number_of_minor_vertices != self.number_of_vertices:
                raise InvalidInput("symmetry cannot be verified on a partition graph")
            if not is_symmetric_adjacency(self._offsets, self._indices, self._weights):
                raise InvalidInput("graph declared symmetric but an edge has no reverse edge")
        if not self.properties.is_multigraph and has_multi_edges(self._offsets, self._indices):
            raise InvalidInput("graph declared simple (is_multigraph=False) but has multi-edges")

    # ==================== Accessors ====================

    def view(self):
        """Read-only :class:`GraphView` of this graph."""
        if self._view is None:
            self._view = GraphView(self)
        return self._view

    @property
    def is_symmetric(self) -> bool:
        return self.properties.is_symmetric

    @property
    def is_multigraph(self) -> bool:
        return self.properties.is_multigraph

    @property
    def is_weighted(self) -> bool:
        return self._weights is not None

    def to_edgelist(self):
        """Edges back as an :class:`EdgeList` in storage order."""
        srcs, dsts, weights = self.view().edges()
        return EdgeList(srcs, dsts, weights, types=self.types)

    def __repr__(self):
        return (
            f"Graph(V={self.number_of_vertices}, E={self.number_of_edges}, "
            f"symmetric={self.is_symmetric}, multigraph={self.is_multigraph}, "
            f"weighted={self.is_weighted}, transposed={self.store_transposed}, "
            f"types={self.types.name})"
        )
