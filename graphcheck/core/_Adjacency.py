import warnings

import numpy as np

from ._errors import InvalidInput
from ._Types import DEFAULT_TYPES


def _as_ids(values, name, types):
    """INTERNAL: Coerce a sequence of vertex ids to a fresh 1-D array of ``types.vertex_dtype``."""
    arr = np.asarray(values)
    if arr.size == 0:
        return np.empty(0, dtype=types.vertex_dtype)
    if arr.ndim != 1:
        raise InvalidInput(f"{name} must be one-dimensional, got shape {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        raise InvalidInput(f"{name} must hold integer vertex ids, got dtype {arr.dtype}")
    if arr.min() < 0:
        bad = arr[arr < 0][:5].tolist()
        raise InvalidInput(f"{name} contains negative vertex ids: {bad}")
    if int(arr.max()) > types.max_vertices():
        raise InvalidInput(
            f"{name} contains ids wider than {np.dtype(types.vertex_dtype).name}"
        )
    return np.array(arr, dtype=types.vertex_dtype)


class EdgeList:
    """Ordered ``(source, destination, weight?)`` triples.

    Parameters
    --
    srcs, dsts : array-like of int
        Endpoints; non-negative integers of equal length.
    weights : array-like of float, optional
        Per-edge weights, same length as ``srcs``.
    types : GraphTypes, optional
        Widths the arrays are stored with.

    Raises
    --
    InvalidInput
        Negative or non-integer ids, or mismatched lengths.

    """

    def __init__(self, srcs, dsts, weights=None, *, types=DEFAULT_TYPES):
        self.types = types
        self.srcs = _as_ids(srcs, "srcs", types)
        self.dsts = _as_ids(dsts, "dsts", types)
        if self.srcs.shape != self.dsts.shape:
            raise InvalidInput(
                f"srcs and dsts differ in length: {len(self.srcs)} != {len(self.dsts)}"
            )
        if weights is None:
            self.weights = None
        else:
            w = np.array(weights, dtype=types.weight_dtype).reshape(-1)
            if w.shape != self.srcs.shape:
                raise InvalidInput(
                    f"weights length {len(w)} does not match edge count {len(self.srcs)}"
                )
            self.weights = w

    @classmethod
    def from_tuples(cls, edges, *, types=DEFAULT_TYPES):
        """Build from ``[(src, dst), ...]`` or ``[(src, dst, weight), ...]``."""
        edges = list(edges)
        if not edges:
            return cls([], [], types=types)
        widths = {len(e) for e in edges}
        if widths == {2}:
            srcs, dsts = zip(*edges)
            return cls(srcs, dsts, types=types)
        if widths == {3}:
            srcs, dsts, weights = zip(*edges)
            return cls(srcs, dsts, weights, types=types)
        raise InvalidInput("edge tuples must all be (src, dst) or all be (src, dst, weight)")

    def __len__(self):
        return len(self.srcs)

    def __repr__(self):
        kind = "weighted" if self.is_weighted else "unweighted"
        return f"EdgeList({len(self)} edges, {kind}, {self.types.name})"

    @property
    def number_of_edges(self) -> int:
        return len(self.srcs)

    @property
    def is_weighted(self) -> bool:
        return self.weights is not None

    def majors(self, store_transposed=False):
        return self.dsts if store_transposed else self.srcs

    def minors(self, store_transposed=False):
        return self.srcs if store_transposed else self.dsts

    def reversed(self):
        """Same edges with every source and destination swapped."""
        return EdgeList(self.dsts, self.srcs, self.weights, types=self.types)

    def permuted(self, order):
        """Edges reordered by ``order`` (a permutation of ``range(len(self))``)."""
        order = np.asarray(order)
        w = None if self.weights is None else self.weights[order]
        return EdgeList(self.srcs[order], self.dsts[order], w, types=self.types)

    def astype(self, types):
        return EdgeList(self.srcs, self.dsts, self.weights, types=types)

    def to_tuples(self):
        if self.weights is None:
            return list(zip(self.srcs.tolist(), self.dsts.tolist()))
        return list(zip(self.srcs.tolist(), self.dsts.tolist(), self.weights.tolist()))

    def has_multi_edges(self) -> bool:
        """True if some ``(src, dst)`` pair occurs more than once."""
        if len(self) < 2:
            return False
        pairs = np.stack([self.srcs.astype(np.int64), self.dsts.astype(np.int64)], axis=1)
        return len(np.unique(pairs, axis=0)) < len(pairs)

    def deduplicated(self):
        """First occurrence of every ``(src, dst)`` pair, in input order."""
        if len(self) < 2:
            return self
        pairs = np.stack([self.srcs.astype(np.int64), self.dsts.astype(np.int64)], axis=1)
        _, first = np.unique(pairs, axis=0, return_index=True)
        return self.permuted(np.sort(first))


def infer_number_of_vertices(srcs, dsts) -> int:
    """``max(vertex id) + 1`` over both endpoints; 0 for an empty list."""
    srcs = np.asarray(srcs)
    dsts = np.asarray(dsts)
    if srcs.size == 0 and dsts.size == 0:
        return 0
    top = max(int(srcs.max()) if srcs.size else -1, int(dsts.max()) if dsts.size else -1)
    return top + 1


def build_adjacency(
    srcs,
    dsts=None,
    weights=None,
    *,
    store_transposed=False,
    number_of_vertices=None,
    number_of_minor_vertices=None,
    types=DEFAULT_TYPES,
):
    """Build compressed adjacency arrays from an unordered edge list.

    Two-pass bucket fill: count the major endpoint of every edge, turn the
    counts into bucket starts with a prefix sum, then scatter every minor
    endpoint (and weight) into the next free slot of its major's bucket.

    Parameters
    --
    srcs, dsts : array-like of int
        Edge endpoints.
    weights : array-like of float, optional
        Per-edge weights.
    store_transposed : bool, default False
        False builds source-major (out-edges), True destination-major (in-edges).
    number_of_vertices : int, optional
        Number of major vertices. Inferred as ``max(id) + 1`` over both
        endpoints when omitted.
    number_of_minor_vertices : int, optional
        Exclusive upper bound for minor ids. Defaults to ``number_of_vertices``
        when that was given, otherwise it is inferred the same way.
    types : GraphTypes, optional

    Returns
    ---
    tuple[np.ndarray, np.ndarray, np.ndarray | None]
        ``(offsets, indices, weights)``. Order inside a bucket follows the
        input edge order and is not part of the contract.

    Raises
    --
    InvalidInput
        Malformed edges, or ids outside the declared vertex range.

    """
    edges = srcs if isinstance(srcs, EdgeList) else EdgeList(srcs, dsts, weights, types=types)
    majors = edges.majors(store_transposed)
    minors = edges.minors(store_transposed)

    if number_of_vertices is None:
        number_of_vertices = infer_number_of_vertices(edges.srcs, edges.dsts)
    if number_of_minor_vertices is None:
        number_of_minor_vertices = number_of_vertices
    n = int(number_of_vertices)
    if n < 0:
        raise InvalidInput(f"number_of_vertices must be non-negative, got {n}")
    if n > types.max_vertices():
        raise InvalidInput(f"{n} vertices do not fit {np.dtype(types.vertex_dtype).name}")
    if len(majors) and int(majors.max()) >= n:
        raise InvalidInput(f"major vertex id {int(majors.max())} >= number_of_vertices {n}")
    if len(minors) and int(minors.max()) >= number_of_minor_vertices:
        raise InvalidInput(
            f"minor vertex id {int(minors.max())} >= {int(number_of_minor_vertices)} vertices"
        )
    num_edges = len(edges)
    if num_edges > types.max_edges():
        raise InvalidInput(f"{num_edges} edges do not fit {np.dtype(types.edge_dtype).name}")

    # Pass 1: degree counting, then exclusive prefix sum shifted by one slot
    offsets = np.zeros(n + 1, dtype=types.edge_dtype)
    offsets[1:] = np.bincount(majors, minlength=n)
    np.cumsum(offsets, out=offsets)

    # Pass 2: scatter fill through a running cursor per bucket
    cursor = offsets[:-1].tolist()
    minor_list = minors.tolist()
    weight_list = None if edges.weights is None else edges.weights.tolist()
    out_indices = [0] * num_edges
    out_weights = None if weight_list is None else [0.0] * num_edges
    for i, major in enumerate(majors.tolist()):
        slot = cursor[major]
        cursor[major] = slot + 1
        out_indices[slot] = minor_list[i]
        if out_weights is not None:
            out_weights[slot] = weight_list[i]

    indices = np.array(out_indices, dtype=types.vertex_dtype)
    if out_weights is not None:
        out_weights = np.array(out_weights, dtype=types.weight_dtype)
    return offsets, indices, out_weights


def expand_majors(offsets):
    """Major id of every slot in ``indices`` (``repeat(arange(V), degrees)``)."""
    offsets = np.asarray(offsets)
    n = len(offsets) - 1
    return np.repeat(np.arange(n, dtype=np.int64), np.diff(offsets).astype(np.int64))


def iter_edges(offsets, indices, weights=None):
    """Walk a compressed structure back into ``(major, minor, weight)`` triples.

    ``weight`` is None for unweighted structures.
    """
    offsets = np.asarray(offsets).tolist()
    indices = np.asarray(indices).tolist()
    weights = None if weights is None else np.asarray(weights).tolist()
    for v in range(len(offsets) - 1):
        for j in range(offsets[v], offsets[v + 1]):
            yield v, indices[j], (None if weights is None else weights[j])


def warn_on_multi_edges(edges, is_multigraph):
    """Warn when duplicate ``(src, dst)`` pairs appear in a graph declared simple."""
    if not is_multigraph and edges.has_multi_edges():
        warnings.warn(
            "edge list contains duplicate (src, dst) pairs but is_multigraph=False; "
            "duplicates are kept with multiplicity"
        )
