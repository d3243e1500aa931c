"""Input sources: edge lists from dataframes, CSV, Matrix Market files and R-MAT."""

from __future__ import annotations

from dataclasses import dataclass

import narwhals as nw
import numpy as np
import polars as pl
import scipy.io
import scipy.sparse as sp

from ..core._Adjacency import EdgeList, infer_number_of_vertices
from ..core._errors import InvalidInput
from ..core._Types import DEFAULT_TYPES


@dataclass
class InputGraph:
    """An edge list plus what its source declares about it."""

    edgelist: EdgeList
    number_of_vertices: int
    is_symmetric: bool = False


def _pick_col(cols, candidates):
    lower = {str(c).lower(): c for c in cols}
    for cand in candidates:
        if cand in lower:
            return lower[cand]
    return None


def from_dataframe(df, source=None, target=None, weight=None, *, types=DEFAULT_TYPES):
    """Edge list from any dataframe narwhals understands (Polars, pandas, PyArrow, ...).

    Parameters
    --
    df : DataFrame
        One row per edge; integer vertex ids.
    source, target : str, optional
        Column names; guessed from common names ('source'/'src'/'from', ...) when omitted.
    weight : str or False, optional
        Weight column. Guessed ('weight'/'w'/'value') when None; pass False
        to ignore weights.

    Returns
    ---
    EdgeList

    Raises
    --
    InvalidInput
        Missing columns or non-integer ids.

    """
    ndf = nw.from_native(df, eager_only=True)
    cols = list(ndf.columns)
    source = source or _pick_col(cols, ["source", "src", "from", "u"])
    target = target or _pick_col(cols, ["target", "dst", "destination", "to", "v"])
    if source is None or target is None:
        raise InvalidInput(f"cannot find source/target columns among {cols}")
    if weight is None:
        weight = _pick_col(cols, ["weight", "w", "value"])
    for c in (source, target) + ((weight,) if weight else ()):
        if c not in cols:
            raise InvalidInput(f"column {c!r} not in {cols}")

    srcs = ndf[source].to_numpy()
    dsts = ndf[target].to_numpy()
    weights = ndf[weight].to_numpy() if weight else None
    return EdgeList(srcs, dsts, weights, types=types)


def read_edge_csv(path, source=None, target=None, weight=None, *, types=DEFAULT_TYPES, **read_kwargs):
    """CSV edge list via Polars; see :func:`from_dataframe` for column handling."""
    return from_dataframe(pl.read_csv(path, **read_kwargs), source, target, weight, types=types)


def read_matrix_market(path, *, weighted=True, types=DEFAULT_TYPES):
    """Read a Matrix Market file as an edge list (row -> column).

    Symmetric files are expanded to both directions by scipy and flagged
    ``is_symmetric``. Pattern files (no values) yield weights of 1.0 when
    ``weighted`` is True.

    Returns
    ---
    InputGraph

    """
    path = str(path)
    rows, cols, _entries, _fmt, _field, symmetry = scipy.io.mminfo(path)
    coo = sp.coo_matrix(scipy.io.mmread(path))
    weights = np.asarray(coo.data, dtype=types.weight_dtype) if weighted else None
    edges = EdgeList(coo.row, coo.col, weights, types=types)
    return InputGraph(edges, max(int(rows), int(cols)), is_symmetric=symmetry == "symmetric")


def generate_rmat(
    scale,
    edge_factor=16,
    a=0.57,
    b=0.19,
    c=0.19,
    *,
    rng=None,
    weighted=False,
    undirected=False,
    scramble=False,
    multigraph=True,
    types=DEFAULT_TYPES,
):
    """R-MAT (recursive matrix) random graph with ``2**scale`` vertices.

    Every edge picks one of four quadrants per bit with probabilities
    ``a, b, c, 1 - a - b - c``.

    Parameters
    --
    scale : int
        log2 of the vertex count.
    edge_factor : int
        Edges generated per vertex (before symmetrization / de-duplication).
    rng : numpy.random.Generator, optional
    weighted : bool
        Attach uniform ``[0, 1)`` weights.
    undirected : bool
        Add the reverse of every non-loop edge and flag the result symmetric.
    scramble : bool
        Relabel vertices with a random permutation.
    multigraph : bool
        Keep duplicate ``(src, dst)`` pairs; when False keep the first of each.

    Returns
    ---
    InputGraph

    """
    if not 0 <= a + b + c <= 1:
        raise InvalidInput(f"a + b + c must lie in [0, 1], got {a + b + c}")
    rng = rng if rng is not None else np.random.default_rng()
    n = 1 << scale
    m = edge_factor * n
    srcs = np.zeros(m, dtype=np.int64)
    dsts = np.zeros(m, dtype=np.int64)
    for bit in range(scale):
        r = rng.random(m)
        src_bit = r >= a + b
        dst_bit = ((r >= a) & (r < a + b)) | (r >= a + b + c)
        srcs |= src_bit.astype(np.int64) << bit
        dsts |= dst_bit.astype(np.int64) << bit
    if scramble:
        perm = rng.permutation(n)
        srcs, dsts = perm[srcs], perm[dsts]
    weights = rng.random(m) if weighted else None

    if not multigraph:
        key = srcs * n + dsts
        _, first = np.unique(key, return_index=True)
        first.sort()
        srcs, dsts = srcs[first], dsts[first]
        weights = None if weights is None else weights[first]
    if undirected:
        if not multigraph:
            # drop (v, u) when (u, v) is also present so symmetrization stays simple
            fwd = set(zip(srcs.tolist(), dsts.tolist()))
            keep = np.array(
                [s <= d or (d, s) not in fwd for s, d in zip(srcs.tolist(), dsts.tolist())],
                dtype=bool,
            )
            srcs, dsts = srcs[keep], dsts[keep]
            weights = None if weights is None else weights[keep]
        loop = srcs == dsts
        srcs, dsts = np.concatenate([srcs, dsts[~loop]]), np.concatenate([dsts, srcs[~loop]])
        if weights is not None:
            weights = np.concatenate([weights, weights[~loop]])

    edges = EdgeList(srcs, dsts, weights, types=types)
    return InputGraph(edges, n, is_symmetric=undirected)


def input_graph_from_edgelist(edgelist, number_of_vertices=None, is_symmetric=False):
    """Wrap an in-memory ``EdgeList`` as an ``InputGraph``; the vertex count defaults to ``max(id) + 1``."""
    if number_of_vertices is None:
        number_of_vertices = infer_number_of_vertices(edgelist.srcs, edgelist.dsts)
    return InputGraph(edgelist, number_of_vertices, is_symmetric)
