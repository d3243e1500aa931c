"""Small distributed kernels used to exercise the verification flow.

Every kernel has the same calling convention::

    kernel(comms, view, renumber_map, seeds, normalized=False, include_endpoints=False)

``view`` is this rank's partition (local majors, global internal minors),
``seeds`` are internal ids owned by this rank. The result holds one value per
local vertex, aligned with ``renumber_map.mapping``. Kernels are collective.
"""

from __future__ import annotations

import networkx as nx
import numpy as np

from ..distributed.gather import allgather_edges, allgatherv


def weighted_out_degree(comms, view, renumber_map, seeds=None, normalized=False, **params):
    """Sum of stored edge weights per major vertex (edge count when unweighted).

    Source-major storage gives the weighted out-degree, destination-major
    storage the weighted in-degree. ``normalized`` divides by the global
    total. ``seeds`` is accepted for the common signature and ignored.
    """
    weights = view.weights if view.is_weighted else None
    values = np.bincount(view.majors(), weights=weights, minlength=view.number_of_vertices)
    values = values.astype(np.float64)
    if normalized:
        total = float(allgatherv(comms, [values.sum()]).sum())
        if total:
            values /= total
    return values


def _digraph(edges, n, weighted):
    G = nx.MultiDiGraph()
    G.add_nodes_from(range(n))
    if weighted:
        G.add_weighted_edges_from(
            zip(edges.srcs.tolist(), edges.dsts.tolist(), edges.weights.astype(np.float64).tolist())
        )
    else:
        G.add_edges_from(zip(edges.srcs.tolist(), edges.dsts.tolist()))
    return G


def betweenness_centrality(
    comms, view, renumber_map, seeds=None, normalized=False, include_endpoints=False, **params
):
    """Betweenness restricted to shortest paths starting at ``seeds``.

    Every rank rebuilds the whole graph (external ids) and the global seed
    set, runs networkx's source-subset betweenness, and keeps the values of
    its own vertices. Shortest paths are weighted when the partition is.

    Parameters
    --
    seeds : array-like of int, optional
        Internal ids of local sources; None uses every local vertex.
    normalized : bool
        Scale by ``1 / ((n - 1) * (n - 2))`` (for ``n > 2``).
    include_endpoints : bool
        Count each path's source and target as lying on it.

    Returns
    ---
    np.ndarray
        float64, one value per local vertex.

    """
    edges, n = allgather_edges(comms, view, renumber_map)
    if seeds is None:
        seeds = np.arange(renumber_map.range_first, renumber_map.range_last)
    local_sources = renumber_map.to_external(np.asarray(seeds, dtype=np.int64))
    sources = sorted(set(allgatherv(comms, local_sources, dtype=np.int64).tolist()))

    G = _digraph(edges, n, view.is_weighted)
    weight = "weight" if view.is_weighted else None
    scores = nx.betweenness_centrality_subset(
        G, sources=sources, targets=list(G), normalized=normalized, weight=weight
    )

    if include_endpoints:
        scale = 1.0 / ((n - 1) * (n - 2)) if normalized and n > 2 else 1.0
        for s in sources:
            reached = nx.descendants(G, s)
            scores[s] += len(reached) * scale
            for t in reached:
                scores[t] += scale

    return np.array([scores[v] for v in renumber_map.mapping.tolist()], dtype=np.float64)


KERNELS = {
    "weighted_out_degree": weighted_out_degree,
    "betweenness_centrality": betweenness_centrality,
}
