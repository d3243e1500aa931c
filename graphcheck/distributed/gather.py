"""Collect per-partition arrays at a coordinator rank.

All functions here are collective: every rank of ``comms`` must call them,
in the same order, or the group blocks. Output order is rank order; callers
that need values keyed by vertex must gather the keys alongside (see
:func:`gather_keyed`) and sort before comparing.
"""

from __future__ import annotations

import numpy as np

from ..core._Adjacency import EdgeList
from ..core._errors import InvalidInput
from ..core._Renumber import RenumberMap
from ..core.graph import Graph, GraphProperties


def gatherv(comms, local_values, root=0, dtype=None):
    """Concatenate every rank's 1-D array, in rank order, at ``root``.

    Returns
    ---
    np.ndarray
        The full array at ``root``; an empty array on other ranks.

    """
    local = np.asarray(local_values, dtype=dtype).reshape(-1)
    parts = comms.gather(local, root=root)
    if comms.rank != root:
        return np.empty(0, dtype=local.dtype)
    return np.concatenate(parts).astype(local.dtype, copy=False)


def allgatherv(comms, local_values, dtype=None):
    """Like :func:`gatherv` but every rank receives the full array."""
    local = np.asarray(local_values, dtype=dtype).reshape(-1)
    return np.concatenate(comms.allgather(local)).astype(local.dtype, copy=False)


def broadcast(comms, value, root=0):
    return comms.broadcast(value, root=root)


def gather_keyed(comms, keys, values, root=0):
    """Gather ``(key, value)`` pairs so values keep their keys across the merge.

    Returns
    ---
    tuple[np.ndarray, np.ndarray]
        Keys and values in rank order at ``root``; empty arrays elsewhere.

    """
    keys = np.asarray(keys).reshape(-1)
    values = np.asarray(values).reshape(-1)
    if len(keys) != len(values):
        raise InvalidInput(f"rank {comms.rank}: {len(keys)} keys but {len(values)} values")
    return gatherv(comms, keys, root), gatherv(comms, values, root)


def gather_renumber_map(comms, renumber_map, root=0):
    """Merge per-partition maps into one global map at ``root``.

    Partitions must own contiguous internal ranges in rank order, so the
    concatenated maps are indexed by global internal id.

    Returns
    ---
    RenumberMap or None
        The global map at ``root``; None elsewhere.

    """
    ranges = comms.gather((renumber_map.range_first, renumber_map.range_last), root=root)
    mapping = gatherv(comms, renumber_map.mapping, root)
    if comms.rank != root:
        return None
    expected = 0
    for rank, (first, last) in enumerate(ranges):
        if first != expected:
            raise InvalidInput(
                f"rank {rank} owns internal ids from {first}, expected {expected}: "
                "partition ranges are not contiguous"
            )
        expected = last
    return RenumberMap(mapping, types=renumber_map.types)


def _external_majors(view, renumber_map):
    """INTERNAL: External id of every stored edge's major, plus the (global internal) minors."""
    major_ext = renumber_map.to_external(view.majors() + renumber_map.range_first)
    return major_ext, np.asarray(view.indices)


def _orient(view, majors, minors, weights, types):
    if view.store_transposed:
        return EdgeList(minors, majors, weights, types=types)
    return EdgeList(majors, minors, weights, types=types)


def gather_graph(comms, view, renumber_map, root=0, properties=None):
    """Rebuild a single-partition graph, in external ids, at ``root``.

    Each rank contributes its partition's edges; minors are translated with
    the gathered global map. The result keeps the partitions' orientation,
    weights and declared properties.

    Returns
    ---
    Graph or None
        The reference graph at ``root``; None elsewhere.

    """
    major_ext, minors = _external_majors(view, renumber_map)
    all_majors = gatherv(comms, major_ext, root)
    all_minors = gatherv(comms, minors, root)
    all_weights = gatherv(comms, view.weights, root) if view.is_weighted else None
    global_map = gather_renumber_map(comms, renumber_map, root)
    if comms.rank != root:
        return None

    minor_ext = global_map.to_external(all_minors)
    edges = _orient(view, all_majors, minor_ext, all_weights, view.types)
    if properties is None:
        properties = GraphProperties(view.is_symmetric, view.is_multigraph)
    return Graph(
        edges,
        number_of_vertices=len(global_map),
        properties=properties,
        store_transposed=view.store_transposed,
        types=view.types,
    )


def allgather_edges(comms, view, renumber_map):
    """Every partition's edges, in external ids, on every rank.

    Returns
    ---
    tuple[EdgeList, int]
        The full edge list and the global vertex count.

    """
    global_mapping = allgatherv(comms, renumber_map.mapping)
    global_map = RenumberMap(global_mapping, types=renumber_map.types)
    major_ext, minors = _external_majors(view, renumber_map)
    all_majors = allgatherv(comms, major_ext)
    minor_ext = global_map.to_external(allgatherv(comms, minors))
    all_weights = allgatherv(comms, view.weights) if view.is_weighted else None
    return _orient(view, all_majors, minor_ext, all_weights, view.types), len(global_map)
