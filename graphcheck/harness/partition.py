from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..core._Adjacency import EdgeList, infer_number_of_vertices
from ..core._errors import InvalidInput
from ..core._Renumber import RenumberMap
from ..core.graph import Graph


@dataclass
class Partition:
    """One rank's share of a graph.

    Majors in ``edgelist`` are local (``internal - range_first``); minors are
    global internal ids. ``renumber_map`` translates this rank's internal
    ids back to external ones.
    """

    rank: int
    edgelist: EdgeList
    renumber_map: RenumberMap
    number_of_vertices: int
    store_transposed: bool = False

    @property
    def range_first(self) -> int:
        return self.renumber_map.range_first

    @property
    def range_last(self) -> int:
        return self.renumber_map.range_last

    @property
    def number_of_local_vertices(self) -> int:
        return len(self.renumber_map)

    def graph(self, properties=None, types=None):
        """Partition graph: local majors, minors over the full internal range."""
        return Graph(
            self.edgelist,
            number_of_vertices=self.number_of_local_vertices,
            number_of_minor_vertices=self.number_of_vertices,
            properties=properties,
            store_transposed=self.store_transposed,
            types=types or self.edgelist.types,
        )


def partition_edgelist(edgelist, size, *, number_of_vertices=None, store_transposed=False, seed=0):
    """Split an edge list over ``size`` ranks with a fresh internal numbering.

    External vertex ``v`` belongs to rank ``v % size``. Internal ids are a
    seeded random relabel in which each rank owns one contiguous range, in
    rank order. Every edge goes to the rank owning its major endpoint.

    Returns
    ---
    list[Partition]
        One partition per rank. Deterministic for a given ``seed``, so every
        rank can compute the split independently and keep its own entry.

    """
    if size < 1:
        raise InvalidInput(f"size must be >= 1, got {size}")
    n = number_of_vertices
    if n is None:
        n = infer_number_of_vertices(edgelist.srcs, edgelist.dsts)
    types = edgelist.types

    rng = np.random.default_rng(seed)
    shuffled = rng.permutation(n)
    owner = shuffled % size
    external_of = shuffled[np.argsort(owner, kind="stable")]
    internal_of = np.empty(n, dtype=np.int64)
    internal_of[external_of] = np.arange(n)
    firsts = np.concatenate([[0], np.cumsum(np.bincount(owner, minlength=size))])

    majors = edgelist.majors(store_transposed).astype(np.int64)
    minors = edgelist.minors(store_transposed).astype(np.int64)
    if len(majors) and max(int(majors.max()), int(minors.max())) >= n:
        raise InvalidInput(f"edge endpoint outside [0, {n})")
    edge_owner = majors % size

    partitions = []
    for rank in range(size):
        first, last = int(firsts[rank]), int(firsts[rank + 1])
        mask = edge_owner == rank
        local_majors = internal_of[majors[mask]] - first
        global_minors = internal_of[minors[mask]]
        weights = None if edgelist.weights is None else edgelist.weights[mask]
        if store_transposed:
            local = EdgeList(global_minors, local_majors, weights, types=types)
        else:
            local = EdgeList(local_majors, global_minors, weights, types=types)
        partitions.append(
            Partition(
                rank=rank,
                edgelist=local,
                renumber_map=RenumberMap(external_of[first:last], range_first=first, types=types),
                number_of_vertices=n,
                store_transposed=store_transposed,
            )
        )
    return partitions
