"""Run configuration: what to build, from which input, and what to check."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

import numpy as np

from ..core._Adjacency import EdgeList
from ..core._Types import DEFAULT_TYPES
from ..io.edgelist_io import generate_rmat, input_graph_from_edgelist, read_matrix_market


@dataclass
class GraphUsecase:
    test_weighted: bool = False
    multigraph: bool = False
    check_correctness: bool = True


@dataclass
class AlgorithmUsecase:
    """Parameters of a distributed algorithm check.

    ``num_seeds=None`` uses every vertex as a seed. Results are compared with
    ``|a - b| <= max(tolerance, rtol * max(|a|, |b|))``.
    """

    num_seeds: int | None = None
    normalized: bool = False
    include_endpoints: bool = False
    test_weighted: bool = False
    check_correctness: bool = True
    tolerance: float = 0.0
    rtol: float = 1e-5


@dataclass
class FileUsecase:
    path: str

    def construct_edgelist(self, *, types=DEFAULT_TYPES, weighted=False, rng=None):
        return read_matrix_market(self.path, weighted=weighted, types=types)


@dataclass
class RmatUsecase:
    scale: int = 10
    edge_factor: int = 16
    a: float = 0.57
    b: float = 0.19
    c: float = 0.19
    seed: int = 0
    undirected: bool = False
    scramble: bool = False
    multigraph: bool = True

    def construct_edgelist(self, *, types=DEFAULT_TYPES, weighted=False, rng=None):
        """R-MAT input; ``rng`` is ignored so every rank regenerates the same graph from ``seed``."""
        return generate_rmat(
            self.scale,
            self.edge_factor,
            self.a,
            self.b,
            self.c,
            rng=np.random.default_rng(self.seed),
            weighted=weighted,
            undirected=self.undirected,
            scramble=self.scramble,
            multigraph=self.multigraph,
            types=types,
        )


@dataclass
class EdgeListUsecase:
    """In-memory input, mostly for tests: an ``InputGraph`` or a bare ``EdgeList``."""

    input_graph: object

    def construct_edgelist(self, *, types=DEFAULT_TYPES, weighted=False, rng=None):
        inp = self.input_graph
        if isinstance(inp, EdgeList):
            inp = input_graph_from_edgelist(inp)
        edges = inp.edgelist.astype(types)
        if not weighted and edges.weights is not None:
            edges = EdgeList(edges.srcs, edges.dsts, None, types=types)
        elif weighted and edges.weights is None:
            edges = EdgeList(edges.srcs, edges.dsts, np.ones(len(edges)), types=types)
        return replace(inp, edgelist=edges)


def override_usecase(usecase, overrides):
    """Copy of ``usecase`` with fields from ``overrides`` (None values skipped, unknown keys rejected)."""
    names = {f.name for f in fields(usecase)}
    unknown = set(overrides) - names
    if unknown:
        raise ValueError(f"{type(usecase).__name__} has no field(s) {sorted(unknown)}")
    return replace(usecase, **{k: v for k, v in overrides.items() if v is not None})
