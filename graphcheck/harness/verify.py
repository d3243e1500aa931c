"""Verification drivers: build with the engine under test, rebuild a reference, compare.

Both drivers take the :class:`ExecutionContext` explicitly and are
collective over ``ctx.comms``: every rank calls them with the same
arguments. Only the coordinator receives a :class:`VerificationResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..algorithms.sampling import seed_quota, select_random_vertices
from ..core._Adjacency import build_adjacency
from ..core._errors import InvalidInput
from ..core._Renumber import RenumberMap
from ..core._Types import DEFAULT_TYPES
from ..core.graph import Graph, GraphProperties
from ..distributed.comms import SingleProcessComms
from ..distributed.gather import gather_graph, gather_keyed, gatherv
from ..validation.equivalence import compare_graphs, compare_vectors
from .partition import partition_edgelist


@dataclass
class VerificationResult:
    """Outcome of one check at the coordinator.

    ``report`` is the comparison report, or None when correctness checking
    was switched off for the run.
    """

    name: str
    passed: bool
    report: object = None
    details: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            "name": self.name,
            "passed": self.passed,
            "details": dict(self.details),
            "report": None if self.report is None else self.report.to_dict(),
        }


def _input_graph(ctx, input_usecase, types, weighted, multigraph):
    """INTERNAL: Same input on every rank; simple graphs drop repeated pairs."""
    inp = input_usecase.construct_edgelist(
        types=types, weighted=weighted, rng=np.random.default_rng(ctx.seed)
    )
    edges = inp.edgelist if multigraph else inp.edgelist.deduplicated()
    return inp, edges


def _finish(ctx, name, report, details, raise_on_failure):
    result = VerificationResult(
        name, True if report is None else report.passed, report, details
    )
    ctx._log_event(
        "verify",
        name=name,
        passed=result.passed,
        mismatches=None if report is None else report.counts(),
        **details,
    )
    if raise_on_failure and report is not None:
        report.raise_for_mismatch()
    return result


def verify_graph_construction(
    ctx,
    graph_usecase,
    input_usecase,
    *,
    types=DEFAULT_TYPES,
    store_transposed=False,
    construct=None,
    raise_on_failure=True,
):
    """Check a graph constructor against the counting-sort reference builder.

    Parameters
    --
    ctx : ExecutionContext
    graph_usecase : GraphUsecase
    input_usecase : FileUsecase, RmatUsecase or EdgeListUsecase
    types : GraphTypes
    store_transposed : bool
    construct : callable, optional
        Engine under test, called as ``construct(edgelist, number_of_vertices=,
        properties=, store_transposed=, types=)`` and returning anything
        :func:`compare_graphs` accepts. Defaults to :class:`Graph`.
    raise_on_failure : bool, default True
        Raise the comparison's exception instead of returning a failed result.

    Returns
    ---
    VerificationResult or None
        None on ranks other than the coordinator.

    Raises
    --
    VerificationFailure
        Structural difference, when ``raise_on_failure``.
    ToleranceExceeded
        Weight-only difference, when ``raise_on_failure``.

    """
    ctx.ensure_initialized()
    construct = construct or Graph
    inp, edges = _input_graph(
        ctx, input_usecase, types, graph_usecase.test_weighted, graph_usecase.multigraph
    )
    n = inp.number_of_vertices
    properties = GraphProperties(inp.is_symmetric, graph_usecase.multigraph)
    name = f"graph_construction[{types.name}{',transposed' if store_transposed else ''}]"

    with ctx.timed("construct"):
        graph = construct(
            edges,
            number_of_vertices=n,
            properties=properties,
            store_transposed=store_transposed,
            types=types,
        )
    if not ctx.is_coordinator:
        return None

    details = {"number_of_vertices": n, "number_of_edges": len(edges), "types": types.name}
    if not graph_usecase.check_correctness:
        return _finish(ctx, name, None, details, raise_on_failure)

    offsets, indices, weights = build_adjacency(
        edges, store_transposed=store_transposed, number_of_vertices=n, types=types
    )
    reference = Graph.from_csr(
        offsets,
        indices,
        weights,
        number_of_vertices=n,
        properties=properties,
        store_transposed=store_transposed,
        types=types,
    )
    report = compare_graphs(graph, reference)
    return _finish(ctx, name, report, details, raise_on_failure)


def verify_distributed_algorithm(
    ctx,
    usecase,
    input_usecase,
    algorithm,
    *,
    types=DEFAULT_TYPES,
    sampler=None,
    store_transposed=False,
    multigraph=False,
    raise_on_failure=True,
):
    """Run ``algorithm`` on a partitioned graph and check it against a single-partition run.

    Every rank builds its partition, samples its share of the seeds, runs
    ``algorithm`` and sends seeds, renumber map, values and edges to the
    coordinator. The coordinator rebuilds the whole graph in external ids,
    reruns ``algorithm`` on it with a group of one, and compares the two
    results keyed by external vertex id.

    Parameters
    --
    ctx : ExecutionContext
    usecase : AlgorithmUsecase
    input_usecase : FileUsecase, RmatUsecase or EdgeListUsecase
    algorithm : callable
        ``algorithm(comms, view, renumber_map, seeds, normalized=, include_endpoints=)``
        returning one value per local vertex (see :mod:`graphcheck.algorithms`).
    sampler : callable, optional
        ``sampler(rng, candidates, count)``; defaults to
        :func:`select_random_vertices`.

    Returns
    ---
    VerificationResult or None
        None on ranks other than the coordinator.

    Raises
    --
    KeySetMismatch
        The gathered keys differ from the reference's, when ``raise_on_failure``.
    ToleranceExceeded
        Values differ beyond tolerance, when ``raise_on_failure``.

    """
    ctx.ensure_initialized()
    comms = ctx.comms
    sampler = sampler or select_random_vertices
    name = f"{getattr(algorithm, '__name__', 'algorithm')}[{types.name}, {ctx.size} rank(s)]"

    inp, edges = _input_graph(ctx, input_usecase, types, usecase.test_weighted, multigraph)
    properties = GraphProperties(inp.is_symmetric, multigraph)
    part = partition_edgelist(
        edges,
        comms.size,
        number_of_vertices=inp.number_of_vertices,
        store_transposed=store_transposed,
        seed=ctx.seed,
    )[comms.rank]
    renumber_map = part.renumber_map

    with ctx.timed("construct"):
        view = part.graph(properties, types).view()

    candidates = np.arange(part.range_first, part.range_last)
    seeds = sampler(ctx.rng(2), candidates, seed_quota(usecase.num_seeds, comms.rank, comms.size))
    params = {"normalized": usecase.normalized, "include_endpoints": usecase.include_endpoints}

    with ctx.timed("algorithm"):
        values = np.asarray(algorithm(comms, view, renumber_map, seeds, **params))
    if len(values) != len(renumber_map):
        raise InvalidInput(
            f"rank {comms.rank}: algorithm returned {len(values)} values "
            f"for {len(renumber_map)} local vertices"
        )
    if not usecase.check_correctness:
        return _finish(ctx, name, None, {}, raise_on_failure) if ctx.is_coordinator else None

    root = ctx.coordinator
    all_seeds = gatherv(comms, renumber_map.to_external(seeds), root, dtype=np.int64)
    reference_graph = gather_graph(comms, view, renumber_map, root, properties)
    keys, all_values = gather_keyed(comms, renumber_map.mapping, values, root)
    if not ctx.is_coordinator:
        return None

    n = reference_graph.number_of_vertices
    reference_map = RenumberMap.identity(n, types=types)
    with ctx.timed("reference"):
        reference_values = algorithm(
            SingleProcessComms(),
            reference_graph.view(),
            reference_map,
            reference_map.to_internal(all_seeds),
            **params,
        )
    report = compare_vectors(
        (keys, all_values),
        (np.asarray(reference_map.mapping), np.asarray(reference_values)),
        usecase.tolerance,
        rtol=usecase.rtol,
    )
    details = {
        "number_of_vertices": n,
        "number_of_edges": reference_graph.number_of_edges,
        "number_of_seeds": len(all_seeds),
        "ranks": ctx.size,
        "types": types.name,
    }
    return _finish(ctx, name, report, details, raise_on_failure)
