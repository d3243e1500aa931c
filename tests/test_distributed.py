import pathlib
import sys
import time

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from graphcheck.core import (  # noqa: E402
    CollectiveError,
    CollectiveTimeout,
    Graph,
    GraphProperties,
    InvalidInput,
    RenumberMap,
)
from graphcheck.distributed import (  # noqa: E402
    MpiComms,
    SingleProcessComms,
    allgather_edges,
    allgatherv,
    broadcast,
    gather_graph,
    gather_keyed,
    gather_renumber_map,
    gatherv,
    run_workers,
)
from graphcheck.harness.partition import partition_edgelist  # noqa: E402
from graphcheck.validation import compare_graphs  # noqa: E402

MULTI = GraphProperties(is_multigraph=True)


class TestCollectives:
    @pytest.mark.parametrize("size", [1, 2, 4])
    def test_gatherv_concatenates_in_rank_order(self, size):
        def body(comms):
            local = np.arange(comms.rank + 1) + 10 * comms.rank
            return gatherv(comms, local, root=0)

        results = run_workers(size, body)
        expected = np.concatenate([np.arange(r + 1) + 10 * r for r in range(size)])
        assert results[0].tolist() == expected.tolist()
        for r in range(1, size):
            assert results[r].size == 0

    def test_gatherv_other_root(self):
        results = run_workers(3, lambda comms: gatherv(comms, [comms.rank], root=2))
        assert results[2].tolist() == [0, 1, 2]
        assert results[0].size == 0

    def test_allgatherv_and_broadcast(self):
        def body(comms):
            everything = allgatherv(comms, [comms.rank * 2])
            token = broadcast(comms, "hello" if comms.rank == 1 else None, root=1)
            return everything.tolist(), token

        for everything, token in run_workers(3, body):
            assert everything == [0, 2, 4]
            assert token == "hello"

    def test_gather_keyed_keeps_pairs(self):
        def body(comms):
            keys = np.array([comms.rank, comms.rank + 10])
            return gather_keyed(comms, keys, keys * 0.5)

        keys, values = run_workers(2, body)[0]
        assert keys.tolist() == [0, 10, 1, 11]
        assert values.tolist() == [0.0, 5.0, 0.5, 5.5]

    def test_gather_keyed_length_mismatch(self):
        with pytest.raises(InvalidInput):
            gather_keyed(SingleProcessComms(), [1, 2], [1.0])

    def test_single_process(self):
        comms = SingleProcessComms()
        assert gatherv(comms, [3, 4]).tolist() == [3, 4]
        assert comms.allgather("x") == ["x"]
        with pytest.raises(ValueError):
            comms.gather(1, root=1)


class TestFailures:
    def test_timeout_when_a_rank_stalls(self):
        def body(comms):
            if comms.rank == 1:
                time.sleep(0.5)
            comms.barrier()

        with pytest.raises(CollectiveTimeout):
            run_workers(2, body, timeout=0.1)

    def test_worker_error_releases_peers(self):
        def body(comms):
            if comms.rank == 1:
                raise ValueError("boom")
            return gatherv(comms, [comms.rank])

        with pytest.raises(ValueError, match="boom"):
            run_workers(3, body)

    def test_peer_abort_is_collective_error(self):
        seen = {}

        def body(comms):
            if comms.rank == 0:
                raise RuntimeError("rank 0 failed")
            try:
                comms.barrier()
            except CollectiveError as exc:
                seen[comms.rank] = type(exc)
                raise

        with pytest.raises(RuntimeError, match="rank 0 failed"):
            run_workers(2, body)
        assert seen[1] is CollectiveError

    def test_non_contiguous_ranges_rejected(self):
        def body(comms):
            first = 0 if comms.rank == 0 else 5
            return gather_renumber_map(comms, RenumberMap([comms.rank, 10 + comms.rank], first))

        with pytest.raises(InvalidInput):
            run_workers(2, body)


class TestPartitionedGraphs:
    @pytest.mark.parametrize("size", [1, 2, 3, 4])
    def test_partitions_cover_the_graph(self, random_edges, size):
        parts = partition_edgelist(random_edges, size, number_of_vertices=40, seed=11)
        assert [p.range_first for p in parts] == [0] + [p.range_last for p in parts[:-1]]
        assert parts[-1].range_last == 40
        global_map = RenumberMap(np.concatenate([p.renumber_map.mapping for p in parts]))
        assert global_map.is_bijection()

        edges = []
        for p in parts:
            # external vertex v lives on rank v % size
            assert np.all(p.renumber_map.mapping % size == p.rank)
            el = p.edgelist
            majors = p.renumber_map.to_external(el.srcs.astype(np.int64) + p.range_first)
            minors = global_map.to_external(el.dsts)
            edges += list(zip(majors.tolist(), minors.tolist(), el.weights.tolist()))
        assert sorted(edges) == sorted(random_edges.to_tuples())

    def test_partitioning_is_deterministic(self, random_edges):
        a = partition_edgelist(random_edges, 3, seed=5)
        b = partition_edgelist(random_edges, 3, seed=5)
        for pa, pb in zip(a, b):
            assert pa.renumber_map.mapping.tolist() == pb.renumber_map.mapping.tolist()
            assert pa.edgelist.to_tuples() == pb.edgelist.to_tuples()

    @pytest.mark.parametrize("transposed", [False, True])
    @pytest.mark.parametrize("size", [1, 2, 4])
    def test_gather_graph_matches_single_partition_build(self, random_edges, size, transposed):
        parts = partition_edgelist(
            random_edges, size, number_of_vertices=40, store_transposed=transposed, seed=1
        )

        def body(comms):
            part = parts[comms.rank]
            view = part.graph(MULTI).view()
            return gather_graph(comms, view, part.renumber_map, root=0)

        results = run_workers(size, body)
        assert all(r is None for r in results[1:])
        gathered = results[0]
        reference = Graph(random_edges, 40, properties=MULTI, store_transposed=transposed)
        report = compare_graphs(gathered, reference)
        assert report.is_empty(), report.summary()
        assert gathered.store_transposed == transposed

    def test_allgather_edges_on_every_rank(self, random_edges):
        parts = partition_edgelist(random_edges, 3, number_of_vertices=40, seed=2)

        def body(comms):
            part = parts[comms.rank]
            edges, n = allgather_edges(comms, part.graph(MULTI).view(), part.renumber_map)
            return sorted(edges.to_tuples()), n

        expected = sorted(random_edges.to_tuples())
        for edges, n in run_workers(3, body):
            assert n == 40
            assert edges == expected

    def test_gather_renumber_map(self, random_edges):
        parts = partition_edgelist(random_edges, 2, number_of_vertices=40, seed=4)

        def body(comms):
            return gather_renumber_map(comms, parts[comms.rank].renumber_map)

        global_map, other = run_workers(2, body)
        assert other is None
        assert len(global_map) == 40
        assert sorted(global_map.mapping.tolist()) == list(range(40))


class MpiLikeComm:
    """mpi4py-style surface (Get_rank, bcast, Barrier, Abort) over an in-process rank."""

    def __init__(self, inner):
        self.inner = inner
        self.aborted = []

    def Get_rank(self):
        return self.inner.rank

    def Get_size(self):
        return self.inner.size

    def gather(self, value, root=0):
        return self.inner.gather(value, root=root)

    def bcast(self, value, root=0):
        return self.inner.broadcast(value, root=root)

    def allgather(self, value):
        return self.inner.allgather(value)

    def Barrier(self):
        self.inner.barrier()

    def Abort(self, errorcode=0):
        self.aborted.append(errorcode)


class TestMpiComms:
    def test_collectives_map_to_mpi_calls(self):
        def body(comms):
            mpi = MpiComms(MpiLikeComm(comms))
            mpi.barrier()
            token = broadcast(mpi, "go" if mpi.rank == 2 else None, root=2)
            return gatherv(mpi, [mpi.rank * 3]), allgatherv(mpi, [mpi.rank]).tolist(), token

        results = run_workers(3, body, timeout=30)
        assert results[0][0].tolist() == [0, 3, 6]
        assert results[1][0].size == 0
        for _, everything, token in results:
            assert everything == [0, 1, 2]
            assert token == "go"

    def test_gather_graph_over_mpi_surface(self, random_edges):
        parts = partition_edgelist(random_edges, 2, number_of_vertices=40, seed=3)

        def body(comms):
            mpi = MpiComms(MpiLikeComm(comms))
            part = parts[mpi.rank]
            return gather_graph(mpi, part.graph(MULTI).view(), part.renumber_map)

        gathered = run_workers(2, body, timeout=30)[0]
        reference = Graph(random_edges, 40, properties=MULTI)
        assert compare_graphs(gathered, reference).is_empty()

    def test_abort_and_bad_root(self):
        fake = MpiLikeComm(SingleProcessComms())
        mpi = MpiComms(fake)
        assert (mpi.rank, mpi.size) == (0, 1)
        with pytest.raises(ValueError):
            mpi.gather(1, root=3)
        mpi.abort()
        assert fake.aborted == [1]

    def test_comm_world_default(self):
        pytest.importorskip("mpi4py")
        mpi = MpiComms()
        assert 0 <= mpi.rank < mpi.size
        assert allgatherv(mpi, [mpi.rank]).tolist() == list(range(mpi.size))
