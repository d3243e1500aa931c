import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from graphcheck.core import (  # noqa: E402
    TYPE_COMBOS,
    EdgeList,
    InvalidInput,
    build_adjacency,
    expand_majors,
    infer_number_of_vertices,
    iter_edges,
)


def _triples(offsets, indices, weights=None):
    return sorted(iter_edges(offsets, indices, weights), key=lambda t: (t[0], t[1], t[2] or 0.0))


class TestBuildAdjacency:
    """Counting-sort construction of offsets/indices."""

    def test_triangle(self, triangle):
        offsets, indices, weights = build_adjacency(triangle)
        assert offsets.tolist() == [0, 1, 2, 3]
        assert indices.tolist() == [1, 2, 0]
        assert weights is None

    def test_triangle_transposed(self, triangle):
        offsets, indices, _ = build_adjacency(triangle, store_transposed=True)
        assert offsets.tolist() == [0, 1, 2, 3]
        # in-neighbors: 0 <- 2, 1 <- 0, 2 <- 1
        assert indices.tolist() == [2, 0, 1]

    def test_arrays_instead_of_edgelist(self):
        offsets, indices, weights = build_adjacency([0, 1, 2], [1, 2, 0], [0.5, 1.5, 2.5])
        assert offsets.tolist() == [0, 1, 2, 3]
        assert weights.tolist() == [0.5, 1.5, 2.5]

    def test_buckets_keep_input_order(self, weighted_edges):
        offsets, indices, weights = build_adjacency(weighted_edges, number_of_vertices=6)
        assert offsets.tolist() == [0, 3, 4, 5, 7, 8, 8]
        assert indices[:3].tolist() == [1, 2, 1]
        assert weights[:3].tolist() == [1.0, 2.0, 3.0]

    def test_round_trip_preserves_edge_multiset(self, random_edges):
        offsets, indices, weights = build_adjacency(random_edges, number_of_vertices=40)
        rebuilt = _triples(offsets, indices, weights)
        original = sorted(random_edges.to_tuples())
        assert len(rebuilt) == len(original)
        assert rebuilt == original

    def test_degree_sum_and_monotone_offsets(self, random_edges):
        offsets, indices, _ = build_adjacency(random_edges, number_of_vertices=40)
        assert offsets[0] == 0
        assert offsets[-1] == len(random_edges) == len(indices)
        assert np.all(np.diff(offsets) >= 0)
        degrees = np.bincount(random_edges.srcs, minlength=40)
        assert np.diff(offsets).tolist() == degrees.tolist()

    def test_indices_within_vertex_range(self, random_edges):
        _, indices, _ = build_adjacency(random_edges, number_of_vertices=40)
        assert indices.min() >= 0
        assert indices.max() < 40

    def test_reversed_transposed_equals_forward(self, random_edges):
        fwd = build_adjacency(random_edges, number_of_vertices=40)
        rev = build_adjacency(random_edges.reversed(), number_of_vertices=40, store_transposed=True)
        for a, b in zip(fwd, rev):
            np.testing.assert_array_equal(a, b)

    def test_self_loops_stay_in_own_bucket(self):
        offsets, indices, _ = build_adjacency([1, 1, 0], [1, 1, 1])
        assert offsets.tolist() == [0, 1, 3]
        assert indices.tolist() == [1, 1, 1]

    def test_isolated_vertices_get_empty_buckets(self, triangle):
        offsets, indices, _ = build_adjacency(triangle, number_of_vertices=5)
        assert offsets.tolist() == [0, 1, 2, 3, 3, 3]
        assert len(indices) == 3

    def test_inferred_vertex_count(self):
        offsets, _, _ = build_adjacency([0, 0], [4, 2])
        assert len(offsets) == 6
        assert infer_number_of_vertices([0, 0], [4, 2]) == 5
        assert infer_number_of_vertices([], []) == 0

    def test_empty_edge_list(self):
        offsets, indices, weights = build_adjacency([], [], number_of_vertices=3)
        assert offsets.tolist() == [0, 0, 0, 0]
        assert indices.size == 0
        assert weights is None
        offsets, _, _ = build_adjacency([], [])
        assert offsets.tolist() == [0]

    def test_minor_range_can_exceed_major_range(self):
        offsets, indices, _ = build_adjacency(
            [0, 1], [7, 3], number_of_vertices=2, number_of_minor_vertices=8
        )
        assert offsets.tolist() == [0, 1, 2]
        assert indices.tolist() == [7, 3]

    @pytest.mark.parametrize("name", sorted(TYPE_COMBOS))
    def test_output_dtypes_follow_types(self, name, weighted_edges):
        types = TYPE_COMBOS[name]
        offsets, indices, weights = build_adjacency(weighted_edges.astype(types), types=types)
        assert offsets.dtype == np.dtype(types.edge_dtype)
        assert indices.dtype == np.dtype(types.vertex_dtype)
        assert weights.dtype == np.dtype(types.weight_dtype)

    def test_expand_majors(self):
        assert expand_majors([0, 2, 2, 3]).tolist() == [0, 0, 2]


class TestInvalidInput:
    def test_negative_id(self):
        with pytest.raises(InvalidInput):
            build_adjacency([0, -1], [1, 0])

    def test_non_integer_ids(self):
        with pytest.raises(InvalidInput):
            build_adjacency([0.5], [1.0])

    def test_weights_length_mismatch(self):
        with pytest.raises(InvalidInput):
            build_adjacency([0, 1], [1, 0], [1.0])

    def test_endpoint_length_mismatch(self):
        with pytest.raises(InvalidInput):
            EdgeList([0, 1, 2], [1, 0])

    def test_id_outside_declared_range(self):
        with pytest.raises(InvalidInput):
            build_adjacency([0, 3], [1, 0], number_of_vertices=3)
        with pytest.raises(InvalidInput):
            build_adjacency([0, 1], [1, 5], number_of_vertices=3)

    def test_id_wider_than_vertex_type(self):
        with pytest.raises(InvalidInput):
            EdgeList([2**31], [0], types=TYPE_COMBOS["int32_int32_float32"])
        edges = EdgeList([2**31], [0], types=TYPE_COMBOS["int64_int64_float64"])
        assert edges.srcs.dtype == np.int64

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            EdgeList([-3], [0])


class TestEdgeList:
    def test_from_tuples(self):
        edges = EdgeList.from_tuples([(0, 1, 2.0), (1, 0, 3.0)])
        assert edges.is_weighted
        assert edges.to_tuples() == [(0, 1, 2.0), (1, 0, 3.0)]
        with pytest.raises(InvalidInput):
            EdgeList.from_tuples([(0, 1), (1, 0, 3.0)])

    def test_multi_edges_and_deduplication(self, weighted_edges):
        assert weighted_edges.has_multi_edges()
        simple = weighted_edges.deduplicated()
        assert not simple.has_multi_edges()
        assert len(simple) == len(weighted_edges) - 1
        # the first (0, 1) edge survives
        assert simple.to_tuples()[0] == (0, 1, 1.0)

    def test_permuted(self, triangle):
        assert triangle.permuted([2, 0, 1]).to_tuples() == [(2, 0), (0, 1), (1, 2)]
