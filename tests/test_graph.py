# test_graph.py
import os
import sys
import unittest
import warnings

import numpy as np
import scipy.sparse as sp

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from graphcheck.core import (
    TYPE_COMBOS,
    EdgeList,
    Graph,
    GraphProperties,
    InvalidInput,
    StructuralInvariantViolation,
    check_structure,
    is_symmetric_adjacency,
)


class TestGraphConstruction(unittest.TestCase):
    def setUp(self):
        self.edges = EdgeList([0, 0, 1, 3], [1, 2, 2, 0], [1.0, 2.0, 3.0, 4.0])
        self.g = Graph(self.edges, 4)

    def test_counts(self):
        self.assertEqual(self.g.number_of_vertices, 4)
        self.assertEqual(self.g.number_of_edges, 4)
        self.assertTrue(self.g.is_weighted)
        self.assertFalse(self.g.is_symmetric)
        self.assertFalse(self.g.is_multigraph)
        self.assertFalse(self.g.store_transposed)

    def test_view_accessors(self):
        view = self.g.view()
        self.assertIs(view, self.g.view())
        self.assertEqual(view.offsets.tolist(), [0, 2, 3, 3, 4])
        self.assertEqual(view.degree(0), 2)
        self.assertEqual(view.degrees().tolist(), [2, 1, 0, 1])
        self.assertEqual(sorted(view.neighbors(0).tolist()), [1, 2])
        self.assertEqual(sorted(view.bucket(0)), [(1, 1.0), (2, 2.0)])
        self.assertEqual(view.bucket(2), [])

    def test_arrays_are_read_only(self):
        view = self.g.view()
        for arr in (view.offsets, view.indices, view.weights):
            with self.assertRaises(ValueError):
                arr[0] = 0

    def test_input_is_copied(self):
        srcs = np.array([0, 1])
        g = Graph(EdgeList(srcs, [1, 0]), 2)
        srcs[0] = 1
        self.assertEqual(g.view().offsets.tolist(), [0, 1, 2])

    def test_edges_round_trip(self):
        srcs, dsts, weights = self.g.view().edges()
        got = sorted(zip(srcs.tolist(), dsts.tolist(), weights.tolist()))
        self.assertEqual(got, sorted(self.edges.to_tuples()))
        self.assertEqual(sorted(self.g.to_edgelist().to_tuples()), sorted(self.edges.to_tuples()))

    def test_transposed_edges_keep_orientation(self):
        g = Graph(self.edges, 4, store_transposed=True)
        self.assertEqual(g.view().offsets.tolist(), [0, 1, 2, 4, 4])
        self.assertEqual(sorted(g.to_edgelist().to_tuples()), sorted(self.edges.to_tuples()))

    def test_to_scipy(self):
        m = self.g.view().to_scipy()
        self.assertTrue(sp.issparse(m))
        self.assertEqual(m.shape, (4, 4))
        self.assertAlmostEqual(m[3, 0], 4.0)

    def test_from_tuples_list(self):
        g = Graph([(0, 1), (1, 0)])
        self.assertEqual(g.number_of_vertices, 2)
        self.assertFalse(g.is_weighted)

    def test_types(self):
        types = TYPE_COMBOS["int64_int64_float64"]
        g = Graph(self.edges, 4, types=types)
        self.assertEqual(g.view().indices.dtype, np.int64)
        self.assertEqual(g.view().weights.dtype, np.float64)
        self.assertEqual(g.types.name, "int64_int64_float64")

    def test_vertex_out_of_range_in_view(self):
        with self.assertRaises(IndexError):
            self.g.view().degree(4)


class TestFromCsr(unittest.TestCase):
    def test_valid(self):
        g = Graph.from_csr([0, 1, 2, 3], [1, 2, 0])
        self.assertEqual(g.number_of_vertices, 3)
        self.assertEqual(g.number_of_edges, 3)

    def test_last_offset_must_match_edge_count(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([0, 1, 2, 2], [1, 2, 0])

    def test_declared_edge_count_checked(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([0, 1, 2, 3], [1, 2, 0], number_of_edges=4)

    def test_decreasing_offsets(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([0, 2, 1, 3], [1, 2, 0])

    def test_first_offset_nonzero(self):
        with self.assertRaises(StructuralInvariantViolation):
            check_structure([1, 2, 3], [0, 1, 0], None, 2, 3)

    def test_offsets_length(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([0, 1, 2, 3], [1, 2, 0], number_of_vertices=4)

    def test_index_out_of_range(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([0, 1, 2, 3], [1, 2, 3])

    def test_weights_length(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([0, 1, 2, 3], [1, 2, 0], [1.0, 2.0])

    def test_empty_offsets(self):
        with self.assertRaises(StructuralInvariantViolation):
            Graph.from_csr([], [])
        with self.assertRaises(StructuralInvariantViolation):
            check_structure([], [], None, -1)

    def test_empty_graph(self):
        g = Graph.from_csr([0], [])
        self.assertEqual((g.number_of_vertices, g.number_of_edges), (0, 0))


class TestDeclaredProperties(unittest.TestCase):
    def test_symmetry_trusted_by_default(self):
        g = Graph(EdgeList([0], [1]), 2, properties=GraphProperties(is_symmetric=True))
        self.assertTrue(g.is_symmetric)

    def test_symmetry_verified_on_request(self):
        with self.assertRaises(InvalidInput):
            Graph(
                EdgeList([0], [1]),
                2,
                properties=GraphProperties(is_symmetric=True),
                verify_properties=True,
            )

    def test_symmetric_graph_passes_verification(self):
        edges = EdgeList([0, 1, 1, 2], [1, 0, 2, 1], [1.0, 1.0, 5.0, 5.0])
        g = Graph(edges, 3, properties=GraphProperties(is_symmetric=True), verify_properties=True)
        self.assertTrue(g.is_symmetric)

    def test_asymmetric_weights_are_not_symmetric(self):
        self.assertFalse(is_symmetric_adjacency([0, 1, 2], [1, 0], [1.0, 2.0]))
        self.assertTrue(is_symmetric_adjacency([0, 1, 2], [1, 0], [2.0, 2.0]))

    def test_simple_claim_verified(self):
        edges = EdgeList([0, 0], [1, 1])
        with self.assertRaises(InvalidInput):
            Graph(edges, 2, verify_properties=True)
        g = Graph(edges, 2, properties=GraphProperties(is_multigraph=True), verify_properties=True)
        self.assertEqual(g.view().degree(0), 2)

    def test_duplicates_in_simple_graph_warn(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            g = Graph(EdgeList([0, 0], [1, 1]), 2)
        self.assertEqual(g.number_of_edges, 2)
        self.assertTrue(any("duplicate" in str(w.message) for w in caught))

    def test_path_degrees(self):
        edges = EdgeList([0, 1, 1, 2, 2, 3], [1, 0, 2, 1, 3, 2])
        g = Graph(edges, 4, properties=GraphProperties(is_symmetric=True), verify_properties=True)
        self.assertEqual(g.view().degrees().tolist(), [1, 2, 2, 1])


if __name__ == "__main__":
    unittest.main()
