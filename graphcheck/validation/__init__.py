"""graphcheck.validation: order-independent equivalence checks."""

from .equivalence import (
    BucketMismatch,
    FieldMismatch,
    GraphComparison,
    KeyMismatch,
    ValueMismatch,
    VectorComparison,
    WeightMismatch,
    as_keyed,
    assert_equal_graphs,
    assert_equal_vectors,
    canonical_bucket,
    compare_graphs,
    compare_vectors,
    equal_graphs,
    equal_vectors,
    within_tolerance,
)

__all__ = [
    "BucketMismatch",
    "FieldMismatch",
    "GraphComparison",
    "KeyMismatch",
    "ValueMismatch",
    "VectorComparison",
    "WeightMismatch",
    "as_keyed",
    "assert_equal_graphs",
    "assert_equal_vectors",
    "canonical_bucket",
    "compare_graphs",
    "compare_vectors",
    "equal_graphs",
    "equal_vectors",
    "within_tolerance",
]
