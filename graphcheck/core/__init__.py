"""graphcheck.core: edge lists, compressed adjacency, containers and renumbering."""

from ._Adjacency import EdgeList, build_adjacency, expand_majors, infer_number_of_vertices, iter_edges
from ._errors import (
    CollectiveError,
    CollectiveTimeout,
    GraphCheckError,
    IndexOutOfRange,
    InvalidInput,
    KeySetMismatch,
    StructuralInvariantViolation,
    ToleranceExceeded,
    UnknownVertex,
    VerificationFailure,
)
from ._GraphView import GraphView
from ._Renumber import RenumberMap, invert, to_external, to_internal
from ._Types import DEFAULT_TYPES, TYPE_COMBOS, GraphTypes
from .graph import Graph, GraphProperties, check_structure, has_multi_edges, is_symmetric_adjacency

__all__ = [
    "DEFAULT_TYPES",
    "TYPE_COMBOS",
    "CollectiveError",
    "CollectiveTimeout",
    "EdgeList",
    "Graph",
    "GraphCheckError",
    "GraphProperties",
    "GraphTypes",
    "GraphView",
    "IndexOutOfRange",
    "InvalidInput",
    "KeySetMismatch",
    "RenumberMap",
    "StructuralInvariantViolation",
    "ToleranceExceeded",
    "UnknownVertex",
    "VerificationFailure",
    "build_adjacency",
    "check_structure",
    "expand_majors",
    "has_multi_edges",
    "infer_number_of_vertices",
    "invert",
    "is_symmetric_adjacency",
    "iter_edges",
    "to_external",
    "to_internal",
]
