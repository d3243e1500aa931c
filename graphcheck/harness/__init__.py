"""graphcheck.harness: execution context, usecases, partitioning and verification drivers."""

from .context import ExecutionContext
from .metrics import Timer, measure
from .partition import Partition, partition_edgelist
from .usecases import (
    AlgorithmUsecase,
    EdgeListUsecase,
    FileUsecase,
    GraphUsecase,
    RmatUsecase,
    override_usecase,
)
from .verify import VerificationResult, verify_distributed_algorithm, verify_graph_construction

__all__ = [
    "AlgorithmUsecase",
    "EdgeListUsecase",
    "ExecutionContext",
    "FileUsecase",
    "GraphUsecase",
    "Partition",
    "RmatUsecase",
    "Timer",
    "VerificationResult",
    "measure",
    "override_usecase",
    "partition_edgelist",
    "verify_distributed_algorithm",
    "verify_graph_construction",
]
