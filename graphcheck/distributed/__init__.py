"""graphcheck.distributed: collective substrate and gather helpers."""

from .comms import (
    Communicator,
    MpiComms,
    SingleProcessComms,
    ThreadComms,
    ThreadGroup,
    run_workers,
)
from .gather import (
    allgather_edges,
    allgatherv,
    broadcast,
    gather_graph,
    gather_keyed,
    gather_renumber_map,
    gatherv,
)

__all__ = [
    "Communicator",
    "MpiComms",
    "SingleProcessComms",
    "ThreadComms",
    "ThreadGroup",
    "allgather_edges",
    "allgatherv",
    "broadcast",
    "gather_graph",
    "gather_keyed",
    "gather_renumber_map",
    "gatherv",
    "run_workers",
]
