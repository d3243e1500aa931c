"""Collective communication over a fixed group of ranks.

``Communicator`` is the narrow interface the harness needs (gather,
broadcast, barrier). Three implementations ship here: a single-process one
used for reference runs at the coordinator, ``MpiComms`` wrapping an mpi4py
communicator (one process per rank, launched with ``mpirun``), and an
in-process thread group with one thread per rank for tests.
"""

from __future__ import annotations

import threading

from ..core._errors import CollectiveError, CollectiveTimeout


class Communicator:
    """Interface of the collective substrate.

    Attributes
    --
    rank : int
        This worker's rank in ``[0, size)``.
    size : int
        Number of participating workers.

    """

    rank: int = 0
    size: int = 1

    def gather(self, value, root=0):
        """Collect ``value`` from every rank; list in rank order at ``root``, None elsewhere."""
        raise NotImplementedError

    def broadcast(self, value, root=0):
        """Return ``root``'s ``value`` on every rank."""
        raise NotImplementedError

    def barrier(self):
        """Block until every rank has reached the barrier."""
        raise NotImplementedError

    def allgather(self, value):
        """Every rank's ``value``, in rank order, on every rank."""
        return self.broadcast(self.gather(value, root=0), root=0)

    def abort(self):
        """Release ranks blocked in a collective after a local failure."""


class SingleProcessComms(Communicator):
    """Group of one; every collective returns immediately."""

    def __init__(self):
        self.rank = 0
        self.size = 1

    def gather(self, value, root=0):
        _check_root(root, 1)
        return [value]

    def broadcast(self, value, root=0):
        _check_root(root, 1)
        return value

    def barrier(self):
        return None


def _check_root(root, size):
    if not 0 <= root < size:
        raise ValueError(f"root rank {root} outside [0, {size})")


class MpiComms(Communicator):
    """One rank of an MPI communicator.

    Parameters
    --
    comm : mpi4py.MPI.Comm, optional
        Communicator to wrap. Defaults to ``MPI.COMM_WORLD``.

    Notes
    -
    - Values travel through mpi4py's pickle-based lowercase collectives.
    - MPI collectives have no timeout. A failing rank cannot release peers
      blocked in a collective, so :meth:`abort` ends the whole job.

    """

    def __init__(self, comm=None):
        if comm is None:
            from mpi4py import MPI

            comm = MPI.COMM_WORLD
        self.comm = comm
        self.rank = comm.Get_rank()
        self.size = comm.Get_size()

    def gather(self, value, root=0):
        _check_root(root, self.size)
        return self.comm.gather(value, root=root)

    def broadcast(self, value, root=0):
        _check_root(root, self.size)
        return self.comm.bcast(value, root=root)

    def barrier(self):
        self.comm.Barrier()

    def allgather(self, value):
        return self.comm.allgather(value)

    def abort(self, errorcode=1):
        self.comm.Abort(errorcode)


class ThreadGroup:
    """Shared state of ``size`` in-process ranks.

    Parameters
    --
    size : int
        Number of ranks.
    timeout : float, optional
        Seconds a rank waits in a collective before giving up with
        ``CollectiveTimeout``. None waits forever, so a stalled rank hangs
        the whole group.

    """

    def __init__(self, size, timeout=None):
        if size < 1:
            raise ValueError(f"group size must be >= 1, got {size}")
        self.size = size
        self.timeout = timeout
        self._barrier = threading.Barrier(size)
        self._slots = [None] * size
        self._aborted = False

    def comms(self, rank):
        """Communicator handle for ``rank``."""
        _check_root(rank, self.size)
        return ThreadComms(self, rank)

    def abort(self):
        self._aborted = True
        self._barrier.abort()


class ThreadComms(Communicator):
    """One rank of a :class:`ThreadGroup`."""

    def __init__(self, group, rank):
        self._group = group
        self.rank = rank
        self.size = group.size

    def barrier(self):
        group = self._group
        try:
            group._barrier.wait(group.timeout)
        except threading.BrokenBarrierError as exc:
            if group._aborted:
                raise CollectiveError(f"rank {self.rank}: collective aborted by a peer") from exc
            group._barrier.abort()
            raise CollectiveTimeout(
                f"rank {self.rank}: collective did not complete within {group.timeout}s"
            ) from exc

    def gather(self, value, root=0):
        _check_root(root, self.size)
        slots = self._group._slots
        slots[self.rank] = value
        self.barrier()
        out = list(slots) if self.rank == root else None
        # slots are reused by the next collective
        self.barrier()
        return out

    def broadcast(self, value, root=0):
        _check_root(root, self.size)
        slots = self._group._slots
        if self.rank == root:
            slots[root] = value
        self.barrier()
        out = slots[root]
        self.barrier()
        return out

    def abort(self):
        self._group.abort()


def run_workers(size, fn, *args, timeout=None, **kwargs):
    """Run ``fn(comms, *args, **kwargs)`` on ``size`` ranks, one thread each.

    Parameters
    --
    size : int
        Number of ranks.
    fn : callable
        Worker body; receives its :class:`ThreadComms` first.
    timeout : float, optional
        Collective timeout forwarded to the :class:`ThreadGroup`.

    Returns
    ---
    list
        Each rank's return value, in rank order.

    Raises
    --
    Exception
        The first worker failure. Failures that are only a consequence of a
        peer aborting (``CollectiveError``) are reported after real causes.

    """
    group = ThreadGroup(size, timeout=timeout)
    results = [None] * size
    errors = [None] * size

    def target(rank):
        try:
            results[rank] = fn(group.comms(rank), *args, **kwargs)
        except Exception as exc:
            errors[rank] = exc
            group.abort()

    threads = [
        threading.Thread(target=target, args=(rank,), name=f"graphcheck-rank{rank}", daemon=True)
        for rank in range(size)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    raised = [e for e in errors if e is not None]
    if raised:
        causes = [e for e in raised if type(e) is not CollectiveError]
        raise (causes or raised)[0]
    return results
