from __future__ import annotations

from contextlib import contextmanager

import numpy as np

from ..distributed.comms import SingleProcessComms
from ._History import History
from .metrics import Timer, measure


class ExecutionContext(History):
    """Per-rank state of one verification run.

    Owns the communicator handle, the run seed, the timer and the run
    history. Created by the top-level driver and passed explicitly into
    every harness call; nothing in graphcheck keeps a global handle.

    Parameters
    --
    comms : Communicator, optional
        Collective substrate for this rank. Defaults to a group of one.
    coordinator : int, default 0
        Rank that gathers results and runs the reference computation.
    seed : int, default 0
        Base seed; every rank derives its own streams from it.
    perf : bool, default False
        Barrier around timed sections so timings cover the slowest rank.
    history : bool, default True
        Record events in the in-memory run history.

    Notes
    -
    Use as a context manager, or call :meth:`initialize` / :meth:`teardown`.

    """

    def __init__(self, comms=None, *, coordinator=0, seed=0, perf=False, history=True):
        self.comms = comms if comms is not None else SingleProcessComms()
        if not 0 <= coordinator < self.comms.size:
            raise ValueError(f"coordinator {coordinator} outside [0, {self.comms.size})")
        self.coordinator = coordinator
        self.seed = int(seed)
        self.perf = bool(perf)
        self.timer = Timer()
        self._open = False
        self._init_history(history)

    # ==================== Lifecycle ====================

    def initialize(self):
        self._open = True
        self._log_event(
            "initialize",
            size=self.size,
            coordinator=self.coordinator,
            seed=self.seed,
            perf=self.perf,
        )
        return self

    def teardown(self):
        if self.perf and self.timer.timings:
            self._log_event("timings", **{k: list(v) for k, v in self.timer.timings.items()})
        self._log_event("teardown")
        self._open = False

    def __enter__(self):
        return self.initialize()

    def __exit__(self, exc_type, exc, tb):
        if exc is not None:
            self._log_event("error", error=type(exc).__name__, message=str(exc))
        self.teardown()
        return False

    def ensure_initialized(self):
        if not self._open:
            raise RuntimeError("ExecutionContext used outside initialize()/teardown()")

    # ==================== Topology ====================

    @property
    def rank(self) -> int:
        return self.comms.rank

    @property
    def size(self) -> int:
        return self.comms.size

    @property
    def is_coordinator(self) -> bool:
        return self.rank == self.coordinator

    def rng(self, stream=0):
        """Generator seeded by ``(seed, rank, stream)``: reproducible and distinct per rank."""
        return np.random.default_rng([self.seed, self.rank, stream])

    # ==================== Timing ====================

    @contextmanager
    def timed(self, label):
        """Time a section and record it in the history.

        With ``perf=True`` every rank meets at a barrier before and after,
        so this is collective in that mode. A failing section skips the exit
        barrier but still closes its timer.
        """
        if self.perf:
            self.comms.barrier()
            self.timer.start(label)
        try:
            with measure() as m:
                yield m
            if self.perf:
                self.comms.barrier()
        finally:
            if self.perf:
                self.timer.stop()
        self._log_event("timed", label=label, **m)

    def __repr__(self):
        return f"ExecutionContext(rank={self.rank}/{self.size}, coordinator={self.coordinator})"
