"""Exception taxonomy shared by builder, translator, gather and validator."""


class GraphCheckError(Exception):
    """Base class for every error raised by graphcheck."""


class InvalidInput(GraphCheckError, ValueError):
    """Malformed edge list or metadata (negative ids, length mismatch, false claims)."""


class StructuralInvariantViolation(GraphCheckError):
    """A compressed adjacency structure breaks the offsets/indices contract.

    Always fatal: it points at a bug in whatever built the structure.
    """


class IndexOutOfRange(GraphCheckError, IndexError):
    """Internal vertex id outside the range covered by a renumbering map."""

    def __init__(self, message, ids=()):
        super().__init__(message)
        self.ids = list(ids)


class UnknownVertex(GraphCheckError, KeyError):
    """External vertex id with no internal counterpart in the current scope."""

    def __init__(self, message, ids=()):
        super().__init__(message)
        self.ids = list(ids)

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class VerificationFailure(GraphCheckError, AssertionError):
    """Distributed and reference outputs disagree.

    Attributes
    --
    mismatches : list
        Every mismatch found (one entry unless the check ran in diagnostic mode).

    """

    def __init__(self, message, mismatches=()):
        super().__init__(message)
        self.mismatches = list(mismatches)


class KeySetMismatch(VerificationFailure):
    """Key sets of two keyed vectors differ (or one side repeats a key)."""

    @property
    def keys(self):
        return [m.key for m in self.mismatches]


class ToleranceExceeded(VerificationFailure):
    """A numeric comparison fell outside the allowed tolerance."""


class CollectiveError(GraphCheckError, RuntimeError):
    """A collective operation could not complete (a peer failed)."""


class CollectiveTimeout(CollectiveError, TimeoutError):
    """A collective operation did not complete within the configured timeout."""
