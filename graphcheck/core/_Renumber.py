import numpy as np

from ._Adjacency import _as_ids
from ._errors import IndexOutOfRange, InvalidInput, UnknownVertex
from ._Types import DEFAULT_TYPES


def invert(mapping, range_first=0):
    """Build the external -> internal dict of ``mapping`` in one pass.

    Raises
    --
    InvalidInput
        If two internal ids map to the same external id.

    """
    values = np.asarray(mapping).tolist()
    inverse = dict(zip(values, range(range_first, range_first + len(values))))
    if len(inverse) != len(values):
        raise InvalidInput("renumbering map is not injective: repeated external ids")
    return inverse


def to_external(internal_ids, mapping):
    """``external[i] = mapping[internal_ids[i]]``.

    Raises
    --
    IndexOutOfRange
        If any id is negative or ``>= len(mapping)``.

    """
    return RenumberMap(mapping).to_external(internal_ids)


def to_internal(external_ids, inverse):
    """Look every external id up in a precomputed ``inverse`` dict.

    Raises
    --
    UnknownVertex
        Listing every id with no internal counterpart.

    """
    ids = np.asarray(external_ids).tolist()
    missing = [x for x in ids if x not in inverse]
    if missing:
        raise UnknownVertex(
            f"{len(missing)} external vertex id(s) not in this scope: {missing[:10]}", missing
        )
    return np.array([inverse[x] for x in ids], dtype=np.int64)


class RenumberMap:
    """Internal <-> external vertex id translation for one partition.

    ``mapping[i]`` is the external id of internal vertex ``range_first + i``.
    A single-partition (global) map has ``range_first == 0`` and covers every
    internal id.

    Parameters
    --
    mapping : array-like of int
        External ids, indexed by internal id relative to ``range_first``.
    range_first : int, default 0
        First internal id owned by this map.
    types : GraphTypes, optional

    """

    def __init__(self, mapping, range_first=0, *, types=DEFAULT_TYPES):
        self.types = types
        self.mapping = _as_ids(mapping, "mapping", types)
        self.mapping.flags.writeable = False
        self.range_first = int(range_first)
        self._inverse = None

    @classmethod
    def identity(cls, n, *, types=DEFAULT_TYPES):
        """Map with ``internal == external`` over ``[0, n)``."""
        return cls(np.arange(n, dtype=types.vertex_dtype), types=types)

    def __len__(self):
        return len(self.mapping)

    def __repr__(self):
        return f"RenumberMap([{self.range_first}, {self.range_last}))"

    @property
    def range_last(self) -> int:
        """One past the last internal id owned by this map."""
        return self.range_first + len(self.mapping)

    @property
    def inverse(self):
        """External -> internal dict (built once, then cached)."""
        if self._inverse is None:
            self._inverse = invert(self.mapping, self.range_first)
        return self._inverse

    # ==================== Translation ====================

    def to_external(self, internal_ids):
        """Translate internal ids to external ids.

        Raises
        --
        IndexOutOfRange
            If an id lies outside ``[range_first, range_last)``.

        """
        ids = np.asarray(internal_ids, dtype=np.int64).reshape(-1)
        local = ids - self.range_first
        bad = (local < 0) | (local >= len(self.mapping))
        if bad.any():
            offenders = ids[bad].tolist()
            raise IndexOutOfRange(
                f"internal id(s) outside [{self.range_first}, {self.range_last}): {offenders[:10]}",
                offenders,
            )
        return self.mapping[local]

    def to_internal(self, external_ids):
        """Translate external ids to internal ids.

        Raises
        --
        UnknownVertex
            If an external id is not owned by this map. Callers checking a
            subset (e.g. seeds) should select it with :meth:`local_subset`.

        """
        return to_internal(external_ids, self.inverse).astype(self.types.vertex_dtype)

    def contains(self, external_ids):
        """Boolean mask: which external ids this map owns."""
        inv = self.inverse
        return np.array([x in inv for x in np.asarray(external_ids).tolist()], dtype=bool)

    def local_subset(self, external_ids):
        """The external ids owned by this map, in input order."""
        ext = np.asarray(external_ids)
        return ext[self.contains(ext)] if ext.size else ext

    def is_bijection(self) -> bool:
        """True if no external id repeats (the map is a bijection onto its values)."""
        return len(np.unique(self.mapping)) == len(self.mapping)
