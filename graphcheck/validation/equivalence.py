"""Order-independent equivalence of adjacency structures and keyed result vectors.

Two structures are equal when every vertex's bucket holds the same multiset
of ``(neighbor, weight)`` pairs; storage order inside a bucket is ignored.
Two keyed vectors are equal when they cover the same keys and the values
agree within tolerance.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import polars as pl

from ..core._errors import KeySetMismatch, ToleranceExceeded, VerificationFailure


# ==================== Mismatch records ====================


@dataclass(frozen=True)
class FieldMismatch:
    """Graph-level metadata differs (vertex count, edge count, weightedness)."""

    field: str
    a: Any
    b: Any
    kind: str = "field"


@dataclass(frozen=True)
class BucketMismatch:
    """A vertex's bucket differs in degree or in its sorted neighbor list."""

    vertex: int
    reason: str
    a: Any
    b: Any
    kind: str = "bucket"


@dataclass(frozen=True)
class WeightMismatch:
    """Same neighbor at the same sorted position, weights outside tolerance."""

    vertex: int
    neighbor: int
    a: float
    b: float
    difference: float
    kind: str = "weight"


@dataclass(frozen=True)
class KeyMismatch:
    """A key present on one side only, or repeated within one side."""

    key: Any
    reason: str
    kind: str = "key"


@dataclass(frozen=True)
class ValueMismatch:
    """Values for one key outside tolerance."""

    key: Any
    a: float
    b: float
    difference: float
    kind: str = "value"


# ==================== Numeric helpers ====================


def within_tolerance(a, b, tolerance=0.0, rtol=0.0):
    """Elementwise ``|a - b| <= max(tolerance, rtol * max(|a|, |b|))``.

    NaN matches NaN; equal infinities match.

    Returns
    ---
    tuple[np.ndarray, np.ndarray]
        Boolean mask of matching positions and the absolute differences.

    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        diff = np.abs(a - b)
        bound = np.maximum(tolerance, rtol * np.maximum(np.abs(a), np.abs(b)))
        ok = (diff <= bound) | (a == b) | (np.isnan(a) & np.isnan(b))
    return ok, diff


def canonical_bucket(neighbors, weights=None):
    """Sort a bucket by ``(neighbor, weight)``; NaN weights sort last.

    Returns
    ---
    list[tuple]
        ``(neighbor, weight)`` pairs, or ``(neighbor,)`` tuples when unweighted.

    """
    nbrs = np.asarray(neighbors).astype(np.int64)
    if weights is None:
        return [(u,) for u in np.sort(nbrs).tolist()]
    w = np.asarray(weights, dtype=np.float64)
    order = np.lexsort((w, nbrs))
    return list(zip(nbrs[order].tolist(), w[order].tolist()))


def _as_view(g):
    return g.view() if hasattr(g, "view") else g


def _canonical_edges(view, keep, with_weights):
    """INTERNAL: ``(majors, minors, weights)`` of vertices in ``keep``, sorted per bucket."""
    majors = view.majors()
    mask = keep[majors]
    maj = majors[mask]
    mnr = np.asarray(view.indices)[mask].astype(np.int64)
    if with_weights:
        w = np.asarray(view.weights)[mask].astype(np.float64)
        order = np.lexsort((w, mnr, maj))
        return maj[order], mnr[order], w[order]
    order = np.lexsort((mnr, maj))
    return maj[order], mnr[order], None


# ==================== Reports ====================


class _Comparison:
    """Shared behaviour of comparison reports."""

    label = "comparison"

    def __init__(self, tolerance, rtol, diagnostic):
        self.tolerance = tolerance
        self.rtol = rtol
        self.diagnostic = diagnostic
        self.mismatches = []

    def _finish(self):
        if not self.diagnostic:
            self.mismatches = self.mismatches[:1]
        return self

    def is_empty(self):
        """True if no mismatch was found."""
        return not self.mismatches

    @property
    def passed(self) -> bool:
        return self.is_empty()

    def counts(self):
        out = {}
        for m in self.mismatches:
            out[m.kind] = out.get(m.kind, 0) + 1
        return out

    def summary(self):
        """Human-readable summary of the mismatches."""
        if self.is_empty():
            return f"{self.label}: equal (tolerance={self.tolerance}, rtol={self.rtol})"
        lines = [f"{self.label}: {len(self.mismatches)} mismatch(es)"]
        lines += [f"  {kind}: {n}" for kind, n in sorted(self.counts().items())]
        lines += [f"  - {self._describe(m)}" for m in self.mismatches[:20]]
        if len(self.mismatches) > 20:
            lines.append(f"  ... {len(self.mismatches) - 20} more")
        return "\n".join(lines)

    def __repr__(self):
        return self.summary()

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "label": self.label,
            "passed": self.passed,
            "tolerance": self.tolerance,
            "rtol": self.rtol,
            "mismatches": [asdict(m) for m in self.mismatches],
        }

    def to_frame(self):
        """Mismatches as a Polars DataFrame, one row each (values rendered as text)."""
        rows = [
            {k: (None if v is None else str(v)) for k, v in asdict(m).items()}
            for m in self.mismatches
        ]
        if not rows:
            return pl.DataFrame(schema={"kind": pl.Utf8})
        columns = sorted({k for r in rows for k in r})
        return pl.DataFrame([{c: r.get(c) for c in columns} for r in rows], schema={c: pl.Utf8 for c in columns})

    @staticmethod
    def _describe(m):
        return ", ".join(f"{k}={v}" for k, v in asdict(m).items() if k != "kind")


class GraphComparison(_Comparison):
    """Result of :func:`compare_graphs`."""

    label = "graph comparison"

    def raise_for_mismatch(self):
        """Raise ``ToleranceExceeded`` for weight-only differences, else ``VerificationFailure``."""
        if self.is_empty():
            return
        if all(m.kind == "weight" for m in self.mismatches):
            raise ToleranceExceeded(self.summary(), self.mismatches)
        raise VerificationFailure(self.summary(), self.mismatches)


class VectorComparison(_Comparison):
    """Result of :func:`compare_vectors`."""

    label = "vector comparison"

    def raise_for_mismatch(self):
        """Raise ``KeySetMismatch`` or ``ToleranceExceeded`` listing the offending keys."""
        if self.is_empty():
            return
        if any(m.kind == "key" for m in self.mismatches):
            keys = [m for m in self.mismatches if m.kind == "key"]
            raise KeySetMismatch(self.summary(), keys)
        raise ToleranceExceeded(self.summary(), self.mismatches)


# ==================== Graphs ====================


def compare_graphs(a, b, tolerance=0.0, *, rtol=0.0, diagnostic=True):
    """Compare two adjacency structures bucket by bucket, ignoring in-bucket order.

    Parameters
    --
    a, b : Graph or GraphView
    tolerance : float, default 0.0
        Absolute tolerance for weights.
    rtol : float, default 0.0
        Relative tolerance for weights.
    diagnostic : bool, default True
        Enumerate every mismatch; when False only the first is kept.

    Returns
    ---
    GraphComparison

    Notes
    -
    Weights are only compared when both sides are weighted; a weighted vs
    unweighted pair is reported as a field mismatch and compared on
    neighbors alone. Duplicate pairs count with multiplicity.

    """
    va, vb = _as_view(a), _as_view(b)
    report = GraphComparison(tolerance, rtol, diagnostic)

    if va.number_of_vertices != vb.number_of_vertices:
        report.mismatches.append(
            FieldMismatch("number_of_vertices", va.number_of_vertices, vb.number_of_vertices)
        )
        return report._finish()
    if va.number_of_edges != vb.number_of_edges:
        report.mismatches.append(
            FieldMismatch("number_of_edges", va.number_of_edges, vb.number_of_edges)
        )
    if va.is_weighted != vb.is_weighted:
        report.mismatches.append(FieldMismatch("is_weighted", va.is_weighted, vb.is_weighted))
    with_weights = va.is_weighted and vb.is_weighted

    deg_a = np.asarray(va.degrees()).astype(np.int64)
    deg_b = np.asarray(vb.degrees()).astype(np.int64)
    for v in np.flatnonzero(deg_a != deg_b).tolist():
        report.mismatches.append(BucketMismatch(v, "degree", int(deg_a[v]), int(deg_b[v])))
    if report.mismatches and not diagnostic:
        return report._finish()

    same = deg_a == deg_b
    maj, mnr_a, w_a = _canonical_edges(va, same, with_weights)
    _, mnr_b, w_b = _canonical_edges(vb, same, with_weights)

    bad_vertices = np.unique(maj[mnr_a != mnr_b])
    for v in bad_vertices.tolist():
        sel = maj == v
        report.mismatches.append(
            BucketMismatch(v, "neighbors", mnr_a[sel].tolist(), mnr_b[sel].tolist())
        )

    if with_weights:
        ok, diff = within_tolerance(w_a, w_b, tolerance, rtol)
        ok |= np.isin(maj, bad_vertices)
        for i in np.flatnonzero(~ok).tolist():
            report.mismatches.append(
                WeightMismatch(int(maj[i]), int(mnr_a[i]), float(w_a[i]), float(w_b[i]), float(diff[i]))
            )
    return report._finish()


def equal_graphs(a, b, tolerance=0.0, *, rtol=0.0) -> bool:
    """True if ``a`` and ``b`` hold the same per-vertex multisets of (neighbor, weight)."""
    return compare_graphs(a, b, tolerance, rtol=rtol, diagnostic=False).is_empty()


def assert_equal_graphs(a, b, tolerance=0.0, *, rtol=0.0, diagnostic=True):
    """Raise on any difference; return the (empty) report otherwise."""
    report = compare_graphs(a, b, tolerance, rtol=rtol, diagnostic=diagnostic)
    report.raise_for_mismatch()
    return report


# ==================== Keyed vectors ====================


def as_keyed(x):
    """Normalize a keyed vector to ``(keys, values)`` arrays.

    Accepts a mapping ``{key: value}``, a ``(keys, values)`` tuple of numpy
    arrays, or an iterable of ``(key, value)`` pairs.
    """
    if isinstance(x, Mapping):
        return np.asarray(list(x.keys())), np.asarray(list(x.values()), dtype=np.float64)
    if (
        isinstance(x, tuple)
        and len(x) == 2
        and isinstance(x[0], np.ndarray)
        and isinstance(x[1], np.ndarray)
    ):
        keys, values = x
    else:
        pairs = list(x)
        if not pairs:
            return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64)
        keys, values = zip(*pairs)
    keys = np.asarray(keys).reshape(-1)
    values = np.asarray(values, dtype=np.float64).reshape(-1)
    if len(keys) != len(values):
        raise ValueError(f"{len(keys)} keys but {len(values)} values")
    return keys, values


def compare_vectors(a_keyed, b_keyed, tolerance=0.0, *, rtol=0.0, diagnostic=True):
    """Compare two keyed vectors after sorting both by key.

    Key set differences (and keys repeated within one side) are reported
    and stop the comparison: values are only compared once both sides
    cover exactly the same keys.

    Returns
    ---
    VectorComparison

    """
    ka, xa = as_keyed(a_keyed)
    kb, xb = as_keyed(b_keyed)
    report = VectorComparison(tolerance, rtol, diagnostic)

    for side, keys in (("a", ka), ("b", kb)):
        uniq, counts = np.unique(keys, return_counts=True)
        for k in uniq[counts > 1].tolist():
            report.mismatches.append(KeyMismatch(k, f"repeated in {side}"))
    for k in np.setdiff1d(ka, kb).tolist():
        report.mismatches.append(KeyMismatch(k, "only in a"))
    for k in np.setdiff1d(kb, ka).tolist():
        report.mismatches.append(KeyMismatch(k, "only in b"))
    if report.mismatches:
        return report._finish()

    order_a = np.argsort(ka, kind="stable")
    order_b = np.argsort(kb, kind="stable")
    keys = ka[order_a]
    va, vb = xa[order_a], xb[order_b]
    ok, diff = within_tolerance(va, vb, tolerance, rtol)
    for i in np.flatnonzero(~ok).tolist():
        report.mismatches.append(
            ValueMismatch(keys[i].item(), float(va[i]), float(vb[i]), float(diff[i]))
        )
    return report._finish()


def equal_vectors(a_keyed, b_keyed, tolerance=0.0, *, rtol=0.0) -> bool:
    """True if both keyed vectors cover the same keys with values within tolerance."""
    return compare_vectors(a_keyed, b_keyed, tolerance, rtol=rtol, diagnostic=False).is_empty()


def assert_equal_vectors(a_keyed, b_keyed, tolerance=0.0, *, rtol=0.0, diagnostic=True):
    """Raise ``KeySetMismatch`` / ``ToleranceExceeded``; return the report when equal."""
    report = compare_vectors(a_keyed, b_keyed, tolerance, rtol=rtol, diagnostic=diagnostic)
    report.raise_for_mismatch()
    return report
