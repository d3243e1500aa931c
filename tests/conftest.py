"""Shared fixtures and helpers for graphcheck tests."""

import pathlib
import shutil
import sys
import tempfile
from pathlib import Path

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]  # project root
sys.path.insert(0, str(ROOT))

from graphcheck.core import EdgeList, Graph, GraphProperties  # noqa: E402
from graphcheck.io.edgelist_io import InputGraph  # noqa: E402

# ======================================================================
# FIXTURES
# ======================================================================


@pytest.fixture
def triangle():
    """Directed 3-cycle 0 -> 1 -> 2 -> 0."""
    return EdgeList([0, 1, 2], [1, 2, 0])


@pytest.fixture
def weighted_edges():
    """Small weighted directed graph with a self-loop, a parallel pair and an isolated vertex (5)."""
    return EdgeList(
        [0, 0, 0, 1, 2, 3, 3, 4],
        [1, 2, 1, 2, 2, 0, 4, 0],
        [1.0, 2.0, 3.0, 0.5, 4.0, 1.5, 2.5, 0.25],
    )


@pytest.fixture
def weighted_input(weighted_edges):
    return InputGraph(weighted_edges, 6, is_symmetric=False)


@pytest.fixture
def symmetric_graph():
    """Undirected path 0 - 1 - 2 - 3 stored in both directions."""
    edges = EdgeList([0, 1, 1, 2, 2, 3], [1, 0, 2, 1, 3, 2], [1.0, 1.0, 2.0, 2.0, 3.0, 3.0])
    return Graph(edges, 4, properties=GraphProperties(is_symmetric=True))


@pytest.fixture
def random_edges():
    """Reproducible random multigraph on 40 vertices."""
    rng = np.random.default_rng(7)
    srcs = rng.integers(0, 40, size=300)
    dsts = rng.integers(0, 40, size=300)
    return EdgeList(srcs, dsts, rng.random(300))


@pytest.fixture
def tmpdir_fixture():
    """Temporary directory for file I/O (input/output) tests."""
    tmpdir = Path(tempfile.mkdtemp())
    yield tmpdir
    shutil.rmtree(tmpdir)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
