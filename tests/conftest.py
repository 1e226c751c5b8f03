"""Pytest fixtures for concave_polygon tests."""

import pytest
import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

# Add repository root to path for imports
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))


@pytest.fixture
def square():
    """Unit square, counter-clockwise."""
    return [(0, 0), (1, 0), (1, 1), (0, 1)]


@pytest.fixture
def dart():
    """Concave quadrilateral with a single reflex vertex at (2, 1)."""
    return [(0, 0), (2, 1), (4, 0), (2, 3)]


@pytest.fixture
def l_shape():
    """L-shaped hexagon with a reflex vertex at (1, 1)."""
    return [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]


@pytest.fixture
def u_shape():
    """U shape: 3x3 square with a 1x2 slot cut from the top (area 7)."""
    return [(0, 0), (3, 0), (3, 3), (2, 3), (2, 1), (1, 1), (1, 3), (0, 3)]


@pytest.fixture
def comb():
    """Three-tooth comb: 5x3 rectangle with two 1x2 slots (area 11)."""
    return [
        (0, 0), (5, 0), (5, 3), (4, 3), (4, 1), (3, 1),
        (3, 3), (2, 3), (2, 1), (1, 1), (1, 3), (0, 3),
    ]


@pytest.fixture
def notched_rectangle():
    """4x2 rectangle with a V notch in the bottom edge (no vertex in its cone)."""
    return [(0, 0), (1, 0), (2, 1), (3, 0), (4, 0), (4, 2), (0, 2)]


@pytest.fixture
def arrow():
    """Concave quad whose reflex vertex (1, 1) touches the closing edge."""
    return [(0, 0), (2, 0), (1, 1), (2, 2)]


@pytest.fixture
def pinched():
    """Two triangles joined at the shared vertex (2, 2) (area 8)."""
    return [(0, 0), (4, 0), (2, 2), (4, 4), (0, 4), (2, 2)]
