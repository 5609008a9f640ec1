"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from hemesh.geometry.mesh import TriangleMesh
from hemesh.geometry.vector import Vector3

CUBE_CORNERS = [
    (0.0, 0.0, 0.0),
    (1.0, 0.0, 0.0),
    (1.0, 1.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (1.0, 0.0, 1.0),
    (1.0, 1.0, 1.0),
    (0.0, 1.0, 1.0),
]

# Outward-facing winding, two triangles per side
CUBE_FACES = [
    (0, 2, 1), (0, 3, 2),  # bottom
    (4, 5, 6), (4, 6, 7),  # top
    (0, 1, 5), (0, 5, 4),  # front
    (3, 7, 6), (3, 6, 2),  # back
    (0, 4, 7), (0, 7, 3),  # left
    (1, 2, 6), (1, 6, 5),  # right
]


def cube_triangles(offset=(0.0, 0.0, 0.0), skip=()):
    """Triangles of a unit cube translated by ``offset``, minus ``skip`` indices."""
    ox, oy, oz = offset
    corners = [Vector3(x + ox, y + oy, z + oz) for x, y, z in CUBE_CORNERS]
    return [
        tuple(corners[i] for i in face)
        for n, face in enumerate(CUBE_FACES)
        if n not in skip
    ]


def build_mesh(triangles) -> TriangleMesh:
    mesh = TriangleMesh()
    for a, b, c in triangles:
        mesh.add_triangle(a, b, c)
    return mesh


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_cube():
    """Factory for unit cube meshes: ``make_cube(offset=..., skip=...)``."""

    def _make(offset=(0.0, 0.0, 0.0), skip=()):
        return build_mesh(cube_triangles(offset=offset, skip=skip))

    return _make


@pytest.fixture
def cube_mesh():
    """Closed unit cube built from 12 triangles sharing all edges."""
    return build_mesh(cube_triangles())


@pytest.fixture
def open_cube_mesh():
    """Unit cube with its last triangle (on the x=1 side) left out."""
    return build_mesh(cube_triangles(skip=(11,)))


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a sample configuration profile directory."""
    config_dir = temp_dir / "config"
    config_dir.mkdir(parents=True)

    fine_config = """
engine:
  name: "Fine"

octree:
  max_depth: 10

intersection:
  epsilon: 1.0e-9
  on_degenerate: "skip"

repair:
  min_loop_size: 4
"""
    (config_dir / "fine.yaml").write_text(fine_config)

    coarse_config = """
octree:
  max_depth: 3

logging:
  level: "WARNING"
  json_output: true
"""
    (config_dir / "coarse.yaml").write_text(coarse_config)

    return config_dir
