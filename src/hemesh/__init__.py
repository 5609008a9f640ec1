"""
hemesh - Half-edge triangle mesh engine

Half-edge topology, octree spatial indexing, exact triangle-triangle
intersection and hole repair for triangulated surface meshes.
"""

__version__ = "0.1.0"
__author__ = "hemesh Contributors"

from hemesh.core.config import EngineConfig
from hemesh.geometry import (
    TriangleMesh,
    Vector3,
    build_octree_for_mesh,
    fill_holes,
    find_intersecting_faces,
)

__all__ = [
    "__version__",
    "EngineConfig",
    "TriangleMesh",
    "Vector3",
    "build_octree_for_mesh",
    "fill_holes",
    "find_intersecting_faces",
]
