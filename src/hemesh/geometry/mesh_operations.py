"""
Whole-mesh operations for the hemesh geometry pipeline.

Provides:
- Mesh analysis (counts, watertightness, boundary loops, bounds)
- Mesh offset (uniform shell offset along averaged vertex normals)

Both operate directly on the half-edge ``TriangleMesh``.
"""

import numpy as np

from hemesh.core.logging import get_logger
from hemesh.geometry.bounds import AABB
from hemesh.geometry.mesh import TriangleMesh, Vertex
from hemesh.geometry.vector import Vector3

_logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Mesh analysis
# ---------------------------------------------------------------------------

def analyze_mesh(mesh: TriangleMesh) -> dict:
    """
    Analyze mesh topology and return a diagnostic report.

    Returns dict with: vertex_count, face_count, half_edge_count,
    boundary_edge_count, boundary_loop_count, is_watertight, bounds_min,
    bounds_max, size. Bounds are None for an empty mesh.
    """
    boundary_edges = mesh.update_boundary_edges()
    loops = mesh.find_boundary_loops() if boundary_edges else []
    box = AABB.from_mesh(mesh)

    return {
        "vertex_count": len(mesh.vertices),
        "face_count": len(mesh.faces),
        "half_edge_count": len(mesh.half_edges),
        "boundary_edge_count": boundary_edges,
        "boundary_loop_count": len(loops),
        "is_watertight": mesh.is_watertight(),
        "bounds_min": None if box.is_empty else box.min.to_list(),
        "bounds_max": None if box.is_empty else box.max.to_list(),
        "size": None if box.is_empty else box.size.to_list(),
    }


# ---------------------------------------------------------------------------
# Mesh offset (uniform shell)
# ---------------------------------------------------------------------------

def vertex_normals(mesh: TriangleMesh) -> dict[Vertex, Vector3]:
    """
    Per-vertex normals: normalized sum of incident face normals.

    Face normals are taken from the cache, so call
    ``mesh.recalculate_normals()`` first.
    """
    sums = np.zeros((len(mesh.vertices), 3), dtype=float)
    for face in mesh.faces:
        normal = face.normal.to_tuple()
        for vertex in face.vertices():
            sums[vertex.index] += normal

    return {
        vertex: Vector3.from_sequence(sums[vertex.index]).normalized()
        for vertex in mesh.vertices
    }


def offset_mesh(mesh: TriangleMesh, distance: float) -> TriangleMesh:
    """
    Offset every vertex along its averaged normal, in place.

    Positive distances move vertices along the face normals (outward for a
    consistently wound closed mesh); negative distances move them inward.
    Normals and the position index are refreshed afterwards.

    Args:
        mesh: Mesh to offset
        distance: Offset distance in model units

    Returns:
        The same mesh, for chaining
    """
    mesh.recalculate_normals()
    normals = vertex_normals(mesh)

    for vertex in mesh.vertices:
        vertex.position = vertex.position + normals[vertex] * distance

    mesh.recalculate_normals()
    mesh.reindex_positions()

    _logger.info(
        "mesh_offset",
        distance=distance,
        vertices=len(mesh.vertices),
        faces=len(mesh.faces),
    )
    return mesh
