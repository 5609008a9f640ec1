"""
Geometry module: half-edge meshes, bounding volumes, octrees, intersection
and repair.

Provides the half-edge mesh builder, axis-aligned bounding boxes, the face
octree with pairwise overlap detection, the exact triangle-triangle
predicate, centroid hole filling, and whole-mesh analysis and offsetting.
"""

from hemesh.geometry.vector import Vector3
from hemesh.geometry.mesh import Face, HalfEdge, TriangleMesh, Vertex
from hemesh.geometry.bounds import AABB, compute_aabb_for_mesh, filter_faces_by_aabb
from hemesh.geometry.intersection import Plane, faces_intersect, triangles_intersect
from hemesh.geometry.octree import (
    OctreeNode,
    build_octree_for_mesh,
    find_intersecting_faces,
)
from hemesh.geometry.repair import MissingTwin, RepairReport, fill_holes
from hemesh.geometry.mesh_operations import analyze_mesh, offset_mesh

__all__ = [
    "Vector3",
    "Vertex",
    "HalfEdge",
    "Face",
    "TriangleMesh",
    "AABB",
    "compute_aabb_for_mesh",
    "filter_faces_by_aabb",
    "Plane",
    "triangles_intersect",
    "faces_intersect",
    "OctreeNode",
    "build_octree_for_mesh",
    "find_intersecting_faces",
    "MissingTwin",
    "RepairReport",
    "fill_holes",
    "analyze_mesh",
    "offset_mesh",
]
