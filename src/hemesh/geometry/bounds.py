"""
Axis-aligned bounding boxes for meshes and faces.

Empty boxes (``min`` greater than ``max`` on some axis) are legal values:
an empty mesh produces one, and the intersection of two disjoint boxes is
one. All overlap tests are inclusive, so boxes that only touch overlap.
"""

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from hemesh.geometry.mesh import Face, TriangleMesh
from hemesh.geometry.vector import Vector3

_INF = math.inf


@dataclass(frozen=True)
class AABB:
    """
    Axis-aligned bounding box.

    Attributes:
        min: Minimum corner
        max: Maximum corner
    """

    min: Vector3
    max: Vector3

    @classmethod
    def empty(cls) -> "AABB":
        """An inverted box that overlaps nothing."""
        return cls(Vector3(_INF, _INF, _INF), Vector3(-_INF, -_INF, -_INF))

    @classmethod
    def from_points(cls, points: Iterable[Vector3]) -> "AABB":
        """Bounds of an iterable of ``Vector3`` points."""
        box_min = Vector3(_INF, _INF, _INF)
        box_max = Vector3(-_INF, -_INF, -_INF)
        for p in points:
            box_min = Vector3.min(box_min, p)
            box_max = Vector3.max(box_max, p)
        return cls(box_min, box_max)

    @classmethod
    def from_face(cls, face: Face) -> "AABB":
        """Bounds of a face's three vertices."""
        return cls.from_points(face.positions())

    @classmethod
    def from_mesh(cls, mesh: TriangleMesh) -> "AABB":
        """Bounds of every vertex of the mesh."""
        box_min, box_max = compute_aabb_for_mesh(mesh)
        return cls(box_min, box_max)

    @property
    def is_empty(self) -> bool:
        return self.min.x > self.max.x or self.min.y > self.max.y or self.min.z > self.max.z

    @property
    def size(self) -> Vector3:
        return self.max - self.min

    @property
    def center(self) -> Vector3:
        return (self.min + self.max) * 0.5

    def volume(self) -> float:
        """Box volume; zero for empty or flat boxes."""
        if self.is_empty:
            return 0.0
        size = self.size
        return size.x * size.y * size.z

    def intersects_aabb(self, other: "AABB") -> bool:
        """Inclusive box/box overlap test."""
        return (
            self.min.x <= other.max.x and self.max.x >= other.min.x
            and self.min.y <= other.max.y and self.max.y >= other.min.y
            and self.min.z <= other.max.z and self.max.z >= other.min.z
        )

    def intersects(self, face: Face) -> bool:
        """Inclusive overlap test between this box and a face's bounds."""
        return self.intersects_aabb(AABB.from_face(face))

    def contains_point(self, point: Vector3) -> bool:
        return (
            self.min.x <= point.x <= self.max.x
            and self.min.y <= point.y <= self.max.y
            and self.min.z <= point.z <= self.max.z
        )

    @staticmethod
    def intersection(a: "AABB", b: "AABB") -> "AABB":
        """Overlap region of two boxes; empty when they are disjoint."""
        return AABB(Vector3.max(a.min, b.min), Vector3.min(a.max, b.max))

    def subdivide(self) -> list["AABB"]:
        """
        Split the box at its midpoint into eight octants.

        Octants are produced with x as the outer loop, y in the middle and z
        inner, i.e. ``(-,-,-), (-,-,+), (-,+,-), ... (+,+,+)``. The order is
        stable across calls. Lower octants end and upper octants start at the
        same midpoint, and upper octants end exactly at ``max``.
        """
        center = self.center
        xs = (self.min.x, center.x, self.max.x)
        ys = (self.min.y, center.y, self.max.y)
        zs = (self.min.z, center.z, self.max.z)

        octants = []
        for x in range(2):
            for y in range(2):
                for z in range(2):
                    octants.append(
                        AABB(
                            Vector3(xs[x], ys[y], zs[z]),
                            Vector3(xs[x + 1], ys[y + 1], zs[z + 1]),
                        )
                    )
        return octants


def compute_aabb_for_mesh(mesh: TriangleMesh) -> tuple[Vector3, Vector3]:
    """
    Componentwise min/max over all vertex positions.

    Args:
        mesh: Source mesh

    Returns:
        Tuple of (min corner, max corner); inverted for an empty mesh
    """
    if not mesh.vertices:
        empty = AABB.empty()
        return empty.min, empty.max

    positions = np.array([v.position.to_tuple() for v in mesh.vertices], dtype=float)
    return (
        Vector3.from_sequence(positions.min(axis=0)),
        Vector3.from_sequence(positions.max(axis=0)),
    )


def filter_faces_by_aabb(mesh: TriangleMesh, box: AABB) -> list[Face]:
    """Faces of ``mesh`` whose bounds overlap ``box``."""
    return [face for face in mesh.faces if box.intersects(face)]
