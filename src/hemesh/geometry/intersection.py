"""
Exact triangle-triangle intersection test.

Plane-separation test followed by an interval overlap test along the line
where the two triangle planes meet (Moller, "A Fast Triangle-Triangle
Intersection Test", 1997):

1. Each triangle's plane is computed from its first two edge vectors.
2. If every vertex of A lies strictly on one side of B's plane and every
   vertex of B lies strictly on one side of A's plane, there is no contact.
3. Otherwise the planes meet in a line ``L`` with direction ``n1 x n2``.
   Parallel planes have no such line and raise ``DegenerateGeometryError``.
4. A's interval on ``L`` is built from where A crosses B's plane, and B's
   interval from where B crosses A's plane.
5. The triangles intersect iff the intervals overlap, touching included.

References:
- https://fileadmin.cs.lth.se/cs/Personal/Tomas_Akenine-Moller/pubs/tritri.pdf
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from hemesh.core.exceptions import DegenerateGeometryError
from hemesh.geometry.mesh import Face
from hemesh.geometry.vector import Vector3

DEFAULT_EPSILON = 1e-6
DEFAULT_PARALLEL_EPSILON = 1e-6

Triangle = Sequence[Vector3]
Interval = tuple[Optional[float], Optional[float]]


@dataclass(frozen=True)
class Plane:
    """
    Plane ``normal . p + offset = 0``.

    Attributes:
        normal: Unit normal (zero for a degenerate triangle)
        offset: Signed offset ``-normal . p0``
    """

    normal: Vector3
    offset: float

    @classmethod
    def from_triangle(cls, triangle: Triangle) -> "Plane":
        """Plane through a triangle, normal from its first two edge vectors."""
        v0, v1, v2 = triangle
        normal = (v1 - v0).cross(v2 - v0).normalized()
        return cls(normal, -normal.dot(v0))

    def signed_distance(self, point: Vector3) -> float:
        return self.normal.dot(point) + self.offset


def strictly_one_side(
    triangle: Triangle, plane: Plane, epsilon: float = DEFAULT_EPSILON
) -> bool:
    """
    True if every vertex lies beyond ``epsilon`` on the same side of ``plane``.

    A vertex within ``epsilon`` of the plane is on neither side, so a
    triangle touching the plane never passes this test.
    """
    distances = [plane.signed_distance(v) for v in triangle]
    return all(d > epsilon for d in distances) or all(d < -epsilon for d in distances)


def line_point(plane_a: Plane, plane_b: Plane, direction: Vector3) -> Vector3:
    """A point on the line shared by two non-parallel planes."""
    h1 = -plane_a.offset
    h2 = -plane_b.offset
    numerator = plane_b.normal.cross(direction) * h1 + direction.cross(plane_a.normal) * h2
    return numerator / direction.length_squared()


def compute_interval(
    triangle: Triangle,
    direction: Vector3,
    origin: Vector3,
    plane: Plane,
    epsilon: float = DEFAULT_EPSILON,
) -> Interval:
    """
    Parameter interval of ``triangle`` along the line ``origin + t * direction``.

    ``plane`` is the *other* triangle's plane. Each edge whose endpoints have
    opposite-signed distances to it contributes its crossing point; a vertex
    lying on the plane (within ``epsilon``) contributes its own projection.

    Returns:
        ``(t1, t2)`` with ``t1 <= t2``, or ``(None, None)`` when the triangle
        does not reach the plane
    """
    distances = [plane.signed_distance(v) for v in triangle]
    projections = [direction.dot(v - origin) for v in triangle]
    values: list[float] = []

    for i in range(3):
        j = (i + 1) % 3
        di, dj = distances[i], distances[j]
        if abs(di) <= epsilon:
            values.append(projections[i])
        elif abs(dj) > epsilon and di * dj < 0:
            pi, pj = projections[i], projections[j]
            values.append(pi + (pj - pi) * abs(di) / abs(di - dj))

    if not values:
        return (None, None)
    return (min(values), max(values))


def intervals_overlap(interval_a: Interval, interval_b: Interval) -> bool:
    """Inclusive overlap of two closed intervals; empty intervals never overlap."""
    a_start, a_end = interval_a
    b_start, b_end = interval_b
    if a_start is None or a_end is None or b_start is None or b_end is None:
        return False
    return not (a_end < b_start or b_end < a_start)


def triangles_intersect(
    triangle_a: Triangle,
    triangle_b: Triangle,
    epsilon: float = DEFAULT_EPSILON,
    parallel_epsilon: float = DEFAULT_PARALLEL_EPSILON,
) -> bool:
    """
    Test two triangles for intersection.

    Args:
        triangle_a: Three vertices of the first triangle, in winding order
        triangle_b: Three vertices of the second triangle, in winding order
        epsilon: Distance below which a vertex counts as lying on a plane
        parallel_epsilon: Squared length of ``n1 x n2`` below which the planes
            count as parallel

    Returns:
        True if the triangles intersect or touch

    Raises:
        DegenerateGeometryError: If the planes are parallel or coplanar, or
            a triangle has zero area
    """
    plane_a = Plane.from_triangle(triangle_a)
    plane_b = Plane.from_triangle(triangle_b)

    if strictly_one_side(triangle_a, plane_b, epsilon) and strictly_one_side(
        triangle_b, plane_a, epsilon
    ):
        return False

    direction = plane_a.normal.cross(plane_b.normal)
    if direction.length_squared() < parallel_epsilon:
        raise DegenerateGeometryError(
            "Triangle planes are parallel; no intersection line exists",
            details={
                "normal_a": plane_a.normal.to_tuple(),
                "normal_b": plane_b.normal.to_tuple(),
            },
        )

    origin = line_point(plane_a, plane_b, direction)
    interval_a = compute_interval(triangle_a, direction, origin, plane_b, epsilon)
    interval_b = compute_interval(triangle_b, direction, origin, plane_a, epsilon)
    return intervals_overlap(interval_a, interval_b)


def faces_intersect(
    face_a: Face,
    face_b: Face,
    epsilon: float = DEFAULT_EPSILON,
    parallel_epsilon: float = DEFAULT_PARALLEL_EPSILON,
) -> bool:
    """``triangles_intersect`` over two mesh faces."""
    return triangles_intersect(
        face_a.positions(), face_b.positions(), epsilon, parallel_epsilon
    )
