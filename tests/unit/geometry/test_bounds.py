"""
Unit tests for axis-aligned bounding boxes.
"""

import pytest

from hemesh.geometry.bounds import AABB, compute_aabb_for_mesh, filter_faces_by_aabb
from hemesh.geometry.mesh import TriangleMesh
from hemesh.geometry.vector import Vector3


def box(lo, hi):
    return AABB(Vector3(*lo), Vector3(*hi))


class TestBoxOverlap:
    """Tests for box/box overlap."""

    def test_separated_on_one_axis(self):
        a = box((0, 0, 0), (1, 1, 1))
        b = box((2, 0, 0), (3, 1, 1))
        assert not a.intersects_aabb(b)
        assert not b.intersects_aabb(a)

    def test_touching_faces_overlap(self):
        """Test the inclusive boundary: a shared face counts as overlap."""
        a = box((0, 0, 0), (1, 1, 1))
        b = box((1, 0, 0), (2, 1, 1))
        assert a.intersects_aabb(b)
        assert b.intersects_aabb(a)

    def test_touching_corner_overlaps(self):
        a = box((0, 0, 0), (1, 1, 1))
        b = box((1, 1, 1), (2, 2, 2))
        assert a.intersects_aabb(b)

    @pytest.mark.parametrize(
        "lo, hi",
        [
            ((0, 2, 0), (1, 3, 1)),
            ((0, 0, -2), (1, 1, -0.5)),
            ((-3, -3, -3), (-0.1, 5, 5)),
        ],
    )
    def test_separated_each_axis(self, lo, hi):
        assert not box((0, 0, 0), (1, 1, 1)).intersects_aabb(box(lo, hi))

    def test_contained(self):
        outer = box((0, 0, 0), (4, 4, 4))
        inner = box((1, 1, 1), (2, 2, 2))
        assert outer.intersects_aabb(inner)
        assert inner.intersects_aabb(outer)

    def test_intersection_region(self):
        a = box((0, 0, 0), (2, 2, 2))
        b = box((1, 1, 1), (3, 3, 3))
        overlap = AABB.intersection(a, b)
        assert overlap == box((1, 1, 1), (2, 2, 2))
        assert overlap.volume() == 1

    def test_disjoint_intersection_is_empty(self):
        a = box((0, 0, 0), (1, 1, 1))
        b = box((2, 2, 2), (3, 3, 3))
        overlap = AABB.intersection(a, b)
        assert overlap.is_empty
        assert overlap.volume() == 0


class TestEmptyBox:
    """Tests for inverted boxes."""

    def test_empty_overlaps_nothing(self):
        empty = AABB.empty()
        assert empty.is_empty
        assert not empty.intersects_aabb(box((-10, -10, -10), (10, 10, 10)))

    def test_empty_mesh_bounds(self):
        """Test an empty mesh yields an inverted box."""
        lo, hi = compute_aabb_for_mesh(TriangleMesh())
        assert lo.x > hi.x
        assert AABB.from_mesh(TriangleMesh()).is_empty


class TestFaceBounds:
    """Tests for face and mesh bounds."""

    def test_mesh_bounds(self, cube_mesh):
        lo, hi = compute_aabb_for_mesh(cube_mesh)
        assert lo == Vector3(0, 0, 0)
        assert hi == Vector3(1, 1, 1)

    def test_face_bounds(self):
        mesh = TriangleMesh()
        face = mesh.add_triangle(Vector3(0, 0, 0), Vector3(2, 1, 0), Vector3(1, 3, -1))
        assert AABB.from_face(face) == box((0, 0, -1), (2, 3, 0))

    def test_box_face_intersects(self):
        mesh = TriangleMesh()
        face = mesh.add_triangle(Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(0, 1, 0))
        assert box((0.5, 0.5, -1), (2, 2, 0)).intersects(face)
        assert box((1, 0, 0), (2, 1, 1)).intersects(face)
        assert not box((0, 0, 0.1), (1, 1, 1)).intersects(face)

    def test_filter_faces(self, cube_mesh):
        """Test only faces touching the slab near z=1 are kept."""
        faces = filter_faces_by_aabb(cube_mesh, box((-1, -1, 1.5), (2, 2, 2)))
        assert faces == []

        faces = filter_faces_by_aabb(cube_mesh, box((-1, -1, 1), (2, 2, 2)))
        # top, plus the side faces that reach z=1
        assert len(faces) == 10
        assert cube_mesh.faces[0] not in faces


class TestSubdivide:
    """Tests for octant subdivision."""

    def test_eight_children(self):
        children = box((0, 0, 0), (2, 2, 2)).subdivide()
        assert len(children) == 8
        assert all(child.volume() == 1 for child in children)

    def test_fixed_order(self):
        """Test x is the outer loop, y the middle and z the inner."""
        children = box((0, 0, 0), (2, 2, 2)).subdivide()
        assert children[0] == box((0, 0, 0), (1, 1, 1))
        assert children[1] == box((0, 0, 1), (1, 1, 2))
        assert children[2] == box((0, 1, 0), (1, 2, 1))
        assert children[4] == box((1, 0, 0), (2, 1, 1))
        assert children[7] == box((1, 1, 1), (2, 2, 2))

    def test_children_cover_parent(self):
        parent = box((-1, 0, 2), (3, 2, 6))
        children = parent.subdivide()
        assert AABB.from_points(
            [c.min for c in children] + [c.max for c in children]
        ) == parent
        assert sum(c.volume() for c in children) == pytest.approx(parent.volume())

    def test_non_dyadic_bounds_tile_exactly(self):
        """Test octants share midpoints and reach the parent corners exactly."""
        parent = box((0.1, 0.2, 0.3), (6.60071386548654, 13.304099224060836, 1.7))
        children = parent.subdivide()

        assert children[0].min == parent.min
        assert children[7].max == parent.max
        assert children[0].max == children[7].min
        for lower, upper in [(children[0], children[4]), (children[0], children[2]),
                             (children[0], children[1])]:
            assert AABB.intersection(lower, upper).volume() == 0
        assert max(c.max.x for c in children) == parent.max.x
        assert max(c.max.y for c in children) == parent.max.y
        assert max(c.max.z for c in children) == parent.max.z

    def test_face_on_max_plane_kept(self):
        """Test a flat face lying on the parent's max plane overlaps a child."""
        x = 13.304099224060836
        mesh = TriangleMesh()
        face = mesh.add_triangle(Vector3(x, 0.1, 0.1), Vector3(x, 1.3, 0.2), Vector3(x, 0.3, 1.7))
        parent = box((6.60071386548654, 0.0, 0.0), (x, 1.3, 1.7))
        assert any(child.intersects(face) for child in parent.subdivide())

    def test_stable(self):
        parent = box((0, 0, 0), (1, 2, 3))
        assert parent.subdivide() == parent.subdivide()
