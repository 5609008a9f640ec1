"""
Unit tests for boundary-loop hole filling.
"""

import pytest
import structlog
from structlog.testing import capture_logs

from hemesh.core.config import RepairConfig
from hemesh.core.exceptions import MissingTwinError
from hemesh.geometry import repair
from hemesh.geometry.mesh import TriangleMesh
from hemesh.geometry.repair import centroid, fill_holes
from hemesh.geometry.vector import Vector3


class TestCentroid:
    """Tests for the loop centroid."""

    def test_triangle_loop(self, open_cube_mesh):
        loop = open_cube_mesh.find_boundary_loops()[0]
        center = centroid(loop)
        assert center.x == pytest.approx(1.0)
        assert center.y == pytest.approx(1 / 3)
        assert center.z == pytest.approx(2 / 3)


class TestFillHoles:
    """Tests for centroid fan filling."""

    def test_single_hole(self, open_cube_mesh):
        """Test one missing triangle is closed by a three-triangle fan."""
        report = fill_holes(open_cube_mesh)

        assert report.loops_found == 1
        assert report.loops_filled == 1
        assert report.loops_skipped == 0
        assert report.vertices_added == 1
        assert report.faces_added == 3
        assert report.missing_twins == []
        assert report.success
        assert report.is_watertight
        assert open_cube_mesh.is_watertight()
        assert open_cube_mesh.find_boundary_loops() == []

    def test_filled_mesh_is_consistent(self, open_cube_mesh):
        fill_holes(open_cube_mesh)
        open_cube_mesh.verify_edge_consistency()
        for edge in open_cube_mesh.half_edges:
            assert edge.twin.twin is edge
            assert edge.twin.start is edge.end
            assert not edge.is_boundary

    def test_fan_uses_centroid_vertex(self, open_cube_mesh):
        fill_holes(open_cube_mesh)
        center = open_cube_mesh.vertices[-1]
        assert center.position.x == pytest.approx(1.0)
        new_faces = open_cube_mesh.faces[-3:]
        assert all(center in face.vertices() for face in new_faces)

    def test_two_holes(self, make_cube):
        mesh = make_cube(skip=(9, 11))
        report = fill_holes(mesh)

        assert report.loops_found == 2
        assert report.loops_filled == 2
        assert report.vertices_added == 2
        assert report.faces_added == 6
        assert mesh.is_watertight()

    def test_large_hole(self, make_cube):
        """Test a whole missing side (a loop of four) is closed."""
        mesh = make_cube(skip=(10, 11))
        report = fill_holes(mesh)

        assert report.loops_found == 1
        assert report.faces_added == 4
        assert mesh.is_watertight()

    def test_closed_mesh_untouched(self, cube_mesh):
        report = fill_holes(cube_mesh)

        assert report.loops_found == 0
        assert report.faces_added == 0
        assert report.is_watertight
        assert len(cube_mesh.faces) == 12

    def test_single_triangle_becomes_closed(self):
        """Test a lone triangle is capped into a closed tetrahedron-like shell."""
        mesh = TriangleMesh()
        mesh.add_triangle(Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(0, 1, 0))

        report = fill_holes(mesh)
        assert report.faces_added == 3
        assert mesh.is_watertight()

    def test_loops_below_minimum_skipped(self, open_cube_mesh):
        report = fill_holes(open_cube_mesh, RepairConfig(min_loop_size=4))

        assert report.loops_found == 1
        assert report.loops_skipped == 1
        assert report.loops_filled == 0
        assert report.faces_added == 0
        assert not report.is_watertight
        assert open_cube_mesh.update_boundary_edges() == 3


class TestSeamPairing:
    """Tests for the second-pass twin search."""

    def test_second_pass_pairs_unlinked_edges(self, open_cube_mesh, monkeypatch):
        """Test fan edges are paired even when the builder leaves them unlinked."""
        monkeypatch.setattr(open_cube_mesh, "_set_twin", lambda edge, start, end: None)

        report = fill_holes(open_cube_mesh)
        assert report.missing_twins == []
        assert open_cube_mesh.is_watertight()


@pytest.fixture
def first_rim_unpairable(make_cube, monkeypatch):
    """
    Cube with two holes where the first hole's rim seam can never be paired.

    Twin lookups between two vertices of the first rim are suppressed, both in
    the builder and in the second-pass search. Every other lookup, including
    all of the second hole, runs unchanged.
    """
    mesh = make_cube(skip=(9, 11))
    rim = {id(edge.start) for edge in mesh.find_boundary_loops()[0]}
    set_twin = mesh._set_twin
    search = repair._find_unpaired_reverse

    def on_rim(start, end):
        return id(start) in rim and id(end) in rim

    def selective_set_twin(edge, start, end):
        if not on_rim(start, end):
            set_twin(edge, start, end)

    def selective_search(target, start, end):
        if on_rim(start, end):
            return None
        return search(target, start, end)

    monkeypatch.setattr(mesh, "_set_twin", selective_set_twin)
    monkeypatch.setattr(repair, "_find_unpaired_reverse", selective_search)
    return mesh, rim


class TestMissingTwins:
    """Tests for fan seams that cannot be paired."""

    def test_later_loops_still_filled(self, first_rim_unpairable):
        """Test an unresolved seam in one loop does not stop the next."""
        mesh, rim = first_rim_unpairable

        report = fill_holes(mesh)

        assert report.loops_found == 2
        assert report.loops_filled == 2
        assert report.faces_added == 6
        assert len(report.missing_twins) == 3
        assert {item.loop_index for item in report.missing_twins} == {0}
        assert not report.success
        assert not report.is_watertight

        # the original rim edges and their unpaired fan partners
        boundary = mesh.boundary_edges()
        assert len(boundary) == 6
        assert all(id(edge.start) in rim and id(edge.end) in rim for edge in boundary)

    def test_events_logged(self, first_rim_unpairable, monkeypatch):
        mesh, _ = first_rim_unpairable
        monkeypatch.setattr(repair, "_logger", structlog.get_logger(repair.__name__))

        with capture_logs() as events:
            fill_holes(mesh)

        warnings = [e for e in events if e["event"] == "missing_twin"]
        assert len(warnings) == 3
        assert all(e["log_level"] == "warning" and e["loop"] == 0 for e in warnings)

        summary = events[-1]
        assert summary["event"] == "holes_filled"
        assert summary["filled"] == 2
        assert summary["missing_twins"] == 3
        assert summary["watertight"] is False

    def test_strict_mode_raises(self, first_rim_unpairable):
        mesh, rim = first_rim_unpairable

        with pytest.raises(MissingTwinError) as exc_info:
            fill_holes(mesh, RepairConfig(strict=True))

        error = exc_info.value
        assert error.details["loop"] == 0
        rim_indices = {v.index for v in mesh.vertices if id(v) in rim}
        assert {error.start, error.end} <= rim_indices
        # only the first fan was built
        assert len(mesh.faces) == 13
