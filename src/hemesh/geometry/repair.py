"""
Hole filling for half-edge meshes.

Every boundary loop is closed with a centroid fan: one new vertex at the mean
of the loop's vertices and one triangle per boundary edge. Fan triangles are
added through the mesh builder, which pairs twins as it goes. A second pass
then tries to attach any fan half-edge still lacking a twin to an existing
unpaired half-edge running the other way. Failures are recorded on the
report rather than raised, because the faces already created stay valid.
"""

from dataclasses import dataclass, field

from hemesh.core.config import RepairConfig
from hemesh.core.exceptions import MissingTwinError
from hemesh.core.logging import get_logger
from hemesh.geometry.mesh import HalfEdge, TriangleMesh, Vertex, link_twins
from hemesh.geometry.vector import Vector3

_logger = get_logger(__name__)


@dataclass(frozen=True)
class MissingTwin:
    """A fan half-edge whose reverse partner could not be found."""

    loop_index: int
    start: int
    end: int


@dataclass
class RepairReport:
    """Outcome of a ``fill_holes`` pass."""

    loops_found: int = 0
    loops_filled: int = 0
    loops_skipped: int = 0
    vertices_added: int = 0
    faces_added: int = 0
    missing_twins: list[MissingTwin] = field(default_factory=list)
    is_watertight: bool = False

    @property
    def success(self) -> bool:
        return not self.missing_twins


def centroid(loop: list[HalfEdge]) -> Vector3:
    """Mean position of the start vertices of a boundary loop."""
    total = Vector3.zero()
    for edge in loop:
        total = total + edge.start.position
    return total / len(loop)


def fill_holes(mesh: TriangleMesh, config: RepairConfig | None = None) -> RepairReport:
    """
    Close every boundary loop of ``mesh`` with a centroid fan, in place.

    Args:
        mesh: Mesh to repair
        config: Minimum loop size and strictness

    Returns:
        RepairReport describing what was added and any unresolved seams

    Raises:
        MissingTwinError: On the first unresolved seam if ``config.strict``
    """
    config = config or RepairConfig()
    report = RepairReport()

    loops = mesh.find_boundary_loops()
    report.loops_found = len(loops)
    vertex_count = len(mesh.vertices)
    face_count = len(mesh.faces)

    for loop_index, loop in enumerate(loops):
        if len(loop) < config.min_loop_size:
            _logger.warning("degenerate_loop_skipped", loop=loop_index, edges=len(loop))
            report.loops_skipped += 1
            continue

        missing = _fill_single_hole(mesh, loop, loop_index)
        report.loops_filled += 1
        for item in missing:
            _logger.warning(
                "missing_twin",
                loop=item.loop_index,
                start=item.start,
                end=item.end,
            )
            if config.strict:
                raise MissingTwinError(
                    "Expected twin not found while closing hole",
                    start=item.start,
                    end=item.end,
                    details={"loop": item.loop_index},
                )
        report.missing_twins.extend(missing)

    mesh.update_boundary_edges()
    report.vertices_added = len(mesh.vertices) - vertex_count
    report.faces_added = len(mesh.faces) - face_count
    report.is_watertight = mesh.is_watertight()

    _logger.info(
        "holes_filled",
        loops=report.loops_found,
        filled=report.loops_filled,
        skipped=report.loops_skipped,
        faces_added=report.faces_added,
        missing_twins=len(report.missing_twins),
        watertight=report.is_watertight,
    )
    return report


def _fill_single_hole(
    mesh: TriangleMesh, loop: list[HalfEdge], loop_index: int
) -> list[MissingTwin]:
    center = mesh.add_vertex(centroid(loop))
    new_edges: list[HalfEdge] = []

    for i, boundary_edge in enumerate(loop):
        start = boundary_edge.start
        end = loop[(i + 1) % len(loop)].start
        face = mesh.add_face(start, center, end)
        new_edges.extend(face.half_edges())

    missing: list[MissingTwin] = []
    for edge in new_edges:
        if edge.twin is not None:
            continue
        twin = _find_unpaired_reverse(mesh, edge.start, edge.end)
        if twin is None:
            missing.append(MissingTwin(loop_index, edge.start.index, edge.end.index))
        else:
            link_twins(edge, twin)
    return missing


def _find_unpaired_reverse(
    mesh: TriangleMesh, start: Vertex, end: Vertex
) -> HalfEdge | None:
    """First half-edge ``end -> start`` that has no twin yet."""
    for candidate in mesh.half_edges:
        if (
            candidate.twin is None
            and candidate.start is end
            and candidate.next is not None
            and candidate.next.start is start
        ):
            return candidate
    return None
