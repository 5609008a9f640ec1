"""
Half-edge triangle mesh.

The mesh is a cyclic reference graph:

- every ``HalfEdge`` points at its start ``Vertex``, the following half-edge
  around its face (``next``), the opposing half-edge on the neighbouring face
  (``twin``, absent on hole boundaries) and its owning ``Face``;
- every ``Face`` points at its first half-edge;
- every ``Vertex`` keeps one outgoing half-edge for traversal.

``TriangleMesh`` owns all three element lists plus two construction indices:
``edge_map`` (ordered vertex-index pair to half-edge) and ``vertex_map``
(exact position to vertex). Only the builder methods below and the repair
module keep those indices consistent.

Example:
    >>> mesh = TriangleMesh()
    >>> face = mesh.add_triangle(Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(0, 1, 0))
    >>> mesh.is_watertight()
    False
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from hemesh.core.exceptions import CorruptTopologyError
from hemesh.core.logging import get_logger
from hemesh.geometry.vector import Vector3

_logger = get_logger(__name__)

EdgeKey = tuple[int, int]


@dataclass(eq=False, repr=False)
class Vertex:
    """
    A mesh vertex.

    Attributes:
        position: Vertex coordinates
        index: Position of the vertex in ``TriangleMesh.vertices``
        edge: One outgoing half-edge (not owned)
    """

    position: Vector3
    index: int = -1
    edge: "HalfEdge | None" = None

    def __repr__(self) -> str:
        return f"Vertex({self.index}, {self.position.to_tuple()})"


@dataclass(eq=False, repr=False)
class HalfEdge:
    """
    Directed edge from ``start`` toward ``next.start``.

    Attributes:
        start: Start vertex
        next: Following half-edge around the face
        twin: Opposing half-edge on the adjacent face, None on a boundary
        face: Owning face
        is_boundary: Boundary flag maintained by ``update_boundary_edges``
    """

    start: Vertex
    next: "HalfEdge | None" = None
    twin: "HalfEdge | None" = None
    face: "Face | None" = None
    is_boundary: bool = False

    @property
    def end(self) -> Vertex:
        """End vertex, i.e. the start of the next half-edge."""
        if self.next is None:
            raise CorruptTopologyError(
                "Half-edge has no successor",
                details={"start": self.start.index},
            )
        return self.next.start

    def __repr__(self) -> str:
        end = self.next.start.index if self.next is not None else None
        return f"HalfEdge({self.start.index}->{end}, twin={self.twin is not None})"


@dataclass(eq=False, repr=False)
class Face:
    """
    A triangular face.

    Attributes:
        edge: First half-edge of the face
        normal: Cached unit normal, refreshed by ``recalculate_normals``
        index: Position of the face in ``TriangleMesh.faces``
    """

    edge: HalfEdge
    normal: Vector3 = field(default_factory=Vector3.zero)
    index: int = -1

    def half_edges(self) -> list[HalfEdge]:
        """
        Walk ``edge -> next -> next`` and return the three half-edges.

        Raises:
            CorruptTopologyError: If the walk does not close after three
                steps or visits fewer than three distinct vertices
        """
        edges: list[HalfEdge] = []
        current: HalfEdge | None = self.edge
        for _ in range(3):
            if current is None:
                raise CorruptTopologyError(
                    "Face traversal hit a missing next pointer",
                    face_index=self.index,
                )
            edges.append(current)
            current = current.next

        if current is not self.edge:
            raise CorruptTopologyError(
                "Face traversal does not return to its start edge within 3 steps",
                face_index=self.index,
            )

        if len({id(e.start) for e in edges}) < 3:
            raise CorruptTopologyError(
                "Face cycles through fewer than 3 distinct vertices",
                face_index=self.index,
            )
        return edges

    def vertices(self) -> list[Vertex]:
        """Ordered vertices of the face, in winding order."""
        return [e.start for e in self.half_edges()]

    def positions(self) -> list[Vector3]:
        """Ordered vertex positions of the face, in winding order."""
        return [e.start.position for e in self.half_edges()]

    def __repr__(self) -> str:
        return f"Face({self.index})"


@dataclass
class TriangleMesh:
    """
    Half-edge mesh container and incremental builder.

    Attributes:
        vertices: All vertices, indexed by ``Vertex.index``
        half_edges: All half-edges
        faces: All faces, indexed by ``Face.index``
        edge_map: Ordered vertex-index pair to the half-edge between them
        vertex_map: Exact position to vertex
    """

    vertices: list[Vertex] = field(default_factory=list)
    half_edges: list[HalfEdge] = field(default_factory=list)
    faces: list[Face] = field(default_factory=list)
    edge_map: dict[EdgeKey, HalfEdge] = field(default_factory=dict, repr=False)
    vertex_map: dict[Vector3, Vertex] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_vertex(self, position: Vector3) -> Vertex:
        """
        Return the vertex at ``position``, creating it if it does not exist.

        Matching is exact; epsilon-close positions stay distinct vertices.
        """
        existing = self.vertex_map.get(position)
        if existing is not None:
            return existing

        vertex = Vertex(position=position, index=len(self.vertices))
        self.vertices.append(vertex)
        self.vertex_map[position] = vertex
        return vertex

    def find_or_create_half_edge(self, start: Vertex, end: Vertex) -> HalfEdge:
        """Return the half-edge ``start -> end``, creating it if needed."""
        key = (start.index, end.index)
        edge = self.edge_map.get(key)
        if edge is not None:
            return edge

        edge = HalfEdge(start=start)
        self.edge_map[key] = edge
        self.half_edges.append(edge)
        if start.edge is None:
            start.edge = edge
        return edge

    def add_triangle(self, v1: Vector3, v2: Vector3, v3: Vector3) -> Face:
        """
        Add a triangle given by three positions in winding order.

        Coincident positions are shared with existing vertices and each new
        half-edge is paired with its reverse counterpart if one exists.
        Duplicate or degenerate triangles are not rejected: a half-edge that
        already exists in the same direction is silently reused.

        Returns:
            The new face
        """
        return self.add_face(self.add_vertex(v1), self.add_vertex(v2), self.add_vertex(v3))

    def add_face(self, vertex1: Vertex, vertex2: Vertex, vertex3: Vertex) -> Face:
        """
        Link three existing vertices into a new face.

        Shared by ``add_triangle`` and hole filling.
        """
        edge1 = self.find_or_create_half_edge(vertex1, vertex2)
        edge2 = self.find_or_create_half_edge(vertex2, vertex3)
        edge3 = self.find_or_create_half_edge(vertex3, vertex1)

        edge1.next = edge2
        edge2.next = edge3
        edge3.next = edge1

        face = Face(edge=edge1, index=len(self.faces))
        self.faces.append(face)
        edge1.face = face
        edge2.face = face
        edge3.face = face

        self._set_twin(edge1, vertex2, vertex1)
        self._set_twin(edge2, vertex3, vertex2)
        self._set_twin(edge3, vertex1, vertex3)
        return face

    def _set_twin(self, edge: HalfEdge, start: Vertex, end: Vertex) -> None:
        """Pair ``edge`` with the half-edge ``start -> end`` if it exists."""
        twin = self.edge_map.get((start.index, end.index))
        if twin is not None:
            link_twins(edge, twin)

    def reindex_positions(self) -> None:
        """Rebuild ``vertex_map`` after vertex positions were moved in place."""
        self.vertex_map = {}
        for vertex in self.vertices:
            self.vertex_map.setdefault(vertex.position, vertex)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def recalculate_normals(self) -> None:
        """
        Recompute every face normal from its own winding (right-hand rule).

        No global orientation fix is attempted.
        """
        for face in self.faces:
            edge1 = face.edge
            edge2 = edge1.next
            edge3 = edge2.next

            vector1 = edge2.start.position - edge1.start.position
            vector2 = edge3.start.position - edge2.start.position
            face.normal = vector1.cross(vector2).normalized()

    def update_boundary_edges(self) -> int:
        """
        Mark each half-edge without a twin as boundary.

        Returns:
            Number of boundary half-edges
        """
        count = 0
        for edge in self.half_edges:
            edge.is_boundary = edge.twin is None
            count += edge.is_boundary
        return count

    def is_watertight(self) -> bool:
        """True iff every half-edge has a twin."""
        return all(edge.twin is not None for edge in self.half_edges)

    def boundary_edges(self) -> list[HalfEdge]:
        """Half-edges without a twin, in creation order."""
        return [edge for edge in self.half_edges if edge.twin is None]

    def find_boundary_loops(self) -> list[list[HalfEdge]]:
        """
        Partition the boundary half-edges into closed loops.

        From each unvisited boundary edge the walk steps to ``next``; while
        that edge has a twin it rotates around the shared vertex through
        ``twin.next`` until it reaches the next boundary edge. The walk ends
        once it arrives at an edge that was already visited. Loops shorter
        than three edges are returned as well.

        Raises:
            CorruptTopologyError: If a rotation around a vertex never reaches
                a boundary edge
        """
        loops: list[list[HalfEdge]] = []
        visited: set[int] = set()

        for edge in self.half_edges:
            if edge.twin is not None or id(edge) in visited:
                continue

            loop: list[HalfEdge] = []
            current = edge
            while True:
                loop.append(current)
                visited.add(id(current))
                current = self._next_boundary_edge(current, visited)
                if id(current) in visited:
                    break
            loops.append(loop)

        _logger.debug("boundary_loops_found", loops=len(loops))
        return loops

    def _next_boundary_edge(self, edge: HalfEdge, visited: set[int]) -> HalfEdge:
        first = edge.next
        if first is None:
            raise CorruptTopologyError(
                "Boundary half-edge has no successor",
                details={"start": edge.start.index},
            )

        current = first
        steps = 0
        while current.twin is not None and id(current) not in visited:
            current = current.twin.next
            steps += 1
            if current is None:
                raise CorruptTopologyError(
                    "Twin half-edge has no successor",
                    details={"vertex": edge.end.index},
                )
            if current is first or steps > len(self.half_edges):
                raise CorruptTopologyError(
                    "Rotation around vertex found no boundary edge",
                    details={"vertex": edge.end.index},
                )
        return current

    def verify_edge_consistency(self) -> None:
        """
        Check that every face closes a 3-cycle over 3 distinct vertices.

        Raises:
            CorruptTopologyError: On the first inconsistent face
        """
        for face in self.faces:
            face.half_edges()

    def iter_triangles(self) -> Iterator[tuple[Vector3, Vector3, Vector3]]:
        """Yield each face as a tuple of three positions."""
        for face in self.faces:
            a, b, c = face.positions()
            yield (a, b, c)

    @classmethod
    def from_triangles(
        cls, triangles: Iterable[Sequence[Vector3 | Sequence[float]]]
    ) -> "TriangleMesh":
        """
        Build a mesh from an iterable of 3-point triangles.

        Each point may be a ``Vector3`` or any 3-element sequence.
        """
        mesh = cls()
        for triangle in triangles:
            a, b, c = (
                p if isinstance(p, Vector3) else Vector3.from_sequence(p)
                for p in triangle
            )
            mesh.add_triangle(a, b, c)
        return mesh


def link_twins(edge: HalfEdge, twin: HalfEdge) -> None:
    """Pair two opposing half-edges both ways and clear their boundary flags."""
    edge.twin = twin
    twin.twin = edge
    edge.is_boundary = False
    twin.is_boundary = False
