"""
Octree spatial index over mesh faces and pairwise overlap detection.

The octree is the broad phase: two trees (one per mesh, or one mesh against
itself) are descended together and any node pair whose boxes do not overlap
is pruned. Leaf/leaf pairs fall through to the exact triangle predicate.

A face straddling a split plane is stored in every child it overlaps. This
duplication guarantees no true contact is missed; the descent reports each
face pair once regardless of how many leaves share it.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

from hemesh.core.config import IntersectionConfig
from hemesh.core.exceptions import DegenerateGeometryError
from hemesh.core.logging import get_logger
from hemesh.geometry.bounds import AABB
from hemesh.geometry.intersection import faces_intersect
from hemesh.geometry.mesh import Face, TriangleMesh

_logger = get_logger(__name__)

FacePair = tuple[Face, Face]


@dataclass(eq=False)
class OctreeNode:
    """
    A node of the face octree.

    Attributes:
        bounds: Node box
        faces: Faces overlapping the box (not owned)
        children: Eight octant slots in ``AABB.subdivide`` order; None for
            an empty octant
    """

    bounds: AABB
    faces: list[Face] = field(default_factory=list)
    children: list[Optional["OctreeNode"]] = field(default_factory=lambda: [None] * 8)

    @property
    def is_leaf(self) -> bool:
        return all(child is None for child in self.children)

    def present_children(self) -> list["OctreeNode"]:
        return [child for child in self.children if child is not None]

    def subdivide(self, current_depth: int, max_depth: int) -> None:
        """Recursively split this node until the depth or face limit is hit."""
        if current_depth >= max_depth or len(self.faces) <= 1:
            return

        child_bounds = self.bounds.subdivide()
        child_faces: list[list[Face]] = [[] for _ in range(8)]

        for face in self.faces:
            for i, box in enumerate(child_bounds):
                if box.intersects(face):
                    child_faces[i].append(face)

        for i, faces in enumerate(child_faces):
            if faces:
                child = OctreeNode(bounds=child_bounds[i], faces=faces)
                self.children[i] = child
                child.subdivide(current_depth + 1, max_depth)

    def iter_nodes(self) -> Iterator["OctreeNode"]:
        """Depth-first iteration over this node and all descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.present_children()))

    def leaves(self) -> list["OctreeNode"]:
        return [node for node in self.iter_nodes() if node.is_leaf]

    def depth(self) -> int:
        """Height of the subtree rooted here; a lone leaf has depth 0."""
        children = self.present_children()
        if not children:
            return 0
        return 1 + max(child.depth() for child in children)


def build_octree_for_mesh(mesh: TriangleMesh, max_depth: int) -> OctreeNode:
    """
    Build a face octree for a mesh.

    The root box is the mesh bounds and holds every face. A node stops
    subdividing once ``depth >= max_depth`` or it holds at most one face.

    Args:
        mesh: Source mesh
        max_depth: Maximum subdivision depth (0 keeps a single root leaf)

    Returns:
        Root node
    """
    root = OctreeNode(bounds=AABB.from_mesh(mesh), faces=list(mesh.faces))
    root.subdivide(0, max_depth)

    nodes = list(root.iter_nodes())
    _logger.info(
        "octree_built",
        faces=len(mesh.faces),
        nodes=len(nodes),
        leaves=sum(1 for n in nodes if n.is_leaf),
        depth=root.depth(),
        max_depth=max_depth,
    )
    return root


class _PairCollector:
    """Accumulates unique intersecting pairs during the descent."""

    def __init__(self, config: IntersectionConfig, symmetric: bool = False) -> None:
        self.config = config
        self.symmetric = symmetric
        self.pairs: list[FacePair] = []
        self.tested = 0
        self.degenerate = 0
        self._seen: set[tuple[int, int]] = set()

    def test_leaves(self, node_a: OctreeNode, node_b: OctreeNode) -> None:
        for face_a in node_a.faces:
            for face_b in node_b.faces:
                if face_a is face_b:
                    continue
                key = (id(face_a), id(face_b))
                if self.symmetric:
                    key = (min(key), max(key))
                if key in self._seen:
                    continue
                self._seen.add(key)
                self.tested += 1
                if self._intersect(face_a, face_b):
                    self.pairs.append((face_a, face_b))

    def _intersect(self, face_a: Face, face_b: Face) -> bool:
        try:
            return faces_intersect(
                face_a,
                face_b,
                epsilon=self.config.epsilon,
                parallel_epsilon=self.config.parallel_epsilon,
            )
        except DegenerateGeometryError:
            if self.config.on_degenerate == "raise":
                raise
            self.degenerate += 1
            return False


def find_intersecting_faces(
    octree_a: OctreeNode,
    octree_b: OctreeNode,
    config: IntersectionConfig | None = None,
) -> list[FacePair]:
    """
    Find all intersecting face pairs between two octrees.

    Both trees are descended together. Node pairs whose boxes do not overlap
    are pruned. When exactly one side is internal it is expanded; when both
    are, the node with the larger box is expanded, so each node pair is
    visited once. Leaf/leaf pairs run the exact predicate over every face
    combination. A face is never tested against itself, which makes
    ``find_intersecting_faces(tree, tree)`` a self-intersection query; in
    that case each unordered pair is reported once.

    Args:
        octree_a: Root of the first octree
        octree_b: Root of the second octree
        config: Predicate tolerances and coplanar-pair policy

    Returns:
        ``(face_a, face_b)`` pairs in discovery order, each reported once

    Raises:
        DegenerateGeometryError: For a coplanar or parallel pair when
            ``config.on_degenerate`` is ``"raise"``
    """
    collector = _PairCollector(
        config or IntersectionConfig(), symmetric=octree_a is octree_b
    )
    _descend(octree_a, octree_b, collector)

    _logger.info(
        "intersections_found",
        pairs=len(collector.pairs),
        tested=collector.tested,
        degenerate_skipped=collector.degenerate,
    )
    return collector.pairs


def _descend(node_a: OctreeNode, node_b: OctreeNode, collector: _PairCollector) -> None:
    if not node_a.bounds.intersects_aabb(node_b.bounds):
        return

    a_leaf = node_a.is_leaf
    b_leaf = node_b.is_leaf

    if a_leaf and b_leaf:
        collector.test_leaves(node_a, node_b)
    elif b_leaf or (not a_leaf and node_a.bounds.volume() >= node_b.bounds.volume()):
        for child in node_a.present_children():
            _descend(child, node_b, collector)
    else:
        for child in node_b.present_children():
            _descend(node_a, child, collector)
