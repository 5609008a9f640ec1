"""
Geometry I/O for hemesh using trimesh and COMPAS.

Provides loading and saving of triangle files and conversion between the
half-edge ``TriangleMesh`` and the trimesh / COMPAS mesh types.

Files are always read as unprocessed triangle soup: trimesh's own vertex
merging is disabled so that vertex sharing is decided by the half-edge
builder alone.
"""

import logging
from pathlib import Path
from typing import Any

import trimesh
from compas.datastructures import Mesh as CompasMesh

from hemesh.core.exceptions import GeometryError
from hemesh.geometry.mesh import TriangleMesh
from hemesh.geometry.vector import Vector3

logger = logging.getLogger(__name__)


class GeometryConverter:
    """
    Converter between different mesh representations.

    Handles conversion between the half-edge TriangleMesh, Trimesh and COMPAS.
    """

    @staticmethod
    def to_trimesh(mesh: TriangleMesh) -> trimesh.Trimesh:
        """
        Convert a half-edge mesh to Trimesh.

        Args:
            mesh: Half-edge mesh

        Returns:
            Unprocessed Trimesh sharing the half-edge vertex indexing

        Raises:
            CorruptTopologyError: If a face does not form a valid triangle
        """
        vertices = [v.position.to_list() for v in mesh.vertices]
        faces = [[v.index for v in face.vertices()] for face in mesh.faces]
        return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)

    @staticmethod
    def from_trimesh(mesh: trimesh.Trimesh) -> TriangleMesh:
        """
        Convert Trimesh to a half-edge mesh, one ``add_triangle`` per face.

        Args:
            mesh: Trimesh mesh object

        Returns:
            Half-edge mesh

        Raises:
            GeometryError: If conversion fails
        """
        try:
            return TriangleMesh.from_triangles(mesh.triangles.tolist())
        except Exception as e:
            raise GeometryError(f"Failed to convert Trimesh to TriangleMesh: {e}") from e

    @staticmethod
    def to_compas(mesh: TriangleMesh) -> CompasMesh:
        """
        Convert a half-edge mesh to a COMPAS Mesh.

        Raises:
            CorruptTopologyError: If a face does not form a valid triangle
        """
        vertices = [v.position.to_list() for v in mesh.vertices]
        faces = [[v.index for v in face.vertices()] for face in mesh.faces]
        return CompasMesh.from_vertices_and_faces(vertices, faces)

    @staticmethod
    def from_compas(mesh: CompasMesh) -> TriangleMesh:
        """
        Convert a COMPAS Mesh to a half-edge mesh.

        Polygon faces are fan-triangulated from their first vertex.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            result = TriangleMesh()
            for fkey in mesh.faces():
                corners = [
                    Vector3.from_sequence(mesh.vertex_coordinates(v))
                    for v in mesh.face_vertices(fkey)
                ]
                for i in range(1, len(corners) - 1):
                    result.add_triangle(corners[0], corners[i], corners[i + 1])
            return result
        except Exception as e:
            raise GeometryError(f"Failed to convert COMPAS to TriangleMesh: {e}") from e


class GeometryLoader:
    """
    Loads and saves triangle meshes.

    Supports STL (binary and ASCII), OBJ, PLY and OFF via trimesh.
    """

    SUPPORTED_FORMATS = {".stl", ".obj", ".ply", ".off"}

    @classmethod
    def load(cls, file_path: str | Path, **kwargs: Any) -> TriangleMesh:
        """
        Load geometry from file into a half-edge mesh.

        Args:
            file_path: Path to geometry file
            **kwargs: Additional arguments passed to trimesh.load

        Returns:
            TriangleMesh built from the file's triangles

        Raises:
            GeometryError: If file format is unsupported or loading fails
        """
        path = Path(file_path)

        if not path.exists():
            raise GeometryError(f"File not found: {path}")

        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {cls.SUPPORTED_FORMATS}"
            )

        kwargs.setdefault("process", False)

        try:
            loaded = trimesh.load(str(path), **kwargs)

            # Handle Scene vs Mesh
            if isinstance(loaded, trimesh.Scene):
                meshes = [
                    geom for geom in loaded.geometry.values()
                    if isinstance(geom, trimesh.Trimesh)
                ]
                if not meshes:
                    raise GeometryError(f"No triangle geometry in {path}")
                tmesh = trimesh.util.concatenate(meshes)
            elif isinstance(loaded, trimesh.Trimesh):
                tmesh = loaded
            else:
                raise GeometryError(f"Unexpected geometry type: {type(loaded)}")

            mesh = GeometryConverter.from_trimesh(tmesh)

        except GeometryError:
            raise
        except Exception as e:
            raise GeometryError(f"Failed to load geometry from {path}: {e}") from e

        logger.info(
            "Loaded %s: %d triangles, %d unique vertices",
            path.name, len(mesh.faces), len(mesh.vertices),
        )
        return mesh

    @classmethod
    def save(
        cls,
        mesh: TriangleMesh,
        file_path: str | Path,
        ascii: bool = False,
        **kwargs: Any,
    ) -> None:
        """
        Save a half-edge mesh to file.

        STL files are written binary unless ``ascii`` is set; other suffixes
        use trimesh's exporter for that format.

        Args:
            mesh: Mesh to save
            file_path: Output file path
            ascii: Write ASCII STL instead of binary
            **kwargs: Additional arguments passed to trimesh.export

        Raises:
            GeometryError: If the mesh is empty or saving fails
            CorruptTopologyError: If a face does not form a valid triangle
        """
        path = Path(file_path)

        if not mesh.faces:
            raise GeometryError(f"Cannot save empty mesh to {path}")

        tmesh = GeometryConverter.to_trimesh(mesh)

        if path.suffix.lower() == ".stl":
            kwargs.setdefault("file_type", "stl_ascii" if ascii else "stl")

        try:
            tmesh.export(str(path), **kwargs)
        except Exception as e:
            raise GeometryError(f"Failed to save geometry to {path}: {e}") from e

        logger.info("Saved %s: %d triangles", path.name, len(mesh.faces))
