"""
Custom exceptions for hemesh.

All hemesh exceptions inherit from HemeshError for easy catching.
"""

from typing import Any


class HemeshError(Exception):
    """Base exception for all hemesh errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(HemeshError):
    """Raised when configuration is invalid or missing."""

    pass


class GeometryError(HemeshError):
    """Raised when loading, saving or converting geometry fails."""

    pass


class DegenerateGeometryError(GeometryError):
    """Raised when two triangle planes are parallel or coplanar.

    No numerically meaningful intersection line exists for such a pair.
    """

    pass


class CorruptTopologyError(GeometryError):
    """Raised when half-edge linkage is inconsistent.

    Typical causes are a face whose ``next`` cycle does not close in three
    steps, or a face cycling through fewer than three distinct vertices.
    """

    def __init__(
        self,
        message: str,
        face_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.face_index = face_index


class MissingTwinError(GeometryError):
    """Raised by strict hole filling when a fan edge has no reverse partner."""

    def __init__(
        self,
        message: str,
        start: int | None = None,
        end: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.start = start
        self.end = end
