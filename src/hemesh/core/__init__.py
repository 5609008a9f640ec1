"""
Core module - Shared configuration, exceptions, logging and geometry I/O.
"""

from hemesh.core.config import (
    ConfigManager,
    EngineConfig,
    IntersectionConfig,
    LoggingConfig,
    OctreeConfig,
    RepairConfig,
)
from hemesh.core.exceptions import (
    HemeshError,
    ConfigurationError,
    GeometryError,
    DegenerateGeometryError,
    CorruptTopologyError,
    MissingTwinError,
)
from hemesh.core.logging import configure_logging, get_logger, mesh_context

__all__ = [
    # Config
    "ConfigManager",
    "EngineConfig",
    "IntersectionConfig",
    "LoggingConfig",
    "OctreeConfig",
    "RepairConfig",
    # Exceptions
    "HemeshError",
    "ConfigurationError",
    "GeometryError",
    "DegenerateGeometryError",
    "CorruptTopologyError",
    "MissingTwinError",
    # Logging
    "configure_logging",
    "get_logger",
    "mesh_context",
]
