"""
Configuration management for hemesh.

Handles loading, validation, and access to engine settings: octree depth,
intersection tolerances, hole-filling behaviour and logging.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from hemesh.core.exceptions import ConfigurationError


class OctreeConfig(BaseModel):
    """Octree construction settings."""

    max_depth: int = Field(default=8, ge=0)


class IntersectionConfig(BaseModel):
    """Triangle-triangle predicate settings."""

    # Distances within epsilon of a plane count as lying on it
    epsilon: float = Field(default=1e-6, ge=0.0)
    # Squared length of n1 x n2 below which planes are treated as parallel
    parallel_epsilon: float = Field(default=1e-6, ge=0.0)
    on_degenerate: Literal["raise", "skip"] = "raise"


class RepairConfig(BaseModel):
    """Hole filling settings."""

    min_loop_size: int = Field(default=3, ge=1)
    strict: bool = False


class LoggingConfig(BaseModel):
    """Logging settings applied by the CLI."""

    level: str = "INFO"
    json_output: bool = False
    log_file: str | None = None


class EngineConfig(BaseModel):
    """Top-level configuration grouping every section."""

    name: str = "default"
    octree: OctreeConfig = Field(default_factory=OctreeConfig)
    intersection: IntersectionConfig = Field(default_factory=IntersectionConfig)
    repair: RepairConfig = Field(default_factory=RepairConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EngineConfig":
        """
        Load a configuration from a single YAML file.

        Args:
            path: YAML file path

        Returns:
            EngineConfig instance

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**_engine_section(data, default_name=path.stem))
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to load engine config: {path}",
                details={"error": str(e)},
            )


def _engine_section(data: dict[str, Any], default_name: str) -> dict[str, Any]:
    """Flatten an optional top-level ``engine`` key into model kwargs."""
    if not isinstance(data, dict):
        raise TypeError(f"expected a mapping, got {type(data).__name__}")

    section = dict(data.get("engine", {}))
    for key in ("octree", "intersection", "repair", "logging"):
        if key in data:
            section[key] = data[key]
    section.setdefault("name", default_name)
    return section


@dataclass
class ConfigManager:
    """
    Central configuration manager for hemesh.

    Loads and validates named configuration profiles from YAML files in a
    directory. Each ``<name>.yaml`` becomes the profile ``name``.

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> profile = config.get_profile("fine")
        >>> profile.octree.max_depth
        10
    """

    config_dir: Path
    _profiles: dict[str, EngineConfig] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        """Initialize configuration manager."""
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load all profiles from disk."""
        for config_file in sorted(self.config_dir.glob("*.yaml")):
            self._profiles[config_file.stem] = EngineConfig.from_yaml(config_file)
        self._loaded = True

    def get_profile(self, name: str) -> EngineConfig:
        """
        Get a configuration profile by name.

        Args:
            name: Profile name (without .yaml extension)

        Returns:
            EngineConfig instance

        Raises:
            ConfigurationError: If profile not found
        """
        if not self._loaded:
            self.load()

        if name not in self._profiles:
            available = list(self._profiles.keys())
            raise ConfigurationError(
                f"Configuration profile not found: {name}",
                details={"available": available},
            )
        return self._profiles[name]

    def list_profiles(self) -> list[str]:
        """List available configuration profiles."""
        if not self._loaded:
            self.load()
        return list(self._profiles.keys())
