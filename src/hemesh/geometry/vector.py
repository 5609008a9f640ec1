"""
Immutable 3D vector value type.

``Vector3`` is hashable and compares by exact component equality, which lets
the mesh builder use positions as dictionary keys for vertex deduplication.
Two positions only coalesce when their floats are identical.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Sequence


@dataclass(frozen=True)
class Vector3:
    """
    Three-component float vector with value semantics.

    Attributes:
        x: X component
        y: Y component
        z: Z component
    """

    x: float
    y: float
    z: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Vector3":
        """Build a vector from any 3-element sequence (list, tuple, ndarray row)."""
        if len(values) != 3:
            raise ValueError(f"Expected 3 components, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector3":
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def dot(self, other: "Vector3") -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        """Cross product (right-hand rule)."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalized(self, tolerance: float = 1e-8) -> "Vector3":
        """
        Return the unit vector in the same direction.

        Vectors shorter than ``tolerance`` are returned unchanged, so a
        degenerate triangle keeps a zero normal instead of raising.
        """
        length = self.length()
        if length > tolerance:
            return self / length
        return self

    def distance(self, other: "Vector3") -> float:
        """Euclidean distance to another point."""
        return (self - other).length()

    @staticmethod
    def min(a: "Vector3", b: "Vector3") -> "Vector3":
        """Componentwise minimum."""
        return Vector3(min(a.x, b.x), min(a.y, b.y), min(a.z, b.z))

    @staticmethod
    def max(a: "Vector3", b: "Vector3") -> "Vector3":
        """Componentwise maximum."""
        return Vector3(max(a.x, b.x), max(a.y, b.y), max(a.z, b.z))

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]
