"""
Geometry utilities for sphere packing.

Contains:
- Sphere: immutable centre + radius record of any dimension
- Predicates: overlap, boundary containment, walkability (plain and periodic)
- SphereIndex: array-backed store for vectorised collision detection
"""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .config import Extent, Point, Position


def as_extent(extent: Extent) -> np.ndarray:
    """Convert a domain extent to a float array, checking it is a valid box."""
    arr = np.asarray(extent, dtype=float)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError(f"Extent must be a non-empty sequence of lengths, got {extent!r}.")
    if np.any(arr <= 0):
        raise ValueError(f"Extent components must be positive, got {tuple(arr)}.")
    return arr


def volume(radius: float, dim: int) -> float:
    """Volume of a sphere of radius `radius` in `dim` dimensions (2 or 3)."""
    if dim == 2:
        return math.pi * radius ** 2
    if dim == 3:
        return 4 * math.pi / 3 * radius ** 3
    raise ValueError(f"Volume only supported for 2 or 3 dimensions, got {dim}.")


@dataclass(frozen=True)
class Sphere:
    """
    A sphere centred at `pos` with radius `radius`.

    The dimension is inferred from `pos`; passing `dim` explicitly checks it.
    """
    pos: Position
    radius: float
    dim: Optional[int] = None

    def __post_init__(self):
        pos = tuple(float(x) for x in self.pos)
        if len(pos) == 0:
            raise ValueError("Sphere position must have at least one coordinate.")
        if self.dim is not None and self.dim != len(pos):
            raise ValueError(
                f"Sphere dimension {self.dim} does not match position {pos}."
            )
        if not self.radius > 0:
            raise ValueError(f"Sphere radius must be a positive real number, got {self.radius}.")
        object.__setattr__(self, "pos", pos)
        object.__setattr__(self, "radius", float(self.radius))
        object.__setattr__(self, "dim", len(pos))

    @property
    def volume(self) -> float:
        return volume(self.radius, self.dim)


def is_overlapping(p1: Sequence[float], r1: float, p2: Sequence[float], r2: float) -> bool:
    """Whether two spheres overlap. Surface contact is not counted as overlap."""
    return math.dist(p1, p2) < r1 + r2


def is_overlapping_any(p: Sequence[float], r: float, spheres: Iterable[Sphere]) -> bool:
    """Whether a sphere of radius `r` centred at `p` overlaps any of `spheres`."""
    return any(is_overlapping(p, r, s.pos, s.radius) for s in spheres)


def is_inside_boundaries(p: Sequence[float], r: float, extent: Extent) -> bool:
    """Whether a sphere of radius `r` centred at `p` lies within `extent`."""
    for x, length in zip(p, extent, strict=True):
        if not (r <= x <= length - r):
            return False
    return True


def minimum_image(delta: np.ndarray, extent: Extent) -> np.ndarray:
    """Wrap offsets (last axis = coordinates) into the periodic cell around zero."""
    extent = np.asarray(extent, dtype=float)
    a = np.asarray(delta, dtype=float) / extent
    return (a - np.round(a)) * extent


def is_walkable_single(p: Sequence[float], probe_radius: float, sphere: Sphere) -> bool:
    """Whether a probe of radius `probe_radius` at `p` stays clear of `sphere`."""
    return math.dist(p, sphere.pos) >= probe_radius + sphere.radius


def is_walkable_periodic(
    p: Sequence[float], probe_radius: float, sphere: Sphere, extent: Extent
) -> bool:
    """Like `is_walkable_single`, with minimum-image distance in a periodic domain."""
    d = minimum_image(np.subtract(p, sphere.pos), extent)
    return float(np.linalg.norm(d)) >= probe_radius + sphere.radius


@dataclass
class SphereIndex:
    """Array-backed store of sphere centres and radii for batch collision tests."""
    dim: int
    _centers: np.ndarray = field(init=False)
    _radii: np.ndarray = field(init=False)

    def __post_init__(self):
        self._centers = np.empty((0, self.dim))
        self._radii = np.empty(0)

    @classmethod
    def from_spheres(cls, spheres: Sequence[Sphere], dim: int) -> "SphereIndex":
        index = cls(dim)
        if len(spheres) > 0:
            index._centers = np.array([s.pos for s in spheres], dtype=float)
            index._radii = np.array([s.radius for s in spheres], dtype=float)
        return index

    def __len__(self) -> int:
        return len(self._radii)

    def add_sphere(self, center: Point, radius: float) -> None:
        """Add a sphere to the index."""
        self._centers = np.vstack([self._centers, np.reshape(center, (1, self.dim))])
        self._radii = np.append(self._radii, radius)

    def overlaps(self, points: np.ndarray, radius: float) -> np.ndarray:
        """
        Boolean mask over `points` (shape (n, dim)): True where a sphere of
        radius `radius` centred there overlaps any stored sphere.
        """
        points = np.atleast_2d(points)
        if len(self._radii) == 0:
            return np.zeros(len(points), dtype=bool)

        distances = np.linalg.norm(
            points[:, np.newaxis, :] - self._centers[np.newaxis, :, :],
            axis=2
        )
        return np.any(distances < self._radii[np.newaxis, :] + radius, axis=1)
