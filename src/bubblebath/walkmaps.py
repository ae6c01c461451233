"""
Walkmaps: boolean occupancy grids of a sphere packing.

A cell is True (walkable) when its centre is clear of every sphere,
taking into account the size of the probe that walks the domain.
"""

import numpy as np
from typing import Sequence, Tuple, Union

from .config import BoundaryMode, Extent, Walkmap
from .geometry import (
    Sphere,
    as_extent,
    is_walkable_periodic,
    is_walkable_single,
    minimum_image,
)


def grid_shape(extent: Extent, resolution: float) -> Tuple[int, ...]:
    """Number of walkmap cells along each axis."""
    extent = as_extent(extent)
    return tuple(int(n) for n in np.floor(extent / resolution))


def grid_points(extent: Extent, resolution: float) -> Tuple[np.ndarray, ...]:
    """Cell-centre coordinates along each axis, starting at resolution/2."""
    return tuple(
        resolution / 2 + resolution * np.arange(n)
        for n in grid_shape(extent, resolution)
    )


def is_walkable(
    pos: Sequence[float],
    probe_radius: float,
    spheres: Sequence[Sphere],
    extent: Extent,
    boundaries: Union[BoundaryMode, str] = BoundaryMode.CUT,
) -> bool:
    """Whether a probe of radius `probe_radius` can occupy `pos` among `spheres`."""
    mode = BoundaryMode.parse(boundaries)
    if mode is BoundaryMode.CUT:
        return all(is_walkable_single(pos, probe_radius, s) for s in spheres)
    return all(is_walkable_periodic(pos, probe_radius, s, extent) for s in spheres)


def walkmap(
    spheres: Sequence[Sphere],
    extent: Extent,
    resolution: float,
    probe_radius: float = 0.0,
    boundaries: Union[BoundaryMode, str] = BoundaryMode.CUT,
) -> Walkmap:
    """
    Generate a walkmap of `spheres` in the domain `extent` with cells of size
    `resolution`.

    A positive `probe_radius` shrinks the walkable space, modelling a probe
    of finite size. `boundaries` ('cut' or 'wrap') sets how spheres crossing
    the domain boundaries are treated: cut off at the edge, or wrapped around
    periodically.
    """
    mode = BoundaryMode.parse(boundaries)
    if not resolution > 0:
        raise ValueError(f"Walkmap resolution must be positive, got {resolution}.")
    if probe_radius < 0:
        raise ValueError(f"Probe radius must be non-negative, got {probe_radius}.")
    extent = as_extent(extent)
    dim = len(extent)
    for s in spheres:
        if s.dim != dim:
            raise ValueError(
                f"Sphere of dimension {s.dim} does not fit a {dim}-dimensional domain."
            )

    axes = grid_points(extent, resolution)
    shape = tuple(len(ax) for ax in axes)
    walkable = np.ones(shape, dtype=bool)
    if len(spheres) == 0:
        return walkable

    # open grids broadcast against each other, one full-size float buffer
    open_axes = np.meshgrid(*axes, indexing="ij", sparse=True)
    dist2 = np.empty(shape)
    clear = np.empty(shape, dtype=bool)
    for s in spheres:
        dist2.fill(0.0)
        for i, (ax, c) in enumerate(zip(open_axes, s.pos)):
            d = ax - c
            if mode is BoundaryMode.WRAP:
                d = minimum_image(d, extent[i])
            dist2 += d * d
        np.greater_equal(dist2, (probe_radius + s.radius) ** 2, out=clear)
        walkable &= clear

    return walkable
