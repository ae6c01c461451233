import numpy as np
from typing import Optional, Sequence, Union

from .config import Extent, Walkmap
from .geometry import Sphere, as_extent, volume
from .radii import check_radii


def packing_fraction_spheres(spheres: Sequence[Sphere], extent: Extent) -> float:
    """
    Packing fraction of `spheres` in the domain `extent`.
    Not exact if spheres overlap or cross the domain boundaries.
    """
    extent = as_extent(extent)
    total = 0.0
    for s in spheres:
        if s.dim != len(extent):
            raise ValueError(
                f"Sphere of dimension {s.dim} does not fit a {len(extent)}-dimensional domain."
            )
        total += s.volume
    return total / float(np.prod(extent))


def packing_fraction_radii(radii: Sequence[float], extent: Extent) -> float:
    """
    Packing fraction of spheres with radii `radii` in the domain `extent`,
    with the dimension taken from `extent`.
    """
    check_radii(radii)
    extent = as_extent(extent)
    dim = len(extent)
    total = 0.0
    for r in radii:
        total += volume(r, dim)
    return total / float(np.prod(extent))


def _is_binary_grid(arr: np.ndarray) -> bool:
    """Whether `arr` is a non-boolean walkmap, e.g. cast to uint8 or reloaded as 0/1."""
    if not (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)):
        return False
    return bool(np.all((arr == 0) | (arr == 1)))


def packing_fraction_walkmap(wm: Walkmap) -> float:
    """
    Packing fraction of a walkmap.

    With `probe_radius=0` this is the real packing fraction, otherwise the
    effective one seen by the probe. Unlike the other estimates it is exact,
    regardless of overlaps and boundary crossings, within the walkmap
    resolution.
    """
    wm = np.asarray(wm)
    if wm.size == 0:
        raise ValueError("Cannot evaluate the packing fraction of an empty walkmap.")
    if wm.dtype != bool:
        if not _is_binary_grid(wm):
            raise ValueError(
                f"Walkmap of dtype {wm.dtype} must only hold 0 (occupied) and 1 (walkable)."
            )
        wm = wm.astype(bool)
    return 1.0 - np.count_nonzero(wm) / wm.size


def packing_fraction(
    obj: Union[Walkmap, Sequence[Sphere], Sequence[float]],
    extent: Optional[Extent] = None,
) -> float:
    """
    Fraction of the domain volume occupied.

    `obj` may be a walkmap (boolean array, or a 0/1 array of two or more
    axes), a sequence of spheres, or a sequence of radii; the latter two
    need `extent`.
    """
    if isinstance(obj, np.ndarray):
        # one-dimensional arrays are radii, anything with more axes is a grid
        if obj.dtype == bool or obj.ndim >= 2:
            return packing_fraction_walkmap(obj)
    if extent is None:
        raise ValueError("A domain extent is required unless a walkmap is given.")
    items = list(obj)
    if len(items) == 0:
        as_extent(extent)
        return 0.0
    if all(isinstance(item, Sphere) for item in items):
        return packing_fraction_spheres(items, extent)
    return packing_fraction_radii(items, extent)
