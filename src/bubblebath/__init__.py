"""
bubblebath - Random packings of spheres in rectangular domains.

Usage:
    from bubblebath import bubblebath, bubblebath_inplace, packing_fraction, walkmap
    from scipy.stats import uniform

    # Fixed list of radii
    spheres = bubblebath([4.0, 2.0, 2.0, 1.0], (20, 20))

    # Radii drawn from a distribution up to a target packing fraction
    spheres = bubblebath(uniform(1, 4), (100, 50), phi_max=0.4, rng=42)
    phi = packing_fraction(spheres, (100, 50))

    # Extend an existing bath in place
    bubblebath_inplace(spheres, [0.5] * 100, (100, 50), min_distance=0.1)

    # Occupancy grid and its exact packing fraction
    wm = walkmap(spheres, (100, 50), resolution=0.1, boundaries="wrap")
    phi_exact = packing_fraction(wm)

Spheres are inserted from largest to smallest at uniformly random positions,
rejecting positions that overlap earlier spheres. Spheres that cannot be
placed within the try budget are dropped; compare the output length with the
input to detect it.
"""

import logging

from .config import BoundaryMode, PackingConfig, PackingProgress
from .geometry import (
    Sphere,
    SphereIndex,
    is_inside_boundaries,
    is_overlapping,
    is_overlapping_any,
    is_walkable_periodic,
    is_walkable_single,
    minimum_image,
    volume,
)
from .radii import generate_radii
from .packer import SpherePacker, bubblebath, bubblebath_inplace
from .walkmaps import grid_points, grid_shape, is_walkable, walkmap
from .packing_fraction import (
    packing_fraction,
    packing_fraction_radii,
    packing_fraction_spheres,
    packing_fraction_walkmap,
)
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BoundaryMode",
    "PackingConfig",
    "PackingProgress",
    "Sphere",
    "SphereIndex",
    "SpherePacker",
    "bubblebath",
    "bubblebath_inplace",
    "generate_radii",
    "grid_points",
    "grid_shape",
    "is_inside_boundaries",
    "is_overlapping",
    "is_overlapping_any",
    "is_walkable",
    "is_walkable_periodic",
    "is_walkable_single",
    "minimum_image",
    "packing_fraction",
    "packing_fraction_radii",
    "packing_fraction_spheres",
    "packing_fraction_walkmap",
    "setup_logging",
    "volume",
    "walkmap",
]

__version__ = "0.1.0"
