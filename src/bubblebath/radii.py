"""
Radius sequence generation.

A radius source is whatever the caller uses to describe the size
distribution of the spheres:

- an object with an ``rvs`` method, e.g. a frozen ``scipy.stats`` distribution
- a finite sequence of radii, from which each draw picks one value uniformly
- a callable taking a ``numpy.random.Generator`` and returning one radius
"""

import logging
from collections import abc
import numpy as np
from typing import Any, Callable, List, Sequence, Union

from .config import DEFAULT_MAX_TRIES, Extent
from .geometry import as_extent, volume

logger = logging.getLogger(__name__)

RandomState = Union[None, int, np.random.Generator]


def make_rng(rng: RandomState = None) -> np.random.Generator:
    """Return a numpy Generator from a seed, an existing Generator, or None."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def check_phi_max(phi_max: float) -> None:
    if not 0 < phi_max <= 1:
        raise ValueError(f"Packing fraction phi_max must be in (0, 1], got {phi_max}.")


def check_radii(radii: Sequence[float]) -> None:
    for r in radii:
        if not r > 0:
            raise ValueError(f"Radii must be positive real numbers, got {r}.")


def _is_radius_sequence(source: Any) -> bool:
    if isinstance(source, np.ndarray):
        return True
    return isinstance(source, abc.Sequence) and not isinstance(source, (str, bytes))


def radius_sampler(radius_pdf: Any, rng: np.random.Generator) -> Callable[[], float]:
    """Build a zero-argument function drawing one radius from `radius_pdf`."""
    if hasattr(radius_pdf, "rvs"):
        return lambda: float(radius_pdf.rvs(random_state=rng))

    if _is_radius_sequence(radius_pdf):
        values = np.asarray(radius_pdf, dtype=float).ravel()
        if values.size == 0:
            raise ValueError("Cannot draw radii from an empty sequence.")
        check_radii(values)
        return lambda: float(values[rng.integers(values.size)])

    if callable(radius_pdf):
        return lambda: float(radius_pdf(rng))

    raise TypeError(
        f"Unsupported radius source of type {type(radius_pdf).__name__}; "
        "expected a distribution with `rvs`, a sequence of radii or a callable."
    )


def generate_radii(
    radius_pdf: Any,
    phi_max: float,
    extent: Extent,
    *,
    max_tries: int = DEFAULT_MAX_TRIES,
    verbose: bool = True,
    rng: RandomState = None,
) -> List[float]:
    """
    Draw radii from `radius_pdf` until they fill a packing fraction `phi_max`
    of the domain `extent`.

    Draws that would push the total above `phi_max` are rejected; generation
    stops after more than `max_tries` consecutive rejections, so smaller radii
    can still be accepted after a large one did not fit.
    Radii are returned in draw order.
    """
    check_phi_max(phi_max)
    extent = as_extent(extent)
    dim = len(extent)
    domain_volume = float(np.prod(extent))
    draw = radius_sampler(radius_pdf, make_rng(rng))

    radii: List[float] = []
    occupied = 0.0
    tries = 0
    while True:
        r = draw()
        if not r > 0:
            raise ValueError(f"Radius source produced a non-positive radius: {r}.")
        v = volume(r, dim)
        if (occupied + v) / domain_volume <= phi_max:
            radii.append(r)
            occupied += v
            tries = 0
        else:
            tries += 1
            if tries > max_tries:
                break

    if verbose:
        logger.info(f"Generated {len(radii)} spheres.")
    return radii
