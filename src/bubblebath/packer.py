import logging
import numpy as np
from typing import Any, Iterator, List, Optional, Sequence

from .config import DEFAULT_MAX_FAILS, DEFAULT_MAX_TRIES, Extent, PackingConfig, PackingProgress
from .geometry import Sphere, SphereIndex, as_extent
from .radii import RandomState, check_phi_max, check_radii, generate_radii, make_rng

logger = logging.getLogger(__name__)

# Emit a debug progress line every this many insertions
PROGRESS_LOG_INTERVAL = 100


class SpherePacker:
    """Packs spheres into a rectangular domain by random sequential insertion."""

    def __init__(
        self,
        extent: Extent,
        config: Optional[PackingConfig] = None,
        rng: RandomState = None,
    ):
        self.config = config or PackingConfig()
        self.config.validate()
        self.extent = as_extent(extent)
        self.dim = len(self.extent)
        self.rng = make_rng(rng)
        self.progress = PackingProgress()

    def _check_spheres(self, spheres: Sequence[Sphere]) -> None:
        for s in spheres:
            if s.dim != self.dim:
                raise ValueError(
                    f"Sphere of dimension {s.dim} cannot be placed in a "
                    f"{self.dim}-dimensional domain."
                )

    def _sample_candidate_points(self, count: int, margin: float) -> np.ndarray:
        """Uniform candidate centres in [margin, extent - margin) along every axis."""
        u = self.rng.random((count, self.dim))
        return margin + u * (self.extent - 2 * margin)

    def _inside_boundaries(self, points: np.ndarray, radius: float) -> np.ndarray:
        return np.all((points >= radius) & (points <= self.extent - radius), axis=1)

    def _find_placement(self, index: SphereIndex, radius: float) -> Optional[np.ndarray]:
        """
        Try up to max_tries + 1 random centres for a sphere of `radius`.
        Candidates are tested in batches; the first valid one in draw order wins.
        """
        cfg = self.config
        margin = 0.0 if cfg.through_boundaries else radius
        exclusion_radius = radius + cfg.min_distance

        attempts_left = cfg.max_tries + 1
        while attempts_left > 0:
            count = min(cfg.sample_batch_size, attempts_left)
            candidates = self._sample_candidate_points(count, margin)
            valid = ~index.overlaps(candidates, exclusion_radius)
            if not cfg.through_boundaries:
                valid &= self._inside_boundaries(candidates, radius)
            if np.any(valid):
                return candidates[np.argmax(valid)]
            attempts_left -= count
        return None

    def generate(self, radii: Sequence[float], spheres: Sequence[Sphere] = ()) -> Iterator[Sphere]:
        """
        Yield newly placed spheres, largest first, avoiding `spheres` and each other.

        Spheres that cannot be placed are dropped silently. The generator stops
        early once more than max_fails spheres have been dropped.
        """
        check_radii(radii)
        self._check_spheres(spheres)

        cfg = self.config
        self.progress = PackingProgress(requested=len(radii))
        index = SphereIndex.from_spheres(spheres, self.dim)

        for radius in sorted(radii, reverse=True):
            center = self._find_placement(index, radius)
            if center is None:
                if self.progress.failed > cfg.max_fails:
                    logger.warning("Reached max. number of tries. Interrupting.")
                    self.progress.aborted = True
                    return
                self.progress.failed += 1
                continue

            index.add_sphere(center, radius)
            self.progress.inserted += 1
            if self.progress.inserted % PROGRESS_LOG_INTERVAL == 0:
                logger.debug(f"Placed: {self.progress.inserted} | Failed: {self.progress.failed}")
            yield Sphere(tuple(center), radius)

    def pack(self, radii: Sequence[float], spheres: Optional[List[Sphere]] = None) -> List[Sphere]:
        """Append new spheres to `spheres` (a new list if None) and return it."""
        if spheres is None:
            spheres = []
        spheres.extend(self.generate(radii, spheres))
        if self.config.verbose:
            logger.info(str(self.progress))
        return spheres


def _resolve_radii(
    radii: Any,
    extent: Extent,
    phi_max: Optional[float],
    max_tries: int,
    verbose: bool,
    rng: np.random.Generator,
) -> Sequence[float]:
    if phi_max is None:
        return list(radii)
    check_phi_max(phi_max)
    return generate_radii(radii, phi_max, extent, max_tries=max_tries, verbose=verbose, rng=rng)


def bubblebath(
    radii: Any,
    extent: Extent,
    phi_max: Optional[float] = None,
    *,
    min_distance: float = 0.0,
    through_boundaries: bool = False,
    max_tries: int = DEFAULT_MAX_TRIES,
    max_fails: int = DEFAULT_MAX_FAILS,
    verbose: bool = True,
    rng: RandomState = None,
) -> List[Sphere]:
    """
    Generate a bath of spheres in the domain `extent`.

    If `phi_max` is None, `radii` is the list of radii to insert. Otherwise
    `radii` is a radius source (see `bubblebath.radii`) from which radii are
    drawn until they reach a target packing fraction `phi_max`.
    The domain is filled in order of decreasing radius.

    Args:
        min_distance: Minimum allowed distance between sphere surfaces.
        through_boundaries: Whether spheres can cross the domain boundaries.
        max_tries: Maximum number of insertion tries for each sphere. When
            reached, the sphere is discarded and the algorithm moves on.
        max_fails: Maximum number of discarded spheres. Once exceeded, the
            remaining spheres are abandoned.
        verbose: Whether info logs should be emitted.
        rng: Seed or numpy Generator used for all random draws.
    """
    spheres: List[Sphere] = []
    bubblebath_inplace(
        spheres, radii, extent, phi_max,
        min_distance=min_distance,
        through_boundaries=through_boundaries,
        max_tries=max_tries,
        max_fails=max_fails,
        verbose=verbose,
        rng=rng,
    )
    return spheres


def bubblebath_inplace(
    spheres: List[Sphere],
    radii: Any,
    extent: Extent,
    phi_max: Optional[float] = None,
    *,
    min_distance: float = 0.0,
    through_boundaries: bool = False,
    max_tries: int = DEFAULT_MAX_TRIES,
    max_fails: int = DEFAULT_MAX_FAILS,
    verbose: bool = True,
    rng: RandomState = None,
) -> None:
    """
    In-place version of `bubblebath`: append new spheres to `spheres`,
    which can be already populated. Existing entries are left untouched.

    `phi_max` does not account for spheres already in `spheres`. E.g. if
    `packing_fraction(spheres, extent)` is 0.2 and `phi_max=0.3`, new radii
    are generated for a fraction of 0.3, and the total after insertion will
    (try to) reach 0.5. Pass `phi_max=0.3 - packing_fraction(spheres, extent)`
    to target 0.3 overall.
    """
    config = PackingConfig(
        min_distance=min_distance,
        through_boundaries=through_boundaries,
        max_tries=max_tries,
        max_fails=max_fails,
        verbose=verbose,
    )
    config.validate()
    extent = as_extent(extent)
    rng = make_rng(rng)
    radii = _resolve_radii(radii, extent, phi_max, max_tries, verbose, rng)
    SpherePacker(extent, config, rng).pack(radii, spheres)
