"""
Configuration and type definitions for sphere packing.
"""

import numpy as np
from dataclasses import dataclass
from typing import Sequence, Tuple, Union
from enum import Enum

# Type aliases
Point = np.ndarray
Position = Tuple[float, ...]
Extent = Sequence[float]
Walkmap = np.ndarray  # boolean, True where walkable

DEFAULT_MAX_TRIES = 10000
DEFAULT_MAX_FAILS = 100


class BoundaryMode(Enum):
    """How spheres crossing the domain edges are treated in a walkmap."""
    CUT = "cut"     # the part outside the domain is discarded
    WRAP = "wrap"   # periodic domain, minimum-image distances

    @classmethod
    def parse(cls, value: Union["BoundaryMode", str]) -> "BoundaryMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Mode {value!r} unrecognized. Choose between 'cut' and 'wrap'."
            ) from None


@dataclass
class PackingConfig:
    """
    Configuration parameters for the bubblebath algorithm.

    Placement:
        min_distance: Minimum allowed gap between sphere surfaces
        through_boundaries: Whether spheres may cross the domain boundaries

    Failure handling:
        max_tries: Insertion tries for each sphere. When exhausted the
            sphere is discarded and the next one is attempted.
        max_fails: Number of discarded spheres tolerated. Once exceeded,
            the remaining queue is abandoned.

    Performance tuning:
        sample_batch_size: Candidate centres drawn and tested per batch

    Output:
        verbose: Log summaries of generated/inserted spheres
    """
    min_distance: float = 0.0
    through_boundaries: bool = False

    max_tries: int = DEFAULT_MAX_TRIES
    max_fails: int = DEFAULT_MAX_FAILS

    sample_batch_size: int = 64

    verbose: bool = True

    def validate(self) -> None:
        if self.min_distance < 0:
            raise ValueError(f"min_distance must be non-negative, got {self.min_distance}.")
        if self.max_tries < 0:
            raise ValueError(f"max_tries must be non-negative, got {self.max_tries}.")
        if self.max_fails < 0:
            raise ValueError(f"max_fails must be non-negative, got {self.max_fails}.")
        if self.sample_batch_size < 1:
            raise ValueError(f"sample_batch_size must be positive, got {self.sample_batch_size}.")


@dataclass
class PackingProgress:
    """Tracks the current state of the packing algorithm."""
    requested: int = 0
    inserted: int = 0
    failed: int = 0
    aborted: bool = False

    @property
    def dropped(self) -> int:
        """Spheres that were requested but not inserted."""
        return self.requested - self.inserted

    def __str__(self) -> str:
        return f"{self.inserted}/{self.requested} new spheres inserted."
