"""
Bootstrap index generation.

The whole index matrix is drawn up front from one explicit generator, so
trial i always sees the same rows no matter how trials are scheduled.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyorthoreg.core.exceptions import ValidationError


def make_rng(seed: int | np.random.Generator | None = None) -> np.random.Generator:
    """Return a Generator; an existing Generator is passed through."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def resample_indices(
    n: int,
    nboots: int,
    rng: np.random.Generator,
) -> NDArray[np.int64]:
    """
    Draw an (nboots, n) matrix of row indices with replacement.

    Args:
        n: Dataset size. Must be >= 1.
        nboots: Number of bootstrap samples. Must be >= 0.
        rng: Source of randomness.

    Returns:
        int64 array; every entry lies in [0, n - 1].
    """
    if n < 1:
        raise ValidationError(f"n must be >= 1, got {n}")
    if nboots < 0:
        raise ValidationError(f"nboots must be >= 0, got {nboots}")
    return rng.integers(0, n, size=(nboots, n), dtype=np.int64)
