"""
Censoring classification.

Every data point falls into exactly one of four likelihood branches,
selected from its pair of detection flags. The mapping is total: each
boolean pair has a branch, so the likelihood never falls through.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np
from numpy.typing import NDArray


class CensorClass(IntEnum):
    """Likelihood branch for a point, keyed by its censoring flags."""

    BOTH_DETECTED = 0
    X_DETECTED_Y_CENSORED = 1
    Y_DETECTED_X_CENSORED = 2
    BOTH_CENSORED = 3


def classify(censored_x: bool, censored_y: bool) -> CensorClass:
    """Return the likelihood branch for one point."""
    return CensorClass(int(bool(censored_x)) * 2 + int(bool(censored_y)))


def classify_array(censored_x, censored_y) -> NDArray[np.int64]:
    """Vectorized classify(); returns CensorClass codes as an int array."""
    cx = np.asarray(censored_x, dtype=bool)
    cy = np.asarray(censored_y, dtype=bool)
    return cx.astype(np.int64) * 2 + cy.astype(np.int64)
