"""
pytest configuration and shared fixtures.
"""

import matplotlib
import pytest
import numpy as np

from pyorthoreg.censored import CensoredDesign

# headless test runs render through Agg
matplotlib.use("Agg")


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def line_data(rng):
    """20 detected points scattered about y = 2x + 1."""
    n = 20
    x_true = np.linspace(0.5, 2.5, n)
    sigma = np.full(n, 0.05)
    x = x_true + rng.normal(0.0, 0.05, n)
    y = 2.0 * x_true + 1.0 + rng.normal(0.0, 0.05, n)
    flags = np.zeros(n)
    return CensoredDesign.for_arrays(x, sigma, flags, y, sigma, flags)


@pytest.fixture
def censored_data(rng):
    """Points about y = 2x + 1 with a few upper limits on each axis."""
    n = 24
    x_true = np.linspace(0.5, 2.5, n)
    x = x_true + rng.normal(0.0, 0.05, n)
    y = 2.0 * x_true + 1.0 + rng.normal(0.0, 0.05, n)
    sigma_x = np.full(n, 0.05)
    sigma_y = np.full(n, 0.05)
    cx = np.zeros(n)
    cy = np.zeros(n)

    # y upper limits sit above the line, x upper limits to its right
    cy[[3, 11, 19]] = 1
    y[[3, 11, 19]] += 0.3
    sigma_y[[3, 11, 19]] = 0.0
    cx[[6, 15]] = 1
    x[[6, 15]] += 0.3
    sigma_x[[6, 15]] = 0.0

    return CensoredDesign.for_arrays(x, sigma_x, cx, y, sigma_y, cy)


@pytest.fixture
def write_table():
    """Factory writing a design as a six-column text table."""
    def _write(path, design):
        np.savetxt(path, design.to_table(), fmt="%.12g", header="x sx cx y sy cy")
        return path
    return _write
