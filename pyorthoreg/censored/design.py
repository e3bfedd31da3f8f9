"""
CensoredDesign: immutable container for two censored, log-scaled variables.

Wraps the measured x and y values, their 1-sigma uncertainties, and the
per-axis detection flags (1 = upper limit, 0 = detection). Validates inputs
at construction time, so all downstream code trusts clean data. The arrays
are copied and made read-only: bootstrap trials build new designs through
take(), the original is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pyorthoreg.core.exceptions import ConfigurationError
from pyorthoreg.core.validation import (
    check_1d,
    check_array,
    check_binary,
    check_consistent_length,
    check_finite,
    check_nonnegative,
)

# intercept, slope, intrinsic scatter
N_PARAMETERS = 3

_FIELDS = ("x", "sigma_x", "censored_x", "y", "sigma_y", "censored_y")


@dataclass(frozen=True)
class DataPoint:
    """One measurement pair. Values are already in log space."""

    x: float
    sigma_x: float
    censored_x: bool
    y: float
    sigma_y: float
    censored_y: bool


@dataclass(frozen=True)
class CensoredDesign:
    """Immutable censored dataset.

    Parameters
    ----------
    x, y : NDArray
        Log-space measured values (or upper limits where censored).
    sigma_x, sigma_y : NDArray
        1-sigma measurement uncertainties, non-negative.
    censored_x, censored_y : NDArray
        Boolean arrays, True where the value is an upper limit.
    """

    x: NDArray
    sigma_x: NDArray
    censored_x: NDArray
    y: NDArray
    sigma_y: NDArray
    censored_y: NDArray

    @classmethod
    def for_arrays(
        cls,
        x,
        sigma_x,
        censored_x,
        y,
        sigma_y,
        censored_y,
    ) -> CensoredDesign:
        """Create and validate a censored dataset.

        Parameters
        ----------
        x, sigma_x, censored_x, y, sigma_y, censored_y : array-like
            One value per data point. Censor flags accept 0/1 or bool.

        Returns
        -------
        CensoredDesign

        Raises
        ------
        ValidationError
            If arrays are non-numeric, non-finite, of inconsistent length,
            have negative uncertainties, or flags other than 0/1.
        ConfigurationError
            If there are fewer points than free parameters.
        """
        raw = dict(zip(_FIELDS, (x, sigma_x, censored_x, y, sigma_y, censored_y)))
        arrays = {}
        for name, value in raw.items():
            arr = np.atleast_1d(check_array(value, name))
            check_1d(arr, name)
            check_finite(arr, name)
            arrays[name] = arr

        check_consistent_length(
            *arrays.values(), names=tuple(arrays.keys())
        )
        check_nonnegative(arrays["sigma_x"], "sigma_x")
        check_nonnegative(arrays["sigma_y"], "sigma_y")
        check_binary(arrays["censored_x"], "censored_x")
        check_binary(arrays["censored_y"], "censored_y")

        n = arrays["x"].shape[0]
        if n < N_PARAMETERS:
            raise ConfigurationError(
                f"dataset has {n} points, fewer than the {N_PARAMETERS} "
                f"free parameters (intercept, slope, scatter)",
                parameter="n",
                value=n,
            )

        arrays["censored_x"] = arrays["censored_x"].astype(bool)
        arrays["censored_y"] = arrays["censored_y"].astype(bool)
        for arr in arrays.values():
            arr.setflags(write=False)

        return cls(**arrays)

    @classmethod
    def from_table(cls, table) -> CensoredDesign:
        """Create from an (n, 6) array with columns x, σx, cx, y, σy, cy."""
        table = np.asarray(table, dtype=np.float64)
        if table.ndim != 2 or table.shape[1] != 6:
            raise ConfigurationError(
                f"table must have shape (n, 6), got {table.shape}",
                parameter="table",
                value=table.shape,
            )
        return cls.for_arrays(*(table[:, j] for j in range(6)))

    @property
    def n(self) -> int:
        """Number of data points."""
        return len(self.x)

    @property
    def n_censored_x(self) -> int:
        return int(np.sum(self.censored_x))

    @property
    def n_censored_y(self) -> int:
        return int(np.sum(self.censored_y))

    @property
    def n_doubly_censored(self) -> int:
        """Points that are upper limits on both axes."""
        return int(np.sum(self.censored_x & self.censored_y))

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "n": self.n,
            "n_censored_x": self.n_censored_x,
            "n_censored_y": self.n_censored_y,
            "n_doubly_censored": self.n_doubly_censored,
        }

    def point(self, i: int) -> DataPoint:
        """Return the i-th data point."""
        return DataPoint(
            x=float(self.x[i]),
            sigma_x=float(self.sigma_x[i]),
            censored_x=bool(self.censored_x[i]),
            y=float(self.y[i]),
            sigma_y=float(self.sigma_y[i]),
            censored_y=bool(self.censored_y[i]),
        )

    def take(self, indices) -> CensoredDesign:
        """Build the design selected by a row of bootstrap indices."""
        idx = np.asarray(indices, dtype=np.intp)
        arrays = {name: getattr(self, name)[idx] for name in _FIELDS}
        for arr in arrays.values():
            arr.setflags(write=False)
        return CensoredDesign(**arrays)

    def to_table(self) -> NDArray:
        """Return an (n, 6) float array in input column order."""
        return np.column_stack(
            [getattr(self, name).astype(np.float64) for name in _FIELDS]
        )

    def __len__(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return (
            f"CensoredDesign(n={self.n}, censored_x={self.n_censored_x}, "
            f"censored_y={self.n_censored_y})"
        )
