"""
Common data structures for censored orthogonal regression.

FitParams, EnsembleParams and SummaryStats are the parameter payloads
wrapped by Result[P] and exposed through Solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray


class FitParameters(NamedTuple):
    """The quantity being optimized."""

    intercept: float
    slope: float
    intrinsic_scatter: float


INITIAL_GUESS = FitParameters(intercept=1.0, slope=1.0, intrinsic_scatter=1.0)

PARAMETER_NAMES = ("slope", "intercept", "scatter")


@dataclass(frozen=True)
class FitParams:
    """
    Parameter payload for a single fit (one bootstrap trial).

    The first seven fields form the canonical fit record; the rest are
    minimizer diagnostics.
    """
    slope: float
    slope_unc: float
    intercept: float
    intercept_unc: float
    scatter: float
    scatter_unc: float
    reduced_chi2: float
    converged: bool
    n_points: int
    dof: int
    objective: float
    n_function_evals: int
    message: str = ""

    def as_row(self) -> NDArray[np.float64]:
        """The seven record fields, in FIT_COLUMNS order."""
        return np.array([getattr(self, name) for name in FIT_COLUMNS], dtype=np.float64)

    @property
    def parameters(self) -> FitParameters:
        return FitParameters(self.intercept, self.slope, self.scatter)


FIT_COLUMNS = tuple(f.name for f in fields(FitParams))[:7]


@dataclass(frozen=True)
class EnsembleParams:
    """
    Parameter payload for a bootstrap run.

    - fits: nboots + 1 fit records; fits[0] is the original data
    - indices: (nboots, n) resampling matrix; row i rebuilt trial i + 1
    - seed: seed the index matrix was drawn with, if any
    """
    fits: tuple[FitParams, ...]
    indices: NDArray[np.int64]
    nboots: int
    seed: int | None = None

    @property
    def original(self) -> FitParams:
        return self.fits[0]

    @property
    def trials(self) -> tuple[FitParams, ...]:
        """Bootstrap trials 1..nboots."""
        return self.fits[1:]

    @property
    def converged(self) -> NDArray[np.bool_]:
        return np.array([f.converged for f in self.fits], dtype=bool)

    @property
    def n_failed(self) -> int:
        """Bootstrap trials whose minimizer did not converge."""
        return int(np.sum(~self.converged[1:]))

    def table(self) -> NDArray[np.float64]:
        """(nboots + 1, 7) array of fit records in FIT_COLUMNS order."""
        return np.vstack([f.as_row() for f in self.fits])

    def column(self, name: str) -> NDArray[np.float64]:
        """One FIT_COLUMNS field across all trials."""
        return np.array([getattr(f, name) for f in self.fits], dtype=np.float64)


@dataclass(frozen=True)
class ParameterSummary:
    """Point estimate and bootstrap dispersion of one parameter."""
    original_value: float
    median: float
    stdev: float
    median_uncertainty: float


@dataclass(frozen=True)
class SummaryStats:
    """Per-parameter summary of a bootstrap ensemble."""
    slope: ParameterSummary
    intercept: ParameterSummary
    scatter: ParameterSummary
    nboots: int
    n_valid: int

    @property
    def n_failed(self) -> int:
        return self.nboots - self.n_valid

    def __getitem__(self, name: str) -> ParameterSummary:
        if name not in PARAMETER_NAMES:
            raise KeyError(
                f"SummaryStats has no parameter '{name}'. "
                f"Available: {PARAMETER_NAMES}"
            )
        return getattr(self, name)

    def table(self) -> NDArray[np.float64]:
        """(3, 4) array; rows follow PARAMETER_NAMES."""
        return np.array([
            [s.original_value, s.median, s.stdev, s.median_uncertainty]
            for s in (self[name] for name in PARAMETER_NAMES)
        ], dtype=np.float64)

    def summary(self) -> str:
        """
        Console report.

        Produces:
            BOOTSTRAP SUMMARY (nboots=200, valid=200)

                        original     median      std. dev   median unc.
            slope        2.00123    2.00456      0.01234      0.01111
            ...
        """
        lines = [
            f"\nBOOTSTRAP SUMMARY (nboots={self.nboots}, valid={self.n_valid})\n",
            f"{'':>10s} {'original':>12s} {'median':>12s} "
            f"{'std. dev':>12s} {'median unc.':>12s}",
        ]
        for name in PARAMETER_NAMES:
            s = self[name]
            lines.append(
                f"{name:>10s} {s.original_value:12.5f} {s.median:12.5f} "
                f"{s.stdev:12.5f} {s.median_uncertainty:12.5f}"
            )
        return "\n".join(lines)
