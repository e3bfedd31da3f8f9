"""
Solution wrappers for censored orthogonal regression results.

FitSolution and BootstrapSolution wrap Result[P] and provide
convenient accessors and summary output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pyorthoreg.core.result import Result
from pyorthoreg.censored._common import EnsembleParams, FitParams, SummaryStats
from pyorthoreg.censored._stats import summarize_ensemble

if TYPE_CHECKING:
    from pyorthoreg.censored.design import CensoredDesign


@dataclass
class FitSolution:
    """User-facing result of a single fit."""
    _result: Result[FitParams]
    _design: 'CensoredDesign'

    @property
    def params(self) -> FitParams:
        return self._result.params

    @property
    def slope(self) -> float:
        return self._result.params.slope

    @property
    def slope_unc(self) -> float:
        return self._result.params.slope_unc

    @property
    def intercept(self) -> float:
        return self._result.params.intercept

    @property
    def intercept_unc(self) -> float:
        return self._result.params.intercept_unc

    @property
    def scatter(self) -> float:
        """Intrinsic scatter, folded to be non-negative."""
        return self._result.params.scatter

    @property
    def scatter_unc(self) -> float:
        return self._result.params.scatter_unc

    @property
    def reduced_chi2(self) -> float:
        """Objective at the minimum divided by n - 3."""
        return self._result.params.reduced_chi2

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    @property
    def design(self) -> 'CensoredDesign':
        return self._design

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def predict(self, x) -> NDArray:
        """Line value a + b x at log-space x."""
        return self.intercept + self.slope * np.asarray(x, dtype=np.float64)

    def summary(self) -> str:
        p = self.params
        lines = [
            "\nCENSORED ORTHOGONAL REGRESSION\n",
            f"n = {p.n_points}, dof = {p.dof}, "
            f"converged = {p.converged}",
            "",
            f"{'':>10s} {'estimate':>12s} {'std. error':>12s}",
            f"{'slope':>10s} {p.slope:12.5f} {p.slope_unc:12.5f}",
            f"{'intercept':>10s} {p.intercept:12.5f} {p.intercept_unc:12.5f}",
            f"{'scatter':>10s} {p.scatter:12.5f} {p.scatter_unc:12.5f}",
            "",
            f"Reduced chi-square: {p.reduced_chi2:.6g}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FitSolution(slope={self.slope:.4g}, "
            f"intercept={self.intercept:.4g}, scatter={self.scatter:.4g}, "
            f"converged={self.converged})"
        )


@dataclass
class BootstrapSolution:
    """
    User-facing bootstrap ensemble.

    Holds every fit record (trial 0 is the original data) and the index
    matrix that produced trials 1..nboots.
    """
    _result: Result[EnsembleParams]
    _design: 'CensoredDesign'

    @property
    def ensemble(self) -> EnsembleParams:
        return self._result.params

    @property
    def original(self) -> FitParams:
        """Fit to the unresampled data."""
        return self._result.params.original

    @property
    def fits(self) -> tuple[FitParams, ...]:
        return self._result.params.fits

    @property
    def indices(self) -> NDArray[np.int64]:
        return self._result.params.indices

    @property
    def nboots(self) -> int:
        return self._result.params.nboots

    @property
    def n_failed(self) -> int:
        return self._result.params.n_failed

    @property
    def seed(self) -> int | None:
        return self._result.params.seed

    @property
    def design(self) -> 'CensoredDesign':
        return self._design

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def stats(self) -> SummaryStats:
        """Summary statistics; raises ConfigurationError if nboots < 2."""
        return summarize_ensemble(self.ensemble)

    def summary(self) -> str:
        o = self.original
        lines = [
            "\nCENSORED ORTHOGONAL REGRESSION BOOTSTRAP\n",
            f"n = {self._design.n}, nboots = {self.nboots}, "
            f"failed = {self.n_failed}",
            "",
            f"Original fit: slope = {o.slope:.5f}, intercept = {o.intercept:.5f}, "
            f"scatter = {o.scatter:.5f}, reduced chi2 = {o.reduced_chi2:.5g}",
        ]
        if self.nboots >= 2 and self.nboots - self.n_failed >= 2:
            lines.append(self.stats().summary())
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BootstrapSolution(nboots={self.nboots}, n={self._design.n}, "
            f"failed={self.n_failed}, backend={self.backend_name!r})"
        )
