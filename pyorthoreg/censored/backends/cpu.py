"""
CPU backend for censored orthogonal regression.

LevenbergMarquardtMinimizer: scipy.optimize.least_squares(method='lm')
    behind the Minimizer protocol.
CPUFitBackend: one fit of a CensoredDesign, producing Result[FitParams].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import least_squares

from pyorthoreg.core.exceptions import ConfigurationError
from pyorthoreg.core.protocols import Minimizer
from pyorthoreg.core.result import Result
from pyorthoreg.core.compute.timing import Timer
from pyorthoreg.censored._common import INITIAL_GUESS, FitParams
from pyorthoreg.censored._likelihood import LikelihoodModel
from pyorthoreg.censored.design import N_PARAMETERS, CensoredDesign


@dataclass(frozen=True)
class MinimizerOutput:
    """What a minimizer reports back to the fit driver."""
    params: NDArray[np.floating[Any]]
    param_uncertainties: NDArray[np.floating[Any]]
    objective_value: float
    degrees_of_freedom: int
    converged: bool
    message: str
    n_function_evals: int
    rank: int


def _standard_errors(jac: NDArray) -> tuple[NDArray, int]:
    """
    Parameter standard errors from the Jacobian at the optimum.

    Uses the SVD pseudo-inverse of J'J, dropping singular values below
    machine precision, so a flat direction yields a finite (unscaled)
    error instead of an exception.
    """
    _, s, VT = np.linalg.svd(jac, full_matrices=False)
    threshold = np.finfo(np.float64).eps * max(jac.shape) * (s[0] if s.size else 0.0)
    keep = s > threshold
    s = s[keep]
    VT = VT[:s.size]
    cov = (VT.T / s ** 2) @ VT
    return np.sqrt(np.abs(np.diag(cov))), int(s.size)


class LevenbergMarquardtMinimizer:
    """
    Levenberg-Marquardt least squares (MINPACK via scipy).

    Parameters
    ----------
    xtol, ftol, gtol : float
        MINPACK stopping tolerances.
    max_nfev : int or None
        Residual evaluation budget; None uses MINPACK's default.
    """

    def __init__(
        self,
        *,
        xtol: float = 1e-8,
        ftol: float = 1e-8,
        gtol: float = 1e-8,
        max_nfev: int | None = None,
    ):
        self.xtol = xtol
        self.ftol = ftol
        self.gtol = gtol
        self.max_nfev = max_nfev

    @property
    def name(self) -> str:
        return 'lm'

    def minimize(
        self,
        objective_fn: Callable[[NDArray], NDArray],
        initial_params,
    ) -> MinimizerOutput:
        theta0 = np.asarray(initial_params, dtype=np.float64)
        opt = least_squares(
            objective_fn,
            theta0,
            method='lm',
            xtol=self.xtol,
            ftol=self.ftol,
            gtol=self.gtol,
            max_nfev=self.max_nfev,
        )

        errors, rank = _standard_errors(opt.jac)
        m = opt.fun.shape[0]
        return MinimizerOutput(
            params=opt.x,
            param_uncertainties=errors,
            objective_value=float(np.sum(opt.fun ** 2)),
            degrees_of_freedom=m - theta0.size,
            converged=bool(opt.success),
            message=str(opt.message),
            n_function_evals=int(opt.nfev),
            rank=rank,
        )


class CPUFitBackend:
    """
    CPU backend for a single censored orthogonal fit.

    Hands the likelihood model's reciprocal-likelihood vector to the
    minimizer and turns its output into a FitParams record. A backend
    instance holds no per-fit state and can be shared across trials.
    """

    def __init__(
        self,
        model: LikelihoodModel | None = None,
        minimizer: Minimizer | None = None,
        initial=INITIAL_GUESS,
    ):
        self.model = model if model is not None else LikelihoodModel()
        self.minimizer = minimizer if minimizer is not None else LevenbergMarquardtMinimizer()
        self.initial = tuple(float(v) for v in initial)
        if len(self.initial) != N_PARAMETERS:
            raise ValueError(
                f"initial must have {N_PARAMETERS} values "
                f"(intercept, slope, scatter), got {len(self.initial)}"
            )

    @property
    def name(self) -> str:
        return f'cpu_{self.minimizer.name}'

    def solve(self, design: CensoredDesign) -> Result[FitParams]:
        """Fit design and return Result[FitParams]."""
        n = design.n
        if n <= N_PARAMETERS:
            raise ConfigurationError(
                f"need more than {N_PARAMETERS} points for a fit with "
                f"positive degrees of freedom, got {n}",
                parameter="n",
                value=n,
            )

        timer = Timer()
        timer.start()
        warnings_list: list[str] = []

        with timer.section('minimization'):
            output = self.minimizer.minimize(
                self.model.objective(design), self.initial
            )

        with timer.section('record_extraction'):
            intercept, slope, scatter = (float(v) for v in output.params)
            intercept_unc, slope_unc, scatter_unc = (
                float(v) for v in output.param_uncertainties
            )
            dof = output.degrees_of_freedom
            # s enters only as s**2, so its sign is unobservable
            scatter = abs(scatter)
            diagnostics = self.model.diagnostics(design, output.params)

        if not output.converged:
            warnings_list.append(
                f"Minimizer did not converge after "
                f"{output.n_function_evals} evaluations: {output.message}"
            )
        if output.rank < N_PARAMETERS:
            warnings_list.append(
                f"Jacobian is rank-deficient (rank={output.rank}, "
                f"expected={N_PARAMETERS}); uncertainties are unreliable"
            )

        timer.stop()

        params = FitParams(
            slope=slope,
            slope_unc=slope_unc,
            intercept=intercept,
            intercept_unc=intercept_unc,
            scatter=scatter,
            scatter_unc=scatter_unc,
            reduced_chi2=output.objective_value / dof,
            converged=output.converged,
            n_points=n,
            dof=dof,
            objective=output.objective_value,
            n_function_evals=output.n_function_evals,
            message=output.message,
        )

        return Result(
            params=params,
            info={
                'method': self.minimizer.name,
                'initial': self.initial,
                'converged': output.converged,
                'n_function_evals': output.n_function_evals,
                'message': output.message,
                'rank': output.rank,
                'diagnostics': diagnostics.as_dict(),
                'base': self.model.base,
                'rho': self.model.rho,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
