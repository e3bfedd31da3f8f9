"""
Bootstrap ensemble of censored orthogonal fits.

Trial 0 fits the original design; trial i (1..nboots) fits the design
rebuilt from row i-1 of a precomputed index matrix. A bootstrap trial
whose fit raises is recorded as unconverged instead of ending the run.
Trials are independent: each writes only its own slot, so they may run on
a thread pool with a single join before the ensemble is assembled.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import NDArray

from pyorthoreg.core.exceptions import (
    DimensionError,
    PyOrthoRegError,
    ValidationError,
)
from pyorthoreg.core.protocols import Backend
from pyorthoreg.core.result import Result
from pyorthoreg.censored._common import FitParams
from pyorthoreg.censored.design import N_PARAMETERS, CensoredDesign

logger = logging.getLogger(__name__)


def _trial_design(design: CensoredDesign, indices: NDArray, trial: int) -> CensoredDesign:
    if trial == 0:
        return design
    return design.take(indices[trial - 1])


def _failed_result(
    design: CensoredDesign,
    backend_name: str,
    error: Exception,
) -> Result[FitParams]:
    """Unconverged record standing in for a trial whose fit raised."""
    message = f"{type(error).__name__}: {error}"
    nan = float("nan")
    params = FitParams(
        slope=nan,
        slope_unc=nan,
        intercept=nan,
        intercept_unc=nan,
        scatter=nan,
        scatter_unc=nan,
        reduced_chi2=nan,
        converged=False,
        n_points=design.n,
        dof=design.n - N_PARAMETERS,
        objective=nan,
        n_function_evals=0,
        message=message,
    )
    return Result(
        params=params,
        info={'error': type(error).__name__, 'message': message},
        timing=None,
        backend_name=backend_name,
        warnings=(f"fit raised {message}",),
    )


def run_ensemble(
    design: CensoredDesign,
    indices: NDArray,
    backend: Backend,
    *,
    n_jobs: int = 1,
) -> list[Result[FitParams]]:
    """
    Fit the original design and every bootstrap row.

    Args:
        design: Original dataset, never modified.
        indices: (nboots, n) resampling matrix; nboots may be 0.
        backend: Object with solve(design) -> Result[FitParams].
        n_jobs: Worker threads. 1 runs trials in order on this thread.

    Returns:
        nboots + 1 results; element 0 is the original fit.
    """
    indices = np.asarray(indices)
    if indices.ndim != 2 or indices.shape[1] != design.n:
        raise DimensionError(
            f"indices: expected shape (nboots, {design.n}), got {indices.shape}"
        )
    if n_jobs < 1:
        raise ValidationError(f"n_jobs must be >= 1, got {n_jobs}")

    n_trials = indices.shape[0] + 1
    results: list[Result[FitParams] | None] = [None] * n_trials

    def run_trial(trial: int) -> None:
        trial_design = _trial_design(design, indices, trial)
        try:
            result = backend.solve(trial_design)
        except (PyOrthoRegError, np.linalg.LinAlgError, ValueError) as e:
            # the original fit has nothing to fall back on
            if trial == 0:
                raise
            logger.warning("bootstrap trial %d failed: %s", trial, e)
            results[trial] = _failed_result(trial_design, backend.name, e)
            return
        if not result.params.converged:
            label = "original fit" if trial == 0 else f"bootstrap trial {trial}"
            logger.warning("%s did not converge: %s", label, result.params.message)
        results[trial] = result

    if n_jobs == 1:
        for trial in range(n_trials):
            run_trial(trial)
    else:
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            # list() re-raises the first worker exception at the join
            list(executor.map(run_trial, range(n_trials)))

    n_failed = sum(1 for r in results[1:] if not r.params.converged)
    logger.info(
        "bootstrap finished: %d trials, %d failed to converge",
        n_trials - 1, n_failed,
    )
    return results
