"""
Public API for censored orthogonal regression.

    fit(design) -> FitSolution
    bootstrap(design, nboots) -> BootstrapSolution
    summarize(solution) -> SummaryStats
    run(config) -> (BootstrapSolution, SummaryStats)

Each function validates inputs, builds a CensoredDesign if needed,
dispatches to the CPU backend, and wraps the Result in a Solution.
"""

from __future__ import annotations

import logging

import numpy as np

from pyorthoreg.core.exceptions import ConvergenceError, DimensionError, ValidationError
from pyorthoreg.core.result import Result
from pyorthoreg.core.compute.timing import Timer, timed
from pyorthoreg.censored._bootstrap import run_ensemble
from pyorthoreg.censored._common import INITIAL_GUESS, EnsembleParams, SummaryStats
from pyorthoreg.censored._likelihood import LikelihoodModel
from pyorthoreg.censored._resample import make_rng, resample_indices
from pyorthoreg.censored._stats import summarize_ensemble
from pyorthoreg.censored.backends.cpu import CPUFitBackend
from pyorthoreg.censored.config import RunConfig
from pyorthoreg.censored.design import CensoredDesign
from pyorthoreg.censored.io import PLOT_NAME, read_table, save_bundle
from pyorthoreg.censored.solution import BootstrapSolution, FitSolution

logger = logging.getLogger(__name__)


def _as_design(data) -> CensoredDesign:
    if isinstance(data, CensoredDesign):
        return data
    return CensoredDesign.from_table(data)


def fit(
    data,
    *,
    rho: float = 0.0,
    base: float = 10.0,
    initial=INITIAL_GUESS,
    minimizer=None,
) -> FitSolution:
    """
    Fit one censored orthogonal regression line.

    Parameters
    ----------
    data : CensoredDesign or array-like
        Dataset, or an (n, 6) table with columns x, σx, cx, y, σy, cy.
    rho : float
        Measurement error correlation (unverified for rho != 0).
    base : float
        Logarithmic base of the data.
    initial : sequence of 3 floats
        Starting (intercept, slope, scatter).
    minimizer : Minimizer or None
        Defaults to LevenbergMarquardtMinimizer().

    Returns
    -------
    FitSolution

    Raises
    ------
    ConfigurationError
        If the dataset has 3 or fewer points.
    ConvergenceError
        If the minimizer does not converge.
    """
    design = _as_design(data)
    backend = CPUFitBackend(LikelihoodModel(base=base, rho=rho), minimizer, initial)
    result = backend.solve(design)

    params = result.params
    if not params.converged:
        raise ConvergenceError(
            f"fit did not converge: {params.message}",
            iterations=params.n_function_evals,
            final_change=params.objective,
            reason=params.message,
        )
    return FitSolution(_result=result, _design=design)


def bootstrap(
    data,
    nboots: int,
    *,
    seed: int | np.random.Generator | None = None,
    indices=None,
    rho: float = 0.0,
    base: float = 10.0,
    initial=INITIAL_GUESS,
    minimizer=None,
    n_jobs: int = 1,
) -> BootstrapSolution:
    """
    Fit the original data and nboots resampled copies.

    Parameters
    ----------
    data : CensoredDesign or array-like
        Dataset, or an (n, 6) table.
    nboots : int
        Number of bootstrap trials, >= 0. With nboots=0 only the original
        fit is computed.
    seed : int, Generator or None
        Seed (or generator) for the index matrix.
    indices : array-like or None
        Precomputed (nboots, n) index matrix, e.g. from a saved bundle, to
        replay a run exactly. Overrides seed.
    rho, base, initial, minimizer
        As for fit().
    n_jobs : int
        Worker threads for trials; results do not depend on it.

    Returns
    -------
    BootstrapSolution
        Trials that fail to converge are kept, flagged, and logged.
    """
    design = _as_design(data)
    if nboots < 0:
        raise ValidationError(f"nboots must be >= 0, got {nboots}")

    timer = Timer()
    timer.start()

    with timer.section('resampling'):
        if indices is None:
            idx = resample_indices(design.n, nboots, make_rng(seed))
        else:
            idx = np.array(indices, dtype=np.int64)
            if idx.shape != (nboots, design.n):
                raise DimensionError(
                    f"indices: expected shape ({nboots}, {design.n}), got {idx.shape}"
                )
            if idx.size and (idx.min() < 0 or idx.max() >= design.n):
                raise ValidationError(
                    f"indices: entries must lie in [0, {design.n - 1}]"
                )
    idx.setflags(write=False)

    backend = CPUFitBackend(LikelihoodModel(base=base, rho=rho), minimizer, initial)

    with timer.section('fitting'):
        results = run_ensemble(design, idx, backend, n_jobs=n_jobs)

    timer.stop()

    warnings_list = [
        f"trial {i}: {w}"
        for i, r in enumerate(results)
        for w in r.warnings
    ]
    ensemble = EnsembleParams(
        fits=tuple(r.params for r in results),
        indices=idx,
        nboots=nboots,
        seed=seed if isinstance(seed, int) else None,
    )

    result = Result(
        params=ensemble,
        info={
            'method': results[0].info['method'],
            'n': design.n,
            'nboots': nboots,
            'n_failed': ensemble.n_failed,
            'n_jobs': n_jobs,
            'base': base,
            'rho': rho,
            'diagnostics': results[0].info['diagnostics'],
        },
        timing=timer.result(),
        backend_name=backend.name,
        warnings=tuple(warnings_list),
    )
    return BootstrapSolution(_result=result, _design=design)


def summarize(solution) -> SummaryStats:
    """
    Summary statistics of a bootstrap run.

    Accepts a BootstrapSolution or an EnsembleParams. Raises
    ConfigurationError if nboots < 2.
    """
    if isinstance(solution, BootstrapSolution):
        return summarize_ensemble(solution.ensemble)
    return summarize_ensemble(solution)


def run(config: RunConfig) -> tuple[BootstrapSolution, SummaryStats]:
    """
    Execute a configured run: read, bootstrap, summarize, persist, plot.

    The configuration was validated when it was built, so no fitting
    starts unless the whole run can be carried out.
    """
    with timed() as timer:
        design = read_table(
            config.dataset_path,
            x_column=config.x_column,
            y_column=config.y_column,
        )
        logger.info(
            "run %s: n=%d, nboots=%d, seed=%s",
            config.run_name, design.n, config.nboots, config.seed,
        )

        solution = bootstrap(
            design,
            config.nboots,
            seed=config.seed,
            base=config.base,
            rho=config.rho,
            n_jobs=config.n_jobs,
        )
        stats = summarize(solution)

        save_bundle(
            config.run_dir, design, solution.ensemble, stats,
            overwrite=config.overwrite,
        )

        if config.plot:
            from pyorthoreg.censored.plotting import plot_fit
            plot_fit(design, solution.ensemble, config.run_dir / PLOT_NAME)

    logger.info("run %s finished in %.2fs", config.run_name,
                timer.result()['total_seconds'])
    return solution, stats
