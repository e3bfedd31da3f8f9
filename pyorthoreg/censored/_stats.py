"""
Reduction of a bootstrap ensemble to per-parameter summary statistics.

Trial 0 supplies the point estimate; dispersion comes only from the
converged bootstrap trials 1..nboots:

    median      median of the trial estimates
    stdev       sample standard deviation (ddof=1) of the trial estimates
    median_unc  median of the minimizer-reported standard errors
"""

from __future__ import annotations

import numpy as np

from pyorthoreg.core.exceptions import ConfigurationError, NumericalError
from pyorthoreg.censored._common import (
    PARAMETER_NAMES,
    EnsembleParams,
    ParameterSummary,
    SummaryStats,
)

MIN_BOOTSTRAPS = 2


def summarize_ensemble(ensemble: EnsembleParams) -> SummaryStats:
    """Compute SummaryStats; never mutates the ensemble."""
    if ensemble.nboots < MIN_BOOTSTRAPS:
        raise ConfigurationError(
            f"nboots={ensemble.nboots}: at least {MIN_BOOTSTRAPS} bootstrap "
            f"trials are needed for a standard deviation",
            parameter="nboots",
            value=ensemble.nboots,
        )

    valid = ensemble.converged[1:]
    n_valid = int(np.sum(valid))
    if n_valid < MIN_BOOTSTRAPS:
        raise NumericalError(
            f"only {n_valid} of {ensemble.nboots} bootstrap trials converged; "
            f"at least {MIN_BOOTSTRAPS} are needed"
        )

    summaries = {}
    for name in PARAMETER_NAMES:
        values = ensemble.column(name)
        errors = ensemble.column(f"{name}_unc")
        trial_values = values[1:][valid]
        summaries[name] = ParameterSummary(
            original_value=float(values[0]),
            median=float(np.median(trial_values)),
            stdev=float(np.std(trial_values, ddof=1)),
            median_uncertainty=float(np.median(errors[1:][valid])),
        )

    return SummaryStats(
        **summaries,
        nboots=ensemble.nboots,
        n_valid=n_valid,
    )
