"""
Censored orthogonal regression with bootstrap uncertainties.

Fits y = a + b x with intrinsic scatter s to two log-scaled variables
that may carry upper limits on either axis, minimizing the reciprocal
per-point likelihood, and resamples the data to estimate uncertainties.

Usage:
    from pyorthoreg.censored import read_table, fit, bootstrap, summarize

    design = read_table("data.txt")
    solution = fit(design)
    boot = bootstrap(design, nboots=1000, seed=42)
    stats = summarize(boot)
    print(stats.summary())
"""

from pyorthoreg.censored._censoring import CensorClass, classify
from pyorthoreg.censored._common import (
    FitParameters,
    FitParams,
    EnsembleParams,
    ParameterSummary,
    SummaryStats,
)
from pyorthoreg.censored._likelihood import LikelihoodModel
from pyorthoreg.censored._resample import make_rng, resample_indices
from pyorthoreg.censored.config import RunConfig
from pyorthoreg.censored.design import CensoredDesign, DataPoint
from pyorthoreg.censored.io import load_bundle, read_table, save_bundle
from pyorthoreg.censored.solution import BootstrapSolution, FitSolution
from pyorthoreg.censored.solvers import bootstrap, fit, run, summarize

__all__ = [
    "BootstrapSolution",
    "CensorClass",
    "CensoredDesign",
    "DataPoint",
    "EnsembleParams",
    "FitParameters",
    "FitParams",
    "FitSolution",
    "LikelihoodModel",
    "ParameterSummary",
    "RunConfig",
    "SummaryStats",
    "bootstrap",
    "classify",
    "fit",
    "load_bundle",
    "make_rng",
    "read_table",
    "resample_indices",
    "run",
    "save_bundle",
    "summarize",
]
