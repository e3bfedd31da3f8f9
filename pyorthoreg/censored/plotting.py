"""
Plot of a censored orthogonal regression bootstrap.

Shows the data with error bars (upper limits drawn as arrows), every
bootstrap line faintly, the median bootstrap line, and the fit to the
original data. A visualization only; nothing here feeds the statistics.
Figures are built without pyplot, so importing this module never
switches the matplotlib backend.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
from matplotlib.figure import Figure

from pyorthoreg.censored._common import EnsembleParams
from pyorthoreg.censored.design import CensoredDesign

DATA_COLOR = "#004371"
LIMIT_COLOR = "#7a7a7a"
ORIGINAL_COLOR = "#a50f15"
MEDIAN_COLOR = "#e08214"
BOOT_ALPHA = 0.03
ARROW_LENGTH = 0.15


def plot_fit(
    design: CensoredDesign,
    ensemble: EnsembleParams,
    path,
    *,
    xlabel: str = "log x",
    ylabel: str = "log y",
    dpi: int = 150,
) -> Path:
    """
    Render the fit figure and save it to path.

    Args:
        design: Original dataset.
        ensemble: Bootstrap ensemble of that dataset.
        path: Output image file.
        xlabel, ylabel: Axis labels.
        dpi: Output resolution.

    Returns:
        Path of the written image.
    """
    path = Path(path)
    # a bare Figure renders through its own Agg canvas and is never
    # registered with pyplot, so the caller's backend is left alone
    fig = Figure(figsize=(6.4, 4.8))
    ax = fig.subplots()

    span = np.ptp(design.x) or 1.0
    grid = np.linspace(design.x.min() - 0.05 * span, design.x.max() + 0.05 * span, 200)

    converged = ensemble.converged
    for fit, ok in zip(ensemble.trials, converged[1:]):
        if ok:
            ax.plot(grid, fit.intercept + fit.slope * grid,
                    color="black", alpha=BOOT_ALPHA, linewidth=1.0)

    if ensemble.nboots > 0 and np.any(converged[1:]):
        slopes = ensemble.column("slope")[1:][converged[1:]]
        intercepts = ensemble.column("intercept")[1:][converged[1:]]
        ax.plot(grid, np.median(intercepts) + np.median(slopes) * grid,
                color=MEDIAN_COLOR, linestyle="--", linewidth=1.5,
                label="bootstrap median")

    original = ensemble.original
    ax.plot(grid, original.intercept + original.slope * grid,
            color=ORIGINAL_COLOR, linewidth=2.0, label="original fit")

    detected = ~(design.censored_x | design.censored_y)
    ax.errorbar(design.x[detected], design.y[detected],
                xerr=design.sigma_x[detected], yerr=design.sigma_y[detected],
                fmt="o", color=DATA_COLOR, markersize=4, capsize=2,
                label="detections")

    limits = ~detected
    if np.any(limits):
        ax.errorbar(design.x[limits], design.y[limits],
                    xerr=np.where(design.censored_x[limits], ARROW_LENGTH, 0.0),
                    yerr=np.where(design.censored_y[limits], ARROW_LENGTH, 0.0),
                    uplims=design.censored_y[limits],
                    xuplims=design.censored_x[limits],
                    fmt="v", color=LIMIT_COLOR, markersize=4,
                    label="upper limits")

    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.legend(frameon=False, fontsize=9)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    return path
