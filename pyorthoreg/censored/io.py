"""
Reading input tables and persisting run bundles.

Input tables are whitespace- or comma-separated numeric text with '#'
comments. Columns come in (value, sigma, flag) triplets, one per measured
quantity; two to five quantities are accepted and two of them are picked
as x and y.

A run bundle holds everything needed to replay every trial without the
source table:

    bundle.npz   data, index matrix, fit table, diagnostics, summary table
    fits.csv     one row per trial (human-readable copy)
    summary.csv  one row per parameter (human-readable copy)
    fit.png      optional figure, written by the run driver
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from pyorthoreg.core.exceptions import ConfigurationError, ValidationError
from pyorthoreg.censored._common import (
    FIT_COLUMNS,
    PARAMETER_NAMES,
    EnsembleParams,
    FitParams,
    ParameterSummary,
    SummaryStats,
)
from pyorthoreg.censored.design import CensoredDesign

logger = logging.getLogger(__name__)

BUNDLE_NAME = "bundle.npz"
FITS_CSV = "fits.csv"
SUMMARY_CSV = "summary.csv"
PLOT_NAME = "fit.png"

# everything a run writes; cleared before a bundle is rewritten
BUNDLE_FILES = (BUNDLE_NAME, FITS_CSV, SUMMARY_CSV, PLOT_NAME)

MIN_QUANTITIES = 2
MAX_QUANTITIES = 5

_SUMMARY_COLUMNS = ("original_value", "median", "stdev", "median_uncertainty")


def read_table(path, *, x_column: int = 0, y_column: int = 1) -> CensoredDesign:
    """
    Load a censored dataset from a text table.

    Args:
        path: Table file.
        x_column: Triplet position of the x quantity.
        y_column: Triplet position of the y quantity.

    Returns:
        CensoredDesign built from the selected triplets.

    Raises:
        ValidationError: If the table is empty, non-numeric, or does not
            hold 2-5 (value, sigma, flag) triplets.
        ConfigurationError: If a column position is out of range.
    """
    path = Path(path)
    # strip comments and edge whitespace so rows split into equal field counts
    lines = (line.split("#", 1)[0].strip() for line in path.read_text().splitlines())
    text = "\n".join(line for line in lines if line)
    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=r"[\s,]+",
            header=None,
            engine="python",
        )
    except pd.errors.EmptyDataError as e:
        raise ValidationError(f"{path}: table is empty") from e
    except pd.errors.ParserError as e:
        raise ValidationError(f"{path}: rows have differing column counts: {e}") from e

    n_cols = df.shape[1]
    if n_cols % 3 != 0 or not MIN_QUANTITIES <= n_cols // 3 <= MAX_QUANTITIES:
        raise ValidationError(
            f"{path}: expected {3 * MIN_QUANTITIES}-{3 * MAX_QUANTITIES} "
            f"columns in (value, sigma, flag) triplets, got {n_cols}"
        )

    n_quantities = n_cols // 3
    for name, col in (("x_column", x_column), ("y_column", y_column)):
        if not 0 <= col < n_quantities:
            raise ConfigurationError(
                f"{name}={col} is out of range for a table with "
                f"{n_quantities} quantities",
                parameter=name,
                value=col,
            )

    try:
        values = df.to_numpy(dtype=np.float64)
    except ValueError as e:
        raise ValidationError(f"{path}: non-numeric entries: {e}") from e

    xs = values[:, 3 * x_column:3 * x_column + 3]
    ys = values[:, 3 * y_column:3 * y_column + 3]
    design = CensoredDesign.for_arrays(
        xs[:, 0], xs[:, 1], xs[:, 2],
        ys[:, 0], ys[:, 1], ys[:, 2],
    )
    logger.info("read %d points from %s", design.n, path)
    return design


def save_bundle(
    run_dir,
    design: CensoredDesign,
    ensemble: EnsembleParams,
    stats: SummaryStats | None = None,
    *,
    overwrite: bool = False,
) -> Path:
    """
    Write a run bundle into run_dir.

    With overwrite=True, files left by an earlier run (see BUNDLE_FILES)
    are removed first so results from two runs never mix.

    Returns:
        Path of bundle.npz.

    Raises:
        ConfigurationError: If run_dir exists and overwrite is False.
    """
    run_dir = Path(run_dir)
    try:
        run_dir.mkdir(parents=True, exist_ok=overwrite)
    except FileExistsError as e:
        raise ConfigurationError(
            f"output directory {run_dir} already exists; "
            f"set overwrite=True to replace its contents",
            parameter="overwrite",
            value=str(run_dir),
        ) from e

    stale = [run_dir / name for name in BUNDLE_FILES if (run_dir / name).exists()]
    for old in stale:
        old.unlink()
    if stale:
        logger.info("removed %d files of a previous run from %s", len(stale), run_dir)

    fits = ensemble.fits
    arrays = {
        "data": design.to_table(),
        "indices": np.asarray(ensemble.indices, dtype=np.int64),
        "fits": ensemble.table(),
        "converged": ensemble.converged,
        "n_points": np.array([f.n_points for f in fits], dtype=np.int64),
        "dof": np.array([f.dof for f in fits], dtype=np.int64),
        "objective": np.array([f.objective for f in fits], dtype=np.float64),
        "n_function_evals": np.array([f.n_function_evals for f in fits], dtype=np.int64),
        "messages": np.array([f.message for f in fits], dtype=str),
        "nboots": np.array(ensemble.nboots, dtype=np.int64),
        "seed": np.array(-1 if ensemble.seed is None else ensemble.seed, dtype=np.int64),
    }
    if stats is not None:
        arrays["stats"] = stats.table()
        arrays["n_valid"] = np.array(stats.n_valid, dtype=np.int64)

    bundle_path = run_dir / BUNDLE_NAME
    np.savez(bundle_path, **arrays)

    fits_df = pd.DataFrame(ensemble.table(), columns=list(FIT_COLUMNS))
    fits_df.insert(0, "trial", np.arange(len(fits)))
    fits_df["converged"] = ensemble.converged
    fits_df.to_csv(run_dir / FITS_CSV, index=False)

    if stats is not None:
        summary_df = pd.DataFrame(
            stats.table(), index=list(PARAMETER_NAMES), columns=list(_SUMMARY_COLUMNS)
        )
        summary_df.to_csv(run_dir / SUMMARY_CSV, index_label="parameter")

    logger.info("wrote run bundle to %s", run_dir)
    return bundle_path


def load_bundle(path) -> tuple[CensoredDesign, EnsembleParams, SummaryStats | None]:
    """
    Load a bundle written by save_bundle.

    Args:
        path: bundle.npz, or the run directory containing it.

    Returns:
        (design, ensemble, stats); stats is None if none was saved.
    """
    path = Path(path)
    if path.is_dir():
        path = path / BUNDLE_NAME

    with np.load(path, allow_pickle=False) as bundle:
        design = CensoredDesign.from_table(bundle["data"])

        table = bundle["fits"]
        fits = tuple(
            FitParams(
                **{name: float(table[i, j]) for j, name in enumerate(FIT_COLUMNS)},
                converged=bool(bundle["converged"][i]),
                n_points=int(bundle["n_points"][i]),
                dof=int(bundle["dof"][i]),
                objective=float(bundle["objective"][i]),
                n_function_evals=int(bundle["n_function_evals"][i]),
                message=str(bundle["messages"][i]),
            )
            for i in range(table.shape[0])
        )
        seed = int(bundle["seed"])
        ensemble = EnsembleParams(
            fits=fits,
            indices=bundle["indices"].copy(),
            nboots=int(bundle["nboots"]),
            seed=None if seed < 0 else seed,
        )

        stats = None
        if "stats" in bundle.files:
            rows = bundle["stats"]
            stats = SummaryStats(
                **{
                    name: ParameterSummary(*(float(v) for v in rows[i]))
                    for i, name in enumerate(PARAMETER_NAMES)
                },
                nboots=ensemble.nboots,
                n_valid=int(bundle["n_valid"]),
            )

    return design, ensemble, stats
