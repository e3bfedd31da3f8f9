"""
RunConfig: immutable, validated configuration of one bootstrap run.

Every check that can fail without fitting anything happens in
RunConfig.for_run(), so a configuration problem surfaces as a
ConfigurationError before any computation begins.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from pathlib import Path

from pyorthoreg.core.exceptions import ConfigurationError
from pyorthoreg.censored._stats import MIN_BOOTSTRAPS

logger = logging.getLogger(__name__)

DEFAULT_MAX_NBOOTS = 10000
LARGE_NBOOTS = 1000


@dataclass(frozen=True)
class RunConfig:
    """
    Frozen configuration for run().

    Attributes:
        dataset_path: Input table.
        nboots: Number of bootstrap trials.
        run_name: Identifier; results go to output_dir / run_name.
        output_dir: Parent directory for run outputs.
        overwrite: Allow reusing an existing run directory.
        base: Logarithmic base of the tabulated values.
        rho: Measurement error correlation passed to LikelihoodModel.
        plot: Write fit.png alongside the results.
        verbose: Log at DEBUG instead of INFO.
        seed: Seed for the resampling generator.
        n_jobs: Worker threads for bootstrap trials.
        x_column, y_column: Which (value, sigma, flag) triplets of the
            table hold x and y.
    """
    dataset_path: Path
    nboots: int
    run_name: str
    output_dir: Path
    overwrite: bool
    base: float
    rho: float
    plot: bool
    verbose: bool
    seed: int | None
    n_jobs: int
    x_column: int
    y_column: int

    @classmethod
    def for_run(
        cls,
        dataset_path,
        nboots: int,
        run_name: str,
        *,
        output_dir=".",
        overwrite: bool = False,
        base: float = 10.0,
        rho: float = 0.0,
        plot: bool = False,
        verbose: bool = False,
        seed: int | None = None,
        n_jobs: int = 1,
        x_column: int = 0,
        y_column: int = 1,
        max_nboots: int = DEFAULT_MAX_NBOOTS,
    ) -> RunConfig:
        """
        Create a run configuration with validation.

        Args:
            dataset_path: Path to the input table. Must exist.
            nboots: Bootstrap trials, MIN_BOOTSTRAPS <= nboots <= max_nboots.
            run_name: Non-empty name without path separators.
            output_dir: Parent directory (default: current directory).
            overwrite: Permit an existing output_dir / run_name.
            base: Logarithmic base of the data, > 1 (default: 10).
            rho: Error correlation in [-1, 1].
            plot: Produce a plot.
            verbose: Verbose logging.
            seed: Resampling seed.
            n_jobs: Worker threads, >= 1.
            x_column, y_column: Distinct triplet positions in the table.
            max_nboots: Ceiling on nboots; raise it explicitly for very
                large runs.

        Returns:
            Validated RunConfig.

        Raises:
            ConfigurationError: If any setting is invalid or the run
                directory exists and overwrite is False.
        """
        dataset_path = Path(dataset_path)
        if not dataset_path.is_file():
            raise ConfigurationError(
                f"dataset not found: {dataset_path}",
                parameter="dataset_path",
                value=str(dataset_path),
            )

        if isinstance(nboots, bool) or int(nboots) != nboots:
            raise ConfigurationError(
                f"nboots must be an integer, got {nboots!r}",
                parameter="nboots",
                value=nboots,
            )
        nboots = int(nboots)
        if nboots < MIN_BOOTSTRAPS:
            raise ConfigurationError(
                f"nboots must be >= {MIN_BOOTSTRAPS} for dispersion "
                f"statistics, got {nboots}",
                parameter="nboots",
                value=nboots,
            )
        if nboots > max_nboots:
            raise ConfigurationError(
                f"nboots={nboots} exceeds the limit of {max_nboots}; "
                f"pass a larger max_nboots to run it anyway",
                parameter="nboots",
                value=nboots,
            )
        if nboots > LARGE_NBOOTS:
            message = f"nboots={nboots} is large; the run may take a long time"
            logger.warning(message)
            warnings.warn(message, UserWarning, stacklevel=2)

        run_name = str(run_name)
        if not run_name.strip() or Path(run_name).name != run_name:
            raise ConfigurationError(
                f"run_name must be a non-empty name without path "
                f"separators, got {run_name!r}",
                parameter="run_name",
                value=run_name,
            )

        if not math.isfinite(base) or base <= 1:
            raise ConfigurationError(
                f"base must be finite and > 1, got {base}",
                parameter="base",
                value=base,
            )

        if not -1.0 <= rho <= 1.0:
            raise ConfigurationError(
                f"rho must be in [-1, 1], got {rho}",
                parameter="rho",
                value=rho,
            )

        if n_jobs < 1:
            raise ConfigurationError(
                f"n_jobs must be >= 1, got {n_jobs}",
                parameter="n_jobs",
                value=n_jobs,
            )

        if x_column < 0 or y_column < 0 or x_column == y_column:
            raise ConfigurationError(
                f"x_column and y_column must be distinct non-negative "
                f"positions, got {x_column} and {y_column}",
                parameter="x_column",
                value=(x_column, y_column),
            )

        output_dir = Path(output_dir)
        run_dir = output_dir / run_name
        if run_dir.exists() and not overwrite:
            raise ConfigurationError(
                f"output directory {run_dir} already exists; "
                f"set overwrite=True to replace its contents",
                parameter="overwrite",
                value=str(run_dir),
            )

        return cls(
            dataset_path=dataset_path,
            nboots=nboots,
            run_name=run_name,
            output_dir=output_dir,
            overwrite=overwrite,
            base=float(base),
            rho=float(rho),
            plot=plot,
            verbose=verbose,
            seed=seed,
            n_jobs=n_jobs,
            x_column=x_column,
            y_column=y_column,
        )

    @property
    def run_dir(self) -> Path:
        """Directory that receives this run's outputs."""
        return self.output_dir / self.run_name
