"""
Command-line front end.

    python -m pyorthoreg DATA NBOOTS RUN_NAME [options]

Builds a RunConfig (all configuration errors surface here, before any
fitting), runs the bootstrap, writes the bundle, and prints the summary.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pyorthoreg.core.exceptions import ConfigurationError, PyOrthoRegError
from pyorthoreg.censored import RunConfig, run

logger = logging.getLogger("pyorthoreg")

EXIT_CONFIGURATION = 2
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyorthoreg",
        description=(
            "Orthogonal regression of censored, log-scaled data with "
            "bootstrap uncertainties"
        ),
    )
    parser.add_argument('dataset', help='Input table of (value, sigma, flag) triplets')
    parser.add_argument('nboots', type=int, help='Number of bootstrap trials')
    parser.add_argument('run_name', help='Name of the output directory for this run')
    parser.add_argument(
        '--output-dir', '-o',
        default='.',
        help='Parent directory for run outputs (default: current directory)'
    )
    parser.add_argument(
        '--overwrite',
        action='store_true',
        help='Replace the contents of an existing run directory'
    )
    parser.add_argument('--base', type=float, default=10.0,
                        help='Logarithmic base of the tabulated values (default: 10)')
    parser.add_argument('--rho', type=float, default=0.0,
                        help='Correlation of x and y measurement errors (unverified if nonzero)')
    parser.add_argument('--plot', action='store_true', help='Write fit.png')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--seed', type=int, default=None, help='Resampling seed')
    parser.add_argument('--jobs', '-j', type=int, default=1,
                        help='Worker threads for bootstrap trials')
    parser.add_argument('--x-column', type=int, default=0,
                        help='Triplet position of x in the table (default: 0)')
    parser.add_argument('--y-column', type=int, default=1,
                        help='Triplet position of y in the table (default: 1)')
    parser.add_argument('--max-nboots', type=int, default=10000,
                        help='Refuse runs with more trials than this')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RunConfig.for_run(
            args.dataset,
            args.nboots,
            args.run_name,
            output_dir=args.output_dir,
            overwrite=args.overwrite,
            base=args.base,
            rho=args.rho,
            plot=args.plot,
            verbose=args.verbose,
            seed=args.seed,
            n_jobs=args.jobs,
            x_column=args.x_column,
            y_column=args.y_column,
            max_nboots=args.max_nboots,
        )
        solution, stats = run(config)
    except ConfigurationError as e:
        logger.error("configuration error: %s", e)
        return EXIT_CONFIGURATION
    except PyOrthoRegError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return EXIT_FAILURE

    print(solution.summary())
    print(f"\nResults written to {config.run_dir}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
