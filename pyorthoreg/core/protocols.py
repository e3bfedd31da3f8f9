"""
Core protocols for PyOrthoReg.

These define structural interfaces that fitting components must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so that
any least-squares library can be dropped in behind a small adapter.

Design Principles:
    - Minimal contracts: prescribe only what the fitting loop needs
    - Type-safe: use generics to preserve type information through pipelines
"""

from typing import Protocol, TypeVar, Any, Callable, runtime_checkable

import numpy as np
from numpy.typing import NDArray

P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class Minimizer(Protocol):
    """
    Protocol for nonlinear least-squares minimizers.

    A minimizer receives a residual function r(theta) -> (m,) and a starting
    point theta0 -> (k,), and returns a MinimizerOutput-like record with
    attributes:

        params: best-fit parameters, shape (k,)
        param_uncertainties: standard errors, shape (k,)
        objective_value: sum of squared residuals at the optimum
        degrees_of_freedom: m - k
        converged: whether the stopping criteria were met
        message: human-readable status from the underlying library
        n_function_evals: number of residual evaluations
        rank: numerical rank of the Jacobian at the optimum

    Minimizers never raise on non-convergence; they report it through
    ``converged`` so that callers decide whether it is fatal.
    """

    @property
    def name(self) -> str:
        """Minimizer identifier, e.g. 'lm'."""
        ...

    def minimize(
        self,
        objective_fn: Callable[[NDArray[np.floating[Any]]], NDArray[np.floating[Any]]],
        initial_params: NDArray[np.floating[Any]],
    ) -> Any:
        """Minimize sum(objective_fn(theta)**2) starting from initial_params."""
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for fitting backends.

    Each backend takes a design (a dataset) and produces a parameter
    payload wrapped in a Result envelope. Backends are stateless with
    respect to the data: all configuration is fixed at construction time,
    which makes a single backend instance safe to share across bootstrap
    trials and worker threads.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_lm'.
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the fit.

        Args:
            design: Domain-specific data container

        Returns:
            Result envelope containing parameter payload and metadata

        Raises:
            ValidationError: If design is invalid for this backend
        """
        ...
