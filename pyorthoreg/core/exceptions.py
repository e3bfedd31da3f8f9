"""
Exception hierarchy for PyOrthoReg.

All exceptions inherit from PyOrthoRegError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyOrthoRegError(Exception):
    """Base exception for all PyOrthoReg errors."""
    pass


class ValidationError(PyOrthoRegError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class ConfigurationError(ValidationError):
    """
    A run configuration cannot be executed.

    Raised before any fitting begins: output location collisions without
    overwrite permission, bootstrap counts too small for dispersion
    statistics (or larger than the configured ceiling), and datasets
    smaller than the number of free parameters.

    Attributes:
        parameter: Name of the offending configuration field, if known
        value: The rejected value, if known
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        value: object = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class NumericalError(PyOrthoRegError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class ConvergenceError(PyOrthoRegError):
    """
    Iterative algorithm failed to converge.

    Raised when the least-squares minimizer stops without meeting its
    convergence criteria (typically after exhausting its function
    evaluation budget).

    Attributes:
        iterations: Number of function evaluations completed
        final_change: Final objective value, if available
        reason: Why convergence failed (minimizer message)
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
