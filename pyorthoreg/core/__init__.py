"""
Core infrastructure for PyOrthoReg.

This module provides shared abstractions and utilities used by the
censored-regression package.

Key components:
    protocols: Minimizer, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing
"""

from pyorthoreg.core.protocols import Minimizer, Backend
from pyorthoreg.core.result import Result
from pyorthoreg.core.exceptions import (
    PyOrthoRegError,
    ValidationError,
    DimensionError,
    ConfigurationError,
    NumericalError,
    ConvergenceError,
)

__all__ = [
    # Protocols
    "Minimizer",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyOrthoRegError",
    "ValidationError",
    "DimensionError",
    "ConfigurationError",
    "NumericalError",
    "ConvergenceError",
]
