"""
Fitting backends for censored orthogonal regression.
"""

from pyorthoreg.censored.backends.cpu import (
    CPUFitBackend,
    LevenbergMarquardtMinimizer,
    MinimizerOutput,
)

__all__ = ["CPUFitBackend", "LevenbergMarquardtMinimizer", "MinimizerOutput"]
