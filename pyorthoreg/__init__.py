"""
PyOrthoReg: orthogonal regression of censored, log-scaled data.

Fits a line with intrinsic scatter to two variables that may be upper
limits on either axis, and estimates parameter uncertainties by
bootstrap resampling.

Submodules:
    censored: Likelihood model, fitting, bootstrap, summaries, I/O
    core: Exceptions, Result envelope, validation, timing
"""

__version__ = "0.1.0"

from pyorthoreg import censored

__all__ = [
    "__version__",
    "censored",
]
