"""
Compute utilities shared by PyOrthoReg backends.
"""

from pyorthoreg.core.compute.timing import Timer, timed

__all__ = ["Timer", "timed"]
