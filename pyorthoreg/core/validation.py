"""
Input validators for PyOrthoReg.

Each validator checks one property of one array and raises at once with
the parameter name and the offending values; nothing is silently
repaired. CensoredDesign.for_arrays runs every column through these
before a dataset exists.
"""

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyorthoreg.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Convert input to a new float64 array.

    Numeric and boolean inputs are accepted, since censoring flags arrive
    as either 0/1 or True/False. Anything that lands in an object or
    string dtype is rejected.

    Raises:
        ValidationError: If input is not numeric
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )
    if not (np.issubdtype(result.dtype, np.number) or result.dtype == np.bool_):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )
    return result.astype(np.float64)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """Raises ValidationError on any NaN or Inf."""
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """Raises DimensionError unless array.ndim == ndim."""
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_consistent_length(
    *arrays: NDArray[np.floating[Any]],
    names: tuple[str, ...]
) -> None:
    """
    Verify that all columns describe the same number of points.

    Args:
        *arrays: Arrays to compare along their first axis
        names: One name per array, used in the message

    Raises:
        ValueError: If names and arrays differ in number
        DimensionError: If the lengths disagree
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_nonnegative(array: NDArray[np.floating[Any]], name: str) -> None:
    """Raises ValidationError if any uncertainty is negative."""
    negative = np.flatnonzero(array < 0)
    if negative.size:
        raise ValidationError(
            f"{name}: must be non-negative, found {negative.size} negative "
            f"value(s) at positions {negative[:5].tolist()}"
        )


def check_binary(array: NDArray[np.floating[Any]], name: str) -> None:
    """Raises ValidationError unless every flag is 0 or 1."""
    unique = np.unique(array)
    if not np.all(np.isin(unique, [0.0, 1.0])):
        raise ValidationError(
            f"{name}: must contain only 0 and 1, got unique values: {unique}"
        )
