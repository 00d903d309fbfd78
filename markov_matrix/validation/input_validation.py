"""
Input Validation

Coerces caller data into float64 arrays and enforces the shapes every
operation relies on: square matrices and vectors matching their dimension.

Inputs are always copied, so nothing the caller owns is ever mutated.

Usage:
    from markov_matrix.validation import as_square_matrix, as_vector

    A = as_square_matrix([[0.9, 0.2], [0.1, 0.8]])
    x = as_vector([17, 4], A.shape[0])
"""

from typing import Optional

import numpy as np

from .errors import InvalidShape


def as_square_matrix(A, name: str = "A") -> np.ndarray:
    """
    Copy A into a 2D float64 array and check that it is square.

    Args:
        A: Array-like matrix
        name: Name used in error messages

    Returns:
        New (n, n) float64 array

    Raises:
        InvalidShape: if A is not 2D, is empty, or is not square
    """
    A = np.array(A, dtype=np.float64)

    if A.ndim != 2:
        raise InvalidShape(f"{name} must be 2D, got {A.ndim}D", A.shape)
    if A.shape[0] != A.shape[1]:
        raise InvalidShape(f"{name} must be square, got shape {A.shape}", A.shape)
    if A.shape[0] == 0:
        raise InvalidShape(f"{name} must not be empty", A.shape)

    return A


def as_vector(x, n: Optional[int] = None, name: str = "x") -> np.ndarray:
    """
    Copy x into a 1D float64 array, optionally checking its length.

    Raises:
        InvalidShape: if x is not 1D or its length is not n
    """
    x = np.array(x, dtype=np.float64)

    if x.ndim != 1:
        raise InvalidShape(f"{name} must be 1D, got {x.ndim}D", x.shape)
    if n is not None and x.shape[0] != n:
        raise InvalidShape(
            f"{name} has length {x.shape[0]}, expected {n} to match the matrix",
            x.shape,
        )

    return x


def check_iterations(n, name: str = "n") -> int:
    """Return n as an int, rejecting bools, non-integers and negatives."""
    if isinstance(n, (bool, np.bool_)) or not isinstance(n, (int, np.integer)):
        raise ValueError(f"{name} must be a nonnegative integer, got {n!r}")
    if n < 0:
        raise ValueError(f"{name} must be nonnegative, got {n}")
    return int(n)
