"""
Column Normalization Engine
===========================

Turns any nonnegative square matrix into a Markov matrix by dividing each
column by its sum. Column j of the result is then a probability
distribution over the states a walker in state j moves to.

A column of zeros has no distribution to rescale, so it is an error rather
than something to paper over with a fallback value.
"""

import logging
from typing import Optional

import numpy as np

from markov_matrix.validation import DivisionByZero, as_square_matrix


logger = logging.getLogger(__name__)


def column_normalize(M) -> np.ndarray:
    """
    Rescale each column of M to sum to 1.

    Args:
        M: Square array-like matrix with nonnegative entries

    Returns:
        New Markov matrix (column sums 1 up to rounding)

    Raises:
        InvalidShape: if M is not square
        ValueError: if M has negative or non-finite entries
        DivisionByZero: if a column sums to 0 (column index on .column)
    """
    M = as_square_matrix(M, name="M")

    if not np.isfinite(M).all():
        raise ValueError("M contains NaN or Inf entries")

    negative = np.argwhere(M < 0)
    if len(negative):
        i, j = negative[0]
        raise ValueError(f"M has a negative entry {M[i, j]:.6g} at ({i}, {j})")

    sums = M.sum(axis=0)
    zero = np.nonzero(sums == 0)[0]
    if len(zero):
        logger.debug(f"Cannot normalize: columns {zero.tolist()} sum to 0")
        raise DivisionByZero(int(zero[0]))

    return M / sums


def random_markov_matrix(
    n: int,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Random n x n Markov matrix: uniform [0, 1) entries, column-normalized.

    Args:
        n: Dimension (>= 1)
        seed: Seed for a fresh default_rng (ignored if rng is given)
        rng: Generator to draw from

    Returns:
        (n, n) Markov matrix
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")

    if rng is None:
        rng = np.random.default_rng(seed)

    M = rng.random((n, n))

    # random() can return exactly 0.0
    while (M.sum(axis=0) == 0).any():
        M = rng.random((n, n))

    return column_normalize(M)
