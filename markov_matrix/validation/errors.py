"""
Markov Matrix Errors

Every failure the toolkit can report. All inherit from MarkovError so callers
can catch the whole family at once.
"""

from typing import Any, Optional, Tuple

import numpy as np


class MarkovError(Exception):
    """Base class for markov_matrix errors."""


class InvalidShape(MarkovError, ValueError):
    """Raised when a matrix is not square or a vector does not match it."""

    def __init__(self, message: str, shape: Optional[Tuple[int, ...]] = None):
        self.shape = shape
        super().__init__(message)


class DivisionByZero(MarkovError, ZeroDivisionError):
    """Raised when a column sums to zero and cannot be normalized."""

    def __init__(self, column: int):
        self.column = column
        super().__init__(f"Column {column} sums to 0 and cannot be normalized")


class NonConvergence(MarkovError):
    """
    Raised on request when power iteration hits its cap.

    The best-effort iterate is kept on `result` (a PowerIterationResult).
    """

    def __init__(self, result: Any):
        self.result = result
        super().__init__(
            f"Power iteration did not converge in {result.iterations} iterations "
            f"(last {result.norm} delta {result.delta:.3e}, tol {result.tol:.1e})"
        )


class NonConvergenceWarning(RuntimeWarning):
    """Default, non-fatal signal that power iteration hit its cap."""


class ComplexSteadyState(MarkovError):
    """Raised when the selected eigenvector has a non-negligible imaginary part."""

    def __init__(self, max_imag: float):
        self.max_imag = max_imag
        super().__init__(
            f"Steady-state eigenvector is complex (max |imag| = {max_imag:.3e})"
        )


class NoUnitEigenvalue(MarkovError):
    """Raised when no eigenvalue lies within tolerance of 1."""

    def __init__(self, eigenvalues: np.ndarray, closest: complex, tol: float):
        self.eigenvalues = eigenvalues
        self.closest = closest
        self.tol = tol
        super().__init__(
            f"No eigenvalue within {tol:.1e} of 1 (closest: {closest:.6g}); "
            "matrix is probably not a Markov matrix"
        )


class DegenerateSteadyState(MarkovError):
    """Raised when the selected eigenvector sums to zero and cannot be scaled."""
