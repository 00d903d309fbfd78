"""
Power Iteration Engine.

Repeated multiplication x, Ax, A^2 x, ... by a Markov matrix.

Two modes:
- fixed-count: A^n x for a given n
- convergence: iterate until successive vectors stop changing (the n -> inf
  limit), or give up after max_iter

Multiplying by a Markov matrix conserves the component sum of x, so every
iterate has the same total as the starting vector.

If A has an eigenvalue of magnitude 1 other than 1 itself (e.g. -1 for a
permutation), the iterates oscillate forever and convergence mode reports
non-convergence instead of a steady state.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np
import polars as pl

from markov_matrix.config import NORMS, get_config
from markov_matrix.validation import (
    NonConvergence,
    NonConvergenceWarning,
    as_square_matrix,
    as_vector,
    check_iterations,
)


logger = logging.getLogger(__name__)


@dataclass
class PowerIterationResult:
    """Outcome of iterate_to_convergence."""
    vector: np.ndarray
    iterations: int
    converged: bool
    delta: float
    norm: str
    tol: float


def _prepare(A, x):
    A = as_square_matrix(A)
    x = as_vector(x, A.shape[0])
    return A, x


def _difference(a: np.ndarray, b: np.ndarray, norm: str) -> float:
    diff = a - b
    if norm == "max":
        return float(np.max(np.abs(diff)))
    if norm == "l1":
        return float(np.sum(np.abs(diff)))
    return float(np.linalg.norm(diff))


def matrix_power(A, n: int) -> np.ndarray:
    """A^n by repeated squaring. A^0 is the identity."""
    A = as_square_matrix(A)
    n = check_iterations(n)
    return np.linalg.matrix_power(A, n)


def apply_power(
    A,
    x,
    n: int,
    method: Literal["repeated", "squaring"] = "repeated",
) -> np.ndarray:
    """
    Compute A^n x.

    Args:
        A: Square matrix
        x: Starting vector
        n: Number of applications of A (>= 0)
        method:
            - repeated: n matrix-vector products, O(n d^2)
            - squaring: A^n by repeated squaring, then one product, O(d^3 log n)

    Returns:
        A^n x as a new vector (a copy of x when n == 0)

    Raises:
        InvalidShape: if A is not square or x does not match it
        ValueError: on a negative n or unknown method
    """
    A, x = _prepare(A, x)
    n = check_iterations(n)

    if method == "repeated":
        for _ in range(n):
            x = A @ x
        return x
    if method == "squaring":
        return np.linalg.matrix_power(A, n) @ x

    raise ValueError(f"Unknown method {method!r}, expected 'repeated' or 'squaring'")


def trajectory(A, x, n: int) -> np.ndarray:
    """
    Every iterate from x to A^n x.

    Returns:
        (n + 1, d) array, row k = A^k x
    """
    A, x = _prepare(A, x)
    n = check_iterations(n)

    out = np.empty((n + 1, x.shape[0]))
    out[0] = x
    for k in range(1, n + 1):
        out[k] = A @ out[k - 1]
    return out


def trajectory_frame(A, x, n: int) -> pl.DataFrame:
    """
    trajectory() as a DataFrame.

    Columns: step, x_0 ... x_{d-1}, total
    """
    traj = trajectory(A, x, n)

    data = {'step': np.arange(n + 1)}
    for i in range(traj.shape[1]):
        data[f'x_{i}'] = traj[:, i]
    data['total'] = traj.sum(axis=1)

    return pl.DataFrame(data)


def iterate_to_convergence(
    A,
    x,
    tol: Optional[float] = None,
    max_iter: Optional[int] = None,
    norm: Optional[Literal["max", "l1", "l2"]] = None,
    raise_on_failure: bool = False,
) -> PowerIterationResult:
    """
    Apply A until successive iterates differ by less than tol.

    Args:
        A: Square (Markov) matrix
        x: Starting vector
        tol: Stop when norm(A x_k - x_k) < tol (default: config convergence_tol)
        max_iter: Cap on applications of A (default: config max_iter)
        norm: Difference norm, max | l1 | l2 (default: config norm)
        raise_on_failure: Raise NonConvergence instead of warning

    Returns:
        PowerIterationResult. When the cap is hit, converged is False and
        vector holds the last iterate.

    Raises:
        NonConvergence: only with raise_on_failure=True
    """
    A, x = _prepare(A, x)

    cfg = get_config()
    tol = cfg.convergence_tol if tol is None else tol
    max_iter = cfg.max_iter if max_iter is None else check_iterations(max_iter, "max_iter")
    norm = cfg.norm if norm is None else norm

    if norm not in NORMS:
        raise ValueError(f"norm must be one of {NORMS}, got {norm!r}")
    if tol <= 0:
        raise ValueError(f"tol must be positive, got {tol}")

    delta = np.inf
    iterations = 0
    converged = False

    while iterations < max_iter:
        x_next = A @ x
        iterations += 1
        delta = _difference(x_next, x, norm)
        x = x_next
        if delta < tol:
            converged = True
            break

    result = PowerIterationResult(
        vector=x,
        iterations=iterations,
        converged=converged,
        delta=float(delta),
        norm=norm,
        tol=tol,
    )

    if converged:
        logger.debug(f"Power iteration converged in {iterations} iterations (delta {delta:.3e})")
        return result

    if raise_on_failure:
        raise NonConvergence(result)

    logger.warning(
        f"Power iteration stopped at max_iter={max_iter} without converging "
        f"({norm} delta {delta:.3e} >= tol {tol:.1e})"
    )
    warnings.warn(
        f"Power iteration did not converge in {max_iter} iterations",
        NonConvergenceWarning,
        stacklevel=2,
    )
    return result


def limit(A, x, **kwargs) -> np.ndarray:
    """The n -> inf limit of A^n x. See iterate_to_convergence for kwargs."""
    return iterate_to_convergence(A, x, **kwargs).vector
