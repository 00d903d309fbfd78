"""
Eigendecomposition Engine (Steady State).

The steady state of a Markov matrix A is the eigenvector for eigenvalue 1:
A x = x. It always exists, because every column of A sums to 1, so the
all-ones row vector is a left eigenvector with eigenvalue 1, and A shares
its eigenvalues with A^T.

Every other eigenvalue has |lambda| <= 1. Writing x = sum(c_i v_i) in the
eigenbasis,

    A^n x = c_1 v_1 + sum_{i>1} c_i lambda_i^n v_i

so the steady-state term survives and the rest decays at rate |lambda_2|.
Eigenvalues with |lambda| = 1 but lambda != 1 (e.g. -1) never decay: the
iterates oscillate. Selection must therefore match lambda ~ +1, never just
|lambda| ~ 1.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import numpy as np

from markov_matrix.config import get_config
from markov_matrix.validation import (
    ComplexSteadyState,
    DegenerateSteadyState,
    NoUnitEigenvalue,
    as_square_matrix,
    as_vector,
    check_iterations,
)


logger = logging.getLogger(__name__)

# Beyond this the eigenbasis expansion keeps fewer than half the float64 digits;
# a defective eigenvalue (Jordan block) pushes cond to the order of 1/eps or inf
_MAX_EIGENBASIS_COND = 1.0 / np.sqrt(np.finfo(np.float64).eps)


def eigendecomposition(A) -> Tuple[np.ndarray, np.ndarray]:
    """
    Eigenvalues and eigenvectors of A, sorted.

    Order: descending magnitude, then descending real part, so for a Markov
    matrix lambda = 1 comes first and precedes lambda = -1.

    Returns:
        (eigenvalues, eigenvectors) with eigenvectors as columns
    """
    A = as_square_matrix(A)
    eigenvalues, eigenvectors = np.linalg.eig(A)

    # lexsort: last key is primary; round magnitudes so ties are not decided by noise
    order = np.lexsort((-eigenvalues.real, -np.round(np.abs(eigenvalues), 12)))
    return eigenvalues[order], eigenvectors[:, order]


def _unit_order(eigenvalues: np.ndarray) -> np.ndarray:
    """Indices sorted by |lambda - 1|, then largest real part, then smallest |imag|."""
    return np.lexsort((
        np.abs(eigenvalues.imag),
        -eigenvalues.real,
        np.abs(eigenvalues - 1.0),
    ))


def _real_vector(v: np.ndarray, imag_tol: float) -> np.ndarray:
    """Drop a negligible imaginary part, or raise ComplexSteadyState."""
    if not np.iscomplexobj(v):
        return v

    scale = np.max(np.abs(v))
    max_imag = float(np.max(np.abs(v.imag)))
    if scale > 0 and max_imag > imag_tol * scale:
        raise ComplexSteadyState(max_imag)

    return v.real


def steady_state(
    A,
    total: Optional[float] = None,
    x0=None,
    tol: Optional[float] = None,
    imag_tol: Optional[float] = None,
) -> np.ndarray:
    """
    Steady-state vector of A, scaled so its components sum to total.

    Args:
        A: Square Markov matrix
        total: Target component sum. Defaults to sum(x0) if x0 is given, else 1.
        x0: Optional starting vector. When eigenvalue 1 is repeated, the steady
            state is the one reached from x0 (projection of x0 onto the
            eigenvalue-1 eigenspace).
        tol: Max |lambda - 1| for the steady-state eigenvalue
            (default: config unit_eigen_tol)
        imag_tol: Max imaginary part, relative to the largest entry
            (default: config imag_tol)

    Returns:
        Real vector x with A x = x and sum(x) == total

    Raises:
        InvalidShape: if A is not square or x0 does not match it
        NoUnitEigenvalue: if no eigenvalue is within tol of 1
        ComplexSteadyState: if the eigenvector is not real
        DegenerateSteadyState: if the eigenvector sums to 0
    """
    A = as_square_matrix(A)
    n = A.shape[0]

    cfg = get_config()
    tol = cfg.unit_eigen_tol if tol is None else tol
    imag_tol = cfg.imag_tol if imag_tol is None else imag_tol

    if x0 is not None:
        x0 = as_vector(x0, n, name="x0")
        if total is None:
            total = float(x0.sum())
    if total is None:
        total = 1.0

    eigenvalues, eigenvectors = np.linalg.eig(A)

    order = _unit_order(eigenvalues)
    best = order[0]
    closest = eigenvalues[best]

    if abs(closest - 1.0) > tol:
        raise NoUnitEigenvalue(eigenvalues, complex(closest), tol)

    unit = np.abs(eigenvalues - 1.0) <= tol
    n_unit = int(unit.sum())

    logger.debug(
        f"Steady-state eigenvalue {closest:.12g} "
        f"(|lambda - 1| = {abs(closest - 1.0):.2e}, multiplicity {n_unit})"
    )

    if n_unit > 1 and x0 is not None:
        v = _project_unit(A, eigenvectors, unit, x0)
    else:
        v = eigenvectors[:, best]

    v = _real_vector(v, imag_tol)

    s = v.sum()
    if abs(s) <= np.finfo(np.float64).eps * n * max(np.max(np.abs(v)), 1.0):
        raise DegenerateSteadyState(
            "Steady-state eigenvector sums to 0 and cannot be scaled to a total"
        )

    return v * (total / s)


def _project_unit(
    A: np.ndarray,
    eigenvectors: np.ndarray,
    unit: np.ndarray,
    x0: np.ndarray,
) -> np.ndarray:
    """
    Spectral projection of x0 onto the eigenvalue-1 eigenspace.

    With right eigenvectors V and left eigenvectors W for lambda = 1, the
    projector is V (W^H V)^-1 W^H. Only the lambda = 1 eigenvectors are
    used; that eigenspace of a Markov matrix is never defective.
    """
    V = eigenvectors[:, unit]
    k = V.shape[1]

    left_values, left_vectors = np.linalg.eig(A.T)
    W = left_vectors[:, _unit_order(left_values)[:k]]

    Wh = W.conj().T
    coeffs = np.linalg.solve(Wh @ V, Wh @ x0)
    return V @ coeffs


def spectrum(A, tol: Optional[float] = None) -> Dict[str, Any]:
    """
    Eigenvalue summary of a Markov matrix.

    Args:
        A: Square matrix
        tol: Tolerance for |lambda| == 1 and lambda == 1 (default: config unit_eigen_tol)

    Returns:
        dict with eigenvalues, magnitudes, eigenvectors, spectral radius,
        second-largest magnitude, spectral gap and the oscillatory eigenvalues
    """
    if tol is None:
        tol = get_config().unit_eigen_tol

    eigenvalues, eigenvectors = eigendecomposition(A)
    magnitudes = np.abs(eigenvalues)

    unit_modulus = np.abs(magnitudes - 1.0) <= tol
    at_one = np.abs(eigenvalues - 1.0) <= tol
    oscillatory = eigenvalues[unit_modulus & ~at_one]

    # Second-largest magnitude: largest among eigenvalues after the first
    second = float(magnitudes[1]) if len(magnitudes) >= 2 else 0.0

    return {
        'eigenvalues': eigenvalues,
        'magnitudes': magnitudes,
        'eigenvectors': eigenvectors,
        'spectral_radius': float(magnitudes[0]),
        'second_magnitude': second,
        'spectral_gap': float(1.0 - second),
        'n_unit_eigenvalues': int(at_one.sum()),
        'n_unit_modulus': int(unit_modulus.sum()),
        'oscillatory_eigenvalues': oscillatory,
        'max_magnitude_ok': bool((magnitudes <= 1.0 + tol).all()),
        'n_states': len(eigenvalues),
    }


def convergence_rate(A) -> float:
    """
    |lambda_2|: per-step shrink factor of everything but the steady state.

    1.0 means no convergence (repeated or oscillatory unit eigenvalues).
    """
    return spectrum(A)['second_magnitude']


def eigen_expansion(A, x) -> Dict[str, np.ndarray]:
    """
    Coefficients of x in the eigenbasis of A: x = sum(c_i v_i).

    Raises:
        numpy.linalg.LinAlgError: if A is not diagonalizable, i.e. its
            eigenvector matrix is numerically singular
    """
    eigenvalues, eigenvectors = eigendecomposition(A)
    x = as_vector(x, eigenvectors.shape[0])

    cond = np.linalg.cond(eigenvectors)
    if not cond < _MAX_EIGENBASIS_COND:
        raise np.linalg.LinAlgError(
            f"Eigenvector matrix is singular (cond {cond:.2e}); A is not diagonalizable"
        )

    coefficients = np.linalg.solve(eigenvectors, x.astype(eigenvectors.dtype))

    return {
        'eigenvalues': eigenvalues,
        'eigenvectors': eigenvectors,
        'coefficients': coefficients,
    }


def eigen_power(A, x, n: int) -> np.ndarray:
    """
    A^n x via the eigenbasis: sum(c_i lambda_i^n v_i).

    Agrees with apply_power for diagonalizable A. Complex conjugate pairs
    cancel, so the real part is returned.
    """
    n = check_iterations(n)
    exp = eigen_expansion(A, x)

    terms = exp['eigenvectors'] @ (exp['coefficients'] * exp['eigenvalues'] ** n)
    return np.real(terms)
