"""
Markov Validation Engine

Checks the two defining properties of a (column-stochastic) Markov matrix:

1. Every entry is nonnegative
2. Every column sums to 1

Both are checked up to a tolerance, since matrices built from floats
(or normalized by division) rarely hit exactly 0 and 1.

The validator never raises for a well-shaped matrix: it returns a
MarkovReport naming every failed entry and column. Only non-square input
raises InvalidShape.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from markov_matrix.config import get_config
from markov_matrix.validation import as_square_matrix


logger = logging.getLogger(__name__)

# Report at most this many offending entries in summary()
_SUMMARY_LIMIT = 10


@dataclass
class MarkovReport:
    """Result of validate_markov."""

    valid: bool = True
    shape: Tuple[int, int] = (0, 0)
    tol: float = 0.0

    # (row, col) of every entry below -tol
    negative_entries: List[Tuple[int, int]] = field(default_factory=list)
    # Columns whose sum deviates from 1 by more than tol
    bad_columns: List[int] = field(default_factory=list)
    column_sums: Optional[np.ndarray] = None

    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            "=" * 60,
            "MARKOV MATRIX REPORT",
            "=" * 60,
            f"Shape: {self.shape[0]}x{self.shape[1]}  (tol {self.tol:.1e})",
            "",
        ]

        if self.errors:
            lines.append("ERRORS:")
            for e in self.errors[:_SUMMARY_LIMIT]:
                lines.append(f"  - {e}")
            if len(self.errors) > _SUMMARY_LIMIT:
                lines.append(f"  ... and {len(self.errors) - _SUMMARY_LIMIT} more")
            lines.append("")

        status = "VALID" if self.valid else "INVALID"
        lines.append(f"Status: {status}")
        lines.append("=" * 60)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict."""
        return {
            'valid': self.valid,
            'shape': list(self.shape),
            'tol': self.tol,
            'negative_entries': [list(p) for p in self.negative_entries],
            'bad_columns': list(self.bad_columns),
            'column_sums': None if self.column_sums is None else self.column_sums.tolist(),
            'errors': list(self.errors),
        }


def validate_markov(A, tol: Optional[float] = None) -> MarkovReport:
    """
    Validate that A is a Markov matrix.

    Args:
        A: Square array-like matrix
        tol: Tolerance for negativity and column sums (default: config markov_tol)

    Returns:
        MarkovReport with valid flag and every failed invariant

    Raises:
        InvalidShape: if A is not a square 2D matrix
    """
    A = as_square_matrix(A)
    if tol is None:
        tol = get_config().markov_tol

    report = MarkovReport(shape=A.shape, tol=tol)

    if not np.isfinite(A).all():
        rows, cols = np.nonzero(~np.isfinite(A))
        report.valid = False
        report.errors.append(
            f"{len(rows)} non-finite entries, first at ({rows[0]}, {cols[0]})"
        )
        logger.debug(f"Markov validation failed: non-finite entries in {A.shape} matrix")
        return report

    rows, cols = np.nonzero(A < -tol)
    report.negative_entries = [(int(i), int(j)) for i, j in zip(rows, cols)]
    for i, j in report.negative_entries:
        report.errors.append(f"Negative entry {A[i, j]:.6g} at ({i}, {j})")

    column_sums = A.sum(axis=0)
    report.column_sums = column_sums
    report.bad_columns = [int(j) for j in np.nonzero(np.abs(column_sums - 1.0) > tol)[0]]
    for j in report.bad_columns:
        report.errors.append(f"Column {j} sums to {column_sums[j]:.12g}, not 1")

    report.valid = not report.errors
    if not report.valid:
        logger.debug(
            f"Markov validation failed: {len(report.negative_entries)} negative entries, "
            f"{len(report.bad_columns)} bad columns"
        )

    return report


def is_markov(A, tol: Optional[float] = None) -> bool:
    """True if A is a Markov matrix within tol."""
    return validate_markov(A, tol).valid


def is_positive(A) -> bool:
    """
    True if every entry of A is strictly positive.

    A positive Markov matrix has a simple eigenvalue 1 that dominates every
    other eigenvalue in magnitude, so A^n x always converges to a unique
    steady state.
    """
    A = as_square_matrix(A)
    return bool((A > 0).all())
