"""
Markov Matrix Validation Module

Input coercion and the error hierarchy shared by every core engine.

Exports:
    - as_square_matrix: Copy input into a square float64 matrix
    - as_vector: Copy input into a float64 vector of matching length
    - check_iterations: Validate an iteration count
    - MarkovError and its subclasses
"""

from .errors import (
    MarkovError,
    InvalidShape,
    DivisionByZero,
    NonConvergence,
    NonConvergenceWarning,
    ComplexSteadyState,
    NoUnitEigenvalue,
    DegenerateSteadyState,
)

from .input_validation import (
    as_square_matrix,
    as_vector,
    check_iterations,
)

__all__ = [
    # Errors
    'MarkovError',
    'InvalidShape',
    'DivisionByZero',
    'NonConvergence',
    'NonConvergenceWarning',
    'ComplexSteadyState',
    'NoUnitEigenvalue',
    'DegenerateSteadyState',
    # Input validation
    'as_square_matrix',
    'as_vector',
    'check_iterations',
]
