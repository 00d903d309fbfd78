"""
markov_matrix — numerical toolkit for Markov (column-stochastic) matrices.

Public API:
    from markov_matrix import validate_markov, column_normalize, apply_power, steady_state

    A = [[0.9, 0.2],
         [0.1, 0.8]]
    apply_power(A, [17, 4], 1000)      # -> approx [14, 7]
    steady_state(A, total=21)          # -> [14, 7]

Layers:
    markov_matrix.core        Engines: validation, normalization, power iteration, eigendecomposition
    markov_matrix.validation  Input coercion and the MarkovError hierarchy
    markov_matrix.config      Default tolerances (defaults.yaml, overridable)
"""

from markov_matrix.config import MarkovConfig, get_config, load_config, set_config

from markov_matrix.core.markov import MarkovReport, is_markov, is_positive, validate_markov
from markov_matrix.core.normalization import column_normalize, random_markov_matrix
from markov_matrix.core.power import (
    PowerIterationResult,
    apply_power,
    iterate_to_convergence,
    limit,
    matrix_power,
    trajectory,
    trajectory_frame,
)
from markov_matrix.core.eigendecomp import (
    convergence_rate,
    eigen_expansion,
    eigen_power,
    eigendecomposition,
    spectrum,
    steady_state,
)

from markov_matrix.validation import (
    ComplexSteadyState,
    DegenerateSteadyState,
    DivisionByZero,
    InvalidShape,
    MarkovError,
    NonConvergence,
    NonConvergenceWarning,
    NoUnitEigenvalue,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    'MarkovConfig', 'get_config', 'load_config', 'set_config',
    # Validation
    'MarkovReport', 'validate_markov', 'is_markov', 'is_positive',
    # Normalization
    'column_normalize', 'random_markov_matrix',
    # Power iteration
    'PowerIterationResult', 'apply_power', 'matrix_power',
    'iterate_to_convergence', 'limit', 'trajectory', 'trajectory_frame',
    # Eigendecomposition
    'steady_state', 'eigendecomposition', 'spectrum', 'convergence_rate',
    'eigen_expansion', 'eigen_power',
    # Errors
    'MarkovError', 'InvalidShape', 'DivisionByZero', 'NonConvergence',
    'NonConvergenceWarning', 'ComplexSteadyState', 'NoUnitEigenvalue',
    'DegenerateSteadyState',
]
