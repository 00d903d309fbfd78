"""
Markov Engines.

Pure computations: array-likes in, numpy arrays / dicts / reports out.
- markov: validation (nonnegative entries, columns summing to 1)
- normalization: column normalization, random Markov matrices
- power: A^n x, convergence to the limit, trajectories
- eigendecomp: steady state, spectrum, eigenbasis expansion
"""

from . import markov
from . import normalization
from . import power
from . import eigendecomp

__all__ = ['markov', 'normalization', 'power', 'eigendecomp']
