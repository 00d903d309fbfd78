"""
Tolerance configuration.

Every engine takes its tolerances as keyword arguments. When an argument is
left as None, the engine falls back to the process-wide MarkovConfig, which is
loaded once from YAML:

    1. $MARKOV_MATRIX_CONFIG, if set
    2. defaults.yaml shipped next to this module
"""

import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MARKOV_MATRIX_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

NORMS = ("max", "l1", "l2")


@dataclass(frozen=True)
class MarkovConfig:
    """Tolerances and iteration limits."""
    markov_tol: float = 1e-9
    unit_eigen_tol: float = 1e-8
    imag_tol: float = 1e-9
    convergence_tol: float = 1e-12
    max_iter: int = 10_000
    norm: str = "max"

    def __post_init__(self):
        for name in ("markov_tol", "unit_eigen_tol", "imag_tol", "convergence_tol"):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")
        if self.norm not in NORMS:
            raise ValueError(f"norm must be one of {NORMS}, got {self.norm!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Optional[os.PathLike] = None, **overrides) -> MarkovConfig:
    """
    Load a MarkovConfig from YAML.

    Args:
        path: YAML file. Defaults to $MARKOV_MATRIX_CONFIG, then defaults.yaml.
        **overrides: Values that take precedence over the file.

    Returns:
        MarkovConfig

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: on unknown keys or invalid values
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(
            f"Config in {path} must be a mapping of settings, got {type(raw).__name__}"
        )

    raw.update(overrides)

    cfg = _build_config(raw, source=str(path))
    logger.debug(f"Loaded config from {path}: {cfg}")
    return cfg


def _build_config(raw: Dict[str, Any], source: str) -> MarkovConfig:
    """Coerce raw settings to their field types and build a MarkovConfig."""
    known = {f.name for f in fields(MarkovConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {source}: {', '.join(unknown)}")

    values = {}
    for f in fields(MarkovConfig):
        value = raw.get(f.name, f.default)
        try:
            values[f.name] = _COERCE[f.name](value)
        except (TypeError, ValueError):
            raise ValueError(
                f"Invalid value for {f.name} in {source}: {value!r}"
            ) from None

    return MarkovConfig(**values)


_COERCE = {
    'markov_tol': float,
    'unit_eigen_tol': float,
    'imag_tol': float,
    'convergence_tol': float,
    'max_iter': int,
    'norm': str,
}


_config: Optional[MarkovConfig] = None


def get_config() -> MarkovConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[MarkovConfig] = None, **overrides) -> MarkovConfig:
    """
    Replace the process-wide config.

    set_config(cfg) installs cfg; set_config(max_iter=50) tweaks the current
    one; set_config() resets to whatever load_config() returns.

    Raises:
        ValueError: on unknown keys or invalid override values
    """
    global _config
    if config is None:
        config = get_config() if overrides else load_config()
    if overrides:
        raw = config.to_dict()
        raw.update(overrides)
        config = _build_config(raw, source="set_config()")
    _config = config
    return _config
