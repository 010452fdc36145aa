"""Precondition checks shared by the analysis functions.

Every public entry point validates its shape parameters before computing
anything, so a bad request never yields partial output.
"""

from __future__ import annotations

import math
import numbers
from typing import Optional, Tuple

import numpy as np

from cyclo_analyzer.models.signal import Signal

CAF_NORMALIZATIONS: Tuple[str, ...] = ("count", "length")
SCF_SCALINGS: Tuple[str, ...] = ("none", "length")


def as_samples(signal: Signal) -> Tuple[np.ndarray, float]:
    """Return ``(samples, sample_rate)`` after checking both."""
    x = np.asarray(signal.samples, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Signal samples must be 1D, got shape {x.shape}")
    return x, check_sample_rate(signal.sample_rate)


def check_sample_rate(sample_rate: float) -> float:
    fs = float(sample_rate)
    if not math.isfinite(fs) or fs <= 0.0:
        raise ValueError(f"sample_rate must be a finite value > 0, got {sample_rate!r}")
    return fs


def check_int(value: object, name: str, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    v = int(value)
    if v < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {v}")
    return v


def check_max_lag(max_lag: object, n_samples: int) -> int:
    """``0 <= max_lag < N``."""
    lag = check_int(max_lag, "max_lag", minimum=0)
    if lag >= n_samples:
        raise ValueError(f"max_lag must be < number of samples ({n_samples}), got {lag}")
    return lag


def check_frequency(value: float, name: str) -> float:
    f = float(value)
    if not math.isfinite(f):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return f


def check_alpha_max(alpha_max_hz: Optional[float], default: float) -> float:
    if alpha_max_hz is None:
        return default
    a = check_frequency(alpha_max_hz, "alpha_max_hz")
    if a < 0.0:
        raise ValueError(f"alpha_max_hz must be >= 0, got {a}")
    return a


def check_choice(value: str, name: str, choices: Tuple[str, ...]) -> str:
    if value not in choices:
        raise ValueError(f"{name} must be one of {list(choices)}, got {value!r}")
    return value


def check_fraction(p: float, name: str = "percentile") -> float:
    v = float(p)
    if not (0.0 <= v <= 1.0):
        raise ValueError(f"{name} must be in [0, 1], got {p!r}")
    return v
