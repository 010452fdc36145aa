"""Cyclic-domain profile ``|S(f0, alpha)|`` versus alpha.

The profile shows where along the cyclic-frequency axis a signal correlates
with itself at a fixed spectral frequency ``f0`` (normally the dominant
frequency of the record). A stationary signal only shows energy at
``alpha = 0``; cyclostationary signals add peaks at characteristic alphas.

Functions
---------
alpha_grid
    Inclusive linear grid ``[0, alpha_max]``.
target_bin
    Bin of a length-``n_freq`` transform nearest ``f0``, folded to the
    non-negative half.
alpha_index
    Grid index closest to a requested alpha (the "current alpha" marker).
cyclic_profile
    Sweep alpha, compute CAF -> SCF per point, sample the SCF at ``f0``.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from cyclo_analyzer.models.results import CyclicProfile
from cyclo_analyzer.models.signal import Signal

from ._checks import (
    as_samples,
    check_alpha_max,
    check_frequency,
    check_int,
    check_max_lag,
)
from .caf import caf_grid
from .scf import scf_magnitude
from .spectrum import dominant_frequency, round_half_up

logger = logging.getLogger(__name__)


def alpha_grid(n_alpha: int, alpha_max_hz: float) -> np.ndarray:
    """``n_alpha`` points linearly spaced over ``[0, alpha_max_hz]`` (both ends included)."""
    n = check_int(n_alpha, "n_alpha", minimum=1)
    return np.linspace(0.0, float(alpha_max_hz), n)


def target_bin(target_frequency_hz: float, n_freq: int, sample_rate: float) -> Tuple[int, bool]:
    """Bin nearest ``target_frequency_hz`` at resolution ``fs/n_freq``.

    Returns ``(bin, folded)``. A bin in the upper half (``bin >= n_freq/2``)
    is reflected to ``n_freq - bin``; for a real record the CAF magnitude
    spectrum is symmetric, so both bins carry the same value.
    """
    M = check_int(n_freq, "n_freq", minimum=1)
    resolution = float(sample_rate) / M
    k = int(round_half_up(float(target_frequency_hz) / resolution)) % M
    if k < M / 2.0:
        return k, False
    return (M - k) % M, True


def alpha_index(alphas: np.ndarray, alpha_hz: float) -> int:
    """Index of the grid value numerically closest to ``alpha_hz`` (first on ties)."""
    a = np.asarray(alphas, dtype=np.float64)
    if a.size == 0:
        raise ValueError("alpha grid is empty")
    return int(np.argmin(np.abs(a - float(alpha_hz))))


def cyclic_profile(
    signal: Signal,
    max_lag: int,
    n_alpha: int,
    n_freq: int,
    *,
    target_frequency_hz: Optional[float] = None,
    alpha_max_hz: Optional[float] = None,
    normalization: str = "count",
    scaling: str = "none",
) -> CyclicProfile:
    """Sweep alpha and sample each SCF slice at the bin nearest ``f0``.

    Parameters
    ----------
    signal:
        Input record.
    max_lag:
        CAF lag half-width, ``0 <= max_lag < N``.
    n_alpha:
        Number of alpha grid points (>= 1).
    n_freq:
        SCF transform length (>= 1).
    target_frequency_hz:
        ``f0``. Default: :func:`~cyclo_analyzer.analysis.spectrum.dominant_frequency`.
    alpha_max_hz:
        Upper end of the alpha grid. Default ``fs/4``.

    Returns
    -------
    CyclicProfile
        ``n_alpha`` pairs ``(alpha, |S(f0, alpha)|)`` in grid order.
    """
    x, fs = as_samples(signal)
    L = check_max_lag(max_lag, int(x.size))
    n_a = check_int(n_alpha, "n_alpha", minimum=1)
    M = check_int(n_freq, "n_freq", minimum=1)
    a_max = check_alpha_max(alpha_max_hz, fs / 4.0)

    if target_frequency_hz is None:
        f0 = dominant_frequency(signal)
    else:
        f0 = check_frequency(target_frequency_hz, "target_frequency_hz")

    alphas = alpha_grid(n_a, a_max)
    k, folded = target_bin(f0, M, fs)

    caf = caf_grid(signal, alphas, L, normalization=normalization)
    mag = scf_magnitude(caf, M, scaling=scaling)[:, k]

    warnings = []
    if abs(f0) > 0.5 * fs:
        warnings.append(
            f"target frequency {f0:g} Hz is above Nyquist ({0.5 * fs:g} Hz) and aliases onto bin {k}"
        )
    if folded:
        warnings.append(f"target frequency {f0:g} Hz lies in the negative half of the transform; folded to bin {k}")
    if a_max > 0.5 * fs:
        warnings.append(f"alpha grid extends above Nyquist ({0.5 * fs:g} Hz)")

    logger.debug("cyclic profile: f0=%g Hz bin=%d n_alpha=%d n_freq=%d max_lag=%d", f0, k, n_a, M, L)
    return CyclicProfile(
        alphas=alphas,
        magnitude=np.ascontiguousarray(mag),
        target_frequency_hz=float(f0),
        target_bin=int(k),
        n_freq=M,
        sample_rate=fs,
        warnings=tuple(warnings),
    )
