"""Two-dimensional spectral correlation surface ``|S(f, alpha)|``.

Each row is a centered SCF slice at one alpha of a linear grid over
``[0, fs/2]``. The surface also carries a dB view and a pair of display
bounds taken as nearest-rank percentiles of the dB grid; the bounds are a
pure statistic of the grid and are recomputed with it.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from cyclo_analyzer.models.results import ScfSurface
from cyclo_analyzer.models.signal import Signal

from ._checks import (
    as_samples,
    check_alpha_max,
    check_fraction,
    check_int,
    check_max_lag,
)
from .caf import caf_grid
from .cyclic_profile import alpha_grid
from .scf import center_shift, centered_frequencies, scf_magnitude

logger = logging.getLogger(__name__)


def to_db(magnitude: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """``10*log10(magnitude + eps)``; finite for any non-negative input."""
    if not float(eps) > 0.0:
        raise ValueError(f"eps must be > 0, got {eps!r}")
    return 10.0 * np.log10(np.asarray(magnitude, dtype=np.float64) + float(eps))


def nearest_rank_percentile(values: np.ndarray, p: float) -> float:
    """Sort ascending and take index ``floor(p*(count-1))``."""
    q = check_fraction(p)
    v = np.sort(np.asarray(values, dtype=np.float64).ravel())
    if v.size == 0:
        raise ValueError("cannot take a percentile of an empty grid")
    return float(v[int(np.floor(q * (v.size - 1)))])


def display_bounds(
    values_db: np.ndarray,
    percentiles: Sequence[float] = (0.05, 0.95),
) -> Tuple[float, float]:
    """``(zmin, zmax)`` for a colour scale; ``zmin <= zmax`` when ``p_lo <= p_hi``."""
    lo, hi = percentiles
    if float(lo) > float(hi):
        raise ValueError(f"percentiles must be ordered (low, high), got {tuple(percentiles)}")
    return nearest_rank_percentile(values_db, lo), nearest_rank_percentile(values_db, hi)


def scf_surface(
    signal: Signal,
    max_lag: int,
    n_alpha: int,
    n_freq: int,
    *,
    alpha_max_hz: Optional[float] = None,
    eps: float = 1e-12,
    percentiles: Sequence[float] = (0.05, 0.95),
    normalization: str = "count",
    scaling: str = "none",
) -> ScfSurface:
    """Build the ``(n_alpha, n_freq)`` SCF magnitude surface.

    Parameters
    ----------
    signal:
        Input record.
    max_lag:
        CAF lag half-width, ``0 <= max_lag < N``.
    n_alpha, n_freq:
        Grid sizes (>= 1).
    alpha_max_hz:
        Upper end of the alpha grid. Default ``fs/2``.
    eps:
        Floor added before the logarithm.
    percentiles:
        ``(low, high)`` fractions for the display bounds.

    Returns
    -------
    ScfSurface
    """
    x, fs = as_samples(signal)
    L = check_max_lag(max_lag, int(x.size))
    n_a = check_int(n_alpha, "n_alpha", minimum=1)
    M = check_int(n_freq, "n_freq", minimum=1)
    a_max = check_alpha_max(alpha_max_hz, fs / 2.0)
    lo, hi = (check_fraction(p) for p in percentiles)
    if lo > hi:
        raise ValueError(f"percentiles must be ordered (low, high), got {(lo, hi)}")
    if not float(eps) > 0.0:
        raise ValueError(f"eps must be > 0, got {eps!r}")

    alphas = alpha_grid(n_a, a_max)
    caf = caf_grid(signal, alphas, L, normalization=normalization)
    mag = center_shift(scf_magnitude(caf, M, scaling=scaling))
    freqs = centered_frequencies(M, fs)

    mag_db = to_db(mag, eps)
    z_bounds = display_bounds(mag_db, (lo, hi))

    warnings = []
    if not np.any(mag > 0.0):
        warnings.append("surface is identically zero; dB grid sits at the eps floor")

    logger.debug(
        "scf surface: n_alpha=%d n_freq=%d max_lag=%d bounds=(%.2f, %.2f) dB",
        n_a, M, L, z_bounds[0], z_bounds[1],
    )
    return ScfSurface(
        alphas=alphas,
        frequencies=freqs,
        magnitude=mag,
        magnitude_db=mag_db,
        z_bounds=z_bounds,
        sample_rate=fs,
        eps=float(eps),
        percentiles=(lo, hi),
        warnings=tuple(warnings),
    )
