"""Cyclic autocorrelation (CAF) estimation.

For a real record ``x[n]`` of length ``N`` sampled at ``fs`` the estimator is

    R(tau, alpha) = (1/C(tau)) * sum_n x[n] * x[n - tau] * cos(-2*pi*alpha*n/fs)

where the sum runs over every ``n`` in ``[0, N)`` with ``n - tau`` also in
``[0, N)`` and ``C(tau)`` is the number of such pairs. Only the real part of
the complex cyclic autocorrelation is formed.

Finite-support behaviour
------------------------
The estimator is deliberately biased: lags near ``+-max_lag`` average over
fewer pairs, which produces the triangular/tapered edges expected from a
finite record. No zero-padding or windowing is applied to hide this.

Normalisation modes
-------------------
- ``"count"`` (default): divide each lag by its own overlap count ``N - |tau|``.
- ``"length"``: divide every lag by ``N`` (classic biased autocorrelation).

A lag with no overlapping pair is defined as 0 in both modes.
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np

from cyclo_analyzer.models.results import CafSequence
from cyclo_analyzer.models.signal import Signal

from ._checks import (
    CAF_NORMALIZATIONS,
    as_samples,
    check_choice,
    check_frequency,
    check_max_lag,
)

logger = logging.getLogger(__name__)

# Alphas evaluated together in one matrix product; bounds the (N, block) cosine table.
ALPHA_BLOCK = 32


def lag_axis(max_lag: int) -> np.ndarray:
    return np.arange(-int(max_lag), int(max_lag) + 1, dtype=int)


def overlap_counts(n_samples: int, max_lag: int) -> np.ndarray:
    """Number of valid ``(n, n - tau)`` pairs for each lag ``-max_lag..max_lag``."""
    lags = lag_axis(max_lag)
    return np.maximum(int(n_samples) - np.abs(lags), 0)


def _normalise(sums: np.ndarray, counts: np.ndarray, n_samples: int, normalization: str) -> np.ndarray:
    if normalization == "count":
        den = counts.astype(np.float64)
    else:
        den = np.where(counts > 0, float(n_samples), 0.0)

    out = np.zeros_like(sums, dtype=np.float64)
    ok = den > 0.0
    # Broadcast over a leading alpha axis when present.
    out[..., ok] = sums[..., ok] / den[ok]
    return out


def _alpha_warnings(alphas: Sequence[float], fs: float) -> Tuple[str, ...]:
    nyq = 0.5 * fs
    above = [float(a) for a in alphas if abs(float(a)) > nyq]
    if not above:
        return ()
    return (f"alpha above Nyquist ({nyq:g} Hz) aliases onto a lower cyclic frequency: {above[:5]}",)


def caf_grid(
    signal: Signal,
    alphas: Sequence[float],
    max_lag: int,
    *,
    normalization: str = "count",
) -> np.ndarray:
    """CAF values for several cyclic frequencies at once.

    Parameters
    ----------
    signal:
        Input record.
    alphas:
        Cyclic frequencies in Hz, shape ``(n_alpha,)``.
    max_lag:
        Lag half-width, ``0 <= max_lag < N``.
    normalization:
        ``"count"`` or ``"length"``.

    Returns
    -------
    ndarray
        Shape ``(n_alpha, 2*max_lag + 1)``; row ``i`` equals
        ``cyclic_autocorrelation(signal, alphas[i], max_lag).values``.
    """
    x, fs = as_samples(signal)
    N = int(x.size)
    L = check_max_lag(max_lag, N)
    check_choice(normalization, "normalization", CAF_NORMALIZATIONS)

    a = np.asarray(alphas, dtype=np.float64).reshape(-1)
    for v in a:
        check_frequency(v, "alpha_hz")

    lags = lag_axis(L)
    counts = overlap_counts(N, L)
    sums = np.zeros((a.size, lags.size), dtype=np.float64)

    n = np.arange(N, dtype=np.float64)
    for start in range(0, a.size, ALPHA_BLOCK):
        block = a[start : start + ALPHA_BLOCK]
        # cos is even, so cos(-2*pi*alpha*n/fs) == cos(2*pi*alpha*n/fs).
        carrier = np.cos((2.0 * np.pi / fs) * np.outer(n, block))  # (N, block)

        for j, tau in enumerate(lags):
            if tau >= 0:
                prod = x[tau:] * x[: N - tau]
                sums[start : start + block.size, j] = prod @ carrier[tau:, :]
            else:
                prod = x[: N + tau] * x[-tau:]
                sums[start : start + block.size, j] = prod @ carrier[: N + tau, :]

    return _normalise(sums, counts, N, normalization)


def cyclic_autocorrelation(
    signal: Signal,
    alpha_hz: float,
    max_lag: int,
    *,
    normalization: str = "count",
) -> CafSequence:
    """Estimate the real part of the CAF of ``signal`` at ``alpha_hz``.

    ``alpha_hz = 0`` reduces to the ordinary biased autocorrelation, which is
    even in ``tau`` for a real record.
    """
    x, fs = as_samples(signal)
    alpha = check_frequency(alpha_hz, "alpha_hz")
    L = check_max_lag(max_lag, int(x.size))

    values = caf_grid(signal, [alpha], L, normalization=normalization)[0]
    counts = overlap_counts(x.size, L)

    logger.debug("caf: N=%d alpha=%g Hz max_lag=%d mode=%s", x.size, alpha, L, normalization)
    return CafSequence(
        lags=lag_axis(L),
        values=values,
        counts=counts,
        alpha_hz=alpha,
        sample_rate=fs,
        normalization=normalization,
        warnings=_alpha_warnings([alpha], fs),
    )
