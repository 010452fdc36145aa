"""Spectral correlation function (SCF) slices from CAF sequences.

The SCF at cyclic frequency ``alpha`` is the Fourier transform of the CAF over
lag. Here it is the plain, un-windowed DFT of the CAF values, so its frequency
resolution is ``fs/M`` for a transform of length ``M``, coarser than the
record's own ``fs/N`` whenever the lag window is shorter than the record.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from cyclo_analyzer.models.results import CafSequence, ScfSlice
from cyclo_analyzer.models.signal import Signal

from ._checks import SCF_SCALINGS, check_choice, check_int, check_sample_rate
from .caf import cyclic_autocorrelation
from .spectrum import raw_dft

logger = logging.getLogger(__name__)


def wrapped_frequencies(n_freq: int, sample_rate: float) -> np.ndarray:
    """Bin frequencies in DFT order: ``k*fs/M`` for ``k <= M//2``, else ``(k-M)*fs/M``."""
    M = int(n_freq)
    k = np.arange(M, dtype=np.float64)
    k = np.where(k <= M // 2, k, k - M)
    return k * float(sample_rate) / M


def centered_frequencies(n_freq: int, sample_rate: float) -> np.ndarray:
    """Ascending axis ``(k - M//2)*fs/M`` matching :func:`center_shift` output.

    For even ``M`` the first entry is ``-fs/2``, the alias of the Nyquist bin.
    """
    M = int(n_freq)
    return (np.arange(M, dtype=np.float64) - M // 2) * float(sample_rate) / M


def center_shift(values: np.ndarray) -> np.ndarray:
    """Circularly shift the last axis so that bin 0 lands at index ``M//2``."""
    return np.fft.fftshift(np.asarray(values), axes=-1)


def scf_magnitude(
    caf_values: np.ndarray,
    n_freq: int,
    *,
    scaling: str = "none",
) -> np.ndarray:
    """Uncentered SCF magnitude of one or more CAF rows.

    Parameters
    ----------
    caf_values:
        Shape ``(n_lags,)`` or ``(n_rows, n_lags)``.
    n_freq:
        Transform length ``M``. All CAF samples contribute to every bin.
    scaling:
        ``"none"`` for the raw DFT, ``"length"`` to divide by ``n_lags``.
    """
    v = np.asarray(caf_values, dtype=np.float64)
    M = check_int(n_freq, "n_freq", minimum=1)
    check_choice(scaling, "scaling", SCF_SCALINGS)

    rows = np.atleast_2d(v)
    mag = np.vstack([np.abs(raw_dft(r, M)) for r in rows]) if rows.shape[0] else np.zeros((0, M))
    if scaling == "length" and rows.shape[1] > 0:
        mag = mag / float(rows.shape[1])
    return mag if v.ndim == 2 else mag[0]


def spectral_correlation(
    caf: CafSequence,
    *,
    n_freq: Optional[int] = None,
    center: bool = True,
    scaling: str = "none",
) -> ScfSlice:
    """DFT magnitude of ``caf`` over ``n_freq`` bins (default: the CAF length).

    Parameters
    ----------
    caf:
        Output of :func:`~cyclo_analyzer.analysis.caf.cyclic_autocorrelation`.
    n_freq:
        Transform length ``M``. ``None`` keeps ``M = 2*max_lag + 1``.
    center:
        If True, rearrange bins so that 0 Hz is in the middle and the
        frequency axis ascends.
    scaling:
        ``"none"`` or ``"length"``.

    Returns
    -------
    ScfSlice
    """
    fs = check_sample_rate(caf.sample_rate)
    M = len(caf) if n_freq is None else check_int(n_freq, "n_freq", minimum=1)
    if M < 1:
        raise ValueError("CAF sequence is empty")

    mag = scf_magnitude(caf.values, M, scaling=scaling)
    if center:
        mag = center_shift(mag)
        freqs = centered_frequencies(M, fs)
    else:
        freqs = wrapped_frequencies(M, fs)

    logger.debug("scf: alpha=%g Hz M=%d centered=%s scaling=%s", caf.alpha_hz, M, center, scaling)
    return ScfSlice(
        frequencies=freqs,
        magnitude=mag,
        alpha_hz=caf.alpha_hz,
        sample_rate=fs,
        centered=bool(center),
        warnings=caf.warnings,
    )


def scf_from_signal(
    signal: Signal,
    alpha_hz: float,
    max_lag: int,
    *,
    n_freq: Optional[int] = None,
    center: bool = True,
    normalization: str = "count",
    scaling: str = "none",
) -> ScfSlice:
    """CAF at ``alpha_hz`` followed by its SCF slice."""
    caf = cyclic_autocorrelation(signal, alpha_hz, max_lag, normalization=normalization)
    return spectral_correlation(caf, n_freq=n_freq, center=center, scaling=scaling)
