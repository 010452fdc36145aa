"""Raw DFT spectrum and dominant-frequency detection.

Provides the un-normalised DFT used throughout the package: no ``1/N``
scaling is applied, so a sinusoid of amplitude ``A`` sitting on bin ``k``
produces a peak of ``N*A/2``.

Functions
---------
dft_magnitude
    Full-length raw DFT magnitude of a real sequence for an arbitrary length.
compute_spectrum
    One-sided magnitude/phase spectrum of a Signal (bins ``0..N//2``).
dominant_bin
    Strongest non-DC bin of a Spectrum.
dominant_frequency
    Strongest non-DC frequency of a Signal, rounded to 0.1 Hz.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from cyclo_analyzer.models.results import Spectrum
from cyclo_analyzer.models.signal import Signal

from ._checks import as_samples, check_int

logger = logging.getLogger(__name__)


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round with halves going towards +inf (``floor(x + 0.5)``), not to even."""
    scale = 10.0 ** int(decimals)
    return float(np.floor(value * scale + 0.5) / scale)


def raw_dft(values: np.ndarray, n_fft: int) -> np.ndarray:
    r"""Complex DFT ``X[k] = sum_n x[n] exp(-2j*pi*k*n/M)`` for ``k = 0..M-1``.

    Every input sample contributes. When ``len(values) > M`` the input is
    wrapped modulo ``M`` before the FFT, which is the same sum because the
    kernel is periodic in ``n`` with period ``M``; when shorter it is
    zero-padded.
    """
    x = np.asarray(values, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Expected 1D array, got shape {x.shape}")
    M = check_int(n_fft, "n_fft", minimum=1)

    if x.size > M:
        n_rows = -(-x.size // M)
        padded = np.zeros(n_rows * M, dtype=np.float64)
        padded[: x.size] = x
        x = padded.reshape((n_rows, M)).sum(axis=0)

    return np.fft.fft(x, n=M)


def dft_magnitude(values: np.ndarray, n_fft: Optional[int] = None) -> np.ndarray:
    """Raw DFT magnitude of ``values`` over ``n_fft`` bins (default: its length)."""
    x = np.asarray(values, dtype=np.float64)
    M = x.size if n_fft is None else n_fft
    if M == 0:
        return np.zeros(0, dtype=np.float64)
    return np.abs(raw_dft(x, M))


def compute_spectrum(signal: Signal) -> Spectrum:
    r"""One-sided DFT spectrum of ``signal``.

    Parameters
    ----------
    signal:
        Input record. An empty record yields an empty Spectrum.

    Returns
    -------
    Spectrum
        ``N//2 + 1`` bins with ``frequency = k*fs/N``.

    Notes
    -----
    ``X[k] = \sum_n x[n] e^{-j 2\pi k n / N}``; magnitude is ``|X[k]|`` and
    phase is ``atan2(Im, Re)``.
    """
    x, fs = as_samples(signal)
    N = int(x.size)
    if N == 0:
        empty = np.zeros(0, dtype=np.float64)
        return Spectrum(frequencies=empty, magnitude=empty.copy(), phase=empty.copy(), sample_rate=fs, n_samples=0)

    X = np.fft.rfft(x)
    k = np.arange(N // 2 + 1, dtype=np.float64)

    logger.debug("spectrum: N=%d fs=%g bins=%d", N, fs, X.size)
    return Spectrum(
        frequencies=k * fs / N,
        magnitude=np.abs(X),
        phase=np.arctan2(X.imag, X.real),
        sample_rate=fs,
        n_samples=N,
    )


def dominant_bin(spectrum: Spectrum) -> int:
    """Index of the largest non-DC magnitude (first occurrence wins on ties)."""
    mag = np.asarray(spectrum.magnitude)
    if mag.size < 2:
        raise ValueError(
            f"dominant frequency needs at least one non-DC bin (N >= 2), got N={spectrum.n_samples}"
        )
    return 1 + int(np.argmax(mag[1:]))


def dominant_frequency(signal: Signal, *, decimals: int = 1) -> float:
    """Frequency in Hz of the strongest non-DC bin, rounded to ``decimals`` places.

    Raises
    ------
    ValueError
        If the signal has fewer than two samples.
    """
    if signal.n_samples < 2:
        raise ValueError(f"dominant frequency needs N >= 2 samples, got N={signal.n_samples}")
    spec = compute_spectrum(signal)
    k = dominant_bin(spec)
    f0 = round_half_up(k * spec.sample_rate / spec.n_samples, decimals)
    logger.debug("dominant frequency: bin=%d f0=%g Hz", k, f0)
    return f0
