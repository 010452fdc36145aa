from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Spectrum:
    """One-sided raw DFT of a :class:`~cyclo_analyzer.models.signal.Signal`.

    Attributes
    ----------
    frequencies:
        Bin frequencies ``k*fs/N`` for ``k = 0..N//2``, in Hz.
    magnitude:
        ``|X[k]|`` without any ``1/N`` normalisation.
    phase:
        ``atan2(Im X[k], Re X[k])`` in radians.
    sample_rate:
        Sample rate of the analysed signal.
    n_samples:
        Length ``N`` of the analysed signal.
    """

    frequencies: np.ndarray
    magnitude: np.ndarray
    phase: np.ndarray
    sample_rate: float
    n_samples: int

    @property
    def n_bins(self) -> int:
        return int(self.magnitude.size)

    @property
    def resolution_hz(self) -> float:
        if self.n_samples == 0:
            return float("nan")
        return self.sample_rate / self.n_samples


@dataclass(frozen=True)
class CafSequence:
    """Real part of the cyclic autocorrelation at one cyclic frequency.

    Attributes
    ----------
    lags:
        Integer lags ``-max_lag..+max_lag`` in samples.
    values:
        Estimate per lag. Zero where no sample pair overlaps.
    counts:
        Number of valid ``(n, n - lag)`` pairs per lag.
    alpha_hz:
        Cyclic frequency used for the estimate.
    sample_rate:
        Sample rate of the analysed signal.
    normalization:
        ``"count"`` (divide by overlap count) or ``"length"`` (divide by N).
    warnings:
        Non-fatal notes, e.g. lags with no overlap.
    """

    lags: np.ndarray
    values: np.ndarray
    counts: np.ndarray
    alpha_hz: float
    sample_rate: float
    normalization: str = "count"
    warnings: Tuple[str, ...] = ()

    @property
    def max_lag(self) -> int:
        return int((self.lags.size - 1) // 2)

    @property
    def lags_s(self) -> np.ndarray:
        return self.lags / float(self.sample_rate)

    def __len__(self) -> int:
        return int(self.values.size)


@dataclass(frozen=True)
class ScfSlice:
    """Magnitude of the spectral correlation function at one cyclic frequency.

    When ``centered`` is True the zero-frequency bin sits at index ``M//2``
    and ``frequencies`` is ascending; otherwise bins follow the wrapped DFT
    order ``0, df, ..., -df``.
    """

    frequencies: np.ndarray
    magnitude: np.ndarray
    alpha_hz: float
    sample_rate: float
    centered: bool
    warnings: Tuple[str, ...] = ()

    @property
    def n_freq(self) -> int:
        return int(self.magnitude.size)

    @property
    def resolution_hz(self) -> float:
        return self.sample_rate / self.n_freq

    def peak_frequency(self) -> float:
        """Frequency of the largest bin (first occurrence on ties)."""
        return float(self.frequencies[int(np.argmax(self.magnitude))])


@dataclass(frozen=True)
class CyclicProfile:
    """``|S(f0, alpha)|`` sampled over a linear alpha grid.

    Attributes
    ----------
    alphas:
        Cyclic-frequency grid in Hz, ascending, inclusive of both ends.
    magnitude:
        SCF magnitude at ``target_bin`` for each alpha.
    target_frequency_hz:
        Requested ``f0``.
    target_bin:
        Bin of the length-``n_freq`` transform that was sampled, after folding
        into the non-negative half.
    n_freq:
        Transform length used for each SCF slice.
    """

    alphas: np.ndarray
    magnitude: np.ndarray
    target_frequency_hz: float
    target_bin: int
    n_freq: int
    sample_rate: float
    warnings: Tuple[str, ...] = ()

    @property
    def target_bin_frequency_hz(self) -> float:
        return self.target_bin * self.sample_rate / self.n_freq

    def nearest_alpha_index(self, alpha_hz: float) -> int:
        from cyclo_analyzer.analysis.cyclic_profile import alpha_index

        return alpha_index(self.alphas, alpha_hz)

    def peak_alpha(self, *, exclude_zero: bool = False) -> float:
        """Alpha of the largest profile value, optionally skipping ``alpha = 0``."""
        mag = np.asarray(self.magnitude, dtype=float)
        if exclude_zero:
            mag = np.where(self.alphas == 0.0, -np.inf, mag)
        return float(self.alphas[int(np.argmax(mag))])


@dataclass(frozen=True)
class ScfSurface:
    """``|S(f, alpha)|`` over an ``(n_alpha, n_freq)`` grid.

    Attributes
    ----------
    alphas:
        Cyclic-frequency grid, shape ``(n_alpha,)``.
    frequencies:
        Centered spectral-frequency axis, shape ``(n_freq,)``.
    magnitude:
        Linear magnitude, shape ``(n_alpha, n_freq)``.
    magnitude_db:
        ``10*log10(magnitude + eps)``, same shape.
    z_bounds:
        ``(zmin, zmax)`` nearest-rank percentiles of ``magnitude_db``.
    eps:
        Floor added before the logarithm.
    """

    alphas: np.ndarray
    frequencies: np.ndarray
    magnitude: np.ndarray
    magnitude_db: np.ndarray
    z_bounds: Tuple[float, float]
    sample_rate: float
    eps: float = 1e-12
    percentiles: Tuple[float, float] = (0.05, 0.95)
    warnings: Tuple[str, ...] = ()

    @property
    def shape(self) -> Tuple[int, int]:
        return (int(self.magnitude.shape[0]), int(self.magnitude.shape[1]))

    @property
    def zmin(self) -> float:
        return self.z_bounds[0]

    @property
    def zmax(self) -> float:
        return self.z_bounds[1]
