from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Union

import numpy as np


@dataclass(frozen=True)
class Signal:
    """
    Real-valued, uniformly sampled input sequence handed to the analysis engine.

    Notes
    - 'samples' is always a read-only float64 vector; the engine never writes to it.
    - 'sample_rate' is in samples per second and is constant for the whole sequence.
    - An empty signal is valid; some operations (dominant frequency, CAF) reject it.
    """
    samples: np.ndarray
    sample_rate: float

    @classmethod
    def from_samples(
        cls,
        samples: Union[np.ndarray, Iterable[float]],
        sample_rate: float,
    ) -> "Signal":
        """Validate and freeze a sample sequence.

        Raises ``ValueError`` for a non-1D or non-finite sequence and for a
        non-positive (or non-finite) sample rate.
        """
        x = np.array(samples, dtype=np.float64, copy=True)
        if x.ndim != 1:
            raise ValueError(f"samples must be 1D, got shape {x.shape}")
        if x.size and not np.all(np.isfinite(x)):
            bad = np.where(~np.isfinite(x))[0]
            raise ValueError(f"samples contain non-finite values at indices {bad[:20].tolist()}")

        fs = float(sample_rate)
        if not math.isfinite(fs) or fs <= 0.0:
            raise ValueError(f"sample_rate must be a finite value > 0, got {sample_rate!r}")

        x.setflags(write=False)
        return cls(samples=x, sample_rate=fs)

    @property
    def n_samples(self) -> int:
        return int(self.samples.size)

    @property
    def duration_s(self) -> float:
        return self.n_samples / self.sample_rate

    @property
    def resolution_hz(self) -> float:
        """DFT bin spacing ``fs/N`` (NaN for an empty signal)."""
        if self.n_samples == 0:
            return float("nan")
        return self.sample_rate / self.n_samples

    @property
    def nyquist_hz(self) -> float:
        return 0.5 * self.sample_rate

    def time_axis(self) -> np.ndarray:
        """Sample instants ``n/fs`` in seconds."""
        return np.arange(self.n_samples, dtype=np.float64) / self.sample_rate
