"""One-shot computation of every view from a Signal and an AnalysisProfile.

``compute_from_profile`` is the single entry point consumers use: it validates
the profile against the signal up front, then runs

1) the one-sided spectrum,
2) the dominant frequency (when ``N >= 2``),
3) the CAF at ``profile.alpha_hz``,
4) the SCF slice of that CAF (``slice_n_freq`` bins),
5) the cyclic-domain profile at the dominant frequency,
6) the 2-D SCF surface,

and returns them together in an :class:`AnalysisBundle`. The profile and the
surface share ``n_alpha`` and ``grid_n_freq``.

``ResultCache`` is an optional bounded memo keyed by the exact inputs.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Hashable, Optional, Tuple

import numpy as np

from cyclo_analyzer.models.profile import AnalysisProfile
from cyclo_analyzer.models.results import (
    CafSequence,
    CyclicProfile,
    ScfSlice,
    ScfSurface,
    Spectrum,
)
from cyclo_analyzer.models.signal import Signal

from .caf import cyclic_autocorrelation
from .cyclic_profile import cyclic_profile
from .scf import spectral_correlation
from .spectrum import compute_spectrum, dominant_frequency
from .surface import scf_surface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisBundle:
    """Every view computed for one (Signal, AnalysisProfile) pair.

    Attributes
    ----------
    profile:
        Configuration that produced the bundle.
    spectrum:
        One-sided raw DFT spectrum.
    dominant_frequency_hz:
        ``f0`` rounded to 0.1 Hz, or None for records shorter than 2 samples.
    caf, scf:
        CAF and SCF slice at ``profile.alpha_hz``.
    cyclic_profile:
        ``|S(f0, alpha)|``; None when ``f0`` is undefined.
    surface:
        Full ``|S(f, alpha)|`` surface.
    alpha_marker_index:
        Index of the profile alpha grid closest to ``profile.alpha_hz``.
    elapsed_s:
        Wall time of the computation.
    """

    profile: AnalysisProfile
    sample_rate: float
    n_samples: int

    spectrum: Spectrum
    dominant_frequency_hz: Optional[float]
    caf: CafSequence
    scf: ScfSlice
    cyclic_profile: Optional[CyclicProfile]
    surface: ScfSurface

    alpha_marker_index: Optional[int] = None
    elapsed_s: float = 0.0

    @property
    def warnings(self) -> Tuple[str, ...]:
        """Notes from every view, de-duplicated, in computation order."""
        out = []
        parts = (self.caf, self.scf, self.cyclic_profile, self.surface)
        for part in parts:
            if part is None:
                continue
            for msg in part.warnings:
                if msg not in out:
                    out.append(msg)
        return tuple(out)


def compute_from_profile(signal: Signal, profile: AnalysisProfile) -> AnalysisBundle:
    """Run the full set of views for ``signal`` as configured by ``profile``.

    Raises
    ------
    ValueError, TypeError
        If any profile parameter is out of range for ``signal``. Nothing is
        computed in that case.
    """
    profile.validate(signal)
    t0 = time.perf_counter()

    slice_n_freq = profile.resolved_slice_n_freq()
    spectrum = compute_spectrum(signal)
    f0 = dominant_frequency(signal) if signal.n_samples >= 2 else None

    caf = cyclic_autocorrelation(
        signal, profile.alpha_hz, profile.max_lag, normalization=profile.caf_normalization
    )
    scf = spectral_correlation(caf, n_freq=slice_n_freq, center=profile.center, scaling=profile.scf_scaling)

    prof = None
    marker = None
    if f0 is not None:
        prof = cyclic_profile(
            signal,
            profile.max_lag,
            profile.n_alpha,
            profile.grid_n_freq,
            target_frequency_hz=f0,
            alpha_max_hz=profile.profile_alpha_max_hz,
            normalization=profile.caf_normalization,
            scaling=profile.scf_scaling,
        )
        marker = prof.nearest_alpha_index(profile.alpha_hz)

    surface = scf_surface(
        signal,
        profile.max_lag,
        profile.n_alpha,
        profile.grid_n_freq,
        alpha_max_hz=profile.surface_alpha_max_hz,
        eps=profile.eps,
        percentiles=profile.percentiles,
        normalization=profile.caf_normalization,
        scaling=profile.scf_scaling,
    )

    elapsed = time.perf_counter() - t0
    logger.debug("pipeline: N=%d fs=%g done in %.3f s", signal.n_samples, signal.sample_rate, elapsed)
    return AnalysisBundle(
        profile=profile,
        sample_rate=float(signal.sample_rate),
        n_samples=signal.n_samples,
        spectrum=spectrum,
        dominant_frequency_hz=f0,
        caf=caf,
        scf=scf,
        cyclic_profile=prof,
        surface=surface,
        alpha_marker_index=marker,
        elapsed_s=elapsed,
    )


def signal_key(signal: Signal) -> Tuple[str, float, int]:
    """Hashable identity of a record's contents: ``(sha1 of samples, fs, N)``."""
    x = np.ascontiguousarray(signal.samples, dtype=np.float64)
    digest = hashlib.sha1(x.tobytes()).hexdigest()
    return digest, float(signal.sample_rate), int(x.size)


def profile_key(profile: AnalysisProfile) -> Tuple[Tuple[str, Hashable], ...]:
    d = profile.to_dict()
    d["percentiles"] = tuple(d["percentiles"])
    return tuple(sorted(d.items()))


class ResultCache:
    """Bounded least-recently-used memo around :func:`compute_from_profile`.

    Results are value objects, so returning a cached bundle is indistinguishable
    from recomputing it.
    """

    def __init__(self, maxsize: int = 8) -> None:
        if int(maxsize) < 1:
            raise ValueError(f"maxsize must be >= 1, got {maxsize}")
        self.maxsize = int(maxsize)
        self._items: "OrderedDict[tuple, AnalysisBundle]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
        self.hits = 0
        self.misses = 0

    def get(self, signal: Signal, profile: AnalysisProfile) -> AnalysisBundle:
        key = (signal_key(signal), profile_key(profile))
        if key in self._items:
            self._items.move_to_end(key)
            self.hits += 1
            return self._items[key]

        self.misses += 1
        bundle = compute_from_profile(signal, profile)
        self._items[key] = bundle
        if len(self._items) > self.maxsize:
            self._items.popitem(last=False)
        return bundle
