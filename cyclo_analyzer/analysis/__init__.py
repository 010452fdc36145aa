"""Cyclostationary analysis package.

Design principle:
  - Callers hand in a :class:`~cyclo_analyzer.models.signal.Signal` (samples + sample rate).
  - Analysis functions return frozen result objects holding plain numpy arrays.

Project-wide hard constraint:
  - No hidden state: every function is a pure function of its arguments.

Accordingly, repeated calls with identical inputs return identical outputs, and
any caching (see :class:`~cyclo_analyzer.analysis.pipeline.ResultCache`) is an
optimisation only.
"""

from .spectrum import compute_spectrum, dft_magnitude, dominant_frequency
from .caf import caf_grid, cyclic_autocorrelation
from .scf import scf_from_signal, spectral_correlation
from .cyclic_profile import alpha_index, cyclic_profile
from .surface import nearest_rank_percentile, scf_surface
from .pipeline import AnalysisBundle, ResultCache, compute_from_profile
from .scheduler import RecomputeScheduler

__all__ = [
    "compute_spectrum",
    "dft_magnitude",
    "dominant_frequency",
    "caf_grid",
    "cyclic_autocorrelation",
    "scf_from_signal",
    "spectral_correlation",
    "alpha_index",
    "cyclic_profile",
    "nearest_rank_percentile",
    "scf_surface",
    "AnalysisBundle",
    "ResultCache",
    "compute_from_profile",
    "RecomputeScheduler",
]
