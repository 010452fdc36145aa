from .profile import AnalysisProfile
from .results import CafSequence, CyclicProfile, ScfSlice, ScfSurface, Spectrum
from .signal import Signal

__all__ = [
    "AnalysisProfile",
    "CafSequence",
    "CyclicProfile",
    "ScfSlice",
    "ScfSurface",
    "Signal",
    "Spectrum",
]
