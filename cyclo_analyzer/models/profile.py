"""Analysis profile -- bundles every parameter of the cyclostationary views.

An AnalysisProfile groups every parameter that affects the analysis output
into one frozen dataclass.  It can be:

- Constructed from a Signal (picks a lag window that fits the record)
- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for JSON provenance
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from cyclo_analyzer.models.signal import Signal


@dataclass(frozen=True)
class AnalysisProfile:
    """Frozen configuration for the full analysis pipeline.

    Slice parameters
    ----------------
    alpha_hz : float
        Cyclic frequency of the CAF and SCF slice views.
    max_lag : int
        CAF lag half-width in samples (``0 <= max_lag < N``).
    slice_n_freq : int or None
        Transform length of the SCF slice. ``None`` uses the CAF length
        ``2*max_lag+1``.
    center : bool
        If True, SCF slices are shifted so that 0 Hz sits in the middle.

    Grid parameters
    ---------------
    n_alpha : int
        Number of alpha grid points for the profile and the surface.
    grid_n_freq : int
        SCF transform length used for every alpha of the profile and the surface.
    profile_alpha_max_hz : float or None
        Upper alpha of the profile grid. ``None`` means ``fs/4``.
    surface_alpha_max_hz : float or None
        Upper alpha of the surface grid. ``None`` means ``fs/2``.

    Scaling
    -------
    caf_normalization : str
        ``"count"`` divides each lag by its overlap count, ``"length"`` by N.
    scf_scaling : str
        ``"none"`` keeps the raw DFT, ``"length"`` divides it by the CAF length.
    eps : float
        Floor added before taking ``10*log10`` of the surface.
    percentiles : tuple of float
        Display bounds of the surface dB grid, as fractions in [0, 1].
    """

    alpha_hz: float = 0.0
    max_lag: int = 100
    slice_n_freq: Optional[int] = None
    center: bool = True

    n_alpha: int = 32
    grid_n_freq: int = 64

    profile_alpha_max_hz: Optional[float] = None
    surface_alpha_max_hz: Optional[float] = None

    caf_normalization: str = "count"
    scf_scaling: str = "none"
    eps: float = 1e-12
    percentiles: Tuple[float, float] = (0.05, 0.95)

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_signal(cls, signal: Signal, **overrides: Any) -> AnalysisProfile:
        """Build a profile whose lag window fits ``signal``.

        ``max_lag`` defaults to ``min(100, N-1)``; everything else uses class
        defaults unless overridden via keyword arguments.  Example::

            profile = AnalysisProfile.from_signal(sig, alpha_hz=20.0, n_alpha=128)
        """
        base: Dict[str, Any] = dict(max_lag=max(0, min(100, signal.n_samples - 1)))
        base.update(overrides)
        if "percentiles" in base and not isinstance(base["percentiles"], tuple):
            base["percentiles"] = tuple(base["percentiles"])
        return cls(**base)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def resolved_slice_n_freq(self) -> int:
        if self.slice_n_freq is not None:
            return int(self.slice_n_freq)
        return 2 * int(self.max_lag) + 1

    def validate(self, signal: Signal) -> None:
        """Raise ``ValueError``/``TypeError`` if the profile cannot run on ``signal``."""
        from cyclo_analyzer.analysis import _checks

        _checks.as_samples(signal)
        _checks.check_max_lag(self.max_lag, signal.n_samples)
        _checks.check_int(self.n_alpha, "n_alpha", minimum=1)
        _checks.check_int(self.grid_n_freq, "grid_n_freq", minimum=1)
        if self.slice_n_freq is not None:
            _checks.check_int(self.slice_n_freq, "slice_n_freq", minimum=1)
        _checks.check_frequency(self.alpha_hz, "alpha_hz")
        _checks.check_alpha_max(self.profile_alpha_max_hz, 0.0)
        _checks.check_alpha_max(self.surface_alpha_max_hz, 0.0)
        _checks.check_choice(self.caf_normalization, "caf_normalization", _checks.CAF_NORMALIZATIONS)
        _checks.check_choice(self.scf_scaling, "scf_scaling", _checks.SCF_SCALINGS)
        if not float(self.eps) > 0.0:
            raise ValueError(f"eps must be > 0, got {self.eps!r}")
        lo, hi = self.percentiles
        if _checks.check_fraction(lo) > _checks.check_fraction(hi):
            raise ValueError(f"percentiles must be ordered (low, high), got {self.percentiles!r}")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (tuples become lists)."""
        d = asdict(self)
        d["percentiles"] = list(d["percentiles"])
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> AnalysisProfile:
        """Reconstruct from a dict (e.g. loaded from JSON)."""
        d = dict(d)  # shallow copy
        if "percentiles" in d and not isinstance(d["percentiles"], tuple):
            d["percentiles"] = tuple(d["percentiles"])
        return cls(**d)
