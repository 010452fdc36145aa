"""pandas tables for the analysis results.

The rendering layer and notebooks consume plain columns; these builders only
reshape arrays into DataFrames and never change values.

Functions
---------
spectrum_table
    ``frequency_hz``, ``magnitude``, ``phase_rad`` per bin.
caf_table
    ``lag``, ``lag_s``, ``value``, ``count`` per lag.
scf_table
    ``frequency_hz``, ``magnitude`` per bin.
profile_table
    ``alpha_hz``, ``magnitude`` per grid point.
surface_table
    Long format: one row per (alpha, frequency) cell.
bundle_summary
    One-row provenance table for an AnalysisBundle.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd

from cyclo_analyzer.models.results import (
    CafSequence,
    CyclicProfile,
    ScfSlice,
    ScfSurface,
    Spectrum,
)

from .pipeline import AnalysisBundle


def spectrum_table(spec: Spectrum) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "frequency_hz": np.asarray(spec.frequencies, dtype=float),
            "magnitude": np.asarray(spec.magnitude, dtype=float),
            "phase_rad": np.asarray(spec.phase, dtype=float),
        }
    )


def caf_table(caf: CafSequence) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "lag": np.asarray(caf.lags, dtype=int),
            "lag_s": np.asarray(caf.lags_s, dtype=float),
            "value": np.asarray(caf.values, dtype=float),
            "count": np.asarray(caf.counts, dtype=int),
        }
    )
    df.attrs["alpha_hz"] = float(caf.alpha_hz)
    df.attrs["normalization"] = caf.normalization
    return df


def scf_table(scf: ScfSlice) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "frequency_hz": np.asarray(scf.frequencies, dtype=float),
            "magnitude": np.asarray(scf.magnitude, dtype=float),
        }
    )
    df.attrs["alpha_hz"] = float(scf.alpha_hz)
    df.attrs["centered"] = bool(scf.centered)
    return df


def profile_table(prof: CyclicProfile) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "alpha_hz": np.asarray(prof.alphas, dtype=float),
            "magnitude": np.asarray(prof.magnitude, dtype=float),
        }
    )
    df.attrs["target_frequency_hz"] = float(prof.target_frequency_hz)
    df.attrs["target_bin"] = int(prof.target_bin)
    return df


def surface_table(surf: ScfSurface) -> pd.DataFrame:
    """Long-format surface: rows ordered by alpha index, then frequency index."""
    n_a, n_f = surf.shape
    df = pd.DataFrame(
        {
            "alpha_hz": np.repeat(np.asarray(surf.alphas, dtype=float), n_f),
            "frequency_hz": np.tile(np.asarray(surf.frequencies, dtype=float), n_a),
            "magnitude": np.asarray(surf.magnitude, dtype=float).ravel(),
            "magnitude_db": np.asarray(surf.magnitude_db, dtype=float).ravel(),
        }
    )
    df.attrs["zmin"], df.attrs["zmax"] = surf.z_bounds
    return df


def bundle_summary(bundle: AnalysisBundle) -> pd.DataFrame:
    """One row with the profile fields plus headline numbers of each view."""
    row: Dict[str, Any] = {
        "n_samples": bundle.n_samples,
        "sample_rate": bundle.sample_rate,
        "dominant_frequency_hz": bundle.dominant_frequency_hz,
        "spectrum_peak": float(np.max(bundle.spectrum.magnitude)) if bundle.spectrum.n_bins else np.nan,
        "caf_zero_lag": float(bundle.caf.values[bundle.caf.max_lag]),
        "scf_peak_frequency_hz": bundle.scf.peak_frequency(),
        "surface_zmin": bundle.surface.zmin,
        "surface_zmax": bundle.surface.zmax,
        "alpha_marker_index": bundle.alpha_marker_index,
        "elapsed_s": bundle.elapsed_s,
        "n_warnings": len(bundle.warnings),
    }
    for k, v in bundle.profile.to_dict().items():
        row[f"profile_{k}"] = v if not isinstance(v, list) else tuple(v)
    return pd.DataFrame([row])
