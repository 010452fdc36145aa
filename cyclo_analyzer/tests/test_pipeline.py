"""Tests for compute_from_profile, ResultCache and the pandas exports."""

from __future__ import annotations

import dataclasses

import numpy as np
import pandas as pd
import pytest

from cyclo_analyzer.analysis.caf import cyclic_autocorrelation
from cyclo_analyzer.analysis.cyclic_profile import cyclic_profile
from cyclo_analyzer.analysis.export import (
    bundle_summary,
    caf_table,
    profile_table,
    scf_table,
    spectrum_table,
    surface_table,
)
from cyclo_analyzer.analysis.pipeline import ResultCache, compute_from_profile, signal_key
from cyclo_analyzer.analysis.scf import spectral_correlation
from cyclo_analyzer.analysis.spectrum import compute_spectrum
from cyclo_analyzer.analysis.surface import scf_surface
from cyclo_analyzer.models.profile import AnalysisProfile
from cyclo_analyzer.models.signal import Signal


def _sine(f0: float = 10.0, fs: float = 1000.0, n: int = 1000) -> Signal:
    k = np.arange(n)
    return Signal.from_samples(np.sin(2 * np.pi * f0 * k / fs), fs)


def _profile(**overrides) -> AnalysisProfile:
    base = dict(alpha_hz=20.0, max_lag=50, n_alpha=11, grid_n_freq=64)
    base.update(overrides)
    return AnalysisProfile(**base)


# -----------------------------------------------------------------------
# compute_from_profile parity
# -----------------------------------------------------------------------


def test_compute_from_profile_matches_direct() -> None:
    """compute_from_profile should produce identical results to direct calls."""
    sig = _sine()
    profile = _profile()
    bundle = compute_from_profile(sig, profile)

    spec = compute_spectrum(sig)
    caf = cyclic_autocorrelation(sig, 20.0, 50)
    scf = spectral_correlation(caf)
    prof = cyclic_profile(sig, 50, 11, 64, target_frequency_hz=10.0)
    surf = scf_surface(sig, 50, 11, 64)

    assert bundle.dominant_frequency_hz == pytest.approx(10.0)
    np.testing.assert_array_equal(bundle.spectrum.magnitude, spec.magnitude)
    np.testing.assert_array_equal(bundle.caf.values, caf.values)
    np.testing.assert_array_equal(bundle.scf.magnitude, scf.magnitude)
    np.testing.assert_array_equal(bundle.cyclic_profile.magnitude, prof.magnitude)
    np.testing.assert_array_equal(bundle.surface.magnitude_db, surf.magnitude_db)
    assert bundle.surface.z_bounds == surf.z_bounds


def test_bundle_alpha_marker() -> None:
    bundle = compute_from_profile(_sine(), _profile(alpha_hz=52.0))
    # profile grid: 0..250 Hz in 25 Hz steps
    assert bundle.alpha_marker_index == 2
    assert bundle.cyclic_profile.alphas[2] == pytest.approx(50.0)


def test_bundle_slice_defaults_to_caf_length() -> None:
    bundle = compute_from_profile(_sine(), _profile(max_lag=30))
    assert bundle.scf.n_freq == 61
    assert bundle.surface.shape == (11, 64)


def test_bundle_slice_and_grid_lengths_are_independent() -> None:
    bundle = compute_from_profile(_sine(), AnalysisProfile(max_lag=100))
    assert bundle.scf.n_freq == 201
    assert abs(bundle.scf.peak_frequency()) == pytest.approx(2 * 1000.0 / 201)
    assert bundle.cyclic_profile.n_freq == 64
    assert len(bundle.cyclic_profile.alphas) == 32
    assert bundle.surface.shape == (32, 64)


def test_bundle_explicit_slice_length() -> None:
    bundle = compute_from_profile(_sine(), _profile(slice_n_freq=128))
    assert bundle.scf.n_freq == 128
    assert bundle.surface.shape == (11, 64)


def test_bundle_uses_alternate_scaling() -> None:
    sig = _sine()
    a = compute_from_profile(sig, _profile())
    b = compute_from_profile(sig, _profile(scf_scaling="length"))
    np.testing.assert_allclose(b.scf.magnitude, a.scf.magnitude / 101.0)


def test_bundle_single_sample_has_no_profile() -> None:
    sig = Signal.from_samples([2.0], 10.0)
    bundle = compute_from_profile(sig, AnalysisProfile(max_lag=0, n_alpha=2))
    assert bundle.dominant_frequency_hz is None
    assert bundle.cyclic_profile is None
    assert bundle.alpha_marker_index is None
    assert bundle.caf.values[0] == pytest.approx(4.0)


def test_compute_from_profile_validates_first() -> None:
    with pytest.raises(ValueError, match="max_lag"):
        compute_from_profile(_sine(n=20), _profile(max_lag=50))


def test_bundle_warnings_merged() -> None:
    bundle = compute_from_profile(_sine(), _profile(alpha_hz=700.0))
    assert any("Nyquist" in w for w in bundle.warnings)


# -----------------------------------------------------------------------
# ResultCache
# -----------------------------------------------------------------------


def test_result_cache_hits_and_eviction() -> None:
    cache = ResultCache(maxsize=2)
    sig = _sine()
    p1 = _profile(alpha_hz=0.0)
    p2 = _profile(alpha_hz=5.0)
    p3 = _profile(alpha_hz=10.0)

    b1 = cache.get(sig, p1)
    assert cache.get(sig, p1) is b1
    assert (cache.hits, cache.misses) == (1, 1)

    cache.get(sig, p2)
    cache.get(sig, p3)  # evicts p1
    assert len(cache) == 2
    assert cache.get(sig, p1) is not b1
    assert cache.misses == 4


def test_result_cache_keys_on_contents() -> None:
    cache = ResultCache()
    a = _sine()
    b = Signal.from_samples(np.array(a.samples), a.sample_rate)
    assert signal_key(a) == signal_key(b)
    first = cache.get(a, _profile())
    assert cache.get(b, _profile()) is first
    assert cache.get(b, dataclasses.replace(_profile(), center=False)) is not first


def test_result_cache_rejects_bad_size() -> None:
    with pytest.raises(ValueError):
        ResultCache(maxsize=0)


# -----------------------------------------------------------------------
# Export tables
# -----------------------------------------------------------------------


def test_export_tables() -> None:
    bundle = compute_from_profile(_sine(), _profile())

    spec_df = spectrum_table(bundle.spectrum)
    assert list(spec_df.columns) == ["frequency_hz", "magnitude", "phase_rad"]
    assert len(spec_df) == 501

    caf_df = caf_table(bundle.caf)
    assert list(caf_df.columns) == ["lag", "lag_s", "value", "count"]
    assert caf_df["lag"].iloc[0] == -50
    assert caf_df.attrs["alpha_hz"] == 20.0

    scf_df = scf_table(bundle.scf)
    assert len(scf_df) == 101
    assert scf_df.attrs["centered"] is True

    prof_df = profile_table(bundle.cyclic_profile)
    assert len(prof_df) == 11
    assert prof_df.attrs["target_bin"] == bundle.cyclic_profile.target_bin

    surf_df = surface_table(bundle.surface)
    assert len(surf_df) == 11 * 64
    # row-major: first n_freq rows belong to alpha index 0
    assert (surf_df["alpha_hz"].iloc[:64] == 0.0).all()
    np.testing.assert_array_equal(
        surf_df["magnitude"].to_numpy()[64:128], bundle.surface.magnitude[1]
    )
    assert surf_df.attrs["zmin"] == bundle.surface.zmin


def test_bundle_summary_row() -> None:
    bundle = compute_from_profile(_sine(), _profile())
    df = bundle_summary(bundle)
    assert isinstance(df, pd.DataFrame)
    assert len(df) == 1
    row = df.iloc[0]
    assert row["n_samples"] == 1000
    assert row["dominant_frequency_hz"] == pytest.approx(10.0)
    assert row["profile_max_lag"] == 50
    assert row["profile_percentiles"] == (0.05, 0.95)
    assert row["surface_zmin"] <= row["surface_zmax"]
