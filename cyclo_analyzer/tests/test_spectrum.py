"""Tests for the raw DFT spectrum and dominant-frequency detection."""

from __future__ import annotations

import numpy as np
import pytest

from cyclo_analyzer.analysis.spectrum import (
    compute_spectrum,
    dft_magnitude,
    dominant_bin,
    dominant_frequency,
    round_half_up,
)
from cyclo_analyzer.models.results import Spectrum
from cyclo_analyzer.models.signal import Signal


def _sine(f0: float, fs: float, n: int, amplitude: float = 1.0) -> Signal:
    t = np.arange(n) / fs
    return Signal.from_samples(amplitude * np.sin(2 * np.pi * f0 * t), fs)


def _direct_dft_magnitude(x: np.ndarray, m: int) -> np.ndarray:
    out = np.zeros(m)
    for k in range(m):
        re = 0.0
        im = 0.0
        for n, v in enumerate(x):
            angle = -2.0 * np.pi * k * n / m
            re += v * np.cos(angle)
            im += v * np.sin(angle)
        out[k] = np.hypot(re, im)
    return out


# -----------------------------------------------------------------------
# compute_spectrum
# -----------------------------------------------------------------------


def test_spectrum_bin_count_and_axis() -> None:
    sig = _sine(10.0, 1000.0, 999)
    spec = compute_spectrum(sig)
    assert spec.n_bins == 999 // 2 + 1
    assert spec.frequencies.shape == spec.magnitude.shape == spec.phase.shape
    np.testing.assert_allclose(spec.frequencies[:3], [0.0, 1000.0 / 999, 2000.0 / 999])
    assert np.all(spec.magnitude >= 0.0)
    assert spec.resolution_hz == pytest.approx(1000.0 / 999)


def test_spectrum_sine_peak_is_half_n_times_amplitude() -> None:
    fs, n, amp = 1000.0, 400, 2.5
    sig = _sine(50.0, fs, n, amplitude=amp)  # bin k = 50 * 400 / 1000 = 20
    spec = compute_spectrum(sig)
    k = int(np.argmax(spec.magnitude))
    assert k == 20
    assert spec.magnitude[k] == pytest.approx(n * amp / 2.0, rel=1.0 / n)


def test_spectrum_reference_scenario_10hz() -> None:
    sig = _sine(10.0, 1000.0, 1000)
    spec = compute_spectrum(sig)
    assert int(np.argmax(spec.magnitude)) == 10
    assert spec.frequencies[10] == pytest.approx(10.0)
    assert spec.magnitude[10] == pytest.approx(500.0, rel=1e-9)


def test_spectrum_phase_of_cosine_and_sine() -> None:
    n = 64
    idx = np.arange(n)
    cos_spec = compute_spectrum(Signal.from_samples(np.cos(2 * np.pi * 4 * idx / n), 64.0))
    sin_spec = compute_spectrum(Signal.from_samples(np.sin(2 * np.pi * 4 * idx / n), 64.0))
    assert cos_spec.phase[4] == pytest.approx(0.0, abs=1e-9)
    assert sin_spec.phase[4] == pytest.approx(-np.pi / 2, abs=1e-9)


def test_spectrum_matches_direct_sum() -> None:
    rng = np.random.default_rng(3)
    x = rng.normal(size=37)
    spec = compute_spectrum(Signal.from_samples(x, 100.0))
    np.testing.assert_allclose(spec.magnitude, _direct_dft_magnitude(x, 37)[: 37 // 2 + 1], atol=1e-9)


def test_spectrum_empty_signal_is_empty() -> None:
    spec = compute_spectrum(Signal.from_samples([], 1000.0))
    assert spec.n_bins == 0
    assert spec.n_samples == 0
    assert spec.frequencies.size == 0


def test_spectrum_does_not_mutate_input() -> None:
    x = np.sin(np.linspace(0, 10, 128))
    sig = Signal.from_samples(x, 50.0)
    before = sig.samples.copy()
    compute_spectrum(sig)
    np.testing.assert_array_equal(sig.samples, before)


def test_spectrum_is_idempotent() -> None:
    sig = _sine(12.0, 500.0, 300)
    a = compute_spectrum(sig)
    b = compute_spectrum(sig)
    np.testing.assert_array_equal(a.magnitude, b.magnitude)
    np.testing.assert_array_equal(a.phase, b.phase)


# -----------------------------------------------------------------------
# dft_magnitude
# -----------------------------------------------------------------------


@pytest.mark.parametrize("m", [5, 11, 16, 40])
def test_dft_magnitude_any_length_matches_direct_sum(m: int) -> None:
    rng = np.random.default_rng(11)
    x = rng.normal(size=21)
    np.testing.assert_allclose(dft_magnitude(x, m), _direct_dft_magnitude(x, m), atol=1e-9)


def test_dft_magnitude_default_length() -> None:
    x = np.array([1.0, 0.0, -1.0, 0.0])
    np.testing.assert_allclose(dft_magnitude(x), [0.0, 2.0, 0.0, 2.0], atol=1e-12)


# -----------------------------------------------------------------------
# dominant frequency
# -----------------------------------------------------------------------


def test_dominant_frequency_pure_sine() -> None:
    assert dominant_frequency(_sine(10.0, 1000.0, 1000)) == pytest.approx(10.0)


def test_dominant_frequency_within_half_bin() -> None:
    fs, n = 1000.0, 300
    f0 = 37.0  # not on a bin: resolution 3.33 Hz
    got = dominant_frequency(_sine(f0, fs, n))
    assert abs(got - f0) <= 0.5 * fs / n + 0.05


def test_dominant_frequency_ignores_dc() -> None:
    fs, n = 100.0, 100
    t = np.arange(n) / fs
    x = 50.0 + 0.1 * np.sin(2 * np.pi * 7.0 * t)
    assert dominant_frequency(Signal.from_samples(x, fs)) == pytest.approx(7.0)


def test_dominant_frequency_rounds_to_tenth() -> None:
    # resolution 1000/3 Hz -> bin 1 is 333.33 Hz
    x = np.array([0.0, 1.0, -1.0])
    assert dominant_frequency(Signal.from_samples(x, 1000.0)) == pytest.approx(333.3)


def test_dominant_bin_first_occurrence_wins() -> None:
    spec = Spectrum(
        frequencies=np.arange(5.0),
        magnitude=np.array([9.0, 3.0, 5.0, 5.0, 1.0]),
        phase=np.zeros(5),
        sample_rate=8.0,
        n_samples=8,
    )
    assert dominant_bin(spec) == 2


@pytest.mark.parametrize("n", [0, 1])
def test_dominant_frequency_needs_two_samples(n: int) -> None:
    with pytest.raises(ValueError, match="N >= 2"):
        dominant_frequency(Signal.from_samples(np.ones(n), 100.0))


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3.0
    assert round_half_up(0.25, 1) == pytest.approx(0.3)
    assert round_half_up(-2.5) == -2.0
