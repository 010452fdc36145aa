"""Cyclo Analyzer -- second-order cyclostationary analysis of real-valued signals.

This package provides tools for:
- Computing the raw (un-normalised) DFT spectrum of a sampled record
- Detecting the dominant non-DC frequency
- Estimating the cyclic autocorrelation function (CAF) at a cyclic frequency
- Transforming a CAF into a spectral correlation function (SCF) slice
- Sweeping the SCF over cyclic frequency (profile) and frequency (surface)
- Scheduling supersedable recomputation for interactive front-ends
- Exporting every result as pandas tables

Key principles:
- Pure functions: results are frozen value objects, inputs are never mutated
- Finite-record estimates: edge taper of the biased CAF is kept, not "fixed"
- Precondition violations are raised up front, before any partial output

Main subpackages:
- analysis: Spectrum, CAF, SCF, profile/surface builders, pipeline, export
- models: Data models (Signal, result containers, AnalysisProfile)
"""

__all__ = []
