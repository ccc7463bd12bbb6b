"""Shared fixtures: synthetic spectra and audio."""

import numpy as np
import pytest

from tunescope.core import Spectrum


SAMPLE_RATE = 44100


def make_spectrum(peaks=None, n_bins=5000, baseline=0.0, resolution=1.0):
    """Build a spectrum whose bin i sits at i * resolution Hz.

    Args:
        peaks: {frequency_hz: magnitude} single-bin spikes
        n_bins: Number of bins
        baseline: Magnitude of every other bin
        resolution: Bin width in Hz
    """
    transform_size = int(round(SAMPLE_RATE / resolution))
    mags = np.full(n_bins, baseline, dtype=np.float64)
    for freq, mag in (peaks or {}).items():
        mags[int(round(freq / resolution))] = mag
    return Spectrum(magnitudes=mags, sample_rate=SAMPLE_RATE, transform_size=transform_size)


def sine(freq, duration=1.0, sr=SAMPLE_RATE, amplitude=0.5):
    t = np.arange(int(duration * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def spectrum_factory():
    return make_spectrum


@pytest.fixture
def sine_factory():
    return sine


@pytest.fixture
def loud_spectrum():
    """Build a spectrum loud enough to pass the default volume floor."""
    def _build(peaks):
        return make_spectrum(peaks, n_bins=2000, baseline=20.0)
    return _build


@pytest.fixture
def silent_spectrum():
    return make_spectrum(n_bins=2000)
