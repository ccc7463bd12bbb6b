"""Tests for spectral peak extraction."""

import numpy as np
import pytest

from tunescope.analysis import PeakExtractor, extract_peaks
from tunescope.core import ConfigurationError, FrequencyRange, Spectrum
from tunescope.core.constants import DEFAULT_PEAK_FLOOR


def _spectrum(values, sample_rate=44100, transform_size=2048):
    return Spectrum(np.asarray(values, dtype=float), sample_rate, transform_size)


class TestExtractPeaks:
    """Local maxima above a floor."""

    def test_empty_spectrum(self):
        assert extract_peaks(_spectrum([]), floor_magnitude=30) == []

    @pytest.mark.parametrize("level", [0.0, 10.0, 29.9, 30.0])
    def test_all_bins_below_floor(self, level):
        rng = np.random.default_rng(0)
        values = rng.uniform(0, level, size=512) if level else np.zeros(512)
        assert extract_peaks(_spectrum(values), floor_magnitude=30) == []

    @pytest.mark.parametrize("length", [1, 2, 3, 17, 1024, 4096])
    def test_single_spike_found_for_any_length(self, length):
        values = np.zeros(length)
        index = length // 2
        values[index] = 100
        peaks = extract_peaks(_spectrum(values), floor_magnitude=30)

        assert len(peaks) == 1
        assert peaks[0].bin == index
        assert peaks[0].magnitude == 100

    def test_spike_at_edges(self):
        values = np.zeros(64)
        values[0] = 80
        values[-1] = 90
        peaks = extract_peaks(_spectrum(values), floor_magnitude=30)

        assert [p.bin for p in peaks] == [63, 0]

    def test_floor_is_exclusive(self):
        values = np.zeros(16)
        values[8] = 30
        assert extract_peaks(_spectrum(values), floor_magnitude=30) == []

    def test_plateau_is_not_a_peak(self):
        values = np.zeros(16)
        values[7] = values[8] = 120
        assert extract_peaks(_spectrum(values), floor_magnitude=30) == []

    def test_bin_frequency(self):
        values = np.zeros(1024)
        values[186] = 200
        peak = extract_peaks(_spectrum(values), floor_magnitude=30)[0]

        assert peak.frequency == pytest.approx(186 * 44100 / 2048)
        assert peak.frequency == pytest.approx(4005.18, abs=0.01)

    def test_ranked_by_magnitude(self):
        values = np.zeros(100)
        values[10] = 50
        values[20] = 200
        values[30] = 120
        peaks = extract_peaks(_spectrum(values), floor_magnitude=30)

        assert [p.bin for p in peaks] == [20, 30, 10]

    def test_equal_magnitudes_keep_bin_order(self):
        values = np.zeros(100)
        values[40] = values[10] = values[70] = 90
        peaks = extract_peaks(_spectrum(values), floor_magnitude=30)

        assert [p.bin for p in peaks] == [10, 40, 70]

    def test_frequency_range_is_inclusive(self, spectrum_factory):
        spectrum = spectrum_factory({65: 100, 500: 100, 1000: 100, 1002: 100})
        peaks = extract_peaks(spectrum, 30, FrequencyRange(65.0, 1000.0))

        assert sorted(p.frequency for p in peaks) == [65.0, 500.0, 1000.0]

    def test_does_not_modify_input(self):
        values = np.zeros(32)
        values[5] = 77
        spectrum = _spectrum(values)
        extract_peaks(spectrum, floor_magnitude=30)

        assert spectrum.magnitudes[5] == 77
        assert not spectrum.magnitudes.flags.writeable


class TestPeakExtractor:
    """Extractor bound to one detection mode."""

    def test_default_floor(self):
        assert PeakExtractor().floor_magnitude == DEFAULT_PEAK_FLOOR

    def test_max_peaks(self):
        values = np.zeros(100)
        for i, b in enumerate([10, 20, 30, 40]):
            values[b] = 50 + i * 10
        extractor = PeakExtractor(floor_magnitude=30, max_peaks=2)

        assert [p.bin for p in extractor.extract(_spectrum(values))] == [40, 30]

    def test_rejects_negative_floor(self):
        with pytest.raises(ConfigurationError):
            PeakExtractor(floor_magnitude=-1)

    def test_rejects_negative_max_peaks(self):
        with pytest.raises(ConfigurationError):
            PeakExtractor(max_peaks=-3)


class TestSpectrum:
    """Spectrum validation."""

    @pytest.mark.parametrize("sample_rate,transform_size", [(0, 2048), (-44100, 2048), (44100, 0), (44100, -1)])
    def test_invalid_geometry(self, sample_rate, transform_size):
        with pytest.raises(ConfigurationError):
            Spectrum(np.zeros(8), sample_rate, transform_size)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            Spectrum(np.zeros(8), 0, 2048)

    def test_bin_width(self):
        assert Spectrum(np.zeros(4), 44100, 2048).bin_width == pytest.approx(21.533, abs=1e-3)

    def test_mean_magnitude(self):
        assert Spectrum([10, 20, 30], 44100, 2048).mean_magnitude == 20
        assert Spectrum([], 44100, 2048).mean_magnitude == 0

    @pytest.mark.parametrize("fmin,fmax", [(100, 100), (200, 100), (-1, 10), (0, float("inf"))])
    def test_invalid_frequency_range(self, fmin, fmax):
        with pytest.raises(ConfigurationError):
            FrequencyRange(fmin, fmax)
