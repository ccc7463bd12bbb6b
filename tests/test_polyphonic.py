"""Tests for polyphonic pitch-class detection and chord labelling."""

import numpy as np
import pytest

from tunescope.core import ConfigurationError, Spectrum
from tunescope.inference import ChordDatabase, ChordTemplate
from tunescope.transcription import (
    MonophonicTracker,
    PolyphonicConfig,
    PolyphonicDetector,
    infer_root,
)


@pytest.fixture
def detector():
    return PolyphonicDetector()


def _analyser_spectrum(bins, baseline=0.0):
    """Spectrum shaped like a 2048-point analyser frame at 44.1 kHz."""
    mags = np.full(1024, baseline)
    for index, magnitude in bins.items():
        mags[index] = magnitude
    return Spectrum(mags, sample_rate=44100, transform_size=2048)


class TestRangeScenario:
    """A peak at bin 186 (about 4005 Hz) with N=2048 at 44.1 kHz."""

    def test_excluded_from_monophonic_results(self):
        tracker = MonophonicTracker()
        reading = tracker.process(_analyser_spectrum({186: 200}, baseline=20.0), 0.0)

        assert reading.estimate is None
        assert len(tracker.history) == 0

    def test_present_in_polyphonic_results(self, detector):
        result = detector.process(_analyser_spectrum({186: 200}), 0.0)

        assert result.notes == ["B"]
        assert result.root == "B"

    def test_narrow_instrument_range_excludes_it(self):
        detector = PolyphonicDetector(PolyphonicConfig(fmax=2000.0))
        assert detector.process(_analyser_spectrum({186: 200})).notes == []


class TestDetectNotes:
    """Distinct pitch classes walking peaks loudest first."""

    def test_order_of_first_detection(self, detector, spectrum_factory):
        spectrum = spectrum_factory({262: 200, 330: 150, 392: 250})
        assert detector.detect_notes(spectrum) == ["G", "C", "E"]

    def test_octaves_collapse(self, detector, spectrum_factory):
        spectrum = spectrum_factory({220: 200, 440: 180, 880: 160, 330: 100})
        assert detector.detect_notes(spectrum) == ["A", "E"]

    def test_max_notes(self, spectrum_factory):
        detector = PolyphonicDetector(PolyphonicConfig(max_notes=2))
        spectrum = spectrum_factory({262: 200, 330: 150, 392: 250})

        assert detector.detect_notes(spectrum) == ["G", "C"]

    def test_quiet_spectrum(self, detector, spectrum_factory):
        result = detector.process(spectrum_factory({440: 20}))

        assert result.notes == []
        assert result.root is None
        assert result.chords == []
        assert result.best_chord is None


class TestChordLabelling:

    def test_c_major(self, detector, spectrum_factory):
        result = detector.process(spectrum_factory({262: 200, 330: 150, 392: 250}), 1234.0)

        assert result.root == "C"
        assert result.best_chord.display_name == "C"
        assert result.best_chord.match_percentage == 100.0
        assert all(c.root == "C" for c in result.chords)
        assert result.time_ms == 1234.0

    def test_without_root_hint(self, spectrum_factory):
        detector = PolyphonicDetector(PolyphonicConfig(use_root_hint=False))
        result = detector.process(spectrum_factory({262: 200, 330: 150, 392: 250}))

        assert {c.root for c in result.chords} > {"C"}

    def test_custom_database(self, spectrum_factory):
        power = ChordDatabase([ChordTemplate("power", "5", (0, 7), "Power chord")])
        detector = PolyphonicDetector(chord_database=power)
        result = detector.process(spectrum_factory({131: 200, 196: 150}))

        assert result.notes == ["C", "G"]
        assert result.root == "C"
        assert [c.display_name for c in result.chords] == ["C5"]

    def test_to_dict_top(self, detector, spectrum_factory):
        result = detector.process(spectrum_factory({262: 200, 330: 150, 392: 250}))
        data = result.to_dict(top=2)

        assert data["notes"] == ["G", "C", "E"]
        assert data["root"] == "C"
        assert len(data["chords"]) == 2
        assert len(result.to_dict()["chords"]) == len(result.chords)


class TestInferRoot:

    def test_lowest_index_in_fixed_order(self):
        assert infer_root(["G", "E", "C"]) == "C"
        assert infer_root(["B", "A#"]) == "A#"

    def test_empty(self):
        assert infer_root([]) is None


class TestPolyphonicConfig:

    @pytest.mark.parametrize("kwargs", [
        {"max_notes": -1},
        {"max_notes": 13},
        {"min_match_percentage": 100},
        {"a4_hz": 0},
        {"peak_floor": -5},
        {"fmin": 500, "fmax": 100},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            PolyphonicDetector(PolyphonicConfig(**kwargs))
