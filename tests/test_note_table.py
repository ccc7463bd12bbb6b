"""Tests for note tables and frequency-to-note mapping."""

import json

import pytest

from tunescope.analysis import (
    PeakExtractor,
    cents_deviation,
    detect_pitch,
    estimate_pitch,
    map_to_note,
    map_to_pitch_class,
)
from tunescope.analysis.mapping import clamp_cents
from tunescope.core import (
    VOCAL_RANGE,
    ConfigurationError,
    NoteBand,
    NoteTable,
    Peak,
    build_instrument_table,
    build_vocal_table,
    split_note_name,
)


@pytest.fixture(scope="module")
def vocal_table():
    return build_vocal_table()


@pytest.fixture(scope="module")
def instrument_table():
    return build_instrument_table()


class TestSplitNoteName:

    @pytest.mark.parametrize("name,expected", [
        ("A4", ("A", 4)),
        ("F#3", ("F#", 3)),
        ("C", ("C", None)),
        ("C-1", ("C", -1)),
        (" G#5 ", ("G#", 5)),
    ])
    def test_split(self, name, expected):
        assert split_note_name(name) == expected


class TestNoteTableValidation:
    """Tables are validated once, at construction."""

    def test_empty_table(self):
        with pytest.raises(ConfigurationError, match="empty"):
            NoteTable([])

    def test_unknown_pitch_class(self):
        with pytest.raises(ConfigurationError, match="unknown pitch class"):
            NoteTable([NoteBand("H4", "H", 4, 490.0, 500.0)])

    @pytest.mark.parametrize("min_hz,max_hz", [
        (500.0, 500.0),
        (510.0, 500.0),
        (0.0, 10.0),
        (-5.0, 10.0),
    ])
    def test_invalid_bounds(self, min_hz, max_hz):
        with pytest.raises(ConfigurationError, match="invalid bounds"):
            NoteTable([NoteBand("B4", "B", 4, min_hz, max_hz)])

    def test_non_finite_bounds(self):
        with pytest.raises(ConfigurationError, match="non-finite"):
            NoteTable([NoteBand("B4", "B", 4, 490.0, float("nan"))])

    def test_malformed_record(self):
        with pytest.raises(ConfigurationError, match="malformed"):
            NoteTable.from_records([{"note": "A4", "min_hz": 436.0}])

    def test_invalid_instrument_parameters(self):
        with pytest.raises(ConfigurationError):
            build_instrument_table(a4_hz=0)
        with pytest.raises(ConfigurationError):
            build_instrument_table(min_octave=5, max_octave=4)
        with pytest.raises(ConfigurationError):
            build_instrument_table(cents_tolerance=0)


class TestBuiltInTables:

    def test_vocal_table_shape(self, vocal_table):
        assert len(vocal_table) == 48
        assert vocal_table[0].name == "C2"
        assert vocal_table[-1].name == "B5"
        assert vocal_table.name == "vocal"

    def test_vocal_band_widths_grow_with_octave(self, vocal_table):
        widths = {band.octave: band.max_hz - band.min_hz for band in vocal_table}
        assert widths == pytest.approx({2: 4.0, 3: 6.0, 4: 8.0, 5: 10.0})

    def test_vocal_a4_band(self, vocal_table):
        band = vocal_table.lookup(440.0)
        assert band.name == "A4"
        assert band.min_hz == pytest.approx(436.0)
        assert band.max_hz == pytest.approx(444.0)
        assert band.center == pytest.approx(440.0)

    def test_vocal_table_span(self, vocal_table):
        assert vocal_table.min_hz == pytest.approx(63.41)
        assert vocal_table.max_hz == pytest.approx(992.77)

    def test_instrument_table_shape(self, instrument_table):
        assert len(instrument_table) == 9 * 12
        assert instrument_table[0].name == "C0"
        assert instrument_table[-1].name == "B8"

    def test_instrument_a4_band_is_fifty_cents_wide(self, instrument_table):
        band = next(b for b in instrument_table if b.name == "A4")
        assert cents_deviation(band.max_hz, 440.0) == 50
        assert cents_deviation(band.min_hz, 440.0) == -50

    def test_instrument_table_tuning(self):
        table = build_instrument_table(a4_hz=432.0)
        assert table.lookup(432.0).name == "A4"


class TestOverlapPolicy:
    """The first band in table order containing a frequency wins."""

    def test_vocal_low_octave_overlap(self, vocal_table):
        pairs = [(a.name, b.name) for a, b in vocal_table.overlaps()]
        assert ("C2", "C#2") in pairs

        # 67.35 Hz lies in both C2 [63.41, 67.41] and C#2 [67.30, 71.30]
        assert vocal_table.lookup(67.35).name == "C2"

    def test_reordering_changes_result(self):
        records = [
            {"note": "A", "min_hz": 400.0, "max_hz": 500.0},
            {"note": "B", "min_hz": 450.0, "max_hz": 550.0},
        ]
        assert NoteTable.from_records(records).lookup(470.0).name == "A"
        assert NoteTable.from_records(records[::-1]).lookup(470.0).name == "B"

    def test_bounds_inclusive(self):
        table = NoteTable.from_records([{"note": "E4", "min_hz": 325.0, "max_hz": 334.0}])
        assert table.lookup(325.0) is not None
        assert table.lookup(334.0) is not None
        assert table.lookup(334.01) is None


class TestNoteTableFiles:

    def test_records_round_trip(self, vocal_table):
        rebuilt = NoteTable.from_records(vocal_table.to_records(), name="copy")
        assert [b.name for b in rebuilt] == [b.name for b in vocal_table]
        assert rebuilt[10].pitch_class == vocal_table[10].pitch_class
        assert rebuilt[10].octave == vocal_table[10].octave

    def test_from_file(self, tmp_path):
        path = tmp_path / "strings.json"
        path.write_text(json.dumps([
            {"note": "G3", "min_hz": 190.0, "max_hz": 202.0},
            {"note": "D4", "min_hz": 285.0, "max_hz": 302.0},
        ]))
        table = NoteTable.from_file(path)

        assert table.name == "strings"
        assert table.lookup(196.0).name == "G3"

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            NoteTable.from_file(tmp_path / "nope.json")

    def test_from_file_not_a_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"note": "A4"}')
        with pytest.raises(ConfigurationError, match="list"):
            NoteTable.from_file(path)

    def test_from_file_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            NoteTable.from_file(path)


class TestMapping:
    """Peak to note mapping."""

    def test_map_to_note(self, vocal_table):
        assert map_to_note(440.0, vocal_table).name == "A4"
        assert map_to_note(220.0, vocal_table).name == "A3"
        assert map_to_note(Peak(frequency=880.0, magnitude=90.0), vocal_table).name == "A5"

    def test_between_bands(self, vocal_table):
        assert map_to_note(450.0, vocal_table) is None

    def test_idempotent(self, vocal_table):
        peak = Peak(frequency=329.0, magnitude=120.0)
        first = map_to_note(peak, vocal_table)
        for _ in range(5):
            assert map_to_note(peak, vocal_table) == first
        assert first.name == "E4"

    def test_pitch_class_only(self, instrument_table):
        assert map_to_pitch_class(440.0, instrument_table) == "A"
        assert map_to_pitch_class(55.0, instrument_table) == "A"
        assert map_to_pitch_class(4005.18, instrument_table) == "B"
        assert map_to_pitch_class(10.0, instrument_table) is None

    def test_estimate_in_tune(self, vocal_table):
        estimate = estimate_pitch(Peak(frequency=440.0, magnitude=150.0), vocal_table)
        assert estimate.note == "A4"
        assert estimate.pitch_class == "A"
        assert estimate.octave == 4
        assert estimate.cents == 0
        assert estimate.magnitude == 150.0

    def test_estimate_cents(self, vocal_table):
        # 1200 * log2(443 / 440) = 11.76
        estimate = estimate_pitch(Peak(frequency=443.0, magnitude=150.0), vocal_table)
        assert estimate.cents == 12

        estimate = estimate_pitch(Peak(frequency=437.0, magnitude=150.0), vocal_table)
        assert estimate.cents == -12

    def test_clamp_cents(self):
        assert clamp_cents(80) == 50
        assert clamp_cents(-73) == -50
        assert clamp_cents(7) == 7


class TestDetectPitch:
    """Strongest mappable peak in the vocal range."""

    def test_strongest_mappable_peak_wins(self, spectrum_factory, vocal_table):
        extractor = PeakExtractor(floor_magnitude=30, freq_range=VOCAL_RANGE)
        # 450 Hz is loudest but falls between A4 and A#4
        spectrum = spectrum_factory({450: 250, 262: 200, 330: 100})

        estimate = detect_pitch(spectrum, vocal_table, extractor)
        assert estimate.note == "C4"

    def test_no_mappable_peak(self, spectrum_factory, vocal_table):
        extractor = PeakExtractor(floor_magnitude=30, freq_range=VOCAL_RANGE)
        assert detect_pitch(spectrum_factory({450: 250}), vocal_table, extractor) is None
