"""Polyphonic pitch-class detection and chord labelling.

This is not multi-F0 estimation: every spectral peak in the instrument range
that lands in a note band contributes its pitch class. Overtones are not
filtered out.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..analysis import PeakExtractor, map_to_pitch_class
from ..core import ConfigurationError, FrequencyRange, NoteTable, PITCH_CLASSES, Spectrum
from ..core import build_instrument_table
from ..core.constants import (
    A4_HZ,
    DEFAULT_MIN_MATCH_PERCENTAGE,
    DEFAULT_PEAK_FLOOR,
    INSTRUMENT_FMAX,
    INSTRUMENT_FMIN,
)
from ..inference import ChordDatabase, ChordMatch, ChordMatcher
from .base import SpectrumProcessor


@dataclass
class PolyphonicConfig:
    """Configuration for polyphonic (instrument) detection.

    Attributes:
        fmin: Lowest peak frequency considered, Hz (default: 27.5, A0)
        fmax: Highest peak frequency considered, Hz (default: 4186.01, C8)
        peak_floor: Minimum peak magnitude, exclusive (default: 30)
        max_notes: Keep at most this many pitch classes per tick (0 = unlimited)
        use_root_hint: Anchor chord search on the inferred root (default: True)
        min_match_percentage: Chord plausibility floor, exclusive (default: 30)
        a4_hz: Tuning reference for the instrument note table (default: 440)
    """

    fmin: float = INSTRUMENT_FMIN
    fmax: float = INSTRUMENT_FMAX
    peak_floor: float = DEFAULT_PEAK_FLOOR
    max_notes: int = 0
    use_root_hint: bool = True
    min_match_percentage: float = DEFAULT_MIN_MATCH_PERCENTAGE
    a4_hz: float = A4_HZ

    def validate(self) -> None:
        FrequencyRange(self.fmin, self.fmax)
        if self.peak_floor < 0:
            raise ConfigurationError("Peak floor must be non-negative")
        if self.max_notes < 0 or self.max_notes > len(PITCH_CLASSES):
            raise ConfigurationError(
                f"max_notes must be in [0, 12], got {self.max_notes}"
            )
        if not 0 <= self.min_match_percentage < 100:
            raise ConfigurationError(
                f"min_match_percentage must be in [0, 100), got {self.min_match_percentage}"
            )
        if self.a4_hz <= 0:
            raise ConfigurationError(f"a4_hz must be positive, got {self.a4_hz}")

    @property
    def freq_range(self) -> FrequencyRange:
        return FrequencyRange(self.fmin, self.fmax)


@dataclass
class PolyphonicResult:
    """What the polyphonic detector reports for one tick.

    Attributes:
        notes: Distinct pitch classes, in order of first detection
        root: Lowest pitch class in C..B order among `notes`
        chords: Ranked chord matches, best first
        time_ms: Caller's clock for this tick
    """

    notes: List[str] = field(default_factory=list)
    root: Optional[str] = None
    chords: List[ChordMatch] = field(default_factory=list)
    time_ms: float = 0.0

    @property
    def best_chord(self) -> Optional[ChordMatch]:
        return self.chords[0] if self.chords else None

    def to_dict(self, top: int = 0) -> Dict[str, Any]:
        chords = self.chords[:top] if top > 0 else self.chords
        return {
            "time_ms": self.time_ms,
            "notes": list(self.notes),
            "root": self.root,
            "chords": [c.to_dict() for c in chords],
        }


def infer_root(notes: List[str]) -> Optional[str]:
    """Lowest-indexed pitch class in the fixed C..B ordering.

    This is a positional choice, not the loudest or the most recent note.
    """
    if not notes:
        return None
    return min(notes, key=PITCH_CLASSES.index)


class PolyphonicDetector(SpectrumProcessor):
    """Detects the sounding pitch classes of a tick and labels the chord.

    Stateless between ticks: every call is computed from its spectrum alone.
    """

    def __init__(
        self,
        config: Optional[PolyphonicConfig] = None,
        note_table: Optional[NoteTable] = None,
        chord_database: Optional[ChordDatabase] = None,
    ):
        """
        Initialize PolyphonicDetector.

        Args:
            config: Detection settings (default: PolyphonicConfig())
            note_table: Note table (default: 12-TET instrument table at config.a4_hz)
            chord_database: Chord templates (default: built-in database)
        """
        self.config = config if config is not None else PolyphonicConfig()
        self.config.validate()

        self.note_table = (
            note_table if note_table is not None
            else build_instrument_table(a4_hz=self.config.a4_hz)
        )
        self.extractor = PeakExtractor(
            floor_magnitude=self.config.peak_floor,
            freq_range=self.config.freq_range,
        )
        self.matcher = ChordMatcher(
            database=chord_database,
            min_match_percentage=self.config.min_match_percentage,
        )

    def detect_notes(self, spectrum: Spectrum) -> List[str]:
        """Distinct pitch classes, walking peaks loudest first."""
        notes: List[str] = []
        for peak in self.extractor.extract(spectrum):
            pitch_class = map_to_pitch_class(peak, self.note_table)
            if pitch_class is None or pitch_class in notes:
                continue
            notes.append(pitch_class)
            if self.config.max_notes and len(notes) >= self.config.max_notes:
                break
        return notes

    def process(self, spectrum: Spectrum, now_ms: float = 0.0) -> PolyphonicResult:
        """
        Analyse one tick.

        Args:
            spectrum: Magnitude spectrum
            now_ms: Caller's clock in milliseconds, copied into the result

        Returns:
            PolyphonicResult with notes, inferred root and ranked chords
        """
        notes = self.detect_notes(spectrum)
        root = infer_root(notes)
        hint = root if self.config.use_root_hint else None
        chords = self.matcher.match(notes, root_hint=hint)

        return PolyphonicResult(notes=notes, root=root, chords=chords, time_ms=now_ms)
