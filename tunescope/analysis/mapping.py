"""Frequency-to-note mapping.

Every lookup goes through NoteTable.lookup, which returns the first band in
table order containing the frequency. With overlapping bands the earlier band
wins, so table order is part of the mapping.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Union

from ..core import NoteBand, NoteTable, Peak, Spectrum
from ..core.constants import MAX_CENTS
from .peaks import PeakExtractor


@dataclass(frozen=True)
class PitchEstimate:
    """A single-note reading.

    Attributes:
        note: Matched band identity (e.g. 'A4')
        pitch_class: Octave-independent pitch class (e.g. 'A')
        frequency: Detected frequency in Hz
        magnitude: Peak magnitude
        octave: Octave number of the matched band
        cents: Deviation from the in-tune reference, clamped to [-50, 50]
    """

    note: str
    pitch_class: str
    frequency: float
    magnitude: float
    octave: Optional[int]
    cents: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def clamp_cents(cents: int) -> int:
    return max(-MAX_CENTS, min(MAX_CENTS, int(cents)))


def cents_deviation(frequency: float, reference: float) -> int:
    """Deviation of `frequency` from `reference` in whole cents."""
    return int(round(1200 * math.log2(frequency / reference)))


def _frequency_of(peak_or_frequency: Union[Peak, float]) -> float:
    if isinstance(peak_or_frequency, Peak):
        return peak_or_frequency.frequency
    return float(peak_or_frequency)


def map_to_note(
    peak_or_frequency: Union[Peak, float],
    note_table: NoteTable,
) -> Optional[NoteBand]:
    """Resolve a peak (or a bare frequency) to the first matching band."""
    return note_table.lookup(_frequency_of(peak_or_frequency))


def map_to_pitch_class(
    peak_or_frequency: Union[Peak, float],
    note_table: NoteTable,
) -> Optional[str]:
    """Resolve a peak to its octave-independent pitch class."""
    band = map_to_note(peak_or_frequency, note_table)
    return band.pitch_class if band is not None else None


def estimate_pitch(peak: Peak, note_table: NoteTable) -> Optional[PitchEstimate]:
    """Map a peak to a note and measure its cents deviation from the band center."""
    band = map_to_note(peak, note_table)
    if band is None or peak.frequency <= 0:
        return None

    return PitchEstimate(
        note=band.name,
        pitch_class=band.pitch_class,
        frequency=peak.frequency,
        magnitude=peak.magnitude,
        octave=band.octave,
        cents=clamp_cents(cents_deviation(peak.frequency, band.center)),
    )


def detect_pitch(
    spectrum: Spectrum,
    note_table: NoteTable,
    extractor: PeakExtractor,
) -> Optional[PitchEstimate]:
    """
    Find the strongest peak that maps to a note.

    Peaks come ranked loudest first, so the first one that maps is the
    strongest. Peaks falling between bands are skipped.

    Args:
        spectrum: Magnitude spectrum
        note_table: Octave-aware note table (usually the vocal table)
        extractor: Extractor carrying the vocal range and floor

    Returns:
        PitchEstimate, or None when no peak maps to a note
    """
    for peak in extractor.extract(spectrum):
        estimate = estimate_pitch(peak, note_table)
        if estimate is not None:
            return estimate
    return None
