"""Analysis layer - Per-frame spectral analysis.

This layer turns one magnitude spectrum into note-level readings:
- Peak extraction (local maxima above a floor, in a frequency range)
- Frequency-to-note mapping with tolerance bands
- Volume level for display
"""

from .peaks import PeakExtractor, extract_peaks
from .mapping import (
    PitchEstimate,
    cents_deviation,
    detect_pitch,
    estimate_pitch,
    map_to_note,
    map_to_pitch_class,
)
from .volume import volume_level

__all__ = [
    "PeakExtractor",
    "extract_peaks",
    "PitchEstimate",
    "cents_deviation",
    "detect_pitch",
    "estimate_pitch",
    "map_to_note",
    "map_to_pitch_class",
    "volume_level",
]
