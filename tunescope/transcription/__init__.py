"""Transcription layer - Per-tick note tracking from spectra.

- Monophonic tracking (single most prominent pitch, smoothed over ticks)
- Polyphonic detection (sounding pitch classes + root + chord candidates)
"""

from .base import SpectrumProcessor
from .monophonic import (
    MonophonicTracker,
    PitchHistory,
    PitchReading,
    TrackerConfig,
    TrackerState,
)
from .polyphonic import (
    PolyphonicConfig,
    PolyphonicDetector,
    PolyphonicResult,
    infer_root,
)

__all__ = [
    "SpectrumProcessor",
    "MonophonicTracker",
    "PitchHistory",
    "PitchReading",
    "TrackerConfig",
    "TrackerState",
    "PolyphonicConfig",
    "PolyphonicDetector",
    "PolyphonicResult",
    "infer_root",
]
