"""tunescope - Pitch and chord tracking from magnitude spectra.

Architecture Layers:
    1. core/          - Spectrum, peaks, note tables, constants
    2. analysis/      - Per-frame analysis (peak extraction, note mapping, volume)
    3. transcription/ - Per-tick tracking (monophonic tracker, polyphonic detector)
    4. inference/     - Chord template database and chord matching
    5. input/         - Audio loading and analyser-style spectrum frames
"""

__version__ = "0.1.0"

# Core types
from .core import (
    ConfigurationError,
    FrequencyRange,
    NoteBand,
    NoteTable,
    Peak,
    Spectrum,
    build_instrument_table,
    build_vocal_table,
)

# Analysis layer
from .analysis import (
    PeakExtractor,
    PitchEstimate,
    extract_peaks,
    map_to_note,
    volume_level,
)

# Transcription layer
from .transcription import (
    MonophonicTracker,
    PitchReading,
    PolyphonicDetector,
    PolyphonicResult,
    TrackerConfig,
    PolyphonicConfig,
)

# Inference layer
from .inference import ChordDatabase, ChordMatch, ChordMatcher, match_chords

# Input layer
from .input import AnalyserConfig, AnalyserFrames, AudioLoader

from .config import AnalysisConfig

__all__ = [
    # Core
    "ConfigurationError",
    "FrequencyRange",
    "NoteBand",
    "NoteTable",
    "Peak",
    "Spectrum",
    "build_instrument_table",
    "build_vocal_table",
    # Analysis
    "PeakExtractor",
    "PitchEstimate",
    "extract_peaks",
    "map_to_note",
    "volume_level",
    # Transcription
    "MonophonicTracker",
    "PitchReading",
    "PolyphonicDetector",
    "PolyphonicResult",
    "TrackerConfig",
    "PolyphonicConfig",
    # Inference
    "ChordDatabase",
    "ChordMatch",
    "ChordMatcher",
    "match_chords",
    # Input
    "AnalyserConfig",
    "AnalyserFrames",
    "AudioLoader",
    # Config
    "AnalysisConfig",
]
