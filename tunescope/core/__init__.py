"""Core types, constants and static tables for tunescope."""

from .constants import (
    PITCH_CLASSES,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_TRANSFORM_SIZE,
    VOCAL_FMIN,
    VOCAL_FMAX,
    INSTRUMENT_FMIN,
    INSTRUMENT_FMAX,
)
from .errors import ConfigurationError
from .spectrum import FrequencyRange, Peak, Spectrum
from .note_table import (
    NoteBand,
    NoteTable,
    build_vocal_table,
    build_instrument_table,
    split_note_name,
)

VOCAL_RANGE = FrequencyRange(VOCAL_FMIN, VOCAL_FMAX)
INSTRUMENT_RANGE = FrequencyRange(INSTRUMENT_FMIN, INSTRUMENT_FMAX)

__all__ = [
    "PITCH_CLASSES",
    "DEFAULT_SAMPLE_RATE",
    "DEFAULT_TRANSFORM_SIZE",
    "VOCAL_RANGE",
    "INSTRUMENT_RANGE",
    "ConfigurationError",
    "FrequencyRange",
    "Peak",
    "Spectrum",
    "NoteBand",
    "NoteTable",
    "build_vocal_table",
    "build_instrument_table",
    "split_note_name",
]
