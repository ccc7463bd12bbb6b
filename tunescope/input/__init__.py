"""Input layer - Audio loading and analyser-style spectrum frames."""

from .loader import AudioLoader
from .frames import AnalyserConfig, AnalyserFrames, to_byte_spectrum

__all__ = [
    "AudioLoader",
    "AnalyserConfig",
    "AnalyserFrames",
    "to_byte_spectrum",
]
