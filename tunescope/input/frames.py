"""Analyser frames - byte-scaled magnitude spectra from an audio signal.

Produces the same kind of frames a browser analyser node hands to a live
pitch display: a Blackman-windowed transform, magnitudes scaled by 1/N,
exponentially smoothed across frames, converted to dB and mapped linearly
from [min_db, max_db] onto 0..255. Only the first N/2 bins are kept.

The transform itself is librosa's STFT.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np
import librosa

from ..core import ConfigurationError, Spectrum
from ..core.constants import (
    DEFAULT_HOP_LENGTH,
    DEFAULT_MAX_DB,
    DEFAULT_MIN_DB,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_SMOOTHING,
    DEFAULT_TRANSFORM_SIZE,
)


@dataclass
class AnalyserConfig:
    """Configuration for analyser-style framing.

    Attributes:
        sample_rate: Rate audio is loaded at, Hz (default: 44100)
        transform_size: Transform size N (default: 2048)
        hop_length: Samples between ticks (default: 1024)
        smoothing: Averaging constant across frames, 0-1 (default: 0.8)
        min_db: Level mapped to byte 0 (default: -100)
        max_db: Level mapped to byte 255 (default: -30)
    """

    sample_rate: int = DEFAULT_SAMPLE_RATE
    transform_size: int = DEFAULT_TRANSFORM_SIZE
    hop_length: int = DEFAULT_HOP_LENGTH
    smoothing: float = DEFAULT_SMOOTHING
    min_db: float = DEFAULT_MIN_DB
    max_db: float = DEFAULT_MAX_DB

    def validate(self) -> None:
        if self.sample_rate <= 0:
            raise ConfigurationError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.transform_size <= 0 or self.transform_size % 2:
            raise ConfigurationError(
                f"transform_size must be a positive even number, got {self.transform_size}"
            )
        if self.hop_length <= 0:
            raise ConfigurationError(f"hop_length must be positive, got {self.hop_length}")
        if not 0.0 <= self.smoothing < 1.0:
            raise ConfigurationError(f"smoothing must be in [0, 1), got {self.smoothing}")
        if self.min_db >= self.max_db:
            raise ConfigurationError(
                f"min_db must be below max_db, got {self.min_db} >= {self.max_db}"
            )


def to_byte_spectrum(
    magnitudes: np.ndarray,
    min_db: float = DEFAULT_MIN_DB,
    max_db: float = DEFAULT_MAX_DB,
) -> np.ndarray:
    """Map linear magnitudes onto 0..255 through a dB window."""
    with np.errstate(divide="ignore"):
        db = 20.0 * np.log10(magnitudes)
    scaled = 255.0 * (db - min_db) / (max_db - min_db)
    scaled = np.where(np.isfinite(scaled), scaled, 0.0)
    return np.floor(np.clip(scaled, 0.0, 255.0))


class AnalyserFrames:
    """Turns an audio signal into a sequence of (time_ms, Spectrum) ticks."""

    def __init__(self, config: Optional[AnalyserConfig] = None):
        self.config = config if config is not None else AnalyserConfig()
        self.config.validate()

    def linear_frames(self, audio: np.ndarray) -> np.ndarray:
        """Smoothed linear magnitudes, shape (frames, N/2)."""
        cfg = self.config
        n = cfg.transform_size

        audio = np.asarray(audio, dtype=np.float32)
        if audio.ndim > 1:
            audio = np.mean(audio, axis=0)
        if len(audio) < n:
            audio = np.pad(audio, (0, n - len(audio)))

        stft = librosa.stft(
            audio,
            n_fft=n,
            hop_length=cfg.hop_length,
            window="blackman",
            center=False,
        )
        mags = np.abs(stft[: n // 2]).T / n

        smoothed = np.empty_like(mags, dtype=np.float64)
        previous = np.zeros(n // 2, dtype=np.float64)
        for i, frame in enumerate(mags):
            previous = cfg.smoothing * previous + (1.0 - cfg.smoothing) * frame
            smoothed[i] = previous
        return smoothed

    def frames(self, audio: np.ndarray) -> Iterator[Tuple[float, Spectrum]]:
        """
        Yield one byte-scaled spectrum per tick.

        Args:
            audio: Mono audio at config.sample_rate

        Yields:
            (time_ms, Spectrum), time is the end of the analysis window
        """
        cfg = self.config
        for i, frame in enumerate(self.linear_frames(audio)):
            time_ms = (i * cfg.hop_length + cfg.transform_size) * 1000.0 / cfg.sample_rate
            spectrum = Spectrum(
                magnitudes=to_byte_spectrum(frame, cfg.min_db, cfg.max_db),
                sample_rate=cfg.sample_rate,
                transform_size=cfg.transform_size,
            )
            yield time_ms, spectrum

    def all_frames(self, audio: np.ndarray) -> List[Tuple[float, Spectrum]]:
        return list(self.frames(audio))
