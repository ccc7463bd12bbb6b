"""Spectrum and peak data classes - the input unit of every analysis tick."""

import math
from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError


@dataclass(frozen=True)
class FrequencyRange:
    """Inclusive frequency range in Hz."""

    fmin: float
    fmax: float

    def __post_init__(self):
        if not (math.isfinite(self.fmin) and math.isfinite(self.fmax)):
            raise ConfigurationError(
                f"Frequency range bounds must be finite: ({self.fmin}, {self.fmax})"
            )
        if self.fmin < 0 or self.fmin >= self.fmax:
            raise ConfigurationError(
                f"Invalid frequency range: fmin={self.fmin}, fmax={self.fmax}"
            )

    def contains(self, frequency: float) -> bool:
        return self.fmin <= frequency <= self.fmax


@dataclass(frozen=True)
class Peak:
    """A local maximum of a magnitude spectrum."""

    frequency: float  # Hz
    magnitude: float
    bin: int = -1


@dataclass(frozen=True, eq=False)
class Spectrum:
    """One frame of non-negative magnitudes from a fixed-size transform.

    The magnitudes are copied and marked read-only, so a Spectrum can be
    handed to several analysers without any of them mutating it.

    Attributes:
        magnitudes: One magnitude per frequency bin
        sample_rate: Sample rate of the analysed signal in Hz
        transform_size: Size of the transform that produced the bins
    """

    magnitudes: np.ndarray
    sample_rate: float
    transform_size: int

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ConfigurationError(
                f"Sample rate must be positive, got {self.sample_rate}"
            )
        if self.transform_size <= 0:
            raise ConfigurationError(
                f"Transform size must be positive, got {self.transform_size}"
            )

        data = np.array(self.magnitudes, dtype=np.float64).reshape(-1)
        data.setflags(write=False)
        object.__setattr__(self, "magnitudes", data)

    def __len__(self) -> int:
        return len(self.magnitudes)

    @property
    def bin_width(self) -> float:
        """Frequency spacing between adjacent bins in Hz."""
        return self.sample_rate / self.transform_size

    def bin_frequency(self, index: int) -> float:
        """Frequency of bin `index` in Hz."""
        return index * self.sample_rate / self.transform_size

    @property
    def frequencies(self) -> np.ndarray:
        """Frequencies of all bins in Hz."""
        return np.arange(len(self.magnitudes)) * self.sample_rate / self.transform_size

    @property
    def mean_magnitude(self) -> float:
        """Average magnitude over all bins (0 for an empty spectrum)."""
        if len(self.magnitudes) == 0:
            return 0.0
        return float(np.mean(self.magnitudes))
