"""Spectral peak extraction."""

from typing import List, Optional

import numpy as np

from ..core import ConfigurationError, FrequencyRange, Peak, Spectrum
from ..core.constants import DEFAULT_PEAK_FLOOR


def extract_peaks(
    spectrum: Spectrum,
    floor_magnitude: float,
    freq_range: Optional[FrequencyRange] = None,
) -> List[Peak]:
    """
    Find local maxima of a magnitude spectrum.

    Bin i is a peak when its magnitude exceeds `floor_magnitude` and is
    strictly greater than both neighbours (a missing neighbour at either end
    of the spectrum counts as lower).

    Args:
        spectrum: Magnitude spectrum
        floor_magnitude: Magnitudes must be strictly above this value
        freq_range: Optional inclusive frequency range to keep

    Returns:
        Peaks ranked by magnitude, loudest first. Equal magnitudes keep
        ascending frequency order.
    """
    mags = spectrum.magnitudes
    n = len(mags)
    if n == 0:
        return []

    above_left = np.ones(n, dtype=bool)
    above_left[1:] = mags[1:] > mags[:-1]
    above_right = np.ones(n, dtype=bool)
    above_right[:-1] = mags[:-1] > mags[1:]

    mask = (mags > floor_magnitude) & above_left & above_right
    bins = np.flatnonzero(mask)
    if len(bins) == 0:
        return []

    freqs = bins * spectrum.sample_rate / spectrum.transform_size
    if freq_range is not None:
        in_range = (freqs >= freq_range.fmin) & (freqs <= freq_range.fmax)
        bins = bins[in_range]
        freqs = freqs[in_range]

    # Stable sort keeps bin order among equal magnitudes
    order = np.argsort(-mags[bins], kind="stable")

    return [
        Peak(frequency=float(freqs[i]), magnitude=float(mags[bins[i]]), bin=int(bins[i]))
        for i in order
    ]


class PeakExtractor:
    """Peak extraction bound to the settings of one detection mode.

    The vocal and instrument modes use different frequency ranges and may use
    different floors; each gets its own extractor.
    """

    def __init__(
        self,
        floor_magnitude: float = DEFAULT_PEAK_FLOOR,
        freq_range: Optional[FrequencyRange] = None,
        max_peaks: int = 0,
    ):
        """
        Initialize PeakExtractor.

        Args:
            floor_magnitude: Minimum magnitude (exclusive) for a peak
            freq_range: Inclusive frequency range, None for the full spectrum
            max_peaks: Keep only the N loudest peaks (0 = unlimited)
        """
        if floor_magnitude < 0:
            raise ConfigurationError(
                f"Peak floor must be non-negative, got {floor_magnitude}"
            )
        if max_peaks < 0:
            raise ConfigurationError(f"max_peaks must be >= 0, got {max_peaks}")

        self.floor_magnitude = floor_magnitude
        self.freq_range = freq_range
        self.max_peaks = max_peaks

    def extract(self, spectrum: Spectrum) -> List[Peak]:
        peaks = extract_peaks(spectrum, self.floor_magnitude, self.freq_range)
        if self.max_peaks > 0:
            peaks = peaks[: self.max_peaks]
        return peaks
