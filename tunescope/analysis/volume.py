"""Frame volume level for display."""

from typing import Sequence, Union

import numpy as np

from ..core.constants import BYTE_FULL_SCALE


def volume_level(
    magnitudes: Union[np.ndarray, Sequence[float]],
    full_scale: float = BYTE_FULL_SCALE,
    gamma: float = 0.7,
) -> float:
    """
    Gamma-corrected volume level in [0, 1].

    Computed as (mean magnitude / full_scale) ** gamma. A gamma below 1
    lifts quiet levels so a meter responds to soft singing.

    Args:
        magnitudes: Spectrum magnitudes (byte-scaled by default)
        full_scale: Magnitude that maps to a level of 1
        gamma: Correction exponent

    Returns:
        Volume level, 0 for an empty frame
    """
    data = np.asarray(magnitudes, dtype=np.float64)
    if data.size == 0:
        return 0.0
    level = (float(np.mean(data)) / full_scale) ** gamma
    return float(np.clip(level, 0.0, 1.0))
