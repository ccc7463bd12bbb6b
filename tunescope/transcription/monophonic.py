"""Monophonic pitch tracking with smoothing and silence decay.

Raw single-frame pitch readings jitter, especially near band edges. The
tracker keeps a short window of accepted readings and decides per tick
whether to publish a new averaged estimate or hold the previous one:

- A note change is published immediately.
- A held note is published once the window has enough samples, as the
  window average, so sustained tones read steadily.
- After enough unbroken quiet time the history is dropped and the tracker
  falls back to silence.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from ..analysis import PeakExtractor, PitchEstimate, detect_pitch, volume_level
from ..analysis.mapping import cents_deviation, clamp_cents
from ..core import ConfigurationError, FrequencyRange, NoteTable, Spectrum, build_vocal_table
from ..core.constants import (
    DEFAULT_DECAY_MS,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_MIN_SAMPLES_TO_EMIT,
    DEFAULT_PEAK_FLOOR,
    DEFAULT_STABILITY_CENTS,
    DEFAULT_STABILITY_TICKS,
    DEFAULT_VOLUME_FLOOR,
    VOCAL_FMAX,
    VOCAL_FMIN,
)
from .base import SpectrumProcessor


class TrackerState(Enum):
    """Tracking session states."""
    SILENT = "silent"
    TRACKING = "tracking"


@dataclass
class TrackerConfig:
    """Configuration for monophonic (vocal) tracking.

    Attributes:
        fmin: Lowest peak frequency considered, Hz (default: 65)
        fmax: Highest peak frequency considered, Hz (default: 1000)
        peak_floor: Minimum peak magnitude, exclusive (default: 30)
        volume_floor: Frames with a lower mean magnitude count as silence (default: 10)
        history_size: Number of accepted readings kept for smoothing (default: 5)
        min_samples_to_emit: Readings needed before a held note is re-published (default: 3)
        decay_ms: Unbroken silence before the tracker resets, ms (default: 800)
        stability_cents: Max cents jump between readings of a stable note (default: 15)
        stability_ticks: Consecutive steady readings before a note is stable (default: 3)
    """

    fmin: float = VOCAL_FMIN
    fmax: float = VOCAL_FMAX
    peak_floor: float = DEFAULT_PEAK_FLOOR
    volume_floor: float = DEFAULT_VOLUME_FLOOR
    history_size: int = DEFAULT_HISTORY_SIZE
    min_samples_to_emit: int = DEFAULT_MIN_SAMPLES_TO_EMIT
    decay_ms: float = DEFAULT_DECAY_MS
    stability_cents: int = DEFAULT_STABILITY_CENTS
    stability_ticks: int = DEFAULT_STABILITY_TICKS

    def validate(self) -> None:
        """Raise ConfigurationError for settings that cannot work."""
        FrequencyRange(self.fmin, self.fmax)
        if self.peak_floor < 0 or self.volume_floor < 0:
            raise ConfigurationError("Peak and volume floors must be non-negative")
        if self.history_size < 1:
            raise ConfigurationError(
                f"history_size must be at least 1, got {self.history_size}"
            )
        if not 1 <= self.min_samples_to_emit <= self.history_size:
            raise ConfigurationError(
                f"min_samples_to_emit must be in [1, history_size], "
                f"got {self.min_samples_to_emit}"
            )
        if self.decay_ms < 0:
            raise ConfigurationError(f"decay_ms must be >= 0, got {self.decay_ms}")
        if self.stability_ticks < 1:
            raise ConfigurationError(
                f"stability_ticks must be at least 1, got {self.stability_ticks}"
            )

    @property
    def freq_range(self) -> FrequencyRange:
        return FrequencyRange(self.fmin, self.fmax)


class PitchHistory:
    """Fixed-capacity ring buffer of accepted pitch readings.

    Frequencies and magnitudes live in preallocated arrays; the write index
    wraps around so the oldest reading is overwritten once full.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ConfigurationError(f"History capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._frequencies = np.zeros(capacity, dtype=np.float64)
        self._magnitudes = np.zeros(capacity, dtype=np.float64)
        self._next = 0
        self._count = 0
        self._latest: Optional[PitchEstimate] = None

    def __len__(self) -> int:
        return self._count

    @property
    def latest(self) -> Optional[PitchEstimate]:
        return self._latest

    def append(self, estimate: PitchEstimate) -> None:
        self._frequencies[self._next] = estimate.frequency
        self._magnitudes[self._next] = estimate.magnitude
        self._next = (self._next + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)
        self._latest = estimate

    def clear(self) -> None:
        self._next = 0
        self._count = 0
        self._latest = None

    def mean_frequency(self) -> float:
        return float(np.mean(self._frequencies[: self._count])) if self._count else 0.0

    def mean_magnitude(self) -> float:
        return float(np.mean(self._magnitudes[: self._count])) if self._count else 0.0

    def averaged(self) -> Optional[PitchEstimate]:
        """
        Window-averaged estimate.

        Frequency and magnitude are the window means. Note identity comes
        from the latest reading; cents are re-measured against the latest
        reading's implied in-tune frequency, so smoothing refines the
        readout without re-deciding which band matched.
        """
        last = self._latest
        if last is None:
            return None

        avg_frequency = self.mean_frequency()
        reference = last.frequency * 2 ** (-last.cents / 1200)

        return PitchEstimate(
            note=last.note,
            pitch_class=last.pitch_class,
            frequency=avg_frequency,
            magnitude=self.mean_magnitude(),
            octave=last.octave,
            cents=clamp_cents(cents_deviation(avg_frequency, reference)),
        )


@dataclass
class PitchReading:
    """What the tracker reports for one tick."""

    estimate: Optional[PitchEstimate] = None
    stable: bool = False
    updated: bool = False  # True when a new estimate was published this tick
    volume: float = 0.0  # Display level, 0-1

    @property
    def note(self) -> Optional[str]:
        return self.estimate.note if self.estimate else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimate": self.estimate.to_dict() if self.estimate else None,
            "stable": self.stable,
            "updated": self.updated,
            "volume": self.volume,
        }


@dataclass
class _SessionState:
    """Mutable state owned by one tracking session."""

    last_emitted: Optional[PitchEstimate] = None
    silence_start_ms: Optional[float] = None
    last_sample: Optional[PitchEstimate] = None
    steady_run: int = 0
    stable: bool = False


class MonophonicTracker(SpectrumProcessor):
    """Tracks the single most prominent pitch across ticks.

    One instance is one tracking session; do not share an instance between
    concurrent callers. Time is passed in by the caller (`now_ms`), the
    tracker never reads a clock itself.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        note_table: Optional[NoteTable] = None,
    ):
        """
        Initialize MonophonicTracker.

        Args:
            config: Tracking settings (default: TrackerConfig())
            note_table: Octave-aware note table (default: vocal table)
        """
        self.config = config if config is not None else TrackerConfig()
        self.config.validate()

        self.note_table = note_table if note_table is not None else build_vocal_table()
        self.extractor = PeakExtractor(
            floor_magnitude=self.config.peak_floor,
            freq_range=self.config.freq_range,
        )
        self.history = PitchHistory(self.config.history_size)
        self._state = _SessionState()

    @property
    def state(self) -> TrackerState:
        if len(self.history) == 0 and self._state.last_emitted is None:
            return TrackerState.SILENT
        return TrackerState.TRACKING

    @property
    def current(self) -> Optional[PitchEstimate]:
        """Last published estimate (held between updates)."""
        return self._state.last_emitted

    @property
    def is_stable(self) -> bool:
        return self._state.stable

    def reset(self) -> None:
        """Drop all history and return to silence."""
        self.history.clear()
        self._state = _SessionState()

    def process(self, spectrum: Spectrum, now_ms: float) -> PitchReading:
        """
        Analyse one tick of a spectrum.

        The frame's mean magnitude gates silence; the strongest in-range
        peak that maps to a note is the raw reading.

        Args:
            spectrum: Magnitude spectrum (byte-scaled by default settings)
            now_ms: Caller's clock in milliseconds

        Returns:
            PitchReading for this tick
        """
        level = spectrum.mean_magnitude
        estimate = None
        if level >= self.config.volume_floor:
            estimate = detect_pitch(spectrum, self.note_table, self.extractor)

        reading = self.track(level, estimate, now_ms)
        reading.volume = volume_level(spectrum.magnitudes)
        return reading

    def track(
        self,
        level: float,
        estimate: Optional[PitchEstimate],
        now_ms: float,
    ) -> PitchReading:
        """
        Advance the session by one tick.

        Args:
            level: Frame loudness, compared against the volume floor
            estimate: Raw reading for this frame, or None if nothing mapped
            now_ms: Caller's clock in milliseconds

        Returns:
            PitchReading for this tick
        """
        if level < self.config.volume_floor:
            return self._on_silence(now_ms)

        # A loud frame breaks any run of silence, even without a note
        self._state.silence_start_ms = None

        if estimate is None:
            return self._reading(updated=False)

        self.history.append(estimate)
        self._update_stability(estimate)

        last_emitted = self._state.last_emitted
        should_update = (
            len(self.history) >= self.config.min_samples_to_emit
            or last_emitted is None
            or last_emitted.note != estimate.note
        )

        if should_update:
            self._state.last_emitted = self.history.averaged()

        return self._reading(updated=should_update)

    def _on_silence(self, now_ms: float) -> PitchReading:
        if self.state is TrackerState.SILENT:
            return PitchReading()

        start = self._state.silence_start_ms
        if start is None:
            self._state.silence_start_ms = now_ms
        elif now_ms - start > self.config.decay_ms:
            self.reset()
            return PitchReading(updated=True)

        return self._reading(updated=False)

    def _update_stability(self, estimate: PitchEstimate) -> None:
        previous = self._state.last_sample
        if (
            previous is not None
            and previous.note == estimate.note
            and abs(previous.cents - estimate.cents) < self.config.stability_cents
        ):
            self._state.steady_run += 1
        else:
            self._state.steady_run = 1

        self._state.last_sample = estimate
        self._state.stable = self._state.steady_run >= self.config.stability_ticks

    def _reading(self, updated: bool) -> PitchReading:
        return PitchReading(
            estimate=self._state.last_emitted,
            stable=self._state.stable,
            updated=updated,
        )
