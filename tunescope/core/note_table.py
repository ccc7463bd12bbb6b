"""Note tables - static frequency bands that identify musical notes.

Two tables are provided:
- The vocal table: octaves 2-5 with narrow, octave-dependent tolerance bands
  around rounded equal-tempered frequencies.
- The instrument table: every equal-tempered note from octave 0 to 8 with a
  band of +/-50 cents, so adjacent bands touch and the whole range is covered.

Bands may overlap. Lookups always return the FIRST band in table order whose
inclusive range contains the frequency; reordering a table changes results.
"""

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .constants import A4_HZ, PITCH_CLASSES
from .errors import ConfigurationError


# Rounded reference frequencies for the vocal table, octaves 2-5.
VOCAL_REFERENCE_HZ: Tuple[Tuple[str, float], ...] = (
    ("C2", 65.41), ("C#2", 69.30), ("D2", 73.42), ("D#2", 77.78),
    ("E2", 82.41), ("F2", 87.31), ("F#2", 92.50), ("G2", 98.00),
    ("G#2", 103.83), ("A2", 110.00), ("A#2", 116.54), ("B2", 123.47),
    ("C3", 130.81), ("C#3", 138.59), ("D3", 146.83), ("D#3", 155.56),
    ("E3", 164.81), ("F3", 174.61), ("F#3", 185.00), ("G3", 196.00),
    ("G#3", 207.65), ("A3", 220.00), ("A#3", 233.08), ("B3", 246.94),
    ("C4", 261.63), ("C#4", 277.18), ("D4", 293.66), ("D#4", 311.13),
    ("E4", 329.63), ("F4", 349.23), ("F#4", 369.99), ("G4", 392.00),
    ("G#4", 415.30), ("A4", 440.00), ("A#4", 466.16), ("B4", 493.88),
    ("C5", 523.25), ("C#5", 554.37), ("D5", 587.33), ("D#5", 622.25),
    ("E5", 659.26), ("F5", 698.46), ("F#5", 739.99), ("G5", 783.99),
    ("G#5", 830.61), ("A5", 880.00), ("A#5", 932.33), ("B5", 987.77),
)

# Half-width of each vocal band in Hz, by octave.
VOCAL_TOLERANCE_HZ: Dict[int, float] = {2: 2.0, 3: 3.0, 4: 4.0, 5: 5.0}


def split_note_name(name: str) -> Tuple[str, Optional[int]]:
    """Split a note name like 'F#3' into ('F#', 3).

    Names without an octave ('F#') return (name, None).
    """
    stripped = name.strip()
    idx = len(stripped)
    while idx > 0 and (stripped[idx - 1].isdigit() or stripped[idx - 1] == "-"):
        idx -= 1

    pitch_class = stripped[:idx]
    octave_part = stripped[idx:]
    octave = int(octave_part) if octave_part not in ("", "-") else None
    return pitch_class, octave


@dataclass(frozen=True)
class NoteBand:
    """An accepted frequency band for one note.

    Attributes:
        name: Note identity, with octave for octave-aware tables (e.g. 'A4')
        pitch_class: Octave-independent pitch class (e.g. 'A')
        octave: Octave number, or None for pitch-class-only bands
        min_hz: Lower inclusive bound
        max_hz: Upper inclusive bound
    """

    name: str
    pitch_class: str
    octave: Optional[int]
    min_hz: float
    max_hz: float

    @property
    def center(self) -> float:
        """Band midpoint, used as the in-tune reference frequency."""
        return (self.min_hz + self.max_hz) / 2

    def contains(self, frequency: float) -> bool:
        return self.min_hz <= frequency <= self.max_hz

    def overlaps(self, other: "NoteBand") -> bool:
        return self.min_hz <= other.max_hz and other.min_hz <= self.max_hz

    def to_record(self) -> Dict[str, Any]:
        return {"note": self.name, "min_hz": self.min_hz, "max_hz": self.max_hz}


class NoteTable:
    """Ordered, immutable collection of note bands.

    The table is validated once on construction; lookups never re-validate.
    """

    def __init__(self, bands: Iterable[NoteBand], name: str = "custom"):
        self._bands: Tuple[NoteBand, ...] = tuple(bands)
        self.name = name
        self._validate()

    def _validate(self) -> None:
        if not self._bands:
            raise ConfigurationError(f"Note table '{self.name}' is empty")

        for band in self._bands:
            if band.pitch_class not in PITCH_CLASSES:
                raise ConfigurationError(
                    f"Note table '{self.name}': unknown pitch class "
                    f"'{band.pitch_class}' in band '{band.name}'"
                )
            if not (math.isfinite(band.min_hz) and math.isfinite(band.max_hz)):
                raise ConfigurationError(
                    f"Note table '{self.name}': band '{band.name}' has non-finite bounds"
                )
            if band.min_hz <= 0 or band.min_hz >= band.max_hz:
                raise ConfigurationError(
                    f"Note table '{self.name}': band '{band.name}' has invalid bounds "
                    f"({band.min_hz}, {band.max_hz})"
                )

    def __iter__(self) -> Iterator[NoteBand]:
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def __getitem__(self, index: int) -> NoteBand:
        return self._bands[index]

    def __repr__(self) -> str:
        return f"NoteTable(name={self.name!r}, bands={len(self._bands)})"

    @property
    def bands(self) -> Tuple[NoteBand, ...]:
        return self._bands

    @property
    def min_hz(self) -> float:
        return min(b.min_hz for b in self._bands)

    @property
    def max_hz(self) -> float:
        return max(b.max_hz for b in self._bands)

    def lookup(self, frequency: float) -> Optional[NoteBand]:
        """Return the first band (in table order) containing `frequency`."""
        for band in self._bands:
            if band.min_hz <= frequency <= band.max_hz:
                return band
        return None

    def overlaps(self) -> List[Tuple[NoteBand, NoteBand]]:
        """List all pairs of bands whose ranges overlap, in table order."""
        pairs = []
        for i, first in enumerate(self._bands):
            for second in self._bands[i + 1:]:
                if first.overlaps(second):
                    pairs.append((first, second))
        return pairs

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        records: Iterable[Dict[str, Any]],
        name: str = "custom",
    ) -> "NoteTable":
        """Build a table from plain records: {"note", "min_hz", "max_hz"}."""
        bands = []
        for record in records:
            try:
                note = str(record["note"])
                min_hz = float(record["min_hz"])
                max_hz = float(record["max_hz"])
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Note table '{name}': malformed record {record!r}: {e}"
                ) from e
            pitch_class, octave = split_note_name(note)
            bands.append(
                NoteBand(
                    name=note,
                    pitch_class=pitch_class,
                    octave=octave,
                    min_hz=min_hz,
                    max_hz=max_hz,
                )
            )
        return cls(bands, name=name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "NoteTable":
        """Load a table from a JSON list of records."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Note table file not found: {path}")
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, list):
            raise ConfigurationError(f"Note table file must hold a list: {path}")
        return cls.from_records(data, name=path.stem)

    def to_records(self) -> List[Dict[str, Any]]:
        return [band.to_record() for band in self._bands]


def build_vocal_table() -> NoteTable:
    """Vocal note table: octaves 2-5, octave-dependent band widths."""
    bands = []
    for name, center in VOCAL_REFERENCE_HZ:
        pitch_class, octave = split_note_name(name)
        tolerance = VOCAL_TOLERANCE_HZ[octave]
        bands.append(
            NoteBand(
                name=name,
                pitch_class=pitch_class,
                octave=octave,
                min_hz=center - tolerance,
                max_hz=center + tolerance,
            )
        )
    return NoteTable(bands, name="vocal")


def build_instrument_table(
    a4_hz: float = A4_HZ,
    min_octave: int = 0,
    max_octave: int = 8,
    cents_tolerance: float = 50.0,
) -> NoteTable:
    """Instrument note table: equal temperament, +/- `cents_tolerance` per note.

    Args:
        a4_hz: Tuning reference for A4
        min_octave: Lowest octave to include
        max_octave: Highest octave to include
        cents_tolerance: Half-width of each band in cents

    Returns:
        NoteTable in ascending frequency order
    """
    if a4_hz <= 0:
        raise ConfigurationError(f"A4 reference must be positive, got {a4_hz}")
    if min_octave > max_octave:
        raise ConfigurationError(
            f"Invalid octave span: {min_octave}..{max_octave}"
        )
    if not 0 < cents_tolerance <= 600:
        raise ConfigurationError(
            f"Cents tolerance must be in (0, 600], got {cents_tolerance}"
        )

    low = 2 ** (-cents_tolerance / 1200)
    high = 2 ** (cents_tolerance / 1200)

    bands = []
    for octave in range(min_octave, max_octave + 1):
        for pc_index, pitch_class in enumerate(PITCH_CLASSES):
            midi = 12 * (octave + 1) + pc_index
            center = a4_hz * 2 ** ((midi - 69) / 12)
            bands.append(
                NoteBand(
                    name=f"{pitch_class}{octave}",
                    pitch_class=pitch_class,
                    octave=octave,
                    min_hz=center * low,
                    max_hz=center * high,
                )
            )
    return NoteTable(bands, name="instrument")
