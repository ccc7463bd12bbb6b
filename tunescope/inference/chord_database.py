"""Chord template database.

Each template lists root-relative intervals in semitones. Interval order is
kept as given: the matcher weights chord tones by position, so the k-th
generated chord note is judged by the k-th interval.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..core import ConfigurationError, PITCH_CLASSES


@dataclass(frozen=True)
class ChordTemplate:
    """A chord type: intervals from the root plus the display suffix."""

    type_id: str
    suffix: str
    intervals: Tuple[int, ...]
    description: str = ""

    def notes_for_root(self, root: str) -> List[str]:
        """Absolute pitch classes of this chord built on `root`."""
        root_index = PITCH_CLASSES.index(root)
        return [PITCH_CLASSES[(root_index + i) % 12] for i in self.intervals]

    def to_record(self) -> Dict[str, Any]:
        return {
            "suffix": self.suffix,
            "intervals": list(self.intervals),
            "description": self.description,
        }


# type_id -> (suffix, intervals, description). Order is generation order.
DEFAULT_CHORD_TEMPLATES: Dict[str, Tuple[str, Tuple[int, ...], str]] = {
    # Triads
    "major": ("", (0, 4, 7), "Major triad"),
    "minor": ("m", (0, 3, 7), "Minor triad"),
    "diminished": ("dim", (0, 3, 6), "Diminished triad"),
    "augmented": ("aug", (0, 4, 8), "Augmented triad"),
    "sus2": ("sus2", (0, 2, 7), "Suspended 2nd"),
    "sus4": ("sus4", (0, 5, 7), "Suspended 4th"),
    # Seventh chords
    "major7": ("maj7", (0, 4, 7, 11), "Major 7th"),
    "dominant7": ("7", (0, 4, 7, 10), "Dominant 7th"),
    "minor7": ("m7", (0, 3, 7, 10), "Minor 7th"),
    "minor-major7": ("mMaj7", (0, 3, 7, 11), "Minor-Major 7th"),
    "diminished7": ("dim7", (0, 3, 6, 9), "Diminished 7th"),
    "half-diminished7": ("m7b5", (0, 3, 6, 10), "Half-diminished 7th"),
    "augmented7": ("aug7", (0, 4, 8, 10), "Augmented 7th"),
    "augmented-major7": ("augMaj7", (0, 4, 8, 11), "Augmented Major 7th"),
    # Sixth chords
    "major6": ("6", (0, 4, 7, 9), "Major 6th"),
    "minor6": ("m6", (0, 3, 7, 9), "Minor 6th"),
    # Ninth chords
    "major9": ("maj9", (0, 4, 7, 11, 14), "Major 9th"),
    "dominant9": ("9", (0, 4, 7, 10, 14), "Dominant 9th"),
    "minor9": ("m9", (0, 3, 7, 10, 14), "Minor 9th"),
    # Eleventh chords
    "major11": ("maj11", (0, 4, 7, 11, 14, 17), "Major 11th"),
    "dominant11": ("11", (0, 4, 7, 10, 14, 17), "Dominant 11th"),
    "minor11": ("m11", (0, 3, 7, 10, 14, 17), "Minor 11th"),
    # Thirteenth chords
    "major13": ("maj13", (0, 4, 7, 11, 14, 17, 21), "Major 13th"),
    "dominant13": ("13", (0, 4, 7, 10, 14, 17, 21), "Dominant 13th"),
    "minor13": ("m13", (0, 3, 7, 10, 14, 17, 21), "Minor 13th"),
    # Added tone
    "add9": ("add9", (0, 4, 7, 14), "Added 9th"),
    "madd9": ("madd9", (0, 3, 7, 14), "Minor Added 9th"),
    "add11": ("add11", (0, 4, 7, 17), "Added 11th"),
    # Altered
    "7b5": ("7b5", (0, 4, 6, 10), "Dominant 7th flat 5"),
    "7#5": ("7#5", (0, 4, 8, 10), "Dominant 7th sharp 5"),
    "7b9": ("7b9", (0, 4, 7, 10, 13), "Dominant 7th flat 9"),
    "7#9": ("7#9", (0, 4, 7, 10, 15), "Dominant 7th sharp 9"),
    "7#11": ("7#11", (0, 4, 7, 10, 14, 18), "Dominant 7th sharp 11"),
    "7b13": ("7b13", (0, 4, 7, 10, 14, 17, 20), "Dominant 7th flat 13"),
}


class ChordDatabase:
    """Ordered, validated collection of chord templates.

    Iterating yields templates in table order.
    """

    def __init__(self, templates: Iterable[ChordTemplate], name: str = "custom"):
        self.name = name
        self._templates: Dict[str, ChordTemplate] = {}
        for template in templates:
            if template.type_id in self._templates:
                raise ConfigurationError(
                    f"Chord database '{name}': duplicate chord type '{template.type_id}'"
                )
            self._templates[template.type_id] = template
        self._validate()

    def _validate(self) -> None:
        if not self._templates:
            raise ConfigurationError(f"Chord database '{self.name}' is empty")

        for template in self._templates.values():
            if not template.intervals:
                raise ConfigurationError(
                    f"Chord '{template.type_id}' has no intervals"
                )
            if 0 not in template.intervals:
                raise ConfigurationError(
                    f"Chord '{template.type_id}' does not contain its root (interval 0)"
                )
            for interval in template.intervals:
                if not isinstance(interval, int) or not 0 <= interval < 24:
                    raise ConfigurationError(
                        f"Chord '{template.type_id}': interval {interval!r} "
                        "outside [0, 24)"
                    )

    def __iter__(self) -> Iterator[ChordTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._templates

    def __repr__(self) -> str:
        return f"ChordDatabase(name={self.name!r}, templates={len(self._templates)})"

    def get(self, type_id: str) -> Optional[ChordTemplate]:
        return self._templates.get(type_id)

    def type_ids(self) -> List[str]:
        return list(self._templates)

    @classmethod
    def from_records(
        cls,
        records: Dict[str, Dict[str, Any]],
        name: str = "custom",
    ) -> "ChordDatabase":
        """Build from {type_id: {"suffix", "intervals", "description"}}."""
        templates = []
        for type_id, record in records.items():
            try:
                intervals = tuple(record["intervals"])
                suffix = str(record.get("suffix", ""))
                description = str(record.get("description", ""))
            except (KeyError, TypeError, AttributeError) as e:
                raise ConfigurationError(
                    f"Chord database '{name}': malformed record for '{type_id}': {e}"
                ) from e
            templates.append(
                ChordTemplate(
                    type_id=str(type_id),
                    suffix=suffix,
                    intervals=intervals,
                    description=description,
                )
            )
        return cls(templates, name=name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ChordDatabase":
        """Load from a JSON object keyed by chord type."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Chord database file not found: {path}")
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Chord database file must hold an object: {path}")
        return cls.from_records(data, name=path.stem)

    def to_records(self) -> Dict[str, Dict[str, Any]]:
        return {t.type_id: t.to_record() for t in self._templates.values()}


def build_default_database() -> ChordDatabase:
    return ChordDatabase(
        (
            ChordTemplate(type_id=type_id, suffix=suffix, intervals=intervals, description=desc)
            for type_id, (suffix, intervals, desc) in DEFAULT_CHORD_TEMPLATES.items()
        ),
        name="default",
    )


DEFAULT_DATABASE = build_default_database()
