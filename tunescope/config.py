"""Configuration for tunescope.

One AnalysisConfig groups the settings of every stage. Configuration can be
built in code or loaded from a JSON file; all validation happens once, when
the config is loaded, never per analysis tick.

Example JSON:

    {
      "analyser": {"transform_size": 4096},
      "tracker": {"decay_ms": 600},
      "polyphonic": {"max_notes": 6},
      "chord_table_path": "my_chords.json"
    }
"""

import json
import warnings
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core import ConfigurationError, NoteTable, build_instrument_table, build_vocal_table
from .inference import DEFAULT_DATABASE, ChordDatabase
from .input import AnalyserConfig
from .transcription import (
    MonophonicTracker,
    PolyphonicConfig,
    PolyphonicDetector,
    TrackerConfig,
)


_ACCEPTED_TYPES = {int: (int,), float: (int, float), bool: (bool,)}


def _section(cls, data: Optional[Dict[str, Any]], name: str):
    """Build one config section, rejecting unknown keys and mistyped values."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config section '{name}' must be an object")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in config section '{name}': {', '.join(sorted(unknown))}"
        )
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        accepted = _ACCEPTED_TYPES.get(f.type, (f.type,))
        # bool is an int subclass; only bool fields take it
        if not isinstance(value, accepted) or (isinstance(value, bool) and f.type is not bool):
            raise ConfigurationError(
                f"Config value '{name}.{f.name}' must be {f.type.__name__}, got {value!r}"
            )
    return cls(**data)


@dataclass
class AnalysisConfig:
    """Settings for every stage of the pipeline.

    Attributes:
        analyser: Framing of audio into byte-scaled spectra
        tracker: Monophonic (vocal) tracking
        polyphonic: Polyphonic (instrument) detection and chord matching
        vocal_table_path: Optional JSON note table replacing the vocal table
        instrument_table_path: Optional JSON note table replacing the instrument table
        chord_table_path: Optional JSON chord database replacing the built-in one
    """

    analyser: AnalyserConfig = field(default_factory=AnalyserConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    polyphonic: PolyphonicConfig = field(default_factory=PolyphonicConfig)
    vocal_table_path: Optional[Path] = None
    instrument_table_path: Optional[Path] = None
    chord_table_path: Optional[Path] = None

    def validate(self) -> None:
        """Raise ConfigurationError if any section is unusable."""
        self.analyser.validate()
        self.tracker.validate()
        self.polyphonic.validate()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfig":
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        sections = {"analyser", "tracker", "polyphonic"}
        paths = {"vocal_table_path", "instrument_table_path", "chord_table_path"}
        unknown = set(data) - sections - paths
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )

        config = cls(
            analyser=_section(AnalyserConfig, data.get("analyser"), "analyser"),
            tracker=_section(TrackerConfig, data.get("tracker"), "tracker"),
            polyphonic=_section(PolyphonicConfig, data.get("polyphonic"), "polyphonic"),
            **{key: Path(data[key]) for key in paths if data.get(key)},
        )
        config.validate()
        return config

    @classmethod
    def from_file(cls, path: Union[Path, str]) -> "AnalysisConfig":
        """Load configuration from a JSON file. A missing file yields defaults."""
        path = Path(path)
        if not path.exists():
            warnings.warn(f"Config file not found: {path}, using defaults")
            return cls()

        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in config file {path}: {e}") from e

        config = cls.from_dict(data)

        # Relative table paths are resolved against the config file
        for key in ("vocal_table_path", "instrument_table_path", "chord_table_path"):
            value = getattr(config, key)
            if value is not None and not value.is_absolute():
                setattr(config, key, path.parent / value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "analyser": asdict(self.analyser),
            "tracker": asdict(self.tracker),
            "polyphonic": asdict(self.polyphonic),
        }
        for key in ("vocal_table_path", "instrument_table_path", "chord_table_path"):
            value = getattr(self, key)
            if value is not None:
                data[key] = str(value)
        return data

    def save(self, path: Union[Path, str]) -> None:
        """Save configuration to a JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def vocal_table(self) -> NoteTable:
        if self.vocal_table_path is not None:
            return NoteTable.from_file(self.vocal_table_path)
        return build_vocal_table()

    def instrument_table(self) -> NoteTable:
        if self.instrument_table_path is not None:
            return NoteTable.from_file(self.instrument_table_path)
        return build_instrument_table(a4_hz=self.polyphonic.a4_hz)

    def chord_database(self) -> ChordDatabase:
        if self.chord_table_path is not None:
            return ChordDatabase.from_file(self.chord_table_path)
        return DEFAULT_DATABASE

    def create_tracker(self) -> MonophonicTracker:
        """A fresh tracking session."""
        return MonophonicTracker(config=self.tracker, note_table=self.vocal_table())

    def create_polyphonic_detector(self) -> PolyphonicDetector:
        return PolyphonicDetector(
            config=self.polyphonic,
            note_table=self.instrument_table(),
            chord_database=self.chord_database(),
        )
