"""Inference layer - Musical understanding from detected pitch classes.

- Chord template database (root-relative interval patterns)
- Chord matching (weighted template scoring, ranked candidates)

Pipeline: pitch classes (+ optional root hint) -> [Chord matcher] -> ranked chords
"""

from .chord_database import (
    DEFAULT_CHORD_TEMPLATES,
    DEFAULT_DATABASE,
    ChordDatabase,
    ChordTemplate,
    build_default_database,
)
from .chords import ChordMatch, ChordMatcher, match_chords, score_chord

__all__ = [
    # Chord database
    "DEFAULT_CHORD_TEMPLATES",
    "DEFAULT_DATABASE",
    "ChordDatabase",
    "ChordTemplate",
    "build_default_database",
    # Chord matching
    "ChordMatch",
    "ChordMatcher",
    "match_chords",
    "score_chord",
]
