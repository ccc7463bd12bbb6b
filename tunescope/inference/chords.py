"""Chord matching - Score detected pitch classes against chord templates.

Scoring for one (root, template) pair:
- Each generated chord note is weighted 2 when its interval is a third or a
  seventh (3, 4, 10, 11), the tones that define chord quality, else 1. The
  weights sum to the total possible score; weights of chord notes present
  in the active set count toward the match score.
- Every active note then adds 0.5 if it belongs to the chord and subtracts
  0.5 if it does not, rewarding exact coverage and penalizing extra notes.
- The percentage is 100 * score / total, capped at 100. Candidates at or
  below the plausibility floor (30% by default) are discarded.
"""

from dataclasses import asdict, dataclass
from typing import Any, Collection, Dict, Iterable, List, Optional, Tuple

from ..core import PITCH_CLASSES
from ..core.constants import DEFAULT_MIN_MATCH_PERCENTAGE, QUALITY_INTERVALS
from .chord_database import DEFAULT_DATABASE, ChordDatabase, ChordTemplate


@dataclass(frozen=True)
class ChordMatch:
    """A scored chord candidate."""

    root: str
    type_id: str
    display_name: str  # e.g. "Cmaj7", "Am"
    match_percentage: float
    chord_notes: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_pitch_class(name: str) -> None:
    if name not in PITCH_CLASSES:
        raise ValueError(
            f"Unknown pitch class '{name}'. Expected one of: {', '.join(PITCH_CLASSES)}"
        )


def score_chord(
    active_notes: Collection[str],
    chord_notes: List[str],
    intervals: Iterable[int],
) -> float:
    """
    Weighted match percentage of the active notes against one chord.

    Args:
        active_notes: Detected pitch classes
        chord_notes: Chord pitch classes, positionally aligned with `intervals`
        intervals: Template intervals

    Returns:
        Match percentage, capped at 100 (may be negative before filtering)
    """
    match_score = 0.0
    total_possible = 0.0

    for note, interval in zip(chord_notes, intervals):
        weight = 2 if interval in QUALITY_INTERVALS else 1
        total_possible += weight
        if note in active_notes:
            match_score += weight

    for note in active_notes:
        if note in chord_notes:
            match_score += 0.5
        else:
            match_score -= 0.5

    return min(100.0 * match_score / total_possible, 100.0)


def match_chords(
    active_notes: Collection[str],
    root_hint: Optional[str] = None,
    templates: Iterable[ChordTemplate] = DEFAULT_DATABASE,
    min_match_percentage: float = DEFAULT_MIN_MATCH_PERCENTAGE,
) -> List[ChordMatch]:
    """
    Rank every (root, chord type) combination against the active notes.

    Args:
        active_notes: Detected pitch classes (e.g. {"C", "E", "G"})
        root_hint: Restrict roots to this pitch class (e.g. a detected bass note)
        templates: Chord templates, iterated in order
        min_match_percentage: Candidates must score strictly above this

    Returns:
        Matches sorted by percentage, best first. Equal percentages keep
        generation order: roots in chromatic order from C (or just the hint),
        then templates in table order.
    """
    if not active_notes:
        return []

    active = set(active_notes)
    for note in active:
        _check_pitch_class(note)

    if root_hint is not None:
        _check_pitch_class(root_hint)
        roots = [root_hint]
    else:
        roots = list(PITCH_CLASSES)

    template_list = list(templates)
    matches = []

    for root in roots:
        for template in template_list:
            chord_notes = template.notes_for_root(root)
            percentage = score_chord(active, chord_notes, template.intervals)

            if percentage > min_match_percentage:
                matches.append(
                    ChordMatch(
                        root=root,
                        type_id=template.type_id,
                        display_name=f"{root}{template.suffix}",
                        match_percentage=percentage,
                        chord_notes=tuple(chord_notes),
                    )
                )

    matches.sort(key=lambda m: m.match_percentage, reverse=True)
    return matches


class ChordMatcher:
    """Chord matching bound to one template database."""

    def __init__(
        self,
        database: Optional[ChordDatabase] = None,
        min_match_percentage: float = DEFAULT_MIN_MATCH_PERCENTAGE,
    ):
        """
        Initialize ChordMatcher.

        Args:
            database: Chord templates (default: built-in database)
            min_match_percentage: Plausibility floor, exclusive
        """
        self.database = database if database is not None else DEFAULT_DATABASE
        self.min_match_percentage = min_match_percentage

    def match(
        self,
        active_notes: Collection[str],
        root_hint: Optional[str] = None,
    ) -> List[ChordMatch]:
        return match_chords(
            active_notes,
            root_hint=root_hint,
            templates=self.database,
            min_match_percentage=self.min_match_percentage,
        )

    def best(
        self,
        active_notes: Collection[str],
        root_hint: Optional[str] = None,
    ) -> Optional[ChordMatch]:
        """Top-ranked match, or None."""
        matches = self.match(active_notes, root_hint)
        return matches[0] if matches else None
