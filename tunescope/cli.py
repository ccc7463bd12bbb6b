"""Command-line interface for tunescope.

Provides commands for:
- pitch: Track the sung/played pitch of an audio file over time
- chords: Detect sounding notes and chord candidates over time
- tables: Show the note table or the chord database
"""

import typer
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="tunescope",
    help="Pitch and chord tracking from magnitude spectra",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Wall-clock time per pipeline stage, plus the number of analysis ticks."""

    stages: Dict[str, float] = field(default_factory=dict)
    ticks: int = 0
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        self._current_stage = stage
        self._start_time = time.time()

    def stop(self) -> float:
        """Close the running stage and return its duration in seconds."""
        if self._current_stage is None:
            return 0.0
        duration = time.time() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def total_time(self) -> float:
        return sum(self.stages.values())

    @property
    def ticks_per_second(self) -> float:
        """Analysis throughput; 0 until ticks were counted and timed."""
        total = self.total_time
        return self.ticks / total if self.ticks and total > 0 else 0.0

    def print_summary(self) -> None:
        console.print("\n[bold]Timing Summary:[/bold]")
        for stage, duration in self.stages.items():
            console.print(f"  {stage}: {duration:.2f}s")
        console.print(f"  [bold]Total: {self.total_time:.2f}s[/bold]")
        if self.ticks:
            console.print(f"  {self.ticks} ticks, {self.ticks_per_second:.0f} ticks/s")

    def to_dict(self) -> Dict[str, Any]:
        """Timings in milliseconds, for --json output."""
        return {
            "stages_ms": {k: round(v * 1000, 2) for k, v in self.stages.items()},
            "total_ms": round(self.total_time * 1000, 2),
            "ticks": self.ticks,
        }


def _load_config(config_path: Optional[Path]):
    from .config import AnalysisConfig
    from .core import ConfigurationError

    try:
        if config_path is None:
            return AnalysisConfig()
        return AnalysisConfig.from_file(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def _load_frames(input_file: Path, config, timings: StageTimings, verbose: bool):
    from .input import AudioLoader, AnalyserFrames

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    timings.start("Loading")
    loader = AudioLoader(target_sr=config.analyser.sample_rate)
    try:
        audio, sr = loader.load(str(input_file))
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    timings.stop()

    if verbose:
        console.print(
            f"  Duration: {loader.get_duration(audio, sr):.2f}s, Sample rate: {sr}Hz"
        )

    timings.start("Framing")
    frames = AnalyserFrames(config.analyser).all_frames(audio)
    timings.stop()
    timings.ticks = len(frames)

    if verbose:
        console.print(f"  Frames: {len(frames)}")
    return frames


@app.command()
def pitch(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, MP3, FLAC, ...)"),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="JSON configuration file"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Track the single most prominent pitch (vocal range) over time.

    **Examples:**

        tunescope pitch vocals.wav

        tunescope pitch vocals.wav --json
    """
    from .core import ConfigurationError

    config = _load_config(config_path)
    timings = StageTimings()

    if not json_output:
        console.print(f"[blue]Loading audio:[/blue] {input_file}")
    frames = _load_frames(input_file, config, timings, verbose and not json_output)

    try:
        tracker = config.create_tracker()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    timings.start("Tracking")
    events = []
    last_note = None
    for time_ms, spectrum in frames:
        reading = tracker.process(spectrum, time_ms)
        if reading.updated and reading.note != last_note:
            events.append((time_ms, reading))
            last_note = reading.note
    timings.stop()

    if json_output:
        console.print_json(data={
            "input": str(input_file),
            "frames": len(frames),
            "timings": timings.to_dict(),
            "events": [
                {"time_ms": t, **reading.to_dict()} for t, reading in events
            ],
        })
        return

    console.print(f"  Detected {sum(1 for _, r in events if r.estimate)} note changes")
    if events:
        _show_pitch_table(events)
    if verbose:
        timings.print_summary()


@app.command()
def chords(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, MP3, FLAC, ...)"),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="JSON configuration file"
    ),
    top: int = typer.Option(3, "-n", "--top", help="Chord candidates to show per change"),
    root_hint: Optional[bool] = typer.Option(
        None, "--root-hint/--no-root-hint", help="Anchor chord roots on the lowest detected pitch class"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Detect sounding pitch classes and rank chord candidates over time.

    **Examples:**

        tunescope chords guitar.wav

        tunescope chords piano.wav --no-root-hint --top 5
    """
    from .core import ConfigurationError

    config = _load_config(config_path)
    if root_hint is not None:
        config.polyphonic.use_root_hint = root_hint
    timings = StageTimings()

    if not json_output:
        console.print(f"[blue]Loading audio:[/blue] {input_file}")
    frames = _load_frames(input_file, config, timings, verbose and not json_output)

    try:
        detector = config.create_polyphonic_detector()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    timings.start("Chord detection")
    changes = []
    last_label: Optional[str] = None
    for time_ms, spectrum in frames:
        result = detector.process(spectrum, time_ms)
        best = result.best_chord
        label = best.display_name if best else None
        if label != last_label:
            changes.append(result)
            last_label = label
    timings.stop()

    if json_output:
        console.print_json(data={
            "input": str(input_file),
            "frames": len(frames),
            "timings": timings.to_dict(),
            "changes": [r.to_dict(top=top) for r in changes],
        })
        return

    console.print(f"  Detected {sum(1 for r in changes if r.chords)} chord changes")
    if changes:
        _show_chords_table(changes, top)
    if verbose:
        timings.print_summary()


@app.command()
def tables(
    show_chords: bool = typer.Option(
        False, "--chords/--notes", help="Show the chord database instead of the note table"
    ),
    instrument: bool = typer.Option(
        False, "--instrument", help="Show the instrument note table instead of the vocal one"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="JSON configuration file"
    ),
):
    """Show the static lookup tables used for detection."""
    from .core import ConfigurationError

    config = _load_config(config_path)

    try:
        if show_chords:
            _show_chord_database(config.chord_database())
        else:
            table = config.instrument_table() if instrument else config.vocal_table()
            _show_note_table(table)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def _show_pitch_table(events):
    """Display pitch changes in a table."""
    table = Table(title="Pitch Changes")
    table.add_column("Time (s)", style="green")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="yellow")
    table.add_column("Cents", style="magenta")
    table.add_column("Stable", style="blue")

    for time_ms, reading in events:
        estimate = reading.estimate
        if estimate is None:
            table.add_row(f"{time_ms / 1000:.2f}", "-", "-", "-", "-")
            continue
        table.add_row(
            f"{time_ms / 1000:.2f}",
            estimate.note,
            f"{estimate.frequency:.1f}",
            f"{estimate.cents:+d}",
            "yes" if reading.stable else "",
        )

    console.print(table)


def _show_chords_table(results, top: int):
    """Display chord changes in a table."""
    table = Table(title="Chord Changes")
    table.add_column("Time (s)", style="green")
    table.add_column("Notes", style="cyan")
    table.add_column("Root", style="blue")
    table.add_column("Chords", style="yellow")

    for result in results:
        candidates = ", ".join(
            f"{m.display_name} ({m.match_percentage:.0f}%)" for m in result.chords[:top]
        )
        table.add_row(
            f"{result.time_ms / 1000:.2f}",
            " ".join(result.notes) or "-",
            result.root or "-",
            candidates or "-",
        )

    console.print(table)


def _show_note_table(note_table):
    """Display note bands, flagging overlaps."""
    overlapping = {band.name for pair in note_table.overlaps() for band in pair}

    table = Table(title=f"Note Table ({note_table.name})")
    table.add_column("Note", style="cyan")
    table.add_column("Min (Hz)", style="green")
    table.add_column("Max (Hz)", style="green")
    table.add_column("Center (Hz)", style="yellow")
    table.add_column("Overlap", style="red")

    for band in note_table:
        table.add_row(
            band.name,
            f"{band.min_hz:.2f}",
            f"{band.max_hz:.2f}",
            f"{band.center:.2f}",
            "yes" if band.name in overlapping else "",
        )

    console.print(table)
    if overlapping:
        console.print(
            "[yellow]Overlapping bands resolve to the first band in table order.[/yellow]"
        )


def _show_chord_database(database):
    """Display chord templates."""
    table = Table(title=f"Chord Database ({database.name})")
    table.add_column("Type", style="cyan")
    table.add_column("Suffix", style="green")
    table.add_column("Intervals", style="yellow")
    table.add_column("Description", style="magenta")

    for template in database:
        table.add_row(
            template.type_id,
            template.suffix or "(none)",
            " ".join(str(i) for i in template.intervals),
            template.description,
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
