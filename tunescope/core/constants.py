"""Global constants for tunescope."""

# Pitch classes in fixed chromatic order. Index order is load-bearing:
# the polyphonic root is the lowest-indexed detected pitch class.
PITCH_CLASSES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

# Analyser defaults
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_TRANSFORM_SIZE = 2048
DEFAULT_HOP_LENGTH = 1024
DEFAULT_SMOOTHING = 0.8
DEFAULT_MIN_DB = -100.0
DEFAULT_MAX_DB = -30.0
BYTE_FULL_SCALE = 256.0

# Frequency ranges (Hz, inclusive)
VOCAL_FMIN = 65.0
VOCAL_FMAX = 1000.0
INSTRUMENT_FMIN = 27.5  # A0
INSTRUMENT_FMAX = 4186.01  # C8

# Detection thresholds (byte-scaled magnitudes, 0-255)
DEFAULT_PEAK_FLOOR = 30.0
DEFAULT_VOLUME_FLOOR = 10.0

# Monophonic tracking
DEFAULT_HISTORY_SIZE = 5
DEFAULT_MIN_SAMPLES_TO_EMIT = 3
DEFAULT_DECAY_MS = 800.0
DEFAULT_STABILITY_CENTS = 15
DEFAULT_STABILITY_TICKS = 3

# Chord matching
DEFAULT_MIN_MATCH_PERCENTAGE = 30.0
QUALITY_INTERVALS = frozenset({3, 4, 10, 11})  # minor/major third, minor/major seventh

A4_HZ = 440.0
MAX_CENTS = 50
