"""Global constants for Waterfall Notes."""

# FFT directions (sign of the rotation angle)
FORWARD = 1
INVERSE = -1

# Windows advance by a quarter chunk (75% overlap)
HOP_DIVISOR = 4

# Smallest chunk the spectrogram accepts
MIN_CHUNK_SIZE = 8

# Offset added to magnitudes before log10 compression
LOG_OFFSET = 2.0

# Amplitude estimate: 10 ** (log_power - AMPLITUDE_LOG_SHIFT)
AMPLITUDE_LOG_SHIFT = 3.0

# Half steps are ~6% apart, so match within 1% of a note's center
NOTE_TOLERANCE = 0.01

# Delimited output
TABLE_DELIMITER = "\t"
TABLE_FORMAT = "%014.4f"

# CLI defaults (the library itself takes every parameter explicitly)
DEFAULT_CHUNK_SIZE = 8192  # ~0.19 s at 44.1 kHz
DEFAULT_NUM_FREQ_LOG = 1280
DEFAULT_FREQ_MIN = 55.0
DEFAULT_FREQ_MAX = 3000.0
DEFAULT_THRESHOLD_STDDEVS = 0.8
DEFAULT_WAV_SAMPLE_RATE = 44100
DEFAULT_MAX_SECONDS = 360.0

# 16-bit PCM
PCM_MAX = 32767
