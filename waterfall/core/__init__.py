"""Core types and constants for Waterfall Notes."""

from .note import Accidental, ReferenceNote, DetectedNote
from .catalog import NoteCatalog
from .errors import WaterfallError, InvalidArgumentError, InvalidLengthError
from .constants import (
    FORWARD,
    INVERSE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_NUM_FREQ_LOG,
    DEFAULT_FREQ_MIN,
    DEFAULT_FREQ_MAX,
    DEFAULT_THRESHOLD_STDDEVS,
    DEFAULT_WAV_SAMPLE_RATE,
)

__all__ = [
    "Accidental",
    "ReferenceNote",
    "DetectedNote",
    "NoteCatalog",
    "WaterfallError",
    "InvalidArgumentError",
    "InvalidLengthError",
    "FORWARD",
    "INVERSE",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_NUM_FREQ_LOG",
    "DEFAULT_FREQ_MIN",
    "DEFAULT_FREQ_MAX",
    "DEFAULT_THRESHOLD_STDDEVS",
    "DEFAULT_WAV_SAMPLE_RATE",
]
