"""Transcription layer - Note detection and the note grid.

- NoteDetector: statistical thresholding of the log spectrogram
- NoteGrid: per-chunk note accumulation, resynthesis and tabular dump
"""

from .grid import NoteGrid
from .detector import NoteDetector, estimate_amplitude

__all__ = [
    "NoteGrid",
    "NoteDetector",
    "estimate_amplitude",
]
