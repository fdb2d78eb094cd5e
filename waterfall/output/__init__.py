"""Output layer - Export to various formats.

This layer writes pipeline results to:
- Tab-delimited tables (note grid, single spectrum frames)
- WAV files (resynthesized waveform)
- Images (color-mapped spectrogram)
- MIDI files
"""

from .table import write_delimited, write_spectrum, format_value
from .wav import WavWriter
from .image import SpectrogramImageWriter
from .midi import MIDIExporter

__all__ = [
    "write_delimited",
    "write_spectrum",
    "format_value",
    "WavWriter",
    "SpectrogramImageWriter",
    "MIDIExporter",
]
