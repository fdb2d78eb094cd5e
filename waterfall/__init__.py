"""Waterfall Notes - Spectrogram analysis, note detection and resynthesis.

Architecture Layers:
    1. core/          - Note types, note catalog, constants, errors
    2. input/         - Audio decoding to 16-bit samples
    3. analysis/      - FFT, spectrogram, statistics
    4. transcription/ - Note detection and the note grid
    5. output/        - Export (tables, WAV, image, MIDI)
"""

__version__ = "0.1.0"

# Core types
from .core import (
    Accidental,
    ReferenceNote,
    DetectedNote,
    NoteCatalog,
    WaterfallError,
    InvalidArgumentError,
    InvalidLengthError,
)

# Input layer
from .input import AudioLoader

# Analysis layer
from .analysis import FFTEngine, SpectrogramBuilder, is_power_of_two

# Transcription layer
from .transcription import NoteDetector, NoteGrid

# Output layer
from .output import WavWriter, SpectrogramImageWriter, MIDIExporter

# Pipeline
from .pipeline import PipelineConfig, PipelineResult, WaterfallPipeline

__all__ = [
    # Core
    "Accidental",
    "ReferenceNote",
    "DetectedNote",
    "NoteCatalog",
    "WaterfallError",
    "InvalidArgumentError",
    "InvalidLengthError",
    # Input
    "AudioLoader",
    # Analysis
    "FFTEngine",
    "SpectrogramBuilder",
    "is_power_of_two",
    # Transcription
    "NoteDetector",
    "NoteGrid",
    # Output
    "WavWriter",
    "SpectrogramImageWriter",
    "MIDIExporter",
    # Pipeline
    "PipelineConfig",
    "PipelineResult",
    "WaterfallPipeline",
]
