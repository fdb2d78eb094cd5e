"""End-to-end pipeline: samples -> spectrogram -> note grid -> waveform."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .analysis import SpectrogramBuilder
from .core import NoteCatalog
from .transcription import NoteDetector, NoteGrid


@dataclass
class PipelineConfig:
    """Tunable parameters of the pipeline. Every field must be supplied.

    Attributes:
        chunk_size: FFT window length in samples, a power of two >= 8
        num_freq_log: Number of logarithmic frequency bins
        freq_min: Lower edge of the log frequency axis in Hz
        freq_max: Upper edge of the log frequency axis in Hz
        threshold_stddevs: Detection threshold, standard deviations above the median
        wav_sample_rate: Sample rate of the resynthesized waveform in Hz
    """

    chunk_size: int
    num_freq_log: int
    freq_min: float
    freq_max: float
    threshold_stddevs: float
    wav_sample_rate: int


@dataclass
class PipelineResult:
    """Everything one pipeline run produces."""

    spectrogram: SpectrogramBuilder
    grid: NoteGrid
    waveform: np.ndarray

    @property
    def note_count(self) -> int:
        return self.grid.note_count


class WaterfallPipeline:
    """Run spectrogram analysis, note detection and resynthesis in order."""

    def __init__(self, config: PipelineConfig, catalog: Optional[NoteCatalog] = None):
        self.config = config
        self.detector = NoteDetector(catalog)

    def analyze(self, samples: np.ndarray, sample_rate: float) -> SpectrogramBuilder:
        cfg = self.config
        return SpectrogramBuilder(
            samples,
            sample_rate,
            cfg.chunk_size,
            cfg.num_freq_log,
            cfg.freq_min,
            cfg.freq_max,
        )

    def detect(self, spectrogram: SpectrogramBuilder) -> NoteGrid:
        return self.detector.detect(spectrogram, self.config.threshold_stddevs)

    def run(self, samples: np.ndarray, sample_rate: float) -> PipelineResult:
        """
        Run the whole pipeline.

        Args:
            samples: Signed 16-bit mono samples
            sample_rate: Input sample rate in Hz

        Returns:
            PipelineResult with the spectrogram, note grid and normalized waveform
        """
        spectrogram = self.analyze(samples, sample_rate)
        grid = self.detect(spectrogram)
        waveform = grid.generate_waveform(self.config.wav_sample_rate)
        return PipelineResult(spectrogram=spectrogram, grid=grid, waveform=waveform)
