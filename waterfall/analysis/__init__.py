"""Analysis layer - Low-level signal analysis.

This layer turns raw samples into spectra:
- Radix-2 FFT
- Overlapping-window power spectrogram with a log-frequency grid
- Spectrogram statistics (median, standard deviation)
"""

from .fft import FFTEngine, is_power_of_two
from .spectrogram import SpectrogramBuilder, fill_gaps
from .statistics import RunningStats, upper_median, population_stddev

__all__ = [
    "FFTEngine",
    "is_power_of_two",
    "SpectrogramBuilder",
    "fill_gaps",
    "RunningStats",
    "upper_median",
    "population_stddev",
]
