"""Power spectrogram ("waterfall") with a secondary logarithmic frequency grid."""

from typing import Optional, Tuple

import numpy as np

from ..core.constants import HOP_DIVISOR, LOG_OFFSET, MIN_CHUNK_SIZE
from ..core.errors import InvalidArgumentError
from .fft import FFTEngine, is_power_of_two
from .statistics import RunningStats, upper_median


class SpectrogramBuilder:
    """Slices samples into overlapping windows and builds power spectra.

    Every window is a chunk_size-point forward FFT. Windows advance by a
    quarter chunk (75% overlap) and the last ones are zero padded. Each
    spectrum is log10-compressed, then resampled onto num_freq_log bins
    equally spaced in log10(frequency) between freq_min and freq_max.

    All accessors return copies; the instance is never mutated after
    construction apart from the cached statistics.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: float,
        chunk_size: int,
        num_freq_log: int,
        freq_min: float,
        freq_max: float,
    ):
        """
        Build the spectrogram.

        Args:
            samples: Signed 16-bit (or any real) mono samples
            sample_rate: Sample rate in Hz
            chunk_size: FFT window length, a power of two >= 8
            num_freq_log: Number of logarithmic frequency bins
            freq_min: Lower edge of the log frequency axis in Hz
            freq_max: Upper edge of the log frequency axis in Hz

        Raises:
            InvalidArgumentError: If any parameter is out of range
        """
        self._validate(sample_rate, chunk_size, num_freq_log, freq_min, freq_max)

        data = np.asarray(samples, dtype=np.float64)
        if data.ndim != 1:
            raise InvalidArgumentError(
                f"Samples must be a 1-D sequence, got shape {data.shape}"
            )

        self._sample_rate = float(sample_rate)
        self._chunk_size = int(chunk_size)
        self._spectra_size = self._chunk_size // 2
        self._hop_size = self._chunk_size // HOP_DIVISOR
        self._num_freq_log = int(num_freq_log)
        self._freq_min = float(freq_min)
        self._freq_max = float(freq_max)
        self._num_chunks = HOP_DIVISOR * (data.size // self._chunk_size) + 1

        self._freq = np.arange(self._spectra_size) * (
            self._sample_rate / (self._spectra_size * 4.0)
        )
        self._log_min = np.log10(self._freq_min)
        self._log_delta = (np.log10(self._freq_max) - self._log_min) / self._num_freq_log
        self._freq_log = self._log_min + np.arange(self._num_freq_log) * self._log_delta
        self._time = np.arange(self._num_chunks) * (self._hop_size / self._sample_rate)

        self._spectra = np.zeros((self._num_chunks, self._spectra_size))
        self._spectra_log = np.zeros((self._num_chunks, self._num_freq_log))

        self._max_power = -np.inf
        self._min_power = np.inf
        self._max_log_power = -np.inf
        self._min_log_power = np.inf

        self._median_log_power: Optional[float] = None
        self._stddev_log_power: Optional[float] = None

        self._fold = self._fold_indices()
        self._log_sources, self._log_bins, self._log_counts = self._log_bin_map()

        for i in range(self._num_chunks):
            self._populate_spectrum(data, i)
            self._populate_log_spectrum(i)

        if not np.isfinite(self._max_log_power):
            # No log bin gathered more than one linear bin
            self._max_log_power = 0.0
            self._min_log_power = 0.0

    @staticmethod
    def _validate(sample_rate, chunk_size, num_freq_log, freq_min, freq_max) -> None:
        if not (sample_rate > 0 and np.isfinite(sample_rate)):
            raise InvalidArgumentError(
                f"Sample rate must be positive and finite, got {sample_rate}"
            )
        if not is_power_of_two(int(chunk_size)) or chunk_size != int(chunk_size):
            raise InvalidArgumentError(
                f"Chunk size must be a power of two, got {chunk_size}"
            )
        if chunk_size < MIN_CHUNK_SIZE:
            raise InvalidArgumentError(
                f"Chunk size must be at least {MIN_CHUNK_SIZE}, got {chunk_size}"
            )
        if int(num_freq_log) != num_freq_log or num_freq_log <= 0:
            raise InvalidArgumentError(
                f"Number of log frequency bins must be a positive integer, got {num_freq_log}"
            )
        if not freq_min > 0.0:
            raise InvalidArgumentError(
                f"Minimum frequency must be a positive, nonzero number, got {freq_min}"
            )
        if not np.isfinite(freq_max):
            raise InvalidArgumentError(f"Maximum frequency must be finite, got {freq_max}")
        if not freq_max > freq_min:
            raise InvalidArgumentError(
                f"Maximum frequency ({freq_max}) must exceed minimum frequency ({freq_min})"
            )

    def _fold_indices(self) -> np.ndarray:
        """Map FFT bins onto ascending physical frequency.

        Even outputs come from the low end of the transform, odd outputs
        from the mirrored (negative frequency) end.
        """
        j = np.arange(self._spectra_size)
        return np.where(j % 2 == 0, j // 2, self._chunk_size - 1 - j // 2)

    def _log_bin_map(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Assign every positive linear frequency to a log bin.

        The linear axis is the same for every chunk, so the assignment and
        the per-bin counts are worked out once.
        """
        sources = np.nonzero(self._freq > 0.0)[0]
        position = (np.log10(self._freq[sources]) - self._log_min) / self._log_delta
        bins = position.astype(np.int64)  # Truncates toward zero
        in_range = (bins >= 0) & (bins < self._num_freq_log)
        sources = sources[in_range]
        bins = bins[in_range]
        counts = np.bincount(bins, minlength=self._num_freq_log)
        return sources, bins, counts

    def _window(self, data: np.ndarray, chunk_num: int) -> np.ndarray:
        start = chunk_num * self._hop_size
        window = np.zeros(self._chunk_size)
        piece = data[start:start + self._chunk_size]
        window[:piece.size] = piece
        return window

    def _populate_spectrum(self, data: np.ndarray, chunk_num: int) -> None:
        fft = FFTEngine.forward(self._window(data, chunk_num))
        magnitude = FFTEngine.magnitudes(fft)

        # Compress the power spectrum for easier analysis
        row = np.log10(magnitude[self._fold] + LOG_OFFSET)
        self._spectra[chunk_num] = row

        self._max_power = max(self._max_power, float(row.max()))
        self._min_power = min(self._min_power, float(row.min()))

    def _populate_log_spectrum(self, chunk_num: int) -> None:
        source = self._spectra[chunk_num]
        sums = np.bincount(
            self._log_bins,
            weights=source[self._log_sources],
            minlength=self._num_freq_log,
        )

        # Bins fed by a single linear bin keep their raw value
        row = sums.copy()
        multi = self._log_counts > 1
        row[multi] = sums[multi] / self._log_counts[multi]

        if multi.any():
            self._max_log_power = max(self._max_log_power, float(row[multi].max()))
            self._min_log_power = min(self._min_log_power, float(row[multi].min()))

        self._spectra_log[chunk_num] = fill_gaps(row)

    # Statistics

    @property
    def median_log_power(self) -> float:
        """Median of the whole log spectrogram (upper median), cached."""
        if self._median_log_power is None:
            self._median_log_power = upper_median(self._spectra_log)
        return self._median_log_power

    @property
    def stddev_log_power(self) -> float:
        """Population standard deviation of the whole log spectrogram, cached."""
        if self._stddev_log_power is None:
            stats = RunningStats()
            for row in self._spectra_log:
                stats.update(row)
            self._stddev_log_power = stats.stddev
        return self._stddev_log_power

    def normalized_power(self) -> np.ndarray:
        """
        Linear-frequency spectrogram scaled to [0, 1].

        Returns:
            Array [num_chunks, spectra_size]; all zeros for a flat spectrogram
        """
        delta = self._max_power - self._min_power
        if delta <= 0.0:
            return np.zeros_like(self._spectra)
        return (self._spectra - self._min_power) / delta

    # Accessors

    def spectrum(self, i: int) -> np.ndarray:
        return self._spectra[i].copy()

    def log_spectrum(self, i: int) -> np.ndarray:
        return self._spectra_log[i].copy()

    @property
    def spectra(self) -> np.ndarray:
        return self._spectra.copy()

    @property
    def log_spectra(self) -> np.ndarray:
        return self._spectra_log.copy()

    @property
    def frequency(self) -> np.ndarray:
        """Linear frequency axis in Hz."""
        return self._freq.copy()

    @property
    def log_frequency(self) -> np.ndarray:
        """Log frequency axis, log10(Hz)."""
        return self._freq_log.copy()

    @property
    def time(self) -> np.ndarray:
        """Start time of every chunk in seconds."""
        return self._time.copy()

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def spectra_size(self) -> int:
        return self._spectra_size

    @property
    def num_freq_log(self) -> int:
        return self._num_freq_log

    @property
    def num_chunks(self) -> int:
        return self._num_chunks

    @property
    def hop_size(self) -> int:
        return self._hop_size

    @property
    def hop_seconds(self) -> float:
        return self._hop_size / self._sample_rate

    @property
    def freq_min(self) -> float:
        return self._freq_min

    @property
    def freq_max(self) -> float:
        return self._freq_max

    @property
    def max_power(self) -> float:
        return self._max_power

    @property
    def min_power(self) -> float:
        return self._min_power

    @property
    def max_log_power(self) -> float:
        return self._max_log_power

    @property
    def min_log_power(self) -> float:
        return self._min_log_power


def fill_gaps(row: np.ndarray) -> np.ndarray:
    """
    Replace exact zeros with the nearest preceding non-zero value.

    Sparse sampling of the low end of the log axis leaves empty bins.
    Zeros ahead of the first non-zero value take that first value; a row
    with no non-zero values is returned unchanged.
    """
    row = np.asarray(row, dtype=np.float64)
    nonzero = row != 0.0
    if not nonzero.any():
        return row.copy()

    idx = np.where(nonzero, np.arange(row.size), 0)
    np.maximum.accumulate(idx, out=idx)
    filled = row[idx]

    first = int(np.argmax(nonzero))
    filled[:first] = row[first]
    return filled
