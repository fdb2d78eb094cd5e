"""Tests for the spectrogram builder and its statistics."""

import pytest
import numpy as np

from waterfall.analysis import SpectrogramBuilder, fill_gaps
from waterfall.analysis.statistics import RunningStats, upper_median, population_stddev
from waterfall.core import InvalidArgumentError

SR = 8000
CHUNK = 1024


def make_sine(freq, duration=2.0, sr=SR, amplitude=10000.0):
    t = np.arange(int(sr * duration)) / sr
    return np.round(amplitude * np.sin(2 * np.pi * freq * t)).astype(np.int16)


def build(samples, chunk_size=CHUNK, num_freq_log=512, freq_min=55.0, freq_max=3000.0, sr=SR):
    return SpectrogramBuilder(samples, sr, chunk_size, num_freq_log, freq_min, freq_max)


class TestConstruction:
    """Parameter validation."""

    @pytest.mark.parametrize("chunk_size", [0, 4, 6, 1000])
    def test_bad_chunk_size(self, chunk_size):
        with pytest.raises(InvalidArgumentError):
            build(np.zeros(4096), chunk_size=chunk_size)

    @pytest.mark.parametrize("freq_min", [0.0, -10.0])
    def test_non_positive_freq_min(self, freq_min):
        with pytest.raises(InvalidArgumentError, match="Minimum frequency"):
            build(np.zeros(4096), freq_min=freq_min)

    @pytest.mark.parametrize("freq_max", [55.0, 20.0])
    def test_freq_max_not_above_freq_min(self, freq_max):
        with pytest.raises(InvalidArgumentError, match="Maximum frequency"):
            build(np.zeros(4096), freq_min=55.0, freq_max=freq_max)

    def test_zero_log_bins(self):
        with pytest.raises(InvalidArgumentError):
            build(np.zeros(4096), num_freq_log=0)

    def test_zero_sample_rate(self):
        with pytest.raises(InvalidArgumentError, match="Sample rate"):
            build(np.zeros(4096), sr=0)

    @pytest.mark.parametrize("freq_max", [float("inf"), float("nan")])
    def test_non_finite_freq_max(self, freq_max):
        with pytest.raises(InvalidArgumentError, match="Maximum frequency"):
            build(np.zeros(4096), freq_max=freq_max)

    @pytest.mark.parametrize("sr", [float("inf"), float("nan")])
    def test_non_finite_sample_rate(self, sr):
        with pytest.raises(InvalidArgumentError, match="Sample rate"):
            build(np.zeros(4096), sr=sr)

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            build(np.zeros(4096), chunk_size=12)

    def test_smallest_chunk(self):
        sg = build(np.zeros(64), chunk_size=8, num_freq_log=4, freq_min=100.0, freq_max=4000.0)
        assert sg.spectra_size == 4


class TestWindowing:
    """Chunk count, time axis and coverage."""

    @pytest.mark.parametrize("length", [0, 10, 1023, 1024, 5000, 16000])
    def test_num_chunks(self, length):
        sg = build(np.zeros(length, dtype=np.int16))
        assert sg.num_chunks == 4 * (length // CHUNK) + 1

    @pytest.mark.parametrize("length", [1024, 5000, 16000])
    def test_windows_cover_input(self, length):
        sg = build(np.zeros(length, dtype=np.int16))
        last_start = (sg.num_chunks - 1) * sg.hop_size
        assert last_start + sg.chunk_size >= length
        assert sg.hop_size == CHUNK // 4

    def test_time_axis(self):
        sg = build(make_sine(440.0))
        time = sg.time
        assert time[0] == 0.0
        np.testing.assert_allclose(np.diff(time), (CHUNK / 4) / SR)
        assert sg.hop_seconds == pytest.approx((CHUNK / 4) / SR)

    def test_linear_frequency_axis(self):
        sg = build(make_sine(440.0))
        freq = sg.frequency
        assert freq.shape == (CHUNK // 2,)
        np.testing.assert_allclose(freq, np.arange(CHUNK // 2) * SR / (2 * CHUNK))

    def test_silence_compresses_to_log_offset(self):
        sg = build(np.zeros(4096, dtype=np.int16))
        np.testing.assert_allclose(sg.spectra, np.log10(2.0))
        assert sg.max_power == pytest.approx(np.log10(2.0))
        assert sg.min_power == pytest.approx(np.log10(2.0))

    def test_sine_peak_frequency(self):
        sg = build(make_sine(440.0))
        row = sg.spectrum(10)
        peak = sg.frequency[np.argmax(row)]
        assert abs(peak - 440.0) <= SR / CHUNK

    def test_power_range_tracks_extremes(self):
        sg = build(make_sine(440.0))
        spectra = sg.spectra
        assert sg.max_power == pytest.approx(spectra.max())
        assert sg.min_power == pytest.approx(spectra.min())


class TestLogSpectrum:
    """Log-frequency rebinning and gap filling."""

    def test_log_axis_span(self):
        sg = build(make_sine(440.0), num_freq_log=256)
        log_freq = sg.log_frequency
        delta = (np.log10(3000.0) - np.log10(55.0)) / 256

        assert log_freq.shape == (256,)
        assert np.all(np.diff(log_freq) > 0)
        assert log_freq[0] == pytest.approx(np.log10(55.0))
        assert log_freq[-1] < np.log10(3000.0)
        assert log_freq[-1] == pytest.approx(np.log10(3000.0) - delta)

    def test_log_peak_frequency(self):
        sg = build(make_sine(440.0), num_freq_log=256)
        row = sg.log_spectrum(10)
        peak = 10 ** sg.log_frequency[np.argmax(row)]
        assert abs(peak - 440.0) / 440.0 < 0.03

    def test_no_gaps_after_fill(self):
        sg = build(make_sine(440.0), num_freq_log=2048)
        assert np.all(sg.log_spectra != 0.0)

    def test_empty_bins_take_preceding_value(self):
        num_log = 2048
        sg = build(make_sine(440.0), num_freq_log=num_log)

        # Recompute which log bins receive linear bins
        freq = sg.frequency[1:]
        log_min = np.log10(55.0)
        delta = (np.log10(3000.0) - log_min) / num_log
        bins = ((np.log10(freq) - log_min) / delta).astype(int)
        bins = bins[(bins >= 0) & (bins < num_log)]
        counts = np.bincount(bins, minlength=num_log)

        row = sg.log_spectrum(10)
        filled = np.nonzero(counts)[0]
        assert filled.size < num_log  # Low end is sparsely sampled
        for j in np.nonzero(counts == 0)[0]:
            preceding = filled[filled < j]
            if preceding.size:
                assert row[j] == row[preceding[-1]]
            else:
                assert row[j] == row[filled[0]]

    def test_log_power_range(self):
        sg = build(make_sine(440.0), num_freq_log=128)
        assert sg.max_log_power >= sg.min_log_power
        assert sg.max_log_power <= sg.log_spectra.max()


class TestFillGaps:
    """Tests for fill_gaps."""

    def test_forward_fill(self):
        row = np.array([1.0, 0.0, 0.0, 3.0, 0.0, 5.0, 0.0])
        np.testing.assert_array_equal(fill_gaps(row), [1, 1, 1, 3, 3, 5, 5])

    def test_leading_zeros_take_first_value(self):
        row = np.array([0.0, 0.0, 3.0, 0.0, 5.0])
        np.testing.assert_array_equal(fill_gaps(row), [3, 3, 3, 3, 5])

    def test_all_zero_row(self):
        row = np.zeros(5)
        np.testing.assert_array_equal(fill_gaps(row), np.zeros(5))

    def test_does_not_modify_input(self):
        row = np.array([1.0, 0.0, 2.0])
        fill_gaps(row)
        np.testing.assert_array_equal(row, [1.0, 0.0, 2.0])


class TestStatistics:
    """Median and standard deviation of the log spectrogram."""

    def test_upper_median_even_count(self):
        assert upper_median(np.array([4.0, 1.0, 3.0, 2.0])) == 3.0

    def test_upper_median_odd_count(self):
        assert upper_median(np.array([5.0, 1.0, 3.0])) == 3.0

    def test_upper_median_empty(self):
        with pytest.raises(ValueError):
            upper_median(np.array([]))

    def test_population_stddev(self):
        assert population_stddev(np.array([1.0, 2.0, 3.0, 4.0])) == pytest.approx(1.1180339887)

    def test_running_stats_matches_numpy(self):
        rng = np.random.default_rng(3)
        data = rng.normal(4.0, 0.7, size=(50, 33))

        stats = RunningStats()
        for row in data:
            stats.update(row)

        assert stats.count == data.size
        assert stats.mean == pytest.approx(data.mean())
        assert stats.stddev == pytest.approx(data.std())

    def test_running_stats_empty(self):
        stats = RunningStats()
        stats.update(np.array([]))
        assert stats.count == 0
        assert stats.stddev == 0.0

    def test_grid_statistics(self):
        sg = build(np.zeros(16, dtype=np.int16), chunk_size=8, num_freq_log=2,
                   freq_min=100.0, freq_max=4000.0)
        sg._spectra_log = np.array([[1.0, 2.0], [3.0, 4.0]])

        assert sg.median_log_power == 3.0
        assert sg.stddev_log_power == pytest.approx(1.118, abs=1e-3)

    def test_statistics_cached(self):
        sg = build(make_sine(440.0))
        median = sg.median_log_power
        stddev = sg.stddev_log_power

        sg._spectra_log = sg._spectra_log * 10.0

        assert sg.median_log_power == median
        assert sg.stddev_log_power == stddev

    def test_statistics_deterministic(self):
        samples = make_sine(440.0)
        a = build(samples)
        b = build(samples)
        assert a.median_log_power == b.median_log_power
        assert a.stddev_log_power == b.stddev_log_power


class TestAccessors:
    """Accessors hand out copies."""

    def test_spectrum_is_copy(self):
        sg = build(make_sine(440.0))
        row = sg.spectrum(3)
        row[:] = -1.0
        assert np.all(sg.spectrum(3) > 0)

    def test_log_spectrum_is_copy(self):
        sg = build(make_sine(440.0))
        row = sg.log_spectrum(3)
        row[:] = -1.0
        assert np.all(sg.log_spectrum(3) > 0)

    def test_axes_are_copies(self):
        sg = build(make_sine(440.0))
        sg.time[:] = -1.0
        sg.frequency[:] = -1.0
        sg.log_frequency[:] = -1.0
        assert sg.time[1] > 0
        assert sg.frequency[1] > 0
        assert sg.log_frequency[0] > 0

    def test_input_not_modified(self):
        samples = make_sine(440.0)
        before = samples.copy()
        build(samples)
        np.testing.assert_array_equal(samples, before)

    def test_normalized_power_range(self):
        sg = build(make_sine(440.0))
        grid = sg.normalized_power()
        assert grid.shape == (sg.num_chunks, sg.spectra_size)
        assert grid.min() == pytest.approx(0.0)
        assert grid.max() == pytest.approx(1.0)

    def test_normalized_power_flat(self):
        sg = build(np.zeros(2048, dtype=np.int16))
        assert np.all(sg.normalized_power() == 0.0)
