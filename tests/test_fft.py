"""Tests for the radix-2 FFT."""

import pytest
import numpy as np

from waterfall.analysis.fft import FFTEngine, is_power_of_two
from waterfall.core import FORWARD, INVERSE, InvalidLengthError


class TestIsPowerOfTwo:
    """Tests for is_power_of_two."""

    @pytest.mark.parametrize("x", [1, 2, 4, 8, 16, 1024, 8192])
    def test_powers_of_two(self, x):
        assert is_power_of_two(x)

    @pytest.mark.parametrize("x", [0, 3, 6, 100, 1000, -8])
    def test_non_powers_of_two(self, x):
        assert not is_power_of_two(x)


class TestTransform:
    """Tests for FFTEngine.transform."""

    def test_rejects_non_power_of_two(self):
        with pytest.raises(InvalidLengthError, match="power of two"):
            FFTEngine.transform(np.zeros(6), FORWARD)

    def test_rejects_empty_input(self):
        with pytest.raises(InvalidLengthError):
            FFTEngine.transform(np.zeros(0), FORWARD)

    def test_invalid_length_is_value_error(self):
        with pytest.raises(ValueError):
            FFTEngine.forward(np.zeros(100))

    def test_rejects_unknown_direction(self):
        with pytest.raises(ValueError, match="direction"):
            FFTEngine.transform(np.zeros(8), 0)

    def test_output_is_interleaved(self):
        out = FFTEngine.forward(np.zeros(16))
        assert out.shape == (32,)

    def test_impulse_is_flat(self):
        x = np.zeros(32)
        x[0] = 1.0
        spectrum = FFTEngine.to_complex(FFTEngine.forward(x))
        np.testing.assert_allclose(spectrum, np.ones(32), atol=1e-12)

    def test_single_point(self):
        out = FFTEngine.forward(np.array([3.0]))
        np.testing.assert_allclose(out, [3.0, 0.0])

    def test_forward_uses_positive_exponent(self):
        """Forward is sum x[k] exp(+2 pi i j k / N), i.e. N * ifft."""
        rng = np.random.default_rng(1)
        x = rng.standard_normal(64)
        spectrum = FFTEngine.to_complex(FFTEngine.forward(x))
        np.testing.assert_allclose(spectrum, np.fft.ifft(x) * 64, atol=1e-9)

    def test_inverse_uses_negative_exponent(self):
        rng = np.random.default_rng(2)
        x = rng.standard_normal(128)
        spectrum = FFTEngine.to_complex(FFTEngine.inverse(x))
        np.testing.assert_allclose(spectrum, np.fft.fft(x), atol=1e-9)

    def test_cosine_lands_in_its_bins(self):
        n = 64
        k = np.arange(n)
        x = np.cos(2 * np.pi * 4 * k / n)
        mags = FFTEngine.magnitudes(FFTEngine.forward(x))

        assert mags[4] == pytest.approx(n / 2)
        assert mags[n - 4] == pytest.approx(n / 2)
        others = np.delete(mags, [4, n - 4])
        assert np.all(others < 1e-9)

    @pytest.mark.parametrize("n", [2, 8, 64, 1024, 8192])
    def test_round_trip(self, n):
        """Forward then inverse, divided by N, reproduces the input."""
        rng = np.random.default_rng(n)
        x = rng.uniform(-32768, 32767, n)

        spectrum = FFTEngine.to_complex(FFTEngine.forward(x))
        back = FFTEngine.to_complex(FFTEngine.inverse(spectrum)) / n

        scale = np.abs(x).max()
        np.testing.assert_allclose(back.real, x, rtol=1e-9, atol=1e-9 * scale)
        np.testing.assert_allclose(back.imag, 0.0, atol=1e-9 * scale)

    @pytest.mark.parametrize("n", [16, 512, 4096])
    def test_parseval(self, n):
        """Energy in time equals energy in frequency divided by N."""
        rng = np.random.default_rng(n + 7)
        x = rng.standard_normal(n)
        mags = FFTEngine.magnitudes(FFTEngine.forward(x))

        assert np.sum(mags ** 2) / n == pytest.approx(np.sum(x ** 2), rel=1e-9)

    def test_input_not_modified(self):
        x = np.arange(16, dtype=float)
        before = x.copy()
        FFTEngine.forward(x)
        np.testing.assert_array_equal(x, before)

    def test_accepts_integer_samples(self):
        x = np.array([1, -2, 3, -4, 5, -6, 7, -8], dtype=np.int16)
        spectrum = FFTEngine.to_complex(FFTEngine.forward(x))
        np.testing.assert_allclose(spectrum, np.fft.ifft(x.astype(float)) * 8, atol=1e-9)

    def test_inverse_direction_constant(self):
        assert FFTEngine.FORWARD == FORWARD == 1
        assert FFTEngine.INVERSE == INVERSE == -1
