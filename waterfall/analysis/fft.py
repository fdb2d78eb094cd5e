"""Radix-2 fast Fourier transform.

Bit-reversal permutation followed by iterative butterfly stages. Twiddle
factors within a stage are advanced with the trigonometric recurrence
instead of calling sin/cos per butterfly, which keeps the rounding error
of long transforms small.

Output layout, for N input points and sampling interval dt::

    out[0], out[1]             re, im of frequency 0
    out[2], out[3]             re, im of frequency 1 / (N dt)
    ...
    out[N], out[N + 1]         re, im of frequency 1 / (2 dt)
    ...
    out[2N - 2], out[2N - 1]   re, im of frequency -1 / (N dt)
"""

from functools import lru_cache
from typing import Tuple

import numpy as np

from ..core.constants import FORWARD, INVERSE
from ..core.errors import InvalidLengthError


def is_power_of_two(x: int) -> bool:
    """True for 1, 2, 4, 8, ...; False for zero, negatives and everything else."""
    return x > 0 and (x & (x - 1)) == 0


@lru_cache(maxsize=None)
def _bit_reversal(n: int) -> np.ndarray:
    """Index permutation that reverses the bits of every index below n."""
    perm = np.arange(n)
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j ^= bit
        if i < j:
            perm[i], perm[j] = perm[j], perm[i]
    perm.setflags(write=False)
    return perm


@lru_cache(maxsize=None)
def _twiddles(n: int, sign: int) -> Tuple[np.ndarray, ...]:
    """Twiddle factors for every butterfly stage of an n-point transform."""
    stages = []
    half = 1
    while half < n:
        theta = sign * np.pi / half
        wtemp = np.sin(0.5 * theta)
        wpr = -2.0 * wtemp * wtemp
        wpi = np.sin(theta)
        wr, wi = 1.0, 0.0
        w = np.empty(half, dtype=np.complex128)
        for k in range(half):
            w[k] = complex(wr, wi)
            wtemp = wr
            wr = wtemp * wpr - wi * wpi + wr
            wi = wi * wpr + wtemp * wpi + wi
        w.setflags(write=False)
        stages.append(w)
        half <<= 1
    return tuple(stages)


class FFTEngine:
    """In-place radix-2 forward/inverse transform over power-of-two lengths."""

    FORWARD = FORWARD
    INVERSE = INVERSE

    @staticmethod
    def transform(samples: np.ndarray, direction: int) -> np.ndarray:
        """
        Transform a sequence of N = 2^k points.

        Args:
            samples: Real or complex sequence of length N
            direction: FORWARD (+1) or INVERSE (-1). The inverse is not
                scaled by 1/N; that is left to the caller.

        Returns:
            Interleaved (re, im) array of length 2N

        Raises:
            InvalidLengthError: If N is not a power of two
        """
        if direction not in (FORWARD, INVERSE):
            raise ValueError(f"direction must be FORWARD or INVERSE, got {direction}")

        data = np.asarray(samples)
        if data.ndim != 1:
            raise ValueError(f"Expected a 1-D sequence, got shape {data.shape}")

        n = data.shape[0]
        if not is_power_of_two(n):
            raise InvalidLengthError(
                f"Input length must be a power of two, got {n}"
            )

        work = data.astype(np.complex128)[_bit_reversal(n)]

        half = 1
        for w in _twiddles(n, direction):
            blocks = work.reshape(-1, 2 * half)
            odd = blocks[:, half:] * w
            blocks[:, half:] = blocks[:, :half] - odd
            blocks[:, :half] += odd
            half <<= 1

        out = np.empty(2 * n, dtype=np.float64)
        out[0::2] = work.real
        out[1::2] = work.imag
        return out

    @classmethod
    def forward(cls, samples: np.ndarray) -> np.ndarray:
        return cls.transform(samples, FORWARD)

    @classmethod
    def inverse(cls, samples: np.ndarray) -> np.ndarray:
        return cls.transform(samples, INVERSE)

    @staticmethod
    def to_complex(interleaved: np.ndarray) -> np.ndarray:
        """Convert interleaved (re, im) output back to a complex array."""
        interleaved = np.asarray(interleaved, dtype=np.float64)
        return interleaved[0::2] + 1j * interleaved[1::2]

    @staticmethod
    def magnitudes(interleaved: np.ndarray) -> np.ndarray:
        """sqrt(re^2 + im^2) for every bin of interleaved output."""
        interleaved = np.asarray(interleaved, dtype=np.float64)
        return np.hypot(interleaved[0::2], interleaved[1::2])
