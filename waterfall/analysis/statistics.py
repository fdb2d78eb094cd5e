"""Statistics helpers for spectrogram thresholds."""

from dataclasses import dataclass

import numpy as np


def upper_median(values: np.ndarray) -> float:
    """
    Median that takes the element at index count // 2 of the sorted values.

    For even counts this is the upper of the two middle elements rather
    than their average; detection thresholds are tuned against it.
    """
    flat = np.sort(np.ravel(values))
    if flat.size == 0:
        raise ValueError("Cannot take the median of an empty sequence")
    return float(flat[flat.size // 2])


@dataclass
class RunningStats:
    """Single-pass mean and population variance.

    Values are folded in batch by batch (one spectrogram row at a time)
    and merged with the parallel form of Welford's update, so the data is
    only visited once.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0  # Sum of squared deviations from the mean

    def update(self, values: np.ndarray) -> None:
        """Fold a batch of values into the running totals."""
        batch = np.asarray(values, dtype=np.float64).ravel()
        n = batch.size
        if n == 0:
            return

        batch_mean = float(batch.mean())
        batch_m2 = float(((batch - batch_mean) ** 2).sum())

        total = self.count + n
        delta = batch_mean - self.mean
        self.mean += delta * n / total
        self.m2 += batch_m2 + delta * delta * self.count * n / total
        self.count = total

    @property
    def variance(self) -> float:
        if self.count == 0:
            return 0.0
        return self.m2 / self.count

    @property
    def stddev(self) -> float:
        return float(np.sqrt(self.variance))


def population_stddev(values: np.ndarray) -> float:
    """Population standard deviation of all values, in one pass."""
    stats = RunningStats()
    stats.update(values)
    return stats.stddev
