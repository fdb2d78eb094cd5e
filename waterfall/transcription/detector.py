"""Map spectrogram peaks onto catalog notes."""

from typing import List, Optional

import numpy as np

from ..analysis import SpectrogramBuilder
from ..core import DetectedNote, NoteCatalog, ReferenceNote
from ..core.constants import AMPLITUDE_LOG_SHIFT
from .grid import NoteGrid


def estimate_amplitude(log_power: float) -> float:
    """Linear amplitude for a log10-compressed power value.

    Deliberately shifted by three decades so synthesized amplitudes stay in
    a usable range; this is not an exact inverse of the compression.
    """
    if log_power > 0.0:
        return float(10.0 ** (log_power - AMPLITUDE_LOG_SHIFT))
    return 0.0


class NoteDetector:
    """Threshold the log spectrogram and record matching notes."""

    def __init__(self, catalog: Optional[NoteCatalog] = None):
        """
        Initialize NoteDetector.

        Args:
            catalog: Reference notes to match against (standard C2-B7 if None)
        """
        self.catalog = catalog if catalog is not None else NoteCatalog.standard()

    def detect(self, spectrogram: SpectrogramBuilder, threshold_stddevs: float) -> NoteGrid:
        """
        Detect notes in a spectrogram.

        A (chunk, log bin) cell counts as a note when its power exceeds
        median + threshold_stddevs * stddev of the whole log spectrogram
        and its frequency matches a catalog note.

        Args:
            spectrogram: A built SpectrogramBuilder
            threshold_stddevs: Standard deviations above the median

        Returns:
            NoteGrid with one entry per detection
        """
        grid = NoteGrid.from_spectrogram(spectrogram, self.catalog)
        threshold = self.threshold(spectrogram, threshold_stddevs)
        bin_notes = self._bin_notes(spectrogram.log_frequency)

        log_spectra = spectrogram.log_spectra
        for i, row in enumerate(log_spectra):
            for j in np.nonzero(row > threshold)[0]:
                note = bin_notes[j]
                if note is None:
                    continue
                grid.add_one_note(DetectedNote(note, estimate_amplitude(row[j]), i), i)

        return grid

    @staticmethod
    def threshold(spectrogram: SpectrogramBuilder, threshold_stddevs: float) -> float:
        """Log power a cell must exceed to count as a note."""
        return spectrogram.median_log_power + threshold_stddevs * spectrogram.stddev_log_power

    def _bin_notes(self, log_frequency: np.ndarray) -> List[Optional[ReferenceNote]]:
        # The log axis is shared by every chunk, so look each bin up once
        return [self.catalog.lookup_nearest(10.0 ** f) for f in log_frequency]
