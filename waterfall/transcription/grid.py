"""Note grid - detected notes on the spectrogram's time grid, and resynthesis.

At each time step there is a list of notes that represents the chord
playing during that chunk.
"""

import warnings
from dataclasses import replace
from pathlib import Path
from typing import Iterator, List, Optional, Union

import numpy as np

from ..analysis import SpectrogramBuilder
from ..core import DetectedNote, InvalidArgumentError, NoteCatalog
from ..core.constants import TABLE_FORMAT
from ..output.table import write_delimited


class NoteGrid:
    """Accumulates detected notes per time chunk."""

    def __init__(
        self,
        time: np.ndarray,
        hop_seconds: float,
        catalog: Optional[NoteCatalog] = None,
    ):
        """
        Initialize an empty grid.

        Args:
            time: Start time of every chunk in seconds
            hop_seconds: Time between consecutive chunks
            catalog: Reference notes used for the tabular dump
        """
        if not hop_seconds > 0:
            raise InvalidArgumentError(f"Hop duration must be positive, got {hop_seconds}")

        # Keep our own copy of the time axis
        self._time = np.array(time, dtype=np.float64)
        self.hop_seconds = float(hop_seconds)
        self.catalog = catalog if catalog is not None else NoteCatalog.standard()
        self._notes: List[List[DetectedNote]] = [[] for _ in range(self._time.size)]

    @classmethod
    def from_spectrogram(
        cls,
        spectrogram: SpectrogramBuilder,
        catalog: Optional[NoteCatalog] = None,
    ) -> "NoteGrid":
        """Empty grid matching a spectrogram's chunks."""
        return cls(spectrogram.time, spectrogram.hop_seconds, catalog)

    def add_one_note(self, note: DetectedNote, chunk_index: int) -> None:
        """
        Add a single note to the grid at a specific chunk.

        Args:
            note: Detected note to add
            chunk_index: Location in the grid
        """
        if not 0 <= chunk_index < len(self._notes):
            raise IndexError(
                f"Chunk index {chunk_index} out of range for {len(self._notes)} chunks"
            )
        if note.chunk_index != chunk_index:
            note = replace(note, chunk_index=chunk_index)
        self._notes[chunk_index].append(note)

    def notes_at(self, chunk_index: int) -> List[DetectedNote]:
        return list(self._notes[chunk_index])

    @property
    def num_chunks(self) -> int:
        return len(self._notes)

    @property
    def note_count(self) -> int:
        return sum(len(notes) for notes in self._notes)

    @property
    def time(self) -> np.ndarray:
        return self._time.copy()

    @property
    def duration(self) -> float:
        """Total duration of the grid in seconds."""
        return self.hop_seconds * self.num_chunks

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[List[DetectedNote]]:
        for notes in self._notes:
            yield list(notes)

    def generate_waveform(self, sample_rate: float) -> np.ndarray:
        """
        Synthesize the grid as a sum of sines.

        Chunk ``i`` occupies output samples ``round(i * hop * sample_rate)``
        up to the start of chunk ``i + 1``, so buffer lengths may differ by
        one sample when a hop is not a whole number of samples. The phase of
        every note is offset by the absolute start time of its chunk, and
        local time is measured from that same instant, so a note held over
        consecutive chunks continues without a discontinuity.

        Args:
            sample_rate: Output sample rate in Hz, e.g. 44100

        Returns:
            Waveform scaled to [-1, 1]. A grid without audible notes gives
            all zeros.
        """
        if not (sample_rate > 0 and np.isfinite(sample_rate)):
            raise InvalidArgumentError(f"Sample rate must be positive, got {sample_rate}")

        bounds = np.round(sample_rate * np.arange(self.num_chunks + 1) * self.hop_seconds)
        bounds = bounds.astype(np.int64)
        waveform = np.zeros(int(bounds[-1]))

        for i, notes in enumerate(self._notes):
            if not notes:
                continue
            start, stop = bounds[i], bounds[i + 1]
            t_start = i * self.hop_seconds
            t_local = np.arange(start, stop) / sample_rate - t_start
            buffer = np.zeros(stop - start)
            for note in notes:
                phase = 2.0 * np.pi * note.frequency * t_start
                buffer += note.amplitude * np.sin(2.0 * np.pi * note.frequency * t_local + phase)
            waveform[start:stop] = buffer

        peak = float(np.abs(waveform).max()) if waveform.size else 0.0
        if peak == 0.0:
            warnings.warn(
                "Note grid is silent; emitting a zero waveform",
                RuntimeWarning,
                stacklevel=2,
            )
            return waveform

        return waveform / peak

    def header(self) -> List[str]:
        """Column headers: time plus one column per catalog note."""
        return ["Time"] + [note.full_name for note in self.catalog]

    def note_rows(self) -> Iterator[List[str]]:
        """
        Yield one row per chunk: time, then amplitude or "0" per catalog note.

        Notes below the lowest catalog frequency, or missing from the
        catalog, are skipped. If a note was detected several times in a
        chunk the first detection is written.
        """
        min_freq = self.catalog.min_frequency()
        for t, notes in zip(self._time, self._notes):
            amplitudes = {}
            for note in sorted(notes, key=lambda n: n.frequency):
                if note.frequency < min_freq:
                    continue
                amplitudes.setdefault(note.note, note.amplitude)

            row = [TABLE_FORMAT % t]
            for ref in self.catalog:
                if ref in amplitudes:
                    row.append(TABLE_FORMAT % amplitudes[ref])
                else:
                    row.append("0")
            yield row

    def write_notes(self, path: Union[str, Path]) -> None:
        """Write the grid as a tab-delimited table, one row per chunk."""
        write_delimited(path, self.header(), self.note_rows())
