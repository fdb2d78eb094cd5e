"""Note data classes - reference pitches and their detections."""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class Accidental(Enum):
    """Accidental of a reference note."""

    NATURAL = ""
    FLAT = "b"


@dataclass(frozen=True)
class ReferenceNote:
    """A fixed musical pitch definition (e.g. A4 = 440 Hz)."""

    frequency: float  # Hz
    name: str  # Letter name, "A".."G"
    octave: int
    accidental: Accidental = Accidental.NATURAL

    @property
    def full_name(self) -> str:
        """Column name used in note tables, e.g. 'A4' or 'D4b'."""
        return f"{self.name}{self.octave}{self.accidental.value}"

    @property
    def midi_pitch(self) -> int:
        """Nearest MIDI pitch for this note's frequency."""
        return int(round(69 + 12 * np.log2(self.frequency / 440.0)))

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class DetectedNote:
    """A reference note observed in one time chunk, with estimated amplitude."""

    note: ReferenceNote
    amplitude: float  # Linear, arbitrary units
    chunk_index: int

    @property
    def frequency(self) -> float:
        return self.note.frequency

    @property
    def full_name(self) -> str:
        return self.note.full_name
