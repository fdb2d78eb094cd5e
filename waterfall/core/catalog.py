"""Note catalog - the fixed set of reference pitches notes are matched against."""

from typing import Iterable, Iterator, Optional, Tuple

from .constants import NOTE_TOLERANCE
from .note import Accidental, ReferenceNote

# (letter, accidental) per semitone, starting at C
_SCALE = [
    ("C", Accidental.NATURAL),
    ("D", Accidental.FLAT),
    ("D", Accidental.NATURAL),
    ("E", Accidental.FLAT),
    ("E", Accidental.NATURAL),
    ("F", Accidental.NATURAL),
    ("G", Accidental.FLAT),
    ("G", Accidental.NATURAL),
    ("A", Accidental.FLAT),
    ("A", Accidental.NATURAL),
    ("B", Accidental.FLAT),
    ("B", Accidental.NATURAL),
]

# Equal-tempered table frequencies, C2 through B7. The lowest and highest
# octaves of the piano aren't useful for waterfall analysis.
_FREQUENCIES = {
    2: (65.41, 69.30, 73.42, 77.78, 82.41, 87.31,
        92.50, 98.00, 103.83, 110.00, 116.54, 123.47),
    3: (130.81, 138.59, 146.83, 155.56, 164.81, 174.61,
        185.00, 196.00, 207.65, 220.00, 233.08, 246.94),
    4: (261.63, 277.18, 293.66, 311.13, 329.63, 349.23,
        369.99, 392.00, 415.30, 440.00, 466.16, 493.88),
    5: (523.25, 554.37, 587.33, 622.25, 659.25, 698.46,
        739.99, 783.99, 830.61, 880.00, 932.33, 987.77),
    6: (1046.50, 1108.73, 1174.66, 1244.51, 1318.51, 1396.91,
        1479.98, 1567.98, 1661.22, 1760.00, 1864.66, 1975.53),
    7: (2093.00, 2217.46, 2349.32, 2489.02, 2637.02, 2793.83,
        2959.96, 3135.96, 3322.44, 3520.00, 3729.31, 3951.07),
}


def _standard_notes() -> Tuple[ReferenceNote, ...]:
    notes = []
    for octave, freqs in _FREQUENCIES.items():
        for (name, accidental), freq in zip(_SCALE, freqs):
            notes.append(ReferenceNote(freq, name, octave, accidental))
    return tuple(notes)


class NoteCatalog:
    """Immutable, frequency-sorted sequence of reference notes.

    Lookup is a linear scan; with ~70 entries this is cheaper than anything
    cleverer.
    """

    _standard: Optional["NoteCatalog"] = None

    def __init__(self, notes: Iterable[ReferenceNote], tolerance: float = NOTE_TOLERANCE):
        """
        Initialize NoteCatalog.

        Args:
            notes: Reference notes, in any order
            tolerance: Relative match window around each note's frequency
        """
        self._notes = tuple(sorted(notes, key=lambda n: n.frequency))
        if not self._notes:
            raise ValueError("A note catalog needs at least one note")
        self.tolerance = tolerance

    @classmethod
    def standard(cls) -> "NoteCatalog":
        """The shared C2-B7 catalog, built on first use."""
        if cls._standard is None:
            cls._standard = cls(_standard_notes())
        return cls._standard

    @property
    def notes(self) -> Tuple[ReferenceNote, ...]:
        return self._notes

    def lookup_nearest(self, freq: float) -> Optional[ReferenceNote]:
        """
        Find the catalog note matching a frequency.

        Args:
            freq: Frequency in Hz

        Returns:
            First note whose frequency is within the tolerance of freq,
            or None when nothing matches
        """
        upper = 1.0 + self.tolerance
        lower = 1.0 - self.tolerance
        for note in self._notes:
            if note.frequency * lower < freq < note.frequency * upper:
                return note
        return None

    def min_frequency(self) -> float:
        """Lowest catalog frequency."""
        return self._notes[0].frequency

    def max_frequency(self) -> float:
        """Highest catalog frequency."""
        return self._notes[-1].frequency

    def index(self, note: ReferenceNote) -> int:
        return self._notes.index(note)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[ReferenceNote]:
        return iter(self._notes)

    def __getitem__(self, i: int) -> ReferenceNote:
        return self._notes[i]

    def __contains__(self, note: object) -> bool:
        return note in self._notes
