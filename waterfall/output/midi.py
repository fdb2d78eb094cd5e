"""MIDI export of note grids."""

import warnings
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Tuple

import pretty_midi

from ..core import ReferenceNote

if TYPE_CHECKING:
    from ..transcription import NoteGrid


class MIDIExporter:
    """Export a note grid to MIDI.

    Runs of consecutive chunks holding the same note become one MIDI note.
    Velocity is the run's loudest amplitude relative to the loudest note in
    the grid.
    """

    def __init__(
        self,
        tempo: float = 120.0,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
        """
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program

    def export(self, grid: "NoteGrid", output_path: str) -> None:
        """
        Export a note grid to a MIDI file.

        Args:
            grid: NoteGrid to export
            output_path: Path to output MIDI file
        """
        midi = self.grid_to_pretty_midi(grid)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))

    def grid_to_pretty_midi(self, grid: "NoteGrid") -> pretty_midi.PrettyMIDI:
        """Convert a note grid to a PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)
        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        peak = max(
            (note.amplitude for notes in grid for note in notes),
            default=0.0,
        )
        if peak <= 0.0:
            warnings.warn("Note grid has no audible notes; MIDI will be empty", RuntimeWarning)

        # note -> (first chunk, loudest amplitude so far)
        active: Dict[ReferenceNote, Tuple[int, float]] = {}
        hop = grid.hop_seconds

        for i, notes in enumerate(grid):
            present: Dict[ReferenceNote, float] = {}
            for note in notes:
                present[note.note] = max(present.get(note.note, 0.0), note.amplitude)

            for ref in [r for r in active if r not in present]:
                start, amp = active.pop(ref)
                instrument.notes.append(self._to_midi_note(ref, start, i, amp, peak, hop))

            for ref, amp in present.items():
                if ref in active:
                    start, loudest = active[ref]
                    active[ref] = (start, max(loudest, amp))
                else:
                    active[ref] = (i, amp)

        for ref, (start, amp) in active.items():
            instrument.notes.append(
                self._to_midi_note(ref, start, grid.num_chunks, amp, peak, hop)
            )

        instrument.notes.sort(key=lambda n: (n.start, n.pitch))
        midi.instruments.append(instrument)
        return midi

    @staticmethod
    def _to_midi_note(
        ref: ReferenceNote,
        start_chunk: int,
        end_chunk: int,
        amplitude: float,
        peak: float,
        hop: float,
    ) -> pretty_midi.Note:
        velocity = 1
        if peak > 0.0:
            velocity = int(min(127, max(1, round(127 * amplitude / peak))))
        return pretty_midi.Note(
            velocity=velocity,
            pitch=ref.midi_pitch,
            start=start_chunk * hop,
            end=end_chunk * hop,
        )
