"""Command-line interface for Waterfall Notes.

Provides commands for:
- analyze: Spectrogram image, note table, resynthesized WAV and MIDI
- spectrum: Dump a single spectrum frame as a table
- info: Show audio file information
"""

import typer
import time
import json
from collections import Counter
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any
from rich.console import Console
from rich.table import Table

from .core.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_NUM_FREQ_LOG,
    DEFAULT_FREQ_MIN,
    DEFAULT_FREQ_MAX,
    DEFAULT_THRESHOLD_STDDEVS,
    DEFAULT_WAV_SAMPLE_RATE,
    DEFAULT_MAX_SECONDS,
    HOP_DIVISOR,
    MIN_CHUNK_SIZE,
)
from .core.errors import WaterfallError

app = typer.Typer(
    name="waterfall-notes",
    help="Spectrogram analysis, note detection and resynthesis",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class StageTimings:
    """Track timing of processing stages."""

    stages: Dict[str, float] = field(default_factory=dict)
    _current_stage: Optional[str] = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)

    def start(self, stage: str) -> None:
        """Start timing a stage."""
        self._current_stage = stage
        self._start_time = time.time()

    def stop(self) -> float:
        """Stop timing the current stage, return duration."""
        if self._current_stage is None:
            return 0.0
        duration = time.time() - self._start_time
        self.stages[self._current_stage] = duration
        self._current_stage = None
        return duration

    @property
    def total_time(self) -> float:
        """Get total time across all stages."""
        return sum(self.stages.values())

    def print_summary(self) -> None:
        """Print timing summary to console."""
        console.print("\n[bold]Timing Summary:[/bold]")
        for stage, duration in self.stages.items():
            console.print(f"  {stage}: {duration:.2f}s")
        console.print(f"  [bold]Total: {self.total_time:.2f}s[/bold]")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "stages": self.stages,
            "total_time": self.total_time,
        }


def _load_audio(input_file: Path, max_seconds: Optional[float]):
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    loader = AudioLoader(max_seconds=max_seconds if max_seconds and max_seconds > 0 else None)
    try:
        samples, sr = loader.load(str(input_file))
    except (ValueError, OSError) as e:
        console.print(f"[red]Error loading {input_file}: {e}[/red]")
        raise typer.Exit(1)
    return loader, samples, sr


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file, WAV or MP3"),
    output_dir: Optional[Path] = typer.Option(
        None, "-o", "--output-dir", help="Output directory (default: <input>_waterfall)"
    ),
    chunk_size: int = typer.Option(
        DEFAULT_CHUNK_SIZE, "--chunk-size", "-c", help="Samples per FFT window (power of two)"
    ),
    log_bins: int = typer.Option(
        DEFAULT_NUM_FREQ_LOG, "--log-bins", help="Number of logarithmic frequency bins"
    ),
    freq_min: float = typer.Option(
        DEFAULT_FREQ_MIN, "--freq-min", help="Lowest frequency to look for (Hz)"
    ),
    freq_max: float = typer.Option(
        DEFAULT_FREQ_MAX, "--freq-max", help="Highest frequency to look for (Hz)"
    ),
    threshold: float = typer.Option(
        DEFAULT_THRESHOLD_STDDEVS, "--threshold", "-t",
        help="Detection threshold in standard deviations above the median",
    ),
    wav_rate: int = typer.Option(
        DEFAULT_WAV_SAMPLE_RATE, "--wav-rate", help="Sample rate of the resynthesized WAV"
    ),
    max_seconds: float = typer.Option(
        DEFAULT_MAX_SECONDS, "--max-seconds", help="Only analyze the first N seconds (0 = all)"
    ),
    pixels: int = typer.Option(
        1, "--pixels", help="Pixels per spectrogram cell in the image"
    ),
    midi: bool = typer.Option(
        True, "--midi/--no-midi", help="Also export the detected notes as MIDI"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Analyze an audio file: waterfall image, note table, resynthesized WAV.

    **Examples:**

        waterfall-notes analyze song.mp3

        waterfall-notes analyze song.wav -o out/ --threshold 1.5 --no-midi
    """
    from .pipeline import PipelineConfig, WaterfallPipeline
    from .output import WavWriter, SpectrogramImageWriter, MIDIExporter

    timings = StageTimings()

    if output_dir is None:
        output_dir = input_file.parent / f"{input_file.stem}_waterfall"

    config = PipelineConfig(
        chunk_size=chunk_size,
        num_freq_log=log_bins,
        freq_min=freq_min,
        freq_max=freq_max,
        threshold_stddevs=threshold,
        wav_sample_rate=wav_rate,
    )
    pipeline = WaterfallPipeline(config)

    if not json_output:
        console.print(f"[blue]Loading audio:[/blue] {input_file}")
    timings.start("load")
    loader, samples, sr = _load_audio(input_file, max_seconds)
    timings.stop()

    if verbose and not json_output:
        console.print(f"  Duration: {loader.get_duration(samples, sr):.2f}s, Sample rate: {sr}Hz")

    try:
        if not json_output:
            console.print("[blue]Building spectrogram...[/blue]")
        timings.start("spectrogram")
        spectrogram = pipeline.analyze(samples, sr)
        timings.stop()

        if verbose and not json_output:
            console.print(f"  Chunks: {spectrogram.num_chunks}, hop: {spectrogram.hop_seconds:.3f}s")
            console.print(
                f"  Log power median: {spectrogram.median_log_power:.4f}, "
                f"stddev: {spectrogram.stddev_log_power:.4f}"
            )

        if not json_output:
            console.print("[blue]Detecting notes...[/blue]")
        timings.start("detect")
        grid = pipeline.detect(spectrogram)
        timings.stop()

        if not json_output:
            console.print("[blue]Synthesizing waveform...[/blue]")
        timings.start("synthesize")
        waveform = grid.generate_waveform(config.wav_sample_rate)
        timings.stop()
    except WaterfallError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    image_path = output_dir / "waterfall.jpg"
    notes_path = output_dir / "notes.txt"
    wav_path = output_dir / "output.wav"
    midi_path = output_dir / "notes.mid"

    timings.start("write")
    SpectrogramImageWriter(pixels_per_bin=pixels).write(spectrogram, image_path)
    grid.write_notes(notes_path)
    WavWriter(config.wav_sample_rate).write(wav_path, waveform)
    if midi:
        MIDIExporter().export(grid, str(midi_path))
    timings.stop()

    counts = Counter(note.note for notes in grid for note in notes)

    if json_output:
        result = {
            "input": str(input_file),
            "sample_rate": sr,
            "config": asdict(config),
            "num_chunks": spectrogram.num_chunks,
            "median_log_power": spectrogram.median_log_power,
            "stddev_log_power": spectrogram.stddev_log_power,
            "note_count": grid.note_count,
            "top_notes": {note.full_name: n for note, n in counts.most_common(10)},
            "outputs": {
                "image": str(image_path),
                "notes": str(notes_path),
                "wav": str(wav_path),
                "midi": str(midi_path) if midi else None,
            },
            "timings": timings.to_dict(),
        }
        print(json.dumps(result, indent=2))
        return

    console.print(f"\n[green]Detected {grid.note_count} note events[/green]")
    if counts:
        _show_notes_table(counts, spectrogram.num_chunks)
    console.print(f"  Image: {image_path}")
    console.print(f"  Notes: {notes_path}")
    console.print(f"  WAV:   {wav_path}")
    if midi:
        console.print(f"  MIDI:  {midi_path}")

    if verbose:
        timings.print_summary()


@app.command()
def spectrum(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    chunk: int = typer.Option(10, "--chunk", help="Index of the chunk to dump"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output table path (default: <input>_fft.txt)"
    ),
    linear: bool = typer.Option(
        False, "--linear", help="Dump the linear-frequency spectrum instead of the log one"
    ),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", "-c"),
    log_bins: int = typer.Option(DEFAULT_NUM_FREQ_LOG, "--log-bins"),
    freq_min: float = typer.Option(DEFAULT_FREQ_MIN, "--freq-min"),
    freq_max: float = typer.Option(DEFAULT_FREQ_MAX, "--freq-max"),
    max_seconds: float = typer.Option(DEFAULT_MAX_SECONDS, "--max-seconds"),
):
    """Dump one spectrum frame as a Frequency/Power table."""
    from .analysis import SpectrogramBuilder
    from .output import write_spectrum

    _, samples, sr = _load_audio(input_file, max_seconds)

    try:
        spectrogram = SpectrogramBuilder(samples, sr, chunk_size, log_bins, freq_min, freq_max)
    except WaterfallError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not 0 <= chunk < spectrogram.num_chunks:
        console.print(
            f"[red]Error: Chunk {chunk} out of range (0-{spectrogram.num_chunks - 1})[/red]"
        )
        raise typer.Exit(1)

    if output is None:
        output = input_file.with_name(f"{input_file.stem}_fft.txt")

    if linear:
        write_spectrum(output, spectrogram.frequency, spectrogram.spectrum(chunk))
    else:
        write_spectrum(output, spectrogram.log_frequency, spectrogram.log_spectrum(chunk))

    console.print(f"[green]Wrote chunk {chunk} to {output}[/green]")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", "-c"),
):
    """Show information about an audio file."""
    from .analysis import is_power_of_two

    if not is_power_of_two(chunk_size) or chunk_size < MIN_CHUNK_SIZE:
        console.print(
            f"[red]Error: Chunk size must be a power of two >= {MIN_CHUNK_SIZE}, got {chunk_size}[/red]"
        )
        raise typer.Exit(1)

    loader, samples, sr = _load_audio(input_file, None)

    num_chunks = HOP_DIVISOR * (len(samples) // chunk_size) + 1

    console.print(f"\n[bold]Audio Info:[/bold] {input_file.name}")
    console.print(f"  Duration: {loader.get_duration(samples, sr):.2f} seconds")
    console.print(f"  Sample rate: {sr} Hz")
    console.print(f"  Samples: {len(samples):,}")
    console.print(f"  Chunks at {chunk_size} samples: {num_chunks}")
    console.print(f"  Time step: {chunk_size / HOP_DIVISOR / sr:.4f} s")


def _show_notes_table(counts: Counter, num_chunks: int, limit: int = 12):
    """Display the most frequently detected notes in a table."""
    table = Table(title="Most Frequent Notes")
    table.add_column("Note", style="cyan")
    table.add_column("Frequency (Hz)", style="green")
    table.add_column("Chunks", style="yellow")
    table.add_column("Share", style="magenta")

    for note, n in counts.most_common(limit):
        table.add_row(
            note.full_name,
            f"{note.frequency:.2f}",
            str(n),
            f"{n / num_chunks:.1%}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
