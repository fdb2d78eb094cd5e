"""WAV export of synthesized waveforms."""

from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf


class WavWriter:
    """Write normalized mono waveforms as 16-bit PCM WAV files."""

    def __init__(self, sample_rate: int, subtype: str = "PCM_16"):
        """
        Initialize WavWriter.

        Args:
            sample_rate: Sample rate of the waveforms to write, in Hz
            subtype: libsndfile subtype (16-bit signed PCM by default)
        """
        self.sample_rate = int(sample_rate)
        self.subtype = subtype

    def write(self, path: Union[str, Path], waveform: np.ndarray) -> None:
        """
        Write a waveform in [-1, 1] to a WAV file.

        Args:
            path: Output file path
            waveform: Mono samples; values outside [-1, 1] are clipped
        """
        data = np.clip(np.asarray(waveform, dtype=np.float64), -1.0, 1.0)

        # Ensure output directory exists
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        sf.write(str(path), data, self.sample_rate, subtype=self.subtype)
