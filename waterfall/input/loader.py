"""Audio loading - decode files into signed 16-bit samples."""

import numpy as np
import librosa
from pathlib import Path
from typing import Tuple, Optional

from ..core.constants import PCM_MAX


class AudioLoader:
    """Decodes audio files into the raw samples the spectrogram consumes."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4"}

    def __init__(
        self,
        mono: bool = True,
        max_seconds: Optional[float] = None,
    ):
        """
        Initialize AudioLoader.

        Args:
            mono: Mix channels down to mono if True
            max_seconds: Stop decoding after this many seconds (None = whole file)
        """
        self.mono = mono
        self.max_seconds = max_seconds

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load an audio file at its native sample rate.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (int16 sample array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {self.SUPPORTED_FORMATS}"
            )

        # librosa delegates decoding (soundfile, or audioread for MP3)
        audio, sr = librosa.load(
            str(path),
            sr=None,
            mono=self.mono,
            duration=self.max_seconds,
        )

        return self.to_int16(audio), int(sr)

    @staticmethod
    def to_int16(audio: np.ndarray) -> np.ndarray:
        """Scale float audio in [-1, 1] to signed 16-bit samples."""
        scaled = np.clip(np.asarray(audio, dtype=np.float64), -1.0, 1.0) * PCM_MAX
        return np.round(scaled).astype(np.int16)

    def get_duration(self, audio: np.ndarray, sr: int) -> float:
        """Get duration in seconds."""
        return audio.shape[-1] / sr
