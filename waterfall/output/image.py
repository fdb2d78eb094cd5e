"""Spectrogram image export.

Power values are normalized to [0, 1] and mapped through a matplotlib
colormap; time runs left to right, frequency bins top to bottom.
"""

from pathlib import Path
from typing import Union

import numpy as np
from matplotlib import colormaps
from matplotlib import image as mpimg

from ..analysis import SpectrogramBuilder


class SpectrogramImageWriter:
    """Render a spectrogram's normalized power grid as an RGB image."""

    def __init__(self, pixels_per_bin: int = 1, cmap: str = "rainbow"):
        """
        Initialize SpectrogramImageWriter.

        Args:
            pixels_per_bin: Pixels per grid cell in both directions
            cmap: Name of a matplotlib colormap
        """
        if pixels_per_bin < 1:
            raise ValueError(f"pixels_per_bin must be >= 1, got {pixels_per_bin}")
        self.pixels_per_bin = int(pixels_per_bin)
        self.cmap = cmap

    def render(self, spectrogram: SpectrogramBuilder) -> np.ndarray:
        """
        Build the image pixels.

        Returns:
            uint8 array [spectra_size * ppb, num_chunks * ppb, 3]
        """
        grid = np.clip(spectrogram.normalized_power(), 0.0, 1.0).T
        rgba = colormaps[self.cmap](grid)
        rgb = (rgba[..., :3] * 255).round().astype(np.uint8)

        ppb = self.pixels_per_bin
        if ppb > 1:
            rgb = np.repeat(np.repeat(rgb, ppb, axis=0), ppb, axis=1)
        return rgb

    def write(self, spectrogram: SpectrogramBuilder, path: Union[str, Path]) -> None:
        """Write the image; the format follows the file extension (jpg, png, ...)."""
        pixels = self.render(spectrogram)

        # Ensure output directory exists
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        mpimg.imsave(str(path), pixels)
